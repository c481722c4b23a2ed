"""Durable storage of the current rate snapshot as a JSON file."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from fxconvert.providers.schemas import RateSnapshot, normalize_code

logger = logging.getLogger(__name__)


class SnapshotStoreError(Exception):
    """Base class for snapshot persistence failures."""


class LoadFailed(SnapshotStoreError):
    """Raised when no usable snapshot can be read back."""


class SnapshotNotFound(LoadFailed):
    """Raised when the snapshot file does not exist."""


class SnapshotCorrupt(LoadFailed):
    """Raised when the snapshot file exists but cannot be parsed."""


class PersistFailed(SnapshotStoreError):
    """Raised when the snapshot could not be written."""


class SnapshotFileStore:
    """Read and write exactly one :class:`RateSnapshot` at a fixed path."""

    def __init__(self, path: str | os.PathLike[str], *, expected_base: str | None = None) -> None:
        self._path = Path(path)
        self._expected_base = normalize_code(expected_base) if expected_base else None

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> RateSnapshot:
        """Return the persisted snapshot.

        Raises:
            SnapshotNotFound: If the file does not exist.
            SnapshotCorrupt: If the file cannot be read or decoded into a
                complete snapshot, or holds rates for another base.
        """

        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise SnapshotNotFound(f"No snapshot file at {self._path}") from exc
        except OSError as exc:
            raise SnapshotCorrupt(f"Cannot read snapshot file {self._path}: {exc}") from exc

        try:
            snapshot = RateSnapshot.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            raise SnapshotCorrupt(f"Snapshot file {self._path} is invalid: {exc}") from exc

        if self._expected_base is not None and snapshot.base != self._expected_base:
            raise SnapshotCorrupt(
                f"Snapshot file {self._path} holds {snapshot.base} rates, expected {self._expected_base}"
            )
        return snapshot

    def save(self, snapshot: RateSnapshot) -> None:
        """Write ``snapshot`` over any previous content.

        The payload goes to a temporary file in the same directory which is
        then renamed over the target, so an interrupted write never leaves a
        truncated snapshot behind.

        Raises:
            PersistFailed: If the directory, temporary file or rename fails.
        """

        payload = json.dumps(snapshot.to_dict(), separators=(",", ":"))
        temp_path: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=str(self._path.parent),
            )
            with os.fdopen(temp_fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self._path)
        except OSError as exc:
            if temp_path is not None:
                _discard(temp_path)
            raise PersistFailed(f"Failed to write snapshot file {self._path}: {exc}") from exc

        logger.debug("Snapshot written to %s", self._path)


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Could not remove temporary snapshot file %s: %s", path, exc)
