"""In-memory rate cache with freshness policy and refresh serialization."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from time import perf_counter

from fxconvert.logging import refresh_log_extra
from fxconvert.providers.base import BaseRateProvider, FetchFailed
from fxconvert.providers.schemas import RateSnapshot
from fxconvert.utils.datetime import epoch_now, utc_now

from .conversion import RatesUnavailable, UnknownCurrency, lookup_key
from .snapshot_store import LoadFailed, PersistFailed, SnapshotFileStore, SnapshotNotFound

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_SECONDS = 60 * 60


class RefreshOutcome(str, enum.Enum):
    """What a call to :meth:`RateCache.ensure_fresh` ended up doing."""

    FRESH = "fresh"
    LOADED = "loaded"
    FETCHED = "fetched"
    FAILED = "failed"


@dataclass(frozen=True)
class RefreshState:
    last_attempt: datetime | None = None
    last_success: datetime | None = None
    last_failure: datetime | None = None
    last_error: str | None = None
    persisted: bool | None = None
    fetch_count: int = 0


class RateCache:
    """Hold the current :class:`RateSnapshot` and keep it fresh.

    Two locks are involved. ``_snapshot_lock`` guards the snapshot reference
    and is only held long enough to read or swap it, so readers never wait on
    the network. ``_refresh_lock`` serializes :meth:`ensure_fresh` so that
    concurrent callers collapse into a single fetch-and-persist sequence.
    """

    def __init__(
        self,
        provider: BaseRateProvider,
        store: SnapshotFileStore,
        *,
        max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
    ) -> None:
        if max_age_seconds < 0:
            raise ValueError("max_age_seconds must be non-negative")
        self._provider = provider
        self._store = store
        self._max_age_seconds = max_age_seconds
        self._snapshot: RateSnapshot | None = None
        self._state = RefreshState()
        self._snapshot_lock = threading.Lock()
        self._refresh_lock = threading.Lock()

    @property
    def max_age_seconds(self) -> int:
        return self._max_age_seconds

    @property
    def provider_name(self) -> str:
        return getattr(self._provider, "name", self._provider.__class__.__name__)

    def snapshot(self) -> RateSnapshot | None:
        """Return the installed snapshot, or ``None`` before the first load."""

        with self._snapshot_lock:
            return self._snapshot

    def refresh_state(self) -> RefreshState:
        with self._snapshot_lock:
            return self._state

    def get_rate(self, currency_code: str) -> float:
        """Return the installed rate for ``currency_code`` without fetching.

        Raises:
            RatesUnavailable: If no snapshot has been installed yet.
            UnknownCurrency: If the code is not in the snapshot.
        """

        snapshot = self.snapshot()
        if snapshot is None:
            raise RatesUnavailable()
        code = lookup_key(currency_code)
        if code is None or code not in snapshot.rates:
            raise UnknownCurrency([code if code is not None else str(currency_code)])
        return snapshot.rates[code]

    def is_fresh(self, now: int | None = None) -> bool:
        snapshot = self.snapshot()
        if snapshot is None:
            return False
        return snapshot.is_fresh(epoch_now() if now is None else now, self._max_age_seconds)

    def ensure_fresh(self) -> RefreshOutcome:
        """Make sure a fresh snapshot is installed, fetching only when needed.

        Load, fetch and persist failures are logged and recorded in
        :meth:`refresh_state`; none of them propagate to the caller.
        """

        with self._refresh_lock:
            snapshot = self.snapshot()
            loaded = False
            if snapshot is None:
                snapshot = self._load_persisted()
                if snapshot is not None:
                    self._install(snapshot)
                    loaded = True

            if snapshot is not None and snapshot.is_fresh(epoch_now(), self._max_age_seconds):
                logger.debug(
                    "Rates are fresh; skipping fetch",
                    extra=refresh_log_extra(
                        event="refresh.skip",
                        status="fresh",
                        base=snapshot.base,
                        outcome="loaded" if loaded else "fresh",
                    ),
                )
                return RefreshOutcome.LOADED if loaded else RefreshOutcome.FRESH

            return self._fetch_and_persist()

    def _load_persisted(self) -> RateSnapshot | None:
        try:
            snapshot = self._store.load()
        except SnapshotNotFound as exc:
            logger.info(
                "No persisted rates found: %s",
                exc,
                extra=refresh_log_extra(event="refresh.load", status="missing", error=str(exc)),
            )
            return None
        except LoadFailed as exc:
            logger.warning(
                "Ignoring unusable persisted rates: %s",
                exc,
                extra=refresh_log_extra(event="refresh.load", status="corrupt", error=str(exc)),
            )
            return None

        logger.info(
            "Loaded persisted rates for %s from %s",
            snapshot.base,
            self._store.path,
            extra=refresh_log_extra(
                event="refresh.load",
                status="success",
                base=snapshot.base,
                source="file",
            ),
        )
        return snapshot

    def _fetch_and_persist(self) -> RefreshOutcome:
        source = self.provider_name
        attempt_at = utc_now()
        start = perf_counter()
        try:
            fetched = self._provider.get_latest()
        except FetchFailed as exc:
            duration = (perf_counter() - start) * 1000
            logger.error(
                "Rate fetch failed: %s",
                exc,
                extra=refresh_log_extra(
                    event="refresh.fetch",
                    status="error",
                    source=source,
                    duration_ms=duration,
                    outcome=RefreshOutcome.FAILED.value,
                    error=str(exc),
                ),
            )
            self._update_state(last_attempt=attempt_at, last_failure=utc_now(), last_error=str(exc))
            return RefreshOutcome.FAILED

        duration = (perf_counter() - start) * 1000
        snapshot = fetched.stamped(epoch_now())
        self._install(snapshot)
        logger.info(
            "Fetched %d rates for %s from %s",
            len(snapshot.rates),
            snapshot.base,
            source,
            extra=refresh_log_extra(
                event="refresh.fetch",
                status="success",
                base=snapshot.base,
                source=source,
                duration_ms=duration,
                outcome=RefreshOutcome.FETCHED.value,
            ),
        )

        persisted = True
        persist_error: str | None = None
        try:
            self._store.save(snapshot)
        except PersistFailed as exc:
            persisted = False
            persist_error = str(exc)
            logger.error(
                "Fetched rates could not be persisted: %s",
                exc,
                extra=refresh_log_extra(
                    event="refresh.persist",
                    status="error",
                    base=snapshot.base,
                    error=persist_error,
                ),
            )

        self._update_state(
            last_attempt=attempt_at,
            last_success=utc_now(),
            last_error=persist_error,
            persisted=persisted,
            fetch_count=self._state.fetch_count + 1,
        )
        return RefreshOutcome.FETCHED

    def _install(self, snapshot: RateSnapshot) -> None:
        with self._snapshot_lock:
            self._snapshot = snapshot

    def _update_state(self, **changes) -> None:
        with self._snapshot_lock:
            self._state = replace(self._state, **changes)
