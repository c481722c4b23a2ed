"""Helper factories and stub providers shared by the test suite."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterable, Mapping

from fxconvert.providers import BaseRateProvider, FetchFailed, RateSnapshot

DEFAULT_RATES: dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.9,
    "GBP": 0.8,
    "JPY": 150.0,
}

LatestQueueItem = RateSnapshot | Exception


def make_snapshot(
    rates: Mapping[str, float] | None = None,
    *,
    base: str = "USD",
    timestamp: int = 0,
) -> RateSnapshot:
    """Return a snapshot with the default test rates unless overridden."""

    return RateSnapshot(base=base, rates=dict(rates or DEFAULT_RATES), timestamp=timestamp)


def make_payload(
    rates: Mapping[str, float] | None = None,
    *,
    base: str = "USD",
    timestamp: int = 0,
) -> dict:
    """Return the persisted/provider JSON shape."""

    return {"timestamp": timestamp, "base": base, "rates": dict(rates or DEFAULT_RATES)}


class SequencedProvider(BaseRateProvider):
    """Provider that yields predefined responses in sequence.

    The last queued item is repeated once the queue drains to a single entry,
    so a test that only cares about "success" can queue one snapshot.
    """

    def __init__(self, latest: Iterable[LatestQueueItem] = (), name: str = "sequenced") -> None:
        self.name = name
        self._latest = deque(latest)
        self.calls = 0
        self.gate: threading.Event | None = None
        self.entered = threading.Event()

    def queue(self, *items: LatestQueueItem) -> None:
        self._latest.extend(items)

    def get_latest(self) -> RateSnapshot:
        self.calls += 1
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if not self._latest:
            raise FetchFailed("No response queued")
        item = self._latest.popleft() if len(self._latest) > 1 else self._latest[0]
        if isinstance(item, Exception):
            raise item
        return item
