"""Service layer modules."""

from .conversion import (
    ConversionError,
    ConversionService,
    InvalidRate,
    Quote,
    RatesUnavailable,
    UnknownCurrency,
    convert_with_snapshot,
    lookup_key,
)
from .rate_cache import RateCache, RefreshOutcome, RefreshState
from .scheduler import RefreshScheduler, SchedulerState, init_scheduler
from .snapshot_store import (
    LoadFailed,
    PersistFailed,
    SnapshotCorrupt,
    SnapshotFileStore,
    SnapshotNotFound,
    SnapshotStoreError,
)

RATE_CACHE_EXT_KEY = "rate_cache"
CONVERSION_EXT_KEY = "conversion_service"


def init_rate_cache(app, provider) -> RateCache:
    """Build the app's rate cache around the configured provider and file."""

    store = SnapshotFileStore(
        app.config.get("RATES_FILE", "./rates.json"),
        expected_base=app.config.get("RATES_BASE_CURRENCY", "USD"),
    )
    cache = RateCache(
        provider,
        store,
        max_age_seconds=int(app.config.get("RATES_MAX_AGE_SECONDS", 3600)),
    )
    app.extensions[RATE_CACHE_EXT_KEY] = cache
    app.extensions[CONVERSION_EXT_KEY] = ConversionService(cache)
    return cache


__all__ = [
    "CONVERSION_EXT_KEY",
    "ConversionError",
    "ConversionService",
    "InvalidRate",
    "LoadFailed",
    "PersistFailed",
    "Quote",
    "RATE_CACHE_EXT_KEY",
    "RateCache",
    "RatesUnavailable",
    "RefreshOutcome",
    "RefreshScheduler",
    "RefreshState",
    "SchedulerState",
    "SnapshotCorrupt",
    "SnapshotFileStore",
    "SnapshotNotFound",
    "SnapshotStoreError",
    "UnknownCurrency",
    "convert_with_snapshot",
    "init_rate_cache",
    "init_scheduler",
    "lookup_key",
]
