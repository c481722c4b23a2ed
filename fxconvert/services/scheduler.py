"""Background driver that keeps the rate cache fresh."""

from __future__ import annotations

import enum
import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from fxconvert.utils.datetime import utc_now

from .rate_cache import RateCache, RefreshOutcome

logger = logging.getLogger(__name__)

SCHEDULER_EXT_KEY = "refresh_scheduler"
PERIODIC_JOB_ID = "refresh_rates"
ONE_SHOT_JOB_ID = "refresh_rates_now"
DEFAULT_INTERVAL_SECONDS = 60 * 60


class SchedulerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class RefreshScheduler:
    """Run :meth:`RateCache.ensure_fresh` on a fixed period and on demand.

    The periodic job and the one-shot "refresh now" job call the same
    function. Neither job overlaps itself, and when both fire together the
    cache's refresh lock makes the second one observe the first one's result.
    Stopping cancels the timer and waits for an in-flight refresh to complete.
    """

    def __init__(
        self,
        cache: RateCache,
        *,
        interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
        timezone: str = "UTC",
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._cache = cache
        self._interval_seconds = interval_seconds
        self._scheduler = scheduler or BackgroundScheduler(timezone=timezone)
        self._state = SchedulerState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    def start(self, *, refresh_immediately: bool = True) -> None:
        """Start the periodic timer, optionally firing one refresh right away."""

        with self._lock:
            if self._state is SchedulerState.RUNNING:
                return
            if self._state is SchedulerState.STOPPED:
                raise RuntimeError("A stopped refresh scheduler cannot be restarted.")

            self._scheduler.add_job(
                self._run_refresh,
                trigger=IntervalTrigger(seconds=self._interval_seconds),
                id=PERIODIC_JOB_ID,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            self._scheduler.start()
            self._state = SchedulerState.RUNNING

        logger.info("Rate refresh scheduler started with a %ss interval", self._interval_seconds)
        if refresh_immediately:
            self.refresh_now()

    def refresh_now(self) -> bool:
        """Queue a one-shot refresh; returns ``False`` if not running."""

        with self._lock:
            if self._state is not SchedulerState.RUNNING:
                logger.warning("Ignoring refresh request; scheduler is %s", self._state.value)
                return False
            self._scheduler.add_job(
                self._run_refresh,
                trigger="date",
                run_date=utc_now(),
                id=ONE_SHOT_JOB_ID,
                replace_existing=True,
                misfire_grace_time=None,
            )
        return True

    def stop(self) -> None:
        """Cancel future refreshes and wait for any running one to finish."""

        with self._lock:
            if self._state is not SchedulerState.RUNNING:
                self._state = SchedulerState.STOPPED
                return
            self._state = SchedulerState.STOPPED
        self._scheduler.shutdown(wait=True)
        logger.info("Rate refresh scheduler stopped")

    def _run_refresh(self) -> RefreshOutcome | None:
        try:
            return self._cache.ensure_fresh()
        except Exception:
            logger.exception("Unexpected error during scheduled rate refresh")
            return None


def init_scheduler(app, cache: RateCache) -> RefreshScheduler | None:
    """Create and start the refresh scheduler when enabled in config."""

    if not app.config.get("SCHEDULER_ENABLED", True):
        logger.info("Scheduler disabled via configuration.")
        return None

    existing = app.extensions.get(SCHEDULER_EXT_KEY)
    if existing is not None:
        return existing

    scheduler = RefreshScheduler(
        cache,
        interval_seconds=int(
            app.config.get("RATES_REFRESH_INTERVAL_SECONDS", DEFAULT_INTERVAL_SECONDS)
        ),
        timezone=app.config.get("SCHEDULER_TIMEZONE", "UTC"),
    )
    scheduler.start(refresh_immediately=True)
    app.extensions[SCHEDULER_EXT_KEY] = scheduler
    return scheduler
