"""Routes for reading the cached rates and requesting a refresh."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from fxconvert.errors import ServiceUnavailableError
from fxconvert.schemas import ErrorMessageSchema, RatesSnapshotSchema, RefreshAcceptedSchema
from fxconvert.services import RATE_CACHE_EXT_KEY, RateCache, RefreshScheduler
from fxconvert.services.scheduler import SCHEDULER_EXT_KEY

from . import blp


@blp.route("")
class Rates(MethodView):
    @blp.response(200, RatesSnapshotSchema())
    @blp.alt_response(503, schema=ErrorMessageSchema(), description="Rates not loaded yet")
    def get(self):
        """Return the snapshot currently used for conversions."""

        cache: RateCache | None = current_app.extensions.get(RATE_CACHE_EXT_KEY)
        snapshot = cache.snapshot() if cache is not None else None
        if snapshot is None:
            raise ServiceUnavailableError(
                "Exchange rates are not available yet.", payload={"error": "rates_unavailable"}
            )
        return snapshot.to_dict()


@blp.route("/refresh")
class RatesRefresh(MethodView):
    @blp.response(202, RefreshAcceptedSchema())
    @blp.alt_response(503, schema=ErrorMessageSchema(), description="Scheduler not running")
    def post(self):
        """Ask the background scheduler to refresh now.

        The cache only contacts the provider when its snapshot is older than
        the freshness window, so repeated requests do not multiply fetches.
        """

        scheduler: RefreshScheduler | None = current_app.extensions.get(SCHEDULER_EXT_KEY)
        if scheduler is None or not scheduler.refresh_now():
            raise ServiceUnavailableError("Refresh scheduler is not running.")
        return {"message": "Refresh scheduled."}
