"""Route handlers for health checks."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from fxconvert.schemas import HealthRatesSchema, HealthStatusSchema
from fxconvert.services import RATE_CACHE_EXT_KEY, RateCache
from fxconvert.utils.datetime import epoch_now, from_epoch

from . import blp


@blp.route("")
class HealthStatus(MethodView):
    @blp.response(200, HealthStatusSchema())
    def get(self):
        return {
            "status": "ok",
            "app": current_app.config.get("APP_NAME", "fxconvert"),
        }


@blp.route("/rates")
class HealthRates(MethodView):
    @blp.response(200, HealthRatesSchema())
    def get(self):
        cache: RateCache | None = current_app.extensions.get(RATE_CACHE_EXT_KEY)
        if cache is None:
            return {"status": "uninitialized", "max_age_seconds": 0}

        state = cache.refresh_state()
        snapshot = cache.snapshot()
        payload = {
            "status": "uninitialized",
            "source": cache.provider_name,
            "base_currency": None,
            "last_updated": None,
            "age_seconds": None,
            "max_age_seconds": cache.max_age_seconds,
            "last_failure": state.last_failure.isoformat() if state.last_failure else None,
            "last_error": state.last_error,
        }
        if snapshot is None:
            return payload

        now = epoch_now()
        payload.update(
            {
                "status": "ok" if snapshot.is_fresh(now, cache.max_age_seconds) else "stale",
                "base_currency": snapshot.base,
                "last_updated": from_epoch(snapshot.timestamp).isoformat(),
                "age_seconds": snapshot.age_seconds(now),
            }
        )
        return payload
