"""Fixtures powering end-to-end tests."""

from __future__ import annotations

from collections.abc import Iterable

import pytest

from fxconvert import create_app
from fxconvert.providers.registry import register_provider, reset_registry
from fxconvert.services.scheduler import SCHEDULER_EXT_KEY
from tests.factories import LatestQueueItem, SequencedProvider


@pytest.fixture()
def service_factory(rates_file):
    """Build apps with a running scheduler around a stub provider.

    Each call creates a fresh app, as a process restart would, sharing the
    same rates file. Schedulers are stopped when the test finishes.
    """

    started = []

    def _factory(latest: Iterable[LatestQueueItem]):
        provider = SequencedProvider(latest=latest, name="mock")
        register_provider("mock", lambda _config: provider)
        app = create_app(
            "development",
            {
                "TESTING": True,
                "FX_RATE_PROVIDER": "mock",
                "SCHEDULER_ENABLED": True,
                "RATES_FILE": str(rates_file),
            },
        )
        started.append(app)
        return app, provider

    yield _factory

    for app in started:
        scheduler = app.extensions.get(SCHEDULER_EXT_KEY)
        if scheduler is not None:
            scheduler.stop()
    reset_registry()
