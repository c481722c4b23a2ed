"""Shared pytest fixtures."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from fxconvert import create_app  # noqa: E402
from fxconvert.providers.registry import reset_registry  # noqa: E402
from fxconvert.services import RateCache, SnapshotFileStore  # noqa: E402
from tests.factories import SequencedProvider, make_snapshot  # noqa: E402


@pytest.fixture()
def rates_file(tmp_path: Path) -> Path:
    """Location of the persisted snapshot for the current test."""

    return tmp_path / "data" / "rates.json"


@pytest.fixture()
def store(rates_file: Path) -> SnapshotFileStore:
    return SnapshotFileStore(rates_file)


@pytest.fixture()
def provider() -> SequencedProvider:
    """Provider that serves one default snapshot unless the test queues others."""

    return SequencedProvider(latest=[make_snapshot()])


@pytest.fixture()
def cache(provider: SequencedProvider, store: SnapshotFileStore) -> RateCache:
    return RateCache(provider, store, max_age_seconds=3600)


@pytest.fixture()
def app(rates_file: Path) -> Iterator:
    """Flask application wired to the mock provider with the scheduler disabled."""

    reset_registry()
    flask_app = create_app(
        "development",
        {
            "TESTING": True,
            "FX_RATE_PROVIDER": "mock",
            "SCHEDULER_ENABLED": False,
            "RATES_FILE": str(rates_file),
        },
    )
    yield flask_app
    reset_registry()


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    """Return the path to bundled JSON fixtures."""

    return ROOT_DIR / "tests" / "fixtures"


@pytest.fixture()
def load_json_fixture(fixtures_dir: Path) -> Callable[[str], dict]:
    """Load a JSON fixture by filename."""

    def _loader(filename: str) -> dict:
        path = fixtures_dir / filename
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    return _loader
