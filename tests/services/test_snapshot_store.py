from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from fxconvert.services import (
    LoadFailed,
    PersistFailed,
    SnapshotCorrupt,
    SnapshotFileStore,
    SnapshotNotFound,
)
from tests.factories import make_payload, make_snapshot


def test_load_missing_file_raises_not_found(store: SnapshotFileStore):
    with pytest.raises(SnapshotNotFound):
        store.load()


def test_load_missing_and_corrupt_share_a_base_class(store: SnapshotFileStore, rates_file: Path):
    with pytest.raises(LoadFailed):
        store.load()

    rates_file.parent.mkdir(parents=True)
    rates_file.write_text("{not json", encoding="utf-8")
    with pytest.raises(LoadFailed):
        store.load()


@pytest.mark.parametrize(
    "content",
    [
        "",
        "{not json",
        "[]",
        json.dumps({"timestamp": 1, "base": "USD"}),
        json.dumps({"timestamp": 1, "base": "USD", "rates": {}}),
        json.dumps({"timestamp": "yesterday", "base": "USD", "rates": {"EUR": 0.9}}),
    ],
)
def test_load_corrupt_file_raises_corrupt(store: SnapshotFileStore, rates_file: Path, content):
    rates_file.parent.mkdir(parents=True)
    rates_file.write_text(content, encoding="utf-8")

    with pytest.raises(SnapshotCorrupt):
        store.load()


def test_load_reads_original_file_format(store: SnapshotFileStore, rates_file: Path):
    rates_file.parent.mkdir(parents=True)
    rates_file.write_text(json.dumps(make_payload(timestamp=1_700_000_000)), encoding="utf-8")

    snapshot = store.load()

    assert snapshot.timestamp == 1_700_000_000
    assert snapshot.base == "USD"
    assert snapshot.rates["JPY"] == 150.0


def test_save_creates_directory_and_writes_json(store: SnapshotFileStore, rates_file: Path):
    store.save(make_snapshot(timestamp=42))

    assert json.loads(rates_file.read_text(encoding="utf-8")) == make_payload(timestamp=42)
    assert store.load().to_dict() == make_payload(timestamp=42)


def test_save_overwrites_previous_snapshot(store: SnapshotFileStore):
    store.save(make_snapshot(timestamp=1))
    store.save(make_snapshot({"USD": 1.0, "CHF": 0.88}, timestamp=2))

    loaded = store.load()
    assert loaded.timestamp == 2
    assert dict(loaded.rates) == {"USD": 1.0, "CHF": 0.88}


def test_save_leaves_no_temporary_files(store: SnapshotFileStore, rates_file: Path):
    store.save(make_snapshot(timestamp=1))
    store.save(make_snapshot(timestamp=2))

    assert sorted(path.name for path in rates_file.parent.iterdir()) == ["rates.json"]


def test_failed_rename_keeps_previous_file_and_cleans_up(
    store: SnapshotFileStore, rates_file: Path, monkeypatch
):
    store.save(make_snapshot(timestamp=1))

    def _broken_replace(_src, _dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", _broken_replace)

    with pytest.raises(PersistFailed, match="disk full"):
        store.save(make_snapshot(timestamp=2))

    monkeypatch.undo()
    assert store.load().timestamp == 1
    assert sorted(path.name for path in rates_file.parent.iterdir()) == ["rates.json"]


def test_save_into_unwritable_location_raises_persist_failed(tmp_path: Path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")
    store = SnapshotFileStore(blocker / "rates.json")

    with pytest.raises(PersistFailed):
        store.save(make_snapshot())


def test_load_rejects_file_for_another_base(rates_file: Path):
    rates_file.parent.mkdir(parents=True)
    rates_file.write_text(json.dumps(make_payload(base="EUR", timestamp=1)), encoding="utf-8")
    store = SnapshotFileStore(rates_file, expected_base="usd")

    with pytest.raises(SnapshotCorrupt, match="expected USD"):
        store.load()


def test_load_without_expected_base_accepts_any_base(store: SnapshotFileStore, rates_file: Path):
    rates_file.parent.mkdir(parents=True)
    rates_file.write_text(json.dumps(make_payload(base="EUR", timestamp=1)), encoding="utf-8")

    assert store.load().base == "EUR"


def test_load_rejects_duplicate_codes(store: SnapshotFileStore, rates_file: Path):
    rates_file.parent.mkdir(parents=True)
    rates_file.write_text(
        '{"timestamp": 1, "base": "USD", "rates": {"usd": 1.0, "USD": 1.0}}', encoding="utf-8"
    )

    with pytest.raises(SnapshotCorrupt, match="Duplicate"):
        store.load()
