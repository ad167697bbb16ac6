"""
Unit tests for dataset loading and snapshot reloads.

Run with: python -m pytest tests/test_dataset_loader.py -v
"""

import pytest

from config import Config
from dataset_loader import (
    DatasetLoadError,
    DatasetManager,
    DatasetSnapshot,
    load_snapshot,
)
from regions import resolve_region

from .conftest import write_json


class TestLoadSnapshot:

    def test_loads_all_three_files(self, data_dir):
        snapshot = load_snapshot(data_dir)

        assert len(snapshot.stores) == 3
        assert len(snapshot.centers) == 2
        assert len(snapshot.aggregates) == 1
        assert snapshot.version

    def test_store_fields(self, data_dir):
        store = load_snapshot(data_dir).stores[0]

        assert store.name == "A"
        assert store.street_address == "1 Main St"
        assert store.city == "Erie"
        assert store.region == "PA"
        assert store.latitude == pytest.approx(42.12)
        assert store.longitude == pytest.approx(-80.08)

    def test_missing_coordinate_stays_missing(self, data_dir):
        store = load_snapshot(data_dir).stores[1]

        assert store.latitude is None
        assert store.longitude == pytest.approx(-80.09)
        assert not store.has_valid_coordinates

    def test_region_codes_are_upper_cased(self, data_dir):
        assert load_snapshot(data_dir).stores[1].region == "PA"

    def test_numeric_strings_are_coerced(self, data_dir):
        store = load_snapshot(data_dir).stores[2]

        assert store.latitude == pytest.approx(30.27)
        assert store.longitude == pytest.approx(-97.74)

    def test_center_source_fields(self, data_dir):
        centers = load_snapshot(data_dir).centers

        assert centers[0].name == "Erie Center"
        assert centers[0].region is None
        assert centers[0].capacity == 2
        assert centers[0].center_count is None
        assert centers[1].capacity is None
        assert centers[1].latitude is None

    def test_aggregate_with_misspelt_longitude(self, data_dir):
        aggregate = load_snapshot(data_dir).aggregates[0]

        assert aggregate.city == "Erie"
        assert aggregate.region == "PA"
        assert aggregate.longitude == pytest.approx(-80.10)
        assert aggregate.center_count == 1
        assert aggregate.capacity == 2

    def test_centers_placed_through_aggregates(self, data_dir):
        selection = resolve_region(load_snapshot(data_dir), "PA")
        assert [c.name for c in selection.centers] == ["Erie Center"]

    def test_city_aggregate_shaped_centers(self, data_dir):
        write_json(data_dir / Config.CENTERS_FILE, [
            {"Cities": "Erie", "States": "PA", "Latitude": 42.10, "Longtitude": -80.10,
             "Number of LINAC Centers": 3, "Number of LINACs": 7},
        ])

        center = load_snapshot(data_dir).centers[0]

        assert center.name == "Erie"
        assert center.region == "PA"
        assert center.center_count == 3
        assert center.capacity == 7
        assert center.has_valid_coordinates

    def test_aggregates_file_is_optional(self, data_dir):
        (data_dir / Config.AGGREGATES_FILE).unlink()
        assert load_snapshot(data_dir).aggregates == ()

    def test_empty_files(self, data_dir):
        write_json(data_dir / Config.STORES_FILE, [])
        write_json(data_dir / Config.CENTERS_FILE, [])

        snapshot = load_snapshot(data_dir)

        assert snapshot.stores == ()
        assert snapshot.centers == ()

    def test_missing_required_file(self, data_dir):
        (data_dir / Config.STORES_FILE).unlink()

        with pytest.raises(DatasetLoadError):
            load_snapshot(data_dir)

    def test_corrupt_file(self, data_dir):
        (data_dir / Config.CENTERS_FILE).write_text("{not json", encoding='utf-8')

        with pytest.raises(DatasetLoadError):
            load_snapshot(data_dir)

    def test_version_is_stable_for_unchanged_files(self, data_dir):
        assert load_snapshot(data_dir).version == load_snapshot(data_dir).version


class TestDatasetManager:

    def test_initial_load_failure_is_fatal(self, tmp_path):
        manager = DatasetManager(data_dir=tmp_path)

        with pytest.raises(DatasetLoadError):
            manager.load()

    def test_reload_swaps_in_new_snapshot(self, data_dir):
        manager = DatasetManager(data_dir=data_dir)
        first = manager.load()

        write_json(data_dir / Config.STORES_FILE, [
            {"name": "Z", "state": "OH", "latitude": 40.0, "longitude": -83.0},
        ])
        second = manager.reload()

        assert second is manager.snapshot
        assert second.version != first.version
        assert [s.name for s in second.stores] == ["Z"]
        # The old snapshot is untouched
        assert len(first.stores) == 3

    def test_unchanged_reload_keeps_snapshot(self, data_dir):
        manager = DatasetManager(data_dir=data_dir)
        first = manager.load()

        assert manager.reload() is first

    def test_failed_reload_serves_last_good_snapshot(self, data_dir):
        manager = DatasetManager(data_dir=data_dir)
        first = manager.load()

        (data_dir / Config.STORES_FILE).write_text("[{broken", encoding='utf-8')

        assert manager.reload() is first
        assert manager.snapshot is first

    def test_get_snapshot_loads_lazily(self, data_dir):
        manager = DatasetManager(data_dir=data_dir)

        assert manager.snapshot is None
        assert isinstance(manager.get_snapshot(), DatasetSnapshot)

    def test_get_snapshot_reloads_when_stale(self):
        calls = []

        def loader(data_dir):
            calls.append(data_dir)
            return DatasetSnapshot(stores=(), centers=(), version=str(len(calls)))

        manager = DatasetManager(data_dir=".", reload_seconds=0, loader=loader)
        manager.load()

        assert manager.get_snapshot().version == "2"
        assert len(calls) == 2

    def test_get_snapshot_uses_cached_when_fresh(self):
        calls = []

        def loader(data_dir):
            calls.append(data_dir)
            return DatasetSnapshot(stores=(), centers=(), version="1")

        manager = DatasetManager(data_dir=".", reload_seconds=3600, loader=loader)
        manager.load()
        manager.get_snapshot()

        assert len(calls) == 1
