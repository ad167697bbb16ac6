"""Shared fixtures for the LINAC Access Mapper tests."""

import json
from pathlib import Path
from typing import Any, List

import pytest

from config import Config
from dataset_loader import DatasetSnapshot
from models import CenterPoint, RegionAggregate, StorePoint


def write_json(path: Path, records: List[Any]) -> Path:
    path.write_text(json.dumps(records), encoding='utf-8')
    return path


@pytest.fixture
def stores():
    return (
        StorePoint(name="Philly", city="Philadelphia", region="PA", latitude=40.0037, longitude=-75.0934),
        StorePoint(name="Wellsboro", city="Wellsboro", region="PA", latitude=41.7487, longitude=-77.3005),
        StorePoint(name="No Lat", city="Coudersport", region="PA", latitude=None, longitude=-78.0203),
        StorePoint(name="Houston", city="Houston", region="TX", latitude=29.7363, longitude=-95.4634),
        StorePoint(name="Alpine", city="Alpine", region="TX", latitude=30.3585, longitude=-103.6610),
    )


@pytest.fixture
def centers():
    return (
        # No state code: placed through the city aggregates
        CenterPoint(name="Penn", latitude=39.9496, longitude=-75.1927, capacity=6),
        CenterPoint(name="Allegheny", region="PA", latitude=40.4573, longitude=-79.9490, capacity=4),
        CenterPoint(name="TMC", latitude=29.7070, longitude=-95.3970, capacity=8),
        CenterPoint(name="Unlocated", region="PA", latitude=None, longitude=None, capacity=1),
    )


@pytest.fixture
def aggregates():
    return (
        RegionAggregate(city="Philadelphia", region="PA", latitude=39.9500, longitude=-75.1930,
                        center_count=1, capacity=6),
        RegionAggregate(city="Houston", region="TX", latitude=29.7070, longitude=-95.3970,
                        center_count=1, capacity=8),
    )


@pytest.fixture
def snapshot(stores, centers, aggregates):
    return DatasetSnapshot(stores=stores, centers=centers, aggregates=aggregates, version="test")


@pytest.fixture
def data_dir(tmp_path):
    """A data directory holding the three dataset files in their source shapes."""
    write_json(tmp_path / Config.STORES_FILE, [
        {"name": "A", "street_address": "1 Main St", "city": "Erie", "state": "PA",
         "latitude": 42.12, "longitude": -80.08},
        {"name": "B", "street_address": "2 Main St", "city": "Erie", "state": "pa",
         "latitude": "", "longitude": -80.09},
        {"name": "C", "street_address": "3 Main St", "city": "Austin", "state": "TX",
         "latitude": "30.27", "longitude": "-97.74"},
    ])
    write_json(tmp_path / Config.CENTERS_FILE, [
        {"LINAC Name": "Erie Center", "Latitude": 42.10, "Longitude": -80.10, "Number of LINACs": 2},
        {"LINAC Name": "Nowhere", "Latitude": None, "Longitude": None, "Number of LINACs": "n/a"},
    ])
    write_json(tmp_path / Config.AGGREGATES_FILE, [
        {"Cities": "Erie", "States": "PA", "Latitude": 42.10, "Longtitude": -80.10,
         "Number of LINAC Centers": 1, "Number of LINACs": 2},
    ])
    return tmp_path
