"""
Dataset loading for the LINAC Access Mapper.

This module handles:
- Reading the store, center and city-aggregate JSON files
- Mapping the different source field names onto one schema
- Coercing coordinates and counts without inventing zeros
- Building immutable, versioned dataset snapshots
- Reloading snapshots while serving the last good one on failure
"""

import hashlib
import logging
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from config import Config
from models import CenterPoint, RegionAggregate, StorePoint
from utils.geo_utils import parse_coordinate

logger = logging.getLogger(__name__)


class DatasetLoadError(RuntimeError):
    """Raised when a dataset file is missing or cannot be parsed."""


# Canonical column -> accepted source field names (compared case-insensitively)
STORE_FIELDS: Dict[str, List[str]] = {
    'name': ['name', 'store name'],
    'street_address': ['street_address', 'street address', 'address'],
    'city': ['city'],
    'region': ['state', 'states', 'region'],
    'latitude': ['latitude', 'lat'],
    'longitude': ['longitude', 'longtitude', 'lon', 'lng'],
}

CENTER_FIELDS: Dict[str, List[str]] = {
    'name': ['linac name', 'name', 'center name'],
    'city': ['cities', 'city'],
    'region': ['state', 'states', 'region'],
    'latitude': ['latitude', 'lat'],
    'longitude': ['longitude', 'longtitude', 'lon', 'lng'],
    'capacity': ['number of linacs', 'linacs', 'capacity'],
    'center_count': ['number of linac centers', 'centers', 'center_count'],
}

AGGREGATE_FIELDS: Dict[str, List[str]] = {
    'city': ['cities', 'city'],
    'region': ['states', 'state', 'region'],
    'latitude': ['latitude', 'lat'],
    'longitude': ['longtitude', 'longitude', 'lon', 'lng'],
    'center_count': ['number of linac centers', 'centers', 'center_count'],
    'capacity': ['number of linacs', 'linacs', 'capacity'],
}

FLOAT_COLUMNS = ('latitude', 'longitude')
INT_COLUMNS = ('capacity', 'center_count')


@dataclass(frozen=True)
class DatasetSnapshot:
    """An immutable view of the three datasets at one point in time."""

    stores: Tuple[StorePoint, ...]
    centers: Tuple[CenterPoint, ...]
    aggregates: Tuple[RegionAggregate, ...] = ()
    version: str = ""
    loaded_at: datetime = field(default_factory=datetime.now)


def read_records(path: Path) -> pd.DataFrame:
    """
    Read a JSON array of records into a DataFrame of raw values.

    Args:
        path: Path to the JSON file

    Returns:
        DataFrame with one row per record

    Raises:
        DatasetLoadError: If the file is missing or not a JSON array of objects
    """
    if not path.is_file():
        raise DatasetLoadError(f"Dataset file not found: {path}")

    try:
        df = pd.read_json(path, orient='records', dtype=False, convert_dates=False)
    except ValueError as e:
        raise DatasetLoadError(f"Could not parse {path.name}: {e}") from e

    if not isinstance(df, pd.DataFrame):
        raise DatasetLoadError(f"{path.name} must contain a list of records")

    return df


def normalize_columns(df: pd.DataFrame, fields: Dict[str, List[str]]) -> pd.DataFrame:
    """
    Rename source columns to canonical names and coerce numeric columns.

    Missing columns are added as all-missing; numeric values that cannot
    be parsed become missing rather than zero.

    Args:
        df: Raw records
        fields: Canonical column -> accepted source names

    Returns:
        DataFrame with exactly the canonical columns
    """
    lookup = {str(col).strip().lower(): col for col in df.columns}
    normalized = pd.DataFrame(index=df.index)

    for canonical, aliases in fields.items():
        source = next((lookup[a] for a in aliases if a in lookup), None)
        if source is None:
            normalized[canonical] = None
        else:
            normalized[canonical] = df[source]

    for col in FLOAT_COLUMNS + INT_COLUMNS:
        if col in normalized.columns:
            normalized[col] = pd.to_numeric(normalized[col], errors='coerce')

    return normalized


def _text(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def _region(value: Any) -> Optional[str]:
    text = _text(value).upper()
    return text or None


def _count(value: Any) -> Optional[int]:
    number = parse_coordinate(value)
    if number is None:
        return None
    return int(number)


def build_stores(df: pd.DataFrame) -> Tuple[StorePoint, ...]:
    """Convert normalized store rows into StorePoint records."""
    stores = []
    for row in df.to_dict('records'):
        stores.append(StorePoint(
            name=_text(row['name']),
            street_address=_text(row['street_address']),
            city=_text(row['city']),
            region=_region(row['region']),
            latitude=parse_coordinate(row['latitude']),
            longitude=parse_coordinate(row['longitude']),
        ))
    return tuple(stores)


def build_centers(df: pd.DataFrame) -> Tuple[CenterPoint, ...]:
    """
    Convert normalized center rows into CenterPoint records.

    Rows in the city-aggregate shape have no site name, so the city
    name is used and the center count is kept.
    """
    centers = []
    for row in df.to_dict('records'):
        name = _text(row['name']) or _text(row['city'])
        centers.append(CenterPoint(
            name=name,
            region=_region(row['region']),
            latitude=parse_coordinate(row['latitude']),
            longitude=parse_coordinate(row['longitude']),
            capacity=_count(row['capacity']),
            center_count=_count(row['center_count']),
        ))
    return tuple(centers)


def build_aggregates(df: pd.DataFrame) -> Tuple[RegionAggregate, ...]:
    """Convert normalized city-aggregate rows into RegionAggregate records."""
    aggregates = []
    for row in df.to_dict('records'):
        aggregates.append(RegionAggregate(
            city=_text(row['city']),
            region=_region(row['region']),
            latitude=parse_coordinate(row['latitude']),
            longitude=parse_coordinate(row['longitude']),
            center_count=_count(row['center_count']),
            capacity=_count(row['capacity']),
        ))
    return tuple(aggregates)


def compute_version(paths: List[Path]) -> str:
    """
    Fingerprint the dataset files so unchanged data keeps its version.

    Args:
        paths: Files that make up the dataset (missing files are skipped)

    Returns:
        Short hex digest
    """
    digest = hashlib.sha1()
    for path in paths:
        if path.is_file():
            digest.update(path.name.encode('utf-8'))
            digest.update(path.read_bytes())
    return digest.hexdigest()[:12]


def load_snapshot(data_dir: Optional[Path] = None) -> DatasetSnapshot:
    """
    Load all three datasets into a new snapshot.

    The aggregates file is optional; stores and centers are required.

    Args:
        data_dir: Directory holding the JSON files (default: Config.DATA_DIR)

    Returns:
        DatasetSnapshot

    Raises:
        DatasetLoadError: If a required file is missing or corrupt
    """
    data_dir = Path(data_dir) if data_dir is not None else Config.DATA_DIR

    stores_path = data_dir / Config.STORES_FILE
    centers_path = data_dir / Config.CENTERS_FILE
    aggregates_path = data_dir / Config.AGGREGATES_FILE

    logger.info(f"Loading dataset from {data_dir}")

    stores = build_stores(normalize_columns(read_records(stores_path), STORE_FIELDS))
    centers = build_centers(normalize_columns(read_records(centers_path), CENTER_FIELDS))

    if aggregates_path.is_file():
        aggregates = build_aggregates(
            normalize_columns(read_records(aggregates_path), AGGREGATE_FIELDS)
        )
    else:
        logger.info(f"No aggregates file at {aggregates_path}, continuing without it")
        aggregates = ()

    version = compute_version([stores_path, centers_path, aggregates_path])

    invalid_stores = sum(1 for s in stores if not s.has_valid_coordinates)
    invalid_centers = sum(1 for c in centers if not c.has_valid_coordinates)

    logger.info(
        f"Loaded {len(stores)} stores ({invalid_stores} without coordinates), "
        f"{len(centers)} centers ({invalid_centers} without coordinates), "
        f"{len(aggregates)} city aggregates [version {version}]"
    )

    by_region = Counter(s.region for s in stores if s.region)
    for region, count in sorted(by_region.items()):
        logger.debug(f"{region}: {count} stores")

    return DatasetSnapshot(
        stores=stores,
        centers=centers,
        aggregates=aggregates,
        version=version,
    )


class DatasetManager:
    """
    Holds the current dataset snapshot and swaps in reloaded ones.

    Readers take the snapshot reference and work on it; a reload builds a
    complete new snapshot before replacing the reference, so a reader never
    sees a half-loaded dataset.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        reload_seconds: Optional[float] = None,
        loader: Callable[[Optional[Path]], DatasetSnapshot] = load_snapshot
    ):
        self.data_dir = Path(data_dir) if data_dir is not None else Config.DATA_DIR
        self.reload_seconds = (
            reload_seconds if reload_seconds is not None else Config.DATA_RELOAD_SECONDS
        )
        self._loader = loader
        self._snapshot: Optional[DatasetSnapshot] = None
        self._checked_at = 0.0
        self._reload_lock = threading.Lock()

    @property
    def snapshot(self) -> Optional[DatasetSnapshot]:
        return self._snapshot

    def load(self) -> DatasetSnapshot:
        """
        Load the dataset for the first time.

        Raises:
            DatasetLoadError: If the dataset cannot be loaded at all
        """
        with self._reload_lock:
            snapshot = self._loader(self.data_dir)
            self._snapshot = snapshot
            self._checked_at = time.monotonic()
            return snapshot

    def reload(self) -> DatasetSnapshot:
        """
        Reload the dataset, keeping the current snapshot if that fails.

        Returns:
            The snapshot now in use
        """
        if self._snapshot is None:
            return self.load()

        with self._reload_lock:
            current = self._snapshot
            self._checked_at = time.monotonic()
            try:
                fresh = self._loader(self.data_dir)
            except DatasetLoadError as e:
                logger.error(f"Dataset reload failed, serving version {current.version}: {e}")
                return current

            if fresh.version == current.version:
                logger.debug(f"Dataset unchanged (version {current.version})")
                return current

            logger.info(f"Dataset reloaded: {current.version} -> {fresh.version}")
            self._snapshot = fresh
            return fresh

    def get_snapshot(self) -> DatasetSnapshot:
        """
        Get the current snapshot, reloading it when it is stale.

        Returns:
            DatasetSnapshot
        """
        if self._snapshot is None:
            return self.load()

        if time.monotonic() - self._checked_at >= self.reload_seconds:
            return self.reload()

        return self._snapshot


if __name__ == "__main__":
    """Load the configured dataset and print a summary."""
    print("=" * 60)
    print("Dataset Loader Test")
    print("=" * 60)

    snapshot = load_snapshot()
    print(f"\nVersion: {snapshot.version}")
    print(f"Stores: {len(snapshot.stores)}")
    print(f"Centers: {len(snapshot.centers)}")
    print(f"City aggregates: {len(snapshot.aggregates)}")
