"""
Domain records for the LINAC Access Mapper.

Stores, centers and city aggregates are loaded once per dataset snapshot
and never mutated afterwards, so every record here is a frozen dataclass.
Coordinates and counts are Optional: a value missing from the source file
stays None rather than being defaulted to zero.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any

from utils.geo_utils import is_valid_coordinate


@dataclass(frozen=True)
class StorePoint:
    """A single retail store location."""

    name: str
    street_address: str = ""
    city: str = ""
    region: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_valid_coordinates(self) -> bool:
        return is_valid_coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class CenterPoint:
    """
    A radiation-therapy center, or a city summary of several centers.

    center_count is only set when the record summarizes a city; a plain
    site counts as one center.
    """

    name: str
    region: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    capacity: Optional[int] = None
    center_count: Optional[int] = None

    @property
    def has_valid_coordinates(self) -> bool:
        return is_valid_coordinate(self.latitude, self.longitude)

    @property
    def capacity_units(self) -> int:
        return self.capacity if self.capacity is not None else 0

    @property
    def center_units(self) -> int:
        return self.center_count if self.center_count is not None else 1


@dataclass(frozen=True)
class RegionAggregate:
    """Precomputed per-city totals of centers and LINACs."""

    city: str
    region: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    center_count: Optional[int] = None
    capacity: Optional[int] = None


@dataclass(frozen=True)
class CoverageResult:
    """Coverage metrics for one (region, radius) pair."""

    region: str
    radius_miles: float
    uncovered_stores: int = 0
    covered_stores: int = 0
    total_stores: int = 0
    total_centers: int = 0
    total_capacity: int = 0
    dataset_version: str = ""

    @property
    def coverage_percentage(self) -> float:
        # Regions without stores report 0.0 instead of dividing by zero
        if self.total_stores <= 0:
            return 0.0
        return round(self.covered_stores / self.total_stores * 100, 1)

    def to_dict(self) -> Dict[str, Any]:
        """Metrics payload consumed by the dashboard and the exporters."""
        return {
            'region': self.region,
            'radiusMiles': self.radius_miles,
            'storesOutsideRange': self.uncovered_stores,
            'storesWithinRange': self.covered_stores,
            'totalStores': self.total_stores,
            'centersInRegion': self.total_centers,
            'linacsInRegion': self.total_capacity,
            'coveragePercentage': self.coverage_percentage,
            'datasetVersion': self.dataset_version,
        }


@dataclass(frozen=True)
class StoreClassification:
    """A store together with its distance to the nearest center."""

    store: StorePoint
    nearest_distance: Optional[float]
    covered: bool


class BoundaryStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    SERVICE_ERROR = "service_error"


@dataclass(frozen=True)
class BoundaryResult:
    """
    Outcome of a region boundary lookup.

    geometry is a GeoJSON-like mapping (Polygon or MultiPolygon) and is
    only set when status is FOUND.
    """

    region: str
    status: BoundaryStatus
    geometry: Optional[Dict[str, Any]] = None
    message: str = ""

    @property
    def is_available(self) -> bool:
        return self.status is BoundaryStatus.FOUND and self.geometry is not None
