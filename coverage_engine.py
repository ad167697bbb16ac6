"""
Proximity metrics engine for the LINAC Access Mapper.

This module handles:
- Classifying stores as covered/uncovered by a radius around the centers
- Precomputing nearest-center distances for reuse across radii
- Aggregating store, center and LINAC totals for a region

Every function here is pure: the same inputs always give the same result.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from config import Config
from dataset_loader import DatasetSnapshot
from models import CenterPoint, CoverageResult, RegionAggregate, StoreClassification, StorePoint
from regions import NATION, resolve_region
from utils.geo_utils import calculate_distance, is_within_radius

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_MILES = Config.DEFAULT_RADIUS_MILES


def _candidate_centers(centers: Sequence[CenterPoint]) -> List[CenterPoint]:
    """Centers that can take part in a distance comparison."""
    return [c for c in centers if c.has_valid_coordinates]


def is_store_covered(
    store: StorePoint,
    centers: Sequence[CenterPoint],
    radius_miles: float
) -> bool:
    """
    Check whether any center lies within the radius of a store.

    Args:
        store: Store to test
        centers: Candidate centers (all with valid coordinates)
        radius_miles: Search radius in miles

    Returns:
        True as soon as one center is within the radius
    """
    if not store.has_valid_coordinates:
        return False

    for center in centers:
        distance = calculate_distance(
            store.latitude, store.longitude, center.latitude, center.longitude
        )
        if is_within_radius(distance, radius_miles):
            return True

    return False


def nearest_center_distance(
    store: StorePoint,
    centers: Sequence[CenterPoint]
) -> Optional[float]:
    """
    Get the distance in miles from a store to its nearest center.

    Args:
        store: Store to measure from
        centers: Centers to measure to

    Returns:
        Distance in miles, or None if the store or every center lacks coordinates
    """
    if not store.has_valid_coordinates:
        return None

    nearest = None
    for center in centers:
        distance = calculate_distance(
            store.latitude, store.longitude, center.latitude, center.longitude
        )
        if distance is not None and (nearest is None or distance < nearest):
            nearest = distance

    return nearest


def nearest_center_distances(
    stores: Sequence[StorePoint],
    centers: Sequence[CenterPoint]
) -> Tuple[Optional[float], ...]:
    """
    Precompute the nearest-center distance of every store.

    Distances do not depend on the radius, so the result can be passed to
    coverage_from_distances for as many radii as needed.

    Args:
        stores: Stores to measure from
        centers: Centers to measure to

    Returns:
        Tuple of distances aligned with stores (None when unmeasurable)
    """
    candidates = _candidate_centers(centers)
    return tuple(nearest_center_distance(store, candidates) for store in stores)


def coverage_from_distances(
    distances: Sequence[Optional[float]],
    radius_miles: float
) -> Tuple[int, int]:
    """
    Count covered and uncovered stores from precomputed distances.

    Args:
        distances: Output of nearest_center_distances
        radius_miles: Search radius in miles

    Returns:
        (covered, uncovered) counts
    """
    covered = sum(1 for d in distances if is_within_radius(d, radius_miles))
    return covered, len(distances) - covered


def coverage_percentage(covered: int, total: int) -> float:
    """
    Percentage of covered stores, 0.0 when there are no stores.

    Args:
        covered: Number of covered stores
        total: Number of stores

    Returns:
        Percentage rounded to one decimal
    """
    if total <= 0:
        return 0.0
    return round(covered / total * 100, 1)


def compute_coverage(
    stores: Sequence[StorePoint],
    centers: Sequence[CenterPoint],
    radius_miles: float,
    region: str = NATION,
    dataset_version: str = "",
    total_centers: Optional[Sequence[CenterPoint]] = None
) -> CoverageResult:
    """
    Compute coverage of stores by centers for one radius.

    A store is covered if at least one center with valid coordinates is
    within radius_miles. Stores without valid coordinates are never
    covered but still count towards the total. A radius that is not a
    positive number covers nothing.

    Args:
        stores: Stores of the region
        centers: Centers to compare against
        radius_miles: Search radius in miles
        region: Region code recorded in the result
        dataset_version: Snapshot version recorded in the result
        total_centers: Centers to total up (default: centers)

    Returns:
        CoverageResult
    """
    candidates = _candidate_centers(centers)

    covered = 0
    for store in stores:
        if is_store_covered(store, candidates, radius_miles):
            covered += 1

    totals_from = centers if total_centers is None else total_centers

    result = CoverageResult(
        region=region,
        radius_miles=radius_miles,
        uncovered_stores=len(stores) - covered,
        covered_stores=covered,
        total_stores=len(stores),
        total_centers=sum(c.center_units for c in totals_from),
        total_capacity=sum(c.capacity_units for c in totals_from),
        dataset_version=dataset_version,
    )

    logger.info(
        f"Coverage for {region} at {radius_miles} miles: "
        f"{result.uncovered_stores} of {result.total_stores} stores outside range"
    )

    return result


def classify_stores(
    stores: Sequence[StorePoint],
    centers: Sequence[CenterPoint],
    radius_miles: float
) -> List[StoreClassification]:
    """
    Classify each store with its nearest-center distance.

    Args:
        stores: Stores to classify
        centers: Centers to compare against
        radius_miles: Search radius in miles

    Returns:
        List of StoreClassification aligned with stores
    """
    distances = nearest_center_distances(stores, centers)
    return [
        StoreClassification(
            store=store,
            nearest_distance=distance,
            covered=is_within_radius(distance, radius_miles),
        )
        for store, distance in zip(stores, distances)
    ]


def aggregate_totals(aggregates: Sequence[RegionAggregate]) -> Tuple[int, int]:
    """
    Sum the center and LINAC counts of city aggregates.

    Missing counts add nothing.

    Args:
        aggregates: City aggregates of a region

    Returns:
        (total_centers, total_capacity)
    """
    total_centers = sum(a.center_count or 0 for a in aggregates)
    total_capacity = sum(a.capacity or 0 for a in aggregates)
    return total_centers, total_capacity


def compute_region_metrics(
    snapshot: DatasetSnapshot,
    region: Optional[str],
    radius_miles: float = DEFAULT_RADIUS_MILES,
    cross_border: bool = Config.CROSS_BORDER_COVERAGE
) -> CoverageResult:
    """
    Compute coverage metrics for a region of a dataset snapshot.

    Center and LINAC totals always describe the region. They come from the
    region's city aggregates when the dataset has any, otherwise from the
    centers placed in the region. With cross_border (the default) the stores
    are compared against centers nationwide, so a store near a state line
    can be covered by a center in the neighbouring state.

    Args:
        snapshot: Dataset snapshot
        region: Region code or the nation sentinel
        radius_miles: Search radius in miles
        cross_border: Compare against all centers instead of in-region ones

    Returns:
        CoverageResult (all zeros for an unknown region)
    """
    selection = resolve_region(snapshot, region)

    candidates = snapshot.centers if cross_border else selection.centers

    result = compute_coverage(
        selection.stores,
        candidates,
        radius_miles,
        region=selection.region,
        dataset_version=snapshot.version,
        total_centers=selection.centers,
    )

    if selection.aggregates:
        total_centers, total_capacity = aggregate_totals(selection.aggregates)
        result = replace(result, total_centers=total_centers, total_capacity=total_capacity)

    return result
