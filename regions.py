"""
Region resolution for the LINAC Access Mapper.

This module handles:
- The state code <-> display name lookup (50 states, DC and the nation)
- Selecting the stores and centers that belong to a region
- Placing centers without a state code by matching them to city aggregates
- Listing the regions and cities present in a dataset
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from config import Config
from dataset_loader import DatasetSnapshot
from models import CenterPoint, RegionAggregate, StorePoint
from utils.geo_utils import parse_coordinate
from utils.validation import format_error_message, sanitize_input, validate_region_code

logger = logging.getLogger(__name__)

# Sentinel region covering every state
NATION = "US"

STATE_NAMES: Dict[str, str] = {
    NATION: "United States",
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "DC": "District of Columbia", "FL": "Florida", "GA": "Georgia", "HI": "Hawaii",
    "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
    "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine",
    "MD": "Maryland", "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota",
    "MS": "Mississippi", "MO": "Missouri", "MT": "Montana", "NE": "Nebraska",
    "NV": "Nevada", "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico",
    "NY": "New York", "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio",
    "OK": "Oklahoma", "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island",
    "SC": "South Carolina", "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas",
    "UT": "Utah", "VT": "Vermont", "VA": "Virginia", "WA": "Washington",
    "WV": "West Virginia", "WI": "Wisconsin", "WY": "Wyoming",
}

# Upper-cased display name -> code
STATE_CODES: Dict[str, str] = {name.upper(): code for code, name in STATE_NAMES.items()}


@dataclass(frozen=True)
class RegionSelection:
    """The part of a dataset snapshot that belongs to one region."""

    region: str
    display_name: str
    stores: Tuple[StorePoint, ...]
    centers: Tuple[CenterPoint, ...]
    aggregates: Tuple[RegionAggregate, ...]
    is_nation: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.stores and not self.centers


def get_display_name(region: str) -> str:
    """
    Get the full display name for a region code.

    Args:
        region: Two-letter state code or the nation sentinel

    Returns:
        Display name, or the code itself when it is not in the table
    """
    return STATE_NAMES.get(region, region)


def normalize_region(value: Optional[str]) -> Optional[str]:
    """
    Turn user input into a region code.

    Accepts codes in any case and full state names.

    Args:
        value: Raw region input

    Returns:
        Upper-case region code, or None for empty input
    """
    text = sanitize_input(value) if value else ""
    if not text:
        return None

    return STATE_CODES.get(text, text)


def match_aggregate(
    latitude: Optional[float],
    longitude: Optional[float],
    aggregates: Sequence[RegionAggregate],
    tolerance: float = Config.AGGREGATE_MATCH_TOLERANCE
) -> Optional[RegionAggregate]:
    """
    Find the city aggregate located at (approximately) the given point.

    Args:
        latitude: Latitude of the point
        longitude: Longitude of the point
        aggregates: City aggregates to search
        tolerance: Maximum difference in degrees on each axis

    Returns:
        The first matching aggregate, or None
    """
    lat = parse_coordinate(latitude)
    lon = parse_coordinate(longitude)
    if lat is None or lon is None:
        return None

    for aggregate in aggregates:
        agg_lat = parse_coordinate(aggregate.latitude)
        agg_lon = parse_coordinate(aggregate.longitude)
        if agg_lat is None or agg_lon is None:
            continue
        if abs(agg_lat - lat) <= tolerance and abs(agg_lon - lon) <= tolerance:
            return aggregate

    return None


def center_region(
    center: CenterPoint,
    aggregates: Sequence[RegionAggregate]
) -> Optional[str]:
    """
    Determine which region a center belongs to.

    The center's own state code wins; otherwise the state of the city
    aggregate at the same location is used.

    Args:
        center: Center to place
        aggregates: City aggregates of the snapshot

    Returns:
        Region code or None if it cannot be placed
    """
    if center.region:
        return center.region

    match = match_aggregate(center.latitude, center.longitude, aggregates)
    return match.region if match else None


def resolve_region(snapshot: DatasetSnapshot, region: Optional[str]) -> RegionSelection:
    """
    Select the stores, centers and aggregates of a region.

    The nation sentinel returns the full, unfiltered collections. An
    unknown or malformed region yields empty collections.

    Args:
        snapshot: Dataset snapshot
        region: Region code, full state name, or the nation sentinel

    Returns:
        RegionSelection
    """
    code = normalize_region(region) or NATION
    display_name = get_display_name(code)

    if not validate_region_code(code):
        logger.warning(format_error_message(f"Region '{region}'", "invalid"))
        return RegionSelection(
            region=code,
            display_name=display_name,
            stores=(),
            centers=(),
            aggregates=(),
        )

    if code == NATION:
        return RegionSelection(
            region=code,
            display_name=display_name,
            stores=snapshot.stores,
            centers=snapshot.centers,
            aggregates=snapshot.aggregates,
            is_nation=True,
        )

    stores = tuple(s for s in snapshot.stores if s.region == code)
    centers = tuple(
        c for c in snapshot.centers if center_region(c, snapshot.aggregates) == code
    )
    aggregates = tuple(a for a in snapshot.aggregates if a.region == code)

    if not stores and not centers:
        logger.warning(f"No stores or centers found for region '{code}'")

    logger.info(
        f"Resolved {display_name}: {len(stores)} stores, {len(centers)} centers, "
        f"{len(aggregates)} city aggregates"
    )

    return RegionSelection(
        region=code,
        display_name=display_name,
        stores=stores,
        centers=centers,
        aggregates=aggregates,
    )


def list_regions(snapshot: DatasetSnapshot) -> List[str]:
    """
    Get the sorted distinct region codes present in the store dataset.

    Args:
        snapshot: Dataset snapshot

    Returns:
        Sorted list of region codes
    """
    return sorted({s.region for s in snapshot.stores if s.region})


def list_cities(snapshot: DatasetSnapshot, region: Optional[str] = None) -> List[str]:
    """
    Get the sorted distinct city names of the aggregate table.

    Args:
        snapshot: Dataset snapshot
        region: Optional region code to restrict the list

    Returns:
        Sorted list of city names
    """
    code = normalize_region(region)
    return sorted({
        a.city for a in snapshot.aggregates
        if a.city and (code in (None, NATION) or a.region == code)
    })
