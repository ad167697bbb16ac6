"""
Geometry processing utilities for the LINAC Access Mapper.

Provides the great-circle distance used by the coverage engine,
coordinate parsing/validation, and the small amount of polygon work
the map needs (containment and bounds of a region boundary).
"""

import logging
import math
from typing import Any, Dict, Optional, Tuple

from shapely.geometry import MultiPolygon, Point, Polygon, shape

from config import Config

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = Config.EARTH_RADIUS_MILES


def parse_coordinate(value: Any) -> Optional[float]:
    """
    Coerce a raw coordinate value to a finite float.

    Args:
        value: Number, numeric string, or anything else found in a data file

    Returns:
        Float value, or None if missing, non-numeric, NaN or infinite
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        number = float(value)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(number):
        return None

    return number


def is_valid_coordinate(lat: Any, lon: Any) -> bool:
    """
    Check that both latitude and longitude are present and finite numbers.

    Args:
        lat: Latitude
        lon: Longitude

    Returns:
        True if both values are usable in a distance calculation
    """
    return parse_coordinate(lat) is not None and parse_coordinate(lon) is not None


def calculate_distance(
    lat1: Any,
    lon1: Any,
    lat2: Any,
    lon2: Any
) -> Optional[float]:
    """
    Calculate distance between two points in miles using Haversine formula.

    Args:
        lat1: Latitude of the first point
        lon1: Longitude of the first point
        lat2: Latitude of the second point
        lon2: Longitude of the second point

    Returns:
        Distance in miles, or None if any coordinate is invalid
    """
    coords = [parse_coordinate(v) for v in (lat1, lon1, lat2, lon2)]
    if any(c is None for c in coords):
        return None

    lat1, lon1, lat2, lon2 = coords

    # Convert to radians
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    # Haversine formula
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    # Rounding can push a a hair above 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_MILES * c


def is_within_radius(distance: Optional[float], radius_miles: Any) -> bool:
    """
    Decide whether a distance falls inside a search radius.

    An invalid distance is treated as infinitely far. A radius that is
    not a positive finite number covers nothing, including points that
    coincide exactly.

    Args:
        distance: Distance in miles from calculate_distance
        radius_miles: Search radius in miles

    Returns:
        True if the distance is within the radius
    """
    if distance is None or math.isnan(distance):
        return False

    radius = parse_coordinate(radius_miles)
    if radius is None or radius <= 0:
        return False

    return distance <= radius


def boundary_contains(geometry: Optional[Dict[str, Any]], lat: Any, lon: Any) -> bool:
    """
    Test whether a point lies inside a GeoJSON boundary.

    Args:
        geometry: GeoJSON Polygon/MultiPolygon mapping
        lat: Latitude of the point
        lon: Longitude of the point

    Returns:
        True if the point is inside (or on) the boundary
    """
    if not geometry or not is_valid_coordinate(lat, lon):
        return False

    try:
        geom = shape(geometry)
    except (ValueError, TypeError, AttributeError, KeyError) as e:
        logger.error(f"Invalid boundary geometry: {e}")
        return False

    if not isinstance(geom, (Polygon, MultiPolygon)):
        logger.warning(f"Boundary is not a polygon: {geom.geom_type}")
        return False

    return geom.covers(Point(float(lon), float(lat)))


def get_boundary_bounds(
    geometry: Optional[Dict[str, Any]]
) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
    """
    Get the south-west / north-east corners of a boundary for fit-to-bounds.

    Args:
        geometry: GeoJSON Polygon/MultiPolygon mapping

    Returns:
        ((min_lat, min_lon), (max_lat, max_lon)) or None if unavailable
    """
    if not geometry:
        return None

    try:
        min_lon, min_lat, max_lon, max_lat = shape(geometry).bounds
    except (ValueError, TypeError, AttributeError, KeyError) as e:
        logger.error(f"Error getting boundary bounds: {e}")
        return None

    return ((min_lat, min_lon), (max_lat, max_lon))


if __name__ == "__main__":
    """Test geometry utilities."""
    print("=" * 60)
    print("Geometry Utilities Test")
    print("=" * 60)

    print("\nDistance Calculation:")
    distance = calculate_distance(39.9526, -75.1652, 40.7128, -74.0060)
    print(f"  Philadelphia to New York: {distance:.2f} miles")
    print(f"  Missing coordinate: {calculate_distance(None, -75.0, 40.0, -75.0)}")
