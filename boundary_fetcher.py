"""
Region boundary fetcher for the LINAC Access Mapper.

This module handles:
- Fetching state and national boundaries from OpenStreetMap
- Validating the returned boundary geometry
- Bounding each lookup with a timeout so a slow service never blocks metrics
- Reporting "not found" and "service error" as distinct outcomes
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Dict, Optional

import geopandas as gpd
import osmnx as ox
import requests
# osmnx 2.x only exposes its HTTP error types through this private module
from osmnx._errors import ResponseStatusCodeError
from shapely.geometry import MultiPolygon, Polygon, mapping

from config import Config
from models import BoundaryResult, BoundaryStatus
from regions import NATION, get_display_name, normalize_region

logger = logging.getLogger(__name__)

# Configure osmnx settings
ox.settings.log_console = False
ox.settings.use_cache = True
ox.settings.requests_timeout = int(Config.BOUNDARY_TIMEOUT)
ox.settings.http_user_agent = Config.BOUNDARY_USER_AGENT

Geocoder = Callable[[str], gpd.GeoDataFrame]

_executor = ThreadPoolExecutor(
    max_workers=Config.BOUNDARY_WORKERS,
    thread_name_prefix="boundary"
)


def build_query_string(region: str) -> str:
    """
    Build the Nominatim query for a region.

    Args:
        region: Region code or the nation sentinel

    Returns:
        Query string such as "Ohio, United States"
    """
    if region == NATION:
        return get_display_name(NATION)

    return f"{get_display_name(region)}, United States"


def validate_boundary(gdf: Optional[gpd.GeoDataFrame]) -> bool:
    """
    Validate that a boundary GeoDataFrame is valid and usable.

    Args:
        gdf: GeoDataFrame containing boundary

    Returns:
        True if valid, False otherwise
    """
    if gdf is None or gdf.empty:
        logger.error("GeoDataFrame is None or empty")
        return False

    geom = gdf.geometry.iloc[0]

    if geom is None:
        logger.error("Geometry is None")
        return False

    if not isinstance(geom, (Polygon, MultiPolygon)):
        logger.error(f"Geometry must be Polygon or MultiPolygon, got {type(geom)}")
        return False

    if geom.is_empty:
        logger.error("Geometry is empty")
        return False

    return True


def geocode_boundary(query: str) -> gpd.GeoDataFrame:
    """
    Geocode a query to a boundary polygon through osmnx.

    Args:
        query: Place query

    Returns:
        GeoDataFrame in EPSG:4326
    """
    gdf = ox.geocode_to_gdf(query)

    if gdf is not None and not gdf.empty and gdf.crs is not None and gdf.crs != 'EPSG:4326':
        gdf = gdf.to_crs('EPSG:4326')

    return gdf


class BoundaryFetcher:
    """
    Resolves region boundaries through a geocoder with a timeout.

    Successful lookups are memoised per region; failures are not, so a
    later request can succeed once the service recovers.
    """

    def __init__(
        self,
        geocoder: Geocoder = geocode_boundary,
        timeout: float = Config.BOUNDARY_TIMEOUT,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        self.geocoder = geocoder
        self.timeout = timeout
        self.executor = executor or _executor
        self._found: Dict[str, BoundaryResult] = {}

    def resolve_boundary(self, region: Optional[str]) -> BoundaryResult:
        """
        Fetch the boundary polygon of a region.

        Args:
            region: Region code, full state name, or the nation sentinel

        Returns:
            BoundaryResult with status FOUND, NOT_FOUND or SERVICE_ERROR
        """
        code = normalize_region(region) or NATION

        if code in self._found:
            return self._found[code]

        query = build_query_string(code)
        logger.info(f"Fetching boundary for: {query}")

        future = self.executor.submit(self.geocoder, query)

        try:
            gdf = future.result(timeout=self.timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.error(f"Boundary lookup for {query} timed out after {self.timeout}s")
            return BoundaryResult(
                region=code,
                status=BoundaryStatus.SERVICE_ERROR,
                message=f"Boundary service did not answer within {self.timeout} seconds",
            )
        # ResponseStatusCodeError subclasses ValueError, so this clause must precede the ValueError one
        except (requests.exceptions.RequestException, ResponseStatusCodeError) as e:
            logger.error(f"Boundary service unavailable for {query}: {e}")
            return BoundaryResult(
                region=code,
                status=BoundaryStatus.SERVICE_ERROR,
                message=f"Boundary service unavailable: {e}",
            )
        except (ValueError, TypeError) as e:
            # osmnx raises these when Nominatim has no polygon for the query
            logger.warning(f"No boundary found for {query}: {e}")
            return BoundaryResult(
                region=code,
                status=BoundaryStatus.NOT_FOUND,
                message=f"No boundary found for {get_display_name(code)}",
            )
        except Exception as e:
            logger.error(f"Error fetching boundary for {query}: {e}", exc_info=True)
            return BoundaryResult(
                region=code,
                status=BoundaryStatus.SERVICE_ERROR,
                message=f"Boundary lookup failed: {e}",
            )

        if not validate_boundary(gdf):
            logger.warning(f"No usable boundary returned for {query}")
            return BoundaryResult(
                region=code,
                status=BoundaryStatus.NOT_FOUND,
                message=f"No boundary found for {get_display_name(code)}",
            )

        result = BoundaryResult(
            region=code,
            status=BoundaryStatus.FOUND,
            geometry=mapping(gdf.geometry.iloc[0]),
        )
        self._found[code] = result

        logger.info(f"Successfully fetched boundary for {get_display_name(code)}")
        return result


if __name__ == "__main__":
    """Test the boundary fetcher with a few regions."""
    print("=" * 60)
    print("Boundary Fetcher Test")
    print("=" * 60)

    fetcher = BoundaryFetcher()
    for code in ("PA", "RI", "ZZ"):
        result = fetcher.resolve_boundary(code)
        print(f"  {code}: {result.status.value} {result.message}")
