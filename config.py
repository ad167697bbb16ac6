"""
Configuration settings for the LINAC Access Mapper application.

Loads environment variables and provides centralized configuration
for the dataset files, coverage analysis, boundary lookups and the map.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

PROJECT_ROOT = Path(__file__).parent


class Config:
    """Application configuration settings."""

    # ============================================================================
    # DATASET CONFIGURATION
    # ============================================================================
    DATA_DIR = Path(os.getenv('DATA_DIR', str(PROJECT_ROOT / 'data')))
    STORES_FILE = os.getenv('STORES_FILE', 'store-locations.json')
    CENTERS_FILE = os.getenv('CENTERS_FILE', 'center-locations.json')
    AGGREGATES_FILE = os.getenv('AGGREGATES_FILE', 'city-centers.json')

    # Seconds before the in-memory snapshot is checked against the files again
    DATA_RELOAD_SECONDS = int(os.getenv('DATA_RELOAD_SECONDS', '60'))

    # ============================================================================
    # APPLICATION SETTINGS
    # ============================================================================
    APP_TITLE = "LINAC Access Mapper"
    APP_ICON = "📡"
    APP_DESCRIPTION = "Find store locations that are far from a radiation-therapy center"

    # ============================================================================
    # COVERAGE SETTINGS
    # ============================================================================
    DEFAULT_RADIUS_MILES = 35.0
    MIN_RADIUS_MILES = 5.0
    MAX_RADIUS_MILES = 150.0

    # Mean Earth radius used by every distance calculation
    EARTH_RADIUS_MILES = 3958.8

    # Degrees on both axes when matching a center to a city aggregate
    AGGREGATE_MATCH_TOLERANCE = 0.01

    # Compare state stores against centers nationwide; false keeps in-state centers only
    CROSS_BORDER_COVERAGE = os.getenv('CROSS_BORDER_COVERAGE', 'true').lower() == 'true'

    # ============================================================================
    # BOUNDARY LOOKUP SETTINGS
    # ============================================================================
    BOUNDARY_TIMEOUT = float(os.getenv('BOUNDARY_TIMEOUT', '10'))  # seconds
    BOUNDARY_USER_AGENT = "LINAC-Access-Mapper/1.0"
    BOUNDARY_WORKERS = 4

    # ============================================================================
    # MAP SETTINGS
    # ============================================================================
    # Default map center (US center)
    DEFAULT_MAP_CENTER = (39.8283, -98.5795)
    DEFAULT_MAP_ZOOM = 4

    # Map tile provider
    MAP_TILES = "OpenStreetMap"

    # Region boundary style
    BOUNDARY_COLOR = "#0d6efd"
    BOUNDARY_WEIGHT = 2
    BOUNDARY_FILL_OPACITY = 0.1

    # Marker colors
    COVERED_STORE_COLOR = '#0d6efd'    # Blue
    UNCOVERED_STORE_COLOR = '#fd7e14'  # Orange
    CENTER_COLOR = '#dc3545'           # Red
    RADIUS_COLOR = '#f03'

    METERS_PER_MILE = 1609.34

    # Marker cluster settings
    USE_MARKER_CLUSTERS = True

    # ============================================================================
    # UI SETTINGS
    # ============================================================================
    SIDEBAR_STATE = "expanded"

    # ============================================================================
    # CACHE SETTINGS
    # ============================================================================
    CACHE_TTL = 60  # seconds

    # ============================================================================
    # LOGGING SETTINGS
    # ============================================================================
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls) -> bool:
        """
        Validate that all required configuration is present.

        Returns:
            True if valid, False otherwise
        """
        if not cls.DATA_DIR.is_dir():
            print(f"ERROR: data directory not found: {cls.DATA_DIR}")
            return False

        for name in (cls.STORES_FILE, cls.CENTERS_FILE):
            if not (cls.DATA_DIR / name).is_file():
                print(f"ERROR: required dataset file missing: {cls.DATA_DIR / name}")
                return False

        return True


# Create a singleton config instance
config = Config()


if __name__ == "__main__":
    """Test configuration loading."""
    print("=" * 60)
    print("Configuration Test")
    print("=" * 60)

    print("\nDataset Configuration:")
    print(f"  Data directory: {Config.DATA_DIR}")
    print(f"  Stores: {Config.STORES_FILE}")
    print(f"  Centers: {Config.CENTERS_FILE}")
    print(f"  Aggregates: {Config.AGGREGATES_FILE}")

    print("\nCoverage Settings:")
    print(f"  Default radius: {Config.DEFAULT_RADIUS_MILES} miles")
    print(f"  Earth radius: {Config.EARTH_RADIUS_MILES} miles")
    print(f"  Cross-border coverage: {Config.CROSS_BORDER_COVERAGE}")

    print("\nValidation:")
    if Config.validate():
        print("  ✓ Configuration is valid")
    else:
        print("  ✗ Configuration is invalid")
