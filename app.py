"""
LINAC Access Mapper - Streamlit Application

A dashboard that maps store locations against radiation-therapy (LINAC)
centers and reports, per state or nationwide, how many stores are
farther than a chosen radius from any center.
"""

import logging

import streamlit as st
from streamlit_folium import st_folium

from boundary_fetcher import BoundaryFetcher
from config import Config
from coverage_engine import classify_stores, compute_region_metrics
from dataset_loader import DatasetLoadError, DatasetManager
from exporters import classification_frame, export_classification_csv, export_metrics_json
from models import CoverageResult
from regions import NATION, get_display_name, list_cities, list_regions, resolve_region
from utils.geo_utils import boundary_contains, is_valid_coordinate
from utils.logger_config import setup_logging
from utils.map_builder import create_full_map
from utils.validation import format_error_message, validate_radius

setup_logging()
logger = logging.getLogger(__name__)

# Page configuration
st.set_page_config(
    page_title=Config.APP_TITLE,
    page_icon=Config.APP_ICON,
    layout="wide",
    initial_sidebar_state=Config.SIDEBAR_STATE
)

# Custom CSS
st.markdown("""
    <style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #0d6efd;
        text-align: center;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        font-size: 1.1rem;
        color: #666;
        text-align: center;
        margin-bottom: 2rem;
    }
    .stat-box {
        background-color: #f0f2f6;
        padding: 1rem;
        border-radius: 0.5rem;
        margin: 0.5rem 0;
    }
    .stat-number {
        font-size: 2rem;
        font-weight: bold;
        color: #0d6efd;
    }
    .stat-label {
        font-size: 0.9rem;
        color: #666;
    }
    </style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_dataset_manager() -> DatasetManager:
    """Create the dataset manager once per server process."""
    manager = DatasetManager()
    manager.load()
    return manager


@st.cache_resource
def get_boundary_fetcher() -> BoundaryFetcher:
    """Create the boundary fetcher once per server process."""
    return BoundaryFetcher()


@st.cache_data(ttl=Config.CACHE_TTL)
def get_metrics(region: str, radius: float, version: str, _snapshot) -> CoverageResult:
    """Metrics are cached per (region, radius, dataset version)."""
    return compute_region_metrics(_snapshot, region, radius)


def initialize_session_state():
    """Initialize session state variables."""
    if 'region' not in st.session_state:
        st.session_state.region = NATION
    if 'radius' not in st.session_state:
        st.session_state.radius = Config.DEFAULT_RADIUS_MILES
    if 'hide_covered' not in st.session_state:
        st.session_state.hide_covered = False
    if 'show_stores' not in st.session_state:
        st.session_state.show_stores = True
    if 'selected_point' not in st.session_state:
        st.session_state.selected_point = None


def render_header():
    """Render the application header."""
    st.markdown(f'<div class="main-header">{Config.APP_ICON} {Config.APP_TITLE}</div>',
                unsafe_allow_html=True)
    st.markdown(f'<div class="sub-header">{Config.APP_DESCRIPTION}</div>',
                unsafe_allow_html=True)


def render_sidebar(snapshot):
    """Render the sidebar with region and radius selection."""
    st.sidebar.header("📍 Select a Region")

    options = [NATION] + list_regions(snapshot)
    current = st.session_state.region if st.session_state.region in options else NATION

    region = st.sidebar.selectbox(
        "State",
        options=options,
        index=options.index(current),
        format_func=lambda code: f"{get_display_name(code)} ({code})"
    )

    radius = st.sidebar.slider(
        "Radius (miles)",
        min_value=Config.MIN_RADIUS_MILES,
        max_value=Config.MAX_RADIUS_MILES,
        value=float(st.session_state.radius),
        step=5.0,
        help="Distance from a store to the nearest LINAC center"
    )

    parsed = validate_radius(radius)
    if parsed is None:
        st.sidebar.error(format_error_message("Radius", "invalid"))
        parsed = Config.DEFAULT_RADIUS_MILES

    if region != st.session_state.region:
        st.session_state.selected_point = None

    st.session_state.region = region
    st.session_state.radius = parsed

    cities = list_cities(snapshot, region)
    with st.sidebar.expander(f"Cities with LINAC centers ({len(cities)})"):
        if cities:
            st.write(", ".join(cities))
        else:
            st.write("None Found")

    st.sidebar.divider()
    st.session_state.show_stores = st.sidebar.toggle(
        "List stores (off: list centers)", value=st.session_state.show_stores
    )
    st.session_state.hide_covered = st.sidebar.checkbox(
        "Hide stores within radius",
        value=st.session_state.hide_covered
    )

    st.sidebar.divider()
    st.sidebar.caption(
        f"Dataset version {snapshot.version} · loaded {snapshot.loaded_at:%Y-%m-%d %H:%M}"
    )


def render_statistics(metrics: dict):
    """Render the coverage metrics for the current region."""
    region = metrics['region']
    scope = "Nationwide" if region == NATION else "in State"

    st.subheader(f"📊 Dashboard - {get_display_name(region)}")

    cards = [
        (metrics['storesOutsideRange'], f"Stores Not Within {metrics['radiusMiles']:g} Miles of LINAC"),
        (metrics['totalStores'], f"Total Stores {scope}"),
        (metrics['centersInRegion'], f"LINAC Centers {scope}"),
        (metrics['linacsInRegion'], f"Total LINACs {scope}"),
    ]

    cols = st.columns(len(cards))
    for col, (value, label) in zip(cols, cards):
        col.markdown(
            f"""
            <div class="stat-box">
                <div class="stat-number">{value}</div>
                <div class="stat-label">{label}</div>
            </div>
            """,
            unsafe_allow_html=True
        )

    st.caption(f"{metrics['coveragePercentage']:.1f}% of stores are within range")


def render_map(selection, classifications, boundary):
    """Render the interactive map."""
    st.subheader("🗺️ Interactive Map")

    if boundary is not None and not boundary.is_available:
        st.warning(f"State boundary unavailable: {boundary.message}")

    with st.spinner("Creating map..."):
        m = create_full_map(
            classifications,
            selection.centers,
            boundary=boundary,
            display_name=selection.display_name,
            hide_covered=st.session_state.hide_covered,
            selected_point=st.session_state.selected_point,
            radius_miles=st.session_state.radius
        )

        st_folium(
            m,
            width=1200,
            height=600,
            returned_objects=[],
            key="main_map"
        )


def render_location_list(selection, classifications, boundary):
    """Render the list of stores or centers shown on the map."""
    st.subheader("📋 Locations")

    def in_view(lat, lon) -> bool:
        # Without a boundary the list falls back to the region codes alone
        if selection.is_nation or boundary is None or not boundary.is_available:
            return True
        if not is_valid_coordinate(lat, lon):
            return True
        return boundary_contains(boundary.geometry, lat, lon)

    if st.session_state.show_stores:
        visible = [
            c for c in classifications
            if in_view(c.store.latitude, c.store.longitude)
            and not (st.session_state.hide_covered and c.covered)
        ]
        if not visible:
            st.write("None Found")
            return

        df = classification_frame(visible)
        st.dataframe(df, use_container_width=True, hide_index=True)

        options = list(range(len(visible)))
        choice = st.selectbox(
            "Show radius around store",
            options=[None] + options,
            format_func=lambda i: "None" if i is None else f"{visible[i].store.name}, {visible[i].store.city}"
        )
        if choice is not None:
            store = visible[choice].store
            point = (store.latitude, store.longitude)
            if store.has_valid_coordinates and st.session_state.selected_point != point:
                st.session_state.selected_point = point
                st.rerun()
    else:
        centers = [c for c in selection.centers if in_view(c.latitude, c.longitude)]
        if not centers:
            st.write("None Found")
            return
        st.dataframe(
            [{'name': c.name, 'state': c.region, 'linacs': c.capacity} for c in centers],
            use_container_width=True,
            hide_index=True
        )


def render_exports(result: CoverageResult, classifications):
    """Render CSV/JSON download buttons."""
    st.subheader("⬇️ Export")

    region = result.region
    col1, col2 = st.columns(2)

    col1.download_button(
        "Metrics (JSON)",
        data=export_metrics_json(result),
        file_name=f"metrics-{region}.json",
        mime="application/json",
        use_container_width=True
    )
    col2.download_button(
        "Stores (CSV)",
        data=export_classification_csv(classifications),
        file_name=f"stores-{region}.csv",
        mime="text/csv",
        use_container_width=True
    )


def main():
    """Main application function."""
    initialize_session_state()
    render_header()

    try:
        snapshot = get_dataset_manager().get_snapshot()
    except DatasetLoadError as e:
        logger.error(f"Could not load dataset: {e}")
        st.error(f"Could not load dataset: {e}")
        st.stop()

    render_sidebar(snapshot)

    region = st.session_state.region
    radius = st.session_state.radius

    result = get_metrics(region, radius, snapshot.version, snapshot)
    render_statistics(result.to_dict())
    st.divider()

    selection = resolve_region(snapshot, region)
    classifications = classify_stores(
        selection.stores,
        snapshot.centers if Config.CROSS_BORDER_COVERAGE else selection.centers,
        radius
    )

    boundary = None
    if not selection.is_nation:
        with st.spinner(f"Fetching boundary for {selection.display_name}..."):
            boundary = get_boundary_fetcher().resolve_boundary(region)

    render_map(selection, classifications, boundary)
    st.divider()
    render_location_list(selection, classifications, boundary)
    st.divider()
    render_exports(result, classifications)


if __name__ == "__main__":
    main()
