"""
Map building utilities for the LINAC Access Mapper.

Provides functions to create and customize Folium maps
for visualizing region boundaries, store locations and centers.
"""

import logging
import traceback
from typing import Any, Dict, Optional, Sequence, Tuple

import folium
from branca.element import MacroElement
from folium.plugins import MarkerCluster
from jinja2 import Template

from config import Config
from utils.geo_utils import get_boundary_bounds, is_valid_coordinate

logger = logging.getLogger(__name__)


def create_base_map(
    center: Optional[Tuple[float, float]] = None,
    zoom: Optional[int] = None
) -> folium.Map:
    """
    Create a base Folium map.

    Args:
        center: (latitude, longitude) tuple for map center
        zoom: Initial zoom level

    Returns:
        Folium Map object
    """
    if center is None:
        center = Config.DEFAULT_MAP_CENTER

    if zoom is None:
        zoom = Config.DEFAULT_MAP_ZOOM

    m = folium.Map(
        location=center,
        zoom_start=zoom,
        tiles=Config.MAP_TILES,
        control_scale=True,
        prefer_canvas=True
    )

    return m


def add_boundary_to_map(
    map_obj: folium.Map,
    geometry: Dict[str, Any],
    display_name: str,
    zoom_to_bounds: bool = True
) -> folium.Map:
    """
    Add a region boundary to a Folium map.

    Args:
        map_obj: Folium Map object
        geometry: GeoJSON Polygon/MultiPolygon mapping
        display_name: Region name for the tooltip
        zoom_to_bounds: Whether to zoom map to boundary extent

    Returns:
        Updated Folium Map object
    """
    try:
        if not geometry:
            logger.warning("Empty boundary geometry")
            return map_obj

        folium.GeoJson(
            {'type': 'Feature', 'geometry': geometry, 'properties': {'name': display_name}},
            name='Region Boundary',
            style_function=lambda x: {
                'fillColor': Config.BOUNDARY_COLOR,
                'color': Config.BOUNDARY_COLOR,
                'weight': Config.BOUNDARY_WEIGHT,
                'fillOpacity': Config.BOUNDARY_FILL_OPACITY
            },
            tooltip=folium.Tooltip(f"<b>{display_name}</b>")
        ).add_to(map_obj)

        if zoom_to_bounds:
            bounds = get_boundary_bounds(geometry)
            if bounds:
                map_obj.fit_bounds([list(bounds[0]), list(bounds[1])])

        return map_obj

    except Exception as e:
        logger.error(f"Error adding boundary to map: {e}")
        logger.error(traceback.format_exc())
        return map_obj


def add_stores_to_map(
    map_obj: folium.Map,
    classifications: Sequence[Any],
    hide_covered: bool = False,
    use_clusters: bool = True
) -> folium.Map:
    """
    Add classified stores to a Folium map.

    Args:
        map_obj: Folium Map object
        classifications: StoreClassification items from the coverage engine
        hide_covered: Only show stores that are outside the radius
        use_clusters: Whether to use marker clustering

    Returns:
        Updated Folium Map object
    """
    try:
        if not classifications:
            logger.warning("No stores to add to map")
            return map_obj

        if use_clusters and Config.USE_MARKER_CLUSTERS:
            parent = MarkerCluster(
                name='Stores',
                overlay=True,
                control=True
            ).add_to(map_obj)
        else:
            parent = map_obj

        added = 0
        for item in classifications:
            store = item.store
            if hide_covered and item.covered:
                continue
            if not is_valid_coordinate(store.latitude, store.longitude):
                continue

            color = Config.COVERED_STORE_COLOR if item.covered else Config.UNCOVERED_STORE_COLOR
            distance = (
                f"{item.nearest_distance:.1f} miles" if item.nearest_distance is not None else "N/A"
            )

            popup_html = f"""
            <div style="font-family: Arial, sans-serif; min-width: 150px;">
                <h4 style="margin: 0 0 10px 0;">{store.name or 'Unnamed Store'}</h4>
                <p style="margin: 5px 0;">
                    {store.street_address}<br>
                    {store.city}, {store.region or ''}<br>
                    <b>Nearest center:</b> {distance}
                </p>
            </div>
            """

            folium.CircleMarker(
                location=[store.latitude, store.longitude],
                radius=5,
                popup=folium.Popup(popup_html, max_width=300),
                tooltip=store.name or 'Store',
                color="black",
                fill=True,
                fillColor=color,
                fillOpacity=0.7,
                weight=1
            ).add_to(parent)
            added += 1

        logger.info(f"Added {added} store markers")
        return map_obj

    except Exception as e:
        logger.error(f"Error adding stores to map: {e}")
        logger.error(traceback.format_exc())
        return map_obj


def add_centers_to_map(
    map_obj: folium.Map,
    centers: Sequence[Any]
) -> folium.Map:
    """
    Add radiation-therapy centers to a Folium map.

    Args:
        map_obj: Folium Map object
        centers: CenterPoint records

    Returns:
        Updated Folium Map object
    """
    try:
        layer = folium.FeatureGroup(name='LINAC Centers').add_to(map_obj)

        for center in centers:
            if not is_valid_coordinate(center.latitude, center.longitude):
                continue

            linacs = center.capacity if center.capacity is not None else 'N/A'
            folium.Marker(
                location=[center.latitude, center.longitude],
                popup=folium.Popup(
                    f"<strong>LINAC Center</strong><br>{center.name}<br>LINACs: {linacs}",
                    max_width=250
                ),
                tooltip=center.name,
                icon=folium.Icon(color='red', icon='plus-sign', prefix='glyphicon')
            ).add_to(layer)

        return map_obj

    except Exception as e:
        logger.error(f"Error adding centers to map: {e}")
        logger.error(traceback.format_exc())
        return map_obj


def add_radius_circle_to_map(
    map_obj: folium.Map,
    point: Tuple[float, float],
    radius_miles: float
) -> folium.Map:
    """
    Draw a search-radius circle around a selected location.

    Args:
        map_obj: Folium Map object
        point: (latitude, longitude) tuple
        radius_miles: Search radius in miles

    Returns:
        Updated Folium Map object
    """
    try:
        lat, lon = point

        folium.Circle(
            location=[lat, lon],
            radius=radius_miles * Config.METERS_PER_MILE,
            color='red',
            fill=True,
            fillColor=Config.RADIUS_COLOR,
            fillOpacity=0.1,
            weight=2,
            tooltip=f"{radius_miles:g} mile radius"
        ).add_to(map_obj)

        return map_obj

    except Exception as e:
        logger.error(f"Error adding radius circle to map: {e}")
        logger.error(traceback.format_exc())
        return map_obj


def create_legend() -> str:
    """
    Create HTML legend for the marker colours.

    Returns:
        HTML string for legend
    """
    entries = [
        (Config.UNCOVERED_STORE_COLOR, 'Store outside radius'),
        (Config.COVERED_STORE_COLOR, 'Store within radius'),
        (Config.CENTER_COLOR, 'LINAC center'),
    ]

    legend_html = '''
    <div id="map-legend" style="
        position: absolute;
        bottom: 20px;
        left: 10px;
        width: 190px;
        background-color: white;
        border: 2px solid #333;
        border-radius: 8px;
        padding: 10px;
        font-family: 'Arial', sans-serif;
        font-size: 13px;
        z-index: 1000;
    ">
    '''

    for color, label in entries:
        legend_html += f'''
        <div style="margin: 6px 0; display: flex; align-items: center;">
            <span style="
                display: inline-block;
                width: 12px;
                height: 12px;
                background-color: {color};
                border-radius: 50%;
                margin-right: 8px;
                border: 1px solid #333;
            "></span>
            <span style="color: #333;">{label}</span>
        </div>
        '''

    legend_html += '</div>'

    return legend_html


def add_legend_to_map(map_obj: folium.Map) -> folium.Map:
    """
    Add the legend to the map.

    Args:
        map_obj: Folium Map object

    Returns:
        Updated Folium Map object
    """
    try:
        template = """
        {% macro html(this, kwargs) %}
        """ + create_legend() + """
        {% endmacro %}
        """

        macro = MacroElement()
        macro._template = Template(template)

        map_obj.get_root().add_child(macro)

        return map_obj

    except Exception as e:
        logger.error(f"Error adding legend to map: {e}")
        logger.error(traceback.format_exc())
        return map_obj


def create_full_map(
    classifications: Sequence[Any],
    centers: Sequence[Any],
    boundary: Optional[Any] = None,
    display_name: str = "",
    hide_covered: bool = False,
    selected_point: Optional[Tuple[float, float]] = None,
    radius_miles: float = Config.DEFAULT_RADIUS_MILES
) -> folium.Map:
    """
    Create a complete map with boundary, stores, centers and legend.

    Args:
        classifications: StoreClassification items to draw
        centers: CenterPoint records to draw
        boundary: Optional BoundaryResult; skipped unless it is available
        display_name: Region name for the boundary tooltip
        hide_covered: Only show stores outside the radius
        selected_point: Optional (lat, lon) to draw the radius around
        radius_miles: Search radius in miles

    Returns:
        Complete Folium Map object
    """
    try:
        m = create_base_map()

        if boundary is not None and boundary.is_available:
            m = add_boundary_to_map(m, boundary.geometry, display_name)

        if selected_point is not None:
            m = add_radius_circle_to_map(m, selected_point, radius_miles)

        m = add_centers_to_map(m, centers)
        m = add_stores_to_map(m, classifications, hide_covered=hide_covered)
        m = add_legend_to_map(m)

        folium.LayerControl().add_to(m)

        return m

    except Exception as e:
        logger.error(f"Error creating full map: {e}")
        return create_base_map()
