"""
Utility functions for the LINAC Access Mapper.

This package contains helper modules for:
- Input validation
- Distance and geometry processing
- Map building and visualization
"""

from .validation import (
    format_error_message,
    validate_region_code,
    validate_radius,
    sanitize_input
)

from .geo_utils import (
    calculate_distance,
    is_valid_coordinate,
    is_within_radius,
    parse_coordinate
)

__all__ = [
    # Validation
    'format_error_message',
    'validate_region_code',
    'validate_radius',
    'sanitize_input',

    # Geo utilities
    'calculate_distance',
    'is_valid_coordinate',
    'is_within_radius',
    'parse_coordinate',
]
