"""
Input validation utilities for the LINAC Access Mapper.

Provides functions to validate and sanitize user inputs
for region codes and search radii.
"""

import math
import re
from typing import Any, Optional

from config import Config


def sanitize_input(text: str) -> str:
    """
    Sanitize user input by removing extra whitespace and normalizing case.

    Args:
        text: Input text to sanitize

    Returns:
        Sanitized text (upper case, single spaces)
    """
    if not text or not isinstance(text, str):
        return ""

    # Strip leading/trailing whitespace
    text = text.strip()

    # Replace multiple spaces with single space
    text = re.sub(r'\s+', ' ', text)

    return text.upper()


def validate_region_code(region: str) -> bool:
    """
    Validate that a region identifier looks like a two-letter code.

    Args:
        region: State code or the nation sentinel

    Returns:
        True if valid, False otherwise
    """
    if not region or not isinstance(region, str):
        return False

    region = region.strip()

    if len(region) != 2:
        return False

    return bool(re.match(r"^[A-Za-z]{2}$", region))


def validate_radius(radius: Any) -> Optional[float]:
    """
    Parse a search radius in miles.

    Args:
        radius: Raw radius (number or numeric string)

    Returns:
        Radius as float, the default radius when missing, or None when invalid
    """
    if radius is None or (isinstance(radius, str) and not radius.strip()):
        return Config.DEFAULT_RADIUS_MILES

    if isinstance(radius, bool):
        return None

    try:
        value = float(radius)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(value) or value <= 0:
        return None

    return value


def format_error_message(field: str, error_type: str) -> str:
    """
    Format a user-friendly error message.

    Args:
        field: Field name that has an error
        error_type: Type of error

    Returns:
        Formatted error message
    """
    error_messages = {
        'empty': f"{field} cannot be empty",
        'invalid': f"{field} is not valid",
        'not_found': f"{field} not found",
        'unavailable': f"{field} is currently unavailable",
    }

    return error_messages.get(error_type, f"Invalid {field}")
