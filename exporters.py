"""
Export helpers for the LINAC Access Mapper.

Turns coverage metrics and per-store classifications into CSV and JSON
text for the dashboard download buttons.
"""

import json
import logging
from typing import List, Sequence

import pandas as pd

from models import CoverageResult, StoreClassification

logger = logging.getLogger(__name__)

CLASSIFICATION_COLUMNS = [
    'name', 'street_address', 'city', 'state',
    'latitude', 'longitude', 'nearest_center_miles', 'covered',
]


def metrics_frame(results: Sequence[CoverageResult]) -> pd.DataFrame:
    """
    Build a table with one row of metrics per result.

    Args:
        results: Coverage results (e.g. one per region)

    Returns:
        DataFrame of metrics
    """
    return pd.DataFrame([r.to_dict() for r in results])


def export_metrics_json(result: CoverageResult) -> str:
    """
    Serialize one coverage result as JSON.

    Args:
        result: Coverage result

    Returns:
        Pretty-printed JSON string
    """
    return json.dumps(result.to_dict(), indent=2)


def export_metrics_csv(results: Sequence[CoverageResult]) -> str:
    """
    Serialize coverage results as CSV.

    Args:
        results: Coverage results

    Returns:
        CSV text with a header row
    """
    return metrics_frame(results).to_csv(index=False)


def classification_frame(classifications: Sequence[StoreClassification]) -> pd.DataFrame:
    """
    Build a table of stores with their nearest-center distance.

    Args:
        classifications: Output of coverage_engine.classify_stores

    Returns:
        DataFrame sorted with uncovered stores first, farthest first
    """
    rows: List[dict] = []
    for item in classifications:
        store = item.store
        rows.append({
            'name': store.name,
            'street_address': store.street_address,
            'city': store.city,
            'state': store.region,
            'latitude': store.latitude,
            'longitude': store.longitude,
            'nearest_center_miles': (
                round(item.nearest_distance, 2) if item.nearest_distance is not None else None
            ),
            'covered': item.covered,
        })

    df = pd.DataFrame(rows, columns=CLASSIFICATION_COLUMNS)
    if df.empty:
        return df

    return df.sort_values(
        by=['covered', 'nearest_center_miles'],
        ascending=[True, False],
        na_position='first',
        kind='stable',
    ).reset_index(drop=True)


def export_classification_csv(classifications: Sequence[StoreClassification]) -> str:
    """
    Serialize store classifications as CSV.

    Args:
        classifications: Output of coverage_engine.classify_stores

    Returns:
        CSV text with a header row
    """
    df = classification_frame(classifications)
    logger.info(f"Exporting {len(df)} store classifications")
    return df.to_csv(index=False)
