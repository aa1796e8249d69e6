"""
Impact aggregator — attaches BIOVALENT impact factors to the fact table and
summarizes impact per food item.

Join chain (all left joins, keys cleaned on both sides):
  1. Item            → Impact Product   (FAOSTAT → BIOVALENT product table)
  2. Origin Country  → Impact Location  (RTE → BIOVALENT location table)
  3. (Impact Product, Impact Location) → Impact Factor

Total Impact = Supply * Impact Factor per row.  A row with any unmatched
step keeps its supply but has no impact; it contributes 0 to the item's
Total Impact and still counts toward Total Consumption.

Public API:
    join_impact_factors(attributed, product_reconciler, location_reconciler,
                        impact_factors) → pd.DataFrame
    summarize_impacts(impact_detail, attributed) → pd.DataFrame
"""

import logging

import numpy as np
import pandas as pd

from config import schema
from processing.name_reconciler import NameReconciler, clean_text
from processing.validation import validate_columns

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def join_impact_factors(
    attributed: pd.DataFrame,
    product_reconciler: NameReconciler,
    location_reconciler: NameReconciler,
    impact_factors: pd.DataFrame,
) -> pd.DataFrame:
    """
    Build the location-level impact table.

    Args:
        attributed: AttributedSupply fact table (output of attribute_origins).
        product_reconciler: FAOSTAT product → BIOVALENT product reconciler.
        location_reconciler: RTE location → BIOVALENT location reconciler.
        impact_factors: BIOVALENT table with Impact Product, Impact Location
                        and Impact Factor columns.

    Returns:
        DataFrame with IMPACT_DETAIL_COLUMNS.  Rows fan out when a mapping or
        the impact factor table holds several entries for one key.
    """
    validate_columns(attributed, schema.ATTRIBUTED_COLUMNS, "attributed supply")
    validate_columns(impact_factors, schema.IMPACT_FACTOR_COLUMNS, "impact factors")

    detail = product_reconciler.left_join(attributed, schema.ITEM, schema.IMPACT_PRODUCT)
    detail = location_reconciler.left_join(detail, schema.ORIGIN_COUNTRY, schema.IMPACT_LOCATION)

    factor_lookup = _build_factor_lookup(impact_factors)

    rows: list[dict] = []
    missing_factors = 0
    for record in detail.to_dict("records"):
        key = (record[schema.IMPACT_PRODUCT], record[schema.IMPACT_LOCATION])
        factors = factor_lookup.get(key) if None not in key else None

        if not factors:
            missing_factors += 1
            rows.append({**record, schema.IMPACT_FACTOR: np.nan})
            continue

        for factor in factors:
            rows.append({**record, schema.IMPACT_FACTOR: factor})

    result = pd.DataFrame(rows, columns=schema.IMPACT_DETAIL_COLUMNS[:-1])
    result[schema.SUPPLY] = result[schema.SUPPLY].astype(float)
    result[schema.IMPACT_FACTOR] = result[schema.IMPACT_FACTOR].astype(float)
    result[schema.TOTAL_IMPACT] = result[schema.SUPPLY] * result[schema.IMPACT_FACTOR]

    if missing_factors:
        logger.info(f"{missing_factors} supply rows have no impact factor")

    logger.info(f"Impact join complete: {len(result)} location rows")
    return result[schema.IMPACT_DETAIL_COLUMNS]


def summarize_impacts(
    impact_detail: pd.DataFrame,
    attributed: pd.DataFrame,
) -> pd.DataFrame:
    """
    Summarize impact and consumption per food item.

    Total Impact sums the row impacts with missing values as 0.  Total
    Consumption sums Supply over the fact table itself, so it is unaffected
    by impact-factor matches and by fan-out in the impact joins.

    Args:
        impact_detail: Output of join_impact_factors.
        attributed: The AttributedSupply fact table the detail was built from.

    Returns:
        DataFrame with SUMMARY_COLUMNS, one row per distinct item of the
        fact table, sorted by item.
    """
    validate_columns(impact_detail, [schema.ITEM, schema.TOTAL_IMPACT], "impact detail")
    validate_columns(attributed, [schema.ITEM, schema.SUPPLY], "attributed supply")

    items = attributed[schema.ITEM].map(clean_text)

    consumption = (
        pd.DataFrame({schema.ITEM: items, schema.SUPPLY: attributed[schema.SUPPLY].astype(float)})
        .groupby(schema.ITEM, sort=True)[schema.SUPPLY]
        .sum()
        .rename(schema.TOTAL_CONSUMPTION)
    )

    impact = (
        impact_detail
        .groupby(impact_detail[schema.ITEM].map(clean_text))[schema.TOTAL_IMPACT]
        .sum()
        .rename(schema.TOTAL_IMPACT)
    )

    summary = pd.DataFrame(index=consumption.index)
    summary[schema.TOTAL_IMPACT] = impact.reindex(consumption.index).fillna(0.0)
    summary[schema.TOTAL_CONSUMPTION] = consumption

    summary = summary.reset_index()
    summary.columns = schema.SUMMARY_COLUMNS

    zero_impact = int((summary[schema.TOTAL_IMPACT] == 0).sum())
    logger.info(
        f"Impact summary complete: {len(summary)} items, "
        f"{zero_impact} without any matched impact"
    )
    return summary


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _build_factor_lookup(impact_factors: pd.DataFrame) -> dict[tuple[str, str], list[float]]:
    """Index impact factors as (product, location) → [factor, ...]."""
    lookup: dict[tuple[str, str], list[float]] = {}
    for record in impact_factors[schema.IMPACT_FACTOR_COLUMNS].to_dict("records"):
        product = clean_text(record[schema.IMPACT_PRODUCT])
        location = clean_text(record[schema.IMPACT_LOCATION])
        factor = pd.to_numeric(record[schema.IMPACT_FACTOR], errors="coerce")
        if product is None or location is None or pd.isna(factor):
            continue
        lookup.setdefault((product, location), []).append(float(factor))
    return lookup
