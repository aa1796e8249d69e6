"""
Consumption splitter — divides per-capita food supply into domestic and
imported shares.

FAOSTAT food balance data arrives in long format: one row per
(Item, Area, Element) with a single Value.  pivot_food_balance() turns this
into one row per item with Production / Import / Export / Food Supply
fields.  split_consumption() then applies the import dependency ratio:

    IDR      = Import / (Production + Import - Export)
    Domestic = (1 - IDR) * Food Supply
    Imported = IDR * Food Supply

A zero denominator leaves the ratio undefined.  Such items get NaN for the
ratio and both supply shares and are listed in undefined_items; they are
never coerced to 0.

Public API:
    pivot_food_balance(raw) → pd.DataFrame
    split_consumption(food_balance) → ConsumptionSplitResult
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from config import schema
from config.column_mapping import ELEMENT_FIELDS
from processing.name_reconciler import clean_text
from processing.validation import SchemaViolationError, validate_columns

logger = logging.getLogger(__name__)

_QUANTITY_FIELDS: list[str] = [
    schema.PRODUCTION,
    schema.IMPORT_QUANTITY,
    schema.EXPORT_QUANTITY,
    schema.FOOD_SUPPLY,
]

# Lowercased element label → pivot field
_ELEMENT_LOOKUP: dict[str, str] = {label.lower(): name for label, name in ELEMENT_FIELDS.items()}


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ConsumptionSplitResult:
    """Output of the split_consumption() function."""

    dataframe: pd.DataFrame = field(default_factory=pd.DataFrame)
    undefined_items: list[str] = field(default_factory=list)
    """Items whose import dependency denominator is zero."""

    out_of_range_items: list[str] = field(default_factory=list)
    """Items whose ratio falls outside [0, 1] (e.g. exports exceed supply)."""


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def pivot_food_balance(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Pivot long-format FAOSTAT rows into one row per (Item, Area).

    Item and Area are cleaned with clean_text() before grouping, and element
    labels are matched case-insensitively.  Values for duplicate
    (item, element) pairs are summed, missing values count as 0, and
    elements absent for an item default to 0.  Only the elements listed in
    ELEMENT_FIELDS are extracted.

    Args:
        raw: Table with Item, Area, Element and Value columns.

    Returns:
        DataFrame with FOOD_BALANCE_COLUMNS, in first-seen item order.

    Raises:
        SchemaViolationError: If a non-empty table lacks one of the
            ELEMENT_FIELDS elements for every item.
    """
    validate_columns(raw, schema.FOOD_BALANCE_RAW_COLUMNS, "food balance")

    totals: dict[tuple[str, str], dict[str, float]] = {}
    seen_fields: set[str] = set()
    ignored_elements: set[str] = set()

    for record in raw[schema.FOOD_BALANCE_RAW_COLUMNS].to_dict("records"):
        key = (clean_text(record[schema.ITEM]), clean_text(record[schema.AREA]))
        fields = totals.setdefault(key, {name: 0.0 for name in _QUANTITY_FIELDS})

        element = clean_text(record[schema.ELEMENT]) or ""
        field_name = _ELEMENT_LOOKUP.get(element.lower())
        if field_name is None:
            ignored_elements.add(element)
            continue
        seen_fields.add(field_name)

        value = pd.to_numeric(record[schema.VALUE], errors="coerce")
        if pd.notna(value):
            fields[field_name] += float(value)

    if ignored_elements:
        logger.debug(f"Ignored food balance elements: {sorted(ignored_elements)}")

    missing_elements = [
        label for label, field_name in ELEMENT_FIELDS.items() if field_name not in seen_fields
    ]
    if totals and missing_elements:
        present = sorted(
            {label for label, f in ELEMENT_FIELDS.items() if f in seen_fields} | ignored_elements
        )
        logger.error(f"Food balance lacks elements {missing_elements}; present: {present}")
        raise SchemaViolationError("food balance elements", missing_elements, present)

    rows = [
        {schema.ITEM: item, schema.AREA: area, **fields}
        for (item, area), fields in totals.items()
    ]

    logger.info(f"Pivoted {len(raw)} food balance rows into {len(rows)} items")
    return pd.DataFrame(rows, columns=schema.FOOD_BALANCE_COLUMNS)


def split_consumption(food_balance: pd.DataFrame) -> ConsumptionSplitResult:
    """
    Split each item's food supply into domestic and imported quantities.

    Args:
        food_balance: Pivoted table (output of pivot_food_balance).

    Returns:
        ConsumptionSplitResult with CONSUMPTION_SPLIT_COLUMNS, the items with
        an undefined ratio, and the items with a ratio outside [0, 1].
    """
    validate_columns(food_balance, schema.FOOD_BALANCE_COLUMNS, "pivoted food balance")

    result_df = food_balance.copy()
    ratios: list[float] = []
    undefined_items: list[str] = []
    out_of_range_items: list[str] = []

    for idx in result_df.index:
        item = result_df.at[idx, schema.ITEM]
        ratio = _import_dependency_ratio(
            result_df.at[idx, schema.PRODUCTION],
            result_df.at[idx, schema.IMPORT_QUANTITY],
            result_df.at[idx, schema.EXPORT_QUANTITY],
        )
        ratios.append(ratio)

        if np.isnan(ratio):
            undefined_items.append(item)
        elif ratio < 0 or ratio > 1:
            out_of_range_items.append(item)

    result_df[schema.IMPORT_DEPENDENCY_RATIO] = pd.Series(ratios, index=result_df.index, dtype=float)
    supply = result_df[schema.FOOD_SUPPLY].astype(float)
    result_df[schema.DOMESTIC_SUPPLY] = (1 - result_df[schema.IMPORT_DEPENDENCY_RATIO]) * supply
    result_df[schema.IMPORTED_SUPPLY] = result_df[schema.IMPORT_DEPENDENCY_RATIO] * supply

    if undefined_items:
        logger.warning(
            f"Import dependency ratio undefined (zero denominator) for "
            f"{len(undefined_items)} items: {undefined_items}"
        )
    if out_of_range_items:
        logger.warning(
            f"Import dependency ratio outside [0, 1] for "
            f"{len(out_of_range_items)} items: {out_of_range_items}"
        )

    logger.info(
        f"Consumption split complete: {len(result_df)} items, "
        f"{len(undefined_items)} undefined ratios"
    )

    return ConsumptionSplitResult(
        dataframe=result_df[schema.CONSUMPTION_SPLIT_COLUMNS],
        undefined_items=undefined_items,
        out_of_range_items=out_of_range_items,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _import_dependency_ratio(
    production: float,
    import_quantity: float,
    export_quantity: float,
) -> float:
    """
    Share of supply that comes from imports.

    Returns:
        import / (production + import - export), or NaN when the
        denominator is zero.
    """
    denominator = float(production) + float(import_quantity) - float(export_quantity)
    if denominator == 0:
        return np.nan
    return float(import_quantity) / denominator
