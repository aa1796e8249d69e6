"""
Origin attributor — assigns every unit of supplied food to an origin country.

Builds the central fact table with one row per (item, origin):

  - Domestic branch: the item's domestic supply, attributed to the consuming
    country itself.  One row per item.
  - Imported branch: the item's imported supply, distributed over exporters
    by trade share.  Items are mapped to trade commodity names through the
    FAOSTAT → RTE matching table (many-to-many); each matched commodity fans
    out into one row per exporter with

        Supply = Imported Supply * Percentage / 100

Items with an undefined import ratio, no trade-name match, or no trade shares
for their commodity contribute no imported rows.  No fallback shares are
invented, so imported mass is only conserved for fully matched items.

Public API:
    attribute_origins(consumption, trade_shares, trade_reconciler) → pd.DataFrame
"""

import logging

import numpy as np
import pandas as pd

from config import schema
from processing.name_reconciler import MatchStatus, NameReconciler, clean_text
from processing.validation import validate_columns

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def attribute_origins(
    consumption: pd.DataFrame,
    trade_shares: pd.DataFrame,
    trade_reconciler: NameReconciler,
) -> pd.DataFrame:
    """
    Combine the consumption split and trade shares into the fact table.

    Args:
        consumption: ConsumptionSplit table (output of split_consumption).
        trade_shares: TradeShare table (output of apportion_trade).
        trade_reconciler: FAOSTAT name → trade name reconciler.

    Returns:
        DataFrame with ATTRIBUTED_COLUMNS: domestic rows followed by
        imported rows.
    """
    validate_columns(
        consumption,
        [schema.ITEM, schema.AREA, schema.DOMESTIC_SUPPLY, schema.IMPORTED_SUPPLY],
        "consumption split",
    )
    validate_columns(trade_shares, schema.TRADE_SHARE_COLUMNS, "trade shares")

    domestic_rows = _domestic_rows(consumption)
    imported_rows = _imported_rows(consumption, trade_shares, trade_reconciler)

    logger.info(
        f"Origin attribution complete: {len(domestic_rows)} domestic rows, "
        f"{len(imported_rows)} imported rows"
    )

    return pd.DataFrame(domestic_rows + imported_rows, columns=schema.ATTRIBUTED_COLUMNS)


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _domestic_rows(consumption: pd.DataFrame) -> list[dict]:
    """One Domestic row per item; the origin is the consuming area."""
    rows: list[dict] = []
    for idx in consumption.index:
        area = consumption.at[idx, schema.AREA]
        rows.append({
            schema.ITEM: consumption.at[idx, schema.ITEM],
            schema.AREA: area,
            schema.TRADE_NAME: None,
            schema.ORIGIN_COUNTRY: area,
            schema.SUPPLY: float(consumption.at[idx, schema.DOMESTIC_SUPPLY]),
            schema.SOURCE: schema.DOMESTIC,
        })
    return rows


def _imported_rows(
    consumption: pd.DataFrame,
    trade_shares: pd.DataFrame,
    trade_reconciler: NameReconciler,
) -> list[dict]:
    """Distribute each item's imported supply over its exporters."""
    shares_by_commodity = _group_shares(trade_shares)

    rows: list[dict] = []
    unmatched_items: list[str] = []
    items_without_shares: list[str] = []

    for idx in consumption.index:
        item = consumption.at[idx, schema.ITEM]
        imported = float(consumption.at[idx, schema.IMPORTED_SUPPLY])

        # Undefined ratio: the imported quantity cannot be attributed
        if np.isnan(imported):
            continue

        match = trade_reconciler.match(item)
        if match.status is MatchStatus.UNMATCHED:
            unmatched_items.append(item)
            continue

        for trade_name in match.targets:
            exporters = shares_by_commodity.get(trade_name)
            if not exporters:
                items_without_shares.append(item)
                continue

            for exporter, percentage in exporters:
                rows.append({
                    schema.ITEM: item,
                    schema.AREA: consumption.at[idx, schema.AREA],
                    schema.TRADE_NAME: trade_name,
                    schema.ORIGIN_COUNTRY: exporter,
                    schema.SUPPLY: imported * percentage / 100,
                    schema.SOURCE: schema.IMPORTED,
                })

    if unmatched_items:
        logger.warning(
            f"{len(unmatched_items)} items have no trade name and get no "
            f"imported rows: {unmatched_items}"
        )
    if items_without_shares:
        logger.warning(
            f"{len(set(items_without_shares))} items map to a trade name "
            f"without trade shares: {sorted(set(items_without_shares), key=str)}"
        )

    return rows


def _group_shares(trade_shares: pd.DataFrame) -> dict[str, list[tuple[str, float]]]:
    """Index trade shares as commodity → [(exporter, percentage), ...]."""
    grouped: dict[str, list[tuple[str, float]]] = {}
    for record in trade_shares[schema.TRADE_SHARE_COLUMNS].to_dict("records"):
        exporter = clean_text(record[schema.EXPORTER])
        grouped.setdefault(clean_text(record[schema.COMMODITY]), []).append(
            (exporter, float(record[schema.PERCENTAGE]))
        )
    return grouped
