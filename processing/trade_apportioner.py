"""
Trade apportioner — turns bilateral trade flows into per-commodity
exporter shares.

For each commodity the total traded weight is summed per exporter and
expressed as a percentage of the commodity's total:

    Percentage = 100 * exporter weight / commodity weight

Missing weights count as 0.  A commodity whose total weight is 0 has no
defined shares; all of its exporters are dropped and the commodity is
listed in degenerate_commodities instead of producing NaN percentages.

The reference-year filter is applied by the caller through
filter_reference_year(); the year is a run parameter, not a constant.

Public API:
    filter_reference_year(trade, reference_year) → pd.DataFrame
    apportion_trade(trade) → TradeApportionmentResult
"""

import logging
from dataclasses import dataclass, field

import pandas as pd

from config import schema
from processing.name_reconciler import clean_column
from processing.validation import validate_columns

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class TradeApportionmentResult:
    """Output of the apportion_trade() function."""

    dataframe: pd.DataFrame = field(default_factory=pd.DataFrame)
    degenerate_commodities: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def filter_reference_year(trade: pd.DataFrame, reference_year: int) -> pd.DataFrame:
    """
    Keep only trade rows recorded in the reference year.

    Year values stored as text or floats ("2022", 2022.0) are compared
    numerically.

    Args:
        trade: Trade flow table with a Year column.
        reference_year: Year to keep.

    Returns:
        Filtered copy of the table.
    """
    validate_columns(trade, [schema.YEAR], "trade flows")

    years = pd.to_numeric(trade[schema.YEAR], errors="coerce")
    filtered = trade[years == int(reference_year)].copy()

    logger.info(
        f"Trade flows filtered to {reference_year}: "
        f"{len(filtered)} of {len(trade)} rows kept"
    )
    return filtered.reset_index(drop=True)


def apportion_trade(trade: pd.DataFrame) -> TradeApportionmentResult:
    """
    Compute each exporter's percentage share of every commodity.

    Args:
        trade: Trade flow table with Exporter, Commodity and Weight columns.

    Returns:
        TradeApportionmentResult with TRADE_SHARE_COLUMNS and the list of
        commodities dropped for having zero total weight.
    """
    validate_columns(trade, schema.TRADE_FLOW_COLUMNS, "trade flows")

    output_columns = schema.TRADE_SHARE_COLUMNS

    if trade.empty:
        logger.info("No trade flows to apportion")
        return TradeApportionmentResult(dataframe=pd.DataFrame(columns=output_columns))

    flows = pd.DataFrame({
        schema.COMMODITY: clean_column(trade[schema.COMMODITY]),
        schema.EXPORTER: clean_column(trade[schema.EXPORTER]),
        schema.WEIGHT: pd.to_numeric(trade[schema.WEIGHT], errors="coerce").fillna(0.0),
    })

    # A flow without a commodity name can never be matched to an item
    no_commodity = flows[schema.COMMODITY].isna()
    if no_commodity.any():
        logger.warning(f"Skipping {int(no_commodity.sum())} trade rows without a commodity")
        flows = flows[~no_commodity]

    # Sum weight per (commodity, exporter); missing exporters stay as a group
    grouped = (
        flows
        .groupby([schema.COMMODITY, schema.EXPORTER], dropna=False, sort=True)[schema.WEIGHT]
        .sum()
        .reset_index()
        .rename(columns={schema.WEIGHT: schema.TOTAL_WEIGHT})
    )

    commodity_totals = grouped.groupby(schema.COMMODITY)[schema.TOTAL_WEIGHT].transform("sum")

    degenerate_mask = commodity_totals == 0
    degenerate_commodities = list(dict.fromkeys(grouped.loc[degenerate_mask, schema.COMMODITY]))

    if degenerate_commodities:
        logger.warning(
            f"Dropping {len(degenerate_commodities)} commodities with zero "
            f"total trade weight: {degenerate_commodities}"
        )

    result = grouped[~degenerate_mask].copy()
    result[schema.PERCENTAGE] = 100 * result[schema.TOTAL_WEIGHT] / commodity_totals[~degenerate_mask]

    logger.info(
        f"Trade apportionment complete: "
        f"{result[schema.COMMODITY].nunique()} commodities, "
        f"{len(result)} exporter shares"
    )

    return TradeApportionmentResult(
        dataframe=result[output_columns].reset_index(drop=True),
        degenerate_commodities=degenerate_commodities,
    )
