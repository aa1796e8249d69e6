"""
Footprint pipeline — runs the five-stage biodiversity footprint computation.

Stages:
    1. Consumption split  - FAOSTAT rows → domestic vs imported supply
    2. Trade shares       - RTE flows → exporter percentage per commodity
    3. Name reconciliation (feeds stages 4 and 5)
    4. Origin attribution - supply per (item, origin country)
    5. Impact aggregation - BIOVALENT factors joined and summed per item

The run is a pure function of the input tables, the country and the
reference year.  Only schema violations abort it.

Public API:
    run_footprint(inputs, country, reference_year) → FootprintResult
"""

import logging
import time
from dataclasses import dataclass, field

import pandas as pd

from config import schema
from processing.consumption_splitter import (
    ConsumptionSplitResult,
    pivot_food_balance,
    split_consumption,
)
from processing.coverage_checker import CoverageReport, check_coverage
from processing.impact_aggregator import join_impact_factors, summarize_impacts
from processing.name_reconciler import NameReconciler, clean_column, clean_text
from processing.origin_attributor import attribute_origins
from processing.trade_apportioner import (
    TradeApportionmentResult,
    apportion_trade,
    filter_reference_year,
)
from processing.validation import validate_columns

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class FootprintInputs:
    """The six tables a run consumes, with internal column names."""

    food_balance: pd.DataFrame
    trade_flows: pd.DataFrame
    impact_factors: pd.DataFrame
    trade_name_matching: pd.DataFrame
    product_matching: pd.DataFrame
    location_matching: pd.DataFrame


@dataclass
class FootprintResult:
    """Every intermediate and final table of one run."""

    country: str | None = None
    reference_year: int | None = None
    consumption: ConsumptionSplitResult = field(default_factory=ConsumptionSplitResult)
    trade: TradeApportionmentResult = field(default_factory=TradeApportionmentResult)
    attributed: pd.DataFrame = field(default_factory=pd.DataFrame)
    impact_detail: pd.DataFrame = field(default_factory=pd.DataFrame)
    summary: pd.DataFrame = field(default_factory=pd.DataFrame)
    coverage: CoverageReport = field(default_factory=CoverageReport)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def run_footprint(
    inputs: FootprintInputs,
    country: str | None,
    reference_year: int | None,
) -> FootprintResult:
    """
    Run the complete footprint pipeline.

    Args:
        inputs: Input tables (see FootprintInputs).
        country: Consuming country; food balance rows are restricted to this
                 Area.  None keeps every area.
        reference_year: Trade flows are restricted to this Year.  None keeps
                        every row.

    Returns:
        FootprintResult with the consumption split, trade shares, attributed
        fact table, impact detail, impact summary and coverage report.

    Raises:
        SchemaViolationError: If an input table lacks a required column.
    """
    start_time = time.time()
    _validate_inputs(inputs, reference_year)

    logger.info("=" * 70)
    logger.info(f"BIODIVERSITY FOODPRINT: {country or 'all areas'}, {reference_year or 'all years'}")
    logger.info("=" * 70)

    trade_reconciler = NameReconciler(
        inputs.trade_name_matching, schema.FAOSTAT_NAME, schema.TRADE_NAME, "FAOSTAT → RTE"
    )
    product_reconciler = NameReconciler(
        inputs.product_matching, schema.FAOSTAT_PRODUCT, schema.IMPACT_PRODUCT, "FAOSTAT → BIOVALENT product"
    )
    location_reconciler = NameReconciler(
        inputs.location_matching, schema.TRADE_LOCATION, schema.IMPACT_LOCATION, "RTE → BIOVALENT location"
    )

    # Stage 1: Consumption split
    logger.info("Stage 1: Consumption split")
    food_balance = _filter_area(inputs.food_balance, country)
    consumption = split_consumption(pivot_food_balance(food_balance))

    # Stage 2: Trade shares
    logger.info("Stage 2: Trade apportionment")
    trade_flows = inputs.trade_flows
    if reference_year is not None:
        trade_flows = filter_reference_year(trade_flows, reference_year)
    trade = apportion_trade(trade_flows)

    # Stage 4: Origin attribution
    logger.info("Stage 4: Origin attribution")
    attributed = attribute_origins(consumption.dataframe, trade.dataframe, trade_reconciler)

    # Stage 5: Impact aggregation
    logger.info("Stage 5: Impact aggregation")
    impact_detail = join_impact_factors(
        attributed, product_reconciler, location_reconciler, inputs.impact_factors
    )
    summary = summarize_impacts(impact_detail, attributed)

    coverage = check_coverage(
        consumption,
        trade,
        attributed,
        impact_detail,
        summary,
        trade_reconciler,
        product_reconciler,
        location_reconciler,
    )

    elapsed = time.time() - start_time
    logger.info(
        f"Pipeline complete in {elapsed:.1f}s: {len(summary)} items, "
        f"total impact {summary[schema.TOTAL_IMPACT].sum():.6g}"
    )

    return FootprintResult(
        country=country,
        reference_year=reference_year,
        consumption=consumption,
        trade=trade,
        attributed=attributed,
        impact_detail=impact_detail,
        summary=summary,
        coverage=coverage,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _validate_inputs(inputs: FootprintInputs, reference_year: int | None) -> None:
    """Check every input table up front so a bad file fails before any work."""
    validate_columns(inputs.food_balance, schema.FOOD_BALANCE_RAW_COLUMNS, "food balance")

    trade_columns = list(schema.TRADE_FLOW_COLUMNS)
    if reference_year is not None:
        trade_columns.append(schema.YEAR)
    validate_columns(inputs.trade_flows, trade_columns, "trade flows")

    validate_columns(inputs.impact_factors, schema.IMPACT_FACTOR_COLUMNS, "impact factors")
    validate_columns(inputs.trade_name_matching, schema.TRADE_NAME_MATCHING_COLUMNS, "trade name matching")
    validate_columns(inputs.product_matching, schema.PRODUCT_MATCHING_COLUMNS, "product matching")
    validate_columns(inputs.location_matching, schema.LOCATION_MATCHING_COLUMNS, "location matching")


def _filter_area(food_balance: pd.DataFrame, country: str | None) -> pd.DataFrame:
    """Keep food balance rows whose cleaned Area equals the country."""
    if country is None:
        return food_balance

    target = clean_text(country)
    filtered = food_balance[clean_column(food_balance[schema.AREA]) == target].copy()

    if filtered.empty and not food_balance.empty:
        areas = sorted({str(a) for a in food_balance[schema.AREA].dropna().unique()})
        logger.warning(f"No food balance rows for area '{country}'. Areas present: {areas}")
    else:
        logger.info(f"Food balance filtered to '{country}': {len(filtered)} of {len(food_balance)} rows")

    return filtered.reset_index(drop=True)
