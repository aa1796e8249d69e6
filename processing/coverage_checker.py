"""
Coverage checker — reports every place where the cross-dataset joins lost
data.

Partial coverage is the normal operating condition for this pipeline, so
gaps are collected rather than raised:
  1. Consumption split: undefined and out-of-range import ratios.
  2. Trade shares: commodities dropped for zero total weight.
  3. Trade names: items with no trade name, trade names with no shares,
     and imported supply that could not be attributed.
  4. Impact joins: unmatched products and locations, and matched
     (product, location) pairs with no impact factor.
  5. Summary: items whose total impact is zero.

Unmatched names carry a fuzzy suggestion taken from the matching table's own
source names, which usually points at a spelling difference.

Public API:
    check_coverage(...) → CoverageReport
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from config import schema
from config.source_config import SUGGESTION_THRESHOLD
from processing.consumption_splitter import ConsumptionSplitResult
from processing.name_reconciler import NameReconciler, clean_text
from processing.trade_apportioner import TradeApportionmentResult
from utils.fuzzy_match import suggest_matches

logger = logging.getLogger(__name__)

# Relative shortfall below which imported supply counts as fully attributed.
_ATTRIBUTION_TOLERANCE: float = 1e-6


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CoverageReport:
    """Every coverage gap found in one pipeline run."""

    total_items: int = 0
    total_attributed_rows: int = 0
    undefined_ratio_items: list[str] = field(default_factory=list)
    out_of_range_items: list[str] = field(default_factory=list)
    degenerate_commodities: list[str] = field(default_factory=list)
    items_without_trade_name: list[dict] = field(default_factory=list)
    trade_names_without_shares: list[str] = field(default_factory=list)
    unattributed_imports: list[dict] = field(default_factory=list)
    ambiguous_mappings: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    unmatched_products: list[dict] = field(default_factory=list)
    unmatched_locations: list[dict] = field(default_factory=list)
    missing_impact_factors: list[dict] = field(default_factory=list)
    zero_impact_items: list[str] = field(default_factory=list)
    is_complete: bool = True


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def check_coverage(
    consumption: ConsumptionSplitResult,
    trade: TradeApportionmentResult,
    attributed: pd.DataFrame,
    impact_detail: pd.DataFrame,
    summary: pd.DataFrame,
    trade_reconciler: NameReconciler,
    product_reconciler: NameReconciler,
    location_reconciler: NameReconciler,
    suggestion_threshold: int = SUGGESTION_THRESHOLD,
) -> CoverageReport:
    """
    Collect all coverage gaps of one run into a CoverageReport.

    Args:
        consumption: Result of split_consumption().
        trade: Result of apportion_trade().
        attributed: AttributedSupply fact table.
        impact_detail: Output of join_impact_factors().
        summary: Output of summarize_impacts().
        trade_reconciler: FAOSTAT name → trade name reconciler.
        product_reconciler: FAOSTAT product → BIOVALENT product reconciler.
        location_reconciler: RTE location → BIOVALENT location reconciler.
        suggestion_threshold: Minimum thefuzz score for a name suggestion.

    Returns:
        CoverageReport; is_complete is True only when no gap was found.
    """
    report = CoverageReport()
    split_df = consumption.dataframe

    report.total_items = len(split_df)
    report.total_attributed_rows = len(attributed)
    report.undefined_ratio_items = list(consumption.undefined_items)
    report.out_of_range_items = list(consumption.out_of_range_items)
    report.degenerate_commodities = list(trade.degenerate_commodities)

    # Trade-name coverage
    unmatched_items = trade_reconciler.unmatched(split_df[schema.ITEM])
    report.items_without_trade_name = _with_suggestions(
        unmatched_items, trade_reconciler.source_names, suggestion_threshold
    )

    share_names = {clean_text(name) for name in trade.dataframe[schema.COMMODITY]}
    mapped_names = {
        target
        for item in split_df[schema.ITEM]
        for target in trade_reconciler.match(item).targets
    }
    report.trade_names_without_shares = sorted(mapped_names - share_names)
    report.unattributed_imports = _unattributed_imports(split_df, attributed)

    # Mapping multiplicities
    for reconciler in (trade_reconciler, product_reconciler, location_reconciler):
        ambiguous = reconciler.ambiguous()
        if ambiguous:
            report.ambiguous_mappings[reconciler.label] = ambiguous

    # Impact-side coverage
    report.unmatched_products = _with_suggestions(
        product_reconciler.unmatched(attributed[schema.ITEM]),
        product_reconciler.source_names,
        suggestion_threshold,
    )
    report.unmatched_locations = _with_suggestions(
        location_reconciler.unmatched(attributed[schema.ORIGIN_COUNTRY]),
        location_reconciler.source_names,
        suggestion_threshold,
    )
    report.missing_impact_factors = _missing_factor_pairs(impact_detail)

    report.zero_impact_items = [
        item for item, impact in zip(summary[schema.ITEM], summary[schema.TOTAL_IMPACT])
        if impact == 0
    ]

    has_gaps = any([
        report.undefined_ratio_items,
        report.degenerate_commodities,
        report.items_without_trade_name,
        report.trade_names_without_shares,
        report.unattributed_imports,
        report.unmatched_products,
        report.unmatched_locations,
        report.missing_impact_factors,
    ])
    report.is_complete = not has_gaps

    logger.info(
        f"Coverage check complete: {report.total_items} items, "
        f"complete={report.is_complete}, "
        f"{len(report.items_without_trade_name)} without trade name, "
        f"{len(report.unmatched_products)} unmatched products, "
        f"{len(report.unmatched_locations)} unmatched locations, "
        f"{len(report.missing_impact_factors)} missing impact factors"
    )

    return report


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _with_suggestions(
    names: list[str],
    candidates: list[str],
    threshold: int,
) -> list[dict]:
    """Pair each unmatched name with its closest known source name, if any."""
    suggestions = suggest_matches(names, candidates, threshold)
    return [{"name": name, "suggestion": suggestions.get(name)} for name in names]


def _unattributed_imports(
    split_df: pd.DataFrame,
    attributed: pd.DataFrame,
) -> list[dict]:
    """
    Items whose imported supply was not fully distributed over exporters.

    Items with an undefined ratio are reported separately and skipped here.
    """
    imported_rows = attributed[attributed[schema.SOURCE] == schema.IMPORTED]
    attributed_totals = imported_rows.groupby(schema.ITEM)[schema.SUPPLY].sum()

    gaps: list[dict] = []
    for item, imported in zip(split_df[schema.ITEM], split_df[schema.IMPORTED_SUPPLY]):
        if pd.isna(imported) or imported == 0:
            continue

        allocated = float(attributed_totals.get(item, 0.0))
        if np.isclose(allocated, imported, rtol=_ATTRIBUTION_TOLERANCE, atol=0.0):
            continue

        gaps.append({
            "item": item,
            "imported_supply": float(imported),
            "attributed_supply": allocated,
        })
    return gaps


def _missing_factor_pairs(impact_detail: pd.DataFrame) -> list[dict]:
    """Distinct matched (product, location) pairs with no impact factor."""
    matched = impact_detail[
        impact_detail[schema.IMPACT_PRODUCT].notna()
        & impact_detail[schema.IMPACT_LOCATION].notna()
        & impact_detail[schema.IMPACT_FACTOR].isna()
    ]
    pairs = matched[[schema.IMPACT_PRODUCT, schema.IMPACT_LOCATION]].drop_duplicates()
    return [
        {"product": product, "location": location}
        for product, location in zip(pairs[schema.IMPACT_PRODUCT], pairs[schema.IMPACT_LOCATION])
    ]
