"""
Tests for processing/consumption_splitter.py

Covers: pivoting long FAOSTAT rows (summing duplicates, filling missing
elements with 0, ignoring unknown elements, case-insensitive element labels,
cleaned item and area keys, elements absent from the whole table), the
import dependency split, the zero-denominator case, and out-of-range ratios.
"""

import math

import pandas as pd
import pytest

from config import schema
from config.column_mapping import ELEMENT_FIELDS
from processing.consumption_splitter import (
    ConsumptionSplitResult,
    pivot_food_balance,
    split_consumption,
)
from processing.validation import SchemaViolationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_raw(rows: list[tuple[str, str, float]], area: str = "Brazil") -> pd.DataFrame:
    """Build long-format FAOSTAT rows from (item, element, value) triples."""
    return pd.DataFrame(
        [{schema.ITEM: item, schema.AREA: area, schema.ELEMENT: element, schema.VALUE: value}
         for item, element, value in rows]
    )


def _with_reference_item(rows: list[tuple[str, str, float]]) -> pd.DataFrame:
    """Append a zero-valued item carrying every element so the table is complete."""
    reference = [("Reference", label, 0) for label in ELEMENT_FIELDS]
    return _make_raw(rows + reference)


def _make_food_balance(
    item: str = "Wheat",
    production: float = 100.0,
    imports: float = 50.0,
    exports: float = 10.0,
    supply: float = 20.0,
) -> pd.DataFrame:
    return pd.DataFrame([{
        schema.ITEM: item,
        schema.AREA: "Brazil",
        schema.PRODUCTION: production,
        schema.IMPORT_QUANTITY: imports,
        schema.EXPORT_QUANTITY: exports,
        schema.FOOD_SUPPLY: supply,
    }])


# ═══════════════════════════════════════════════════════════════════════════
# Pivot
# ═══════════════════════════════════════════════════════════════════════════

class TestPivotFoodBalance:
    def test_one_row_per_item(self):
        raw = _make_raw([
            ("Wheat", "Production", 100),
            ("Wheat", "Import quantity", 50),
            ("Wheat", "Export quantity", 10),
            ("Wheat", "Food supply quantity (kg/capita/yr)", 20),
            ("Rice", "Production", 300),
        ])
        pivoted = pivot_food_balance(raw)

        assert list(pivoted.columns) == schema.FOOD_BALANCE_COLUMNS
        assert list(pivoted[schema.ITEM]) == ["Wheat", "Rice"]
        wheat = pivoted.iloc[0]
        assert wheat[schema.PRODUCTION] == 100
        assert wheat[schema.IMPORT_QUANTITY] == 50
        assert wheat[schema.EXPORT_QUANTITY] == 10
        assert wheat[schema.FOOD_SUPPLY] == 20

    def test_missing_elements_default_to_zero(self):
        raw = _with_reference_item([("Rice", "Production", 300)])
        rice = pivot_food_balance(raw).iloc[0]
        assert rice[schema.IMPORT_QUANTITY] == 0
        assert rice[schema.EXPORT_QUANTITY] == 0
        assert rice[schema.FOOD_SUPPLY] == 0

    def test_duplicate_pairs_summed(self):
        raw = _with_reference_item([
            ("Wheat", "Import quantity", 20),
            ("Wheat", "Import quantity", 30),
        ])
        assert pivot_food_balance(raw).iloc[0][schema.IMPORT_QUANTITY] == 50

    def test_missing_values_count_as_zero(self):
        raw = _with_reference_item([
            ("Wheat", "Production", None),
            ("Wheat", "Production", 40),
        ])
        assert pivot_food_balance(raw).iloc[0][schema.PRODUCTION] == 40

    def test_unknown_elements_ignored(self):
        raw = _with_reference_item([
            ("Wheat", "Food supply (kcal/capita/day)", 900),
            ("Wheat", "Production", 10),
        ])
        pivoted = pivot_food_balance(raw)
        assert len(pivoted) == 2
        assert pivoted.iloc[0][schema.FOOD_SUPPLY] == 0
        assert pivoted.iloc[0][schema.PRODUCTION] == 10

    def test_element_labels_case_insensitive(self):
        raw = _make_raw([
            ("Wheat", "Production", 100),
            ("Wheat", "Import Quantity", 50),
            ("Wheat", "EXPORT QUANTITY", 10),
            ("Wheat", " Food supply quantity (kg/capita/yr)", 20),
        ])
        wheat = pivot_food_balance(raw).iloc[0]
        assert wheat[schema.IMPORT_QUANTITY] == 50
        assert wheat[schema.EXPORT_QUANTITY] == 10
        assert wheat[schema.FOOD_SUPPLY] == 20

    def test_element_absent_from_whole_table_raises(self):
        raw = _make_raw([
            ("Wheat", "Production", 100),
            ("Wheat", "Imports", 50),
            ("Wheat", "Export quantity", 10),
            ("Wheat", "Food supply quantity (kg/capita/yr)", 20),
        ])
        with pytest.raises(SchemaViolationError) as exc_info:
            pivot_food_balance(raw)
        assert exc_info.value.missing == ["Import quantity"]
        assert "Imports" in exc_info.value.available

    def test_empty_table_does_not_raise(self):
        raw = _make_raw([]).reindex(columns=schema.FOOD_BALANCE_RAW_COLUMNS)
        pivoted = pivot_food_balance(raw)
        assert pivoted.empty
        assert list(pivoted.columns) == schema.FOOD_BALANCE_COLUMNS

    def test_item_and_area_cleaned_before_grouping(self):
        raw = pd.concat([
            _make_raw([
                ("Wheat", "Production", 100),
                ("Wheat", "Food supply quantity (kg/capita/yr)", 20),
            ]),
            _make_raw([
                ("Wheat\u00a0", "Import quantity", 50),
                (" Wheat", "Export quantity", 10),
            ], area="Brazil\u00a0"),
        ], ignore_index=True)
        pivoted = pivot_food_balance(raw)

        assert len(pivoted) == 1
        wheat = pivoted.iloc[0]
        assert wheat[schema.ITEM] == "Wheat"
        assert wheat[schema.AREA] == "Brazil"
        assert wheat[schema.IMPORT_QUANTITY] == 50
        assert wheat[schema.EXPORT_QUANTITY] == 10

    def test_missing_column_raises(self):
        raw = _make_raw([("Wheat", "Production", 10)]).drop(columns=[schema.ELEMENT])
        with pytest.raises(SchemaViolationError) as exc_info:
            pivot_food_balance(raw)
        assert schema.ELEMENT in exc_info.value.missing


# ═══════════════════════════════════════════════════════════════════════════
# Split
# ═══════════════════════════════════════════════════════════════════════════

class TestSplitConsumption:
    def test_wheat_brazil_scenario(self):
        result = split_consumption(_make_food_balance())
        row = result.dataframe.iloc[0]

        assert isinstance(result, ConsumptionSplitResult)
        assert row[schema.IMPORT_DEPENDENCY_RATIO] == pytest.approx(50 / 140)
        assert row[schema.DOMESTIC_SUPPLY] == pytest.approx(12.857142857, abs=1e-6)
        assert row[schema.IMPORTED_SUPPLY] == pytest.approx(7.142857142, abs=1e-6)

    @pytest.mark.parametrize("production,imports,exports,supply", [
        (100, 50, 10, 20),
        (0, 5, 0, 3.5),
        (1000, 1, 999, 12.25),
        (7, 0, 2, 8),
    ])
    def test_shares_add_up_to_supply(self, production, imports, exports, supply):
        row = split_consumption(
            _make_food_balance(production=production, imports=imports, exports=exports, supply=supply)
        ).dataframe.iloc[0]
        total = row[schema.DOMESTIC_SUPPLY] + row[schema.IMPORTED_SUPPLY]
        assert abs(total - supply) <= 1e-9

    def test_zero_denominator_is_undefined(self):
        result = split_consumption(_make_food_balance(production=0, imports=10, exports=10))
        row = result.dataframe.iloc[0]

        assert math.isnan(row[schema.IMPORT_DEPENDENCY_RATIO])
        assert math.isnan(row[schema.DOMESTIC_SUPPLY])
        assert math.isnan(row[schema.IMPORTED_SUPPLY])
        assert result.undefined_items == ["Wheat"]

    def test_all_zero_row_is_undefined(self):
        result = split_consumption(
            _make_food_balance(production=0, imports=0, exports=0, supply=0)
        )
        assert result.undefined_items == ["Wheat"]

    def test_undefined_item_does_not_affect_others(self):
        food_balance = pd.concat([
            _make_food_balance(item="Cloves", production=0, imports=5, exports=5),
            _make_food_balance(item="Wheat"),
        ], ignore_index=True)
        df = split_consumption(food_balance).dataframe

        assert math.isnan(df.iloc[0][schema.IMPORTED_SUPPLY])
        assert df.iloc[1][schema.IMPORTED_SUPPLY] == pytest.approx(20 * 50 / 140)

    def test_exports_exceeding_supply_flagged(self):
        result = split_consumption(_make_food_balance(production=10, imports=20, exports=25))
        assert result.out_of_range_items == ["Wheat"]
        assert result.undefined_items == []

    def test_output_columns(self):
        df = split_consumption(_make_food_balance()).dataframe
        assert list(df.columns) == schema.CONSUMPTION_SPLIT_COLUMNS

    def test_input_not_mutated(self):
        food_balance = _make_food_balance()
        split_consumption(food_balance)
        assert schema.IMPORTED_SUPPLY not in food_balance.columns
