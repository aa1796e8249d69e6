"""
Tests for processing/file_reader.py

Covers: reading .csv and .xlsx files (first sheet and named sheets), header
renaming from the raw source names, loading the full input set from a data
directory with overrides, and error handling.
"""

from pathlib import Path

import pandas as pd
import pytest

from config import schema
from config.column_mapping import TRADE_FLOW_COLUMN_MAP
from processing.file_reader import load_inputs, read_table, rename_columns
from processing.footprint_pipeline import FootprintInputs


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write_xlsx(path: Path, sheets: dict[str, pd.DataFrame]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    return path


def _write_data_dir(data_dir: Path) -> Path:
    """Write a minimal set of input files under their default names."""
    pd.DataFrame({
        "Area": ["Brazil"], "Item": ["Wheat"], "Element": ["Production"],
        "Year": [2022], "Value": [100],
    }).to_csv(data_dir / "FAOSTAT_data.csv", index=False)

    _write_xlsx(data_dir / "RTE_data.xlsx", {
        "Notes": pd.DataFrame({"Info": ["Downloaded from resourcetrade.earth"]}),
        "Trades": pd.DataFrame({
            "Exporter": ["Argentina"], "Resource": ["Wheat"],
            "Weight (1000kg)": [30], "Year": [2022],
        }),
    })
    _write_xlsx(data_dir / "BIOVALENT.xlsx", {
        "Sheet1": pd.DataFrame({
            "factor_name": ["wheat"], "food_location": ["ARG"], "impact_factor": [0.4],
        }),
    })
    _write_xlsx(data_dir / "FAO_RTE_matching.xlsx", {
        "Sheet1": pd.DataFrame({"FAOSTAT_name": ["Wheat"], "RTE_name": ["Wheat"]}),
    })
    _write_xlsx(data_dir / "FAO_BIOVALENT_matching.xlsx", {
        "Product": pd.DataFrame({
            "FAOSTAT_product_name": ["Wheat"], "BIOVALENT_product_name": ["wheat"],
        }),
        "Location": pd.DataFrame({
            "RTE_location_name": ["Argentina"], "BIOVALENT_location_name": ["ARG"],
        }),
    })
    return data_dir


# ═══════════════════════════════════════════════════════════════════════════
# read_table
# ═══════════════════════════════════════════════════════════════════════════

class TestReadTable:
    def test_reads_csv(self, tmp_path):
        path = tmp_path / "table.csv"
        pd.DataFrame({"a": [1, 2], "b": ["x", "y"]}).to_csv(path, index=False)

        df = read_table(path)
        assert list(df.columns) == ["a", "b"]
        assert len(df) == 2

    def test_reads_first_sheet_by_default(self, tmp_path):
        path = _write_xlsx(tmp_path / "book.xlsx", {
            "First": pd.DataFrame({"a": [1]}),
            "Second": pd.DataFrame({"b": [2]}),
        })
        assert list(read_table(path).columns) == ["a"]

    def test_reads_named_sheet(self, tmp_path):
        path = _write_xlsx(tmp_path / "book.xlsx", {
            "First": pd.DataFrame({"a": [1]}),
            "Second": pd.DataFrame({"b": [2]}),
        })
        assert list(read_table(path, "Second").columns) == ["b"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_table(tmp_path / "absent.xlsx")

    def test_unsupported_suffix_raises(self, tmp_path):
        path = tmp_path / "table.json"
        path.write_text("{}")
        with pytest.raises(ValueError, match="Unsupported file type"):
            read_table(path)


# ═══════════════════════════════════════════════════════════════════════════
# rename_columns
# ═══════════════════════════════════════════════════════════════════════════

class TestRenameColumns:
    def test_raw_headers_renamed(self):
        raw = pd.DataFrame(columns=["Exporter", "Resource", "Weight (1000kg)", "Importer"])
        renamed = rename_columns(raw, TRADE_FLOW_COLUMN_MAP)
        assert list(renamed.columns) == [
            schema.EXPORTER, schema.COMMODITY, schema.WEIGHT, "Importer",
        ]

    def test_headers_stripped_before_lookup(self):
        raw = pd.DataFrame(columns=[" Resource ", "Exporter"])
        renamed = rename_columns(raw, TRADE_FLOW_COLUMN_MAP)
        assert schema.COMMODITY in renamed.columns

    def test_input_not_mutated(self):
        raw = pd.DataFrame(columns=["Resource"])
        rename_columns(raw, TRADE_FLOW_COLUMN_MAP)
        assert list(raw.columns) == ["Resource"]


# ═══════════════════════════════════════════════════════════════════════════
# load_inputs
# ═══════════════════════════════════════════════════════════════════════════

class TestLoadInputs:
    def test_loads_default_file_set(self, tmp_path):
        inputs = load_inputs(_write_data_dir(tmp_path))

        assert isinstance(inputs, FootprintInputs)
        assert schema.VALUE in inputs.food_balance.columns
        assert inputs.trade_flows.loc[0, schema.COMMODITY] == "Wheat"
        assert inputs.impact_factors.loc[0, schema.IMPACT_FACTOR] == pytest.approx(0.4)
        assert list(inputs.trade_name_matching.columns) == schema.TRADE_NAME_MATCHING_COLUMNS
        assert list(inputs.product_matching.columns) == schema.PRODUCT_MATCHING_COLUMNS
        assert list(inputs.location_matching.columns) == schema.LOCATION_MATCHING_COLUMNS

    def test_override_replaces_one_file(self, tmp_path):
        data_dir = _write_data_dir(tmp_path)
        pd.DataFrame({
            "Area": ["Peru"], "Item": ["Maize"], "Element": ["Production"], "Value": [1],
        }).to_csv(data_dir / "FAOSTAT_peru.csv", index=False)

        inputs = load_inputs(data_dir, {"food_balance": ("FAOSTAT_peru.csv", None)})
        assert inputs.food_balance.loc[0, schema.AREA] == "Peru"
        assert inputs.trade_flows.loc[0, schema.EXPORTER] == "Argentina"

    def test_missing_file_raises(self, tmp_path):
        data_dir = _write_data_dir(tmp_path)
        (data_dir / "BIOVALENT.xlsx").unlink()
        with pytest.raises(FileNotFoundError):
            load_inputs(data_dir)
