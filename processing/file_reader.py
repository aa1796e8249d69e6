"""
Input file reader for the footprint pipeline.

Reads the six input tables from .xlsx (via openpyxl) or .csv files and
renames raw source headers to the internal names in config/schema.py.
Schema validation is left to the pipeline stages so that a missing column
is reported against the table that needs it.

Public API:
    read_table(file_path, sheet_name) → pd.DataFrame
    rename_columns(dataframe, column_map) → pd.DataFrame
    load_inputs(data_dir, file_overrides) → FootprintInputs
"""

import logging
from pathlib import Path

import pandas as pd

from config.column_mapping import (
    FOOD_BALANCE_COLUMN_MAP,
    IMPACT_FACTOR_COLUMN_MAP,
    LOCATION_MATCHING_COLUMN_MAP,
    PRODUCT_MATCHING_COLUMN_MAP,
    TRADE_FLOW_COLUMN_MAP,
    TRADE_NAME_MATCHING_COLUMN_MAP,
)
from config.source_config import DEFAULT_INPUT_FILES, SUPPORTED_SUFFIXES
from processing.footprint_pipeline import FootprintInputs

logger = logging.getLogger(__name__)

# Table key → raw header map applied after reading.
_COLUMN_MAPS: dict[str, dict[str, str]] = {
    "food_balance": FOOD_BALANCE_COLUMN_MAP,
    "trade_flows": TRADE_FLOW_COLUMN_MAP,
    "impact_factors": IMPACT_FACTOR_COLUMN_MAP,
    "trade_name_matching": TRADE_NAME_MATCHING_COLUMN_MAP,
    "product_matching": PRODUCT_MATCHING_COLUMN_MAP,
    "location_matching": LOCATION_MATCHING_COLUMN_MAP,
}


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def read_table(file_path: Path, sheet_name: str | None = None) -> pd.DataFrame:
    """
    Read one table from an .xlsx or .csv file.

    Args:
        file_path: Path to the file.
        sheet_name: Worksheet to read from an .xlsx file (first sheet when
                    None).  Ignored for .csv files.

    Returns:
        The table as read, with original headers.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file type is not supported.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: '{file_path}'")

    suffix = file_path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported file type '{suffix}' for '{file_path.name}'. "
            f"Supported: {sorted(SUPPORTED_SUFFIXES)}"
        )

    if suffix == ".csv":
        dataframe = pd.read_csv(file_path)
    else:
        dataframe = pd.read_excel(
            file_path,
            sheet_name=sheet_name if sheet_name is not None else 0,
            engine="openpyxl",
        )

    sheet_info = f", sheet '{sheet_name}'" if sheet_name and suffix != ".csv" else ""
    logger.info(f"Read {len(dataframe)} rows from '{file_path.name}'{sheet_info}")
    return dataframe


def rename_columns(dataframe: pd.DataFrame, column_map: dict[str, str]) -> pd.DataFrame:
    """
    Rename raw headers to internal column names.

    Headers are stripped of surrounding whitespace before lookup.  Headers
    not in column_map are kept unchanged.
    """
    renamed = dataframe.copy()
    renamed.columns = [str(col).strip() for col in renamed.columns]
    return renamed.rename(columns=column_map)


def load_inputs(
    data_dir: Path,
    file_overrides: dict[str, tuple[str, str | None]] | None = None,
) -> FootprintInputs:
    """
    Load every input table from data_dir.

    Args:
        data_dir: Directory holding the input files.
        file_overrides: Optional table key → (file name, sheet name) entries
                        replacing DEFAULT_INPUT_FILES.  File names may be
                        absolute paths.

    Returns:
        FootprintInputs with internal column names.
    """
    data_dir = Path(data_dir)
    files = {**DEFAULT_INPUT_FILES, **(file_overrides or {})}

    tables: dict[str, pd.DataFrame] = {}
    for key, column_map in _COLUMN_MAPS.items():
        file_name, sheet_name = files[key]
        raw = read_table(data_dir / file_name, sheet_name)
        tables[key] = rename_columns(raw, column_map)

    return FootprintInputs(**tables)
