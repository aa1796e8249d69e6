"""
Schema validation for input tables.

Every stage assumes the column layout in config/schema.py.  A table that is
missing a required column is a structural problem and aborts the run; data
gaps (unmatched names, zero denominators) are handled downstream as values.

Public API:
    validate_columns(dataframe, required, table_name) → None
    SchemaViolationError
"""

import logging

import pandas as pd

logger = logging.getLogger(__name__)


class SchemaViolationError(ValueError):
    """Raised when an input table is missing one or more required columns."""

    def __init__(self, table_name: str, missing: list[str], available: list[str]):
        self.table_name = table_name
        self.missing = missing
        self.available = available
        super().__init__(
            f"Table '{table_name}' is missing required columns: {missing}. "
            f"Available columns: {available}"
        )


def validate_columns(
    dataframe: pd.DataFrame,
    required: list[str],
    table_name: str,
) -> None:
    """
    Raise SchemaViolationError if any required columns are missing.

    Args:
        dataframe: Table to validate.
        required: Column names that must be present.
        table_name: Human-readable table name used in the error message.

    Raises:
        SchemaViolationError: If any required columns are missing.
    """
    missing = [col for col in required if col not in dataframe.columns]
    if missing:
        logger.error(f"Schema violation in '{table_name}': missing {missing}")
        raise SchemaViolationError(table_name, missing, list(dataframe.columns))
