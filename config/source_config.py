"""
Run configuration: default country, reference year, and input file layout.

FAOSTAT data is downloaded per country from https://www.fao.org/faostat/en/#data/FBS
(Production, Import quantity, Export quantity, Food supply quantity).
Resource Trade Earth data comes from https://resourcetrade.earth/ with the
importer set to the same country.  The BIOVALENT table and the three
matching tables do not change between runs.
"""

DEFAULT_COUNTRY: str = "Brazil"
DEFAULT_REFERENCE_YEAR: int = 2022

DEFAULT_OUTPUT_FILE: str = "biovalent_table_summary.xlsx"

# ---------------------------------------------------------------------------
# Input files: table key → (file name, sheet name or None for the first sheet)
# ---------------------------------------------------------------------------
DEFAULT_INPUT_FILES: dict[str, tuple[str, str | None]] = {
    "food_balance": ("FAOSTAT_data.csv", None),
    "trade_flows": ("RTE_data.xlsx", "Trades"),
    "impact_factors": ("BIOVALENT.xlsx", None),
    "trade_name_matching": ("FAO_RTE_matching.xlsx", None),
    "product_matching": ("FAO_BIOVALENT_matching.xlsx", "Product"),
    "location_matching": ("FAO_BIOVALENT_matching.xlsx", "Location"),
}

SUPPORTED_SUFFIXES: set[str] = {".xlsx", ".csv"}

# Minimum thefuzz score for a name suggestion in the coverage report.
SUGGESTION_THRESHOLD: int = 80
