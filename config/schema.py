"""
Schema definitions for every table that flows through the footprint pipeline.

Defines internal column names, the columns each input table must carry,
and the column order of every intermediate and output table.
Raw source headers are translated to these names by config/column_mapping.py.
"""

# ---------------------------------------------------------------------------
# Shared key columns
# ---------------------------------------------------------------------------
ITEM: str = "Item"
AREA: str = "Area"
ELEMENT: str = "Element"
VALUE: str = "Value"
YEAR: str = "Year"

# ---------------------------------------------------------------------------
# Food balance (FAOSTAT) fields after pivoting
# ---------------------------------------------------------------------------
PRODUCTION: str = "Production"
IMPORT_QUANTITY: str = "Import Quantity"
EXPORT_QUANTITY: str = "Export Quantity"
FOOD_SUPPLY: str = "Food Supply (kg/capita/yr)"

IMPORT_DEPENDENCY_RATIO: str = "Import Dependency Ratio"
DOMESTIC_SUPPLY: str = "Domestic Supply"
IMPORTED_SUPPLY: str = "Imported Supply"

# ---------------------------------------------------------------------------
# Trade flows (Resource Trade Earth)
# ---------------------------------------------------------------------------
EXPORTER: str = "Exporter"
COMMODITY: str = "Commodity"
WEIGHT: str = "Weight (1000kg)"
TOTAL_WEIGHT: str = "Total Weight"
PERCENTAGE: str = "Percentage"

# ---------------------------------------------------------------------------
# Matching tables
# ---------------------------------------------------------------------------
FAOSTAT_NAME: str = "FAOSTAT Name"
TRADE_NAME: str = "Trade Name"
FAOSTAT_PRODUCT: str = "FAOSTAT Product"
IMPACT_PRODUCT: str = "Impact Product"
TRADE_LOCATION: str = "Trade Location"
IMPACT_LOCATION: str = "Impact Location"

# ---------------------------------------------------------------------------
# Impact factors (BIOVALENT) and results
# ---------------------------------------------------------------------------
IMPACT_FACTOR: str = "Impact Factor"
ORIGIN_COUNTRY: str = "Origin Country"
SUPPLY: str = "Supply"
SOURCE: str = "Source"
TOTAL_IMPACT: str = "Total Impact"
TOTAL_CONSUMPTION: str = "Total Consumption"

# Values of the SOURCE column.
DOMESTIC: str = "Domestic"
IMPORTED: str = "Imported"

# ---------------------------------------------------------------------------
# Required columns per input table.
# A table missing any of these aborts the run with SchemaViolationError.
# ---------------------------------------------------------------------------
FOOD_BALANCE_RAW_COLUMNS: list[str] = [ITEM, AREA, ELEMENT, VALUE]
TRADE_FLOW_COLUMNS: list[str] = [EXPORTER, COMMODITY, WEIGHT]
IMPACT_FACTOR_COLUMNS: list[str] = [IMPACT_PRODUCT, IMPACT_LOCATION, IMPACT_FACTOR]
TRADE_NAME_MATCHING_COLUMNS: list[str] = [FAOSTAT_NAME, TRADE_NAME]
PRODUCT_MATCHING_COLUMNS: list[str] = [FAOSTAT_PRODUCT, IMPACT_PRODUCT]
LOCATION_MATCHING_COLUMNS: list[str] = [TRADE_LOCATION, IMPACT_LOCATION]

# ---------------------------------------------------------------------------
# Column order of intermediate and output tables
# ---------------------------------------------------------------------------
FOOD_BALANCE_COLUMNS: list[str] = [
    ITEM,
    AREA,
    PRODUCTION,
    IMPORT_QUANTITY,
    EXPORT_QUANTITY,
    FOOD_SUPPLY,
]

CONSUMPTION_SPLIT_COLUMNS: list[str] = FOOD_BALANCE_COLUMNS + [
    IMPORT_DEPENDENCY_RATIO,
    DOMESTIC_SUPPLY,
    IMPORTED_SUPPLY,
]

TRADE_SHARE_COLUMNS: list[str] = [COMMODITY, EXPORTER, TOTAL_WEIGHT, PERCENTAGE]

ATTRIBUTED_COLUMNS: list[str] = [
    ITEM,
    AREA,
    TRADE_NAME,
    ORIGIN_COUNTRY,
    SUPPLY,
    SOURCE,
]

IMPACT_DETAIL_COLUMNS: list[str] = ATTRIBUTED_COLUMNS + [
    IMPACT_PRODUCT,
    IMPACT_LOCATION,
    IMPACT_FACTOR,
    TOTAL_IMPACT,
]

SUMMARY_COLUMNS: list[str] = [ITEM, TOTAL_IMPACT, TOTAL_CONSUMPTION]
