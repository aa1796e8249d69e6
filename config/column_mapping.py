"""
Column name mapping configuration.

Maps the raw headers of each downloaded source file to the internal column
names defined in config/schema.py.  Headers not listed here are kept as-is,
so a file that already uses the internal names needs no mapping.
"""

from config import schema

# ---------------------------------------------------------------------------
# FAOSTAT food balance sheet (long format: one row per Item × Element)
# ---------------------------------------------------------------------------
FOOD_BALANCE_COLUMN_MAP: dict[str, str] = {
    "Item": schema.ITEM,
    "Area": schema.AREA,
    "Element": schema.ELEMENT,
    "Value": schema.VALUE,
    "Year": schema.YEAR,
}

# ---------------------------------------------------------------------------
# Resource Trade Earth "Trades" sheet
# ---------------------------------------------------------------------------
TRADE_FLOW_COLUMN_MAP: dict[str, str] = {
    "Exporter": schema.EXPORTER,
    "Resource": schema.COMMODITY,
    "Weight (1000kg)": schema.WEIGHT,
    "Year": schema.YEAR,
}

# ---------------------------------------------------------------------------
# BIOVALENT impact factors
# ---------------------------------------------------------------------------
IMPACT_FACTOR_COLUMN_MAP: dict[str, str] = {
    "factor_name": schema.IMPACT_PRODUCT,
    "food_location": schema.IMPACT_LOCATION,
    "impact_factor": schema.IMPACT_FACTOR,
}

# ---------------------------------------------------------------------------
# Manual matching tables
# ---------------------------------------------------------------------------
TRADE_NAME_MATCHING_COLUMN_MAP: dict[str, str] = {
    "FAOSTAT_name": schema.FAOSTAT_NAME,
    "RTE_name": schema.TRADE_NAME,
}

PRODUCT_MATCHING_COLUMN_MAP: dict[str, str] = {
    "FAOSTAT_product_name": schema.FAOSTAT_PRODUCT,
    "BIOVALENT_product_name": schema.IMPACT_PRODUCT,
}

LOCATION_MATCHING_COLUMN_MAP: dict[str, str] = {
    "RTE_location_name": schema.TRADE_LOCATION,
    "BIOVALENT_location_name": schema.IMPACT_LOCATION,
}

# ---------------------------------------------------------------------------
# FAOSTAT element labels → pivoted food balance fields.
# Elements not listed here (e.g. "Food supply (kcal/capita/day)") are ignored.
# ---------------------------------------------------------------------------
ELEMENT_FIELDS: dict[str, str] = {
    "Production": schema.PRODUCTION,
    "Import quantity": schema.IMPORT_QUANTITY,
    "Export quantity": schema.EXPORT_QUANTITY,
    "Food supply quantity (kg/capita/yr)": schema.FOOD_SUPPLY,
}
