"""
Excel formatter — writes the footprint results to a formatted workbook.

Sheet 1: "Impact Summary"   — total impact and consumption per food item.
Sheet 2: "Location Detail"  — supply and impact per item and origin country,
         with yellow highlighting on rows that matched no impact factor.
Sheet 3: "Coverage Report"  — undefined ratios, dropped commodities and
         unmatched names with suggestions.
Sheet 4: "Run Info"         — country, reference year and input files.

Public API:
    format_and_save(result, output_path, run_info) → Path
"""

import logging
from datetime import datetime
from pathlib import Path

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
import pandas as pd

from config import schema
from processing.coverage_checker import CoverageReport
from processing.footprint_pipeline import FootprintResult

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════

_YELLOW_FILL = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
_NORMAL_FONT = Font(size=10)
_BOLD_FONT = Font(bold=True, size=10)

_MAX_COL_WIDTH = 50
_MIN_COL_WIDTH = 8

_NUMBER_FORMATS: dict[str, str] = {
    schema.SUPPLY: "#,##0.0000",
    schema.IMPACT_FACTOR: "0.000E+00",
    schema.TOTAL_IMPACT: "0.000E+00",
    schema.TOTAL_CONSUMPTION: "#,##0.0000",
}


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def format_and_save(
    result: FootprintResult,
    output_path: Path,
    run_info: dict[str, str] | None = None,
) -> Path:
    """
    Write a formatted Excel workbook with four sheets.

    Args:
        result: FootprintResult from run_footprint().
        output_path: Path where the .xlsx file should be saved.
        run_info: Optional extra label → value pairs for the Run Info sheet
                  (e.g. input file names).

    Returns:
        The output_path (same as input, for convenience).
    """
    workbook = openpyxl.Workbook()

    summary_sheet = workbook.active
    summary_sheet.title = "Impact Summary"
    _write_table_sheet(summary_sheet, result.summary, schema.SUMMARY_COLUMNS)

    detail_sheet = workbook.create_sheet("Location Detail")
    _write_table_sheet(
        detail_sheet,
        result.impact_detail,
        schema.IMPACT_DETAIL_COLUMNS,
        highlight_missing=schema.IMPACT_FACTOR,
    )

    coverage_sheet = workbook.create_sheet("Coverage Report")
    _write_coverage_sheet(coverage_sheet, result.coverage)

    info_sheet = workbook.create_sheet("Run Info")
    _write_run_info_sheet(info_sheet, result, run_info or {})

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(str(output_path))
    workbook.close()

    logger.info(f"Excel file saved to '{output_path}'")
    return output_path


# ═══════════════════════════════════════════════════════════════════════════
# Table sheets
# ═══════════════════════════════════════════════════════════════════════════

def _write_table_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    dataframe: pd.DataFrame,
    columns: list[str],
    highlight_missing: str | None = None,
) -> None:
    """
    Write a DataFrame with styled headers, number formats, auto-filter and
    a frozen header row.  Rows where *highlight_missing* is blank are filled
    yellow.
    """
    for col_idx, col_name in enumerate(columns, start=1):
        cell = worksheet.cell(row=1, column=col_idx, value=col_name)
        cell.fill = _HEADER_FILL
        cell.font = _HEADER_FONT
        cell.alignment = Alignment(horizontal="center")

    for row_offset, df_idx in enumerate(dataframe.index):
        excel_row = row_offset + 2
        flagged = (
            highlight_missing is not None
            and highlight_missing in dataframe.columns
            and pd.isna(dataframe.at[df_idx, highlight_missing])
        )

        for col_idx, col_name in enumerate(columns, start=1):
            value = dataframe.at[df_idx, col_name] if col_name in dataframe.columns else None

            # NaN → empty cell
            if value is not None and pd.isna(value):
                value = None

            cell = worksheet.cell(row=excel_row, column=col_idx, value=value)
            cell.font = _NORMAL_FONT
            if flagged:
                cell.fill = _YELLOW_FILL

    _apply_number_formats(worksheet, columns, len(dataframe))
    _auto_fit_column_widths(worksheet)

    last_col_letter = get_column_letter(len(columns))
    worksheet.auto_filter.ref = f"A1:{last_col_letter}{len(dataframe) + 1}"
    worksheet.freeze_panes = "A2"


# ═══════════════════════════════════════════════════════════════════════════
# Coverage report sheet
# ═══════════════════════════════════════════════════════════════════════════

def _write_coverage_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    report: CoverageReport,
) -> None:
    """Write summary counts followed by one section per gap type."""
    current_row = 1

    worksheet.cell(row=current_row, column=1, value="Coverage Report").font = Font(bold=True, size=14)
    current_row += 2

    summary_items = [
        ("Food Items", report.total_items),
        ("Attributed Supply Rows", report.total_attributed_rows),
        ("Coverage Complete", "Yes" if report.is_complete else "No"),
        ("Undefined Import Ratios", len(report.undefined_ratio_items)),
        ("Import Ratios Outside [0, 1]", len(report.out_of_range_items)),
        ("Zero-Weight Commodities", len(report.degenerate_commodities)),
        ("Items Without Trade Name", len(report.items_without_trade_name)),
        ("Trade Names Without Shares", len(report.trade_names_without_shares)),
        ("Partially Attributed Imports", len(report.unattributed_imports)),
        ("Unmatched Products", len(report.unmatched_products)),
        ("Unmatched Locations", len(report.unmatched_locations)),
        ("Missing Impact Factors", len(report.missing_impact_factors)),
        ("Zero-Impact Items", len(report.zero_impact_items)),
    ]

    for label, value in summary_items:
        worksheet.cell(row=current_row, column=1, value=label).font = _BOLD_FONT
        worksheet.cell(row=current_row, column=2, value=value).font = _NORMAL_FONT
        current_row += 1

    sections: list[tuple[str, list[str], list[list]]] = [
        ("Undefined Import Ratios", ["Item"],
         [[item] for item in report.undefined_ratio_items]),
        ("Import Ratios Outside [0, 1]", ["Item"],
         [[item] for item in report.out_of_range_items]),
        ("Zero-Weight Commodities", ["Commodity"],
         [[name] for name in report.degenerate_commodities]),
        ("Items Without Trade Name", ["Item", "Suggestion"],
         [[e["name"], e["suggestion"]] for e in report.items_without_trade_name]),
        ("Trade Names Without Shares", ["Trade Name"],
         [[name] for name in report.trade_names_without_shares]),
        ("Partially Attributed Imports", ["Item", "Imported Supply", "Attributed Supply"],
         [[e["item"], e["imported_supply"], e["attributed_supply"]] for e in report.unattributed_imports]),
        ("Unmatched Products", ["Item", "Suggestion"],
         [[e["name"], e["suggestion"]] for e in report.unmatched_products]),
        ("Unmatched Locations", ["Origin Country", "Suggestion"],
         [[e["name"], e["suggestion"]] for e in report.unmatched_locations]),
        ("Missing Impact Factors", ["Impact Product", "Impact Location"],
         [[e["product"], e["location"]] for e in report.missing_impact_factors]),
        ("Ambiguous Mappings", ["Mapping", "Source Name", "Targets"],
         [[label, source, "; ".join(targets)]
          for label, entries in report.ambiguous_mappings.items()
          for source, targets in entries.items()]),
    ]

    for title, headers, rows in sections:
        if not rows:
            continue
        current_row = _write_section(worksheet, current_row + 2, title, headers, rows)

    _auto_fit_column_widths(worksheet)


def _write_section(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    start_row: int,
    title: str,
    headers: list[str],
    rows: list[list],
) -> int:
    """Write a titled table and return the last row written."""
    worksheet.cell(row=start_row, column=1, value=title).font = Font(bold=True, size=12)
    current_row = start_row + 1

    for col_idx, header in enumerate(headers, start=1):
        cell = worksheet.cell(row=current_row, column=col_idx, value=header)
        cell.fill = _HEADER_FILL
        cell.font = _HEADER_FONT

    for values in rows:
        current_row += 1
        for col_idx, value in enumerate(values, start=1):
            worksheet.cell(row=current_row, column=col_idx, value=value).font = _NORMAL_FONT

    return current_row


# ═══════════════════════════════════════════════════════════════════════════
# Run info sheet
# ═══════════════════════════════════════════════════════════════════════════

def _write_run_info_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    result: FootprintResult,
    run_info: dict[str, str],
) -> None:
    """Write the run parameters as label/value pairs."""
    items: list[tuple[str, object]] = [
        ("Country", result.country or "All areas"),
        ("Reference Year", result.reference_year if result.reference_year is not None else "All years"),
        ("Date Processed", datetime.now().strftime("%Y-%m-%d %H:%M")),
    ]
    items.extend(run_info.items())

    for row_idx, (label, value) in enumerate(items, start=1):
        worksheet.cell(row=row_idx, column=1, value=label).font = _BOLD_FONT
        worksheet.cell(row=row_idx, column=2, value=value).font = _NORMAL_FONT

    _auto_fit_column_widths(worksheet)


# ═══════════════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════════════

def _apply_number_formats(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    columns: list[str],
    row_count: int,
) -> None:
    """Apply Excel number formats to the numeric columns."""
    for col_idx, col_name in enumerate(columns, start=1):
        fmt = _NUMBER_FORMATS.get(col_name)
        if fmt is None:
            continue

        for row_idx in range(2, row_count + 2):  # skip header row
            worksheet.cell(row=row_idx, column=col_idx).number_format = fmt


def _auto_fit_column_widths(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
) -> None:
    """
    Set column widths based on content length, clamped between
    _MIN_COL_WIDTH and _MAX_COL_WIDTH.
    """
    for column_cells in worksheet.columns:
        max_length = _MIN_COL_WIDTH
        col_letter = get_column_letter(column_cells[0].column)

        for cell in column_cells:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))

        worksheet.column_dimensions[col_letter].width = min(max_length + 2, _MAX_COL_WIDTH)
