"""
Export service: write cleanup results into a workbook.

Output (cleaned rows), Issues (audit trail) and Summary (run metrics)
sheets are replaced in place; every other sheet is left untouched.
"""

from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Any, Optional, Union

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet
import structlog

from config import settings
from models import ISSUE_HEADERS, CleanupResult, Issue, RunSummary

logger = structlog.get_logger(__name__)

# Column widths are tuned in pixels and converted to character units
PX_PER_CHAR = 7
TABLE_MIN_WIDTH_PX = 80
TABLE_MAX_WIDTH_PX = 400

# Issues sheet: max width per column (1-indexed), px
ISSUE_MAX_WIDTHS_PX = {
    1: 80,    # Row
    2: 150,   # Timestamp
    3: 200,   # Handle
    4: 250,   # Product Title
    5: 150,   # Field
    6: 300,   # Original
    7: 300,   # Updated
    8: 400,   # Reason
    9: 80,    # Severity
    10: 60,   # Phase
}
ISSUE_NARROW_COLUMNS = {1, 9, 10}

HEADER_FILL = PatternFill(start_color="E8F0FE", end_color="E8F0FE", fill_type="solid")


class ExportService:
    """Workbook writer."""

    # ===================
    # SHEETS
    # ===================

    def write_table(
        self,
        wb: Workbook,
        sheet_name: str,
        headers: list[str],
        rows: list[dict[str, Any]],
    ) -> Worksheet:
        """Replace a sheet with a header row plus one row per record."""
        ws = _replace_sheet(wb, sheet_name)
        ws.append(headers)
        for row in rows:
            ws.append([_cell(row.get(h, "")) for h in headers])

        for col, header in enumerate(headers, start=1):
            values = [header] + [row.get(header, "") for row in rows]
            _fit_column(ws, col, values, TABLE_MIN_WIDTH_PX, TABLE_MAX_WIDTH_PX)

        logger.debug("sheet_written", sheet=sheet_name, rows=len(rows))
        return ws

    def write_issues(self, wb: Workbook, sheet_name: str, issues: list[Issue]) -> Worksheet:
        """Replace a sheet with the issue log; header only when empty."""
        ws = _replace_sheet(wb, sheet_name)
        ws.append(ISSUE_HEADERS)
        if not issues:
            return ws

        rows = [issue.to_row() for issue in issues]
        for row in rows:
            ws.append([_cell(v) for v in row])

        bold_font = Font(bold=True)
        for col in range(1, len(ISSUE_HEADERS) + 1):
            ws.cell(row=1, column=col).font = bold_font
            ws.cell(row=1, column=col).fill = HEADER_FILL

            values = [ISSUE_HEADERS[col - 1]] + [r[col - 1] for r in rows]
            min_px = 60 if col in ISSUE_NARROW_COLUMNS else 100
            _fit_column(ws, col, values, min_px, ISSUE_MAX_WIDTHS_PX.get(col, 200))

        logger.debug("sheet_written", sheet=sheet_name, rows=len(rows))
        return ws

    def write_summary(self, wb: Workbook, sheet_name: str, summary: RunSummary) -> Worksheet:
        """Replace a sheet with run metrics."""
        ws = _replace_sheet(wb, sheet_name)

        title_font = Font(bold=True, size=16)
        bold_font = Font(bold=True)

        ws.append(["Product Cleanup Summary", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
        ws["A1"].font = title_font
        ws.append([])

        sections = [
            ("Metric", "Value", [
                ("Mode", summary.mode.label),
                ("Total Products Processed", summary.rows_processed),
                ("Records Failed", summary.records_failed),
                ("Success Rate", f"{summary.success_rate}%"),
                ("Total Issues Logged", summary.total_issues),
                ("Errors", summary.errors),
                ("Warnings", summary.warnings),
                ("Info Messages", summary.infos),
            ]),
            ("Body Content Handling", "Count", [
                ("Bodies Preserved (High Quality)", summary.bodies_preserved),
                ("Bodies Augmented (Medium Quality)", summary.bodies_augmented),
                ("Bodies Regenerated (Low Quality)", summary.bodies_regenerated),
            ]),
            ("Issues by Phase", "Count", [
                (f"Phase {phase}", count) for phase, count in summary.issues_by_phase.items()
            ]),
        ]

        for index, (label, value_label, rows) in enumerate(sections):
            if index > 0:
                ws.append([])
            ws.append([label, value_label])
            header_row = ws.max_row
            for col in (1, 2):
                ws.cell(row=header_row, column=col).font = bold_font
                ws.cell(row=header_row, column=col).fill = HEADER_FILL
            for row in rows:
                ws.append(list(row))

        ws.column_dimensions["A"].width = 40
        ws.column_dimensions["B"].width = 25
        return ws

    # ===================
    # WORKBOOK
    # ===================

    def export_result(
        self,
        source: Union[str, Path, BytesIO, None],
        result: CleanupResult,
        destination: Union[str, Path, None] = None,
    ) -> BytesIO:
        """
        Write Output, Issues and Summary into the source workbook.

        Args:
            source: Workbook to update; a new one is created when None
            result: Cleanup run result
            destination: Also save to this path when given

        Returns:
            BytesIO containing the updated workbook
        """
        if source is None:
            wb = Workbook()
            wb.remove(wb.active)
        else:
            if isinstance(source, BytesIO):
                source.seek(0)
            wb = load_workbook(source)

        self.write_table(wb, settings.output_sheet, result.headers, result.rows)
        self.write_issues(wb, settings.issues_sheet, result.issues)
        self.write_summary(wb, settings.summary_sheet, result.summary)

        output = BytesIO()
        wb.save(output)
        output.seek(0)

        if destination is not None:
            Path(destination).write_bytes(output.getvalue())
            logger.info("workbook_saved", path=str(destination))

        return output


def _replace_sheet(wb: Workbook, sheet_name: str) -> Worksheet:
    if sheet_name in wb.sheetnames:
        index = wb.sheetnames.index(sheet_name)
        wb.remove(wb[sheet_name])
        return wb.create_sheet(sheet_name, index)
    return wb.create_sheet(sheet_name)


def _cell(value: Any) -> Any:
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def _fit_column(ws: Worksheet, col: int, values: list[Any], min_px: int, max_px: int) -> None:
    longest = max((len(str(v)) for v in values), default=0)
    width_px = min(max(longest * PX_PER_CHAR, min_px), max_px)
    ws.column_dimensions[get_column_letter(col)].width = width_px / PX_PER_CHAR


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
