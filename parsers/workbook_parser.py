"""
Workbook table reader.

Reads the storefront export (header row + one row per variant) and the
Config sheet (column A key, column B JSON) from an .xlsx workbook.
"""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Union
import structlog

import pandas as pd

from exceptions import MissingSheetError, TableReadError
from models.product import cell_to_str

logger = structlog.get_logger(__name__)

WorkbookSource = Union[str, Path, BytesIO]


@dataclass
class Table:
    """Header row plus data rows keyed by header."""
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return len(self.rows) == 0

    def has_column(self, column: str) -> bool:
        return column in self.headers


def open_workbook(file: WorkbookSource) -> pd.ExcelFile:
    """
    Open an .xlsx workbook.

    Raises:
        TableReadError: If the file cannot be read as a workbook
    """
    try:
        return pd.ExcelFile(file, engine="openpyxl")
    except Exception as e:
        logger.error("workbook_read_failed", error=str(e))
        raise TableReadError(
            message="Failed to read workbook",
            details={"original_error": str(e)}
        )


def read_table(excel: pd.ExcelFile, sheet_name: str) -> Table:
    """
    Read a sheet as a header row plus rows of display strings.

    Raises:
        MissingSheetError: If the sheet is absent
        TableReadError: If the sheet cannot be parsed
    """
    _require_sheet(excel, sheet_name)

    try:
        df = excel.parse(sheet_name, dtype=object)
    except Exception as e:
        logger.error("sheet_read_failed", sheet=sheet_name, error=str(e))
        raise TableReadError(
            message=f"Failed to read sheet \"{sheet_name}\"",
            details={"original_error": str(e)}
        )

    table = _frame_to_table(df)
    logger.info("table_read", sheet=sheet_name, rows=len(table.rows), columns=len(table.headers))
    return table


def read_config_entries(excel: pd.ExcelFile, sheet_name: str) -> list[tuple[str, str]]:
    """
    Read (key, json_text) pairs from the Config sheet.

    The sheet has no header row. Rows keep their order; blank rows are
    returned as-is and skipped by the config parser.
    """
    _require_sheet(excel, sheet_name)

    try:
        df = excel.parse(sheet_name, header=None, dtype=object)
    except Exception as e:
        logger.error("sheet_read_failed", sheet=sheet_name, error=str(e))
        raise TableReadError(
            message=f"Failed to read sheet \"{sheet_name}\"",
            details={"original_error": str(e)}
        )

    entries = []
    for values in df.itertuples(index=False):
        key = cell_to_str(values[0]) if len(values) > 0 else ""
        value = cell_to_str(values[1]) if len(values) > 1 else ""
        entries.append((key, value))

    logger.debug("config_entries_read", sheet=sheet_name, count=len(entries))
    return entries


def _require_sheet(excel: pd.ExcelFile, sheet_name: str) -> None:
    if sheet_name not in excel.sheet_names:
        logger.error("sheet_missing", sheet=sheet_name, available=excel.sheet_names)
        raise MissingSheetError(sheet_name)


def _frame_to_table(df: pd.DataFrame) -> Table:
    headers = [cell_to_str(col) for col in df.columns]
    rows = []
    for values in df.itertuples(index=False):
        rows.append({h: cell_to_str(v) for h, v in zip(headers, values)})
    return Table(headers=headers, rows=rows)
