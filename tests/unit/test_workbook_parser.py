"""
Tests for workbook and CSV reading.
"""

from io import BytesIO

import pytest

from exceptions import MissingSheetError, TableReadError
from parsers.workbook_parser import (
    Table,
    open_workbook,
    read_table,
    read_config_entries,
)
from tests.factories import ProductRowFactory, INPUT_HEADERS, build_workbook


class TestReadTable:
    """Tests for reading the Input sheet."""

    def test_reads_headers_and_rows(self, workbook_bytes):
        table = read_table(open_workbook(workbook_bytes), "Input")

        assert table.headers == INPUT_HEADERS
        assert len(table.rows) == 3
        assert table.rows[0]["Handle"] == "brush-01"
        assert table.rows[0]["Title"] == "PINSEL SET 6 TEILIG"

    def test_empty_cells_become_empty_strings(self, workbook_bytes):
        table = read_table(open_workbook(workbook_bytes), "Input")
        assert table.rows[0]["Vendor"] == ""

    def test_numbers_read_as_display_strings(self):
        row = ProductRowFactory.create(handle="a", **{"Variant Grams": 12.0, "Variant Price": 4.9})
        table = read_table(open_workbook(build_workbook([row], [])), "Input")

        assert table.rows[0]["Variant Grams"] == "12"
        assert table.rows[0]["Variant Price"] == "4.9"

    def test_missing_sheet(self):
        source = build_workbook([], [("banned_terms", "{}")], sheets=("Config",))

        with pytest.raises(MissingSheetError) as exc_info:
            read_table(open_workbook(source), "Input")

        assert exc_info.value.details == {"sheet": "Input"}
        assert exc_info.value.status_code == 422

    def test_unreadable_workbook(self):
        with pytest.raises(TableReadError):
            open_workbook(BytesIO(b"this is not a workbook"))


class TestReadConfigEntries:
    """Tests for reading the Config sheet."""

    def test_returns_key_value_pairs(self, workbook_bytes, config_entries):
        entries = read_config_entries(open_workbook(workbook_bytes), "Config")
        assert entries == config_entries


class TestTable:
    """Tests for the Table container."""

    def test_has_column(self):
        table = Table(headers=["Handle", "Title"])

        assert table.has_column("Handle") is True
        assert table.has_column("Vendor") is False
        assert table.is_empty is True
