"""
Tests for the command-line runner.
"""

import json
import sys
from pathlib import Path

import pytest
from openpyxl import load_workbook

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "scripts"))

import run_cleanup  # noqa: E402


@pytest.fixture
def workbook_path(tmp_path, workbook_bytes) -> Path:
    path = tmp_path / "products.xlsx"
    path.write_bytes(workbook_bytes.getvalue())
    return path


def _main(monkeypatch, *args) -> int:
    monkeypatch.setattr(sys, "argv", ["run_cleanup.py", *args])
    with pytest.raises(SystemExit) as exc:
        run_cleanup.main()
    return exc.value.code


class TestRunCleanupScript:
    def test_full_run_with_output(self, monkeypatch, capsys, workbook_path, tmp_path):
        output = tmp_path / "cleaned.xlsx"

        code = _main(monkeypatch, str(workbook_path), "--output", str(output))
        printed = capsys.readouterr().out

        assert code == 0
        assert "Done. Rows: 3." in printed
        assert "3/3 records" in printed
        assert f"Written to {output}" in printed
        assert "Output" in load_workbook(output).sheetnames
        assert "Output" not in load_workbook(workbook_path).sheetnames

    def test_validate_in_place(self, monkeypatch, capsys, workbook_path):
        code = _main(monkeypatch, str(workbook_path), "--validate")

        assert code == 0
        assert "Mode: Validate Only" in capsys.readouterr().out
        wb = load_workbook(workbook_path)
        assert wb["Output"]["B2"].value == "PINSEL SET 6 TEILIG"

    def test_missing_workbook(self, monkeypatch, capsys, tmp_path):
        code = _main(monkeypatch, str(tmp_path / "missing.xlsx"))

        assert code == 1
        assert "Cleanup failed: Workbook not found" in capsys.readouterr().out

    def test_check_config(self, monkeypatch, capsys, workbook_path):
        code = _main(monkeypatch, str(workbook_path), "--check-config")
        printed = capsys.readouterr().out

        assert code == 0
        assert "Config loaded successfully" in printed
        assert "- keyword_dictionary: 1 categories" in printed

    def test_json_summary(self, monkeypatch, capsys, workbook_path, tmp_path):
        code = _main(monkeypatch, str(workbook_path), "--validate", "--json", "--output", str(tmp_path / "out.xlsx"))
        summary = json.loads(capsys.readouterr().out)

        assert code == 0
        assert summary["mode"] == "validate"
        assert summary["rows_processed"] == 3
        assert summary["message"].startswith("Done. Rows: 3.")
