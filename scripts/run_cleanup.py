"""
Product cleanup runner.

Runs the cleanup pipeline over a workbook holding Input and Config sheets
and writes Output, Issues and Summary sheets back.

Usage:
    python scripts/run_cleanup.py products.xlsx                 # full cleanup, in place
    python scripts/run_cleanup.py products.xlsx --validate      # dry run
    python scripts/run_cleanup.py products.xlsx --output out.xlsx
    python scripts/run_cleanup.py products.xlsx --check-config
    python scripts/run_cleanup.py products.xlsx --json           # summary as JSON
"""

import argparse
import json
import os
import sys
from pathlib import Path

# Allow imports from the project root when running as a script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings, configure_logging
from exceptions import AppError, NotFoundError
from models import RunMode
from parsers import open_workbook, read_config_entries, parse_config, summarize_config
from services.pipeline_service import get_cleanup_service


def check_config(workbook: Path) -> None:
    """Print what the Config sheet loads to."""
    excel = open_workbook(workbook)
    config = parse_config(read_config_entries(excel, settings.config_sheet))
    print(summarize_config(config))


def run(workbook: Path, mode: RunMode, output: Path, as_json: bool = False) -> int:
    """Run the pipeline and write the result workbook. Returns exit code."""
    def report(processed: int, total: int) -> None:
        if not as_json:
            print(f"  {processed}/{total} records")

    result, _ = get_cleanup_service().export_workbook(
        workbook, mode, destination=output, on_progress=report
    )

    if as_json:
        print(json.dumps(result.summary.to_dict(), indent=2, ensure_ascii=False))
        return 0

    print(result.summary.message)
    if output != workbook:
        print(f"Written to {output}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Clean product records in a workbook and log every change."
    )
    parser.add_argument(
        "workbook",
        help="Path to the .xlsx workbook (Input and Config sheets)",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Dry run: log issues, keep Output identical to Input",
    )
    parser.add_argument(
        "--output",
        default="",
        help="Write the result to this path instead of the source workbook",
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Only load the Config sheet and print what was found",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run summary as JSON",
    )

    args = parser.parse_args()
    configure_logging()

    workbook = Path(args.workbook)

    try:
        if not workbook.exists():
            raise NotFoundError("Workbook", str(workbook))

        if args.check_config:
            check_config(workbook)
            sys.exit(0)

        mode = RunMode.VALIDATE if args.validate else RunMode.FULL
        output = Path(args.output) if args.output else workbook
        sys.exit(run(workbook, mode, output, as_json=args.json))

    except AppError as e:
        print(f"Cleanup failed: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
