"""
Workbook readers and the Config sheet loader.
"""

from parsers.workbook_parser import (
    Table,
    open_workbook,
    read_table,
    read_config_entries,
)
from parsers.config_parser import (
    parse_config,
    summarize_config,
    canonical_key,
    CONFIG_KEYS,
)

__all__ = [
    "Table",
    "open_workbook",
    "read_table",
    "read_config_entries",
    "parse_config",
    "summarize_config",
    "canonical_key",
    "CONFIG_KEYS",
]
