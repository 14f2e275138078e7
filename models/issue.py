"""
Audit trail schemas.

Services return Finding objects (field-level decisions with no row
context). The orchestrator stamps them into Issue records with the
RecordContext of the record being processed.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ISSUE_HEADERS = [
    "Row", "Timestamp", "Handle", "Product Title", "Field",
    "Original", "Updated", "Reason", "Severity", "Phase",
]


class Severity(str, Enum):
    """Issue severity."""
    ERROR = "error"  # record abandoned
    WARN = "warn"    # kept, flagged for review
    INFO = "info"    # normal logged change


class Phase(str, Enum):
    """Fixed per-record processing order."""
    IDENTITY = "1"
    CLASSIFY = "2"
    TITLE = "3a"
    BODY = "3b"
    SEO = "3c"
    VARIANT = "3d"
    TAGS = "3e"
    TAXONOMY = "4"
    TAG_REVALIDATION = "4b"


class Issue(BaseModel):
    """One immutable audit entry."""
    model_config = ConfigDict(frozen=True)

    row_number: int
    timestamp: datetime = Field(default_factory=datetime.now)
    handle: str = ""
    product_title: str = ""
    field: str = ""
    original: str = ""
    updated: str = ""
    reason: str = ""
    severity: Severity = Severity.INFO
    phase: str = ""

    def to_row(self) -> list[Any]:
        """Issues sheet row, in ISSUE_HEADERS order."""
        return [
            self.row_number,
            self.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            self.handle,
            self.product_title,
            self.field,
            self.original,
            self.updated,
            self.reason,
            self.severity.value,
            self.phase,
        ]


@dataclass
class Finding:
    """A field-level decision made by a cleanup pass."""
    field: str
    original: str
    updated: str
    reason: str
    severity: Severity = Severity.INFO


@dataclass(frozen=True)
class RecordContext:
    """
    Where a finding happened.

    Rebuilt per phase through at_phase() so error attribution always names
    the phase that was running.
    """
    row_number: int
    handle: str
    product_title: str
    phase: Phase = Phase.IDENTITY

    def at_phase(self, phase: Phase) -> "RecordContext":
        return replace(self, phase=phase)

    def issue(self, finding: Finding) -> Issue:
        return Issue(
            row_number=self.row_number,
            handle=self.handle,
            product_title=self.product_title,
            field=finding.field,
            original="" if finding.original is None else str(finding.original),
            updated="" if finding.updated is None else str(finding.updated),
            reason=finding.reason,
            severity=finding.severity,
            phase=self.phase.value,
        )

    def issues(self, findings: list[Finding]) -> list[Issue]:
        return [self.issue(f) for f in findings]
