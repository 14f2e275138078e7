"""
Run-level results: per-record outcome, run summary, full cleanup result.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from models.issue import Issue, Severity


class RunMode(str, Enum):
    """Trigger mode; both run the identical pipeline."""
    VALIDATE = "validate"
    FULL = "full"

    @property
    def mutate(self) -> bool:
        return self is RunMode.FULL

    @property
    def label(self) -> str:
        return "Full Cleanup" if self.mutate else "Validate Only"


class BodyQuality(str, Enum):
    """Existing body assessment, drives preserve/augment/regenerate."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def decision_reason(self) -> str:
        return {
            BodyQuality.HIGH: "Body preserved - high quality existing content.",
            BodyQuality.MEDIUM: "Body augmented - medium quality existing content.",
            BodyQuality.LOW: "Body regenerated - low quality existing content.",
        }[self]


@dataclass
class RecordResult:
    """Outcome of one record's phase sequence."""
    row_number: int
    handle: str
    output: dict[str, str]
    issues: list[Issue] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class RunSummary:
    """Counts reported at the end of a run."""
    mode: RunMode
    rows_processed: int
    records_failed: int = 0
    total_issues: int = 0
    errors: int = 0
    warnings: int = 0
    infos: int = 0
    bodies_preserved: int = 0
    bodies_augmented: int = 0
    bodies_regenerated: int = 0
    issues_by_phase: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_results(
        cls,
        mode: RunMode,
        rows_processed: int,
        records_failed: int,
        issues: list[Issue],
    ) -> "RunSummary":
        severities = Counter(i.severity for i in issues)
        reasons = Counter(i.reason for i in issues)
        phases = Counter(i.phase or "unknown" for i in issues)
        return cls(
            mode=mode,
            rows_processed=rows_processed,
            records_failed=records_failed,
            total_issues=len(issues),
            errors=severities[Severity.ERROR],
            warnings=severities[Severity.WARN],
            infos=severities[Severity.INFO],
            bodies_preserved=reasons[BodyQuality.HIGH.decision_reason],
            bodies_augmented=reasons[BodyQuality.MEDIUM.decision_reason],
            bodies_regenerated=reasons[BodyQuality.LOW.decision_reason],
            issues_by_phase=dict(phases.most_common()),
        )

    @property
    def success_rate(self) -> float:
        """Percent of rows without an error issue."""
        if self.rows_processed == 0:
            return 0.0
        return round((self.rows_processed - self.errors) / self.rows_processed * 100, 1)

    @property
    def message(self) -> str:
        return (
            f"Done. Rows: {self.rows_processed}. Issues: {self.total_issues} "
            f"(errors: {self.errors}, warnings: {self.warnings}). "
            f"Mode: {self.mode.label}"
        )

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "rows_processed": self.rows_processed,
            "records_failed": self.records_failed,
            "total_issues": self.total_issues,
            "errors": self.errors,
            "warnings": self.warnings,
            "infos": self.infos,
            "bodies_preserved": self.bodies_preserved,
            "bodies_augmented": self.bodies_augmented,
            "bodies_regenerated": self.bodies_regenerated,
            "issues_by_phase": self.issues_by_phase,
            "success_rate": self.success_rate,
            "message": self.message,
        }


@dataclass
class CleanupResult:
    """Everything a run produces, ready for the workbook writer."""
    headers: list[str]
    rows: list[dict[str, str]]
    issues: list[Issue]
    summary: RunSummary

    @property
    def success(self) -> bool:
        return self.summary.records_failed == 0
