"""
Pydantic models and result dataclasses.
"""

from models.base import BaseSchema, FrozenSchema
from models.product import (
    ProductRecord,
    IMMUTABLE_FIELDS,
    GOOGLE_CATEGORY_FIELD,
    CONDITION_FIELD,
)
from models.issue import (
    Issue,
    Finding,
    Severity,
    Phase,
    RecordContext,
    ISSUE_HEADERS,
)
from models.rules import (
    BannedTerms,
    BannedTermsRules,
    KeywordTiers,
    CategoryAlignment,
    SeoRules,
    SopRules,
    TaxonomyRelevance,
    CleanupConfig,
)
from models.run import (
    RunMode,
    BodyQuality,
    RecordResult,
    RunSummary,
    CleanupResult,
)

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",
    # Product
    "ProductRecord",
    "IMMUTABLE_FIELDS",
    "GOOGLE_CATEGORY_FIELD",
    "CONDITION_FIELD",
    # Issue
    "Issue",
    "Finding",
    "Severity",
    "Phase",
    "RecordContext",
    "ISSUE_HEADERS",
    # Rules
    "BannedTerms",
    "BannedTermsRules",
    "KeywordTiers",
    "CategoryAlignment",
    "SeoRules",
    "SopRules",
    "TaxonomyRelevance",
    "CleanupConfig",
    # Run
    "RunMode",
    "BodyQuality",
    "RecordResult",
    "RunSummary",
    "CleanupResult",
]
