"""
Category classification.

Resolves a product's internal category from, in order: collection
aliases, weighted keyword scoring over title and body, the flat
single-keyword inference map, and the store's default category.
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from models import CleanupConfig, Finding, ProductRecord
from utils.text_utils import strip_html

logger = structlog.get_logger(__name__)

CATEGORY_FIELD = "Product Category"

# Keyword tier weights
PRIMARY_WEIGHT = 3
SECONDARY_WEIGHT = 2
ATTRIBUTE_WEIGHT = 1

MIN_SCORE = 2
HIGH_CONFIDENCE_SCORE = 6
MEDIUM_CONFIDENCE_SCORE = 4


@dataclass
class CategoryDecision:
    """Resolved category and how it was reached."""
    category: str
    source: str  # alias | scoring | inference | default | unchanged
    score: int = 0
    findings: list[Finding] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return len(self.findings) > 0


def confidence_label(score: int) -> str:
    if score >= HIGH_CONFIDENCE_SCORE:
        return "HIGH"
    if score >= MEDIUM_CONFIDENCE_SCORE:
        return "MEDIUM"
    return "LOW"


class CategoryService:
    """
    Category classifier.

    Re-evaluates on every run, not just when the category is empty. A
    finding is recorded only when the adopted value differs from the
    current one.
    """

    def classify(self, record: ProductRecord, config: CleanupConfig) -> CategoryDecision:
        existing = record.product_category.strip()

        # 1. Collection aliases, first one that moves the value
        alias_matches = self.match_aliases(record.collections, config)
        for alias, mapped in alias_matches:
            if mapped == existing:
                continue
            logger.debug("category_alias_matched", handle=record.handle, alias=alias, category=mapped)
            return CategoryDecision(
                category=mapped,
                source="alias",
                findings=[Finding(CATEGORY_FIELD, existing, mapped, "Mapped via collection_aliases")],
            )
        if alias_matches:
            return CategoryDecision(category=existing, source="alias")

        text = f"{record.title.lower()} {strip_html(record.body_html).lower()}"

        # 2. Weighted keyword scoring, then 3. single-keyword inference
        best, score = self.score_categories(text, config)
        source = "scoring"
        if not best:
            best = self.infer_from_keywords(text, config)
            score = 1 if best else 0
            source = "inference"

        if best:
            if best == existing:
                return CategoryDecision(category=existing, source=source, score=score)
            reason = f"Smart category inference ({confidence_label(score)} confidence: {score} points)"
            return CategoryDecision(
                category=best,
                source=source,
                score=score,
                findings=[Finding(CATEGORY_FIELD, existing, best, reason)],
            )

        # 4. Keep what is there, else the configured default
        if existing:
            return CategoryDecision(category=existing, source="unchanged")

        default = config.seo_rules.default_product_category
        if default:
            return CategoryDecision(
                category=default,
                source="default",
                findings=[Finding(CATEGORY_FIELD, existing, default, "Default category assigned")],
            )

        return CategoryDecision(category="", source="unchanged")

    def match_aliases(
        self,
        collections: str,
        config: CleanupConfig,
    ) -> list[tuple[str, str]]:
        """Every collection with an alias entry, as (alias, category), in listed order."""
        aliases = {k.strip().lower(): v for k, v in config.collection_aliases.items()}
        matches = []
        for name in collections.lower().split(","):
            name = name.strip()
            if name and aliases.get(name):
                matches.append((name, aliases[name]))
        return matches

    def score_categories(self, text: str, config: CleanupConfig) -> tuple[str, int]:
        """
        Score every dictionary category against text.

        Substring matching, not tokenized. Highest score wins if it reaches
        MIN_SCORE; ties keep the first category in dictionary order.
        """
        best_category = ""
        best_score = 0

        for category, tiers in config.keyword_dictionary.items():
            score = (
                PRIMARY_WEIGHT * _count_matches(text, tiers.primary)
                + SECONDARY_WEIGHT * _count_matches(text, tiers.secondary)
                + ATTRIBUTE_WEIGHT * _count_matches(text, tiers.attributes)
            )
            if score > best_score and score >= MIN_SCORE:
                best_category = category
                best_score = score

        return best_category, best_score

    def infer_from_keywords(self, text: str, config: CleanupConfig) -> str:
        """First inference-map keyword found in text."""
        for keyword, category in config.category_keywords_inference.items():
            if keyword and keyword.lower() in text:
                return category
        return ""


def _count_matches(text: str, keywords: list[str]) -> int:
    return sum(1 for k in keywords if k and k.lower() in text)


# Singleton instance
_category_service: Optional[CategoryService] = None


def get_category_service() -> CategoryService:
    """Get or create CategoryService instance."""
    global _category_service
    if _category_service is None:
        _category_service = CategoryService()
    return _category_service
