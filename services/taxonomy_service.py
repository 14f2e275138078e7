"""
Google Shopping category mapping.

Fills an empty Google Product Category from the taxonomy map (keyed by
internal category) or from title keywords, keeps the internal category
in sync with it, and forces the condition to "new".
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from models import (
    CONDITION_FIELD,
    GOOGLE_CATEGORY_FIELD,
    CleanupConfig,
    Finding,
    ProductRecord,
    Severity,
)

logger = structlog.get_logger(__name__)

CATEGORY_FIELD = "Product Category"

_OFFICE = "Business & Industrial > Office Supplies"
_CRAFTS = "Arts & Entertainment > Hobbies & Creative Arts > Arts & Crafts"
_PAINT = f"{_CRAFTS} > Art & Crafting Materials > Drawing & Painting Supplies > Paint"

# First match wins; more specific keywords come before the words they contain
TITLE_RULES: list[tuple[tuple[str, ...], str]] = [
    (("dreiflügel", "mappe", "ordner"),
     f"{_OFFICE} > Filing & Organization > Folders"),
    (("heftschoner", "schoner"),
     f"{_OFFICE} > Filing & Organization > Binding Supplies > Binder Accessories > Sheet Protectors"),
    (("aufgabenheft", "notenheft", "heft"),
     f"{_OFFICE} > General Office Supplies > Paper Products > Notebooks & Notepads"),
    (("filzstift", "marker"),
     f"{_OFFICE} > Office Instruments > Writing & Drawing Instruments > Pens & Pencils > Pens > Felt-Tip Pens"),
    (("bleistift", "stift"),
     f"{_OFFICE} > Office Instruments > Writing & Drawing Instruments > Pens & Pencils > Pencils"),
    (("radierer", "gummi"),
     f"{_OFFICE} > General Office Supplies > Erasers"),
    (("pinsel", "brush"),
     f"{_CRAFTS} > Art & Crafting Tools > Brushes"),
    (("farbe", "paint", "acryl", "wachspaste", "paste"), _PAINT),
    (("papier", "paper", "karton", "chipboard"),
     f"{_CRAFTS} > Art & Crafting Materials > Art & Craft Paper"),
    (("metallic", "chamäleon", "chamleon", "wachs"), _PAINT),
    (("rost", "patina", "effekt"), _PAINT),
]


@dataclass
class TaxonomyResult:
    google_category: str
    product_category: str
    condition: str
    findings: list[Finding] = field(default_factory=list)


class TaxonomyService:
    """External taxonomy mapper."""

    def apply(self, record: ProductRecord, config: CleanupConfig) -> TaxonomyResult:
        google = record.google_product_category
        category = record.product_category
        findings: list[Finding] = []

        if not google.strip():
            mapped, reason = self.lookup(record, config)
            if mapped:
                findings.append(Finding(GOOGLE_CATEGORY_FIELD, google, mapped, reason))
                google = mapped
                if category != mapped:
                    sync_reason = "Updated to match Google Product Category"
                    if reason != "Mapped via google_taxonomy_map":
                        sync_reason += " (title-based)"
                    findings.append(Finding(CATEGORY_FIELD, category, mapped, sync_reason))
                    category = mapped
            else:
                findings.append(Finding(
                    GOOGLE_CATEGORY_FIELD, "", "",
                    f'Missing google category (no map entry for Product Category: '
                    f'"{category.strip()}", title: "{record.title}")',
                    Severity.WARN,
                ))

        condition = record.condition
        if condition.lower() != "new":
            findings.append(Finding(CONDITION_FIELD, condition, "new", "Condition set to new"))
            condition = "new"

        return TaxonomyResult(
            google_category=google,
            product_category=category,
            condition=condition,
            findings=findings,
        )

    def lookup(self, record: ProductRecord, config: CleanupConfig) -> tuple[str, str]:
        """(taxonomy path, reason), or ("", "") when nothing matches."""
        direct = config.google_taxonomy_map.get(record.product_category.strip())
        if direct:
            return direct, "Mapped via google_taxonomy_map"

        path = match_title(record.title)
        if path:
            return path, "Mapped via title keyword detection"
        return "", ""


def match_title(title: str) -> str:
    lowered = title.lower()
    for keywords, path in TITLE_RULES:
        if any(k in lowered for k in keywords):
            return path
    return ""


# Singleton instance
_taxonomy_service: Optional[TaxonomyService] = None


def get_taxonomy_service() -> TaxonomyService:
    """Get or create TaxonomyService instance."""
    global _taxonomy_service
    if _taxonomy_service is None:
        _taxonomy_service = TaxonomyService()
    return _taxonomy_service
