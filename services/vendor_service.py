"""
Vendor resolution.

Validates an existing vendor against the product copy, infers a missing
one from the known-vendor keyword map, applies the two category-bound
vendor overrides and gates the store's own brand behind handmade
keywords.
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from models import CleanupConfig, Finding, ProductRecord, Severity
from utils.text_utils import contains_word

logger = structlog.get_logger(__name__)

VENDOR_FIELD = "Vendor"

# Lowercase category → vendor; these win over everything else
CATEGORY_VENDOR_OVERRIDES = {
    "reispapier": "Itd Collection",
    "korbboden": "Istvan",
}

RESERVED_BRAND = "Bastelschachtel"

HANDMADE_KEYWORDS = [
    "handmade",
    "die bastelschachtel ecke",
    "unsere bastelecke",
    "handgegossen",
    "beton",
    "handgemacht",
]


@dataclass
class VendorDecision:
    vendor: str
    findings: list[Finding] = field(default_factory=list)


class VendorService:
    """Vendor resolver."""

    def resolve(self, record: ProductRecord, config: CleanupConfig) -> VendorDecision:
        vendor = record.vendor.strip()
        category = record.product_category.strip().lower()

        override = CATEGORY_VENDOR_OVERRIDES.get(category)
        if override:
            return VendorDecision(
                vendor=override,
                findings=[Finding(
                    VENDOR_FIELD, vendor, override,
                    f"Vendor set to {override} for {record.product_category.strip()}",
                )],
            )

        findings: list[Finding] = []
        title = record.title.lower()
        body = record.body_html.lower()

        if vendor:
            if not contains_word(title, vendor) and not contains_word(body, vendor):
                findings.append(Finding(
                    VENDOR_FIELD, vendor, vendor,
                    f'Vendor "{vendor}" not mentioned in title or description.',
                    Severity.WARN,
                ))
        else:
            inferred = self.infer_vendor(record, config)
            if inferred:
                vendor = inferred
                findings.append(Finding(
                    VENDOR_FIELD, "", inferred,
                    f'Inferred vendor "{inferred}" from product data.',
                ))

        if vendor.lower() == RESERVED_BRAND.lower() and not self.is_handmade(record):
            logger.debug("reserved_vendor_cleared", handle=record.handle)
            findings.append(Finding(
                VENDOR_FIELD, RESERVED_BRAND, "",
                f"Vendor set to {RESERVED_BRAND}, but product does not seem to be "
                "handmade. Please verify.",
                Severity.WARN,
            ))
            vendor = ""

        return VendorDecision(vendor=vendor, findings=findings)

    def infer_vendor(self, record: ProductRecord, config: CleanupConfig) -> str:
        """First known-vendor keyword found as a whole word in title, body or handle."""
        haystacks = [record.title, record.body_html, record.handle]
        for keyword, vendor in config.known_vendors.items():
            if any(contains_word(text, keyword) for text in haystacks):
                return vendor
        return ""

    def is_handmade(self, record: ProductRecord) -> bool:
        title = record.title.lower()
        collections = record.collections.lower()
        return any(k in title or k in collections for k in HANDMADE_KEYWORDS)


# Singleton instance
_vendor_service: Optional[VendorService] = None


def get_vendor_service() -> VendorService:
    """Get or create VendorService instance."""
    global _vendor_service
    if _vendor_service is None:
        _vendor_service = VendorService()
    return _vendor_service
