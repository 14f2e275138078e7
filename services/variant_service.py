"""
Variant technical fields: SKU, grams, shipping/taxable flags, barcode.

normalize() is pure: it returns change descriptors (Finding objects whose
`updated` is the new value) and leaves applying them to the caller.
"""

import math
import random
import re
import string
from typing import Optional
import structlog

from models import Finding, ProductRecord, Severity

logger = structlog.get_logger(__name__)

SKU_PATTERN = re.compile(r"^[A-Z0-9_-]{2,16}$")
BARCODE_PATTERN = re.compile(r"^[0-9]+$")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")

SKU_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
SKU_SUFFIX_LENGTH = 4


def generate_sku(vendor: str, title: str, rng: Optional[random.Random] = None) -> str:
    """
    Build "{vendor}-{title}-{random}".

    - vendor code: first 3 alphanumerics of vendor (default "BA"), upper-case
    - title code: first 4 alphanumerics of title (default "PRD"), upper-case
    - random: 4 base-36 characters

    generate_sku("Pentart", "Pinsel Set") → "PEN-PINS-7K2Q"
    """
    rng = rng or random
    vendor_code = _NON_ALNUM_RE.sub("", vendor or "BA").upper()[:3]
    title_code = _NON_ALNUM_RE.sub("", title or "PRD").upper()[:4]
    suffix = "".join(rng.choice(SKU_SUFFIX_ALPHABET) for _ in range(SKU_SUFFIX_LENGTH))
    return f"{vendor_code}-{title_code}-{suffix}"


def is_finite_number(value: str) -> bool:
    """Blank counts as zero."""
    if value is None or str(value).strip() == "":
        return True
    try:
        return math.isfinite(float(value))
    except ValueError:
        return False


class VariantService:
    """Variant technical normalizer."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng

    def normalize(self, record: ProductRecord) -> list[Finding]:
        changes: list[Finding] = []

        sku = record.variant_sku
        if not SKU_PATTERN.fullmatch(sku):
            new_sku = generate_sku(record.vendor, record.title, self.rng)
            changes.append(Finding("Variant SKU", sku, new_sku, "Generated SKU"))

        if not is_finite_number(record.variant_grams):
            changes.append(Finding("Variant Grams", record.variant_grams, "0", "Defaulted to 0"))

        if record.variant_requires_shipping.upper() != "TRUE":
            changes.append(Finding(
                "Variant Requires Shipping", record.variant_requires_shipping, "TRUE",
                "Physical product default",
            ))

        if record.variant_taxable.upper() != "TRUE":
            changes.append(Finding("Variant Taxable", record.variant_taxable, "TRUE", "Taxable default"))

        # Barcodes are validated or removed, never invented
        barcode = record.variant_barcode
        if barcode and not BARCODE_PATTERN.fullmatch(barcode):
            changes.append(Finding(
                "Variant Barcode", barcode, "", "Invalid barcode cleared", Severity.WARN,
            ))

        return changes

    def apply(self, record: ProductRecord, changes: list[Finding]) -> None:
        for change in changes:
            record.set_column(change.field, change.updated)


# Singleton instance
_variant_service: Optional[VariantService] = None


def get_variant_service() -> VariantService:
    """Get or create VariantService instance."""
    global _variant_service
    if _variant_service is None:
        _variant_service = VariantService()
    return _variant_service
