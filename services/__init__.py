"""
Business logic services.

Each service handles one pipeline concern; CleanupService runs them in order.
"""

from services.vendor_service import VendorService, VendorDecision, get_vendor_service
from services.category_service import CategoryService, CategoryDecision, get_category_service
from services.title_service import TitleService, get_title_service
from services.body_service import BodyService, BodyResult, get_body_service
from services.seo_service import SeoService, SeoFields, get_seo_service
from services.variant_service import VariantService, get_variant_service
from services.tag_service import TagService, TagResult, get_tag_service
from services.taxonomy_service import TaxonomyService, TaxonomyResult, get_taxonomy_service
from services.export_service import ExportService, get_export_service
from services.pipeline_service import CleanupService, get_cleanup_service

__all__ = [
    "VendorService",
    "VendorDecision",
    "get_vendor_service",
    "CategoryService",
    "CategoryDecision",
    "get_category_service",
    "TitleService",
    "get_title_service",
    "BodyService",
    "BodyResult",
    "get_body_service",
    "SeoService",
    "SeoFields",
    "get_seo_service",
    "VariantService",
    "get_variant_service",
    "TagService",
    "TagResult",
    "get_tag_service",
    "TaxonomyService",
    "TaxonomyResult",
    "get_taxonomy_service",
    "ExportService",
    "get_export_service",
    "CleanupService",
    "get_cleanup_service",
]
