"""
Shared test fixtures.

Rule tables are built directly as CleanupConfig objects; workbook
fixtures are in-memory openpyxl workbooks.
"""

import json
import sys
from io import BytesIO
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest

from models import (
    BannedTerms,
    BannedTermsRules,
    CategoryAlignment,
    CleanupConfig,
    KeywordTiers,
    ProductRecord,
    SeoRules,
    SopRules,
    TaxonomyRelevance,
)
from tests.factories import ProductRowFactory, build_workbook

PAINT_PATH = (
    "Arts & Entertainment > Hobbies & Creative Arts > Arts & Crafts > "
    "Art & Crafting Materials > Drawing & Painting Supplies > Paint"
)

DEFAULT_TAGS = ["basteln", "kreativ", "diy", "hobby", "handwerk", "bastelbedarf"]


# ===================
# RULE TABLES
# ===================

@pytest.fixture
def config() -> CleanupConfig:
    """
    Small but complete rule set.

    Usage:
        def test_something(config):
            decision = service.classify(record, config)
    """
    return CleanupConfig(
        banned_terms=BannedTerms(
            terms={"billig": "preiswert", "gratis": ""},
            rules=BannedTermsRules(enforce_case_insensitive=True),
        ),
        keyword_dictionary={
            "Brushes": KeywordTiers(
                primary=["pinsel", "brush"],
                secondary=["malen", "aquarell"],
                attributes=["rund", "flach"],
            ),
            "Paints & Mediums": KeywordTiers(
                primary=["acrylfarbe", "farbe"],
                secondary=["acryl"],
                attributes=["matt"],
            ),
        },
        category_alignment={
            "Brushes": CategoryAlignment(
                must_include_any_of=["Synthetikhaar", "Holzstiel", "Formstabil"],
                closing_line_templates=["Perfekt für feine Details und saubere Linien."],
            ),
        },
        collection_aliases={
            "Pinsel & Werkzeug": "Brushes",
            "Farben": "Paints & Mediums",
        },
        collection_seo={
            "Pinsel & Werkzeug": "Pinsel für Aquarell, Acryl und Öl in vielen Größen und Formen.",
        },
        sop_rules=SopRules(
            seo_rules=SeoRules(
                site_name="Bastelschachtel",
                shop_domain="bastelschachtel.at",
                generic_closing="Viel Freude beim Basteln!",
                default_tags=DEFAULT_TAGS,
                default_product_category="Bastelbedarf",
            ),
        ),
        known_vendors={"pentart": "Pentart", "stamperia": "Stamperia"},
        google_taxonomy_map={"Paints & Mediums": PAINT_PATH},
        tag_relevance_map={
            PAINT_PATH: TaxonomyRelevance(
                required_keywords=["acrylfarbe", "farbe"],
                forbidden_keywords=["pinsel"],
            ),
        },
        category_keywords_inference={"schere": "Werkzeug"},
    )


@pytest.fixture
def empty_config() -> CleanupConfig:
    """Config with every table missing."""
    return CleanupConfig()


@pytest.fixture
def config_entries() -> list[tuple[str, str]]:
    """Config sheet rows as (key, json_text)."""
    return [
        ("banned_terms_json", json.dumps({
            "banned_terms": {"billig": "preiswert"},
            "rules": {"enforce_case_insensitive": True},
        })),
        ("keyword_dictionary_json", json.dumps({
            "dictionary": {
                "Brushes": {"primary": ["pinsel"], "secondary": ["malen"], "attribute": ["rund"]},
            },
        })),
        ("collection_aliases", json.dumps({"aliases": {"Pinsel & Werkzeug": "Brushes"}})),
        ("google_taxonomy_map_json", json.dumps({"Paints & Mediums": PAINT_PATH})),
        ("sop_phase3_rules_json", json.dumps({
            "seo_rules": {
                "site_name": "Bastelschachtel",
                "default_tags": DEFAULT_TAGS,
                "default_product_category": "Bastelbedarf",
            },
        })),
    ]


# ===================
# RECORDS
# ===================

@pytest.fixture
def brush_record() -> ProductRecord:
    """The classic all-caps brush set with nothing else filled in."""
    return ProductRecord.from_row(ProductRowFactory.create(
        handle="brush-01",
        title="PINSEL SET 6 TEILIG",
    ))


@pytest.fixture
def workbook_bytes(config_entries) -> BytesIO:
    """Workbook with a parent, its variant and one single product."""
    rows = [
        ProductRowFactory.create(handle="brush-01", title="PINSEL SET 6 TEILIG"),
        ProductRowFactory.create_variant(handle="brush-01", title="PINSEL SET 6 TEILIG"),
        ProductRowFactory.create(handle="acryl-rot", title="Acrylfarbe Rot matt", collections="Farben"),
    ]
    return build_workbook(rows, config_entries)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/health")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
