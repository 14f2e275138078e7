"""
Rule-table configuration schemas.

CleanupConfig is the typed form of the Config sheet: one field per rule
table, loaded once per run by parsers.config_parser and never mutated.
"""

from typing import Any, Optional

from pydantic import Field, model_validator

from models.base import BaseSchema, FrozenSchema

DEFAULT_SITE_NAME = "My Shop"
DEFAULT_SHOP_DOMAIN = "your-shop.myshopify.com"


# ===================
# TABLE ENTRIES
# ===================

class BannedTermsRules(FrozenSchema):
    enforce_case_insensitive: bool = False


class BannedTerms(FrozenSchema):
    """Banned term → replacement, plus matching rules."""
    terms: dict[str, str] = Field(default_factory=dict)
    rules: BannedTermsRules = Field(default_factory=BannedTermsRules)

    @property
    def case_insensitive(self) -> bool:
        return self.rules.enforce_case_insensitive


class KeywordTiers(FrozenSchema):
    """
    Keyword dictionary entry for one category.

    Weights used by classification: primary 3, secondary 2, attributes 1.
    The singular "attribute" spelling is accepted and merged.
    """
    primary: list[str] = Field(default_factory=list)
    secondary: list[str] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def merge_attribute_spelling(cls, data: Any) -> Any:
        if isinstance(data, dict) and "attribute" in data:
            data = dict(data)
            legacy = data.pop("attribute") or []
            merged = list(data.get("attributes") or [])
            merged.extend(k for k in legacy if k not in merged)
            data["attributes"] = merged
        return data

    def all_keywords(self) -> list[str]:
        return [*self.primary, *self.secondary, *self.attributes]


class CategoryAlignment(FrozenSchema):
    """Required features and closing lines for one category."""
    must_include_any_of: list[str] = Field(default_factory=list)
    closing_line_templates: list[str] = Field(default_factory=list)


class SeoRules(FrozenSchema):
    site_name: str = DEFAULT_SITE_NAME
    shop_domain: str = DEFAULT_SHOP_DOMAIN
    generic_closing: str = ""
    generic_seo_description: str = ""
    default_tags: list[str] = Field(default_factory=list)
    default_product_category: str = ""


class SopRules(FrozenSchema):
    """Store-wide operating defaults."""
    seo_rules: SeoRules = Field(default_factory=SeoRules)
    generic_seo_description: str = ""

    @property
    def seo_description_fallback(self) -> str:
        return self.generic_seo_description or self.seo_rules.generic_seo_description


class TaxonomyRelevance(FrozenSchema):
    """Tag constraints for one external taxonomy leaf."""
    required_keywords: list[str] = Field(default_factory=list)
    forbidden_keywords: list[str] = Field(default_factory=list)


# ===================
# CONFIG
# ===================

class CleanupConfig(FrozenSchema):
    """
    All rule tables for one run.

    Missing tables are empty mappings. Category-keyed lookups go through
    keywords_for() / alignment_for(), which match case-insensitively.
    """
    banned_terms: BannedTerms = Field(default_factory=BannedTerms)
    category_alignment: dict[str, CategoryAlignment] = Field(default_factory=dict)
    keyword_dictionary: dict[str, KeywordTiers] = Field(default_factory=dict)
    collection_aliases: dict[str, str] = Field(default_factory=dict)
    collection_seo: dict[str, str] = Field(default_factory=dict)
    sop_rules: SopRules = Field(default_factory=SopRules)
    known_vendors: dict[str, str] = Field(default_factory=dict)
    google_taxonomy_map: dict[str, str] = Field(default_factory=dict)
    tag_relevance_map: dict[str, TaxonomyRelevance] = Field(default_factory=dict)
    category_keywords_inference: dict[str, str] = Field(default_factory=dict)
    raw_tables: dict[str, Any] = Field(default_factory=dict)

    # ---- category lookups ----

    def keywords_for(self, category: Optional[str]) -> KeywordTiers:
        return _lookup(self.keyword_dictionary, category) or KeywordTiers()

    def alignment_for(self, category: Optional[str]) -> CategoryAlignment:
        return _lookup(self.category_alignment, category) or CategoryAlignment()

    def aliases_for(self, category: Optional[str]) -> list[str]:
        """Collection aliases that map to the category (case-insensitive)."""
        if not category:
            return []
        target = category.lower()
        return [
            alias for alias, mapped in self.collection_aliases.items()
            if mapped.lower() == target
        ]

    def collection_for(self, category: Optional[str]) -> Optional[str]:
        """First alias mapping exactly to the category."""
        for alias, mapped in self.collection_aliases.items():
            if mapped == category:
                return alias
        return None

    def relevance_for(self, google_category: Optional[str]) -> TaxonomyRelevance:
        key = (google_category or "").strip()
        return self.tag_relevance_map.get(key) or TaxonomyRelevance()

    # ---- store defaults ----

    @property
    def seo_rules(self) -> SeoRules:
        return self.sop_rules.seo_rules

    @property
    def site_name(self) -> str:
        return self.seo_rules.site_name or DEFAULT_SITE_NAME

    def product_url(self, handle: str) -> str:
        domain = self.seo_rules.shop_domain or DEFAULT_SHOP_DOMAIN
        return f"https://{domain}/products/{handle}"


def _lookup(table: dict, category: Optional[str]):
    if not category:
        return None
    if category in table:
        return table[category]
    lowered = category.lower()
    for key, value in table.items():
        if key.lower() == lowered:
            return value
    return None
