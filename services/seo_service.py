"""
SEO title and description builder.

The description must land in [155, 160] characters. It starts from a
foundation sentence and grows through an ordered chain of additions,
each gated on the maximum length. When that falls short, a fallback of
whole sentences guarantees the band even for records with no usable
content.
"""

import re
from dataclasses import dataclass
from typing import Optional
import structlog

from models import CleanupConfig, Finding, ProductRecord
from utils.text_utils import collapse_whitespace, strip_html, truncate_at_word

logger = structlog.get_logger(__name__)

SEO_TITLE_MAX = 60
SEO_DESC_MIN = 155
SEO_DESC_MAX = 160

BRAND_NAME = "bastelschachtel"
BRAND_SUFFIX = f" | {BRAND_NAME}"

DEFAULT_FOUNDATION = "Hochwertige Produkte für kreative Projekte und Bastelarbeiten."

GENERIC_FILLERS = [
    "Hochwertige Qualität und sorgfältige Verarbeitung.",
    "Ideal für kreative Projekte und professionelle Anwendungen.",
    "Schnelle Lieferung und erstklassiger Kundenservice.",
    "Perfekt für Hobby und professionelle Nutzung.",
]

FALLBACK_CLOSING = " Ideal für Hobby und Beruf mit erstklassiger Qualität."

# Longest first; the two shortest cover any gap of up to 10 characters
PADDING_SENTENCES = [
    " Jetzt entdecken und kreativ werden.",
    " Sorgfältig geprüfte Qualität.",
    " Sicher verpackt versendet.",
    " Beliebt bei Bastlern.",
    " Jetzt bestellen.",
    " Top Qualität.",
    " Vielseitig.",
    " Praktisch.",
    " Ideal.",
    " Top.",
]

_ADJECTIVE_RE = re.compile(r"\b([a-zäöüß]+(?:er|e|es|en|em))\b")

QUALITY_STOPWORDS = {
    "der", "die", "das", "ein", "eine", "eines", "einen", "einem",
    "und", "oder", "aber", "mit", "von", "zu", "für", "ist", "sind",
    "hat", "haben", "wird", "werden", "kann", "können", "auch", "sich",
    "als", "ihr", "ihre", "sein", "seine", "wir", "sie", "es", "ich", "du",
    "nicht", "nur", "schon", "noch", "sehr", "hier", "dort", "jetzt", "immer",
    "artikel", "produkt", "set", "packung", "farbe", "größe", "material",
    "stück", "zubehör", "neu", "hochwertig", "verschiedene",
}
MAX_QUALITIES = 3


@dataclass
class SeoFields:
    seo_title: str
    seo_description: str

    @property
    def within_bounds(self) -> bool:
        """False only for a description outside [155, 160]."""
        return SEO_DESC_MIN <= len(self.seo_description) <= SEO_DESC_MAX


class SeoService:
    """SEO field builder."""

    def build(self, record: ProductRecord, config: CleanupConfig) -> SeoFields:
        seo = SeoFields(
            seo_title=self.build_title(record.title),
            seo_description=self.build_description(record, config),
        )
        if not seo.within_bounds:
            logger.warning(
                "seo_description_out_of_bounds",
                handle=record.handle,
                length=len(seo.seo_description)
            )
        return seo

    def review(self, record: ProductRecord, config: CleanupConfig) -> tuple[SeoFields, list[Finding]]:
        """Build SEO fields plus a finding per changed field."""
        seo = self.build(record, config)
        findings = []
        if seo.seo_title != record.seo_title:
            findings.append(Finding("SEO Title", record.seo_title, seo.seo_title,
                                    "SEO title standardized"))
        if seo.seo_description != record.seo_description:
            findings.append(Finding("SEO Description", record.seo_description, seo.seo_description,
                                    "SEO description standardized"))
        return seo, findings

    # ===================
    # TITLE
    # ===================

    def build_title(self, title: str) -> str:
        """Drop the " | bastelschachtel" suffix and cut to 60 characters."""
        seo_title = title
        if seo_title.lower().endswith(BRAND_SUFFIX):
            seo_title = seo_title[:-len(BRAND_SUFFIX)]
        if seo_title.strip().lower() == BRAND_NAME:
            seo_title = title
        if len(seo_title) > SEO_TITLE_MAX:
            seo_title = seo_title[:SEO_TITLE_MAX].strip()
        return seo_title

    # ===================
    # DESCRIPTION
    # ===================

    def foundation(self, category: str, config: CleanupConfig) -> str:
        collection = config.collection_for(category)
        if collection and config.collection_seo.get(collection):
            return config.collection_seo[collection]
        return config.sop_rules.seo_description_fallback or DEFAULT_FOUNDATION

    def build_description(self, record: ProductRecord, config: CleanupConfig) -> str:
        """
        Description in [155, 160] characters.

        An existing description already inside the band is kept as is.
        """
        existing = record.seo_description.strip()
        if SEO_DESC_MIN <= len(existing) <= SEO_DESC_MAX:
            return existing

        title = record.title.strip()
        desc = self.foundation(record.product_category, config)

        def extend(text: str, addition: str) -> str:
            return text + addition if len(text + addition) <= SEO_DESC_MAX else text

        qualities = extract_qualities(title, record.seo_description, config)
        if title:
            if qualities:
                joined = " und ".join(qualities[:2])
                desc = extend(desc, f" '{title}' überzeugt durch Eigenschaften wie {joined}.")
            else:
                desc = extend(desc, f" Entdecken Sie '{title}' für Ihre Projekte.")

        vendor = record.vendor.strip()
        product_type = record.product_type.strip()
        category = record.product_category.strip()
        tags = record.tag_list

        if len(desc) < SEO_DESC_MIN and vendor:
            desc = extend(desc, f" Von der Marke {vendor}.")
        if len(desc) < SEO_DESC_MIN and product_type:
            desc = extend(desc, f" Ideal für {product_type}.")
        if len(desc) < SEO_DESC_MIN and tags:
            desc = extend(desc, f" Perfekt für {', '.join(tags[:2])}.")

        desc = collapse_whitespace(desc)

        if len(desc) < SEO_DESC_MIN:
            details = []
            if category and category not in desc:
                details.append(f" Kategorie: {category}.")
            if vendor and vendor not in desc:
                details.append(f" Von {vendor}.")
            if product_type and product_type not in desc:
                details.append(f" Geeignet für {product_type}.")
            for detail in details:
                if len(desc) < SEO_DESC_MIN:
                    desc = extend(desc, detail)

        if len(desc) < SEO_DESC_MIN:
            for filler in GENERIC_FILLERS:
                extended = extend(desc, " " + filler)
                if extended != desc:
                    desc = extended
                    break

        if len(desc) > SEO_DESC_MAX:
            desc = truncate_at_word(desc, SEO_DESC_MAX)

        if len(desc) < SEO_DESC_MIN:
            desc = self.fallback_description(self.foundation(record.product_category, config), title)

        return desc

    def fallback_description(self, foundation: str, title: str) -> str:
        """
        Guaranteed-length description built from whole sentences.

        Foundation sentence, a product mention and a closing sentence, each
        kept only while the text stays within 160 characters. Short padding
        sentences then close the gap to 155; the text always ends on a full
        sentence.
        """
        desc = truncate_at_word(foundation, SEO_DESC_MAX)
        mention = (
            f" Entdecken Sie das hochwertige Produkt '{title}'." if title
            else " Entdecken Sie unsere hochwertigen Produkte."
        )
        for sentence in (mention, FALLBACK_CLOSING):
            if len(desc + sentence) <= SEO_DESC_MAX:
                desc += sentence
        return pad_with_sentences(desc)


def pad_with_sentences(desc: str) -> str:
    """
    Append padding sentences until the text reaches 155 characters.

    Each step takes the longest unused sentence that still fits under 160.
    """
    unused = list(PADDING_SENTENCES)
    while len(desc) < SEO_DESC_MIN:
        room = SEO_DESC_MAX - len(desc)
        sentence = next((s for s in unused if len(s) <= room), None)
        if sentence is None:
            break
        unused.remove(sentence)
        desc += sentence if desc else sentence.lstrip()
    return desc


def extract_qualities(title: str, description: str, config: CleanupConfig) -> list[str]:
    """
    Descriptive words from title and description.

    German adjective-like endings (-er, -e, -es, -en, -em) minus stopwords,
    then any keyword-dictionary term found in the text. Up to three.
    """
    text = f"{title.lower()} {strip_html(description).lower()}"
    qualities: dict[str, None] = {}

    for word in _ADJECTIVE_RE.findall(text):
        if len(word) > 3 and word not in QUALITY_STOPWORDS:
            qualities[word] = None

    for tiers in config.keyword_dictionary.values():
        for keyword in tiers.all_keywords():
            if keyword and keyword.lower() in text:
                qualities[keyword] = None

    return list(qualities)[:MAX_QUALITIES]


# Singleton instance
_seo_service: Optional[SeoService] = None


def get_seo_service() -> SeoService:
    """Get or create SeoService instance."""
    global _seo_service
    if _seo_service is None:
        _seo_service = SeoService()
    return _seo_service
