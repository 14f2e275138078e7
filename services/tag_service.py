"""
Tag curation.

Normalizes, deduplicates and filters the Tags field, then tops it up from
the title and the category dictionaries when fewer than five tags remain,
or trims it by relevance when more than ten do.
"""

from dataclasses import dataclass, field
from typing import Optional
import structlog

from models import CleanupConfig, Finding, ProductRecord, Severity
from utils.text_utils import normalize_tag, word_pattern

logger = structlog.get_logger(__name__)

TAGS_FIELD = "Tags"

MIN_TAGS = 5
MAX_TAGS = 10
TRIMMED_TAG_COUNT = 8
MAX_TAG_LENGTH = 20
RECOMMENDED_TAG_LENGTH = 16

IRRELEVANT_PATTERNS = [
    ("hibiskus", "hibiscus flowers not relevant to craft tools"),
    ("lisa", "personal names not relevant for product tags"),
    ("bluten", "flower-related terms not relevant for tools/supplies"),
    ("von", "preposition indicates personal attribution"),
    ("tshirt", "clothing items not relevant to craft supplies"),
    ("flamingo", "animal themes not relevant to craft tools/supplies"),
    ("kleidung", "clothing terms not relevant to craft supplies"),
    ("shirt", "clothing items not relevant to craft supplies"),
    ("hose", "clothing items not relevant to craft supplies"),
    ("jacke", "clothing items not relevant to craft supplies"),
    ("mit", "German preposition indicates composite irrelevant tags"),
]

PAINT_EFFECT_TERMS = ("rost", "effekt", "patina")
PAINT_TERMS = ("farb", "paint")

# Title word priorities for generation
CORE_TERMS = {"pinsel", "brush", "farbe", "paint", "acryl", "set"}
DESCRIPTIVE_TERMS = {"spitzig", "rund", "flach", "matt", "metallic"}
BRAND_FRAGMENTS = ("pentart",)
LONG_WORD_LENGTH = 12

TITLE_STOPWORDS = {
    normalize_tag(w) for w in [
        "und", "der", "die", "das", "ein", "eine", "eines", "einen", "einem",
        "mit", "von", "zu", "für", "ist", "sind", "hat", "haben", "wird",
        "werden", "kann", "können", "auch", "sich", "als", "ihr", "ihre",
        "sein", "seine", "wir", "sie", "es", "ich", "du", "nicht", "nur",
        "schon", "noch", "sehr", "hier", "dort", "jetzt", "immer", "artikel",
        "produkt", "packung", "größe", "material", "stück", "zubehör", "neu",
        "hochwertig", "verschiedene", "teilig",
    ]
}

# Trimming scores
TRIM_CORE_TERMS = {"pinsel", "farbe", "set"}
TRIM_ALIGNED_TERMS = {"malen", "basteln", "kreativ", "acryl"}
TRIM_GENERIC_TERMS = {"bastelbedarf", "zubehor", "material"}

GENERIC_CRAFT_TERMS = {"basteln", "kreativ", "diy", "hobby", "handwerk"}
UNSETTLED_CATEGORIES = {"", "uncategorized", "allgemein"}


@dataclass
class TagResult:
    tags: list[str]
    findings: list[Finding] = field(default_factory=list)

    @property
    def joined(self) -> str:
        return ",".join(self.tags)


@dataclass(frozen=True)
class _ProductSignals:
    """Per-product flags computed once, used for every tag."""
    title: str
    category: str
    google_category: str
    is_tool: bool
    is_paint: bool

    @classmethod
    def of(cls, record: ProductRecord) -> "_ProductSignals":
        title = record.title.lower()
        category = record.product_category.lower()
        return cls(
            title=title,
            category=category,
            google_category=record.google_product_category.strip(),
            is_tool=any(t in title for t in ("pinsel", "brush"))
            or any(c in category for c in ("brush", "tool")),
            is_paint=any(t in title for t in ("farbe", "paint")) or "paint" in category,
        )


class TagService:
    """Tag curator."""

    def curate(
        self,
        record: ProductRecord,
        config: CleanupConfig,
        check_alignment: bool = False,
    ) -> TagResult:
        """
        Run the full tag pipeline on one record.

        Args:
            record: Product being processed
            config: Rule tables
            check_alignment: Warn about tags outside the category's keywords.
                Off while the category may still change.
        """
        raw = record.tags
        signals = _ProductSignals.of(record)
        findings: list[Finding] = []

        tags = _dedupe(normalize_tag(t) for t in record.tag_list)

        kept = []
        for tag in tags:
            rejection = self.rejection(tag, signals, config)
            if rejection:
                findings.append(Finding(TAGS_FIELD, tag, "", rejection[0], rejection[1]))
            else:
                kept.append(tag)
        tags = kept

        for tag in tags:
            if len(tag) > RECOMMENDED_TAG_LENGTH:
                findings.append(Finding(
                    TAGS_FIELD, tag, tag,
                    f"Tag '{tag}' exceeds recommended length of {RECOMMENDED_TAG_LENGTH} characters",
                    Severity.WARN,
                ))

        if check_alignment:
            aligned = self.category_keywords(record.product_category, config, include_aliases=True)
            for tag in tags:
                if tag not in aligned:
                    findings.append(Finding(
                        TAGS_FIELD, tag, tag,
                        f"Tag '{tag}' does not align with product category '{signals.category}'",
                        Severity.WARN,
                    ))

        if len(tags) < MIN_TAGS:
            tags = self.generate(tags, record, signals, config, findings)

        if len(tags) > MAX_TAGS:
            trimmed = self.trim(tags, signals)
            findings.append(Finding(
                TAGS_FIELD, ",".join(tags), ",".join(trimmed),
                f"Tag count optimized from {len(tags)} to {len(trimmed)} tags",
            ))
            tags = trimmed

        if not MIN_TAGS <= len(tags) <= MAX_TAGS:
            findings.append(Finding(
                TAGS_FIELD, ",".join(tags), ",".join(tags),
                f"Tag count ({len(tags)}) is outside the recommended range of {MIN_TAGS}-{MAX_TAGS}",
                Severity.WARN,
            ))

        result = TagResult(tags=tags, findings=findings)
        if result.joined != raw:
            findings.append(Finding(
                TAGS_FIELD, raw, result.joined,
                "Tags normalized, duplicates/banned terms removed, and validated",
            ))
        return result

    def revalidate(self, record: ProductRecord, config: CleanupConfig) -> list[Finding]:
        """Alignment hints once the category is final."""
        category = record.product_category
        if category.strip().lower() in UNSETTLED_CATEGORIES:
            return []

        keywords = self.category_keywords(category, config)
        if not keywords:
            return []

        return [
            Finding(
                TAGS_FIELD, tag, tag,
                f"Tag '{tag}' may not align with updated product category '{category}'",
            )
            for tag in record.tag_list
            if tag not in keywords and tag not in GENERIC_CRAFT_TERMS
        ]

    # ===================
    # FILTERS
    # ===================

    def rejection(
        self,
        tag: str,
        signals: _ProductSignals,
        config: CleanupConfig,
    ) -> Optional[tuple[str, Severity]]:
        """Reason and severity for dropping a tag, or None to keep it."""
        reason = _irrelevance(tag, signals)
        if reason:
            return f"Irrelevant tag removed: {reason}", Severity.INFO

        if self.is_banned(tag, config):
            return f"Banned term '{tag}' removed", Severity.WARN

        forbidden = {normalize_tag(k) for k in config.relevance_for(signals.google_category).forbidden_keywords}
        if tag in forbidden:
            return (
                f"Forbidden keyword '{tag}' for Google Product Category "
                f"'{signals.google_category}' removed",
                Severity.WARN,
            )
        return None

    def is_banned(self, tag: str, config: CleanupConfig) -> bool:
        """
        Equal to, or containing as a whole word, any banned term.

        Terms are brought into the tag alphabet first, so "Günstig" and
        "sehr billig" match the tags "gunstig" and "sehrbillig".
        """
        ignore_case = config.banned_terms.case_insensitive
        for term in config.banned_terms.terms:
            folded = normalize_tag(term)
            if not folded:
                continue
            if tag == folded:
                return True
            if word_pattern(folded, ignore_case).search(tag):
                return True
        return False

    def category_keywords(
        self,
        category: str,
        config: CleanupConfig,
        include_aliases: bool = False,
    ) -> set[str]:
        keywords = {normalize_tag(k) for k in config.keywords_for(category).all_keywords()}
        if include_aliases:
            keywords.update(normalize_tag(a) for a in config.aliases_for(category))
        keywords.discard("")
        return keywords

    # ===================
    # GENERATION / TRIMMING
    # ===================

    def generate(
        self,
        tags: list[str],
        record: ProductRecord,
        signals: _ProductSignals,
        config: CleanupConfig,
        findings: list[Finding],
    ) -> list[str]:
        """Top up to MIN_TAGS from title words, category keywords, aliases and defaults."""
        generated = list(tags)

        def accept(candidate: str) -> bool:
            tag = normalize_tag(candidate)
            if not tag or len(tag) > RECOMMENDED_TAG_LENGTH or tag in generated:
                return False
            if self.rejection(tag, signals, config):
                return False
            generated.append(tag)
            return True

        for word, priority in self.title_candidates(record.title):
            if accept(word):
                findings.append(Finding(
                    TAGS_FIELD, "", word,
                    f"Tag inferred from title (priority: {priority:g}): '{word}'",
                ))
                if len(generated) >= MAX_TAGS:
                    break

        keywords = config.keywords_for(record.product_category)
        sources = [
            ("primary_keywords", keywords.primary),
            ("secondary_keywords", keywords.secondary),
            ("collection_aliases", config.aliases_for(record.product_category)),
            ("required_keywords", config.relevance_for(signals.google_category).required_keywords),
        ]
        for source, candidates in sources:
            for candidate in candidates:
                if len(generated) >= MIN_TAGS:
                    break
                if accept(candidate):
                    logger.debug("tag_generated", handle=record.handle, tag=generated[-1], source=source)

        default_tags = config.seo_rules.default_tags
        if len(generated) < MIN_TAGS and default_tags:
            findings.append(Finding(
                TAGS_FIELD, "", "",
                "Applying default tags as insufficient specific tags were generated.",
                Severity.WARN,
            ))
            for candidate in default_tags:
                if len(generated) >= MIN_TAGS:
                    break
                accept(candidate)

        if len(generated) > len(tags):
            findings.append(Finding(
                TAGS_FIELD, ",".join(tags), ",".join(generated),
                "Tags generated to meet minimum count",
            ))
        return generated

    def title_candidates(self, title: str) -> list[tuple[str, float]]:
        """
        Title words scored for tag generation, best first.

        Core product terms 3, descriptive terms 2, brand or long fragments
        0.5, anything else 1.
        """
        scored = []
        for word in title.lower().split():
            cleaned = normalize_tag(word)
            if len(cleaned) <= 2 or len(cleaned) > RECOMMENDED_TAG_LENGTH:
                continue
            if cleaned in TITLE_STOPWORDS:
                continue
            if cleaned in CORE_TERMS:
                priority = 3.0
            elif cleaned in DESCRIPTIVE_TERMS:
                priority = 2.0
            elif any(b in cleaned for b in BRAND_FRAGMENTS) or len(cleaned) > LONG_WORD_LENGTH:
                priority = 0.5
            else:
                priority = 1.0
            scored.append((cleaned, priority))

        # sorted() is stable, equal priorities keep title order
        return sorted(scored, key=lambda item: -item[1])

    def trim(self, tags: list[str], signals: _ProductSignals) -> list[str]:
        """Keep the TRIMMED_TAG_COUNT most relevant tags."""
        def score(tag: str) -> int:
            value = 1
            if tag in signals.title or tag in TRIM_CORE_TERMS:
                value += 2
            if tag in signals.category or tag in TRIM_ALIGNED_TERMS:
                value += 1
            if tag in TRIM_GENERIC_TERMS:
                value -= 1
            if len(tag) > LONG_WORD_LENGTH:
                value -= 2
            return value

        return sorted(tags, key=lambda t: -score(t))[:TRIMMED_TAG_COUNT]


def _irrelevance(tag: str, signals: _ProductSignals) -> Optional[str]:
    if len(tag) > MAX_TAG_LENGTH:
        return f"tag too long (>{MAX_TAG_LENGTH} chars) likely compound irrelevant term"

    for pattern, reason in IRRELEVANT_PATTERNS:
        if pattern in tag:
            return reason

    if signals.is_tool and any(t in tag for t in PAINT_EFFECT_TERMS):
        return "paint effect terms not relevant for tools"

    if (
        not signals.is_tool
        and not signals.is_paint
        and any(t in tag for t in PAINT_TERMS)
        and not any(t in signals.title for t in PAINT_TERMS)
    ):
        return "paint terms not relevant for non-paint products"

    return None


def _dedupe(tags) -> list[str]:
    seen: dict[str, None] = {}
    for tag in tags:
        if tag:
            seen[tag] = None
    return list(seen)


# Singleton instance
_tag_service: Optional[TagService] = None


def get_tag_service() -> TagService:
    """Get or create TagService instance."""
    global _tag_service
    if _tag_service is None:
        _tag_service = TagService()
    return _tag_service
