"""
Body (HTML) rebuilder.

Sanitizes the existing description, judges its quality and then
preserves, augments or regenerates it from category templates, with
embedded videos moved to the end and a closing line. Framing (the SEO
metadata block in front, a JSON-LD Product payload behind) runs later,
once SEO fields and the SKU are final.
"""

import html
import json
import re
from dataclasses import dataclass, field
from typing import Optional
import structlog
from bs4 import BeautifulSoup, Comment

from models import BodyQuality, CleanupConfig, Finding, ProductRecord
from utils.text_utils import strip_html

logger = structlog.get_logger(__name__)

BODY_FIELD = "Body (HTML)"

HIGH_QUALITY_MIN_LENGTH = 200
MEDIUM_QUALITY_MIN_LENGTH = 50
SHORT_BODY_LENGTH = 100
MAX_FEATURES = 4
MAX_TAG_MENTIONS = 3

DEFAULT_CLOSING_LINE = "Für kreative Projekte und saubere Ergebnisse."
CLOSING_LINE_MARKER = 'class="closing-line"'

# Categories that never get the store-wide generic closing line
NO_GENERIC_CLOSING = {"schule"}

INTRO_TEMPLATES = {
    "Glasätzpaste": "{primary} Professionelle Ätzpaste für dauerhafte Frost-Effekte auf Glas.",
    "Korbböden / Peddigrohr": "{primary} Stabile Grundlage für handgefertigte Flechtarbeiten.",
    "Paints & Mediums": "{primary} Hochwertige Farben für kreative Gestaltung und künstlerische Projekte.",
    "Papers & Cardstock": "{primary} Qualitätspapier für Scrapbooking und Bastelarbeiten.",
    "Jewelry Making": "{primary} Präzise Komponenten für individuelle Schmuckkreationen.",
}

_LEADING_TEXT_RE = re.compile(r"^([^<]*)")

# Dropped with their contents; deprecated wrappers keep their text
REMOVED_TAGS = ["script", "meta", "link"]
DEPRECATED_TAGS = ["font", "center"]
STRUCTURE_TAGS = ["p", "ul", "ol"]

# ===================
# VIDEO PATTERNS
# ===================

_YOUTUBE_IFRAME_RE = re.compile(
    r"<iframe[^>]*(?:youtube\.com/embed|youtube-nocookie\.com/embed|youtu\.be)[^>]*>\s*</iframe>",
    re.IGNORECASE,
)
_YOUTUBE_ANCHOR_RE = re.compile(
    r"<a\s[^>]*href=[\"']https?://(?:www\.)?(?:youtube\.com|youtu\.be)[^\"']*[\"'][^>]*>[\s\S]*?</a>",
    re.IGNORECASE,
)
_YOUTUBE_URL_RE = re.compile(
    r"(?<![\"'=/\w])https?://(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)[\w-]+",
    re.IGNORECASE,
)


@dataclass
class BodyResult:
    body: str
    quality: BodyQuality
    findings: list[Finding] = field(default_factory=list)


class BodyService:
    """Body content rebuilder."""

    def rebuild(self, record: ProductRecord, config: CleanupConfig) -> BodyResult:
        category = record.product_category

        cleaned = sanitize_html(record.body_html.strip())
        videos, cleaned = extract_videos(cleaned)
        quality = assess_quality(cleaned)

        if quality is BodyQuality.HIGH:
            body = cleaned
        elif quality is BodyQuality.MEDIUM:
            body = self.augment(cleaned, category, config)
        else:
            body = self.regenerate(record, config)

        if videos:
            body += "\n" + "\n".join(videos)

        body = self.ensure_closing_line(body, category, config)

        logger.debug("body_rebuilt", handle=record.handle, quality=quality.value, videos=len(videos))

        return BodyResult(
            body=body,
            quality=quality,
            findings=[Finding(BODY_FIELD, record.body_html, "(see Output)", quality.decision_reason)],
        )

    # ===================
    # QUALITY PATHS
    # ===================

    def augment(self, existing: str, category: str, config: CleanupConfig) -> str:
        """Add a feature list and a usage sentence to medium-quality content."""
        augmented = existing
        features = config.alignment_for(category).must_include_any_of

        if features and "<ul>" not in augmented:
            augmented += _feature_list(features)

        secondary = _first(config.keywords_for(category).secondary)
        if secondary and secondary.lower() not in augmented:
            augmented += f"\n<p>Ideal für {secondary.lower()} und vielseitige Anwendungen.</p>"

        return augmented

    def regenerate(self, record: ProductRecord, config: CleanupConfig) -> str:
        """Build a new body from the category's templates."""
        category = record.product_category
        keywords = config.keywords_for(category)
        features = config.alignment_for(category).must_include_any_of

        intro = intro_sentence(
            _first(keywords.primary), record.title, category, record.vendor
        )
        body = f"<p>{intro}</p>"

        if features:
            body += _feature_list(features)

        secondary = _first(keywords.secondary)
        if secondary:
            body += f"\n<p>Ideal für {secondary.lower()} und vielseitige Anwendungen.</p>"

        if len(strip_html(body)) < SHORT_BODY_LENGTH:
            product_type = record.product_type.strip()
            if product_type and product_type not in body:
                body += f"\n<p>Produkttyp: {product_type}.</p>"
            tags = record.tag_list
            if tags and "Schlagwörter" not in body:
                body += f"\n<p>Schlagwörter: {', '.join(tags[:MAX_TAG_MENTIONS])}.</p>"

        return body

    # ===================
    # FRAMING
    # ===================

    def frame(self, record: ProductRecord, config: CleanupConfig) -> str:
        """Metadata block, rebuilt content, JSON-LD. Reads the record as it stands."""
        return self.seo_metadata(record, config) + record.body_html + "\n" + self.json_ld(record, config)

    def ensure_closing_line(self, body: str, category: str, config: CleanupConfig) -> str:
        """Wrap leading bare text and append the category closing line once."""
        if not body.startswith("<p>") and body.strip():
            leading = _LEADING_TEXT_RE.match(body).group(1)
            if leading.strip():
                body = body.replace(leading, f"<p>{leading.strip()}</p>", 1)

        if CLOSING_LINE_MARKER in body:
            return body

        closing = _first(config.alignment_for(category).closing_line_templates)
        if not closing:
            if (category or "").lower() in NO_GENERIC_CLOSING:
                closing = DEFAULT_CLOSING_LINE
            else:
                closing = config.seo_rules.generic_closing or DEFAULT_CLOSING_LINE

        return body + f'\n<p {CLOSING_LINE_MARKER}>{closing}</p>'

    def seo_metadata(self, record: ProductRecord, config: CleanupConfig) -> str:
        """Canonical, description, Open Graph and Twitter tags, one per paragraph."""
        title = record.title
        category = record.product_category
        vendor = record.vendor
        site_name = config.site_name
        url = config.product_url(record.handle)
        image = record.image_src

        seo_title = record.seo_title or title
        if not seo_title:
            seo_title = f"{category} von {vendor}" if category and vendor else f"Produkt bei {site_name}"

        description = record.seo_description or fallback_description(title, category, vendor, site_name)

        e = _attr
        tags = [
            f'<link rel="canonical" href="{e(url)}">',
            f'<meta name="description" content="{e(description)}">',
            '<meta property="og:type" content="product">',
            f'<meta property="og:title" content="{e(seo_title)}">',
            f'<meta property="og:description" content="{e(description)}">',
            f'<meta property="og:url" content="{e(url)}">',
        ]
        if image:
            tags += [
                f'<meta property="og:image" content="{e(image)}">',
                f'<meta property="og:image:alt" content="{e(seo_title)} – Produktbild">',
                '<meta property="og:image:width" content="1200">',
                '<meta property="og:image:height" content="1200">',
            ]
        tags += [
            '<meta name="twitter:card" content="summary_large_image">',
            f'<meta name="twitter:title" content="{e(seo_title)}">',
            f'<meta name="twitter:description" content="{e(description)}">',
        ]
        if image:
            tags.append(f'<meta name="twitter:image" content="{e(image)}">')

        return "".join(f"<p>{tag}</p>" for tag in tags)

    def json_ld(self, record: ProductRecord, config: CleanupConfig) -> str:
        """schema.org Product payload as a script block."""
        payload = {
            "@context": "https://schema.org/",
            "@type": "Product",
            "name": record.title,
            "image": record.image_src,
            "description": record.seo_description,
            "sku": record.variant_sku,
            "mpn": record.variant_barcode,
            "brand": {
                "@type": "Brand",
                "name": record.vendor,
            },
            "offers": {
                "@type": "Offer",
                "url": config.product_url(record.handle),
                "priceCurrency": record.variant_price_currency or "EUR",
                "price": record.variant_price or "0.00",
                "itemCondition": "https://schema.org/NewCondition",
                "availability": "https://schema.org/InStock",
            },
        }
        data = json.dumps(payload, indent=2, ensure_ascii=False).replace("</", "<\\/")
        return f'<script type="application/ld+json">{data}</script>'


# ===================
# HELPERS
# ===================

def sanitize_html(raw: str) -> str:
    """Strip comments, head tags, scripts, deprecated markup and inline styles."""
    if not raw:
        return ""
    soup = BeautifulSoup(raw, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for tag in reversed(soup.find_all(REMOVED_TAGS)):
        tag.decompose()
    for tag in soup.find_all(DEPRECATED_TAGS):
        tag.unwrap()
    for tag in soup.find_all(style=True):
        del tag["style"]
    for tag in soup.find_all("div"):
        tag.name = "p"
    # innermost first so wrappers left empty go too
    for tag in reversed(soup.find_all("p")):
        if not tag.get_text(strip=True) and tag.find(True) is None:
            tag.decompose()

    return str(soup).strip()


def extract_videos(body: str) -> tuple[list[str], str]:
    """
    Pull YouTube embeds, links and bare URLs out of the body.

    Returns:
        (video snippets in document order, body without them)
    """
    found: list[tuple[int, str]] = []

    def take(pattern: re.Pattern, text: str, wrap: bool) -> str:
        def collect(match: re.Match) -> str:
            snippet = match.group(0)
            if wrap:
                snippet = f'<p><a href="{snippet}" target="_blank">Video ansehen</a></p>'
            found.append((match.start(), snippet))
            return "\x00" * len(match.group(0))
        return pattern.sub(collect, text)

    masked = take(_YOUTUBE_IFRAME_RE, body, wrap=False)
    masked = take(_YOUTUBE_ANCHOR_RE, masked, wrap=False)
    masked = take(_YOUTUBE_URL_RE, masked, wrap=True)

    if not found:
        return [], body

    found.sort(key=lambda item: item[0])
    return [snippet for _, snippet in found], masked.replace("\x00", "").strip()


def assess_quality(body: str) -> BodyQuality:
    """
    Judge existing content by plain-text length and structure.

    HIGH: > 200 chars with a paragraph or list tag
    MEDIUM: > 50 chars
    LOW: anything shorter
    """
    length = len(strip_html(body))
    if length > HIGH_QUALITY_MIN_LENGTH and _has_structure(body):
        return BodyQuality.HIGH
    if length > MEDIUM_QUALITY_MIN_LENGTH:
        return BodyQuality.MEDIUM
    return BodyQuality.LOW


def _has_structure(body: str) -> bool:
    return BeautifulSoup(body, "html.parser").find(STRUCTURE_TAGS) is not None


def intro_sentence(primary: str, title: str, category: str, vendor: str) -> str:
    template = INTRO_TEMPLATES.get(category)
    if template:
        return template.format(primary=primary).strip()
    if primary and title:
        return f"{primary} {title} für kreative Projekte und professionelle Ergebnisse."
    if category and vendor:
        return f"Entdecken Sie hochwertige {category} von {vendor} für Ihre Projekte."
    if category:
        return f"Entdecken Sie unsere {category} für kreative Projekte."
    if title:
        return f"{title} für kreative Projekte und professionelle Ergebnisse."
    return "Ein vielseitiges Produkt für kreative Anwendungen."


def fallback_description(title: str, category: str, vendor: str, site_name: str) -> str:
    parts = []
    if title:
        parts.append(f"Entdecken Sie das Produkt '{title}'.")
    if category:
        parts.append(f"Kategorie: {category}.")
    if vendor:
        parts.append(f"Marke: {vendor}.")
    parts.append(f"Jetzt bei {site_name} entdecken.")
    return " ".join(parts)


def _feature_list(features: list[str]) -> str:
    items = "".join(f"\n<li>{f}</li>" for f in features[:MAX_FEATURES])
    return f"\n<ul>{items}\n</ul>"


def _first(values: list[str]) -> str:
    return values[0] if values else ""


def _attr(value: str) -> str:
    return html.escape(value or "", quote=True)


# Singleton instance
_body_service: Optional[BodyService] = None


def get_body_service() -> BodyService:
    """Get or create BodyService instance."""
    global _body_service
    if _body_service is None:
        _body_service = BodyService()
    return _body_service
