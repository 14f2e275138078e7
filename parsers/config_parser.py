"""
Config sheet loader.

Turns (key, json_text) entries into a typed CleanupConfig through one
explicit key → field table. Each key is accepted with or without the
"_json" suffix.
"""

import json
from typing import Any, Callable, Iterable
import structlog

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from exceptions import ConfigParseError
from models.rules import BannedTerms, CleanupConfig, SopRules

logger = structlog.get_logger(__name__)


def _unwrap(envelope: str) -> Callable[[dict], Any]:
    """Use parsed[envelope] when it holds the table, else the object itself."""
    def unwrap(parsed: dict) -> Any:
        inner = parsed.get(envelope)
        return inner if isinstance(inner, dict) else parsed
    return unwrap


def _banned_terms(parsed: dict) -> dict:
    terms = parsed.get("banned_terms")
    rules = parsed.get("rules")
    if not isinstance(terms, dict):
        terms = {k: v for k, v in parsed.items() if k != "rules"}
    terms = {k: "" if v is None else v for k, v in terms.items()}
    return {"terms": terms, "rules": rules if isinstance(rules, dict) else {}}


def _string_aliases(parsed: dict) -> dict:
    aliases = _unwrap("aliases")(parsed)
    kept = {k: v for k, v in aliases.items() if isinstance(v, str) and v}
    if len(kept) != len(aliases):
        logger.debug("config_aliases_ignored", count=len(aliases) - len(kept))
    return kept


def _as_is(parsed: dict) -> dict:
    return parsed


# key → (CleanupConfig field, pre-processing)
CONFIG_KEYS: dict[str, tuple[str, Callable[[dict], Any]]] = {
    "banned_terms": ("banned_terms", _banned_terms),
    "category_alignment": ("category_alignment", _unwrap("categories")),
    "keyword_dictionary": ("keyword_dictionary", _unwrap("dictionary")),
    "collection_aliases": ("collection_aliases", _string_aliases),
    "collection_seo_descriptions": ("collection_seo", _as_is),
    "sop_phase3_rules": ("sop_rules", _as_is),
    "known_vendors": ("known_vendors", _as_is),
    "google_taxonomy_map": ("google_taxonomy_map", _as_is),
    "tag_relevance_map": ("tag_relevance_map", _unwrap("taxonomy_map")),
    "category_keywords_inference": ("category_keywords_inference", _as_is),
}

# Accepted and kept raw; the pipeline does not read them
RAW_KEYS = ("seo_template", "structural_tags", "tag_generation_rules")

ESSENTIAL_KEYS = ("banned_terms", "google_taxonomy_map")


def canonical_key(key: str) -> str:
    key = key.strip()
    return key[:-5] if key.endswith("_json") else key


def parse_config(entries: Iterable[tuple[str, str]]) -> CleanupConfig:
    """
    Build a CleanupConfig from Config sheet entries.

    Args:
        entries: (key, json_text) pairs in sheet order

    Returns:
        Frozen CleanupConfig; tables not present are empty

    Raises:
        ConfigParseError: If a value is not valid JSON or has the wrong shape
    """
    fields: dict[str, Any] = {}
    raw_tables: dict[str, Any] = {}
    seen: set[str] = set()

    for index, (key, value) in enumerate(entries, start=1):
        key = (key or "").strip()
        value = (value or "").strip()
        if not key or not value:
            logger.debug("config_row_skipped", row=index)
            continue

        name = canonical_key(key)
        if name not in CONFIG_KEYS and name not in RAW_KEYS:
            logger.warning("config_key_unrecognized", key=key, row=index)
            continue

        parsed = _parse_json(key, value)
        seen.add(name)

        if name in RAW_KEYS:
            raw_tables[name] = parsed
            continue

        field_name, prepare = CONFIG_KEYS[name]
        annotation = CleanupConfig.model_fields[field_name].annotation
        try:
            fields[field_name] = TypeAdapter(annotation).validate_python(prepare(parsed))
        except PydanticValidationError as e:
            raise ConfigParseError(
                key,
                f"unexpected shape ({e.error_count()} validation errors)",
                preview=value[:100]
            )

    for name in ESSENTIAL_KEYS:
        if name not in seen:
            logger.warning("config_table_missing", table=name, fallback="empty")

    config = CleanupConfig(**fields, raw_tables=raw_tables)
    logger.info("config_loaded", tables=sorted(seen))
    return config


def _parse_json(key: str, value: str) -> dict:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        logger.error("config_json_invalid", key=key, error=str(e), preview=value[:100])
        raise ConfigParseError(key, str(e), preview=value[:100])
    if not isinstance(parsed, dict):
        raise ConfigParseError(
            key,
            f"expected a JSON object, got {type(parsed).__name__}",
            preview=value[:100]
        )
    return parsed


def summarize_config(config: CleanupConfig) -> str:
    """Human-readable load report: entry counts per table."""
    lines = [
        "Config loaded successfully",
        f"- banned_terms: {len(config.banned_terms.terms)} entries "
        f"(case-insensitive: {config.banned_terms.case_insensitive})",
        f"- category_alignment: {len(config.category_alignment)} categories",
        f"- keyword_dictionary: {len(config.keyword_dictionary)} categories",
        f"- collection_aliases: {len(config.collection_aliases)}",
        f"- collection_seo_descriptions: {len(config.collection_seo)}",
        f"- known_vendors: {len(config.known_vendors)}",
        f"- google_taxonomy_map: {len(config.google_taxonomy_map)} mappings",
        f"- tag_relevance_map: {len(config.tag_relevance_map)} taxonomy entries",
        f"- category_keywords_inference: {len(config.category_keywords_inference)} keywords",
        f"- default_tags: {len(config.seo_rules.default_tags)}",
        f"- default_product_category: {config.seo_rules.default_product_category or '(none)'}",
    ]
    for name in RAW_KEYS:
        state = "loaded" if name in config.raw_tables else "missing"
        lines.append(f"- {name}: {state} (unused)")
    return "\n".join(lines)
