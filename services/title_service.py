"""
Title cleanup: HTML removal, banned-term replacement, ALL CAPS fix, length cap.
"""

from typing import Optional
import structlog

from models import CleanupConfig, Finding, ProductRecord
from utils.text_utils import collapse_whitespace, strip_html, to_title_case, word_pattern

logger = structlog.get_logger(__name__)

MAX_TITLE_LENGTH = 70


class TitleService:
    """Title cleaner."""

    def clean(self, title: str, config: CleanupConfig) -> str:
        """
        Normalize a product title.

        - "<b>PINSEL SET</b>" → "Pinsel Set"
        - banned terms replaced by their configured replacement (whole word)
        - cut to 70 characters
        """
        cleaned = strip_html(title)
        ignore_case = config.banned_terms.case_insensitive

        for term, replacement in config.banned_terms.terms.items():
            if not term:
                continue
            cleaned = word_pattern(term, ignore_case).sub(lambda _: replacement, cleaned)

        cleaned = collapse_whitespace(cleaned)

        if _is_all_caps(cleaned):
            cleaned = to_title_case(cleaned)

        if len(cleaned) > MAX_TITLE_LENGTH:
            cleaned = cleaned[:MAX_TITLE_LENGTH].strip()

        return cleaned

    def review(self, record: ProductRecord, config: CleanupConfig) -> tuple[str, list[Finding]]:
        """Cleaned title plus a finding when it changed."""
        cleaned = self.clean(record.title, config)
        if cleaned == record.title:
            return cleaned, []
        return cleaned, [Finding("Title", record.title, cleaned, "Title normalized")]


def _is_all_caps(text: str) -> bool:
    return any(c.isalpha() for c in text) and text == text.upper()


# Singleton instance
_title_service: Optional[TitleService] = None


def get_title_service() -> TitleService:
    """Get or create TitleService instance."""
    global _title_service
    if _title_service is None:
        _title_service = TitleService()
    return _title_service
