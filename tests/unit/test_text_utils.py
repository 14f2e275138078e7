"""
Tests for text utilities.
"""

from utils.text_utils import (
    strip_html,
    collapse_whitespace,
    fold_diacritics,
    normalize_tag,
    contains_word,
    to_title_case,
    truncate_at_word,
)


class TestStripHtml:
    """Tests for HTML removal."""

    def test_removes_tags(self):
        assert strip_html("<p>Pinsel <b>Set</b></p>") == "Pinsel Set"

    def test_trims(self):
        assert strip_html("  <br> Pinsel  ") == "Pinsel"

    def test_handles_none(self):
        assert strip_html(None) == ""

    def test_decodes_entities(self):
        assert strip_html("Pinsel&nbsp;&amp;&nbsp;Set") == "Pinsel & Set"

    def test_drops_script_contents(self):
        assert strip_html('<p>Pinsel</p><script type="application/ld+json">{"sku": "X"}</script>') == "Pinsel"


class TestCollapseWhitespace:
    """Tests for whitespace collapsing."""

    def test_collapses_runs(self):
        assert collapse_whitespace("  Pinsel \n\t Set  ") == "Pinsel Set"

    def test_handles_empty(self):
        assert collapse_whitespace("") == ""


class TestFoldDiacritics:
    """Tests for accent folding."""

    def test_removes_umlauts(self):
        assert fold_diacritics("Häkelnadel") == "Hakelnadel"

    def test_keeps_eszett(self):
        assert fold_diacritics("Größe") == "Große"


class TestNormalizeTag:
    """Tests for tag normalization."""

    def test_lowercases_and_drops_spaces(self):
        assert normalize_tag("Acryl Farbe") == "acrylfarbe"

    def test_folds_umlauts(self):
        assert normalize_tag("Häkeln!") == "hakeln"

    def test_keeps_digits_and_hyphens(self):
        assert normalize_tag("3D-Effekt") == "3d-effekt"

    def test_handles_none(self):
        assert normalize_tag(None) == ""


class TestContainsWord:
    """Tests for whole-word matching."""

    def test_matches_whole_word(self):
        assert contains_word("Farbe von Pentart", "pentart") is True

    def test_ignores_partial_word(self):
        assert contains_word("Pentartfarbe", "pentart") is False

    def test_case_sensitive_when_asked(self):
        assert contains_word("Pentart", "pentart", ignore_case=False) is False

    def test_term_is_literal(self):
        # "." must not act as a wildcard
        assert contains_word("axb", "a.b") is False

    def test_empty_inputs(self):
        assert contains_word("", "pinsel") is False
        assert contains_word("Pinsel", "") is False


class TestToTitleCase:
    """Tests for title casing."""

    def test_all_caps_title(self):
        assert to_title_case("PINSEL SET 6 TEILIG") == "Pinsel Set 6 Teilig"


class TestTruncateAtWord:
    """Tests for word-boundary truncation."""

    def test_short_text_unchanged(self):
        assert truncate_at_word("Pinsel", 10) == "Pinsel"

    def test_cuts_at_last_space(self):
        assert truncate_at_word("Hallo schöne Welt", 10) == "Hallo"

    def test_hard_cut_without_space(self):
        assert truncate_at_word("abcdefghij", 4) == "abcd"

    def test_result_never_exceeds_limit(self):
        text = "Wort " * 50
        assert len(truncate_at_word(text, 160)) <= 160
