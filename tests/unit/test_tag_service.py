"""
Tests for tag curation.
"""

import pytest

from models import BannedTerms, BannedTermsRules, CleanupConfig, ProductRecord, Severity
from services.tag_service import TagService, MAX_TAG_LENGTH
from tests.conftest import PAINT_PATH


def _record(**fields) -> ProductRecord:
    fields.setdefault("handle", "test")
    fields.setdefault("title", "Rundpinsel")
    return ProductRecord(**fields)


def _reasons(result) -> list[str]:
    return [f.reason for f in result.findings]


class TestNormalization:
    """Tests for normalize and dedupe."""

    def test_dedupes_and_lowercases(self, config):
        record = _record(tags="Pinsel, pinsel, Malen, Aquarell, Rund, Flach")
        result = TagService().curate(record, config)

        assert result.tags == ["pinsel", "malen", "aquarell", "rund", "flach"]
        assert result.joined == "pinsel,malen,aquarell,rund,flach"
        assert "Tags normalized, duplicates/banned terms removed, and validated" in _reasons(result)

    def test_unchanged_tags_have_no_normalize_finding(self, config):
        record = _record(tags="pinsel,malen,aquarell,rund,flach")
        result = TagService().curate(record, config)

        assert result.findings == []


class TestFilters:
    """Tests for tag rejection."""

    def test_irrelevant_patterns_removed(self, config):
        record = _record(tags="lisa,hose,rost,pinsel")
        result = TagService().curate(record, config)

        assert "lisa" not in result.tags
        assert "hose" not in result.tags
        assert "rost" not in result.tags
        assert "pinsel" in result.tags
        assert "Irrelevant tag removed: personal names not relevant for product tags" in _reasons(result)
        assert "Irrelevant tag removed: paint effect terms not relevant for tools" in _reasons(result)

    def test_paint_terms_on_non_paint_product(self, config):
        record = _record(title="Schere klein", product_category="Werkzeug", tags="farbe,schere")
        result = TagService().curate(record, config)

        assert "farbe" not in result.tags
        assert "schere" in result.tags

    def test_paint_terms_kept_on_paint_product(self, config):
        record = _record(title="Acrylfarbe Rot", tags="farbe,acryl")
        result = TagService().curate(record, config)

        assert "farbe" in result.tags

    def test_banned_terms_removed(self, config):
        record = _record(tags="billig,billig-set,pinsel")
        result = TagService().curate(record, config)

        assert "billig" not in result.tags
        assert "billig-set" not in result.tags
        banned = [f for f in result.findings if f.reason == "Banned term 'billig' removed"]
        assert banned and banned[0].severity == Severity.WARN

    def test_banned_terms_matched_in_tag_alphabet(self):
        config = CleanupConfig(
            banned_terms=BannedTerms(
                terms={"Günstig": "", "sehr billig": ""},
                rules=BannedTermsRules(enforce_case_insensitive=True),
            )
        )
        result = TagService().curate(_record(tags="Günstig,sehr billig,pinsel"), config)

        assert "gunstig" not in result.tags
        assert "sehrbillig" not in result.tags
        assert "Banned term 'gunstig' removed" in _reasons(result)
        assert "Banned term 'sehrbillig' removed" in _reasons(result)

    def test_overlong_tag_removed(self, config):
        long_tag = "abcdefghijklmnopqrstuv"
        assert len(long_tag) > MAX_TAG_LENGTH

        result = TagService().curate(_record(tags=f"{long_tag},pinsel"), config)

        assert long_tag not in result.tags

    def test_forbidden_keyword_for_taxonomy(self, config):
        record = _record(title="Acrylfarbe Rot", google_product_category=PAINT_PATH, tags="pinsel,farbe")
        result = TagService().curate(record, config)

        assert "pinsel" not in result.tags
        forbidden = [f for f in result.findings if f.reason.startswith("Forbidden keyword 'pinsel'")]
        assert forbidden and forbidden[0].severity == Severity.WARN

    def test_length_warning(self, config):
        record = _record(tags="aquarellpapierset,pinsel,malen,rund,flach")
        result = TagService().curate(record, config)

        assert "aquarellpapierset" in result.tags
        assert "Tag 'aquarellpapierset' exceeds recommended length of 16 characters" in _reasons(result)


class TestGeneration:
    """Tests for topping up short tag lists."""

    def test_from_title_and_keywords(self, config, brush_record):
        record = brush_record.model_copy(update={"product_category": "Brushes"})
        result = TagService().curate(record, config)

        assert result.tags == ["pinsel", "set", "brush", "malen", "aquarell"]
        assert "Tag inferred from title (priority: 3): 'pinsel'" in _reasons(result)
        assert "Tags generated to meet minimum count" in _reasons(result)

    def test_default_tags(self, config):
        record = _record(title="Rahmen", product_category="")
        result = TagService().curate(record, config)

        assert result.tags == ["rahmen", "basteln", "kreativ", "diy", "hobby"]
        defaults = [f for f in result.findings if f.reason.startswith("Applying default tags")]
        assert defaults[0].severity == Severity.WARN

    def test_count_warning_without_sources(self, empty_config):
        result = TagService().curate(_record(title=""), empty_config)

        assert result.tags == []
        assert "Tag count (0) is outside the recommended range of 5-10" in _reasons(result)

    def test_title_candidates_ordered_by_priority(self):
        candidates = TagService().title_candidates("Pentartlack Rund Pinsel")
        assert candidates == [("pinsel", 3.0), ("rund", 2.0), ("pentartlack", 0.5)]


class TestTrimming:
    """Tests for trimming long tag lists."""

    def test_trims_to_eight(self, config):
        tags = "pinsel,set,malen,aquarell,rund,flach,basteln,kreativ,diy,hobby,handwerk,bastelbedarf"
        result = TagService().curate(_record(tags=tags), config)

        assert len(result.tags) == 8
        assert "bastelbedarf" not in result.tags
        assert result.tags[:3] == ["pinsel", "set", "rund"]
        assert "Tag count optimized from 12 to 8 tags" in _reasons(result)


class TestAlignment:
    """Tests for category alignment checks."""

    def test_alignment_warning(self, config):
        record = _record(product_category="Brushes", tags="pinsel,deko,malen,rund,flach")
        result = TagService().curate(record, config, check_alignment=True)

        warned = [f for f in result.findings if "does not align" in f.reason]
        assert [f.original for f in warned] == ["deko"]
        assert warned[0].severity == Severity.WARN

    def test_revalidate(self, config):
        record = _record(product_category="Brushes", tags="pinsel,deko,basteln")
        findings = TagService().revalidate(record, config)

        assert len(findings) == 1
        assert findings[0].reason == "Tag 'deko' may not align with updated product category 'Brushes'"
        assert findings[0].severity == Severity.INFO

    @pytest.mark.parametrize("category", ["", "Uncategorized", "allgemein"])
    def test_revalidate_skips_unsettled(self, config, category):
        record = _record(product_category=category, tags="deko")
        assert TagService().revalidate(record, config) == []


class TestTagInvariants:
    """Whatever the input, output tags are unique, short and clean."""

    @pytest.mark.parametrize("title,tags", [
        ("Rundpinsel", "Pinsel,PINSEL, pinsel ,billig"),
        ("Acrylfarbe Rot matt", "farbe,Farbe,acryl,gratis,deko,rot,matt,set,neu,basteln,hobby,diy"),
        ("Schere klein", ""),
        ("Stempel Set Blumen", "stempel,blumen,blüten,hibiskus,tshirt"),
        ("", "a,b,c"),
    ])
    def test_invariants(self, config, title, tags):
        result = TagService().curate(_record(title=title, tags=tags), config)
        service = TagService()

        assert len(result.tags) == len(set(result.tags))
        assert all(len(t) <= MAX_TAG_LENGTH for t in result.tags)
        assert not any(service.is_banned(t, config) for t in result.tags)
