"""
Tests for category classification.
"""

from models import ProductRecord, SopRules
from services.category_service import CategoryService, confidence_label, get_category_service


def _record(**fields) -> ProductRecord:
    return ProductRecord(handle="test", **fields)


class TestAliasLookup:
    """Collection aliases win over scoring."""

    def test_adopts_alias(self, config):
        decision = CategoryService().classify(_record(collections="Pinsel & Werkzeug"), config)

        assert decision.category == "Brushes"
        assert decision.source == "alias"
        assert len(decision.findings) == 1
        finding = decision.findings[0]
        assert (finding.original, finding.updated) == ("", "Brushes")
        assert finding.reason == "Mapped via collection_aliases"

    def test_alias_matching_current_value_confirms(self, config):
        decision = CategoryService().classify(
            _record(collections="Pinsel & Werkzeug", product_category="Brushes"), config
        )

        assert decision.category == "Brushes"
        assert decision.findings == []
        assert decision.changed is False

    def test_skips_alias_equal_to_current_value(self, config):
        decision = CategoryService().classify(
            _record(collections="Farben, Pinsel & Werkzeug", product_category="Paints & Mediums"),
            config,
        )

        assert decision.category == "Brushes"
        assert decision.source == "alias"
        assert [f.reason for f in decision.findings] == ["Mapped via collection_aliases"]

    def test_alias_is_case_insensitive(self, config):
        decision = CategoryService().classify(_record(collections="Sale, PINSEL & WERKZEUG"), config)
        assert decision.category == "Brushes"

    def test_alias_beats_keywords(self, config):
        decision = CategoryService().classify(
            _record(collections="Farben", title="Rundpinsel zum Malen"), config
        )
        assert decision.category == "Paints & Mediums"


class TestKeywordScoring:
    """Weighted scoring over title and body."""

    def test_scores_all_tiers(self, config):
        decision = CategoryService().classify(_record(title="Rundpinsel zum Malen"), config)

        assert decision.category == "Brushes"
        assert decision.score == 6
        assert decision.findings[0].reason == "Smart category inference (HIGH confidence: 6 points)"

    def test_reads_body_text(self, config):
        decision = CategoryService().classify(
            _record(title="Set 3", body_html="<p>Drei <b>Pinsel</b> aus Synthetik</p>"), config
        )
        assert decision.category == "Brushes"
        assert decision.score == 3

    def test_tie_keeps_dictionary_order(self, config):
        decision = CategoryService().classify(_record(title="Brush und Farbe"), config)
        assert decision.category == "Brushes"

    def test_reevaluates_existing_category(self, config):
        decision = CategoryService().classify(
            _record(title="Rundpinsel zum Malen", product_category="Paints & Mediums"), config
        )

        assert decision.category == "Brushes"
        assert decision.findings[0].original == "Paints & Mediums"

    def test_same_result_logs_nothing(self, config):
        decision = CategoryService().classify(
            _record(title="Rundpinsel zum Malen", product_category="Brushes"), config
        )
        assert decision.findings == []


class TestFallbacks:
    """Inference map, existing value and default."""

    def test_below_threshold_uses_default(self, config):
        # "flach" alone scores 1, under the minimum of 2
        decision = CategoryService().classify(_record(title="Flacher Rahmen"), config)

        assert decision.category == "Bastelbedarf"
        assert decision.source == "default"
        assert decision.findings[0].reason == "Default category assigned"

    def test_inference_map(self, config):
        decision = CategoryService().classify(_record(title="Schere klein"), config)

        assert decision.category == "Werkzeug"
        assert decision.source == "inference"
        assert decision.findings[0].reason == "Smart category inference (LOW confidence: 1 points)"

    def test_keeps_existing_when_nothing_matches(self, config):
        decision = CategoryService().classify(_record(title="Rahmen", product_category="Deko"), config)

        assert decision.category == "Deko"
        assert decision.findings == []

    def test_no_match_and_no_default_is_empty(self, config):
        no_default = config.model_copy(update={"sop_rules": SopRules()})
        decision = CategoryService().classify(_record(title="Rahmen"), no_default)

        assert decision.category == ""
        assert decision.findings == []


class TestConfidenceLabel:
    """Tests for confidence labels."""

    def test_thresholds(self):
        assert confidence_label(6) == "HIGH"
        assert confidence_label(4) == "MEDIUM"
        assert confidence_label(3) == "LOW"


class TestSingleton:
    """Tests for get_category_service."""

    def test_returns_same_instance(self):
        assert get_category_service() is get_category_service()
