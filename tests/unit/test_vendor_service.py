"""
Tests for vendor resolution.
"""

from models import ProductRecord, Severity
from services.vendor_service import VendorService


def _record(**fields) -> ProductRecord:
    return ProductRecord(handle=fields.pop("handle", "test"), **fields)


class TestVendorService:
    """Tests for VendorService.resolve."""

    def test_category_override_wins(self, config):
        decision = VendorService().resolve(
            _record(vendor="Pentart", title="Pentart Reispapier", product_category="Reispapier"), config
        )

        assert decision.vendor == "Itd Collection"
        assert decision.findings[0].reason == "Vendor set to Itd Collection for Reispapier"

    def test_mentioned_vendor_kept_silently(self, config):
        decision = VendorService().resolve(_record(vendor="Pentart", title="Pentart Acrylfarbe"), config)

        assert decision.vendor == "Pentart"
        assert decision.findings == []

    def test_unmentioned_vendor_warns_but_stays(self, config):
        decision = VendorService().resolve(_record(vendor="Pentart", title="Acrylfarbe Rot"), config)

        assert decision.vendor == "Pentart"
        finding = decision.findings[0]
        assert finding.severity == Severity.WARN
        assert finding.reason == 'Vendor "Pentart" not mentioned in title or description.'

    def test_vendor_found_in_body(self, config):
        decision = VendorService().resolve(
            _record(vendor="Pentart", title="Acrylfarbe", body_html="<p>Von Pentart.</p>"), config
        )
        assert decision.findings == []

    def test_infers_from_title(self, config):
        decision = VendorService().resolve(_record(title="Reispapier von Stamperia"), config)

        assert decision.vendor == "Stamperia"
        assert decision.findings[0].reason == 'Inferred vendor "Stamperia" from product data.'
        assert decision.findings[0].severity == Severity.INFO

    def test_infers_from_handle(self, config):
        decision = VendorService().resolve(_record(handle="pentart-gel-medium", title="Gel Medium"), config)
        assert decision.vendor == "Pentart"

    def test_no_inference_match(self, config):
        decision = VendorService().resolve(_record(title="Rundpinsel"), config)

        assert decision.vendor == ""
        assert decision.findings == []

    def test_reserved_brand_requires_handmade(self, config):
        decision = VendorService().resolve(
            _record(vendor="Bastelschachtel", title="Bastelschachtel Schere"), config
        )

        assert decision.vendor == ""
        assert decision.findings[-1].severity == Severity.WARN
        assert "does not seem to be handmade" in decision.findings[-1].reason

    def test_reserved_brand_kept_for_handmade(self, config):
        decision = VendorService().resolve(
            _record(vendor="Bastelschachtel", title="Bastelschachtel Beton Schale"), config
        )

        assert decision.vendor == "Bastelschachtel"
        assert decision.findings == []

    def test_handmade_via_collections(self, config):
        decision = VendorService().resolve(
            _record(vendor="Bastelschachtel", title="Bastelschachtel Schale", collections="Handmade"), config
        )
        assert decision.vendor == "Bastelschachtel"
