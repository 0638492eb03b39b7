# Overview: Pytest coverage for price container derivation (net, VAT, gross) across VAT statuses.

from decimal import Decimal

import pytest
from boxoffice.models import AdditionalService, AdditionalServiceItem, Event, Ticket
from boxoffice.services.discount_service import Discount, DiscountType
from boxoffice.services.price_container import (
    ContainerKind,
    PriceContainer,
    VatStatus,
    from_additional_service_item,
    from_ticket,
    is_vat_exempt,
    resolve_item_vat_status,
    summary_price_before_vat_cts,
)


def _event(vat="30.00", vat_status="NOT_INCLUDED"):
    return Event(id=1, short_name="ev", display_name="Event", currency="CHF",
                 vat=Decimal(vat), vat_status=vat_status, locales=["en"])


def _ticket(src_price_cts, category_id=1, vat_status=None):
    return Ticket(id=1, category_id=category_id, src_price_cts=src_price_cts, vat_status=vat_status)


FIXED_100 = Discount(code="FIX", discount_type=DiscountType.FIXED_AMOUNT, amount=100)
PERCENT_10 = Discount(code="TEN", discount_type=DiscountType.PERCENTAGE, amount=10)


class TestVatStatus:
    """Parsing and classification of VAT statuses."""

    def test_case_insensitive_parse(self):
        assert VatStatus("not_included") is VatStatus.NOT_INCLUDED
        assert VatStatus.parse("included") is VatStatus.INCLUDED

    def test_legacy_exempt_name(self):
        assert VatStatus("NOT_INCLUDED_EXEMPT") is VatStatus.NONE_EXEMPT

    def test_parse_empty(self):
        assert VatStatus.parse(None) is None
        assert VatStatus.parse("", VatStatus.NONE) is VatStatus.NONE

    def test_unknown_status_raises(self):
        with pytest.raises(ValueError):
            VatStatus("SOMETIMES")

    def test_exempt_variants(self):
        assert is_vat_exempt("INCLUDED_EXEMPT")
        assert is_vat_exempt(VatStatus.NONE_EXEMPT)
        assert not is_vat_exempt(VatStatus.INCLUDED)
        assert not is_vat_exempt(None)

    def test_ordinal_follows_declaration(self):
        assert VatStatus.NONE.ordinal < VatStatus.NOT_INCLUDED.ordinal < VatStatus.NONE_EXEMPT.ordinal


class TestItemVatStatus:
    """Resolution of a single item's VAT status."""

    def test_item_status_wins(self):
        assert resolve_item_vat_status("NONE_EXEMPT", "NOT_INCLUDED", "NOT_INCLUDED") is VatStatus.NONE_EXEMPT

    def test_exempt_reservation_applies_to_items(self):
        assert resolve_item_vat_status(None, "INCLUDED_EXEMPT", "INCLUDED") is VatStatus.INCLUDED_EXEMPT

    def test_falls_back_to_purchase_context(self):
        assert resolve_item_vat_status(None, "NOT_INCLUDED", "INCLUDED") is VatStatus.INCLUDED

    def test_defaults_to_none(self):
        assert resolve_item_vat_status(None, None, None) is VatStatus.NONE


class TestTicketPrices:
    """Gross amounts of a ticket under each VAT status."""

    def test_not_included(self):
        event = _event(vat_status="NOT_INCLUDED")
        assert from_ticket(_ticket(1000), "NOT_INCLUDED", event).final_price_cts == 1300

        event = _event(vat="8.00", vat_status="NOT_INCLUDED")
        assert from_ticket(_ticket(1100), "NOT_INCLUDED", event, FIXED_100).final_price_cts == 1080

        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        assert from_ticket(_ticket(1000), "NOT_INCLUDED", event, PERCENT_10).final_price_cts == 990

    def test_included_exempt(self):
        event = _event(vat_status="INCLUDED")
        assert from_ticket(_ticket(1000), "INCLUDED_EXEMPT", event).final_price_cts == 769

        event = _event(vat="8.00", vat_status="INCLUDED")
        assert from_ticket(_ticket(1100), "INCLUDED_EXEMPT", event, FIXED_100).final_price_cts == 926

        event = _event(vat="10.00", vat_status="INCLUDED")
        assert from_ticket(_ticket(1000), "INCLUDED_EXEMPT", event, PERCENT_10).final_price_cts == 818

    def test_none_exempt(self):
        event = _event(vat_status="NOT_INCLUDED")
        assert from_ticket(_ticket(1000), "NONE_EXEMPT", event).final_price_cts == 1000

        event = _event(vat="8.00", vat_status="NOT_INCLUDED")
        assert from_ticket(_ticket(1100), "NONE_EXEMPT", event, FIXED_100).final_price_cts == 1000

        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        assert from_ticket(_ticket(1000), "NONE_EXEMPT", event, PERCENT_10).final_price_cts == 900

    def test_included_extracts_vat(self):
        event = _event(vat="10.00", vat_status="INCLUDED")
        container = from_ticket(_ticket(1100), "INCLUDED", event)
        assert container.final_price_cts == 1100
        assert container.vat_cts == 100
        assert container.net_price_cts == 1000

    def test_included_exempt_reports_removed_vat_as_negative(self):
        event = _event(vat="10.00", vat_status="INCLUDED")
        container = from_ticket(_ticket(1100), "INCLUDED_EXEMPT", event)
        assert container.vat_cts == -100
        assert container.final_price_cts == 1000
        assert container.net_price_cts == 1000

    def test_not_included_net_and_vat(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        container = from_ticket(_ticket(1000), "NOT_INCLUDED", event)
        assert container.vat_cts == 100
        assert container.net_price_cts == 1000

    def test_no_vat_percentage_means_no_vat(self):
        event = Event(id=1, currency="EUR", vat=None, vat_status="NOT_INCLUDED")
        container = from_ticket(_ticket(1000), "NOT_INCLUDED", event)
        assert container.vat_cts == 0
        assert container.final_price_cts == 1000

    def test_ticket_override_inside_taxed_reservation(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        container = from_ticket(_ticket(1000, vat_status="NONE_EXEMPT"), "NOT_INCLUDED", event)
        assert container.vat_status is VatStatus.NONE_EXEMPT
        assert container.final_price_cts == 1000


class TestDiscountClamping:
    """A discount never makes a price negative."""

    def test_fixed_discount_larger_than_price(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        big = Discount(code="BIG", discount_type=DiscountType.FIXED_AMOUNT, amount=5000)
        container = from_ticket(_ticket(1000), "NOT_INCLUDED", event, big)
        assert container.applied_discount_cts == 1000
        assert container.final_price_cts == 0
        assert container.vat_cts == 0

    def test_constructor_clamps(self):
        container = PriceContainer(ContainerKind.TICKET, 1000, "NOT_INCLUDED", "10", applied_discount_cts=5000)
        assert container.applied_discount_cts == 1000
        assert container.vat_status is VatStatus.NOT_INCLUDED
        assert container.vat_percentage == Decimal("10")

    def test_negative_discount_is_ignored(self):
        container = PriceContainer(ContainerKind.TICKET, 1000, VatStatus.NONE, None, applied_discount_cts=-10)
        assert container.applied_discount_cts == 0
        assert not container.discounted

    def test_category_outside_discount_gets_nothing(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        restricted = Discount(code="CAT", discount_type=DiscountType.PERCENTAGE, amount=50, categories=frozenset({99}))
        container = from_ticket(_ticket(1000, category_id=1), "NOT_INCLUDED", event, restricted)
        assert container.applied_discount_cts == 0


class TestSummaryView:
    """Values before discount, for summary rows."""

    def test_summary_prices_ignore_discount(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        container = from_ticket(_ticket(1000), "NOT_INCLUDED", event, FIXED_100)
        assert container.final_price_cts == 990
        assert container.summary_src_price_cts == 1100
        assert container.summary_price_before_vat_cts == 1000

    def test_group_price_before_vat(self):
        event = _event(vat="10.00", vat_status="INCLUDED")
        containers = [from_ticket(_ticket(1100), "INCLUDED", event) for _ in range(3)]
        assert summary_price_before_vat_cts(containers) == 3000

    def test_discount_in_gross_terms_when_vat_is_added(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        container = from_ticket(_ticket(1000), "NOT_INCLUDED", event, PERCENT_10)
        assert container.gross_discount == Decimal("110")
        assert container.net_discount == Decimal("100")

    def test_discount_in_gross_terms_when_vat_is_included(self):
        event = _event(vat="10.00", vat_status="INCLUDED")
        container = from_ticket(_ticket(1100), "INCLUDED", event, PERCENT_10)
        assert container.gross_discount == Decimal("110")
        assert container.net_discount == Decimal("100")


class TestAdditionalServiceItems:
    """VAT type mapping of additional services."""

    def _item(self, src_price_cts):
        return AdditionalServiceItem(id=7, src_price_cts=src_price_cts)

    def test_inherited_uses_event_vat(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        service = AdditionalService(id=1, vat_type="INHERITED")
        container = from_additional_service_item(self._item(1000), service, "NOT_INCLUDED", event)
        assert container.kind is ContainerKind.ADDITIONAL_SERVICE_ITEM
        assert container.final_price_cts == 1100

    def test_none_has_no_vat(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        service = AdditionalService(id=1, vat_type="NONE")
        container = from_additional_service_item(self._item(1000), service, "NOT_INCLUDED", event)
        assert container.vat_status is VatStatus.NONE
        assert container.final_price_cts == 1000

    def test_custom_included_uses_own_percentage(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        service = AdditionalService(id=1, vat_type="CUSTOM_INCLUDED", vat=Decimal("20.00"))
        container = from_additional_service_item(self._item(1200), service, "NOT_INCLUDED", event)
        assert container.final_price_cts == 1200
        assert container.vat_cts == 200

    def test_custom_excluded_uses_own_percentage(self):
        event = _event(vat="10.00", vat_status="INCLUDED")
        service = AdditionalService(id=1, vat_type="CUSTOM_EXCLUDED", vat=Decimal("20.00"))
        container = from_additional_service_item(self._item(1000), service, "INCLUDED", event)
        assert container.final_price_cts == 1200

    def test_unknown_vat_type(self):
        event = _event()
        service = AdditionalService(id=1, vat_type="SOMETIMES")
        with pytest.raises(ValueError):
            from_additional_service_item(self._item(1000), service, "NOT_INCLUDED", event)

    def test_supplement_takes_the_discount(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        service = AdditionalService(id=1, vat_type="INHERITED", service_type="SUPPLEMENT")
        container = from_additional_service_item(self._item(1000), service, "NOT_INCLUDED", event, PERCENT_10)
        assert container.applied_discount_cts == 100
        assert container.final_price_cts == 990
        assert container.summary_src_price_cts == 1100

    def test_donation_is_never_discounted(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        service = AdditionalService(id=1, vat_type="NONE", service_type="DONATION")
        container = from_additional_service_item(self._item(1000), service, "NOT_INCLUDED", event, PERCENT_10)
        assert container.applied_discount_cts == 0
        assert not container.discountable

    def test_category_restricted_discount_skips_items(self):
        event = _event(vat="10.00", vat_status="NOT_INCLUDED")
        service = AdditionalService(id=1, vat_type="INHERITED")
        restricted = Discount(code="CAT", discount_type=DiscountType.FIXED_AMOUNT, amount=100,
                              categories=frozenset({1}))
        container = from_additional_service_item(self._item(1000), service, "NOT_INCLUDED", event, restricted)
        assert container.applied_discount_cts == 0
