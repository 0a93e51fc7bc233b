"""
Tests for the replacement claim lifecycle.
"""

from decimal import Decimal

import pytest
from django.test import override_settings

from ledgerman import books, LedgerError
from ledgerman.models import ClaimStatus, LedgerEntry, Party, ReplacementClaim, StockMove


pytestmark = pytest.mark.django_db


@pytest.fixture
def claim(dealer, phone):
    return books.create_claim(dealer, 'green_tel', [{'product': phone, 'claimed_qty': 5}])


TRIAGE = {'good_qty': 3, 'repairable_qty': 2, 'bad_qty': 0, 'damage_qty': 0}


def triage_of(product, **overrides):
    return [{'product': product, **TRIAGE, **overrides}]


class TestCreateClaim:
    """Tests for books.create_claim()."""

    def test_create_claim_numbers_and_items(self, dealer, phone, charger):
        claim = books.create_claim(dealer, 'green_tel', [
            {'product': phone, 'claimed_qty': 3},
            {'product': charger, 'claimed_qty': 1},
            {'product': phone, 'claimed_qty': 2},
        ])

        assert claim.number == 'GT-RPL-00001'
        assert claim.status == ClaimStatus.PENDING
        assert claim.total_claimed == 6
        assert claim.items.get(product=phone).claimed_qty == 5
        assert claim.items.count() == 2

    def test_numbers_are_sequential_per_brand(self, dealer, phone):
        first = books.create_claim(dealer, 'green_tel', [{'product': phone, 'claimed_qty': 1}])
        second = books.create_claim(dealer, 'green_tel', [{'product': phone, 'claimed_qty': 1}])
        other = books.create_claim(dealer, 'green_star', [{'product': phone, 'claimed_qty': 1}])

        assert (first.number, second.number, other.number) == (
            'GT-RPL-00001', 'GT-RPL-00002', 'GS-RPL-00001',
        )

    def test_create_claim_has_no_effects(self, claim, phone):
        assert not StockMove.objects.exists()
        assert not LedgerEntry.objects.exists()

    def test_retail_customer_cannot_claim(self, retail, phone):
        with pytest.raises(LedgerError) as exc:
            books.create_claim(retail, 'green_tel', [{'product': phone, 'claimed_qty': 1}])

        assert exc.value.code == 'INVALID_PARTY'

    def test_supplier_cannot_claim(self, supplier, phone):
        with pytest.raises(LedgerError) as exc:
            books.create_claim(supplier, 'green_tel', [{'product': phone, 'claimed_qty': 1}])

        assert exc.value.code == 'INVALID_PARTY'

    def test_claim_requires_items(self, dealer):
        with pytest.raises(LedgerError) as exc:
            books.create_claim(dealer, 'green_tel', [])

        assert exc.value.code == 'INVALID_ITEMS'

    def test_claim_rejects_zero_quantity(self, dealer, phone):
        with pytest.raises(LedgerError) as exc:
            books.create_claim(dealer, 'green_tel', [{'product': phone, 'claimed_qty': 0}])

        assert exc.value.code == 'INVALID_QUANTITY'
        assert not ReplacementClaim.objects.exists()


class TestTriage:
    """Tests for books.triage()."""

    def test_triage_applies_stock_and_credit(self, claim, phone, dealer):
        claim = books.triage(claim, triage_of(phone, unit_price=Decimal('100')))

        assert claim.status == ClaimStatus.CHECKED
        assert claim.stock_applied and claim.ledger_applied
        assert (claim.total_good, claim.total_repairable, claim.total_rejected) == (3, 2, 0)
        assert claim.total_credit == Decimal('500.00')

        state = books.stock_of(phone)
        assert (state.good, state.repair) == (3, 2)

        entry = LedgerEntry.objects.get(party=dealer)
        assert entry.kind == 'replacement'
        assert entry.credit == Decimal('500.00')
        assert entry.reference == claim
        assert books.latest_balance(dealer, 'green_tel') == Decimal('-500.00')

        dealer.refresh_from_db()
        assert dealer.total_adjust == Decimal('500.00')
        assert dealer.total_dues == Decimal('-500.00')

    def test_rejected_units_go_to_bad_and_damage(self, claim, phone):
        claim = books.triage(claim, triage_of(
            phone, good_qty=1, repairable_qty=0, bad_qty=3, damage_qty=1, unit_price=10,
        ))

        state = books.stock_of(phone)
        assert (state.good, state.bad, state.damage, state.repair) == (1, 3, 1, 0)
        assert claim.total_rejected == 4
        assert claim.total_credit == Decimal('10.00')
        item = claim.items.get()
        assert item.rejected_qty == 4
        assert item.credit == Decimal('10.00')

    def test_price_resolver_supplies_missing_unit_price(self, claim, phone):
        claim = books.triage(claim, triage_of(phone))

        assert claim.items.get().unit_price == Decimal('1000.00')
        assert claim.total_credit == Decimal('5000.00')

    @override_settings(LEDGERMAN={'PRICE_RESOLVER': 'ledgerman.tests.test_claims.FlatPriceResolver'})
    def test_configured_price_resolver(self, claim, phone):
        claim = books.triage(claim, triage_of(phone))

        assert claim.total_credit == Decimal('35.00')

    def test_all_rejected_posts_no_credit(self, claim, phone, dealer):
        claim = books.triage(claim, triage_of(phone, good_qty=0, repairable_qty=0, bad_qty=5))

        assert claim.status == ClaimStatus.CHECKED
        assert claim.ledger_applied
        assert not LedgerEntry.objects.filter(party=dealer).exists()

    def test_triage_twice_equals_once(self, claim, phone, dealer):
        results = triage_of(phone, unit_price=Decimal('100'))
        books.triage(claim, results)
        again = books.triage(claim, results)

        assert again.status == ClaimStatus.CHECKED
        assert books.stock_of(phone).good == 3
        assert books.stock_of(phone).repair == 2
        assert LedgerEntry.objects.filter(party=dealer).count() == 1
        assert StockMove.objects.count() == 2
        dealer.refresh_from_db()
        assert dealer.total_adjust == Decimal('500.00')

    def test_retriage_with_different_results(self, claim, phone):
        books.triage(claim, triage_of(phone, unit_price=100))

        with pytest.raises(LedgerError) as exc:
            books.triage(claim, triage_of(phone, good_qty=5, repairable_qty=0, unit_price=100))

        assert exc.value.code == 'INVALID_TRANSITION'
        assert books.stock_of(phone).good == 3

    def test_triage_exceeding_claim(self, claim, phone):
        with pytest.raises(LedgerError) as exc:
            books.triage(claim, triage_of(phone, good_qty=4, repairable_qty=2))

        assert exc.value.code == 'TRIAGE_EXCEEDS_CLAIM'
        claim.refresh_from_db()
        assert claim.status == ClaimStatus.PENDING
        assert not StockMove.objects.exists()

    def test_triage_unknown_product(self, claim, charger):
        with pytest.raises(LedgerError) as exc:
            books.triage(claim, triage_of(charger))

        assert exc.value.code == 'INVALID_ITEMS'

    def test_triage_negative_quantity(self, claim, phone):
        with pytest.raises(LedgerError) as exc:
            books.triage(claim, triage_of(phone, bad_qty=-1))

        assert exc.value.code == 'INVALID_QUANTITY'


class TestFactory:
    """Tests for send_to_factory() and receive_from_factory()."""

    @pytest.fixture
    def sent(self, claim, phone):
        books.triage(claim, triage_of(phone, unit_price=100))
        return books.send_to_factory(claim)

    def test_send_records_date(self, sent):
        assert sent.status == ClaimStatus.SENT_TO_FACTORY
        assert sent.repair_sent_date is not None

    def test_receive_moves_repair_to_good(self, sent, phone):
        claim = books.receive_from_factory(sent, high_cost_qty=1, low_cost_qty=1, note='PCB swap')

        assert claim.status == ClaimStatus.REPAIRED
        state = books.stock_of(phone)
        assert (state.good, state.repair) == (5, 0)
        assert claim.repair_details['note'] == 'PCB swap'
        assert claim.repair_received_date is not None

    def test_repair_cost_from_settings(self, sent):
        claim = books.receive_from_factory(sent, high_cost_qty=1, low_cost_qty=1)

        assert claim.repair_cost == Decimal('470.00')

    def test_repair_cost_has_no_ledger_effect(self, sent, dealer):
        books.receive_from_factory(sent, high_cost_qty=2)

        assert LedgerEntry.objects.filter(party=dealer).count() == 1

    def test_receive_over_repairable_rejected(self, sent, phone):
        with pytest.raises(LedgerError) as exc:
            books.receive_from_factory(sent, high_cost_qty=2, low_cost_qty=1)

        assert exc.value.code == 'REPAIR_QUANTITY_EXCEEDED'
        sent.refresh_from_db()
        assert sent.status == ClaimStatus.SENT_TO_FACTORY
        assert sent.high_cost_qty == 0
        assert books.stock_of(phone).repair == 2

    def test_receive_negative_quantity(self, sent):
        with pytest.raises(LedgerError) as exc:
            books.receive_from_factory(sent, low_cost_qty=-1)

        assert exc.value.code == 'INVALID_QUANTITY'


class TestTransitions:
    """Out-of-order transitions and deletion."""

    def test_send_pending_claim(self, claim):
        with pytest.raises(LedgerError) as exc:
            books.send_to_factory(claim)

        assert exc.value.code == 'INVALID_TRANSITION'
        assert exc.value.data['current'] == 'pending'
        assert exc.value.data['expected'] == ['checked']
        claim.refresh_from_db()
        assert claim.status == ClaimStatus.PENDING

    def test_receive_checked_claim(self, claim, phone):
        books.triage(claim, triage_of(phone, unit_price=1))

        with pytest.raises(LedgerError) as exc:
            books.receive_from_factory(claim)

        assert exc.value.code == 'INVALID_TRANSITION'
        claim.refresh_from_db()
        assert claim.status == ClaimStatus.CHECKED

    def test_triage_after_factory(self, claim, phone):
        books.triage(claim, triage_of(phone, unit_price=1))
        books.send_to_factory(claim)

        with pytest.raises(LedgerError) as exc:
            books.triage(claim, triage_of(phone, unit_price=1))

        assert exc.value.code == 'INVALID_TRANSITION'

    def test_close_repaired_claim(self, claim, phone):
        books.triage(claim, triage_of(phone, unit_price=1))
        books.send_to_factory(claim)
        books.receive_from_factory(claim)

        assert books.close_claim(claim).status == ClaimStatus.CLOSED

    def test_close_checked_claim_without_repairs(self, claim, phone):
        books.triage(claim, triage_of(phone, good_qty=5, repairable_qty=0, unit_price=1))

        assert books.close_claim(claim).status == ClaimStatus.CLOSED

    def test_close_checked_claim_with_repairs(self, claim, phone):
        books.triage(claim, triage_of(phone, unit_price=1))

        with pytest.raises(LedgerError) as exc:
            books.close_claim(claim)

        assert exc.value.code == 'INVALID_TRANSITION'

    def test_delete_pending_claim(self, claim):
        books.delete_claim(claim)

        assert not ReplacementClaim.objects.exists()

    def test_delete_checked_claim_keeps_effects(self, claim, phone, dealer):
        books.triage(claim, triage_of(phone, unit_price=100))

        with pytest.raises(LedgerError) as exc:
            books.delete_claim(claim)

        assert exc.value.code == 'INVALID_TRANSITION'
        assert ReplacementClaim.objects.filter(pk=claim.pk).exists()
        assert books.stock_of(phone).good == 3
        assert books.latest_balance(dealer, 'green_tel') == Decimal('-500.00')
        assert Party.objects.get(pk=dealer.pk).total_adjust == Decimal('500.00')

    def test_missing_claim(self, db):
        with pytest.raises(LedgerError) as exc:
            books.send_to_factory(999999)

        assert exc.value.code == 'NOT_FOUND'


class FlatPriceResolver:
    """Test resolver: every unit is worth 7."""

    def unit_price(self, product, dealer, brand):
        from ledgerman.protocols.pricing import PriceQuote

        return PriceQuote(product_id=product.pk, unit_price=Decimal('7'), source='flat')
