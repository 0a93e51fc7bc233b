"""
End-to-end flows across stock, ledger and claims.
"""

from decimal import Decimal
from io import StringIO
from unittest import mock

import pytest
from django.core.management import call_command

from ledgerman import books
from ledgerman.models import ClaimStatus, LedgerEntry, Party, Product


pytestmark = pytest.mark.django_db


class TestSaleAndReplacementFlow:
    """Sell to a dealer, take back a claim, repair and close it."""

    def test_full_cycle(self, stocked_phone, dealer, user):
        price = Decimal('1000')

        # good=10; sell 4
        invoice = books.sell(
            dealer, 'green_tel', [{'product': stocked_phone, 'qty': 4, 'price': price}],
            paid_amount=Decimal('1000'), user=user,
        )
        assert books.stock_of(stocked_phone).good == 6
        assert books.latest_balance(dealer, 'green_tel') == price * 4 - Decimal('1000')
        dues_before = Party.objects.get(pk=dealer.pk).total_dues

        # claim 5, triage good=3 repairable=2
        claim = books.create_claim(dealer, 'green_tel', [{'product': stocked_phone, 'claimed_qty': 5}])
        claim = books.triage(claim, [{
            'product': stocked_phone, 'good_qty': 3, 'repairable_qty': 2,
            'bad_qty': 0, 'damage_qty': 0, 'unit_price': price,
        }], user=user)

        state = books.stock_of(stocked_phone)
        assert (state.good, state.repair) == (9, 2)
        replacement = LedgerEntry.objects.get(party=dealer, kind='replacement')
        assert replacement.credit == price * 5
        dues_after = Party.objects.get(pk=dealer.pk).total_dues
        assert dues_before - dues_after == price * 5

        # factory round trip
        books.send_to_factory(claim)
        claim = books.receive_from_factory(claim, high_cost_qty=1, low_cost_qty=1)
        state = books.stock_of(stocked_phone)
        assert (state.good, state.repair) == (11, 0)

        claim = books.close_claim(claim)
        assert claim.status == ClaimStatus.CLOSED

        # every cache agrees with its source of truth
        assert Product.objects.get(pk=stocked_phone.pk).recalculate() == {}
        assert books.rebuild_summary(dealer) == {}
        assert books.verify(dealer, 'green_tel') == []
        assert invoice.number == 'GT-INV-000001'


class TestRebuildSummariesCommand:

    def test_command_repairs_drift(self, stocked_phone, dealer):
        books.sell(dealer, 'green_tel', [{'product': stocked_phone, 'qty': 2, 'price': 100}])
        Party.objects.filter(pk=dealer.pk).update(total_dues=0)
        Product.objects.filter(pk=stocked_phone.pk).update(good_qty=50)
        out = StringIO()

        call_command('rebuild_summaries', stdout=out)

        assert '1 summary(ies), 1 product(s) corrected' in out.getvalue()
        assert Party.objects.get(pk=dealer.pk).total_dues == Decimal('200.00')
        assert Product.objects.get(pk=stocked_phone.pk).good_qty == 8

    def test_command_dry_run(self, stocked_phone, dealer):
        books.sell(dealer, 'green_tel', [{'product': stocked_phone, 'qty': 2, 'price': 100}])
        Party.objects.filter(pk=dealer.pk).update(total_dues=0)
        out = StringIO()

        call_command('rebuild_summaries', '--dry-run', stdout=out)

        assert 'would be corrected' in out.getvalue()
        assert Party.objects.get(pk=dealer.pk).total_dues == Decimal('0')


class TestAdmin:

    def test_models_registered_read_only(self, rf):
        from django.contrib import admin

        from ledgerman.models import LedgerEntry, StockMove

        request = rf.get('/')
        for model in (LedgerEntry, StockMove):
            model_admin = admin.site._registry[model]
            assert not model_admin.has_add_permission(request)
            assert not model_admin.has_change_permission(request)
            assert not model_admin.has_delete_permission(request)

    def test_rebuild_summary_action(self, rf, stocked_phone, dealer):
        from django.contrib import admin

        books.sell(dealer, 'green_tel', [{'product': stocked_phone, 'qty': 1, 'price': 100}])
        Party.objects.filter(pk=dealer.pk).update(total_dues=0)
        model_admin = admin.site._registry[Party]
        request = rf.get('/')

        with mock.patch.object(model_admin, 'message_user') as message:
            model_admin.rebuild_summaries(request, Party.objects.filter(pk=dealer.pk))

        message.assert_called_once()
        assert Party.objects.get(pk=dealer.pk).total_dues == Decimal('100.00')
