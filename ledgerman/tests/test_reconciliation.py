"""
Tests for sale, purchase, payment, adjustment and return events.
"""

from decimal import Decimal

import pytest

from ledgerman import books, LedgerError
from ledgerman.models import Invoice, LedgerEntry, Party, Payment, Purchase, StockMove


pytestmark = pytest.mark.django_db


def line(product, qty, price):
    return {'product': product, 'qty': qty, 'price': price}


class TestSell:
    """Tests for books.sell()."""

    def test_sell_creates_invoice_and_effects(self, stocked_phone, dealer, user):
        invoice = books.sell(
            dealer, 'green_tel', [line(stocked_phone, 4, Decimal('1000'))],
            paid_amount=Decimal('1500'), user=user,
        )

        assert invoice.number == 'GT-INV-000001'
        assert invoice.subtotal == Decimal('4000.00')
        assert invoice.grand_total == Decimal('4000.00')
        assert invoice.dues == Decimal('2500.00')
        assert invoice.previous_dues == Decimal('0.00')
        assert invoice.items.get().total == Decimal('4000.00')
        assert books.stock_of(stocked_phone).good == 6

        entry = LedgerEntry.objects.get(party=dealer)
        assert entry.kind == 'invoice'
        assert (entry.debit, entry.credit) == (Decimal('4000.00'), Decimal('1500.00'))
        assert entry.reference == invoice
        assert entry.reference_no == invoice.number

        dealer.refresh_from_db()
        assert dealer.total_quantity == 4
        assert dealer.total_amount == Decimal('4000.00')
        assert dealer.total_payment == Decimal('1500.00')
        assert dealer.total_dues == Decimal('2500.00')
        assert dealer.last_document_no == invoice.number

    def test_previous_dues_follow_ledger(self, stocked_phone, dealer):
        books.sell(dealer, 'green_tel', [line(stocked_phone, 1, 100)])
        invoice = books.sell(dealer, 'green_tel', [line(stocked_phone, 2, 100)], paid_amount=50)

        assert invoice.previous_dues == Decimal('100.00')
        assert books.latest_balance(dealer, 'green_tel') == Decimal('250.00')

    def test_discount_and_rebate(self, stocked_phone, retail):
        invoice = books.sell(
            retail, 'green_tel', [line(stocked_phone, 2, 500)],
            discount=Decimal('50'), rebate=Decimal('25'),
        )

        assert invoice.grand_total == Decimal('925.00')
        assert books.latest_balance(retail, 'green_tel') == Decimal('925.00')

    def test_discount_above_subtotal(self, stocked_phone, retail):
        with pytest.raises(LedgerError) as exc:
            books.sell(retail, 'green_tel', [line(stocked_phone, 1, 100)], discount=200)

        assert exc.value.code == 'INVALID_AMOUNT'
        assert books.stock_of(stocked_phone).good == 10

    def test_overpaid_sale_leaves_credit(self, stocked_phone, retail):
        books.sell(retail, 'green_tel', [line(stocked_phone, 1, 100)], paid_amount=150)

        assert books.latest_balance(retail, 'green_tel') == Decimal('-50.00')

    def test_sale_with_one_short_item_applies_nothing(self, stocked_phone, charger, dealer):
        books.increase(charger, 'good', 1)
        moves_before = StockMove.objects.count()

        with pytest.raises(LedgerError) as exc:
            books.sell(dealer, 'green_tel', [
                line(stocked_phone, 2, 1000),
                line(charger, 3, 150),
            ])

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        assert exc.value.data['product'] == 'GT-Charger'
        assert books.stock_of(stocked_phone).good == 10
        assert books.stock_of(charger).good == 1
        assert StockMove.objects.count() == moves_before
        assert not Invoice.objects.exists()
        assert not LedgerEntry.objects.exists()
        dealer.refresh_from_db()
        assert dealer.total_amount == Decimal('0')

    def test_duplicate_lines_are_summed_against_stock(self, stocked_phone, dealer):
        with pytest.raises(LedgerError) as exc:
            books.sell(dealer, 'green_tel', [
                line(stocked_phone, 6, 100),
                line(stocked_phone, 5, 100),
            ])

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        assert exc.value.requested == 11

    def test_failed_sale_does_not_consume_number(self, stocked_phone, dealer):
        with pytest.raises(LedgerError):
            books.sell(dealer, 'green_tel', [line(stocked_phone, 20, 100)])

        invoice = books.sell(dealer, 'green_tel', [line(stocked_phone, 1, 100)])
        assert invoice.number == 'GT-INV-000001'

    def test_sell_to_supplier(self, stocked_phone, supplier):
        with pytest.raises(LedgerError) as exc:
            books.sell(supplier, 'green_tel', [line(stocked_phone, 1, 100)])

        assert exc.value.code == 'INVALID_PARTY'

    @pytest.mark.parametrize('items', [
        [],
        [{'product': 1}],
        [{'qty': 1, 'price': 1}],
    ])
    def test_malformed_items(self, retail, items):
        with pytest.raises(LedgerError) as exc:
            books.sell(retail, 'green_tel', items)

        assert exc.value.code == 'INVALID_ITEMS'

    def test_unknown_product(self, retail):
        with pytest.raises(LedgerError) as exc:
            books.sell(retail, 'green_tel', [line(999999, 1, 100)])

        assert exc.value.code == 'NOT_FOUND'


class TestPurchase:
    """Tests for books.purchase() and books.pay_purchase()."""

    def test_purchase_receives_stock(self, phone, supplier):
        purchase = books.purchase(
            supplier, 'green_tel', [line(phone, 20, Decimal('800'))], paid_amount=Decimal('6000'),
        )

        assert purchase.number == 'PGT-000001'
        assert purchase.total_amount == Decimal('16000.00')
        assert purchase.dues == Decimal('10000.00')
        assert books.stock_of(phone).good == 20
        assert books.latest_balance(supplier, 'green_tel') == Decimal('10000.00')

        supplier.refresh_from_db()
        assert supplier.total_quantity == 20
        assert supplier.total_amount == Decimal('16000.00')
        assert supplier.total_dues == Decimal('10000.00')

    def test_purchase_overpaid(self, phone, supplier):
        with pytest.raises(LedgerError) as exc:
            books.purchase(supplier, 'green_tel', [line(phone, 1, 100)], paid_amount=101)

        assert exc.value.code == 'OVERPAYMENT'
        assert books.stock_of(phone).good == 0

    def test_pay_purchase_reduces_dues(self, phone, supplier):
        purchase = books.purchase(supplier, 'green_tel', [line(phone, 10, 100)])

        payment = books.pay_purchase(purchase, Decimal('400'), method='bank')

        purchase.refresh_from_db()
        assert purchase.dues == Decimal('600.00')
        assert purchase.paid_amount == Decimal('400.00')
        assert payment.kind == 'purchase'
        assert payment.purchase == purchase
        assert payment.number == 'GT-PAY-000001'
        assert books.latest_balance(supplier, 'green_tel') == Decimal('600.00')

    def test_pay_purchase_above_dues(self, phone, supplier):
        purchase = books.purchase(supplier, 'green_tel', [line(phone, 1, 100)], paid_amount=80)

        with pytest.raises(LedgerError) as exc:
            books.pay_purchase(purchase, 21)

        assert exc.value.code == 'OVERPAYMENT'
        assert not Payment.objects.exists()
        assert Purchase.objects.get(pk=purchase.pk).dues == Decimal('20.00')


class TestPayments:
    """Tests for receive_payment(), pay_supplier(), pay_employee()."""

    def test_receive_payment_from_dealer(self, stocked_phone, dealer):
        books.sell(dealer, 'green_tel', [line(stocked_phone, 2, 500)])

        payment = books.receive_payment(dealer, 'green_tel', Decimal('300'), method='mobile')

        assert payment.kind == 'dealer'
        assert payment.method == 'mobile'
        assert books.latest_balance(dealer, 'green_tel') == Decimal('700.00')
        dealer.refresh_from_db()
        assert dealer.total_payment == Decimal('300.00')
        assert dealer.total_dues == Decimal('700.00')

    def test_receive_payment_from_retail(self, retail):
        payment = books.receive_payment(retail, 'green_star', 100)

        assert payment.kind == 'customer'
        assert payment.number == 'GS-PAY-000001'

    def test_pay_supplier(self, supplier):
        books.open_balance(supplier, 'green_tel', 1000)
        books.pay_supplier(supplier, 'green_tel', 250)

        assert books.latest_balance(supplier, 'green_tel') == Decimal('750.00')

    def test_pay_employee(self, employee):
        payment = books.pay_employee(employee, 'green_tel', Decimal('15000'))

        assert payment.kind == 'employee'
        assert books.latest_balance(employee, 'green_tel') == Decimal('-15000.00')

    def test_payment_party_kind_checked(self, dealer):
        with pytest.raises(LedgerError) as exc:
            books.pay_employee(dealer, 'green_tel', 100)

        assert exc.value.code == 'INVALID_PARTY'

    def test_zero_payment_rejected(self, retail):
        with pytest.raises(LedgerError) as exc:
            books.receive_payment(retail, 'green_tel', 0)

        assert exc.value.code == 'INVALID_AMOUNT'

    def test_unknown_method_rejected(self, retail):
        with pytest.raises(LedgerError) as exc:
            books.receive_payment(retail, 'green_tel', 10, method='cheque')

        assert exc.value.code == 'INVALID_KIND'
        assert not Payment.objects.exists()


class TestAdjustmentsAndReturns:

    def test_credit_adjustment(self, dealer):
        books.open_balance(dealer, 'green_tel', 1000)
        entry = books.adjust_balance(dealer, 'green_tel', 100, description='Goodwill')

        assert entry.kind == 'adjustment'
        assert entry.balance == Decimal('900.00')
        dealer.refresh_from_db()
        assert dealer.total_adjust == Decimal('100.00')

    def test_debit_adjustment(self, dealer):
        entry = books.adjust_balance(dealer, 'green_tel', 40, direction='debit')

        assert entry.balance == Decimal('40.00')
        dealer.refresh_from_db()
        assert dealer.total_adjust == Decimal('-40.00')

    def test_bad_direction(self, dealer):
        with pytest.raises(LedgerError) as exc:
            books.adjust_balance(dealer, 'green_tel', 40, direction='sideways')

        assert exc.value.code == 'INVALID_KIND'

    def test_accept_return(self, stocked_phone, retail):
        books.sell(retail, 'green_tel', [line(stocked_phone, 3, 200)])

        entry = books.accept_return(retail, 'green_tel', [line(stocked_phone, 1, 200)])

        assert entry.kind == 'return'
        assert entry.credit == Decimal('200.00')
        assert books.stock_of(stocked_phone).good == 8
        assert books.latest_balance(retail, 'green_tel') == Decimal('400.00')

    def test_return_into_damage_bucket(self, phone, retail):
        books.accept_return(retail, 'green_tel', [line(phone, 2, 50)], bucket='damage')

        assert books.stock_of(phone).damage == 2


class TestVoidInvoice:
    """Tests for books.void_invoice()."""

    def test_void_restores_stock_balance_and_summary(self, stocked_phone, charger, dealer, user):
        books.increase(charger, 'good', 5)
        books.sell(dealer, 'green_tel', [line(stocked_phone, 1, 300)])
        invoice = books.sell(
            dealer, 'green_tel',
            [line(stocked_phone, 3, 1000), line(charger, 2, 50)],
            paid_amount=Decimal('1200'),
        )

        voided = books.void_invoice(invoice, user=user)

        assert voided.is_voided
        assert voided.voided_by == user
        assert books.stock_of(stocked_phone).good == 9
        assert books.stock_of(charger).good == 5
        assert books.latest_balance(dealer, 'green_tel') == Decimal('300.00')

        entry = LedgerEntry.objects.filter(party=dealer).order_by('-sequence').first()
        assert entry.kind == 'void'
        assert (entry.debit, entry.credit) == (Decimal('1200.00'), Decimal('3100.00'))
        assert entry.reference == invoice

        dealer.refresh_from_db()
        assert dealer.total_quantity == 1
        assert dealer.total_amount == Decimal('300.00')
        assert dealer.total_payment == Decimal('0.00')
        assert dealer.total_dues == Decimal('300.00')

    def test_void_keeps_invoice_and_entries(self, stocked_phone, retail):
        invoice = books.sell(retail, 'green_tel', [line(stocked_phone, 2, 100)])

        books.void_invoice(invoice)

        assert Invoice.objects.filter(pk=invoice.pk).exists()
        assert list(
            LedgerEntry.objects.filter(party=retail).order_by('sequence').values_list('kind', flat=True)
        ) == ['invoice', 'void']
        assert books.verify(retail, 'green_tel') == []

    def test_void_twice_rejected(self, stocked_phone, retail):
        invoice = books.sell(retail, 'green_tel', [line(stocked_phone, 2, 100)])
        books.void_invoice(invoice)

        with pytest.raises(LedgerError) as exc:
            books.void_invoice(invoice)

        assert exc.value.code == 'INVALID_TRANSITION'
        assert exc.value.data['current'] == 'voided'
        assert books.stock_of(stocked_phone).good == 10
        assert LedgerEntry.objects.filter(party=retail).count() == 2
        assert books.latest_balance(retail, 'green_tel') == Decimal('0.00')

    def test_rebuild_after_void_has_no_drift(self, stocked_phone, dealer):
        books.sell(dealer, 'green_tel', [line(stocked_phone, 1, 300)], paid_amount=100)
        invoice = books.sell(dealer, 'green_tel', [line(stocked_phone, 4, 250)], paid_amount=400)
        books.receive_payment(dealer, 'green_tel', 50)
        books.void_invoice(invoice)

        assert books.rebuild_summary(dealer, dry_run=True) == {}

        Party.objects.filter(pk=dealer.pk).update(total_quantity=0, total_amount=0, total_payment=0)
        drift = books.rebuild_summary(dealer)

        assert drift['total_quantity'] == (0, 1)
        assert drift['total_amount'] == (Decimal('0.00'), Decimal('300.00'))
        assert drift['total_payment'] == (Decimal('0.00'), Decimal('150.00'))

    def test_void_missing_invoice(self, db):
        with pytest.raises(LedgerError) as exc:
            books.void_invoice(999999)

        assert exc.value.code == 'NOT_FOUND'


class TestRebuildSummary:
    """Tests for books.rebuild_summary()."""

    def _activity(self, stocked_phone, dealer):
        books.sell(dealer, 'green_tel', [line(stocked_phone, 4, 1000)], paid_amount=1000)
        books.sell(dealer, 'green_star', [line(stocked_phone, 1, 500)])
        books.receive_payment(dealer, 'green_tel', 500)
        books.adjust_balance(dealer, 'green_tel', 100)

    def test_consistent_summary_has_no_drift(self, stocked_phone, dealer):
        self._activity(stocked_phone, dealer)

        assert books.rebuild_summary(dealer) == {}

    def test_rebuild_repairs_tampered_cache(self, stocked_phone, dealer):
        self._activity(stocked_phone, dealer)
        expected = Party.objects.values(*Party.SUMMARY_FIELDS).get(pk=dealer.pk)
        Party.objects.filter(pk=dealer.pk).update(
            total_quantity=0, total_amount=0, total_payment=1, total_adjust=5, total_dues=9999,
        )

        drift = books.rebuild_summary(dealer)

        assert set(drift) == set(Party.SUMMARY_FIELDS)
        assert drift['total_dues'] == (Decimal('9999.00'), Decimal('2900.00'))
        assert Party.objects.values(*Party.SUMMARY_FIELDS).get(pk=dealer.pk) == expected

    def test_dry_run_reports_only(self, stocked_phone, dealer):
        self._activity(stocked_phone, dealer)
        Party.objects.filter(pk=dealer.pk).update(total_dues=0)

        drift = books.rebuild_summary(dealer, dry_run=True)

        assert 'total_dues' in drift
        assert Party.objects.get(pk=dealer.pk).total_dues == Decimal('0')

    def test_dues_span_brands(self, stocked_phone, dealer):
        self._activity(stocked_phone, dealer)

        dealer.refresh_from_db()
        assert dealer.total_dues == (
            books.latest_balance(dealer, 'green_tel') + books.latest_balance(dealer, 'green_star')
        )
