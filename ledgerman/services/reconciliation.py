"""
Reconciliation — business events that move goods and money together.

Each event applies its Stock Ledger effect, its Financial Ledger append
and the Party Summary update inside one transaction.atomic(): either all
three commit or none does.

Lock order inside a transaction:
    claim or invoice -> products (ascending pk) -> ledger stream -> party
"""

import logging
from collections import OrderedDict
from decimal import Decimal

from django.db import transaction
from django.db.models import F, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from ledgerman.exceptions import LedgerError
from ledgerman.models.documents import Invoice, InvoiceItem, Payment, Purchase, PurchaseItem
from ledgerman.models.enums import (
    DocumentKind,
    EntryKind,
    PartyKind,
    PaymentKind,
    PaymentMethod,
    StockBucket,
)
from ledgerman.models.ledger import LedgerEntry
from ledgerman.models.party import Party
from ledgerman.models.product import Product
from ledgerman.services.counters import next_number
from ledgerman.services.ledger import FinancialLedger
from ledgerman.services.lookups import (
    pk_of,
    resolve,
    resolve_party,
    to_money,
    validate_brand,
    validate_quantity,
)
from ledgerman.services.stock import StockLedger
from ledgerman.services.summary import apply_summary

logger = logging.getLogger('ledgerman')

ZERO = Decimal('0')


def _parse_lines(items) -> list[tuple[int, int, Decimal]]:
    """
    Normalize line items to (product_pk, qty, price).

    Accepts mappings with 'product', 'qty' and 'price' keys.
    """
    if not items:
        raise LedgerError('INVALID_ITEMS', reason='at least one item is required')

    lines = []
    for index, item in enumerate(items):
        try:
            product = item['product']
            qty = item['qty']
        except (KeyError, TypeError):
            raise LedgerError('INVALID_ITEMS', index=index, reason='product and qty are required') from None
        price = item.get('price')
        if price is None:
            raise LedgerError('INVALID_ITEMS', index=index, reason='price is required')
        lines.append((pk_of(product), validate_quantity(qty), to_money(price, 'price')))
    return lines


def _lock_products(pks) -> dict[int, Product]:
    """Lock products in ascending pk order."""
    wanted = sorted(set(pks))
    products = {
        p.pk: p for p in Product.objects.select_for_update().filter(pk__in=wanted).order_by('pk')
    }
    for pk in wanted:
        if pk not in products:
            raise LedgerError('NOT_FOUND', model='Product', pk=pk)
    return products


def _totals_per_product(lines) -> 'OrderedDict[int, int]':
    needed = OrderedDict()
    for pk, qty, _ in sorted(lines, key=lambda line: line[0]):
        needed[pk] = needed.get(pk, 0) + qty
    return needed


class Reconciliation:
    """Sale, purchase, payment, adjustment and return events."""

    # ══════════════════════════════════════════════════════════════
    # GOODS + MONEY
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def sell(cls, customer, brand, items, paid_amount=0, discount=0, rebate=0,
             date=None, note='', user=None) -> Invoice:
        """
        Sell goods from good stock.

        Args:
            items: [{'product': p, 'qty': 4, 'price': Decimal('100')}, ...]

        All-or-nothing: every product is checked against its good stock
        before anything is written; a later failure rolls back the whole
        transaction.

        Raises:
            LedgerError('INSUFFICIENT_STOCK'): names the first short product
            LedgerError('INVALID_AMOUNT'): discount + rebate above subtotal
        """
        customer = resolve_party(customer, PartyKind.CUSTOMER)
        brand = validate_brand(brand)
        lines = _parse_lines(items)
        paid = to_money(paid_amount, 'paid_amount')
        discount = to_money(discount, 'discount')
        rebate = to_money(rebate, 'rebate')
        needed = _totals_per_product(lines)

        with transaction.atomic():
            products = _lock_products(needed)

            for pk, qty in needed.items():
                product = products[pk]
                if product.good_qty < qty:
                    raise LedgerError(
                        'INSUFFICIENT_STOCK',
                        product_id=pk,
                        product=product.model_name,
                        bucket=StockBucket.GOOD.value,
                        available=product.good_qty,
                        requested=qty,
                    )

            subtotal = sum((qty * price for _, qty, price in lines), ZERO)
            grand_total = subtotal - discount - rebate
            if grand_total < 0:
                raise LedgerError(
                    'INVALID_AMOUNT',
                    field='discount',
                    subtotal=subtotal,
                    discount=discount,
                    rebate=rebate,
                )
            total_qty = sum(needed.values())

            invoice = Invoice.objects.create(
                number=next_number(brand, DocumentKind.INVOICE),
                customer=customer,
                brand=brand,
                date=date or timezone.localdate(),
                total_qty=total_qty,
                subtotal=subtotal,
                discount=discount,
                rebate=rebate,
                grand_total=grand_total,
                paid_amount=paid,
                dues=grand_total - paid,
                note=note,
                created_by=user,
            )
            InvoiceItem.objects.bulk_create([
                InvoiceItem(
                    invoice=invoice,
                    product_id=pk,
                    product_name=products[pk].model_name,
                    qty=qty,
                    price=price,
                    total=qty * price,
                )
                for pk, qty, price in lines
            ])

            for pk, qty in needed.items():
                StockLedger.decrease(
                    pk, StockBucket.GOOD, qty,
                    reason=f"Sale {invoice.number}", reference=invoice, user=user,
                )

            entry = FinancialLedger.append(
                customer, brand, EntryKind.INVOICE,
                debit=grand_total, credit=paid,
                reference=invoice, reference_no=invoice.number,
                description=f"Invoice {invoice.number}",
                date=invoice.date, user=user,
            )
            invoice.previous_dues = entry.balance - grand_total + paid
            invoice.save(update_fields=['previous_dues'])

            apply_summary(
                customer.pk,
                quantity=total_qty,
                amount=grand_total,
                payment=paid,
                document=(invoice.number, total_qty, grand_total, invoice.date),
            )

        logger.info(
            "sale.completed",
            extra={
                "invoice": invoice.number,
                "customer_id": customer.pk,
                "qty": total_qty,
                "grand_total": str(grand_total),
                "paid": str(paid),
            },
        )
        return invoice

    @classmethod
    def void_invoice(cls, invoice, reason='', user=None) -> Invoice:
        """
        Cancel a sale.

        The invoice and its Invoice entry stay in place. In one transaction:
        - every line goes back into good stock
        - a Void entry credits grand_total and debits paid_amount, which
          nets the stream back to its balance before the sale
        - the invoice is marked voided
        - the Party Summary drops the invoice's quantity, amount and payment

        Payments received later on account are not touched.

        Raises:
            LedgerError('INVALID_TRANSITION'): invoice already voided
        """
        with transaction.atomic():
            invoice = resolve(Invoice, invoice, for_update=True)
            if invoice.is_voided:
                raise LedgerError(
                    'INVALID_TRANSITION',
                    invoice=invoice.number,
                    current='voided',
                    expected=['active'],
                )

            returned = _totals_per_product(
                [(item.product_id, item.qty, item.price) for item in invoice.items.all()]
            )
            _lock_products(returned)
            for pk, qty in returned.items():
                StockLedger.increase(
                    pk, StockBucket.GOOD, qty,
                    reason=f"Void {invoice.number}", reference=invoice, user=user,
                )

            FinancialLedger.append(
                invoice.customer_id, invoice.brand, EntryKind.VOID,
                debit=invoice.paid_amount, credit=invoice.grand_total,
                reference=invoice, reference_no=invoice.number,
                description=reason or f"Void of invoice {invoice.number}",
                user=user,
            )
            Invoice.objects.filter(pk=invoice.pk).update(
                voided_at=timezone.now(),
                voided_by=user,
            )
            apply_summary(
                invoice.customer_id,
                quantity=-invoice.total_qty,
                amount=-invoice.grand_total,
                payment=-invoice.paid_amount,
            )
            invoice.refresh_from_db()

        logger.info(
            "sale.voided",
            extra={
                "invoice": invoice.number,
                "customer_id": invoice.customer_id,
                "qty": invoice.total_qty,
                "grand_total": str(invoice.grand_total),
                "paid": str(invoice.paid_amount),
            },
        )
        return invoice

    @classmethod
    def purchase(cls, supplier, brand, items, paid_amount=0, date=None,
                 note='', user=None) -> Purchase:
        """
        Receive goods from a supplier into good stock.

        Raises:
            LedgerError('OVERPAYMENT'): paid_amount above the purchase total
        """
        supplier = resolve_party(supplier, PartyKind.SUPPLIER)
        brand = validate_brand(brand)
        lines = _parse_lines(items)
        paid = to_money(paid_amount, 'paid_amount')
        received = _totals_per_product(lines)

        with transaction.atomic():
            products = _lock_products(received)
            total = sum((qty * price for _, qty, price in lines), ZERO)
            if paid > total:
                raise LedgerError('OVERPAYMENT', amount=paid, dues=total)
            total_qty = sum(received.values())

            purchase = Purchase.objects.create(
                number=next_number(brand, DocumentKind.PURCHASE),
                supplier=supplier,
                brand=brand,
                date=date or timezone.localdate(),
                total_qty=total_qty,
                total_amount=total,
                paid_amount=paid,
                dues=total - paid,
                note=note,
                created_by=user,
            )
            PurchaseItem.objects.bulk_create([
                PurchaseItem(
                    purchase=purchase,
                    product_id=pk,
                    product_name=products[pk].model_name,
                    qty=qty,
                    price=price,
                    total=qty * price,
                )
                for pk, qty, price in lines
            ])

            for pk, qty in received.items():
                StockLedger.increase(
                    pk, StockBucket.GOOD, qty,
                    reason=f"Purchase {purchase.number}", reference=purchase, user=user,
                )

            FinancialLedger.append(
                supplier, brand, EntryKind.INVOICE,
                debit=total, credit=paid,
                reference=purchase, reference_no=purchase.number,
                description=f"Purchase {purchase.number}",
                date=purchase.date, user=user,
            )
            apply_summary(
                supplier.pk,
                quantity=total_qty,
                amount=total,
                payment=paid,
                document=(purchase.number, total_qty, total, purchase.date),
            )

        logger.info(
            "purchase.completed",
            extra={
                "purchase": purchase.number,
                "supplier_id": supplier.pk,
                "qty": total_qty,
                "total": str(total),
            },
        )
        return purchase

    @classmethod
    def accept_return(cls, customer, brand, items, bucket=StockBucket.GOOD,
                      description='', date=None, user=None) -> LedgerEntry:
        """
        Take sold goods back: stock into the bucket, Return credit for
        the sum of qty * price.
        """
        customer = resolve_party(customer, PartyKind.CUSTOMER)
        brand = validate_brand(brand)
        lines = _parse_lines(items)
        returned = _totals_per_product(lines)
        credit = sum((qty * price for _, qty, price in lines), ZERO)

        with transaction.atomic():
            _lock_products(returned)
            for pk, qty in returned.items():
                StockLedger.increase(pk, bucket, qty, reason='Sales return', user=user)

            entry = FinancialLedger.append(
                customer, brand, EntryKind.RETURN,
                credit=credit,
                description=description or f"Return of {sum(returned.values())} items",
                date=date, user=user,
            )
            apply_summary(customer.pk, adjust=credit)

        logger.info(
            "return.accepted",
            extra={"customer_id": customer.pk, "credit": str(credit), "bucket": str(bucket)},
        )
        return entry

    # ══════════════════════════════════════════════════════════════
    # MONEY ONLY
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def receive_payment(cls, customer, brand, amount, method=PaymentMethod.CASH,
                        description='', date=None, user=None) -> Payment:
        """Money received from a customer or dealer."""
        customer = resolve_party(customer, PartyKind.CUSTOMER)
        kind = PaymentKind.DEALER if customer.is_dealer else PaymentKind.CUSTOMER
        return cls._record_payment(
            customer, brand, amount, kind, method,
            description or f"Payment from {customer.name}", date, user,
        )

    @classmethod
    def pay_supplier(cls, supplier, brand, amount, method=PaymentMethod.CASH,
                     description='', date=None, user=None) -> Payment:
        """Money paid to a supplier on account."""
        supplier = resolve_party(supplier, PartyKind.SUPPLIER)
        return cls._record_payment(
            supplier, brand, amount, PaymentKind.SUPPLIER, method,
            description or f"Payment to {supplier.name}", date, user,
        )

    @classmethod
    def pay_purchase(cls, purchase, amount, method=PaymentMethod.CASH,
                     description='', date=None, user=None) -> Payment:
        """
        Money paid against one purchase.

        Raises:
            LedgerError('OVERPAYMENT'): amount above the purchase's dues
        """
        amount = to_money(amount, allow_zero=False)

        with transaction.atomic():
            purchase = resolve(Purchase, purchase, for_update=True)
            if amount > purchase.dues:
                raise LedgerError(
                    'OVERPAYMENT',
                    purchase=purchase.number,
                    amount=amount,
                    dues=purchase.dues,
                )
            payment = cls._record_payment(
                purchase.supplier, purchase.brand, amount, PaymentKind.PURCHASE, method,
                description or f"Payment for {purchase.number}", date, user,
                purchase=purchase,
            )
            Purchase.objects.filter(pk=purchase.pk).update(
                paid_amount=F('paid_amount') + amount,
                dues=F('dues') - amount,
            )
        return payment

    @classmethod
    def pay_employee(cls, employee, brand, amount, method=PaymentMethod.CASH,
                     description='', date=None, user=None) -> Payment:
        """Salary or advance paid to an employee."""
        employee = resolve_party(employee, PartyKind.EMPLOYEE)
        return cls._record_payment(
            employee, brand, amount, PaymentKind.EMPLOYEE, method,
            description or f"Salary payment to {employee.name}", date, user,
        )

    @classmethod
    def adjust_balance(cls, party, brand, amount, direction='credit',
                       description='Adjustment', date=None, user=None) -> LedgerEntry:
        """
        Correct a balance with a new Adjustment entry.

        direction='credit' lowers the balance, 'debit' raises it.
        """
        party = resolve(Party, party)
        amount = to_money(amount, allow_zero=False)
        if direction not in ('debit', 'credit'):
            raise LedgerError('INVALID_KIND', direction=direction)
        debit = amount if direction == 'debit' else ZERO
        credit = amount if direction == 'credit' else ZERO

        with transaction.atomic():
            entry = FinancialLedger.append(
                party, brand, EntryKind.ADJUSTMENT,
                debit=debit, credit=credit,
                description=description, date=date, user=user,
            )
            apply_summary(party.pk, adjust=credit - debit)
        return entry

    # ══════════════════════════════════════════════════════════════
    # SUMMARY REBUILD
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def rebuild_summary(cls, party, dry_run: bool = False) -> dict[str, tuple]:
        """
        Recompute the Party Summary from the ledger.

        The ledger is authoritative: a summary that drifted (crash between
        writes, manual edit) is overwritten.

        - total_amount:   debits of Invoice entries less credits of Void entries
        - total_payment:  credits of Invoice and Payment entries less debits
                          of Void entries
        - total_adjust:   credit - debit of Adjustment, Return, Replacement
        - total_dues:     latest balance of every brand stream
        - total_quantity: units on the party's purchases or unvoided invoices

        Returns:
            {field: (cached, rebuilt)} for every field that drifted
        """
        with transaction.atomic():
            party = resolve(Party, party, for_update=True)
            entries = LedgerEntry.objects.filter(party=party)

            def total(expression, **filters):
                return entries.filter(**filters).aggregate(
                    t=Coalesce(Sum(expression), ZERO)
                )['t']

            dues = ZERO
            for brand in entries.order_by('brand').values_list('brand', flat=True).distinct():
                last = entries.filter(brand=brand).order_by('-sequence').first()
                dues += last.balance

            if party.kind == PartyKind.SUPPLIER:
                items = PurchaseItem.objects.filter(purchase__supplier=party)
            else:
                items = InvoiceItem.objects.filter(
                    invoice__customer=party,
                    invoice__voided_at__isnull=True,
                )

            rebuilt = {
                'total_quantity': items.aggregate(t=Coalesce(Sum('qty'), 0))['t'],
                'total_amount': (
                    total('debit', kind=EntryKind.INVOICE)
                    - total('credit', kind=EntryKind.VOID)
                ),
                'total_payment': (
                    total('credit', kind__in=[EntryKind.INVOICE, EntryKind.PAYMENT])
                    - total('debit', kind=EntryKind.VOID)
                ),
                'total_adjust': total(
                    F('credit') - F('debit'),
                    kind__in=[EntryKind.ADJUSTMENT, EntryKind.RETURN, EntryKind.REPLACEMENT],
                ),
                'total_dues': dues,
            }

            drift = {
                field: (getattr(party, field), value)
                for field, value in rebuilt.items()
                if getattr(party, field) != value
            }

            if drift and not dry_run:
                Party.objects.filter(pk=party.pk).update(updated_at=timezone.now(), **rebuilt)

        if drift:
            logger.warning(
                "party.summary.drift",
                extra={
                    "party_id": party.pk,
                    "dry_run": dry_run,
                    "drift": {f: [str(old), str(new)] for f, (old, new) in drift.items()},
                },
            )
        return drift

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _record_payment(cls, party, brand, amount, kind, method, description,
                        date, user, purchase=None) -> Payment:
        brand = validate_brand(brand)
        amount = to_money(amount, allow_zero=False)
        if method not in PaymentMethod.values:
            raise LedgerError('INVALID_KIND', method=method)

        with transaction.atomic():
            payment = Payment.objects.create(
                number=next_number(brand, DocumentKind.PAYMENT),
                kind=kind,
                party=party,
                purchase=purchase,
                brand=brand,
                amount=amount,
                method=method,
                description=description,
                date=date or timezone.localdate(),
                created_by=user,
            )
            FinancialLedger.append(
                party, brand, EntryKind.PAYMENT,
                credit=amount,
                reference=payment, reference_no=payment.number,
                description=description, date=payment.date, user=user,
            )
            apply_summary(party.pk, payment=amount)

        logger.info(
            "payment.recorded",
            extra={
                "payment": payment.number,
                "kind": kind,
                "party_id": party.pk,
                "amount": str(amount),
            },
        )
        return payment
