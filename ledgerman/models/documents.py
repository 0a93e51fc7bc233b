"""
Business documents — invoices, purchases and payments.

Documents record what happened; stock and money effects live in the
Stock Ledger (Product counters + StockMove) and the Financial Ledger
(LedgerEntry), which reference these rows.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ledgerman.models.enums import Brand, PaymentKind, PaymentMethod


class Invoice(models.Model):
    """Sale to a customer."""

    number = models.CharField(max_length=30, unique=True, verbose_name=_('Invoice No'))
    customer = models.ForeignKey(
        'ledgerman.Party',
        on_delete=models.PROTECT,
        related_name='invoices',
    )
    brand = models.CharField(max_length=20, choices=Brand.choices)
    date = models.DateField(default=timezone.localdate, db_index=True)

    total_qty = models.PositiveIntegerField(default=0)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    discount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    rebate = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    grand_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    dues = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0'),
        help_text=_('grand_total - paid_amount'),
    )
    previous_dues = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0'),
        help_text=_('Brand balance before this invoice'),
    )
    note = models.CharField(max_length=255, blank=True, default='')

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    voided_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Voided at'))
    voided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    class Meta:
        verbose_name = _('Invoice')
        verbose_name_plural = _('Invoices')
        ordering = ['-date', '-pk']

    def __str__(self) -> str:
        return self.number

    @property
    def is_voided(self) -> bool:
        return self.voided_at is not None


class InvoiceItem(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('ledgerman.Product', on_delete=models.PROTECT, related_name='+')
    product_name = models.CharField(max_length=120)
    qty = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=14, decimal_places=2)
    total = models.DecimalField(max_digits=14, decimal_places=2)

    def __str__(self) -> str:
        return f"{self.qty}x {self.product_name} @ {self.price}"


class Purchase(models.Model):
    """Goods bought from a supplier."""

    number = models.CharField(max_length=30, unique=True, verbose_name=_('Purchase No'))
    supplier = models.ForeignKey(
        'ledgerman.Party',
        on_delete=models.PROTECT,
        related_name='purchases',
    )
    brand = models.CharField(max_length=20, choices=Brand.choices)
    date = models.DateField(default=timezone.localdate, db_index=True)

    total_qty = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    dues = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    note = models.CharField(max_length=255, blank=True, default='')

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Purchase')
        verbose_name_plural = _('Purchases')
        ordering = ['-date', '-pk']

    def __str__(self) -> str:
        return self.number


class PurchaseItem(models.Model):
    purchase = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('ledgerman.Product', on_delete=models.PROTECT, related_name='+')
    product_name = models.CharField(max_length=120)
    qty = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=14, decimal_places=2)
    total = models.DecimalField(max_digits=14, decimal_places=2)

    def __str__(self) -> str:
        return f"{self.qty}x {self.product_name} @ {self.price}"


class Payment(models.Model):
    """Money received from or paid to a party."""

    number = models.CharField(max_length=30, unique=True, verbose_name=_('Payment No'))
    kind = models.CharField(max_length=20, choices=PaymentKind.choices, db_index=True)
    party = models.ForeignKey(
        'ledgerman.Party',
        on_delete=models.PROTECT,
        related_name='payments',
    )
    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='payments',
    )
    brand = models.CharField(max_length=20, choices=Brand.choices)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
    )
    description = models.CharField(max_length=255, blank=True, default='')
    date = models.DateField(default=timezone.localdate, db_index=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Payment')
        verbose_name_plural = _('Payments')
        ordering = ['-date', '-pk']

    def __str__(self) -> str:
        return f"{self.number}: {self.amount}"
