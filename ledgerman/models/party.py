"""
Party model — customers, suppliers and employees with their summary cache.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from ledgerman.models.enums import BrandScope, CustomerType, PartyKind


class Party(models.Model):
    """
    A participant in the financial ledger.

    The total_* fields are the Party Summary: a denormalized projection of
    the party's ledger streams. They are a cache, not a source of truth.
    The Reconciliation Layer keeps them in step after every event and can
    rebuild them from the ledger (rebuild_summary).

    For customers total_amount is sales; for suppliers it is purchases.
    """

    kind = models.CharField(
        max_length=20,
        choices=PartyKind.choices,
        db_index=True,
        verbose_name=_('Kind'),
    )
    customer_type = models.CharField(
        max_length=20,
        choices=CustomerType.choices,
        blank=True,
        default='',
        verbose_name=_('Customer Type'),
        help_text=_('Customers only'),
    )
    brand_scope = models.CharField(
        max_length=20,
        choices=BrandScope.choices,
        default=BrandScope.BOTH,
        verbose_name=_('Brands'),
    )

    name = models.CharField(max_length=150, verbose_name=_('Name'))
    company_name = models.CharField(max_length=150, blank=True, default='')
    phone = models.CharField(max_length=30, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    address = models.CharField(max_length=255, blank=True, default='')
    district = models.CharField(max_length=80, blank=True, default='', db_index=True)

    # Summary cache
    total_quantity = models.PositiveIntegerField(default=0, verbose_name=_('Total Quantity'))
    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0'),
        verbose_name=_('Total Sales/Purchases'),
    )
    total_payment = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0'),
        verbose_name=_('Total Payment'),
    )
    total_adjust = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0'),
        verbose_name=_('Total Adjustment'),
        help_text=_('Net credit from adjustments, returns and replacements'),
    )
    total_dues = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0'),
        verbose_name=_('Total Dues'),
        help_text=_('Sum of the latest balance of every brand stream'),
    )

    last_document_no = models.CharField(max_length=30, blank=True, default='')
    last_document_qty = models.PositiveIntegerField(null=True, blank=True)
    last_document_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    last_document_date = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True, verbose_name=_('Active'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Party')
        verbose_name_plural = _('Parties')
        ordering = ['name']
        indexes = [
            models.Index(fields=['kind', 'customer_type'], name='party_kind_type_idx'),
        ]

    SUMMARY_FIELDS = (
        'total_quantity',
        'total_amount',
        'total_payment',
        'total_adjust',
        'total_dues',
    )

    @property
    def is_dealer(self) -> bool:
        return self.kind == PartyKind.CUSTOMER and self.customer_type == CustomerType.DEALER

    def __str__(self) -> str:
        return f"{self.name} ({self.get_kind_display()})"
