"""
Product model — owner of the four stock buckets.
"""

import logging
from decimal import Decimal

from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

from ledgerman.models.enums import Brand, ProductType, StockBucket


class Product(models.Model):
    """
    Sellable model of a brand with its stock counters.

    Buckets:
    - good_qty: sellable
    - bad_qty / damage_qty: rejected units held for write-off
    - repair_qty: units waiting for or at factory repair

    Performance:
    - counters are a cache updated atomically by the Stock Ledger
    - every change is mirrored by an immutable StockMove
    - use recalculate() for audit/correction
    """

    model_name = models.CharField(max_length=120, verbose_name=_('Model Name'))
    brand = models.CharField(
        max_length=20,
        choices=Brand.choices,
        db_index=True,
        verbose_name=_('Brand'),
    )
    type = models.CharField(
        max_length=20,
        choices=ProductType.choices,
        default=ProductType.PRODUCT,
        verbose_name=_('Type'),
    )

    purchase_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    sales_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    dealer_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))

    good_qty = models.PositiveIntegerField(default=0, verbose_name=_('Good'))
    bad_qty = models.PositiveIntegerField(default=0, verbose_name=_('Bad'))
    damage_qty = models.PositiveIntegerField(default=0, verbose_name=_('Damage'))
    repair_qty = models.PositiveIntegerField(default=0, verbose_name=_('Repair'))

    supplier = models.ForeignKey(
        'ledgerman.Party',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='supplied_products',
        verbose_name=_('Supplier'),
    )
    description = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        ordering = ['brand', 'model_name']
        constraints = [
            models.CheckConstraint(
                condition=Q(good_qty__gte=0) & Q(bad_qty__gte=0)
                & Q(damage_qty__gte=0) & Q(repair_qty__gte=0),
                name='product_buckets_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['brand', 'type'], name='product_brand_type_idx'),
        ]

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def total_stock(self) -> int:
        """Units currently held, all conditions."""
        return self.good_qty + self.bad_qty + self.damage_qty + self.repair_qty

    @property
    def stock_value(self) -> Decimal:
        """Sellable stock at purchase price."""
        return self.good_qty * self.purchase_price

    def quantity(self, bucket: str) -> int:
        return getattr(self, StockBucket(bucket).field_name)

    # ══════════════════════════════════════════════════════════════
    # METHODS
    # ══════════════════════════════════════════════════════════════

    def recalculate(self, dry_run: bool = False) -> dict[str, int]:
        """
        Recalculate bucket counters from StockMoves.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        Args:
            dry_run: report drift without saving

        Returns:
            Mapping of bucket -> old value for every corrected bucket
        """
        totals = {
            row['bucket']: row['total']
            for row in self.moves.values('bucket').annotate(total=Coalesce(Sum('delta'), 0))
        }

        corrected = {}
        for bucket in StockBucket:
            current = getattr(self, bucket.field_name)
            if totals.get(bucket.value, 0) != current:
                corrected[bucket.value] = current

        if corrected and not dry_run:
            for b in corrected:
                setattr(self, StockBucket(b).field_name, totals.get(b, 0))
            self.save(update_fields=[StockBucket(b).field_name for b in corrected] + ['updated_at'])

        if corrected:
            logger = logging.getLogger('ledgerman')
            logger.warning(
                "product.recalculated",
                extra={
                    "product_id": self.pk,
                    "dry_run": dry_run,
                    "corrected": {b: [old, totals.get(b, 0)]
                                  for b, old in corrected.items()},
                },
            )

        return corrected

    def __str__(self) -> str:
        return f"{self.model_name} ({self.get_brand_display()})"
