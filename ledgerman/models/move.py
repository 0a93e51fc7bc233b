"""
StockMove model — Immutable record of bucket changes.
"""

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ledgerman.models.enums import StockBucket


class StockMove(models.Model):
    """
    Immutable record of a bucket quantity change.

    Rules:
    - NEVER update() or delete()
    - Written by the Stock Ledger in the same transaction as the counter update
    - Sum of deltas per bucket equals the product's counter
    """

    product = models.ForeignKey(
        'ledgerman.Product',
        on_delete=models.PROTECT,
        related_name='moves',
        verbose_name=_('Product'),
    )
    bucket = models.CharField(
        max_length=10,
        choices=StockBucket.choices,
        verbose_name=_('Bucket'),
    )
    delta = models.IntegerField(
        verbose_name=_('Delta'),
        help_text=_('Positive = in, Negative = out'),
    )

    # External reference (invoice, purchase, claim)
    reference_type = models.ForeignKey(
        ContentType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    reference_id = models.PositiveIntegerField(null=True, blank=True)
    reference = GenericForeignKey('reference_type', 'reference_id')

    reason = models.CharField(max_length=255, verbose_name=_('Reason'))
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    class Meta:
        verbose_name = _('Stock Move')
        verbose_name_plural = _('Stock Moves')
        ordering = ['timestamp', 'pk']
        indexes = [
            models.Index(fields=['product', 'bucket'], name='stockmove_product_bucket_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError("Stock moves are immutable. Record a new move instead.")
        if not self.reason:
            raise ValueError("Reason is required")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Stock moves are immutable. Record a new move instead.")

    def __str__(self) -> str:
        signal = '+' if self.delta > 0 else ''
        return f"{signal}{self.delta} {self.bucket} | {self.reason}"
