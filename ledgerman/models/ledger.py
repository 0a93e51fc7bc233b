"""
Ledger models — per-(party, brand) streams of immutable entries.
"""

from decimal import Decimal

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ledgerman.models.enums import Brand, EntryKind


class LedgerStream(models.Model):
    """
    Head of the ledger for one (party, brand) pair.

    sequence is the number of entries appended so far and balance the
    running balance after the last one. Appends lock this row and advance
    it with a compare-and-swap on sequence, so every append sees the
    balance of the entry appended immediately before it.
    """

    party = models.ForeignKey(
        'ledgerman.Party',
        on_delete=models.PROTECT,
        related_name='streams',
        verbose_name=_('Party'),
    )
    brand = models.CharField(max_length=20, choices=Brand.choices, verbose_name=_('Brand'))
    sequence = models.PositiveIntegerField(default=0, verbose_name=_('Entries'))
    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('Balance'),
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Ledger Stream')
        verbose_name_plural = _('Ledger Streams')
        constraints = [
            models.UniqueConstraint(fields=['party', 'brand'], name='unique_ledger_stream'),
        ]

    def __str__(self) -> str:
        return f"{self.party} [{self.brand}] #{self.sequence}: {self.balance}"


class LedgerEntry(models.Model):
    """
    Immutable ledger line.

    Rules:
    - NEVER update() or delete()
    - balance == previous.balance - credit + debit, previous being the
      entry with sequence - 1 in the same stream (insertion order)
    - Corrections are new Adjustment entries
    - Only created through FinancialLedger.append()
    """

    stream = models.ForeignKey(
        LedgerStream,
        on_delete=models.PROTECT,
        related_name='entries',
    )
    # Denormalized from stream for filtering
    party = models.ForeignKey(
        'ledgerman.Party',
        on_delete=models.PROTECT,
        related_name='ledger_entries',
        verbose_name=_('Party'),
    )
    brand = models.CharField(max_length=20, choices=Brand.choices, verbose_name=_('Brand'))
    sequence = models.PositiveIntegerField(verbose_name=_('Sequence'))

    kind = models.CharField(max_length=20, choices=EntryKind.choices, verbose_name=_('Kind'))
    debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    balance = models.DecimalField(max_digits=14, decimal_places=2, verbose_name=_('Balance'))

    # Originating transaction (invoice, payment, claim...)
    reference_type = models.ForeignKey(
        ContentType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    reference_id = models.PositiveIntegerField(null=True, blank=True)
    reference = GenericForeignKey('reference_type', 'reference_id')
    reference_no = models.CharField(max_length=30, blank=True, default='')

    description = models.CharField(max_length=255, blank=True, default='')
    date = models.DateField(default=timezone.localdate, db_index=True, verbose_name=_('Effective Date'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Ledger Entry')
        verbose_name_plural = _('Ledger Entries')
        ordering = ['stream', 'sequence']
        constraints = [
            models.UniqueConstraint(fields=['stream', 'sequence'], name='unique_ledger_sequence'),
        ]
        indexes = [
            models.Index(fields=['party', 'brand', 'sequence'], name='ledger_party_brand_seq_idx'),
            models.Index(fields=['kind'], name='ledger_kind_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValueError(
                "Ledger entries are immutable. "
                "Post an Adjustment entry to correct a balance."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError(
            "Ledger entries are immutable. "
            "Post an Adjustment entry to correct a balance."
        )

    def __str__(self) -> str:
        return f"{self.get_kind_display()} +{self.debit} -{self.credit} = {self.balance}"
