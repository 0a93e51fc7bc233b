"""
Replacement claim models — dealer returned-goods workflow.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ledgerman.models.enums import Brand, ClaimStatus


class ReplacementClaim(models.Model):
    """
    A dealer's returned-goods claim.

    LIFECYCLE:

        ┌─────────┐ triage() ┌─────────┐ send_to_factory() ┌─────────────────┐
        │ PENDING │ ───────► │ CHECKED │ ────────────────► │ SENT_TO_FACTORY │
        └─────────┘          └─────────┘                   └─────────────────┘
             │                    │                                 │
             │ delete()           │ close()                         │ receive_from_factory()
             ▼                    │ (nothing repairable)            ▼
          (gone)                  │                          ┌──────────┐
                                  └─────────────────────────►│ REPAIRED │
                                            ┌────────┐  close()└──────────┘
                                            │ CLOSED │ ◄───────────┘
                                            └────────┘

    EFFECTS:
    - triage: stock per bucket (guarded by stock_applied) and one
      Replacement credit on the dealer ledger (guarded by ledger_applied)
    - receive_from_factory: repairable units move repair -> good
    """

    number = models.CharField(max_length=30, unique=True, verbose_name=_('Claim No'))
    dealer = models.ForeignKey(
        'ledgerman.Party',
        on_delete=models.PROTECT,
        related_name='claims',
        verbose_name=_('Dealer'),
    )
    brand = models.CharField(max_length=20, choices=Brand.choices, verbose_name=_('Brand'))
    status = models.CharField(
        max_length=20,
        choices=ClaimStatus.choices,
        default=ClaimStatus.PENDING,
        db_index=True,
        verbose_name=_('Status'),
    )

    # Totals
    total_claimed = models.PositiveIntegerField(default=0)
    total_good = models.PositiveIntegerField(default=0)
    total_repairable = models.PositiveIntegerField(default=0)
    total_bad = models.PositiveIntegerField(default=0)
    total_damage = models.PositiveIntegerField(default=0)
    total_rejected = models.PositiveIntegerField(default=0)
    total_credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))

    # Factory repair
    repair_sent_date = models.DateField(null=True, blank=True, verbose_name=_('Sent to Factory'))
    repair_received_date = models.DateField(null=True, blank=True, verbose_name=_('Received from Factory'))
    high_cost_qty = models.PositiveIntegerField(
        default=0,
        verbose_name=_('High-cost Repairs'),
        help_text=_('Major repairs (e.g. PCB)'),
    )
    low_cost_qty = models.PositiveIntegerField(default=0, verbose_name=_('Low-cost Repairs'))
    repair_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    repair_note = models.CharField(max_length=255, blank=True, default='')

    # One-shot guards against double processing
    stock_applied = models.BooleanField(default=False, verbose_name=_('Stock Applied'))
    ledger_applied = models.BooleanField(default=False, verbose_name=_('Ledger Applied'))

    date = models.DateField(default=timezone.localdate)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Replacement Claim')
        verbose_name_plural = _('Replacement Claims')
        ordering = ['-date', '-pk']
        indexes = [
            models.Index(fields=['dealer', 'status'], name='claim_dealer_status_idx'),
            models.Index(fields=['brand', 'status'], name='claim_brand_status_idx'),
        ]

    @property
    def is_deletable(self) -> bool:
        return self.status == ClaimStatus.PENDING

    @property
    def repair_details(self) -> dict:
        return {
            'sent_date': self.repair_sent_date,
            'received_date': self.repair_received_date,
            'high_cost_qty': self.high_cost_qty,
            'low_cost_qty': self.low_cost_qty,
            'repair_cost': self.repair_cost,
            'note': self.repair_note,
        }

    def __str__(self) -> str:
        return f"{self.number} [{self.get_status_display()}]"


class ClaimItem(models.Model):
    """Claimed product line with its triage result."""

    claim = models.ForeignKey(
        ReplacementClaim,
        on_delete=models.CASCADE,
        related_name='items',
    )
    product = models.ForeignKey(
        'ledgerman.Product',
        on_delete=models.PROTECT,
        related_name='+',
    )
    product_name = models.CharField(max_length=120)
    claimed_qty = models.PositiveIntegerField()

    good_qty = models.PositiveIntegerField(default=0)
    repairable_qty = models.PositiveIntegerField(default=0)
    bad_qty = models.PositiveIntegerField(default=0)
    damage_qty = models.PositiveIntegerField(default=0)
    rejected_qty = models.PositiveIntegerField(default=0)

    # Price snapshot at triage
    unit_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))

    class Meta:
        verbose_name = _('Claim Item')
        verbose_name_plural = _('Claim Items')
        constraints = [
            models.UniqueConstraint(fields=['claim', 'product'], name='unique_claim_product'),
        ]

    @property
    def accepted_qty(self) -> int:
        return self.good_qty + self.repairable_qty

    @property
    def triaged_qty(self) -> int:
        return self.good_qty + self.repairable_qty + self.bad_qty + self.damage_qty

    def __str__(self) -> str:
        return f"{self.claimed_qty}x {self.product_name}"
