"""
Party Summary — denormalized totals kept in step with the ledger.

Every event that appends to a party's ledger folds its effect in here,
inside the same transaction as the append.
"""

from decimal import Decimal

from django.db.models import F, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from ledgerman.models.ledger import LedgerStream
from ledgerman.models.party import Party

ZERO = Decimal('0')


def current_dues(party_pk) -> Decimal:
    """Sum of the latest balance of every stream of the party."""
    return LedgerStream.objects.filter(party_id=party_pk).aggregate(
        t=Coalesce(Sum('balance'), ZERO)
    )['t']


def apply_summary(party_pk, quantity=0, amount=ZERO, payment=ZERO, adjust=ZERO,
                  document=None) -> None:
    """
    Fold an event into the Party Summary cache.

    Locks the party row before reading the streams so two events on
    different brands of the same party cannot overwrite each other's dues.

    Args:
        document: optional (number, qty, amount, date) of the last document
    """
    Party.objects.select_for_update().filter(pk=party_pk).first()
    changes = {
        'total_quantity': F('total_quantity') + quantity,
        'total_amount': F('total_amount') + amount,
        'total_payment': F('total_payment') + payment,
        'total_adjust': F('total_adjust') + adjust,
        'total_dues': current_dues(party_pk),
        'updated_at': timezone.now(),
    }
    if document is not None:
        number, qty, value, date = document
        changes.update(
            last_document_no=number,
            last_document_qty=qty,
            last_document_amount=value,
            last_document_date=date,
        )
    Party.objects.filter(pk=party_pk).update(**changes)
