"""
Document numbering — per-brand counters updated in the creating transaction.

Replaces "count documents, pad number", which hands out duplicates when two
documents are created at the same time.
"""

from django.db import transaction
from django.db.models import F

from ledgerman.conf import ledgerman_settings
from ledgerman.models.counter import DocumentCounter
from ledgerman.models.enums import DocumentKind

NUMBER_FORMATS = {
    DocumentKind.INVOICE: '{prefix}-INV-{value:06d}',
    DocumentKind.PURCHASE: 'P{prefix}-{value:06d}',
    DocumentKind.CLAIM: '{prefix}-RPL-{value:05d}',
    DocumentKind.PAYMENT: '{prefix}-PAY-{value:06d}',
}


def next_number(brand: str, kind: str) -> str:
    """
    Allocate the next document number for brand/kind.

    Must run inside the transaction that creates the document: the
    counter row stays locked until that transaction commits, and a
    rollback gives the number back.

    Examples:
        next_number('green_tel', 'claim')    # 'GT-RPL-00001'
        next_number('green_star', 'purchase')  # 'PGS-000001'
    """
    kind = DocumentKind(kind)
    prefix = ledgerman_settings.BRAND_PREFIXES.get(brand, brand[:2].upper())

    with transaction.atomic():
        counter, _ = DocumentCounter.objects.select_for_update().get_or_create(
            brand=brand,
            kind=kind,
        )
        DocumentCounter.objects.filter(pk=counter.pk).update(value=F('value') + 1)
        counter.refresh_from_db(fields=['value'])

    return NUMBER_FORMATS[kind].format(prefix=prefix, value=counter.value)
