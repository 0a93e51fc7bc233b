"""
DocumentCounter model — per-brand sequential document numbers.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from ledgerman.models.enums import Brand, DocumentKind


class DocumentCounter(models.Model):
    """
    Last number handed out for a (brand, kind) pair.

    Incremented under select_for_update() inside the transaction that
    creates the numbered document, so two concurrent creations can never
    receive the same number.
    """

    brand = models.CharField(max_length=20, choices=Brand.choices)
    kind = models.CharField(max_length=20, choices=DocumentKind.choices)
    value = models.PositiveIntegerField(default=0, verbose_name=_('Last Number'))

    class Meta:
        verbose_name = _('Document Counter')
        verbose_name_plural = _('Document Counters')
        constraints = [
            models.UniqueConstraint(fields=['brand', 'kind'], name='unique_document_counter'),
        ]

    def __str__(self) -> str:
        return f"{self.brand}/{self.kind}: {self.value}"
