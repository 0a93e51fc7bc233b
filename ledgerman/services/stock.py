"""
Stock Ledger — per-product bucket counters (good, bad, damage, repair).

Every change is a single conditional UPDATE plus an immutable StockMove,
both inside transaction.atomic().
"""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ledgerman.exceptions import LedgerError
from ledgerman.models.enums import StockBucket
from ledgerman.models.move import StockMove
from ledgerman.models.product import Product
from ledgerman.services.lookups import pk_of, resolve, validate_quantity

logger = logging.getLogger('ledgerman')


@dataclass(frozen=True)
class BucketState:
    """Snapshot of a product's buckets."""

    product_id: int
    good: int
    bad: int
    damage: int
    repair: int

    @property
    def total(self) -> int:
        return self.good + self.bad + self.damage + self.repair


def _bucket(bucket) -> StockBucket:
    try:
        return StockBucket(bucket)
    except ValueError:
        raise LedgerError('INVALID_BUCKET', bucket=bucket) from None


def _record_move(product_id, bucket: StockBucket, delta: int, reason, reference, user):
    StockMove.objects.create(
        product_id=product_id,
        bucket=bucket.value,
        delta=delta,
        reason=reason,
        reference=reference,
        user=user,
    )


class StockLedger:
    """Atomic bucket operations."""

    @classmethod
    def stock_of(cls, product) -> BucketState:
        """Current bucket quantities."""
        product = resolve(Product, product)
        return BucketState(
            product_id=product.pk,
            good=product.good_qty,
            bad=product.bad_qty,
            damage=product.damage_qty,
            repair=product.repair_qty,
        )

    @classmethod
    def increase(cls, product, bucket, qty, reason='Stock in',
                 reference=None, user=None) -> Product:
        """
        Add qty units to a bucket.

        Raises:
            LedgerError('INVALID_BUCKET'): Unknown bucket name
            LedgerError('INVALID_QUANTITY'): qty is not a positive integer
            LedgerError('NOT_FOUND'): Product does not exist
        """
        bucket = _bucket(bucket)
        validate_quantity(qty)
        pk = pk_of(product)
        field = bucket.field_name

        with transaction.atomic():
            updated = Product.objects.filter(pk=pk).update(**{
                field: F(field) + qty,
                'updated_at': timezone.now(),
            })
            if not updated:
                raise LedgerError('NOT_FOUND', model='Product', pk=pk)

            _record_move(pk, bucket, qty, reason, reference, user)

        logger.info(
            "stock.increase",
            extra={"product_id": pk, "bucket": bucket.value, "qty": qty, "reason": reason},
        )
        return Product.objects.get(pk=pk)

    @classmethod
    def decrease(cls, product, bucket, qty, reason='Stock out',
                 reference=None, user=None) -> Product:
        """
        Remove qty units from a bucket.

        Raises:
            LedgerError('INSUFFICIENT_STOCK'): Bucket holds fewer than qty units
            LedgerError('INVALID_BUCKET'), LedgerError('INVALID_QUANTITY')
            LedgerError('NOT_FOUND'): Product does not exist

        Concurrency:
            - Check and subtract are one statement:
              UPDATE ... SET bucket = bucket - qty WHERE bucket >= qty
            - Concurrent callers can never both pass the check
        """
        bucket = _bucket(bucket)
        validate_quantity(qty)
        pk = pk_of(product)
        field = bucket.field_name

        with transaction.atomic():
            updated = Product.objects.filter(pk=pk, **{f'{field}__gte': qty}).update(**{
                field: F(field) - qty,
                'updated_at': timezone.now(),
            })

            if not updated:
                row = Product.objects.filter(pk=pk).values('model_name', field).first()
                if row is None:
                    raise LedgerError('NOT_FOUND', model='Product', pk=pk)
                raise LedgerError(
                    'INSUFFICIENT_STOCK',
                    product_id=pk,
                    product=row['model_name'],
                    bucket=bucket.value,
                    available=row[field],
                    requested=qty,
                )

            _record_move(pk, bucket, -qty, reason, reference, user)

        logger.info(
            "stock.decrease",
            extra={"product_id": pk, "bucket": bucket.value, "qty": qty, "reason": reason},
        )
        return Product.objects.get(pk=pk)

    @classmethod
    def transfer(cls, product, from_bucket, to_bucket, qty, reason='Transfer',
                 reference=None, user=None) -> Product:
        """
        Move qty units between buckets of the same product.

        Both legs run in one transaction: no reader sees the units
        missing from both buckets or present in both.
        """
        source = _bucket(from_bucket)
        target = _bucket(to_bucket)
        if source == target:
            raise LedgerError('INVALID_BUCKET', bucket=target.value, reason='same bucket')

        with transaction.atomic():
            cls.decrease(product, source, qty, reason=reason, reference=reference, user=user)
            return cls.increase(product, target, qty, reason=reason, reference=reference, user=user)
