"""
Replacement claims — dealer returned-goods workflow.

Every transition locks the claim row first (select_for_update), so a claim
cannot be triaged twice concurrently while different claims proceed in
parallel.
"""

import logging
from collections import OrderedDict
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from ledgerman.adapters.pricing import get_price_resolver
from ledgerman.conf import ledgerman_settings
from ledgerman.exceptions import LedgerError
from ledgerman.models.claim import ClaimItem, ReplacementClaim
from ledgerman.models.enums import ClaimStatus, DocumentKind, EntryKind, PartyKind, StockBucket
from ledgerman.models.product import Product
from ledgerman.services.counters import next_number
from ledgerman.services.ledger import FinancialLedger
from ledgerman.services.lookups import (
    pk_of,
    resolve,
    resolve_party,
    to_money,
    validate_brand,
    validate_quantity,
)
from ledgerman.services.stock import StockLedger
from ledgerman.services.summary import apply_summary

logger = logging.getLogger('ledgerman')

# Triage result field -> bucket that receives the units
TRIAGE_BUCKETS = (
    ('good_qty', StockBucket.GOOD),
    ('repairable_qty', StockBucket.REPAIR),
    ('bad_qty', StockBucket.BAD),
    ('damage_qty', StockBucket.DAMAGE),
)


def _require_status(claim, *allowed):
    if claim.status not in allowed:
        raise LedgerError(
            'INVALID_TRANSITION',
            claim=claim.number,
            current=claim.status,
            expected=[str(s) for s in allowed],
        )


def _parse_results(claim, results) -> dict[int, dict]:
    """Validate triage results against the claim's items, keyed by product pk."""
    if not results:
        raise LedgerError('INVALID_ITEMS', claim=claim.number, reason='no triage results')

    items = {item.product_id: item for item in claim.items.all()}
    parsed = {}
    for index, result in enumerate(results):
        try:
            pk = pk_of(result['product'])
        except (KeyError, TypeError):
            raise LedgerError('INVALID_ITEMS', index=index, reason='product is required') from None
        if pk not in items:
            raise LedgerError('INVALID_ITEMS', claim=claim.number, product_id=pk,
                              reason='product is not part of the claim')
        if pk in parsed:
            raise LedgerError('INVALID_ITEMS', claim=claim.number, product_id=pk,
                              reason='duplicate triage result')

        row = {
            field: validate_quantity(result.get(field, 0), allow_zero=True)
            for field, _ in TRIAGE_BUCKETS
        }
        triaged = sum(row.values())
        if triaged > items[pk].claimed_qty:
            raise LedgerError(
                'TRIAGE_EXCEEDS_CLAIM',
                claim=claim.number,
                product_id=pk,
                claimed=items[pk].claimed_qty,
                triaged=triaged,
            )
        price = result.get('unit_price')
        row['unit_price'] = None if price is None else to_money(price, 'unit_price')
        parsed[pk] = row
    return parsed


def _matches_stored(claim, parsed) -> bool:
    """True when parsed results equal the triage already stored on the claim."""
    for item in claim.items.all():
        row = parsed.get(item.product_id)
        if row is None:
            if item.triaged_qty:
                return False
            continue
        if any(getattr(item, field) != row[field] for field, _ in TRIAGE_BUCKETS):
            return False
        if row['unit_price'] is not None and row['unit_price'] != item.unit_price:
            return False
    return True


class ReplacementClaims:
    """Claim lifecycle methods."""

    @classmethod
    def create_claim(cls, dealer, brand, items, user=None, date=None) -> ReplacementClaim:
        """
        Register a dealer's returned goods.

        Args:
            items: [{'product': p, 'claimed_qty': 5}, ...]
                   Lines for the same product are merged.

        No stock or ledger effect until triage.
        """
        dealer = resolve_party(dealer, PartyKind.CUSTOMER)
        if not dealer.is_dealer:
            raise LedgerError(
                'INVALID_PARTY',
                party_id=dealer.pk,
                kind=dealer.kind,
                expected=['dealer'],
            )
        brand = validate_brand(brand)
        if not items:
            raise LedgerError('INVALID_ITEMS', reason='at least one item is required')

        claimed = OrderedDict()
        for index, item in enumerate(items):
            try:
                pk = pk_of(item['product'])
                qty = item['claimed_qty']
            except (KeyError, TypeError):
                raise LedgerError(
                    'INVALID_ITEMS', index=index, reason='product and claimed_qty are required',
                ) from None
            claimed[pk] = claimed.get(pk, 0) + validate_quantity(qty)

        products = Product.objects.in_bulk(list(claimed))
        for pk in claimed:
            if pk not in products:
                raise LedgerError('NOT_FOUND', model='Product', pk=pk)

        with transaction.atomic():
            claim = ReplacementClaim.objects.create(
                number=next_number(brand, DocumentKind.CLAIM),
                dealer=dealer,
                brand=brand,
                total_claimed=sum(claimed.values()),
                date=date or timezone.localdate(),
                created_by=user,
            )
            ClaimItem.objects.bulk_create([
                ClaimItem(
                    claim=claim,
                    product_id=pk,
                    product_name=products[pk].model_name,
                    claimed_qty=qty,
                )
                for pk, qty in claimed.items()
            ])

        logger.info(
            "claim.created",
            extra={
                "claim": claim.number,
                "dealer_id": dealer.pk,
                "claimed": claim.total_claimed,
            },
        )
        return claim

    @classmethod
    def triage(cls, claim, results, user=None) -> ReplacementClaim:
        """
        Record inspection results and apply their effects.

        Transition: PENDING -> CHECKED

        Args:
            results: [{'product': p, 'good_qty': 3, 'repairable_qty': 2,
                       'bad_qty': 0, 'damage_qty': 0,
                       'unit_price': Decimal('100')}, ...]
                     unit_price is optional; the configured PriceResolver
                     supplies it when missing.

        Effects (each applied at most once, guarded by a claim flag):
        - stock_applied: one increase per non-zero bucket
        - ledger_applied: one Replacement credit of sum(accepted * price)

        Resubmitting the same results on a CHECKED claim is a no-op.

        Raises:
            LedgerError('INVALID_TRANSITION'): claim past triage, or CHECKED
                with different results
            LedgerError('INVALID_ITEMS'): product not in the claim
            LedgerError('TRIAGE_EXCEEDS_CLAIM'): triaged more than claimed
        """
        with transaction.atomic():
            claim = resolve(ReplacementClaim, claim, for_update=True)

            if claim.status == ClaimStatus.CHECKED:
                if _matches_stored(claim, _parse_results(claim, results)):
                    return claim
                raise LedgerError(
                    'INVALID_TRANSITION',
                    claim=claim.number,
                    current=claim.status,
                    expected=[ClaimStatus.PENDING.value],
                    reason='claim already triaged with different results',
                )
            _require_status(claim, ClaimStatus.PENDING)

            parsed = _parse_results(claim, results)
            items = list(claim.items.select_related('product').order_by('product_id'))
            list(
                Product.objects.select_for_update()
                .filter(pk__in=[item.product_id for item in items])
                .order_by('pk')
            )
            resolver = None

            totals = dict.fromkeys(('good', 'repairable', 'bad', 'damage', 'rejected'), 0)
            total_credit = Decimal('0')
            for item in items:
                row = parsed.get(item.product_id) or dict.fromkeys(
                    [field for field, _ in TRIAGE_BUCKETS], 0
                )
                for field, _ in TRIAGE_BUCKETS:
                    setattr(item, field, row[field])
                item.rejected_qty = item.bad_qty + item.damage_qty

                price = row.get('unit_price')
                if price is None:
                    resolver = resolver or get_price_resolver()
                    price = resolver.unit_price(item.product, claim.dealer, claim.brand).unit_price
                item.unit_price = to_money(price, 'unit_price')
                item.credit = item.accepted_qty * item.unit_price

                totals['good'] += item.good_qty
                totals['repairable'] += item.repairable_qty
                totals['bad'] += item.bad_qty
                totals['damage'] += item.damage_qty
                totals['rejected'] += item.rejected_qty
                total_credit += item.credit

            ClaimItem.objects.bulk_update(
                items,
                ['good_qty', 'repairable_qty', 'bad_qty', 'damage_qty',
                 'rejected_qty', 'unit_price', 'credit'],
            )

            if not claim.stock_applied:
                for item in items:
                    for field, bucket in TRIAGE_BUCKETS:
                        qty = getattr(item, field)
                        if qty:
                            StockLedger.increase(
                                item.product_id, bucket, qty,
                                reason=f"Replacement {claim.number}",
                                reference=claim, user=user,
                            )
                claim.stock_applied = True

            if not claim.ledger_applied:
                if total_credit > 0:
                    FinancialLedger.append(
                        claim.dealer_id, claim.brand, EntryKind.REPLACEMENT,
                        credit=total_credit,
                        reference=claim, reference_no=claim.number,
                        description=f"Replacement credit {claim.number}",
                        user=user,
                    )
                    apply_summary(claim.dealer_id, adjust=total_credit)
                claim.ledger_applied = True

            claim.total_good = totals['good']
            claim.total_repairable = totals['repairable']
            claim.total_bad = totals['bad']
            claim.total_damage = totals['damage']
            claim.total_rejected = totals['rejected']
            claim.total_credit = total_credit
            claim.status = ClaimStatus.CHECKED
            claim.save()

        logger.info(
            "claim.triaged",
            extra={
                "claim": claim.number,
                "good": claim.total_good,
                "repairable": claim.total_repairable,
                "rejected": claim.total_rejected,
                "credit": str(claim.total_credit),
            },
        )
        return claim

    @classmethod
    def send_to_factory(cls, claim, date=None) -> ReplacementClaim:
        """
        Ship repairable units for repair.

        Transition: CHECKED -> SENT_TO_FACTORY
        """
        with transaction.atomic():
            claim = resolve(ReplacementClaim, claim, for_update=True)
            _require_status(claim, ClaimStatus.CHECKED)

            claim.status = ClaimStatus.SENT_TO_FACTORY
            claim.repair_sent_date = date or timezone.localdate()
            claim.save(update_fields=['status', 'repair_sent_date', 'updated_at'])

        logger.info("claim.sent_to_factory", extra={"claim": claim.number})
        return claim

    @classmethod
    def receive_from_factory(cls, claim, high_cost_qty=0, low_cost_qty=0, note='',
                             date=None, user=None) -> ReplacementClaim:
        """
        Take repaired units back into good stock.

        Transition: SENT_TO_FACTORY -> REPAIRED

        Every item's repairable units move repair -> good. high_cost_qty and
        low_cost_qty classify the repairs; repair_cost is recorded on the
        claim only.

        Raises:
            LedgerError('INVALID_QUANTITY'): negative counts
            LedgerError('REPAIR_QUANTITY_EXCEEDED'): high + low above
                total_repairable (claim unchanged)
        """
        high = validate_quantity(high_cost_qty, allow_zero=True)
        low = validate_quantity(low_cost_qty, allow_zero=True)

        with transaction.atomic():
            claim = resolve(ReplacementClaim, claim, for_update=True)
            _require_status(claim, ClaimStatus.SENT_TO_FACTORY)

            if high + low > claim.total_repairable:
                raise LedgerError(
                    'REPAIR_QUANTITY_EXCEEDED',
                    claim=claim.number,
                    repairable=claim.total_repairable,
                    requested=high + low,
                )

            items = list(
                claim.items.filter(repairable_qty__gt=0).order_by('product_id')
            )
            list(
                Product.objects.select_for_update()
                .filter(pk__in=[item.product_id for item in items])
                .order_by('pk')
            )
            for item in items:
                StockLedger.transfer(
                    item.product_id, StockBucket.REPAIR, StockBucket.GOOD, item.repairable_qty,
                    reason=f"Factory repair {claim.number}", reference=claim, user=user,
                )

            claim.status = ClaimStatus.REPAIRED
            claim.repair_received_date = date or timezone.localdate()
            claim.high_cost_qty = high
            claim.low_cost_qty = low
            claim.repair_cost = (
                high * ledgerman_settings.REPAIR_HIGH_COST
                + low * ledgerman_settings.REPAIR_LOW_COST
            )
            claim.repair_note = note
            claim.save()

        logger.info(
            "claim.repaired",
            extra={
                "claim": claim.number,
                "high_cost_qty": high,
                "low_cost_qty": low,
                "repair_cost": str(claim.repair_cost),
            },
        )
        return claim

    @classmethod
    def close_claim(cls, claim) -> ReplacementClaim:
        """
        Close a finished claim.

        Transition: REPAIRED -> CLOSED, or CHECKED -> CLOSED when nothing
        was repairable.
        """
        with transaction.atomic():
            claim = resolve(ReplacementClaim, claim, for_update=True)
            nothing_to_repair = claim.status == ClaimStatus.CHECKED and claim.total_repairable == 0
            if not nothing_to_repair:
                _require_status(claim, ClaimStatus.REPAIRED)

            claim.status = ClaimStatus.CLOSED
            claim.save(update_fields=['status', 'updated_at'])

        logger.info("claim.closed", extra={"claim": claim.number})
        return claim

    @classmethod
    def delete_claim(cls, claim) -> None:
        """
        Delete a claim that has not been triaged.

        Raises:
            LedgerError('INVALID_TRANSITION'): claim is not PENDING
        """
        with transaction.atomic():
            claim = resolve(ReplacementClaim, claim, for_update=True)
            _require_status(claim, ClaimStatus.PENDING)
            number = claim.number
            claim.delete()

        logger.info("claim.deleted", extra={"claim": number})
