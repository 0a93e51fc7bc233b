"""
Financial Ledger — append-only running balances per (party, brand).

All appends go through FinancialLedger.append(), which serializes on the
LedgerStream row of the key.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.utils import timezone

from ledgerman.conf import ledgerman_settings
from ledgerman.exceptions import LedgerError
from ledgerman.models.enums import EntryKind
from ledgerman.models.ledger import LedgerEntry, LedgerStream
from ledgerman.models.party import Party
from ledgerman.services.lookups import resolve, to_money, validate_brand
from ledgerman.services.summary import apply_summary

logger = logging.getLogger('ledgerman')


class _StaleStream(Exception):
    """The stream advanced between our read and our write."""


def _kind(kind) -> str:
    try:
        return EntryKind(kind).value
    except ValueError:
        raise LedgerError('INVALID_KIND', kind=kind) from None


class FinancialLedger:
    """Append-only ledger operations."""

    @classmethod
    def append(cls, party, brand, kind, debit=0, credit=0, reference=None,
               reference_no='', description='', date=None, user=None) -> LedgerEntry:
        """
        Append an entry and return it with its computed balance.

        balance = previous balance - credit + debit, where previous is the
        entry appended last to this (party, brand) stream; 0 for a new
        stream.

        Raises:
            LedgerError('NOT_FOUND'): Party does not exist
            LedgerError('INVALID_AMOUNT'): Negative or malformed debit/credit
            LedgerError('INVALID_KIND'), LedgerError('INVALID_BRAND')
            LedgerError('CONCURRENT_MODIFICATION'): Lost the race
                APPEND_MAX_RETRIES times in a row

        Concurrency:
            - Locks the stream row with select_for_update()
            - Advances it with UPDATE ... WHERE sequence = <read>
            - (stream, sequence) is unique on the entry table
            - A lost compare-and-swap rolls back to a savepoint and retries
        """
        party = resolve(Party, party)
        brand = validate_brand(brand)
        kind = _kind(kind)
        debit = to_money(debit, 'debit')
        credit = to_money(credit, 'credit')
        attempts = max(1, int(ledgerman_settings.APPEND_MAX_RETRIES))

        for attempt in range(1, attempts + 1):
            try:
                with transaction.atomic():
                    return cls._append_once(
                        party, brand, kind, debit, credit, reference,
                        reference_no, description, date, user,
                    )
            except (_StaleStream, IntegrityError) as exc:
                logger.warning(
                    "ledger.append.conflict",
                    extra={
                        "party_id": party.pk,
                        "brand": brand,
                        "attempt": attempt,
                        "error": type(exc).__name__,
                    },
                )

        raise LedgerError(
            'CONCURRENT_MODIFICATION',
            party_id=party.pk,
            brand=brand,
            attempts=attempts,
        )

    @classmethod
    def latest_balance(cls, party, brand) -> Decimal:
        """Balance after the most recent append (0 for an empty stream)."""
        party = resolve(Party, party)
        brand = validate_brand(brand)
        balance = LedgerStream.objects.filter(
            party=party,
            brand=brand,
        ).values_list('balance', flat=True).first()
        return balance if balance is not None else Decimal('0')

    @classmethod
    def open_balance(cls, party, brand, amount, date=None, user=None,
                     description='Opening balance') -> LedgerEntry:
        """
        Post the pre-system balance as the first entry of a stream.

        Positive amount = the party owes (debit), negative = credit.
        The effective date may be backdated; ordering stays by insertion.
        Only the party's total_dues moves; the other summary totals
        count documents, not carried-over balances.

        Raises:
            LedgerError('STREAM_NOT_EMPTY'): Stream already has entries
            LedgerError('INVALID_AMOUNT'): Zero or malformed amount
        """
        party = resolve(Party, party)
        brand = validate_brand(brand)
        if isinstance(amount, (bool, float)):
            raise LedgerError('INVALID_AMOUNT', field='amount', value=amount)
        try:
            signed = Decimal(str(amount))
        except InvalidOperation:
            raise LedgerError('INVALID_AMOUNT', field='amount', value=amount) from None
        value = to_money(abs(signed), 'amount', allow_zero=False)
        if signed < 0:
            debit, credit = Decimal('0'), value
        else:
            debit, credit = value, Decimal('0')

        with transaction.atomic():
            stream = cls._lock_stream(party, brand)
            if stream.sequence:
                raise LedgerError(
                    'STREAM_NOT_EMPTY',
                    party_id=party.pk,
                    brand=brand,
                    entries=stream.sequence,
                )
            entry = cls.append(
                party, brand, EntryKind.OPENING,
                debit=debit, credit=credit,
                description=description, date=date, user=user,
            )
            apply_summary(party.pk)
        return entry

    @classmethod
    def entries(cls, party, brand=None):
        """Entries of a party in insertion order (per brand)."""
        party = resolve(Party, party)
        qs = LedgerEntry.objects.filter(party=party)
        if brand is not None:
            qs = qs.filter(brand=validate_brand(brand))
        return qs.order_by('brand', 'sequence')

    @classmethod
    def verify(cls, party, brand) -> list[int]:
        """
        Replay a stream and return the sequences whose balance breaks
        balance == previous - credit + debit. Empty list = consistent.
        """
        broken = []
        running = Decimal('0')
        for entry in cls.entries(party, brand).iterator():
            running = running - entry.credit + entry.debit
            if entry.balance != running:
                broken.append(entry.sequence)
                running = entry.balance
        return broken

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _lock_stream(cls, party, brand) -> LedgerStream:
        """Get or create the stream row, locked until commit."""
        stream, _ = LedgerStream.objects.select_for_update().get_or_create(
            party=party,
            brand=brand,
        )
        return stream

    @classmethod
    def _append_once(cls, party, brand, kind, debit, credit, reference,
                     reference_no, description, date, user) -> LedgerEntry:
        stream = cls._lock_stream(party, brand)
        seen = stream.sequence
        balance = stream.balance - credit + debit

        advanced = LedgerStream.objects.filter(pk=stream.pk, sequence=seen).update(
            sequence=seen + 1,
            balance=balance,
            updated_at=timezone.now(),
        )
        if not advanced:
            raise _StaleStream

        entry = LedgerEntry.objects.create(
            stream=stream,
            party=party,
            brand=brand,
            sequence=seen + 1,
            kind=kind,
            debit=debit,
            credit=credit,
            balance=balance,
            reference=reference,
            reference_no=reference_no,
            description=description,
            date=date or timezone.localdate(),
            user=user,
        )
        logger.info(
            "ledger.append",
            extra={
                "party_id": party.pk,
                "brand": brand,
                "kind": kind,
                "sequence": entry.sequence,
                "debit": str(debit),
                "credit": str(credit),
                "balance": str(balance),
            },
        )
        return entry
