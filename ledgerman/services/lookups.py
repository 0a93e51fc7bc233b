"""
Identity lookups shared by the services.

Operations accept model instances or primary keys; rows are always
re-read so a stale or deleted instance surfaces as NOT_FOUND.
"""

from decimal import Decimal, InvalidOperation

from ledgerman.exceptions import LedgerError
from ledgerman.models.enums import Brand
from ledgerman.models.party import Party

CENT = Decimal('0.01')


def pk_of(obj_or_pk):
    return getattr(obj_or_pk, 'pk', obj_or_pk)


def resolve(model, obj_or_pk, for_update: bool = False):
    """Fetch a row by instance or pk, optionally locking it."""
    pk = pk_of(obj_or_pk)
    qs = model.objects.select_for_update() if for_update else model.objects.all()
    try:
        return qs.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise LedgerError('NOT_FOUND', model=model.__name__, pk=pk) from None


def resolve_party(obj_or_pk, *kinds: str) -> Party:
    """Fetch a party and check it is one of the given kinds."""
    party = resolve(Party, obj_or_pk)
    if kinds and party.kind not in kinds:
        raise LedgerError(
            'INVALID_PARTY',
            party_id=party.pk,
            kind=party.kind,
            expected=list(kinds),
        )
    return party


def validate_brand(brand) -> str:
    try:
        return Brand(brand).value
    except ValueError:
        raise LedgerError('INVALID_BRAND', brand=brand) from None


def validate_quantity(qty, allow_zero: bool = False) -> int:
    """Quantities are whole units."""
    if isinstance(qty, bool) or not isinstance(qty, int):
        raise LedgerError('INVALID_QUANTITY', requested=qty)
    if qty < 0 or (qty == 0 and not allow_zero):
        raise LedgerError('INVALID_QUANTITY', requested=qty)
    return qty


def to_money(value, field: str = 'amount', allow_zero: bool = True) -> Decimal:
    """Parse a non-negative amount rounded to cents."""
    if isinstance(value, (bool, float)):
        raise LedgerError('INVALID_AMOUNT', field=field, value=value)
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise InvalidOperation
        amount = amount.quantize(CENT)
    except (InvalidOperation, TypeError, ValueError):
        raise LedgerError('INVALID_AMOUNT', field=field, value=value) from None
    if amount < 0 or (amount == 0 and not allow_zero):
        raise LedgerError('INVALID_AMOUNT', field=field, value=value)
    return amount
