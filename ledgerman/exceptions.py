"""
Exceptions for Ledgerman.

All errors are LedgerError with a structured code for programmatic handling.
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Base for structured errors: a code, a human message and context data.

    Subclasses provide ``_default_messages`` keyed by code.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, data={self.data!r})"


class LedgerError(BaseError):
    """
    Structured exception for stock, ledger and claim operations.

    Usage:
        try:
            books.decrease(product, 'good', 10)
        except LedgerError as e:
            if e.code == 'INSUFFICIENT_STOCK':
                print(f"Only {e.available} available")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'NOT_FOUND': 'Record not found',
        'INSUFFICIENT_STOCK': 'Insufficient stock in bucket',
        'INVALID_TRANSITION': 'Transition not allowed from current status',
        'REPAIR_QUANTITY_EXCEEDED': 'Repaired quantity exceeds repairable quantity',
        'INVALID_QUANTITY': 'Invalid quantity (must be positive)',
        'INVALID_AMOUNT': 'Invalid amount',
        'INVALID_BUCKET': 'Invalid stock bucket',
        'INVALID_BRAND': 'Unknown brand',
        'INVALID_KIND': 'Invalid ledger entry kind',
        'INVALID_ITEMS': 'Invalid line items',
        'INVALID_PARTY': 'Party cannot take part in this operation',
        'TRIAGE_EXCEEDS_CLAIM': 'Triage quantities exceed claimed quantity',
        'OVERPAYMENT': 'Payment exceeds outstanding dues',
        'STREAM_NOT_EMPTY': 'Opening balance must be the first ledger entry',
        'CONCURRENT_MODIFICATION': 'Concurrent modification detected',
        'PERMISSION_DENIED': 'Role lacks the required capability',
    }

    VALIDATION_CODES = frozenset({
        'INVALID_QUANTITY',
        'INVALID_AMOUNT',
        'INVALID_BUCKET',
        'INVALID_BRAND',
        'INVALID_KIND',
        'INVALID_ITEMS',
        'INVALID_PARTY',
        'TRIAGE_EXCEEDS_CLAIM',
        'OVERPAYMENT',
        'STREAM_NOT_EMPTY',
    })

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self):
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)

    @property
    def is_transient(self) -> bool:
        """Retrying the same call later may succeed."""
        return self.code == 'CONCURRENT_MODIFICATION'

    @property
    def is_validation(self) -> bool:
        """Malformed input rather than a business-state conflict."""
        return self.code in self.VALIDATION_CODES

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }
