"""
Django Ledgerman — stock buckets, running-balance ledgers and replacement claims.

Usage:
    from ledgerman import books, LedgerError

    books.increase(phone, 'good', 10)
    books.sell(customer, 'green_tel', [{'product': phone, 'qty': 4, 'price': 1200}])
    books.latest_balance(customer, 'green_tel')
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'books':
        from ledgerman.service import Books
        return Books
    elif name == 'LedgerError':
        from ledgerman.exceptions import LedgerError
        return LedgerError
    elif name == 'Product':
        from ledgerman.models.product import Product
        return Product
    elif name == 'Party':
        from ledgerman.models.party import Party
        return Party
    elif name == 'LedgerEntry':
        from ledgerman.models.ledger import LedgerEntry
        return LedgerEntry
    elif name == 'ReplacementClaim':
        from ledgerman.models.claim import ReplacementClaim
        return ReplacementClaim
    elif name == 'StockBucket':
        from ledgerman.models.enums import StockBucket
        return StockBucket
    elif name == 'ClaimStatus':
        from ledgerman.models.enums import ClaimStatus
        return ClaimStatus
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'books',
    'LedgerError',
    'Product',
    'Party',
    'LedgerEntry',
    'ReplacementClaim',
    'StockBucket',
    'ClaimStatus',
]

__version__ = '0.1.0'
