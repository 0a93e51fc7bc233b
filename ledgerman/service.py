"""
Books Service — The single public interface for all ledger operations.

Usage:
    from ledgerman import books, LedgerError

    invoice = books.sell(customer, 'green_tel', [
        {'product': phone, 'qty': 4, 'price': Decimal('1200')},
    ], paid_amount=Decimal('2000'))

    claim = books.create_claim(dealer, 'green_tel', [
        {'product': phone, 'claimed_qty': 5},
    ])
    books.triage(claim, [{'product': phone, 'good_qty': 3, 'repairable_qty': 2}])
    books.latest_balance(dealer, 'green_tel')
"""

from ledgerman.services.claims import ReplacementClaims
from ledgerman.services.ledger import FinancialLedger
from ledgerman.services.reconciliation import Reconciliation
from ledgerman.services.stock import StockLedger


class Books(StockLedger, FinancialLedger, ReplacementClaims, Reconciliation):
    """
    Single interface for all stock, ledger and claim operations.

    Parameter convention: (party_or_product, brand, ...)

    IMPORTANT: All state-changing methods use atomic transactions
    with appropriate locking. See each method's docstring.
    """
