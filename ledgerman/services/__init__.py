"""
Ledger services — modular organization of ledger operations.

    from ledgerman.services import StockLedger, FinancialLedger, ReplacementClaims, Reconciliation
"""

from ledgerman.services.claims import ReplacementClaims
from ledgerman.services.ledger import FinancialLedger
from ledgerman.services.reconciliation import Reconciliation
from ledgerman.services.stock import BucketState, StockLedger

__all__ = [
    'BucketState',
    'StockLedger',
    'FinancialLedger',
    'ReplacementClaims',
    'Reconciliation',
]
