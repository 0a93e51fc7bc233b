"""
Ledgerman Models.

Core models for ledger and stock reconciliation:
- Product: Stock buckets (good, bad, damage, repair)
- StockMove: Immutable log of bucket changes
- Party: Customers, suppliers, employees + summary cache
- LedgerStream / LedgerEntry: Append-only running-balance ledger
- ReplacementClaim / ClaimItem: Dealer returned-goods workflow
- Invoice, Purchase, Payment: Business documents
- DocumentCounter: Per-brand document numbering
"""

from ledgerman.models.claim import ClaimItem, ReplacementClaim
from ledgerman.models.counter import DocumentCounter
from ledgerman.models.documents import Invoice, InvoiceItem, Payment, Purchase, PurchaseItem
from ledgerman.models.enums import (
    Brand,
    BrandScope,
    ClaimStatus,
    CustomerType,
    DocumentKind,
    EntryKind,
    PartyKind,
    PaymentKind,
    PaymentMethod,
    ProductType,
    StockBucket,
)
from ledgerman.models.ledger import LedgerEntry, LedgerStream
from ledgerman.models.move import StockMove
from ledgerman.models.party import Party
from ledgerman.models.product import Product

__all__ = [
    'Brand',
    'BrandScope',
    'ClaimStatus',
    'CustomerType',
    'DocumentKind',
    'EntryKind',
    'PartyKind',
    'PaymentKind',
    'PaymentMethod',
    'ProductType',
    'StockBucket',
    'Product',
    'StockMove',
    'Party',
    'LedgerStream',
    'LedgerEntry',
    'ReplacementClaim',
    'ClaimItem',
    'Invoice',
    'InvoiceItem',
    'Purchase',
    'PurchaseItem',
    'Payment',
    'DocumentCounter',
]
