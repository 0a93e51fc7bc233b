"""
Ledgerman Protocols.

Defines interfaces for host application integration.
"""

from ledgerman.protocols.pricing import PriceQuote, PriceResolver

__all__ = [
    "PriceQuote",
    "PriceResolver",
]
