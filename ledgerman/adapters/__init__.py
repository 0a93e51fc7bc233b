"""
Ledgerman Adapters.

Implementations of protocols for the host application.
"""

from ledgerman.adapters.pricing import (
    ProductPriceResolver,
    get_price_resolver,
    reset_price_resolver,
)

__all__ = [
    "ProductPriceResolver",
    "get_price_resolver",
    "reset_price_resolver",
]
