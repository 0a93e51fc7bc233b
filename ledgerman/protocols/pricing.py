"""
Pricing Protocol — Interface for replacement credit prices.

Ledgerman defines this protocol; the host application (price lists,
dealer tiers, promotions) may implement it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ledgerman.models import Party, Product


@dataclass(frozen=True)
class PriceQuote:
    """Unit price for one product at triage time."""

    product_id: int
    unit_price: Decimal
    source: str  # "dealer_price", "sales_price", "override", ...


@runtime_checkable
class PriceResolver(Protocol):
    """
    Protocol for unit price lookup.

    Used by claim triage when a result carries no explicit unit_price.
    Implementations must not write to the database.
    """

    def unit_price(self, product: Product, dealer: Party, brand: str) -> PriceQuote:
        """
        Price credited per accepted unit.

        Args:
            product: Claimed product
            dealer: Dealer owning the claim
            brand: Brand of the claim

        Returns:
            PriceQuote with a non-negative unit_price
        """
        ...
