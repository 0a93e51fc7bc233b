"""
Ledgerman Pricing Adapter — unit prices for replacement credit.

This adapter loads the configured PriceResolver from settings.

Usage:
    from ledgerman.adapters import get_price_resolver

    resolver = get_price_resolver()
    quote = resolver.unit_price(product, dealer, "green_tel")

Settings:
    LEDGERMAN = {
        "PRICE_RESOLVER": "ledgerman.adapters.pricing.ProductPriceResolver",
    }
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from ledgerman.conf import ledgerman_settings
from ledgerman.protocols.pricing import PriceQuote, PriceResolver

logger = logging.getLogger(__name__)


class ProductPriceResolver:
    """
    Default resolver: the product's own price columns.

    dealer_price when set, else sales_price, else 0.
    """

    def unit_price(self, product, dealer, brand) -> PriceQuote:
        for source in ("dealer_price", "sales_price"):
            price = getattr(product, source) or Decimal("0")
            if price > 0:
                return PriceQuote(product_id=product.pk, unit_price=price, source=source)
        return PriceQuote(product_id=product.pk, unit_price=Decimal("0"), source="none")


# Cached resolver instance
_lock = threading.Lock()
_price_resolver: PriceResolver | None = None


def get_price_resolver() -> PriceResolver:
    """
    Return the configured price resolver.

    Raises:
        ImproperlyConfigured: If PRICE_RESOLVER is empty, fails to import,
            or does not implement PriceResolver
    """
    global _price_resolver

    if _price_resolver is None:
        with _lock:
            if _price_resolver is None:  # double-checked
                resolver_path = ledgerman_settings.PRICE_RESOLVER

                if not resolver_path:
                    raise ImproperlyConfigured(
                        "LEDGERMAN['PRICE_RESOLVER'] must be configured. "
                        "Example: 'ledgerman.adapters.pricing.ProductPriceResolver'"
                    )

                try:
                    resolver_class = import_string(resolver_path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import price resolver '{resolver_path}': {e}"
                    ) from e

                resolver = resolver_class()
                if not isinstance(resolver, PriceResolver):
                    raise ImproperlyConfigured(
                        f"'{resolver_path}' does not implement PriceResolver"
                    )
                _price_resolver = resolver
                logger.debug("Loaded price resolver: %s", resolver_path)

    return _price_resolver


def reset_price_resolver() -> None:
    """Reset the cached resolver. Useful for testing."""
    global _price_resolver
    _price_resolver = None
