"""
Ledgerman configuration.

Usage in settings.py:
    LEDGERMAN = {
        "PRICE_RESOLVER": "ledgerman.adapters.pricing.ProductPriceResolver",
        "APPEND_MAX_RETRIES": 3,
        "BRAND_PREFIXES": {"green_tel": "GT", "green_star": "GS"},
        "REPAIR_HIGH_COST": "350.00",
        "REPAIR_LOW_COST": "120.00",
    }
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.conf import settings


DEFAULT_BRAND_PREFIXES = {
    'green_tel': 'GT',
    'green_star': 'GS',
    'ecommerce': 'EC',
}

DEFAULT_ROLE_CAPABILITIES = {
    'admin': ['*'],
    'manager': [
        'inventory.view', 'inventory.edit',
        'sales.view', 'sales.edit', 'sales.delete',
        'customers.view', 'customers.edit',
        'purchase.view', 'purchase.edit', 'purchase.delete',
        'replacement.view', 'replacement.edit', 'replacement.triage',
        'ledger.view', 'ledger.adjust',
    ],
    'staff': [
        'inventory.view', 'sales.view', 'sales.edit',
        'customers.view', 'customers.edit', 'purchase.view',
    ],
    'sales': ['sales.view', 'sales.edit', 'customers.view', 'customers.edit'],
    'dealer': ['ledger.view'],
    'customer': ['ecommerce.view'],
}


@dataclass
class LedgermanSettings:
    """Ledgerman configuration settings."""

    # Unit price lookup used by claim triage (dotted path)
    PRICE_RESOLVER: str = 'ledgerman.adapters.pricing.ProductPriceResolver'

    # Compare-and-swap attempts per ledger append before giving up
    APPEND_MAX_RETRIES: int = 3

    # Document number prefix per brand
    BRAND_PREFIXES: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_BRAND_PREFIXES))

    # Factory repair cost per unit (recorded on the claim, not posted)
    REPAIR_HIGH_COST: Decimal = Decimal('0')
    REPAIR_LOW_COST: Decimal = Decimal('0')

    # role -> capabilities ('*' grants everything)
    ROLE_CAPABILITIES: dict[str, list[str]] = field(
        default_factory=lambda: dict(DEFAULT_ROLE_CAPABILITIES)
    )

    def __post_init__(self):
        self.REPAIR_HIGH_COST = Decimal(str(self.REPAIR_HIGH_COST))
        self.REPAIR_LOW_COST = Decimal(str(self.REPAIR_LOW_COST))
        self.BRAND_PREFIXES = {**DEFAULT_BRAND_PREFIXES, **self.BRAND_PREFIXES}


def get_ledgerman_settings() -> LedgermanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "LEDGERMAN", {})
    return LedgermanSettings(**{
        k: v for k, v in user_settings.items()
        if k in LedgermanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_ledgerman_settings(), name)


ledgerman_settings = _LazySettings()
