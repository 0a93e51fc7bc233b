"""
Access policy — immutable role -> capability mapping.

Built once from LEDGERMAN['ROLE_CAPABILITIES'] and passed to the code that
checks permissions.

Usage:
    from ledgerman.policy import get_access_policy

    policy = get_access_policy()
    policy.require('manager', 'replacement.triage')
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from ledgerman.conf import ledgerman_settings
from ledgerman.exceptions import LedgerError

WILDCARD = '*'


@dataclass(frozen=True)
class AccessPolicy:
    """Capabilities granted to each role. '*' grants everything."""

    roles: Mapping[str, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> AccessPolicy:
        return cls(roles={
            role: frozenset(capabilities)
            for role, capabilities in mapping.items()
        })

    def capabilities(self, role: str) -> frozenset[str]:
        return self.roles.get(role, frozenset())

    def allows(self, role: str, capability: str) -> bool:
        granted = self.capabilities(role)
        return WILDCARD in granted or capability in granted

    def require(self, role: str, capability: str) -> None:
        """
        Raises:
            LedgerError('PERMISSION_DENIED'): role lacks the capability
        """
        if not self.allows(role, capability):
            raise LedgerError('PERMISSION_DENIED', role=role, capability=capability)


def get_access_policy() -> AccessPolicy:
    """Build the policy from settings."""
    return AccessPolicy.from_mapping(ledgerman_settings.ROLE_CAPABILITIES)
