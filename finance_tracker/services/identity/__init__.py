"""Identity resolution package."""

from finance_tracker.services.identity.resolver import (
    IdentityResolver,
    ServiceAccountIdentityResolver,
    StaticIdentityResolver,
)

__all__ = [
    "IdentityResolver",
    "ServiceAccountIdentityResolver",
    "StaticIdentityResolver",
]
