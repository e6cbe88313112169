"""
Identity Resolution

Answers one question: is there an identity the remote store can act for?

DESIGN DECISION: resolvers never raise. Any failure to reach the auth
mechanism means "no identity", so falling back to offline mode is never
blocked by an auth check.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from google.oauth2.service_account import Credentials

from finance_tracker.audit import get_logger
from finance_tracker.config import get_settings
from finance_tracker.models.transaction import Identity


logger = get_logger(__name__)


class IdentityResolver(ABC):
    """Source of the current identity, if any."""

    @abstractmethod
    async def current_identity(self) -> Optional[Identity]:
        """Return the current identity, or None. Must not raise."""
        pass


class StaticIdentityResolver(IdentityResolver):
    """Always resolves to the identity it was built with (or to None)."""

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity

    async def current_identity(self) -> Optional[Identity]:
        return self._identity


class ServiceAccountIdentityResolver(IdentityResolver):
    """
    Resolves the identity from Google service-account credentials.

    The service account email is the owner id written to every remote
    row. The credentials file is read once and the result is cached.
    """

    def __init__(self, credentials_path: Optional[str] = None):
        self._credentials_path = credentials_path
        self._identity: Optional[Identity] = None

    def _load(self) -> Identity:
        path = self._credentials_path or get_settings().google_sheets.credentials_path
        credentials = Credentials.from_service_account_file(path)
        email = credentials.service_account_email
        return Identity(id=email, email=email)

    async def current_identity(self) -> Optional[Identity]:
        if self._identity is None:
            try:
                self._identity = await asyncio.to_thread(self._load)
            except Exception as e:
                logger.warning("identity_unavailable", error=str(e))
                return None
        return self._identity

    def reset(self) -> None:
        self._identity = None
