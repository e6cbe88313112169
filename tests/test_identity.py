"""Tests for identity resolution."""

from unittest.mock import MagicMock, patch

from finance_tracker.models import Identity
from finance_tracker.services.identity import (
    ServiceAccountIdentityResolver,
    StaticIdentityResolver,
)
from tests.factories import run


CREDENTIALS_LOADER = (
    "finance_tracker.services.identity.resolver.Credentials.from_service_account_file"
)


class TestStaticIdentityResolver:

    def test_returns_given_identity(self):
        identity = Identity(id="owner@example.com")
        assert run(StaticIdentityResolver(identity).current_identity()) == identity

    def test_defaults_to_no_identity(self):
        assert run(StaticIdentityResolver().current_identity()) is None


class TestServiceAccountIdentityResolver:

    def test_missing_credentials_file_means_no_identity(self, tmp_path):
        resolver = ServiceAccountIdentityResolver(str(tmp_path / "missing.json"))
        assert run(resolver.current_identity()) is None

    def test_service_account_email_is_identity(self):
        credentials = MagicMock(service_account_email="tracker@project.iam.gserviceaccount.com")
        with patch(CREDENTIALS_LOADER, return_value=credentials) as loader:
            resolver = ServiceAccountIdentityResolver("creds.json")
            first = run(resolver.current_identity())
            second = run(resolver.current_identity())

        assert first.id == "tracker@project.iam.gserviceaccount.com"
        assert first.email == first.id
        assert second == first
        loader.assert_called_once_with("creds.json")

    def test_reset_reloads_credentials(self):
        credentials = MagicMock(service_account_email="tracker@project.iam.gserviceaccount.com")
        with patch(CREDENTIALS_LOADER, return_value=credentials) as loader:
            resolver = ServiceAccountIdentityResolver("creds.json")
            run(resolver.current_identity())
            resolver.reset()
            run(resolver.current_identity())

        assert loader.call_count == 2

    def test_failure_is_not_cached(self):
        credentials = MagicMock(service_account_email="tracker@project.iam.gserviceaccount.com")
        with patch(CREDENTIALS_LOADER, side_effect=[ValueError("bad key"), credentials]):
            resolver = ServiceAccountIdentityResolver("creds.json")
            assert run(resolver.current_identity()) is None
            assert run(resolver.current_identity()) is not None
