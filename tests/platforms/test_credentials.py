"""Tests for the TikTok credential store."""

import json
import os
import sys
from urllib.parse import parse_qs

import httpx
import pytest

from tiktok_automator.platforms import CredentialError, CredentialStore, TokenData
from tiktok_automator.platforms.credentials import TOKEN_URL


class TokenEndpoint:
    """Mock /oauth/token/ endpoint recording submitted forms."""

    def __init__(self, status=200, body=None):
        self.status = status
        self.body = body if body is not None else {
            "access_token": "access-2",
            "refresh_token": "refresh-2",
            "expires_in": 86400,
            "refresh_expires_in": 31536000,
            "open_id": "open-1",
            "scope": "video.publish",
            "token_type": "Bearer",
        }
        self.forms: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        assert str(request.url) == TOKEN_URL
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        self.forms.append({k: v[0] for k, v in parse_qs(request.content.decode()).items()})
        return httpx.Response(self.status, json=self.body)


class TestTokenData:
    """Tests for TokenData."""

    def test_from_response_computes_expiry(self):
        """Test relative expiry seconds become absolute timestamps."""
        token = TokenData.from_response({"access_token": "a", "expires_in": 3600, "refresh_token": "r"})

        assert not token.is_expired()
        assert token.refresh_expires_at is None
        assert token.can_refresh

    def test_expiry_buffer(self, token_factory):
        """Test a token expiring within five minutes counts as expired."""
        assert token_factory(expires_in=240).is_expired()
        assert not token_factory(expires_in=600).is_expired()

    def test_cannot_refresh_without_refresh_token(self, token_factory):
        """Test an empty refresh token cannot be used."""
        assert not token_factory(refresh_token="").can_refresh


class TestPersistence:
    """Tests for loading and saving tokens."""

    def test_round_trip_through_file(self, token_file, token_factory):
        """Test a persisted token is read back by a new store."""
        token = token_factory()
        CredentialStore(token_file).persist(token)

        assert CredentialStore(token_file).get() == token

    def test_no_file(self, token_file):
        """Test a store without a file has no token."""
        assert CredentialStore(token_file).get() is None

    def test_corrupt_file(self, token_file):
        """Test an unreadable token file raises CredentialError."""
        token_file.parent.mkdir(parents=True)
        token_file.write_text("{broken", encoding="utf-8")

        with pytest.raises(CredentialError, match="Corrupt token file"):
            CredentialStore(token_file).get()

    def test_no_temp_file_left(self, token_file, token_factory):
        """Test the write goes through a temp file that is renamed away."""
        CredentialStore(token_file).persist(token_factory())

        assert [p.name for p in token_file.parent.iterdir()] == ["tokens.json"]

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_owner_only_permissions(self, token_file, token_factory):
        """Test the token file is readable by the owner only."""
        CredentialStore(token_file).persist(token_factory())

        assert os.stat(token_file).st_mode & 0o777 == 0o600


class TestRefresh:
    """Tests for token refresh and code exchange."""

    @pytest.mark.asyncio
    async def test_valid_token_used_as_is(self, store_factory, token_factory):
        """Test a fresh token is returned without calling TikTok."""
        endpoint = TokenEndpoint()
        store = store_factory(endpoint, token=token_factory())

        assert await store.valid_access_token() == "access-1"
        assert endpoint.forms == []

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self, store_factory, token_factory, token_file):
        """Test an expiring token is refreshed and the new one persisted."""
        endpoint = TokenEndpoint()
        store = store_factory(endpoint, token=token_factory(expires_in=60))

        assert await store.valid_access_token() == "access-2"

        assert endpoint.forms == [{
            "client_key": "key",
            "client_secret": "secret",
            "grant_type": "refresh_token",
            "refresh_token": "refresh-1",
        }]
        saved = json.loads(token_file.read_text(encoding="utf-8"))
        assert saved["access_token"] == "access-2"
        assert saved["refresh_token"] == "refresh-2"

    @pytest.mark.asyncio
    async def test_no_tokens(self, store_factory):
        """Test asking for a token with nothing stored raises."""
        store = store_factory(TokenEndpoint())

        with pytest.raises(CredentialError, match="No TikTok tokens"):
            await store.valid_access_token()

    @pytest.mark.asyncio
    async def test_refresh_rejected(self, store_factory, token_factory):
        """Test TikTok's error description is surfaced."""
        endpoint = TokenEndpoint(status=400, body={"error": "invalid_grant", "error_description": "Refresh token is invalid"})
        store = store_factory(endpoint, token=token_factory(expires_in=0))

        with pytest.raises(CredentialError, match="Refresh token is invalid"):
            await store.refresh()

    @pytest.mark.asyncio
    async def test_refresh_without_app_credentials(self, store_factory, token_factory):
        """Test refresh needs the client key and secret."""
        store = store_factory(TokenEndpoint(), token=token_factory(expires_in=0), client_key="")

        with pytest.raises(CredentialError, match="client key/secret"):
            await store.refresh()

    @pytest.mark.asyncio
    async def test_network_error(self, store_factory, token_factory):
        """Test transport failures become CredentialError."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = store_factory(handler, token=token_factory(expires_in=0))

        with pytest.raises(CredentialError, match="Token request failed"):
            await store.refresh()

    @pytest.mark.asyncio
    async def test_exchange_code(self, store_factory, token_file):
        """Test an authorization code is exchanged and saved."""
        endpoint = TokenEndpoint()
        store = store_factory(endpoint)

        token = await store.exchange_code("auth-code", "https://example.com/callback")

        assert token.access_token == "access-2"
        assert endpoint.forms[0]["grant_type"] == "authorization_code"
        assert endpoint.forms[0]["code"] == "auth-code"
        assert endpoint.forms[0]["redirect_uri"] == "https://example.com/callback"
        assert CredentialStore(token_file).get() == token
