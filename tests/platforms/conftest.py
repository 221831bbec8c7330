"""Fixtures for the TikTok platform tests."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from tiktok_automator.platforms import CredentialStore, TokenData


def make_token(expires_in: float = 3600, refresh_token: str = "refresh-1", access_token: str = "access-1") -> TokenData:
    now = datetime.now(timezone.utc)
    return TokenData(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=now + timedelta(seconds=expires_in),
        refresh_expires_at=now + timedelta(days=365),
        open_id="open-1",
        scope="user.info.basic,video.publish",
    )


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def token_file(temp_dir):
    return temp_dir / "secrets" / "tokens.json"


@pytest.fixture
def store_factory(token_file):
    """Build a CredentialStore routed through a mock transport handler."""
    def _make(handler, token=None, client_key="key", client_secret="secret"):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        store = CredentialStore(token_file, client_key, client_secret, http_client=client)
        if token is not None:
            store.persist(token)
        return store

    return _make
