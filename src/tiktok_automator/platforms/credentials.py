"""TikTok OAuth credential store.

Tokens live in a JSON file owned by one CredentialStore instance, never in
module-level state. The store can exchange an authorization code, refresh
an expired access token and persist the result.
"""

import json
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

_logger = logging.getLogger("tiktok_api")

TOKEN_URL = "https://open.tiktokapis.com/v2/oauth/token/"

# Treat tokens as expired this long before their real expiry
EXPIRY_BUFFER = timedelta(minutes=5)


class CredentialError(Exception):
    """No usable TikTok credentials."""

    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenData(BaseModel):
    """OAuth token set as returned by TikTok (with absolute expiry times)."""

    access_token: str
    refresh_token: str = ""
    expires_at: datetime
    refresh_expires_at: Optional[datetime] = None
    open_id: str = ""
    scope: str = ""

    @classmethod
    def from_response(cls, data: dict) -> "TokenData":
        """Build from a /oauth/token/ response body."""
        now = _now()
        refresh_expires_in = data.get("refresh_expires_in")
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", ""),
            expires_at=now + timedelta(seconds=int(data.get("expires_in", 0))),
            refresh_expires_at=(
                now + timedelta(seconds=int(refresh_expires_in)) if refresh_expires_in else None
            ),
            open_id=data.get("open_id", ""),
            scope=data.get("scope", ""),
        )

    def is_expired(self, buffer: timedelta = EXPIRY_BUFFER) -> bool:
        return _now() >= self.expires_at - buffer

    @property
    def can_refresh(self) -> bool:
        if not self.refresh_token:
            return False
        return self.refresh_expires_at is None or _now() < self.refresh_expires_at


class CredentialStore:
    """Get, refresh and persist TikTok tokens."""

    def __init__(
        self,
        path: Path,
        client_key: str = "",
        client_secret: str = "",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize credential store.

        Args:
            path: JSON file holding the token set.
            client_key: TikTok app client key (needed for refresh/exchange).
            client_secret: TikTok app client secret.
            http_client: Pre-built client (tests pass one with a mock transport).
        """
        self.path = Path(path)
        self.client_key = client_key
        self.client_secret = client_secret
        self._http_client = http_client
        self._token: Optional[TokenData] = None

    def get(self) -> Optional[TokenData]:
        """Current token set, loaded from disk on first use.

        Returns:
            TokenData, or None if no tokens have been stored yet.

        Raises:
            CredentialError: If the token file exists but is corrupt.
        """
        if self._token is None and self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    self._token = TokenData.model_validate(json.load(f))
            except (json.JSONDecodeError, ValidationError) as e:
                raise CredentialError(f"Corrupt token file {self.path}: {e}") from e
            _logger.info("TikTok tokens loaded from file")
        return self._token

    def persist(self, token: TokenData) -> None:
        """Store ``token`` in memory and on disk (owner-only permissions)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(token.model_dump_json(indent=2))
        try:
            os.chmod(tmp_path, 0o600)
        except OSError:
            _logger.debug(f"Could not restrict permissions on {tmp_path}")
        os.replace(tmp_path, self.path)
        self._token = token
        _logger.info("TikTok tokens saved")

    async def refresh(self) -> TokenData:
        """Exchange the refresh token for a new token set and persist it.

        Raises:
            CredentialError: If there is nothing to refresh or TikTok refuses.
        """
        current = self.get()
        if current is None or not current.can_refresh:
            raise CredentialError("No valid refresh token, re-authorize the app")

        token = await self._request_token({
            "grant_type": "refresh_token",
            "refresh_token": current.refresh_token,
        })
        _logger.info("TikTok access token refreshed")
        return token

    async def exchange_code(self, code: str, redirect_uri: str) -> TokenData:
        """Exchange an OAuth authorization code for tokens and persist them."""
        token = await self._request_token({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        })
        _logger.info("TikTok authorization code exchanged")
        return token

    async def valid_access_token(self) -> str:
        """Access token that is not about to expire, refreshing if needed.

        Raises:
            CredentialError: If no token is stored or it cannot be refreshed.
        """
        token = self.get()
        if token is None:
            raise CredentialError(f"No TikTok tokens stored at {self.path}")
        if token.is_expired():
            _logger.warning("Access token is expired or about to expire, refreshing")
            token = await self.refresh()
        return token.access_token

    async def _request_token(self, grant: dict) -> TokenData:
        if not self.client_key or not self.client_secret:
            raise CredentialError("TikTok client key/secret not configured")

        form = {"client_key": self.client_key, "client_secret": self.client_secret, **grant}
        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        try:
            if self._http_client is not None:
                response = await self._http_client.post(TOKEN_URL, data=form, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=30.0) as client:
                    response = await client.post(TOKEN_URL, data=form, headers=headers)
        except httpx.HTTPError as e:
            raise CredentialError(f"Token request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200 or "access_token" not in body:
            message = body.get("error_description") or body.get("error") or f"HTTP {response.status_code}"
            raise CredentialError(f"TikTok token request rejected: {message}")

        token = TokenData.from_response(body)
        self.persist(token)
        return token
