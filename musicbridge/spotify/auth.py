"""
Spotify token refresh.

Exchanges a stored refresh token for a new access token. Acquiring the first
token (the authorization-code exchange) is handled by the host application;
this module only keeps an already-granted session alive.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional

import requests

from .credentials import CredentialStore, SpotifyCredentials
from .exceptions import SpotifyTokenError, SpotifyTokenExpiredError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://accounts.spotify.com/api/token"


@dataclass
class TokenInfo:
    """Tokens returned by the refresh grant."""

    access_token: str
    token_type: str
    refresh_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenInfo":
        """
        Create TokenInfo from a token endpoint response.

        Raises:
            SpotifyTokenError: If required fields are missing.
        """
        if not isinstance(data, dict):
            raise SpotifyTokenError(
                f"Token data must be a dictionary, got {type(data)}"
            )

        required = ["access_token", "token_type"]
        missing = [k for k in required if k not in data]
        if missing:
            raise SpotifyTokenError(f"Token missing required fields: {missing}")

        return cls(
            access_token=data["access_token"],
            token_type=data["token_type"],
            refresh_token=data.get("refresh_token"),
        )


class SpotifyAuthManager:
    """
    Refreshes Spotify access tokens.

    Stateless regarding tokens: ``refresh_token`` operates on the refresh
    token passed to it, ``refresh`` reads from and writes back to a
    ``CredentialStore``.

    Example:
        auth_manager = SpotifyAuthManager(credentials)
        new_access_token = auth_manager.refresh(store)
    """

    def __init__(self, credentials: SpotifyCredentials, timeout: float = 10):
        self._credentials = credentials
        self._timeout = timeout

    def refresh_token(self, refresh_token: str) -> TokenInfo:
        """
        Exchange a refresh token for a new access token.

        Args:
            refresh_token: The long-lived refresh token.

        Returns:
            New TokenInfo. When Spotify does not rotate the refresh token,
            the original one is carried over.

        Raises:
            SpotifyTokenExpiredError: If Spotify rejects the refresh token
                itself (revoked or expired grant).
            SpotifyTokenError: If refresh fails for any other reason or no
                refresh token is given.
        """
        if not refresh_token:
            raise SpotifyTokenError(
                "Cannot refresh: no refresh_token available"
            )

        try:
            response = requests.post(
                TOKEN_URL,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": refresh_token,
                },
                auth=(
                    self._credentials.client_id,
                    self._credentials.client_secret,
                ),
                timeout=self._timeout,
            )

            if response.status_code != 200:
                try:
                    error_body = response.json()
                except ValueError:
                    error_body = {}
                error_msg = error_body.get("error_description", response.text)
                if error_body.get("error") == "invalid_grant":
                    raise SpotifyTokenExpiredError(
                        f"Refresh token rejected: {error_msg}"
                    )
                raise SpotifyTokenError(
                    f"Token refresh failed: {error_msg}"
                )

            new_token_data = response.json()
            if not new_token_data:
                raise SpotifyTokenError(
                    "No token returned from refresh"
                )

            if "refresh_token" not in new_token_data:
                new_token_data["refresh_token"] = refresh_token

            token_info = TokenInfo.from_dict(new_token_data)
            logger.info("Successfully refreshed token")
            return token_info

        except SpotifyTokenError:
            raise
        except Exception as e:
            logger.error(
                f"Token refresh failed: {e}", exc_info=True
            )
            raise SpotifyTokenError(
                f"Token refresh failed: {e}"
            )

    def refresh(self, store: CredentialStore) -> str:
        """
        Refresh the store's access token in place.

        Returns:
            The new access token.

        Raises:
            SpotifyTokenError: If the store has no refresh token or the
                exchange fails. The store is left untouched on failure.
        """
        token_info = self.refresh_token(store.get().refresh_token)
        store.set_access_token(token_info.access_token)
        if token_info.refresh_token != store.get().refresh_token:
            store.set_refresh_token(token_info.refresh_token)
        return token_info.access_token
