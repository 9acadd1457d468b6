"""
Spotify credentials management.

Holds the immutable application credentials used for token refresh and the
mutable per-process credential store that the HTTP client reads its bearer
token from.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpotifyCredentials:
    """
    Immutable container for Spotify application credentials.

    Attributes:
        client_id: The Spotify application client ID.
        client_secret: The Spotify application client secret.

    Example:
        credentials = SpotifyCredentials.from_config(Config)

        # Or create directly
        credentials = SpotifyCredentials(
            client_id='your_client_id',
            client_secret='your_client_secret',
        )
    """

    client_id: str
    client_secret: str

    def __post_init__(self):
        """Validate credentials on creation."""
        if not self.client_id:
            raise ValueError("client_id is required")
        if not self.client_secret:
            raise ValueError("client_secret is required")

    @classmethod
    def from_config(cls, config) -> 'SpotifyCredentials':
        """
        Create credentials from a config class or mapping.

        Args:
            config: A ``Config`` class (attribute access) or a dict.

        Raises:
            ValueError: If required values are missing.
        """
        if isinstance(config, dict):
            get = config.get
        else:
            def get(key, default=None):
                return getattr(config, key, default)
        return cls(
            client_id=get('SPOTIFY_CLIENT_ID') or '',
            client_secret=get('SPOTIFY_CLIENT_SECRET') or '',
        )


@dataclass(frozen=True)
class Credential:
    """Snapshot of the user's current tokens."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    user_id: Optional[str] = None


class CredentialStore:
    """
    In-memory holder of the single current ``Credential``.

    There is exactly one store per session. It does no network or disk
    access; only the refresh protocol and the token bootstrapper write to it.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        self._credential = Credential(
            access_token=access_token or None,
            refresh_token=refresh_token or None,
            user_id=user_id or None,
        )

    def get(self) -> Credential:
        """Return the current credential."""
        return self._credential

    def set_access_token(self, token: str) -> None:
        """Replace the access token, keeping refresh token and user id."""
        self._credential = replace(self._credential, access_token=token)
        logger.debug("Access token updated")

    def set_refresh_token(self, token: str) -> None:
        """Replace the refresh token (Spotify may rotate it on refresh)."""
        self._credential = replace(self._credential, refresh_token=token)

    def set_credential(
        self,
        access_token: Optional[str],
        refresh_token: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Seed the store with tokens acquired outside this library."""
        self._credential = Credential(
            access_token=access_token or None,
            refresh_token=refresh_token or None,
            user_id=user_id or None,
        )

    @property
    def has_access_token(self) -> bool:
        return bool(self._credential.access_token)

    @property
    def can_refresh(self) -> bool:
        return bool(self._credential.refresh_token)
