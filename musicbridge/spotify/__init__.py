"""
Spotify Web API access layer.

Components:
    - CredentialStore: the single mutable holder of access/refresh tokens
    - SpotifyAuthManager: refresh-token grant against the accounts service
    - SpotifyHTTPClient: requests wrapper tagging responses OK/EXPIRED/ERROR
    - TTLCache / RedisTTLCache: keyed cache with per-entry expiry
    - SpotifySession: wires the above and runs the refresh-and-retry protocol

Usage:
    from musicbridge.spotify import SpotifySession

    session = SpotifySession.from_config()
    result = session.get("/v1/me/player/devices")
"""

from .auth import SpotifyAuthManager, TokenInfo
from .cache import RedisTTLCache, TTLCache
from .credentials import Credential, CredentialStore, SpotifyCredentials
from .exceptions import (
    SpotifyAuthError,
    SpotifyError,
    SpotifyTokenError,
    SpotifyTokenExpiredError,
)
from .http_client import RemoteResponse, SpotifyHTTPClient
from .session import SpotifySession

__all__ = [
    "Credential",
    "CredentialStore",
    "SpotifyCredentials",
    "SpotifyAuthManager",
    "TokenInfo",
    "TTLCache",
    "RedisTTLCache",
    "RemoteResponse",
    "SpotifyHTTPClient",
    "SpotifySession",
    "SpotifyError",
    "SpotifyAuthError",
    "SpotifyTokenError",
    "SpotifyTokenExpiredError",
]
