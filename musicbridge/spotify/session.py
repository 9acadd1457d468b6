"""
Spotify session: the per-process context shared by all services.

A ``SpotifySession`` owns the single credential store, cache, HTTP client,
auth manager and scheduler, and runs the refresh-and-retry protocol around
every remote call:

    1. issue the request
    2. on EXPIRED, refresh the access token and issue the same request once
    3. a failed refresh or a second EXPIRED ends the call as ``Failed``

Construct one session at startup and pass it to the services.
"""

import logging
from typing import Any, Dict, Optional, Union

import redis

from musicbridge.config import CacheSettings, Config, PlaybackSettings
from musicbridge.enums import StatusTag
from musicbridge.result import Result
from musicbridge.scheduler import BackgroundTaskScheduler, Scheduler
from .auth import SpotifyAuthManager
from .cache import RedisTTLCache, TTLCache
from .credentials import CredentialStore, SpotifyCredentials
from .exceptions import SpotifyTokenError
from .http_client import RemoteResponse, SpotifyHTTPClient

logger = logging.getLogger(__name__)

Cache = Union[TTLCache, RedisTTLCache]


class SpotifySession:
    """
    Context object threaded through the services.

    Example:
        session = SpotifySession.from_config(Config)
        state = MusicPlayerState(session)
        devices = state.get_devices()
    """

    def __init__(
        self,
        store: CredentialStore,
        http_client: Optional[SpotifyHTTPClient] = None,
        auth_manager: Optional[SpotifyAuthManager] = None,
        cache: Optional[Cache] = None,
        scheduler: Optional[Scheduler] = None,
        cache_settings: Optional[CacheSettings] = None,
        playback_settings: Optional[PlaybackSettings] = None,
    ):
        self.store = store
        self.http = http_client or SpotifyHTTPClient(store)
        self.auth_manager = auth_manager
        self.cache = cache if cache is not None else TTLCache()
        self.scheduler = scheduler or BackgroundTaskScheduler()
        self.cache_settings = cache_settings or CacheSettings()
        self.playback_settings = playback_settings or PlaybackSettings()

    @classmethod
    def from_config(
        cls,
        config_class=Config,
        redis_client: Optional[redis.Redis] = None,
    ) -> "SpotifySession":
        """
        Build a fully wired session from a ``Config`` class.

        Token refresh is only possible when client id and secret are
        configured. A Redis cache is used when ``redis_client`` is given or
        ``REDIS_URL`` is set.
        """
        store = CredentialStore(
            access_token=config_class.SPOTIFY_ACCESS_TOKEN,
            refresh_token=config_class.SPOTIFY_REFRESH_TOKEN,
            user_id=config_class.SPOTIFY_USER_ID,
        )

        auth_manager = None
        try:
            credentials = SpotifyCredentials.from_config(config_class)
            auth_manager = SpotifyAuthManager(
                credentials, timeout=config_class.HTTP_TIMEOUT
            )
        except ValueError as e:
            logger.warning(f"Token refresh disabled: {e}")

        if redis_client is None and config_class.REDIS_URL:
            redis_client = redis.from_url(
                config_class.REDIS_URL, decode_responses=False
            )
        cache = RedisTTLCache(redis_client) if redis_client else TTLCache()

        http_client = SpotifyHTTPClient(
            store,
            timeout=config_class.HTTP_TIMEOUT,
            max_retries=config_class.HTTP_MAX_RETRIES,
        )
        return cls(
            store,
            http_client=http_client,
            auth_manager=auth_manager,
            cache=cache,
            cache_settings=CacheSettings.from_config(config_class),
            playback_settings=PlaybackSettings.from_config(config_class),
        )

    # =========================================================================
    # Credentials
    # =========================================================================

    @property
    def user_id(self) -> Optional[str]:
        return self.store.get().user_id

    @property
    def is_connected(self) -> bool:
        """True when a call can be authorized now or after a refresh."""
        return self.store.has_access_token or self.store.can_refresh

    def refresh_access_token(self) -> bool:
        """
        Run one token refresh.

        Returns:
            True if the store now holds a fresh access token.
        """
        if self.auth_manager is None:
            logger.error("Cannot refresh token: no client credentials configured")
            return False
        try:
            self.auth_manager.refresh(self.store)
            return True
        except SpotifyTokenError as e:
            logger.error(f"Token refresh failed: {e}")
            return False

    # =========================================================================
    # Refresh-and-retry protocol
    # =========================================================================

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict] = None,
        json: Any = None,
    ) -> Result[RemoteResponse]:
        """
        Issue an authorized request with at most one refresh.

        Returns:
            ``Found(response)`` for a 2xx, ``NotAvailable`` when there are no
            tokens at all, ``Failed(reason)`` otherwise.
        """
        if not self.is_connected:
            return Result.not_available("not connected")

        refreshed = False
        if not self.store.has_access_token:
            if not self.refresh_access_token():
                return Result.failed("token refresh failed")
            refreshed = True

        response = self.http.request(method, path, params=params, json=json)

        if response.status_tag == StatusTag.EXPIRED:
            if refreshed:
                return Result.failed(
                    "token expired after refresh", status_code=response.status_code
                )
            logger.info(f"Token expired on {method} {path}, refreshing")
            if not self.refresh_access_token():
                return Result.failed(
                    "token refresh failed", status_code=response.status_code
                )
            response = self.http.request(method, path, params=params, json=json)
            if response.status_tag == StatusTag.EXPIRED:
                logger.error(f"Token still expired after refresh on {method} {path}")
                return Result.failed(
                    "token expired after refresh", status_code=response.status_code
                )

        if response.status_tag == StatusTag.OK:
            return Result.found(response)
        if response.status_code == 0:
            return Result.failed("network error")
        return Result.failed(
            f"HTTP {response.status_code}", status_code=response.status_code
        )

    def get(self, path: str, params: Optional[Dict] = None) -> Result[RemoteResponse]:
        return self.request("GET", path, params=params)

    def put(
        self, path: str, json: Any = None, params: Optional[Dict] = None
    ) -> Result[RemoteResponse]:
        return self.request("PUT", path, params=params, json=json)

    def post(
        self, path: str, json: Any = None, params: Optional[Dict] = None
    ) -> Result[RemoteResponse]:
        return self.request("POST", path, params=params, json=json)

    def delete(
        self, path: str, json: Any = None, params: Optional[Dict] = None
    ) -> Result[RemoteResponse]:
        return self.request("DELETE", path, params=params, json=json)

    def close(self) -> None:
        """Release the HTTP session and stop pending scheduled work."""
        self.http.close()
        shutdown = getattr(self.scheduler, "shutdown", None)
        if callable(shutdown):
            shutdown()
