"""
Device and player-context reads.

Both are cached briefly: the device list for ``devices_ttl`` and the player
context for ``player_context_ttl`` (15 seconds by default), since they
change continuously but are rate-limited to poll.
"""

import logging
from typing import List, Optional

from musicbridge.models import PlayerContext, PlayerDevice
from musicbridge.result import Result
from musicbridge.spotify.cache import DEVICES_KEY, PLAYER_CONTEXT_KEY
from musicbridge.spotify.session import SpotifySession
from .base import carry_over, fetch_payload

logger = logging.getLogger(__name__)

DEVICES_PATH = "/v1/me/player/devices"
PLAYER_PATH = "/v1/me/player"


class DeviceService:
    """Lists Spotify devices and reads the player snapshot."""

    def __init__(self, session: SpotifySession):
        self._session = session

    @property
    def _cache(self):
        return self._session.cache

    def fetch_devices(self, clear_cache: bool = False) -> Result[List[PlayerDevice]]:
        """
        List available playback devices.

        Args:
            clear_cache: Drop the cached list and ask Spotify again. Used
                right after a player was launched.

        Returns:
            ``Found(devices)`` with at least one device, ``NotAvailable`` when
            none is registered or there is no session.
        """
        if clear_cache:
            self._cache.invalidate(DEVICES_KEY)

        if not self._session.is_connected:
            return Result.not_available("not connected")

        cached = self._cache.get(DEVICES_KEY)
        if cached:
            return Result.found([PlayerDevice.from_dict(d) for d in cached])

        payload = fetch_payload(self._session, DEVICES_PATH, required_key="devices")
        if not payload.is_found:
            return carry_over(payload)

        devices = [
            PlayerDevice.from_spotify(d)
            for d in payload.value["devices"]
            if isinstance(d, dict) and d.get("id")
        ]
        if not devices:
            return Result.not_available("no devices")

        self._cache.set(
            DEVICES_KEY,
            [d.to_dict() for d in devices],
            self._session.cache_settings.devices_ttl,
        )
        logger.debug(f"Found {len(devices)} Spotify devices")
        return Result.found(devices)

    def fetch_player_context(
        self, clear_cache: bool = False
    ) -> Result[PlayerContext]:
        """Current play/pause/device/item snapshot."""
        if clear_cache:
            self._cache.invalidate(PLAYER_CONTEXT_KEY)

        cached = self._cache.get(PLAYER_CONTEXT_KEY)
        if cached:
            return Result.found(PlayerContext.from_dict(cached))

        payload = fetch_payload(self._session, PLAYER_PATH, required_key="item")
        if not payload.is_found:
            return carry_over(payload)

        context = PlayerContext.from_spotify(payload.value)
        if context.device:
            self._cache.set(
                PLAYER_CONTEXT_KEY,
                context.to_dict(),
                self._session.cache_settings.player_context_ttl,
            )
        return Result.found(context)

    def is_web_running(self) -> bool:
        """True when at least one Spotify device is registered."""
        return self.fetch_devices().is_found

    @staticmethod
    def get_active_device(devices: List[PlayerDevice]) -> Optional[PlayerDevice]:
        """The active device, else the first one listed."""
        if not devices:
            return None
        for device in devices:
            if device.is_active:
                return device
        return devices[0]
