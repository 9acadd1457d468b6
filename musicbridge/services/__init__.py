"""
Service layer over a ``SpotifySession``.

Usage:
    from musicbridge.services import DeviceService, TrackService, PlaybackService

    devices = DeviceService(session).fetch_devices()
    launch = PlaybackService(session).launch_and_play(track_id="4uLU6hMCjMI75M1A2tKUQC")
"""

from .device_service import DeviceService
from .playback_service import (
    LIKED_SONGS_PLAYLIST_NAME,
    PlaybackLaunch,
    PlaybackService,
)
from .track_service import TrackService

__all__ = [
    "DeviceService",
    "TrackService",
    "PlaybackService",
    "PlaybackLaunch",
    "LIKED_SONGS_PLAYLIST_NAME",
]
