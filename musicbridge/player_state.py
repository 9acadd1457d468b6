"""
Public facade.

``MusicPlayerState`` wires the services to one ``SpotifySession`` and turns
their ``Result`` values into plain domain values for callers: an empty list,
a default ``Track()``/``PlayerContext()``, ``None`` for a missing artist, or
``False`` for a command that did not go through. A default ``Track`` still
carries the HTTP status of the call that produced it in ``http_status``.
"""

import logging
from typing import List, Optional

from musicbridge.desktop import DesktopPlayer
from musicbridge.models import Artist, PlayerContext, PlayerDevice, Track
from musicbridge.schemas import RecommendationRequest
from musicbridge.services import (
    DeviceService,
    PlaybackLaunch,
    PlaybackService,
    TrackService,
)
from musicbridge.spotify.session import SpotifySession

logger = logging.getLogger(__name__)


class MusicPlayerState:
    """Query and control Spotify playback through one call surface."""

    def __init__(
        self,
        session: SpotifySession,
        desktop: Optional[DesktopPlayer] = None,
        playback_service: Optional[PlaybackService] = None,
    ):
        self.session = session
        self.desktop = desktop
        self.devices = DeviceService(session)
        self.tracks = TrackService(session)
        self.playback = playback_service or PlaybackService(
            session, device_service=self.devices, track_service=self.tracks
        )

    # =========================================================================
    # Devices and player
    # =========================================================================

    def get_devices(self, clear_cache: bool = False) -> List[PlayerDevice]:
        return self.devices.fetch_devices(clear_cache=clear_cache).value_or([])

    def get_player_context(self, clear_cache: bool = False) -> PlayerContext:
        result = self.devices.fetch_player_context(clear_cache=clear_cache)
        return result.value_or(PlayerContext())

    def is_spotify_web_running(self) -> bool:
        return self.devices.is_web_running()

    # =========================================================================
    # Tracks and artists
    # =========================================================================

    def get_current_track(self) -> Track:
        """
        The track in the Spotify player.

        Falls back to the desktop player's window title when the cloud
        player reports nothing and the desktop player is running.
        """
        result = self.tracks.fetch_current_track()
        if result.is_found:
            return result.value
        if result.is_failed:
            logger.warning(f"Could not read current track: {result.reason}")
        if self.is_desktop_running():
            return self.get_desktop_track_info()
        return Track(http_status=result.status_code)

    def get_recently_played(self, limit: int = 50) -> List[Track]:
        return self.tracks.fetch_recently_played(limit).value_or([])

    def get_track_by_id(
        self,
        track_id: str,
        include_artist_data: bool = False,
        include_audio_features: bool = False,
        include_genre: bool = False,
    ) -> Track:
        result = self.tracks.fetch_track(
            track_id, include_artist_data, include_audio_features, include_genre
        )
        return result.value_or(Track(http_status=result.status_code))

    def get_tracks(
        self,
        track_ids: List[str],
        include_artist_data: bool = False,
        include_audio_features: bool = False,
        include_genre: bool = False,
    ) -> List[Track]:
        result = self.tracks.fetch_tracks(
            track_ids, include_artist_data, include_audio_features, include_genre
        )
        return result.value_or([])

    def get_artist_by_id(self, artist_id: str) -> Optional[Artist]:
        return self.tracks.fetch_artist(artist_id).value_or(None)

    def get_artists_by_ids(self, artist_ids: List[str]) -> List[Artist]:
        return self.tracks.fetch_artists(artist_ids).value_or([])

    def get_recommendations(
        self, request: Optional[RecommendationRequest] = None
    ) -> List[Track]:
        return self.tracks.fetch_recommendations(request).value_or([])

    # =========================================================================
    # Commands
    # =========================================================================

    def update_repeat_mode(self, repeat_on: bool) -> bool:
        return self.tracks.update_repeat_mode(repeat_on).is_found

    def launch_and_play_track(
        self, track_id: str = "", playlist_id: str = ""
    ) -> PlaybackLaunch:
        return self.playback.launch_and_play(track_id, playlist_id)

    def play_track_from_playlist(
        self,
        track_id: str,
        playlist_id: str = "",
        device_id: Optional[str] = None,
    ) -> bool:
        result = self.playback.play_track_from_playlist(
            track_id, playlist_id, device_id
        )
        return result.is_found

    def launch_web_player(
        self, album_id: str = "", track_id: str = "", playlist_id: str = ""
    ) -> bool:
        return self.playback.launch_web_player(album_id, track_id, playlist_id)

    # =========================================================================
    # Desktop player
    # =========================================================================

    def is_desktop_running(self) -> bool:
        if self.desktop is None:
            return False
        return self.desktop.is_running()

    def get_desktop_track_info(self) -> Track:
        """Track shown in the desktop player's window title, if any."""
        if self.desktop is None:
            return Track()
        return self.tracks.fetch_desktop_track(self.desktop).value_or(Track())
