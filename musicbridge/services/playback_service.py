"""
Playback commands and the playback-launch state machine.

Launching a track has to cope with Spotify's device registry lagging behind
reality: a freshly opened web player can take seconds to show up, and a play
command sent before that silently does nothing. The launch therefore runs as
a chain of scheduled steps:

    RESOLVING_DEVICE ──(no delay)──> _start: discover devices
      ├─ device found ──────────────────────────────┐
      └─ NO_DEVICE_FOUND → WEB_PLAYER_LAUNCHING      │
           → AWAITING_DEVICE_REGISTRATION ──(delay)──┤
                                                     ▼
                       _attempt: play on device → AWAITING_PLAYBACK
                                                     │ (confirm delay)
                       _confirm: current track Playing? → PLAYING
                                 budget left? → (retry delay) → _attempt
                                 otherwise → PLAYBACK_NOT_CONFIRMED

The remaining-attempts counter is passed by value into each step. Running
out of attempts is not an error: the track may still start after we stop
watching.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from musicbridge.enums import LaunchState
from musicbridge.models import PlayerDevice
from musicbridge.result import Result
from musicbridge.schemas import PlaybackOptions
from musicbridge.spotify.cache import PLAYER_CONTEXT_KEY
from musicbridge.spotify.http_client import RemoteResponse
from musicbridge.spotify.session import SpotifySession
from musicbridge.spotify.url_parser import playlist_context_uri, web_player_url
from musicbridge.utils import launch_web_url
from .device_service import DeviceService
from .track_service import TrackService

logger = logging.getLogger(__name__)

PLAY_PATH = "/v1/me/player/play"

# Virtual playlist with no playlist endpoint; it cannot be used as a context.
LIKED_SONGS_PLAYLIST_NAME = "Liked Songs"


@dataclass
class PlaybackLaunch:
    """Handle for one launch; its state advances as scheduled steps run."""

    track_id: str = ""
    playlist_id: str = ""
    state: LaunchState = LaunchState.RESOLVING_DEVICE
    device_id: Optional[str] = None
    launched_web_player: bool = False
    play_commands: int = 0
    history: List[LaunchState] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.history.append(self.state)

    def transition(self, state: LaunchState) -> None:
        logger.debug(f"Playback launch {self.state} -> {state}")
        self.state = state
        self.history.append(state)

    @property
    def done(self) -> bool:
        return self.state.is_terminal


class PlaybackService:
    """Issues play commands and drives playback launches."""

    def __init__(
        self,
        session: SpotifySession,
        device_service: Optional[DeviceService] = None,
        track_service: Optional[TrackService] = None,
        browser: Callable[[str], bool] = launch_web_url,
    ):
        self._session = session
        self._devices = device_service or DeviceService(session)
        self._tracks = track_service or TrackService(session)
        self._browser = browser

    @property
    def _settings(self):
        return self._session.playback_settings

    @property
    def _scheduler(self):
        return self._session.scheduler

    # =========================================================================
    # Play commands
    # =========================================================================

    def build_options(
        self,
        track_id: str = "",
        playlist_id: str = "",
        device_id: Optional[str] = None,
    ) -> PlaybackOptions:
        """Options for playing a track, optionally inside a playlist."""
        if playlist_id == LIKED_SONGS_PLAYLIST_NAME:
            playlist_id = ""
        context_uri = None
        if playlist_id:
            context_uri = playlist_context_uri(playlist_id, self._session.user_id)
        return PlaybackOptions(
            device_id=device_id,
            track_ids=[track_id] if track_id else [],
            context_uri=context_uri,
        )

    def play(self, options: PlaybackOptions) -> Result[RemoteResponse]:
        """Send ``PUT /v1/me/player/play``."""
        result = self._session.put(
            PLAY_PATH,
            json=options.request_body(),
            params=options.query_params(),
        )
        self._session.cache.invalidate(PLAYER_CONTEXT_KEY)
        if not result.is_found:
            logger.warning(f"Play command failed: {result.reason}")
        return result

    def play_track_from_playlist(
        self,
        track_id: str,
        playlist_id: str = "",
        device_id: Optional[str] = None,
    ) -> Result[RemoteResponse]:
        """
        Play a track, within a playlist when one is given.

        Without ``device_id`` the active (or first) known device is used.
        """
        if device_id is None:
            device = self._devices.get_active_device(
                self._devices.fetch_devices().value_or([])
            )
            device_id = device.id if device else None
        return self.play(self.build_options(track_id, playlist_id, device_id))

    def launch_web_player(
        self,
        album_id: str = "",
        track_id: str = "",
        playlist_id: str = "",
    ) -> bool:
        """Open the web player on an album, track or playlist, else browse."""
        if playlist_id == LIKED_SONGS_PLAYLIST_NAME:
            playlist_id = ""
        if album_id:
            url = web_player_url("album", album_id)
        elif track_id:
            url = web_player_url("track", track_id)
        elif playlist_id:
            url = web_player_url("playlist", playlist_id)
        else:
            url = web_player_url()
        logger.info(f"Launching Spotify web player: {url}")
        return self._browser(url)

    # =========================================================================
    # Launch state machine
    # =========================================================================

    def launch_and_play(
        self, track_id: str = "", playlist_id: str = ""
    ) -> PlaybackLaunch:
        """
        Start playback, opening the web player if no device is registered.

        Returns immediately without touching the network; device discovery
        is the first scheduled step. The returned handle's ``state`` reaches
        ``PLAYING`` or ``PLAYBACK_NOT_CONFIRMED`` as scheduled steps run.
        """
        launch = PlaybackLaunch(track_id=track_id, playlist_id=playlist_id)
        self._scheduler.call_later(0, self._start, launch)
        return launch

    def _start(self, launch: PlaybackLaunch) -> None:
        """Play on a registered device, or open the web player and wait."""
        track_id = launch.track_id
        playlist_id = launch.playlist_id

        try:
            device = self._resolve_device()
        except Exception as e:
            logger.warning(f"Device discovery failed: {e}", exc_info=True)
            device = None
        if device:
            launch.device_id = device.id
            self._attempt(launch, self._settings.device_retries)
            return

        launch.transition(LaunchState.NO_DEVICE_FOUND)
        launch.transition(LaunchState.WEB_PLAYER_LAUNCHING)
        launch.launched_web_player = True
        self.launch_web_player(track_id=track_id, playlist_id=playlist_id)
        launch.transition(LaunchState.AWAITING_DEVICE_REGISTRATION)
        self._scheduler.call_later(
            self._settings.web_launch_delay,
            self._attempt,
            launch,
            self._settings.web_launch_retries,
        )

    def _resolve_device(self) -> Optional[PlayerDevice]:
        # Devices are always read fresh here.
        devices = self._devices.fetch_devices(clear_cache=True)
        return self._devices.get_active_device(devices.value_or([]))

    def _attempt(self, launch: PlaybackLaunch, attempts_remaining: int) -> None:
        """Issue the play command, then schedule a confirmation check."""
        try:
            if launch.device_id is None:
                device = self._resolve_device()
                if device:
                    launch.device_id = device.id
                else:
                    logger.info("Still no Spotify device registered")

            options = self.build_options(
                launch.track_id, launch.playlist_id, launch.device_id
            )
            launch.play_commands += 1
            self.play(options)
        except Exception as e:
            logger.warning(f"Playback attempt failed: {e}", exc_info=True)

        launch.transition(LaunchState.AWAITING_PLAYBACK)
        self._scheduler.call_later(
            self._settings.confirm_delay,
            self._confirm,
            launch,
            attempts_remaining,
        )

    def _confirm(self, launch: PlaybackLaunch, attempts_remaining: int) -> None:
        """Check that playback started; retry while the budget allows."""
        try:
            playing = self._tracks.fetch_current_track().value_or(None)
        except Exception as e:
            logger.warning(f"Playback confirmation failed: {e}", exc_info=True)
            playing = None

        if playing is not None and playing.is_playing:
            launch.transition(LaunchState.PLAYING)
            logger.info(f"Playback confirmed: {playing.name}")
            return

        if attempts_remaining <= 0:
            launch.transition(LaunchState.PLAYBACK_NOT_CONFIRMED)
            logger.info(
                f"Playback not confirmed after {launch.play_commands} play commands"
            )
            return

        logger.debug(
            f"Playback not started yet, {attempts_remaining} retries left"
        )
        self._scheduler.call_later(
            self._settings.retry_delay,
            self._attempt,
            launch,
            attempts_remaining - 1,
        )
