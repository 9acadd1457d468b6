"""
musicbridge: resilient Spotify access for a cloud music player.

Example:
    from musicbridge import MusicPlayerState, SpotifySession

    state = MusicPlayerState(SpotifySession.from_config())
    track = state.get_current_track()
"""

from musicbridge.enums import LaunchState, PlayerType, TrackStatus
from musicbridge.player_state import MusicPlayerState
from musicbridge.result import Result
from musicbridge.spotify import CredentialStore, SpotifySession

__version__ = "0.1.0"

__all__ = [
    "CredentialStore",
    "LaunchState",
    "MusicPlayerState",
    "PlayerType",
    "Result",
    "SpotifySession",
    "TrackStatus",
]
