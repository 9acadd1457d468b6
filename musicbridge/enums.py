"""
Enums for track states, players, remote response tags and playback launch
states.

Single source of truth for string constants used across models, services,
and the remote client.
"""

from enum import StrEnum


class TrackStatus(StrEnum):
    """Playback state of a track."""
    NOT_ASSIGNED = "NotAssigned"
    PLAYING = "Playing"
    PAUSED = "Paused"
    ADVERTISEMENT = "Advertisement"


class PlayerType(StrEnum):
    """Where a track was observed."""
    NOT_ASSIGNED = "NotAssigned"
    WEB_SPOTIFY = "WebSpotify"
    MAC_SPOTIFY_DESKTOP = "MacSpotifyDesktop"
    WINDOWS_SPOTIFY_DESKTOP = "WindowsSpotifyDesktop"
    MAC_ITUNES_DESKTOP = "MacItunesDesktop"


class StatusTag(StrEnum):
    """Classification of a remote response."""
    OK = "OK"
    EXPIRED = "EXPIRED"
    ERROR = "ERROR"


class ResultStatus(StrEnum):
    """Outcome of a remote-backed operation."""
    FOUND = "found"
    NOT_AVAILABLE = "not_available"
    FAILED = "failed"


class LaunchState(StrEnum):
    """States of the playback-launch state machine."""
    RESOLVING_DEVICE = "resolving_device"
    NO_DEVICE_FOUND = "no_device_found"
    WEB_PLAYER_LAUNCHING = "web_player_launching"
    AWAITING_DEVICE_REGISTRATION = "awaiting_device_registration"
    AWAITING_PLAYBACK = "awaiting_playback"
    PLAYING = "playing"
    PLAYBACK_NOT_CONFIRMED = "playback_not_confirmed"

    @property
    def is_terminal(self) -> bool:
        return self in (LaunchState.PLAYING, LaunchState.PLAYBACK_NOT_CONFIRMED)
