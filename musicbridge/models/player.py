from typing import Dict, Any, Optional
from dataclasses import dataclass

from musicbridge.enums import PlayerType, TrackStatus
from .track import Track


@dataclass
class PlayerDevice:
    """
    A playback endpoint registered with Spotify.

    Only valid as of the moment it was fetched; the device list can be empty
    for a few seconds after a player is opened.
    """

    id: str
    name: str = ""
    is_active: bool = False
    volume_percent: Optional[int] = None
    type: str = ""
    is_private_session: bool = False
    is_restricted: bool = False

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> "PlayerDevice":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            is_active=bool(data.get("is_active", False)),
            volume_percent=data.get("volume_percent"),
            type=data.get("type") or "",
            is_private_session=bool(data.get("is_private_session", False)),
            is_restricted=bool(data.get("is_restricted", False)),
        )

    # The cached form is the Web API shape, so both readers share one parser.
    from_dict = from_spotify

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_active": self.is_active,
            "volume_percent": self.volume_percent,
            "type": self.type,
            "is_private_session": self.is_private_session,
            "is_restricted": self.is_restricted,
        }


@dataclass
class PlayerContext:
    """Snapshot of the Spotify player: device, item and play state."""

    device: Optional[PlayerDevice] = None
    item: Optional[Track] = None
    is_playing: bool = False
    progress_ms: int = 0
    timestamp: Optional[int] = None
    context_uri: Optional[str] = None
    repeat_state: str = "off"
    shuffle_state: bool = False
    currently_playing_type: str = ""

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> "PlayerContext":
        """Normalize a ``GET /v1/me/player`` payload."""
        is_playing = bool(data.get("is_playing"))
        progress_ms = data.get("progress_ms") or 0

        item = None
        if data.get("item"):
            item = Track.from_spotify(data["item"], PlayerType.WEB_SPOTIFY)
            item.progress_ms = progress_ms
            if item.is_advertisement:
                item.state = TrackStatus.ADVERTISEMENT
            else:
                item.state = TrackStatus.PLAYING if is_playing else TrackStatus.PAUSED

        device = None
        if data.get("device"):
            device = PlayerDevice.from_spotify(data["device"])

        return cls(
            device=device,
            item=item,
            is_playing=is_playing,
            progress_ms=progress_ms,
            timestamp=data.get("timestamp"),
            context_uri=(data.get("context") or {}).get("uri"),
            repeat_state=data.get("repeat_state") or "off",
            shuffle_state=bool(data.get("shuffle_state", False)),
            currently_playing_type=data.get("currently_playing_type") or "",
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerContext":
        return cls(
            device=PlayerDevice.from_dict(data["device"]) if data.get("device") else None,
            item=Track.from_dict(data["item"]) if data.get("item") else None,
            is_playing=data.get("is_playing", False),
            progress_ms=data.get("progress_ms", 0),
            timestamp=data.get("timestamp"),
            context_uri=data.get("context_uri"),
            repeat_state=data.get("repeat_state", "off"),
            shuffle_state=data.get("shuffle_state", False),
            currently_playing_type=data.get("currently_playing_type", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device": self.device.to_dict() if self.device else None,
            "item": self.item.to_dict() if self.item else None,
            "is_playing": self.is_playing,
            "progress_ms": self.progress_ms,
            "timestamp": self.timestamp,
            "context_uri": self.context_uri,
            "repeat_state": self.repeat_state,
            "shuffle_state": self.shuffle_state,
            "currently_playing_type": self.currently_playing_type,
        }
