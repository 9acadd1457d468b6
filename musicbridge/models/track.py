from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
import logging

from musicbridge.enums import PlayerType, TrackStatus
from musicbridge.spotify.url_parser import parse_spotify_id

logger = logging.getLogger(__name__)

AD_URI_MARKER = "spotify:ad:"


@dataclass
class Artist:
    """A Spotify artist, optionally with genres from the full artist object."""

    id: str = ""
    uri: str = ""
    name: str = ""
    genres: List[str] = field(default_factory=list)
    popularity: Optional[int] = None
    image_url: Optional[str] = None

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> "Artist":
        images = data.get("images") or [{}]
        return cls(
            id=data.get("id") or "",
            uri=data.get("uri") or "",
            name=data.get("name") or "",
            genres=list(data.get("genres") or []),
            popularity=data.get("popularity"),
            image_url=images[0].get("url") if images else None,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Artist":
        return cls(
            id=data.get("id", ""),
            uri=data.get("uri", ""),
            name=data.get("name", ""),
            genres=list(data.get("genres") or []),
            popularity=data.get("popularity"),
            image_url=data.get("image_url"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "uri": self.uri,
            "name": self.name,
            "genres": list(self.genres),
            "popularity": self.popularity,
            "image_url": self.image_url,
        }


@dataclass
class Track:
    """
    A track normalized from any player.

    ``state`` is always a ``TrackStatus``; anything else is coerced to
    ``NOT_ASSIGNED``. A default ``Track()`` means "nothing available".
    """

    id: str = ""
    uri: str = ""
    name: str = ""
    artist: str = ""
    artists: List[Artist] = field(default_factory=list)
    album: str = ""
    duration_ms: int = 0
    progress_ms: int = 0
    state: TrackStatus = TrackStatus.NOT_ASSIGNED
    genre: str = ""
    features: Optional[Dict[str, Any]] = None
    popularity: Optional[int] = None
    explicit: bool = False
    type: str = ""
    player_type: PlayerType = PlayerType.NOT_ASSIGNED
    http_status: int = 0

    def __post_init__(self) -> None:
        try:
            self.state = TrackStatus(self.state)
        except ValueError:
            logger.debug(f"Unknown track state {self.state!r}, using NotAssigned")
            self.state = TrackStatus.NOT_ASSIGNED
        try:
            self.player_type = PlayerType(self.player_type)
        except ValueError:
            self.player_type = PlayerType.NOT_ASSIGNED

    @classmethod
    def from_spotify(
        cls,
        data: Dict[str, Any],
        player_type: PlayerType = PlayerType.WEB_SPOTIFY,
    ) -> "Track":
        """Normalize a Web API track object."""
        artists = [Artist.from_spotify(a) for a in data.get("artists") or []]
        uri = data.get("uri") or ""
        return cls(
            id=parse_spotify_id(data.get("id") or uri),
            uri=uri,
            name=data.get("name") or "",
            artist=", ".join(a.name for a in artists if a.name),
            artists=artists,
            album=(data.get("album") or {}).get("name") or "",
            duration_ms=data.get("duration_ms") or 0,
            popularity=data.get("popularity"),
            explicit=bool(data.get("explicit", False)),
            type="spotify",
            player_type=player_type,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        return cls(
            id=data.get("id", ""),
            uri=data.get("uri", ""),
            name=data.get("name", ""),
            artist=data.get("artist", ""),
            artists=[Artist.from_dict(a) for a in data.get("artists") or []],
            album=data.get("album", ""),
            duration_ms=data.get("duration_ms", 0),
            progress_ms=data.get("progress_ms", 0),
            state=data.get("state", TrackStatus.NOT_ASSIGNED),
            genre=data.get("genre", ""),
            features=data.get("features"),
            popularity=data.get("popularity"),
            explicit=data.get("explicit", False),
            type=data.get("type", ""),
            player_type=data.get("player_type", PlayerType.NOT_ASSIGNED),
            http_status=data.get("http_status", 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "uri": self.uri,
            "name": self.name,
            "artist": self.artist,
            "artists": [a.to_dict() for a in self.artists],
            "album": self.album,
            "duration_ms": self.duration_ms,
            "progress_ms": self.progress_ms,
            "state": str(self.state),
            "genre": self.genre,
            "features": self.features,
            "popularity": self.popularity,
            "explicit": self.explicit,
            "type": self.type,
            "player_type": str(self.player_type),
            "http_status": self.http_status,
        }

    @property
    def is_advertisement(self) -> bool:
        return AD_URI_MARKER in self.uri

    @property
    def is_playing(self) -> bool:
        return self.state == TrackStatus.PLAYING

    def artist_ids(self) -> List[str]:
        return [a.id for a in self.artists if a.id]
