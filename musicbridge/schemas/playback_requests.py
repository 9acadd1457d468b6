"""
Pydantic schemas for playback commands and recommendation queries.

``PlaybackOptions`` is the closed set of fields a play command accepts;
unknown fields are rejected instead of being silently forwarded.
"""

from typing import Annotated, Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from musicbridge.spotify.url_parser import parse_spotify_ids, track_uri

MAX_SEEDS = 5


class PlaybackOptions(BaseModel):
    """Options for ``PUT /v1/me/player/play``."""

    device_id: Optional[str] = None
    track_ids: List[str] = Field(default_factory=list)
    offset_position: Annotated[int, Field(ge=0)] = 0
    context_uri: Optional[str] = None

    class Config:
        extra = "forbid"

    @field_validator("track_ids")
    @classmethod
    def drop_empty_track_ids(cls, v: List[str]) -> List[str]:
        return [t.strip() for t in v if t and t.strip()]

    @field_validator("device_id", "context_uri")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    def track_uris(self) -> List[str]:
        return [track_uri(t) for t in self.track_ids]

    def query_params(self) -> Optional[Dict[str, str]]:
        """Query string scoping the command to a device, if one is set."""
        if self.device_id:
            return {"device_id": self.device_id}
        return None

    def request_body(self) -> Optional[Dict[str, Any]]:
        """
        JSON body for the play command.

        With a context, the first track (or ``offset_position``) selects the
        starting item. Without one, the tracks are played directly. No
        context and no tracks resumes whatever is loaded.
        """
        uris = self.track_uris()
        if self.context_uri:
            body: Dict[str, Any] = {"context_uri": self.context_uri}
            if uris:
                body["offset"] = {"uri": uris[0]}
            else:
                body["offset"] = {"position": self.offset_position}
            return body
        if uris:
            return {"uris": uris}
        return None


class RecommendationRequest(BaseModel):
    """Seeded query for ``GET /v1/recommendations``."""

    seed_tracks: List[str] = Field(default_factory=list)
    seed_artists: List[str] = Field(default_factory=list)
    seed_genres: List[str] = Field(default_factory=list)
    limit: Annotated[int, Field(ge=1, le=100)] = 40
    market: Optional[str] = None
    min_popularity: Annotated[int, Field(ge=0, le=100)] = 20
    target_popularity: Annotated[int, Field(ge=0, le=100)] = 90
    features: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        extra = "ignore"

    @field_validator("seed_tracks", "seed_artists")
    @classmethod
    def normalize_seed_ids(cls, v: List[str]) -> List[str]:
        """Accept URIs or URLs; Spotify takes at most five of each seed."""
        return parse_spotify_ids(v)[:MAX_SEEDS]

    @field_validator("seed_genres")
    @classmethod
    def limit_genres(cls, v: List[str]) -> List[str]:
        return [g.strip() for g in v if g and g.strip()][:MAX_SEEDS]

    def to_query_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "limit": self.limit,
            "min_popularity": self.min_popularity,
            "target_popularity": self.target_popularity,
        }
        if self.seed_genres:
            params["seed_genres"] = ",".join(self.seed_genres)
        if self.seed_tracks:
            params["seed_tracks"] = ",".join(self.seed_tracks)
        if self.seed_artists:
            params["seed_artists"] = ",".join(self.seed_artists)
        if self.market:
            params["market"] = self.market
        params.update(self.features)
        return params
