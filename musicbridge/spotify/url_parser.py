"""
Spotify URL and URI helpers.

Converts between bare IDs, app URIs (``spotify:track:<id>``) and web URLs
(``https://open.spotify.com/track/<id>``) for tracks, albums, playlists,
artists and users.
"""

import re
import logging
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

WEB_PLAYER_URL = "https://open.spotify.com"

_RESOURCE_TYPES = ("track", "album", "playlist", "artist", "user", "episode", "show")

_URL_PATTERN = re.compile(
    r"(?:https?://)?open\.spotify\.com/(?:intl-[a-z]{2}/)?"
    r"(?:user/[^/]+/)?([a-z]+)/([a-zA-Z0-9]+)(?:\?.*)?$"
)


def parse_spotify_id(value: str) -> str:
    """
    Extract the bare ID from a URI, URL or ID.

    Supports these formats:
        - spotify:track:2j5hsQvApottzvTn4pFJWF
        - spotify:user:bob:playlist:37i9dQZF1DXcBWIGoYBM5M
        - https://open.spotify.com/track/2j5hsQvApottzvTn4pFJWF?si=abc
        - 2j5hsQvApottzvTn4pFJWF  (bare ID)

    Returns:
        The ID, or an empty string for empty input. Unrecognized input is
        returned stripped.
    """
    if not value or not isinstance(value, str):
        return ""

    cleaned = value.strip()
    if cleaned.startswith("spotify:"):
        return cleaned.rsplit(":", 1)[-1]

    match = _URL_PATTERN.match(cleaned)
    if match:
        return match.group(2)

    return cleaned


def parse_spotify_ids(values: Iterable[str]) -> List[str]:
    """Bare IDs for each value, skipping empties."""
    ids = []
    for value in values or []:
        spotify_id = parse_spotify_id(value)
        if spotify_id:
            ids.append(spotify_id)
    return ids


def uri_type(value: str) -> Optional[str]:
    """Resource type of a Spotify URI (``track``, ``playlist``...), if any."""
    if not value or not value.startswith("spotify:"):
        return None
    parts = value.split(":")
    if len(parts) >= 3 and parts[-2] in _RESOURCE_TYPES:
        return parts[-2]
    return None


def build_uri(resource_type: str, value: str) -> str:
    """``spotify:<type>:<id>`` for a URI, URL or bare ID."""
    if value and value.startswith("spotify:") and uri_type(value) == resource_type:
        return value
    return f"spotify:{resource_type}:{parse_spotify_id(value)}"


def track_uri(value: str) -> str:
    return build_uri("track", value)


def user_uri(user_id: str) -> str:
    return build_uri("user", user_id)


def playlist_context_uri(playlist_id: str, user_id: Optional[str] = None) -> str:
    """
    Context URI for a playlist.

    Uses the user-scoped form ``spotify:user:<user>:playlist:<id>`` when the
    owner is known.
    """
    bare_id = parse_spotify_id(playlist_id)
    if user_id:
        return f"{user_uri(user_id)}:playlist:{bare_id}"
    return f"spotify:playlist:{bare_id}"


def web_player_url(resource_type: Optional[str] = None, value: str = "") -> str:
    """Web player URL for a resource, or the browse page."""
    if not resource_type or not value:
        return f"{WEB_PLAYER_URL}/browse"
    return f"{WEB_PLAYER_URL}/{resource_type}/{parse_spotify_id(value)}"
