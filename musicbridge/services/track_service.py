"""
Track, artist, history and recommendation reads.

Artists are cached individually under ``artist_<id>`` so batch and single
lookups share entries. The current track is never cached.
"""

import logging
from typing import Any, Dict, List, Optional

from musicbridge.desktop import DesktopPlayer, parse_window_title
from musicbridge.enums import PlayerType, TrackStatus
from musicbridge.models import Artist, Track
from musicbridge.result import Result
from musicbridge.schemas import RecommendationRequest
from musicbridge.spotify.cache import PLAYER_CONTEXT_KEY, artist_key
from musicbridge.spotify.http_client import RemoteResponse
from musicbridge.spotify.session import SpotifySession
from musicbridge.spotify.url_parser import parse_spotify_id, parse_spotify_ids
from musicbridge.utils import highest_frequency_genre
from .base import batched, carry_over, fetch_payload, unique

logger = logging.getLogger(__name__)

CURRENTLY_PLAYING_PATH = "/v1/me/player/currently-playing"
RECENTLY_PLAYED_PATH = "/v1/me/player/recently-played"
REPEAT_PATH = "/v1/me/player/repeat"
TRACKS_PATH = "/v1/tracks"
ARTISTS_PATH = "/v1/artists"
AUDIO_FEATURES_PATH = "/v1/audio-features"
SEARCH_PATH = "/v1/search"
RECOMMENDATIONS_PATH = "/v1/recommendations"

TRACKS_BATCH_SIZE = 50
ARTISTS_BATCH_SIZE = 50
AUDIO_FEATURES_BATCH_SIZE = 100


class TrackService:
    """Reads tracks and artists from the Web API."""

    def __init__(self, session: SpotifySession):
        self._session = session

    @property
    def _cache(self):
        return self._session.cache

    # =========================================================================
    # Player state
    # =========================================================================

    def fetch_current_track(self) -> Result[Track]:
        """
        The track in the Spotify player and whether it is playing.

        A 204 (nothing loaded) is ``NotAvailable``.
        """
        payload = fetch_payload(
            self._session, CURRENTLY_PLAYING_PATH, required_key="item"
        )
        if not payload.is_found:
            return carry_over(payload)

        data = payload.value
        track = Track.from_spotify(data["item"], PlayerType.WEB_SPOTIFY)
        track.progress_ms = data.get("progress_ms") or 0
        track.http_status = 200
        if track.is_advertisement or data.get("currently_playing_type") == "ad":
            track.state = TrackStatus.ADVERTISEMENT
        elif data.get("is_playing"):
            track.state = TrackStatus.PLAYING
        else:
            track.state = TrackStatus.PAUSED
        return Result.found(track)

    def fetch_recently_played(self, limit: int = 50) -> Result[List[Track]]:
        params = {"limit": limit} if limit else None
        payload = fetch_payload(
            self._session, RECENTLY_PLAYED_PATH, params=params, required_key="items"
        )
        if not payload.is_found:
            return carry_over(payload)

        tracks = [
            Track.from_spotify(item["track"])
            for item in payload.value["items"]
            if isinstance(item, dict) and item.get("track")
        ]
        return Result.found(tracks)

    def update_repeat_mode(self, repeat_on: bool) -> Result[RemoteResponse]:
        """Repeat the current track (``on``) or turn repeat off."""
        state = "track" if repeat_on else "off"
        result = self._session.put(REPEAT_PATH, params={"state": state})
        self._cache.invalidate(PLAYER_CONTEXT_KEY)
        if not result.is_found:
            logger.warning(f"Could not set repeat to {state}: {result.reason}")
        return result

    # =========================================================================
    # Tracks
    # =========================================================================

    def fetch_track(
        self,
        track_id: str,
        include_artist_data: bool = False,
        include_audio_features: bool = False,
        include_genre: bool = False,
    ) -> Result[Track]:
        """Single track by ID or URI, optionally enriched."""
        track_id = parse_spotify_id(track_id)
        if not track_id:
            return Result.not_available("no track id")

        payload = fetch_payload(
            self._session, f"{TRACKS_PATH}/{track_id}", required_key="id"
        )
        if not payload.is_found:
            return carry_over(payload)

        track = Track.from_spotify(payload.value)
        track.http_status = 200
        self._enrich(
            [track], include_artist_data, include_audio_features, include_genre
        )
        return Result.found(track)

    def fetch_tracks(
        self,
        track_ids: List[str],
        include_artist_data: bool = False,
        include_audio_features: bool = False,
        include_genre: bool = False,
    ) -> Result[List[Track]]:
        """Several tracks by ID or URI, in batches of 50."""
        ids = unique(parse_spotify_ids(track_ids))
        if not ids:
            return Result.not_available("no track ids")

        tracks: List[Track] = []
        failure: Optional[Result] = None
        for batch in batched(ids, TRACKS_BATCH_SIZE):
            payload = fetch_payload(
                self._session,
                TRACKS_PATH,
                params={"ids": ",".join(batch)},
                required_key="tracks",
            )
            if not payload.is_found:
                failure = failure or payload
                continue
            tracks.extend(
                Track.from_spotify(t) for t in payload.value["tracks"] if t
            )

        if not tracks:
            return carry_over(failure) if failure else Result.not_available()

        self._enrich(
            tracks, include_artist_data, include_audio_features, include_genre
        )
        return Result.found(tracks)

    def _enrich(
        self,
        tracks: List[Track],
        include_artist_data: bool,
        include_audio_features: bool,
        include_genre: bool,
    ) -> None:
        """Attach full artist objects, genres and audio features in place."""
        if include_artist_data or include_genre:
            artist_ids = unique([a for t in tracks for a in t.artist_ids()])
            artists = self.fetch_artists(artist_ids).value_or([])
            by_id = {a.id: a for a in artists}
            for track in tracks:
                full = [by_id[a] for a in track.artist_ids() if a in by_id]
                if full:
                    track.artists = full
                if include_genre and not track.genre and track.artists:
                    track.genre = highest_frequency_genre(track.artists[0].genres)

        if include_audio_features:
            features = self.fetch_audio_features([t.id for t in tracks]).value_or({})
            for track in tracks:
                if track.id in features:
                    track.features = features[track.id]

    def fetch_audio_features(
        self, track_ids: List[str]
    ) -> Result[Dict[str, Dict[str, Any]]]:
        """Audio features keyed by track ID, in batches of 100."""
        ids = unique(parse_spotify_ids(track_ids))
        if not ids:
            return Result.not_available("no track ids")

        features: Dict[str, Dict[str, Any]] = {}
        failure: Optional[Result] = None
        for batch in batched(ids, AUDIO_FEATURES_BATCH_SIZE):
            payload = fetch_payload(
                self._session,
                AUDIO_FEATURES_PATH,
                params={"ids": ",".join(batch)},
                required_key="audio_features",
            )
            if not payload.is_found:
                failure = failure or payload
                continue
            for feature in payload.value["audio_features"]:
                if feature and feature.get("id"):
                    features[feature["id"]] = feature

        if not features:
            return carry_over(failure) if failure else Result.not_available()
        return Result.found(features)

    # =========================================================================
    # Artists
    # =========================================================================

    def fetch_artist(self, artist_id: str) -> Result[Artist]:
        artist_id = parse_spotify_id(artist_id)
        if not artist_id:
            return Result.not_available("no artist id")

        cached = self._cache.get(artist_key(artist_id))
        if cached:
            return Result.found(Artist.from_dict(cached))

        payload = fetch_payload(
            self._session, f"{ARTISTS_PATH}/{artist_id}", required_key="id"
        )
        if not payload.is_found:
            return carry_over(payload)

        artist = Artist.from_spotify(payload.value)
        self._cache_artist(artist)
        return Result.found(artist)

    def fetch_artists(self, artist_ids: List[str]) -> Result[List[Artist]]:
        """
        Several artists by ID or URI.

        Cached artists are served from the cache; the rest are requested in
        batches of 50 (Spotify's limit) and cached one by one. The result
        follows the order of the de-duplicated input.
        """
        ids = unique(parse_spotify_ids(artist_ids))
        if not ids:
            return Result.not_available("no artist ids")

        found: Dict[str, Artist] = {}
        missing = []
        for artist_id in ids:
            cached = self._cache.get(artist_key(artist_id))
            if cached:
                found[artist_id] = Artist.from_dict(cached)
            else:
                missing.append(artist_id)

        failure: Optional[Result] = None
        for batch in batched(missing, ARTISTS_BATCH_SIZE):
            payload = fetch_payload(
                self._session,
                ARTISTS_PATH,
                params={"ids": ",".join(batch)},
                required_key="artists",
            )
            if not payload.is_found:
                failure = failure or payload
                continue
            for data in payload.value["artists"]:
                if not data or not data.get("id"):
                    continue
                artist = Artist.from_spotify(data)
                found[artist.id] = artist
                self._cache_artist(artist)

        if not found:
            return carry_over(failure) if failure else Result.not_available()
        logger.debug(
            f"Resolved {len(found)}/{len(ids)} artists "
            f"({len(ids) - len(missing)} from cache)"
        )
        return Result.found([found[i] for i in ids if i in found])

    def _cache_artist(self, artist: Artist) -> None:
        self._cache.set(
            artist_key(artist.id),
            artist.to_dict(),
            self._session.cache_settings.artist_ttl,
        )

    # =========================================================================
    # Search and recommendations
    # =========================================================================

    def search_track(self, artist: str, name: str) -> Result[Track]:
        """Best match for an artist and song name."""
        params = {
            "q": f"artist:{artist} track:{name}",
            "type": "track",
            "limit": 2,
            "offset": 0,
        }
        payload = fetch_payload(
            self._session, SEARCH_PATH, params=params, required_key="tracks"
        )
        if not payload.is_found:
            return carry_over(payload)

        items = payload.value["tracks"].get("items") or []
        if not items:
            return Result.not_available("no search results")
        return Result.found(Track.from_spotify(items[0]))

    def fetch_desktop_track(self, desktop: DesktopPlayer) -> Result[Track]:
        """
        Identify the desktop player's track from its window title.

        Used when the cloud player reports no current track.
        """
        parsed = parse_window_title(desktop.window_title())
        if not parsed:
            return Result.not_available("desktop player shows no track")

        artist, song = parsed
        result = self.search_track(artist, song)
        if not result.is_found:
            return result

        track = result.value
        track.state = TrackStatus.PLAYING
        track.player_type = PlayerType.WINDOWS_SPOTIFY_DESKTOP
        return Result.found(track)

    def fetch_recommendations(
        self, request: Optional[RecommendationRequest] = None
    ) -> Result[List[Track]]:
        request = request or RecommendationRequest()
        payload = fetch_payload(
            self._session,
            RECOMMENDATIONS_PATH,
            params=request.to_query_params(),
            required_key="tracks",
        )
        if not payload.is_found:
            return carry_over(payload)
        return Result.found(
            [Track.from_spotify(t) for t in payload.value["tracks"] if t]
        )
