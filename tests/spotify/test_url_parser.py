"""Tests for Spotify URL and URI helpers."""

import pytest

from musicbridge.spotify.url_parser import (
    build_uri,
    parse_spotify_id,
    parse_spotify_ids,
    playlist_context_uri,
    track_uri,
    uri_type,
    user_uri,
    web_player_url,
)


class TestParseSpotifyId:
    """Tests for parse_spotify_id."""

    @pytest.mark.parametrize(
        "value",
        [
            "spotify:track:2j5hsQvApottzvTn4pFJWF",
            "https://open.spotify.com/track/2j5hsQvApottzvTn4pFJWF",
            "https://open.spotify.com/track/2j5hsQvApottzvTn4pFJWF?si=abc123",
            "https://open.spotify.com/intl-de/track/2j5hsQvApottzvTn4pFJWF",
            "open.spotify.com/track/2j5hsQvApottzvTn4pFJWF",
            "  2j5hsQvApottzvTn4pFJWF  ",
        ],
    )
    def test_formats(self, value):
        assert parse_spotify_id(value) == "2j5hsQvApottzvTn4pFJWF"

    def test_user_scoped_playlist_uri(self):
        uri = "spotify:user:bob:playlist:37i9dQZF1DXcBWIGoYBM5M"
        assert parse_spotify_id(uri) == "37i9dQZF1DXcBWIGoYBM5M"

    def test_user_scoped_playlist_url(self):
        url = "https://open.spotify.com/user/bob/playlist/37i9dQZF1DXcBWIGoYBM5M"
        assert parse_spotify_id(url) == "37i9dQZF1DXcBWIGoYBM5M"

    @pytest.mark.parametrize("value", ["", None])
    def test_empty(self, value):
        assert parse_spotify_id(value) == ""

    def test_parse_ids_skips_empty(self):
        assert parse_spotify_ids(["spotify:artist:a", "", "b"]) == ["a", "b"]


class TestUris:
    """Tests for URI construction."""

    def test_uri_type(self):
        assert uri_type("spotify:track:abc") == "track"
        assert uri_type("spotify:user:bob:playlist:p1") == "playlist"
        assert uri_type("abc") is None

    def test_track_uri_from_id(self):
        assert track_uri("abc") == "spotify:track:abc"

    def test_track_uri_passthrough(self):
        assert track_uri("spotify:track:abc") == "spotify:track:abc"

    def test_build_uri_from_url(self):
        assert build_uri("album", "https://open.spotify.com/album/xyz") == "spotify:album:xyz"

    def test_user_uri(self):
        assert user_uri("bob") == "spotify:user:bob"

    def test_playlist_context_with_user(self):
        assert playlist_context_uri("p1", "bob") == "spotify:user:bob:playlist:p1"

    def test_playlist_context_without_user(self):
        assert playlist_context_uri("spotify:playlist:p1") == "spotify:playlist:p1"


class TestWebPlayerUrl:
    def test_resource(self):
        assert web_player_url("track", "spotify:track:abc") == "https://open.spotify.com/track/abc"

    def test_browse(self):
        assert web_player_url() == "https://open.spotify.com/browse"

    def test_type_without_value_is_browse(self):
        assert web_player_url("album", "") == "https://open.spotify.com/browse"
