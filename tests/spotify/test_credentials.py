"""Tests for SpotifyCredentials and CredentialStore."""

import pytest

from musicbridge import config as config_module
from musicbridge.spotify.credentials import (
    Credential,
    CredentialStore,
    SpotifyCredentials,
)


class TestSpotifyCredentials:
    """Tests for the immutable application credentials."""

    def test_create_valid(self):
        creds = SpotifyCredentials(client_id="id", client_secret="secret")
        assert creds.client_id == "id"
        assert creds.client_secret == "secret"

    def test_missing_client_id_raises(self):
        with pytest.raises(ValueError, match="client_id"):
            SpotifyCredentials(client_id="", client_secret="secret")

    def test_missing_client_secret_raises(self):
        with pytest.raises(ValueError, match="client_secret"):
            SpotifyCredentials(client_id="id", client_secret="")

    def test_is_frozen(self):
        creds = SpotifyCredentials(client_id="id", client_secret="secret")
        with pytest.raises(Exception):
            creds.client_id = "other"

    def test_from_config_dict(self):
        creds = SpotifyCredentials.from_config(
            {"SPOTIFY_CLIENT_ID": "a", "SPOTIFY_CLIENT_SECRET": "b"}
        )
        assert creds.client_id == "a"
        assert creds.client_secret == "b"

    def test_from_config_class(self):
        creds = SpotifyCredentials.from_config(config_module.TestingConfig)
        assert creds.client_id == "test_client_id"

    def test_from_config_missing_raises(self):
        with pytest.raises(ValueError):
            SpotifyCredentials.from_config({})


class TestCredentialStore:
    """Tests for the mutable token holder."""

    def test_empty_store(self):
        store = CredentialStore()
        assert store.get() == Credential()
        assert not store.has_access_token
        assert not store.can_refresh

    def test_blank_strings_are_absent(self):
        store = CredentialStore(access_token="", refresh_token="", user_id="")
        assert store.get().access_token is None
        assert store.get().refresh_token is None
        assert store.get().user_id is None

    def test_set_access_token_keeps_other_fields(self, store):
        store.set_access_token("new_access")
        cred = store.get()
        assert cred.access_token == "new_access"
        assert cred.refresh_token == "test_refresh_token"
        assert cred.user_id == "user123"

    def test_set_refresh_token(self, store):
        store.set_refresh_token("rotated")
        assert store.get().refresh_token == "rotated"
        assert store.get().access_token == "test_access_token"

    def test_set_credential_replaces_everything(self, store):
        store.set_credential("a2")
        cred = store.get()
        assert cred.access_token == "a2"
        assert cred.refresh_token is None
        assert cred.user_id is None

    def test_snapshots_are_immutable(self, store):
        before = store.get()
        store.set_access_token("changed")
        assert before.access_token == "test_access_token"

    def test_refresh_only_store_can_refresh(self):
        store = CredentialStore(refresh_token="r")
        assert not store.has_access_token
        assert store.can_refresh
