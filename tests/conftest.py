"""
Pytest configuration and shared fixtures for musicbridge tests.

Provides a scripted Web API stand-in, a manual scheduler that runs delayed
playback steps on demand, a controllable clock for TTL tests, and sample
Spotify payloads.
"""

from collections import namedtuple
from unittest.mock import Mock

import pytest

from musicbridge.config import CacheSettings, PlaybackSettings
from musicbridge.enums import StatusTag
from musicbridge.spotify.auth import SpotifyAuthManager
from musicbridge.spotify.cache import TTLCache
from musicbridge.spotify.credentials import CredentialStore
from musicbridge.spotify.http_client import RemoteResponse
from musicbridge.spotify.session import SpotifySession


# =============================================================================
# Test doubles
# =============================================================================

ApiCall = namedtuple("ApiCall", ["method", "path", "params", "json"])


class FakeWebAPI:
    """
    Scripted replacement for SpotifyHTTPClient.

    Responses are registered per (method, path). Several responses are
    served in order and the last one repeats. Unregistered routes answer 404.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    @staticmethod
    def ok(body=None, status=200):
        return RemoteResponse(status, StatusTag.OK, body)

    @staticmethod
    def expired():
        return RemoteResponse(
            401,
            StatusTag.EXPIRED,
            {"error": {"status": 401, "message": "The access token expired"}},
        )

    @staticmethod
    def error(status=500):
        return RemoteResponse(status, StatusTag.ERROR, None)

    def respond(self, method, path, *responses):
        self.routes[(method, path)] = list(responses)

    def request(self, method, path, params=None, json=None):
        self.calls.append(ApiCall(method, path, params, json))
        queue = self.routes.get((method, path))
        if not queue:
            return self.error(404)
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method and c.path == path]

    def close(self):
        pass


class ManualScheduler:
    """Scheduler that queues delayed calls until the test runs them."""

    def __init__(self):
        self.queue = []
        self.delays = []

    def call_later(self, delay_seconds, func, *args):
        self.queue.append((delay_seconds, func, args))
        self.delays.append(delay_seconds)

    @property
    def pending(self):
        return len(self.queue)

    def run_next(self):
        _, func, args = self.queue.pop(0)
        func(*args)

    def run_all(self, limit=100):
        """Run queued steps (including ones they schedule) until idle."""
        steps = 0
        while self.queue and steps < limit:
            self.run_next()
            steps += 1
        return steps


class FakeClock:
    """Callable clock for TTLCache; time only moves when advanced."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


# =============================================================================
# Core fixtures
# =============================================================================

@pytest.fixture
def store():
    """Credential store holding a valid access and refresh token."""
    return CredentialStore(
        access_token="test_access_token",
        refresh_token="test_refresh_token",
        user_id="user123",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def fake_api():
    return FakeWebAPI()


@pytest.fixture
def mock_auth_manager(store):
    """Auth manager whose refresh writes a new access token to the store."""
    manager = Mock(spec=SpotifyAuthManager)

    def _refresh(target_store):
        target_store.set_access_token("refreshed_access_token")
        return "refreshed_access_token"

    manager.refresh.side_effect = _refresh
    return manager


@pytest.fixture
def playback_settings():
    return PlaybackSettings(
        web_launch_delay=5,
        confirm_delay=2,
        retry_delay=2,
        device_retries=2,
        web_launch_retries=5,
    )


@pytest.fixture
def session(store, fake_api, mock_auth_manager, cache, scheduler, playback_settings):
    """SpotifySession wired to the fake Web API and manual scheduler."""
    return SpotifySession(
        store,
        http_client=fake_api,
        auth_manager=mock_auth_manager,
        cache=cache,
        scheduler=scheduler,
        cache_settings=CacheSettings(),
        playback_settings=playback_settings,
    )


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_device():
    """A registered web player device."""
    return {
        "id": "device_web_1",
        "is_active": True,
        "is_private_session": False,
        "is_restricted": False,
        "name": "Web Player (Chrome)",
        "type": "Computer",
        "volume_percent": 80,
    }


@pytest.fixture
def sample_devices(sample_device):
    return {
        "devices": [
            sample_device,
            {
                "id": "device_phone_2",
                "is_active": False,
                "name": "Pixel",
                "type": "Smartphone",
                "volume_percent": 50,
            },
        ]
    }


def _artist(i):
    return {
        "id": f"artist{i}",
        "uri": f"spotify:artist:artist{i}",
        "name": f"Artist {i}",
        "genres": ["dance pop", "pop"],
        "popularity": 60,
        "images": [{"url": f"https://example.com/artist{i}.jpg"}],
    }


@pytest.fixture
def make_artist():
    """Factory for full Web API artist objects."""
    return _artist


@pytest.fixture
def sample_track():
    """A Web API track object."""
    return {
        "id": "4uLU6hMCjMI75M1A2tKUQC",
        "uri": "spotify:track:4uLU6hMCjMI75M1A2tKUQC",
        "name": "Come On Eileen",
        "duration_ms": 287000,
        "popularity": 75,
        "explicit": False,
        "album": {"name": "Too-Rye-Ay"},
        "artists": [
            {
                "id": "artist1",
                "uri": "spotify:artist:artist1",
                "name": "Dexys Midnight Runners",
            }
        ],
    }


@pytest.fixture
def currently_playing(sample_track):
    """Payload of GET /v1/me/player/currently-playing while playing."""
    return {
        "is_playing": True,
        "progress_ms": 42000,
        "currently_playing_type": "track",
        "item": sample_track,
    }


@pytest.fixture
def player_payload(sample_device, sample_track):
    """Payload of GET /v1/me/player."""
    return {
        "device": sample_device,
        "item": sample_track,
        "is_playing": True,
        "progress_ms": 1000,
        "timestamp": 1700000000000,
        "context": {"uri": "spotify:playlist:37i9dQZF1DXcBWIGoYBM5M"},
        "repeat_state": "off",
        "shuffle_state": False,
        "currently_playing_type": "track",
    }
