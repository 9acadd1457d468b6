import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    """Base configuration."""
    SPOTIFY_CLIENT_ID = os.getenv('SPOTIFY_CLIENT_ID')
    SPOTIFY_CLIENT_SECRET = os.getenv('SPOTIFY_CLIENT_SECRET')
    SPOTIFY_ACCESS_TOKEN = os.getenv('SPOTIFY_ACCESS_TOKEN')
    SPOTIFY_REFRESH_TOKEN = os.getenv('SPOTIFY_REFRESH_TOKEN')
    SPOTIFY_USER_ID = os.getenv('SPOTIFY_USER_ID')

    # Optional Redis cache; in-process cache when unset
    REDIS_URL = os.getenv('REDIS_URL')

    # HTTP
    HTTP_TIMEOUT = _env_float('HTTP_TIMEOUT', 10)
    HTTP_MAX_RETRIES = _env_int('HTTP_MAX_RETRIES', 2)

    # Cache TTLs (seconds)
    DEVICES_CACHE_TTL = _env_int('DEVICES_CACHE_TTL', 60)
    PLAYER_CONTEXT_CACHE_TTL = _env_int('PLAYER_CONTEXT_CACHE_TTL', 15)
    ARTIST_CACHE_TTL = _env_int('ARTIST_CACHE_TTL', 3600)

    # Playback launch loop
    WEB_LAUNCH_DELAY = _env_float('WEB_LAUNCH_DELAY', 5)
    CONFIRM_DELAY = _env_float('CONFIRM_DELAY', 2)
    RETRY_DELAY = _env_float('RETRY_DELAY', 2)
    DEVICE_RETRIES = _env_int('DEVICE_RETRIES', 2)
    WEB_LAUNCH_RETRIES = _env_int('WEB_LAUNCH_RETRIES', 5)

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    DEBUG = False
    TESTING = False


class ProductionConfig(Config):
    """Production configuration."""
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    SPOTIFY_CLIENT_ID = 'test_client_id'
    SPOTIFY_CLIENT_SECRET = 'test_client_secret'
    REDIS_URL = None
    HTTP_MAX_RETRIES = 0
    WEB_LAUNCH_DELAY = 0
    CONFIRM_DELAY = 0
    RETRY_DELAY = 0


# Dictionary for easy config selection
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


@dataclass(frozen=True)
class CacheSettings:
    """TTLs applied by the services to each cache key."""

    devices_ttl: int = 60
    player_context_ttl: int = 15
    artist_ttl: int = 3600

    @classmethod
    def from_config(cls, config_class) -> 'CacheSettings':
        return cls(
            devices_ttl=config_class.DEVICES_CACHE_TTL,
            player_context_ttl=config_class.PLAYER_CONTEXT_CACHE_TTL,
            artist_ttl=config_class.ARTIST_CACHE_TTL,
        )


@dataclass(frozen=True)
class PlaybackSettings:
    """
    Delays (seconds) and attempt budgets of the playback-launch loop.

    ``web_launch_retries`` applies after the web player had to be opened,
    ``device_retries`` when a device was already registered.
    """

    web_launch_delay: float = 5
    confirm_delay: float = 2
    retry_delay: float = 2
    device_retries: int = 2
    web_launch_retries: int = 5

    def __post_init__(self):
        if self.device_retries < 0 or self.web_launch_retries < 0:
            raise ValueError("retry budgets must not be negative")
        if min(self.web_launch_delay, self.confirm_delay, self.retry_delay) < 0:
            raise ValueError("delays must not be negative")

    @classmethod
    def from_config(cls, config_class) -> 'PlaybackSettings':
        return cls(
            web_launch_delay=config_class.WEB_LAUNCH_DELAY,
            confirm_delay=config_class.CONFIRM_DELAY,
            retry_delay=config_class.RETRY_DELAY,
            device_retries=config_class.DEVICE_RETRIES,
            web_launch_retries=config_class.WEB_LAUNCH_RETRIES,
        )


def setup_logging(level=None) -> None:
    """Configure root logging for host applications and scripts."""
    level = level or Config.LOG_LEVEL
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    # Quiet the scheduler's per-job chatter
    logging.getLogger('apscheduler').setLevel(logging.WARNING)
