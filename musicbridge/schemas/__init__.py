"""
Request validation schemas.

Usage:
    from musicbridge.schemas import PlaybackOptions, RecommendationRequest

    options = PlaybackOptions(device_id="abc", track_ids=["spotify:track:123"])
"""

from .playback_requests import (
    MAX_SEEDS,
    PlaybackOptions,
    RecommendationRequest,
)

__all__ = [
    "MAX_SEEDS",
    "PlaybackOptions",
    "RecommendationRequest",
]
