from .track import Artist, Track
from .player import PlayerContext, PlayerDevice

__all__ = [
    "Artist",
    "Track",
    "PlayerContext",
    "PlayerDevice",
]
