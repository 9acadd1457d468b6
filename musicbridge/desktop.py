"""
Desktop player collaborator.

The core only asks a desktop player two things: whether it is running and
which window title it shows. The title (``"Artist - Song"``) identifies the
playing track when no cloud session is available.
"""

import logging
from typing import Callable, Optional, Protocol, Tuple

from musicbridge.utils import exec_cmd

logger = logging.getLogger(__name__)

WINDOWS_SPOTIFY_TRACK_FIND = (
    'tasklist /fi "imagename eq Spotify.exe" /fo list /v | find " - "'
)
WINDOW_TITLE_PREFIX = "Window Title:"


class DesktopPlayer(Protocol):
    def is_running(self) -> bool:
        ...

    def window_title(self) -> Optional[str]:
        ...


def parse_window_title(title: Optional[str]) -> Optional[Tuple[str, str]]:
    """Split ``"Artist - Song"`` into ``(artist, song)``."""
    if not title or " - " not in title:
        return None
    artist, song = title.split(" - ", 1)
    artist, song = artist.strip(), song.strip()
    if not artist or not song:
        return None
    return artist, song


class TasklistDesktopPlayer:
    """Spotify desktop on Windows, probed through ``tasklist``."""

    def __init__(
        self,
        command: str = WINDOWS_SPOTIFY_TRACK_FIND,
        runner: Callable[[str], Optional[str]] = exec_cmd,
    ):
        self._command = command
        self._runner = runner

    def _query(self) -> Optional[str]:
        return self._runner(self._command)

    def is_running(self) -> bool:
        result = self._query()
        return bool(result) and "title" in result.lower()

    def window_title(self) -> Optional[str]:
        """
        Title of the Spotify window, e.g. ``"Dexys Midnight Runners - Come
        On Eileen"``. None when paused, showing an ad, or closed.
        """
        result = self._query()
        if not result or WINDOW_TITLE_PREFIX not in result:
            return None
        title = result.split(WINDOW_TITLE_PREFIX, 1)[1].strip()
        return title or None
