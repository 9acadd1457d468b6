"""
Small platform and string helpers shared by the desktop collaborator and the
services.
"""

import logging
import subprocess
import sys
import webbrowser
from collections import Counter
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


def is_windows() -> bool:
    return sys.platform.startswith("win32")


def is_mac() -> bool:
    return sys.platform.startswith("darwin")


def is_linux() -> bool:
    return not (is_windows() or is_mac())


def is_boolean_string(value: Optional[str]) -> bool:
    """True for "true"/"false" in any case."""
    if not isinstance(value, str):
        return False
    return value.strip().lower() in ("true", "false")


def exec_cmd(cmd: str, cwd: Optional[str] = None, timeout: float = 10) -> Optional[str]:
    """
    Run a shell command and return its stripped stdout.

    Returns None when the command fails or cannot be started; the failure is
    logged at debug level since callers use this to probe for processes.
    """
    try:
        completed = subprocess.run(
            cmd,
            shell=True,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Command failed to run: {cmd!r}: {e}")
        return None
    if completed.returncode != 0:
        logger.debug(
            f"Command exited with {completed.returncode}: {cmd!r}: "
            f"{completed.stderr.strip()}"
        )
        return None
    return completed.stdout.strip()


def launch_web_url(url: str) -> bool:
    """Open a URL in the user's default browser."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        logger.warning(f"Could not open browser for {url}: {e}")
        return False
    if not opened:
        logger.warning(f"No browser available to open {url}")
    return bool(opened)


def highest_frequency_genre(genres: Iterable[str]) -> str:
    """
    Most common word across a list of Spotify genre strings.

    ``["dance pop", "pop", "post-teen pop"]`` gives ``"pop"``. Ties go to the
    word seen first.
    """
    words = []
    for genre in genres or []:
        words.extend(w for w in genre.lower().split() if w)
    if not words:
        return ""
    counts = Counter(words)
    top = max(counts.values())
    return next(w for w in words if counts[w] == top)
