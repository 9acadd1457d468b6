"""
Shared service utilities.

Every remote read has the same shape: run the request through the session
(which handles token refresh), then check for a 200 carrying the expected
payload. These helpers keep that shape in one place.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

from musicbridge.result import Result
from musicbridge.spotify.session import SpotifySession

logger = logging.getLogger(__name__)


def carry_over(result: Result) -> Result:
    """Re-type a non-found result for a different value type."""
    return Result(
        result.status, reason=result.reason, status_code=result.status_code
    )


def fetch_payload(
    session: SpotifySession,
    path: str,
    params: Optional[Dict[str, Any]] = None,
    required_key: Optional[str] = None,
) -> Result[Dict[str, Any]]:
    """
    GET a JSON object from the Web API.

    Args:
        session: Session used to issue the request.
        path: Versioned API path, e.g. ``/v1/me/player``.
        params: Optional query parameters.
        required_key: Key that must be present and non-empty in the body.

    Returns:
        ``Found(body)`` on a 200 with the expected shape, ``NotAvailable``
        for an empty or incomplete payload (e.g. 204 No Content), and the
        session's ``Failed`` otherwise.
    """
    result = session.get(path, params=params)
    if not result.is_found:
        logger.debug(f"GET {path} not found: {result.reason}")
        return carry_over(result)

    response = result.value
    body = response.body
    if response.status_code != 200 or not isinstance(body, dict):
        return Result.not_available(
            f"HTTP {response.status_code} without payload",
            status_code=response.status_code,
        )
    if required_key and not body.get(required_key):
        return Result.not_available(
            f"payload has no {required_key}", status_code=response.status_code
        )
    return Result.found(body)


def batched(items: Sequence[Any], size: int) -> Iterator[List[Any]]:
    """Split a sequence into lists of at most ``size`` items."""
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def unique(items: Sequence[str]) -> List[str]:
    """De-duplicate while keeping first-seen order."""
    seen = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result
