"""
Lightweight HTTP client for the Spotify Web API.

Wraps requests.Session, attaches the current bearer token from the
credential store, and classifies every outcome into a ``RemoteResponse``
tagged OK, EXPIRED or ERROR. Transport failures never raise.

Token refresh is not done here; the session runs the refresh-and-retry
protocol around each call.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.exceptions import RequestException

from musicbridge.enums import StatusTag
from .credentials import CredentialStore

logger = logging.getLogger(__name__)

BASE_URL = "https://api.spotify.com"
DEFAULT_TIMEOUT = 10  # seconds
MAX_RETRIES = 2
BASE_DELAY = 1  # seconds
MAX_DELAY = 8  # seconds

EXPIRED_TOKEN_MARKER = "expired"


def _calculate_backoff_delay(attempt: int) -> float:
    """Calculate exponential backoff delay, capped at MAX_DELAY."""
    return min(BASE_DELAY * (2 ** attempt), MAX_DELAY)


@dataclass(frozen=True)
class RemoteResponse:
    """Outcome of a single remote call. ``status_code`` is 0 on transport failure."""

    status_code: int
    status_tag: StatusTag
    body: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return self.status_tag == StatusTag.OK

    @property
    def expired(self) -> bool:
        return self.status_tag == StatusTag.EXPIRED


def _error_message(body: Any) -> str:
    """Pull the message out of a Spotify error body."""
    if not isinstance(body, dict):
        return ""
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or "")
    if isinstance(error, str):
        return str(body.get("error_description") or error)
    return ""


def is_expired_token_response(status_code: int, body: Any) -> bool:
    """
    Recognize Spotify's expired-token signature.

    Spotify answers ``401 {"error": {"status": 401, "message": "The access
    token expired"}}``. Other 401s (revoked or malformed tokens) are plain
    errors and are not refreshed.
    """
    if status_code != 401:
        return False
    return EXPIRED_TOKEN_MARKER in _error_message(body).lower()


class SpotifyHTTPClient:
    """
    HTTP client for Spotify Web API requests.

    Retries 429 (honouring Retry-After), 5xx and network errors with
    exponential backoff up to ``max_retries`` times, then gives up with an
    ERROR response. Authorization failures are never retried here.
    """

    def __init__(
        self,
        store: CredentialStore,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            store: Credential store the bearer token is read from per call.
            base_url: API root; request paths include the version
                (``/v1/me/player``).
            timeout: Per-request timeout in seconds.
            max_retries: Retries for rate limits and transient failures.
            session: Optional pre-built requests session.
        """
        self._store = store
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max(0, max_retries)
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    # -----------------------------------------------------------------
    # Public HTTP methods
    # -----------------------------------------------------------------

    def get(self, path: str, params: Optional[Dict] = None) -> RemoteResponse:
        """Send a GET request."""
        return self.request("GET", path, params=params)

    def put(
        self, path: str, json: Any = None, params: Optional[Dict] = None
    ) -> RemoteResponse:
        """Send a PUT request."""
        return self.request("PUT", path, params=params, json=json)

    def post(
        self, path: str, json: Any = None, params: Optional[Dict] = None
    ) -> RemoteResponse:
        """Send a POST request."""
        return self.request("POST", path, params=params, json=json)

    def delete(
        self, path: str, json: Any = None, params: Optional[Dict] = None
    ) -> RemoteResponse:
        """Send a DELETE request."""
        return self.request("DELETE", path, params=params, json=json)

    # -----------------------------------------------------------------
    # Internal request handling
    # -----------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        token = self._store.get().access_token or ""
        return {"Authorization": f"Bearer {token}"}

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict] = None,
        json: Any = None,
    ) -> RemoteResponse:
        """Execute one logical request with transient-failure retries."""
        url = f"{self._base_url}{path}"

        for attempt in range(self._max_retries + 1):
            try:
                response = self._session.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=self._headers(),
                    timeout=self._timeout,
                )
            except RequestException as e:
                if attempt >= self._max_retries:
                    logger.error(
                        "Network error on %s %s after %d attempts: %s",
                        method, path, attempt + 1, e,
                    )
                    return RemoteResponse(0, StatusTag.ERROR)
                delay = _calculate_backoff_delay(attempt)
                logger.warning(
                    "Network error, retry %d/%d in %ss: %s",
                    attempt + 1, self._max_retries + 1, delay, e,
                )
                time.sleep(delay)
                continue

            status = response.status_code
            body = self._parse_body(response)

            # --- Success ---
            if 200 <= status < 300:
                return RemoteResponse(status, StatusTag.OK, body)

            # --- 401 Unauthorized ---
            if status == 401:
                if is_expired_token_response(status, body):
                    logger.info("Access token expired on %s %s", method, path)
                    return RemoteResponse(status, StatusTag.EXPIRED, body)
                logger.warning(
                    "Unauthorized on %s %s: %s", method, path, _error_message(body)
                )
                return RemoteResponse(status, StatusTag.ERROR, body)

            # --- 429 Rate Limited / 5xx Server Error ---
            if status == 429 or status >= 500:
                if attempt >= self._max_retries:
                    logger.error(
                        "%s %s failed with %d after %d attempts",
                        method, path, status, attempt + 1,
                    )
                    return RemoteResponse(status, StatusTag.ERROR, body)
                delay = _calculate_backoff_delay(attempt)
                if status == 429:
                    try:
                        retry_after = int(response.headers.get("Retry-After", 1))
                    except (TypeError, ValueError):
                        retry_after = 1
                    if retry_after > MAX_DELAY:
                        logger.error(
                            "%s %s rate limited for %ds, giving up",
                            method, path, retry_after,
                        )
                        return RemoteResponse(status, StatusTag.ERROR, body)
                    delay = max(retry_after, delay)
                logger.warning(
                    "HTTP %d on %s %s, retry %d/%d in %ss",
                    status, method, path,
                    attempt + 1, self._max_retries + 1, delay,
                )
                time.sleep(delay)
                continue

            # --- Other client errors (400, 403, 404, ...) ---
            logger.debug(
                "%s %s returned %d: %s", method, path, status, _error_message(body)
            )
            return RemoteResponse(status, StatusTag.ERROR, body)

        # Loop always returns; kept for type checkers.
        return RemoteResponse(0, StatusTag.ERROR)

    @staticmethod
    def _parse_body(response) -> Optional[Any]:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None
