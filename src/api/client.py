"""Authenticated HTTP client for the content backend API."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import requests

from src.common.config import Settings, settings as default_settings

if TYPE_CHECKING:
    from .auth import AuthService

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Raised when a backend request fails (transport or non-2xx)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def get_error_message(response: requests.Response) -> str:
    """Extract a readable error message from a backend error response.

    FastAPI returns either {"detail": "..."} or, for validation errors,
    {"detail": [{"msg": "...", "type": "..."}, ...]}.
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    detail = data.get("detail") if isinstance(data, dict) else None
    if isinstance(detail, list):
        return ", ".join(
            str(item.get("msg", "")) if isinstance(item, dict) else str(item)
            for item in detail
        )
    if isinstance(detail, str):
        return detail
    return f"HTTP {response.status_code}: {response.reason or 'request failed'}"


class APIClient:
    """HTTP client wrapping requests for the blog backend.

    Features:
    - Bearer token from the current auth session
    - One session refresh + retry on 401
    - Retries with exponential backoff on connection errors (not timeouts)
    - Readable APIError messages from FastAPI error payloads
    """

    BACKOFF_BASE = 2.0
    MAX_BACKOFF = 10.0

    def __init__(
        self,
        base_url: str | None = None,
        auth: AuthService | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        session: requests.Session | None = None,
        config: Settings | None = None,
    ) -> None:
        config = config or default_settings
        self.base_url = (base_url or config.api.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.api.timeout_seconds
        self.max_retries = max_retries if max_retries is not None else config.api.max_retries
        self._auth = auth
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    # --- Public verbs ---

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None if empty).

        Raises:
            APIError: On timeout, exhausted connection retries, or non-2xx.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}

        refreshed = False
        attempt = 0
        while True:
            try:
                resp = self._session.request(
                    method,
                    url,
                    params=query or None,
                    json=json,
                    headers=self._auth_headers(),
                    timeout=self.timeout,
                )
            except requests.Timeout as exc:
                raise APIError(f"Request timed out: {method} {url}") from exc
            except requests.ConnectionError as exc:
                if attempt >= self.max_retries:
                    raise APIError(f"Connection failed: {method} {url}: {exc}") from exc
                attempt += 1
                wait_time = self._retry_delay(attempt)
                logger.warning(
                    "Retrying request (%d/%d) in %.1fs: %s %s",
                    attempt,
                    self.max_retries,
                    wait_time,
                    method,
                    url,
                )
                time.sleep(wait_time)
                continue

            if resp.status_code == 401 and not refreshed and self._auth is not None:
                refreshed = True
                if self._refresh_session():
                    continue

            if not resp.ok:
                message = get_error_message(resp)
                logger.debug("Request failed: %s %s -> %s %s", method, url, resp.status_code, message)
                raise APIError(message, status_code=resp.status_code)

            if resp.status_code == 204 or not resp.content:
                return None
            return resp.json()

    # --- Internals ---

    def _retry_delay(self, attempt: int) -> float:
        return min(self.BACKOFF_BASE ** attempt, self.MAX_BACKOFF)

    def _auth_headers(self) -> dict[str, str]:
        """Bearer header from the current session; empty if there is none."""
        if self._auth is None:
            return {}
        try:
            token = self._auth.get_access_token()
        except Exception as e:
            logger.error("Failed to attach auth token: %s", e)
            return {}
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _refresh_session(self) -> bool:
        try:
            session = self._auth.refresh_session()
        except Exception as e:
            logger.error("Token refresh failed: %s", e)
            return False
        return session is not None

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> APIClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
