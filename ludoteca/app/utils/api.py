"""
ludoteca/app/utils/api.py

HTTP client for the venue REST backend.

Console → Backend (/api/...)

Unlike a fire-and-forget client, every non-2xx response raises: callers
(repositories, flows) decide what the user sees.
"""

import logging
from typing import Any, Optional

import httpx

from ludoteca.app.config import API_TOKEN, API_URL, REQUEST_TIMEOUT
from ludoteca.app.errors import (
    NetworkError,
    NotFoundError,
    SessionExpiredError,
    translate_backend_error,
)

logger = logging.getLogger(__name__)

REFRESH_PATH = "/api/auth/refresh"
AUTH_PATHS = ("/api/auth/login", "/api/auth/register")


class ApiClient:
    """Async client for the backend API."""

    def __init__(
        self,
        base_url: str = API_URL,
        token: Optional[str] = API_TOKEN,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport
        self.session_expired = False

    def set_token(self, token: Optional[str]) -> None:
        self.token = token
        if token:
            self.session_expired = False

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        )

    def _headers(self, token: Optional[str]) -> dict:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(self, method: str, path: str, token: Optional[str], **kwargs) -> httpx.Response:
        async with self._client() as client:
            try:
                return await client.request(method, path, headers=self._headers(token), **kwargs)
            except httpx.HTTPError as e:
                logger.error(f"API request failed: {method} {path} -> {e}")
                raise NetworkError(message=f"{method} {path}: {e}") from e

    async def _request(self, method: str, path: str, **kwargs) -> Optional[Any]:
        """Base HTTP request; returns parsed JSON or None for empty bodies."""
        if self.session_expired and not self.token and not path.startswith(AUTH_PATHS):
            raise SessionExpiredError(message="Session expired")

        resp = await self._send(method, path, self.token, **kwargs)

        if resp.status_code == 401 and self.token and path != REFRESH_PATH:
            new_token = await self._refresh_token()
            if not new_token:
                raise SessionExpiredError(message="Session expired", status_code=401)
            resp = await self._send(method, path, new_token, **kwargs)

        return self._handle_response(method, path, resp)

    def _handle_response(self, method: str, path: str, resp: httpx.Response) -> Optional[Any]:
        if resp.status_code == 204 or not resp.content:
            if resp.status_code >= 400:
                raise self._error(method, path, resp, None)
            return None

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code >= 400:
            raise self._error(method, path, resp, data)

        return data

    def _error(self, method: str, path: str, resp: httpx.Response, data: Any) -> Exception:
        detail = None
        if isinstance(data, dict):
            detail = data.get("error") or data.get("detail") or data.get("message")
            if detail is not None and not isinstance(detail, str):
                detail = str(detail)

        logger.error(f"API error: {method} {path} -> {resp.status_code} {detail or ''}".rstrip())

        if resp.status_code == 404:
            return NotFoundError(
                translate_backend_error(detail, default="errors:slot_not_found"),
                message=detail or f"{method} {path}: not found",
            )
        if resp.status_code == 401 and not path.startswith(AUTH_PATHS):
            self.session_expired = True
            return SessionExpiredError(
                message=detail or "Session expired",
                status_code=401,
                detail=detail,
            )
        if resp.status_code == 401:
            return NetworkError(
                translate_backend_error(detail, default="errors:invalid_credentials"),
                message=detail or "Invalid credentials",
                status_code=401,
                detail=detail,
            )
        return NetworkError(
            translate_backend_error(detail),
            message=detail or f"{method} {path}: HTTP {resp.status_code}",
            status_code=resp.status_code,
            detail=detail,
        )

    async def _refresh_token(self) -> Optional[str]:
        """POST /api/auth/refresh, single attempt; marks the session expired on failure."""
        try:
            resp = await self._send("POST", REFRESH_PATH, None)
        except NetworkError:
            resp = None

        if resp is not None and resp.is_success:
            try:
                new_token = (resp.json() or {}).get("accessToken")
            except ValueError:
                new_token = None
            if new_token:
                logger.info("API token refreshed")
                self.set_token(new_token)
                return new_token

        logger.warning("API token refresh failed, session expired")
        self.session_expired = True
        self.token = None
        return None

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    async def get(self, path: str, params: Optional[dict] = None) -> Optional[Any]:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Any] = None) -> Optional[Any]:
        return await self._request("POST", path, json=json)

    async def put(self, path: str, json: Optional[Any] = None) -> Optional[Any]:
        return await self._request("PUT", path, json=json)

    async def delete(self, path: str, json: Optional[Any] = None) -> Optional[Any]:
        """DELETE, optionally with a JSON body (range deletions)."""
        if json is None:
            return await self._request("DELETE", path)
        return await self._request("DELETE", path, json=json)


# Singleton
api = ApiClient()
