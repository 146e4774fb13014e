from __future__ import annotations

import logging
from typing import Any

import httpx

from washbook.application.exceptions import NetworkError, ServerError
from washbook.core.config import settings


def with_prefix(value: str, prefix: str) -> str:
    """Backend references look like "car:<id>"; add the prefix when missing."""
    return value if value.startswith(f"{prefix}:") else f"{prefix}:{value}"


def strip_prefix(value: str, prefix: str) -> str:
    return value[len(prefix) + 1 :] if value.startswith(f"{prefix}:") else value


def unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def unwrap_list(payload: Any) -> list[Any]:
    items = unwrap(payload)
    if not isinstance(items, list):
        raise ServerError("Expected a list in backend response")
    return [unwrap(item) for item in items]


class BackendClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url or settings.BACKEND_BASE_URL
        if not self._base_url:
            raise ValueError("BACKEND_BASE_URL is required for the backend client")
        token = api_token or settings.BACKEND_API_TOKEN
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=timeout or settings.BACKEND_TIMEOUT_SECONDS,
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        files: list[tuple[str, tuple[str, bytes, str]]] | None = None,
        missing_ok: bool = False,
    ) -> Any:
        """
        Send a request and return the decoded JSON body (None for empty bodies).

        Transport failures raise NetworkError, error statuses raise
        ServerError. With missing_ok a 404 is treated as success.
        """
        try:
            resp = await self._client.request(method, path, params=params, json=json, files=files)
        except httpx.TransportError as e:
            self._logger.error("Backend unreachable", extra={"operation": f"{method} {path}", "reason": str(e)})
            raise NetworkError(f"Could not reach the server ({e.__class__.__name__})") from e

        if missing_ok and resp.status_code == 404:
            return None

        if resp.status_code >= 400:
            message = _error_message(resp)
            self._logger.error(
                "Backend request failed",
                extra={"operation": f"{method} {path}", "reason": f"{resp.status_code} {message}"},
            )
            raise ServerError(message, status_code=resp.status_code)

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ServerError("Unreadable response from server", status_code=resp.status_code) from e


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or f"HTTP {resp.status_code}")
    return f"HTTP {resp.status_code}"
