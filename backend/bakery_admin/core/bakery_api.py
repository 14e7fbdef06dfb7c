"""HTTP client for the external bakery REST API.

Every admin operation that reads or persists data goes through
``BakeryAPIClient``. The client forwards the caller's access token both as the
auth cookie and as a Bearer header, decodes JSON bodies and turns non-2xx
responses into ``BakeryAPIError`` subclasses.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Mapping, Sequence, Union

import httpx

from bakery_admin.core.errors import (
    BakeryRequestError,
    BakeryTimeoutError,
    BakeryUnavailableError,
    error_for_status,
)

logger = logging.getLogger(__name__)

QueryParams = Union[Mapping[str, Any], Sequence[tuple[str, Any]], None]

DEFAULT_LIST_KEYS = ("data",)


def extract_error_message(payload: Any, default: str) -> str:
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return default


def ensure_success(payload: Any, default: str) -> Any:
    """Raise on the ``{"success": false}`` envelope some admin endpoints answer with."""
    if isinstance(payload, dict) and payload.get("success") is False:
        raise BakeryRequestError(extract_error_message(payload, default))
    return payload


def unwrap_list(payload: Any, *keys: str) -> list:
    """Pull the record list out of the shapes the API answers with.

    ``keys`` are dotted paths tried in order, e.g. ``"data.lineUsers"``.
    A bare list is returned as is; anything unrecognised yields ``[]``.
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    for path in keys or DEFAULT_LIST_KEYS:
        value: Any = payload
        for part in path.split("."):
            if not isinstance(value, dict):
                value = None
                break
            value = value.get(part)
        if isinstance(value, list):
            return value
    return []


def unwrap_meta(payload: Any) -> dict:
    if isinstance(payload, dict):
        meta = payload.get("meta")
        if isinstance(meta, dict):
            return meta
        if "total" in payload:
            return {
                "total": payload.get("total"),
                "page": payload.get("page"),
                "totalPages": payload.get("totalPages"),
            }
    return {}


def _clean_params(params: QueryParams) -> list[tuple[str, str]]:
    if not params:
        return []
    items: Iterable[tuple[str, Any]]
    if isinstance(params, Mapping):
        items = params.items()
    else:
        items = params
    cleaned: list[tuple[str, str]] = []
    for key, value in items:
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned.append((key, str(value)))
    return cleaned


class BakeryAPIClient:
    def __init__(
        self,
        base_url: str,
        *,
        access_token: str | None = None,
        cookie_name: str = "accessToken",
        timeout: httpx.Timeout | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token or ""
        self.cookie_name = cookie_name
        self.timeout = timeout or httpx.Timeout(10.0, connect=5.0)
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def _cookies(self) -> dict[str, str]:
        if not self.access_token:
            return {}
        return {self.cookie_name: self.access_token}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: QueryParams = None,
        json: Any = None,
    ) -> Any:
        if not path.startswith("/"):
            path = f"/{path}"
        start_time = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                cookies=self._cookies(),
                transport=self.transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    params=_clean_params(params),
                    json=json,
                    headers=self._headers(),
                )
        except httpx.TimeoutException as exc:
            logger.warning("bakery api timeout: %s %s", method, path)
            raise BakeryTimeoutError("連線後端逾時，請稍後重試") from exc
        except httpx.HTTPError as exc:
            logger.warning("bakery api unreachable: %s %s (%s)", method, path, exc)
            raise BakeryUnavailableError(f"無法連線後端服務: {exc}") from exc

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            "bakery api %s %s -> %s (%sms)",
            method,
            path,
            response.status_code,
            duration_ms,
        )

        payload = self._decode(response)
        if response.status_code >= 400:
            message = extract_error_message(
                payload, default=f"請求失敗: {response.status_code}"
            )
            raise error_for_status(response.status_code, message)
        return payload

    def _decode(self, response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    async def api_get(self, path: str, params: QueryParams = None) -> Any:
        return await self.request("GET", path, params=params)

    async def api_post(self, path: str, data: Any = None, params: QueryParams = None) -> Any:
        return await self.request("POST", path, params=params, json=data)

    async def api_put(self, path: str, data: Any = None, params: QueryParams = None) -> Any:
        return await self.request("PUT", path, params=params, json=data)

    async def api_patch(self, path: str, data: Any = None, params: QueryParams = None) -> Any:
        return await self.request("PATCH", path, params=params, json=data)

    async def api_delete(self, path: str, params: QueryParams = None) -> Any:
        return await self.request("DELETE", path, params=params)


__all__ = [
    "BakeryAPIClient",
    "extract_error_message",
    "unwrap_list",
    "unwrap_meta",
]
