"""Thin httpx wrapper for the cloud-functions endpoints.

Each endpoint lives at ``{base_url}/{name}``. Errors come back as JSON
``{"error": "CODE", "detail": "..."}`` with a non-2xx status.
"""

from __future__ import annotations

import logging

import httpx

from shuttle_dispatch.config import settings

logger = logging.getLogger(__name__)


class FunctionsCallError(Exception):
    """A call failed at the transport level or returned a non-2xx status."""

    def __init__(self, endpoint: str, message: str, status_code: int | None = None, payload: object = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code
        self.payload = payload


def _error_message(response: httpx.Response) -> tuple[str, object]:
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or f"HTTP {response.status_code}", None
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        detail = payload.get("detail")
        message = payload["error"]
        if isinstance(detail, str) and detail:
            message = f"{message}: {detail}"
        return message, payload
    return f"HTTP {response.status_code}", payload


class FunctionsClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = (base_url or settings.functions_base_url).rstrip("/")
        self._token = api_token if api_token is not None else settings.functions_api_token
        self._timeout = timeout or settings.http_timeout_seconds
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def call(
        self,
        endpoint: str,
        *,
        method: str = "POST",
        json: dict | None = None,
        params: dict | None = None,
    ) -> dict:
        """Call one endpoint and return its decoded JSON body (``{}`` when empty).

        Raises:
            FunctionsCallError: transport failure or non-2xx response.
        """
        url = f"{self._base_url}/{endpoint}"
        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, json=json, params=params, headers=self._headers(), timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.request(
                        method, url, json=json, params=params, headers=self._headers(), timeout=self._timeout
                    )
        except httpx.HTTPError as exc:
            logger.error("%s %s transport error: %s", method, endpoint, exc)
            raise FunctionsCallError(endpoint, str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            message, payload = _error_message(response)
            logger.error("%s %s → %d %s", method, endpoint, response.status_code, message)
            raise FunctionsCallError(endpoint, message, response.status_code, payload)

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise FunctionsCallError(endpoint, "Response was not JSON", response.status_code) from exc
        return body if isinstance(body, dict) else {"items": body}
