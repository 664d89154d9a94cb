"""httpx-based request dispatcher for the Bunny Stream REST API."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from domain.models import ClientConfig, HttpMethod, ResponseEnvelope
from domain.responses import normalize_response, normalize_transport_error
from ports.http_client import DeleteClient, GetClient, PostClient, PutClient

logger = logging.getLogger(__name__)

ACCESS_KEY_HEADER = "AccessKey"


class BunnyHttpClient(GetClient, PostClient, PutClient, DeleteClient):
    """
    Signed request dispatcher.

    Issues exactly one HTTP call per request and always returns an envelope:
    HTTP error statuses and transport failures come back as ``Failure``
    instead of being raised.
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        config: ClientConfig,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize dispatcher.

        Args:
            config: Base URL and access key.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.config = config
        self.timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        self._transport = transport

    def build_url(self, endpoint: str) -> str:
        """Concatenate base URL and endpoint without touching separators."""
        return self.config.base_url + endpoint

    async def request(
        self,
        endpoint: str,
        method: HttpMethod | str,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ResponseEnvelope:
        """
        Send a request and normalize the outcome.

        Args:
            endpoint: Path appended to the base URL (e.g. ``/library/1/videos``).
            method: GET, POST, PUT or DELETE.
            data: Query parameters for GET/DELETE, JSON body for POST/PUT.
            headers: Extra headers; the access key is always added.

        Returns:
            Success or Failure envelope. Never raises for request errors.
        """
        method = HttpMethod(method)
        url = self.build_url(endpoint)
        logger.debug(f"{method.value} {url}")

        try:
            options = self._build_options(method, data, headers)
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(method.value, url, **options)
        except httpx.HTTPError as e:
            logger.warning(f"{method.value} {url} failed: {type(e).__name__}")
            return normalize_transport_error()
        except Exception as e:
            # Detail stays in the log; callers only see the generic failure.
            logger.error(f"{method.value} {url} failed unexpectedly: {type(e).__name__}", exc_info=True)
            return normalize_transport_error()

        if response.status_code >= 400:
            logger.info(f"{method.value} {url} rejected with status {response.status_code}")
        return normalize_response(response.status_code, _read_body(response))

    async def get(self, endpoint, data=None, headers=None) -> ResponseEnvelope:
        return await self.request(endpoint, HttpMethod.GET, data=data, headers=headers)

    async def post(self, endpoint, data=None, headers=None) -> ResponseEnvelope:
        return await self.request(endpoint, HttpMethod.POST, data=data, headers=headers)

    async def put(self, endpoint, data=None, headers=None) -> ResponseEnvelope:
        return await self.request(endpoint, HttpMethod.PUT, data=data, headers=headers)

    async def delete(self, endpoint, data=None, headers=None) -> ResponseEnvelope:
        return await self.request(endpoint, HttpMethod.DELETE, data=data, headers=headers)

    def _build_options(self, method: HttpMethod, data, headers) -> dict[str, Any]:
        options: dict[str, Any] = {"headers": self._build_headers(headers)}
        if data is not None:
            if method.sends_query:
                options["params"] = {k: v for k, v in data.items() if v is not None}
            else:
                options["json"] = dict(data)
        return options

    def _build_headers(self, headers: Optional[Mapping[str, str]]) -> dict[str, str]:
        merged = {k: v for k, v in (headers or {}).items() if k.lower() != ACCESS_KEY_HEADER.lower()}
        merged[ACCESS_KEY_HEADER] = self.config.access_key
        return merged


def _read_body(response: httpx.Response) -> Any:
    """Parse JSON body, falling back to text (or None when empty)."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
