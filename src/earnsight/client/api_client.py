"""Resilient HTTP client for the Earnsight API gateway.

Retries transport failures and 5xx responses with linear backoff
(``retry_delay * attempt``); 4xx responses are terminal. The gateway proxies a
rate-limited third party at low QPS, so the backoff stays deliberately simple.

Usage:
    client = ApiClient.from_settings(get_settings())
    quote = await client.get("/quote", params={"symbol": "AAPL"})
    await client.close()
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import httpx
import orjson

from earnsight.core.exceptions import ApiError, ClientError, TransientNetworkError
from earnsight.core.logging import get_logger

if TYPE_CHECKING:
    from earnsight.config import Settings

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class ApiClient:
    """Async JSON client with timeout, retry and linear backoff."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        api_key: str | None = None,
        sleep: SleepFunc = asyncio.sleep,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retry_attempts = retry_attempts
        self._retry_delay = retry_delay
        self._api_key = api_key
        self._sleep = sleep
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> ApiClient:
        return cls(
            base_url=settings.api_base_url,
            timeout=settings.api_timeout,
            retry_attempts=settings.api_retry_attempts,
            retry_delay=settings.api_retry_delay,
            api_key=settings.api_key.get_secret_value() if settings.api_key else None,
        )

    @property
    def retry_attempts(self) -> int:
        return self._retry_attempts

    @property
    def retry_delay(self) -> float:
        return self._retry_delay

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            headers = {"Content-Type": "application/json", "Accept": "application/json"}
            if self._api_key:
                headers["X-API-Key"] = self._api_key
            self._http_client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._http_client

    def backoff(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (1-indexed)."""
        return self._retry_delay * attempt

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ClientError: on any 4xx response (never retried)
            TransientNetworkError: when every attempt failed at the transport level
            ApiError: when every attempt returned 5xx
        """
        client = self._get_http_client()
        content = orjson.dumps(json) if json is not None else None
        attempt = 0

        while True:
            try:
                response = await client.request(method, endpoint, params=params, content=content)
            except httpx.TransportError as e:
                if attempt >= self._retry_attempts:
                    logger.warning(
                        "Gateway request failed, retries exhausted",
                        endpoint=endpoint,
                        attempts=attempt + 1,
                        error=str(e),
                    )
                    raise TransientNetworkError(f"{method} {endpoint} failed: {e}") from e
                error = str(e)
                status = None
            else:
                status = response.status_code
                if 500 <= status < 600:
                    if attempt >= self._retry_attempts:
                        logger.warning(
                            "Gateway server error, retries exhausted",
                            endpoint=endpoint,
                            status=status,
                            attempts=attempt + 1,
                        )
                        raise ApiError(_error_message(response), status=status)
                    error = f"HTTP {status}"
                elif 400 <= status < 500:
                    raise ClientError(_error_message(response), status=status)
                else:
                    return _decode(response)

            attempt += 1
            delay = self.backoff(attempt)
            logger.debug(
                "Retrying gateway request",
                endpoint=endpoint,
                attempt=attempt,
                delay=delay,
                status=status,
                error=error,
            )
            await self._sleep(delay)

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, json: Any = None) -> Any:
        return await self.request("POST", endpoint, json=json)

    async def close(self) -> None:
        """Clean up resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("ApiClient closed")


def _decode(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return {}
    try:
        return orjson.loads(response.content)
    except orjson.JSONDecodeError as e:
        path = response.request.url.path
        raise ApiError(f"Invalid JSON from {path}", response.status_code) from e


def _error_message(response: httpx.Response) -> str:
    """Pull the gateway's ``error``/``detail`` message out of an error body."""
    try:
        body = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Request to {response.request.url.path} failed"
