"""Tests for the retrying gateway client."""

from __future__ import annotations

import httpx
import orjson
import pytest

from earnsight.client import ApiClient
from earnsight.core.exceptions import ApiError, ClientError, TransientNetworkError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _client(
    handler,
    sleep: RecordingSleep,
    retry_attempts: int = 3,
    api_key: str | None = None,
) -> ApiClient:
    return ApiClient(
        base_url="http://gateway.test/api",
        retry_attempts=retry_attempts,
        retry_delay=1.0,
        api_key=api_key,
        sleep=sleep,
        transport=httpx.MockTransport(handler),
    )


def _sequence(*responses: httpx.Response | Exception):
    """Handler returning (or raising) each item in turn; records requests."""
    calls: list[httpx.Request] = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    return handler, calls


# ---------------------------------------------------------------------------
# Retry behaviour
# ---------------------------------------------------------------------------


class TestRetry:
    @pytest.mark.asyncio
    async def test_server_errors_retried_with_linear_backoff(self) -> None:
        sleep = RecordingSleep()
        handler, calls = _sequence(
            httpx.Response(503),
            httpx.Response(503),
            httpx.Response(200, json={"ok": True}),
        )
        client = _client(handler, sleep)

        result = await client.get("/quote", params={"symbol": "AAPL"})

        assert result == {"ok": True}
        assert len(calls) == 3
        assert sleep.delays == [1.0, 2.0]
        assert calls[0].url.path == "/api/quote"
        assert calls[0].url.params["symbol"] == "AAPL"

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self) -> None:
        sleep = RecordingSleep()
        handler, calls = _sequence(httpx.Response(404, json={"error": "Not found"}))
        client = _client(handler, sleep)

        with pytest.raises(ClientError) as exc_info:
            await client.get("/quote", params={"symbol": "ZZZZ"})

        assert exc_info.value.status == 404
        assert exc_info.value.message == "Not found"
        assert len(calls) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_network_errors_exhaust_to_transient_error(self) -> None:
        sleep = RecordingSleep()
        handler, calls = _sequence(
            httpx.ConnectError("refused"),
            httpx.ConnectError("refused"),
            httpx.ConnectError("refused"),
        )
        client = _client(handler, sleep, retry_attempts=2)

        with pytest.raises(TransientNetworkError) as exc_info:
            await client.get("/sp500")

        assert exc_info.value.status is None
        assert len(calls) == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_timeout_then_success(self) -> None:
        sleep = RecordingSleep()
        handler, calls = _sequence(
            httpx.ReadTimeout("slow"),
            httpx.Response(200, json=[1, 2]),
        )
        client = _client(handler, sleep)

        assert await client.get("/sp500") == [1, 2]
        assert sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_exhausted_server_errors_keep_last_status(self) -> None:
        sleep = RecordingSleep()
        handler, calls = _sequence(
            httpx.Response(500),
            httpx.Response(502, json={"error": "bad gateway", "message": "upstream down"}),
        )
        client = _client(handler, sleep, retry_attempts=1)

        with pytest.raises(ApiError) as exc_info:
            await client.get("/quote")

        assert not isinstance(exc_info.value, ClientError)
        assert exc_info.value.status == 502
        assert exc_info.value.message == "upstream down"
        assert "status 502" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_zero_retries_fails_fast(self) -> None:
        sleep = RecordingSleep()
        handler, calls = _sequence(httpx.Response(503))
        client = _client(handler, sleep, retry_attempts=0)

        with pytest.raises(ApiError):
            await client.get("/quote")
        assert len(calls) == 1
        assert sleep.delays == []

    def test_backoff_is_linear(self) -> None:
        client = ApiClient("http://gateway.test", retry_delay=0.5)
        assert [client.backoff(k) for k in (1, 2, 3)] == [0.5, 1.0, 1.5]


# ---------------------------------------------------------------------------
# Request / response handling
# ---------------------------------------------------------------------------


class TestRequest:
    @pytest.mark.asyncio
    async def test_no_content_returns_empty_dict(self) -> None:
        handler, _ = _sequence(httpx.Response(204))
        client = _client(handler, RecordingSleep())

        assert await client.post("/batch-quotes", json={"symbols": ["AAPL"]}) == {}

    @pytest.mark.asyncio
    async def test_post_sends_json_body_and_api_key(self) -> None:
        handler, calls = _sequence(httpx.Response(200, json=[]))
        client = _client(handler, RecordingSleep(), api_key="secret")

        await client.post("/batch-quotes", json={"symbols": ["AAPL", "MSFT"]})

        request = calls[0]
        assert request.method == "POST"
        assert orjson.loads(request.content) == {"symbols": ["AAPL", "MSFT"]}
        assert request.headers["X-API-Key"] == "secret"
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_no_api_key_header_by_default(self) -> None:
        handler, calls = _sequence(httpx.Response(200, json={}))
        client = _client(handler, RecordingSleep())

        await client.get("/quote")
        assert "X-API-Key" not in calls[0].headers

    @pytest.mark.asyncio
    async def test_invalid_json_raises_api_error(self) -> None:
        handler, _ = _sequence(httpx.Response(200, content=b"<html>oops</html>"))
        client = _client(handler, RecordingSleep())

        with pytest.raises(ApiError):
            await client.get("/quote")

    @pytest.mark.asyncio
    async def test_close_releases_client(self) -> None:
        handler, _ = _sequence(httpx.Response(200, json={}))
        client = _client(handler, RecordingSleep())
        await client.get("/quote")

        await client.close()
        assert client._http_client is None
