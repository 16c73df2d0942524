"""Tests for the terminal query: pre-flight check, wire format, result delivery."""

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest

from careerjet.client import CareerjetClient
from careerjet.core.errors import TransportError, ValidationError


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it receives."""

    def __init__(self, response: httpx.Response | None = None, exc: Exception | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._response = response or httpx.Response(200, json={"hits": 3})
        self._exc = exc
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._exc is not None:
            raise self._exc
        return httpx.Response(
            self._response.status_code,
            headers=self._response.headers,
            content=self._response.content,
        )


ClientFactory = Callable[..., CareerjetClient]


@pytest.fixture
async def make_client() -> AsyncIterator[ClientFactory]:
    """Build clients on top of a transport; their httpx clients are closed afterwards."""
    opened: list[httpx.AsyncClient] = []

    def _make(transport: httpx.AsyncBaseTransport, **overrides: Any) -> CareerjetClient:
        config: dict[str, Any] = {
            "locale": "en",
            "affid": "A1",
            "user_agent": "UA",
            "user_ip": "1.2.3.4",
        }
        config.update(overrides)
        http = httpx.AsyncClient(transport=transport)
        opened.append(http)
        return CareerjetClient(config, http_client=http)

    yield _make
    for http in opened:
        await http.aclose()


# ---------------------------------------------------------------------------
# TestPreflight
# ---------------------------------------------------------------------------


class TestPreflight:
    async def test_valid_affid_reaches_transport(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport()
        await make_client(transport).query()
        assert len(transport.requests) == 1

    async def test_empty_affid_never_sends(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport()
        client = make_client(transport, affid="")
        with pytest.raises(ValidationError, match=r"affid is mandatory\.") as exc_info:
            await client.query()
        assert exc_info.value.field == "affid"
        assert transport.requests == []

    async def test_cleared_affid_never_sends(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport()
        client = make_client(transport)
        client._query["affid"] = None
        with pytest.raises(ValidationError, match="affid is mandatory"):
            await client.query()
        assert transport.requests == []

    async def test_preflight_failure_skips_callbacks(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport()
        client = make_client(transport, affid="")
        calls: list[Any] = []
        with pytest.raises(ValidationError):
            await client.query(calls.append, calls.append)
        assert calls == []


# ---------------------------------------------------------------------------
# TestEndToEnd
# ---------------------------------------------------------------------------


class TestEndToEnd:
    """Chain → GET → decoded JSON, as a caller sees it."""

    async def test_request_shape(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport()
        client = make_client(transport)
        client.keywords("java manager").location("London").sort_by("date").pagesize(10)

        await client.query()

        (request,) = transport.requests
        assert request.method == "GET"
        assert str(request.url).startswith(
            "http://public.api.careerjet.net/search?locale_code=en&affid=A1&",
        )
        params = dict(request.url.params)
        assert params.pop("locale_code") == "en"
        assert params == {
            "affid": "A1",
            "user_agent": "UA",
            "user_ip": "1.2.3.4",
            "sort": "date",
            "start_num": "1",
            "pagesize": "10",
            "keywords": "java manager",
            "location": "London",
        }

    async def test_success_callback_receives_decoded_json(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport(httpx.Response(200, json={"hits": 3}))
        successes: list[Any] = []
        failures: list[Any] = []

        result = await make_client(transport).keywords("java").query(successes.append, failures.append)

        assert successes == [{"hits": 3}]
        assert failures == []
        assert result == {"hits": 3}

    async def test_transport_failure_goes_to_failure_callback(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport(exc=httpx.ConnectError("connection refused"))
        successes: list[Any] = []
        failures: list[TransportError] = []

        result = await make_client(transport).query(successes.append, failures.append)

        assert successes == []
        assert len(failures) == 1
        assert isinstance(failures[0].cause, httpx.ConnectError)
        assert result is None

    async def test_transport_failure_raises_without_callback(
        self, caplog: pytest.LogCaptureFixture, make_client: ClientFactory,
    ) -> None:
        transport = RecordingTransport(exc=httpx.ReadTimeout("timed out"))
        with pytest.raises(TransportError, match="Request to Careerjet failed") as exc_info:
            await make_client(transport).query()
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)
        assert "Careerjet query failed" in caplog.text

    async def test_malformed_body_is_a_failure(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport(httpx.Response(200, text="<html>oops</html>"))
        successes: list[Any] = []
        failures: list[TransportError] = []

        await make_client(transport).query(successes.append, failures.append)

        assert successes == []
        assert len(failures) == 1
        assert "Failed to parse Careerjet response as JSON" in str(failures[0])
        assert failures[0].status_code == 200

    async def test_error_status_with_json_body_is_delivered(self, make_client: ClientFactory) -> None:
        body = {"type": "ERROR", "error": "invalid affid"}
        transport = RecordingTransport(httpx.Response(400, json=body))
        assert await make_client(transport).query() == body

    async def test_success_callback_only(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport(httpx.Response(200, json=[1, 2]))
        seen: list[Any] = []
        await make_client(transport).query(seen.append)
        assert seen == [[1, 2]]


# ---------------------------------------------------------------------------
# TestReuse
# ---------------------------------------------------------------------------


class TestReuse:
    async def test_state_accumulates_across_queries(self, make_client: ClientFactory) -> None:
        transport = RecordingTransport()
        client = make_client(transport)

        await client.keywords("java").query()
        await client.page(2).query()

        first, second = (dict(r.url.params) for r in transport.requests)
        assert "page" not in first
        assert second["page"] == "2"
        assert second["keywords"] == "java"

    async def test_concurrent_queries_send_snapshots(self, make_client: ClientFactory) -> None:
        release = asyncio.Event()
        seen: list[dict[str, str]] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            await release.wait()
            seen.append(dict(request.url.params))
            return httpx.Response(200, json={})

        client = make_client(httpx.MockTransport(handler))
        client.keywords("first")
        task_one = asyncio.create_task(client.query())
        await asyncio.sleep(0)
        client.keywords("second")
        task_two = asyncio.create_task(client.query())
        await asyncio.sleep(0)
        release.set()
        await asyncio.gather(task_one, task_two)

        assert sorted(p["keywords"] for p in seen) == ["first", "second"]
        assert all(p["locale_code"] == "en" for p in seen)


# ---------------------------------------------------------------------------
# TestOwnClient
# ---------------------------------------------------------------------------


class TestOwnClient:
    async def test_short_lived_client_used_when_none_injected(
        self, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        transport = RecordingTransport()
        real_client = httpx.AsyncClient

        def factory(**kwargs: Any) -> httpx.AsyncClient:
            assert kwargs["timeout"] == httpx.Timeout(None)
            return real_client(transport=transport, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", factory)
        client = CareerjetClient(
            {"locale": "en", "affid": "A1", "user_agent": "UA", "user_ip": "1.2.3.4"},
        )
        assert await client.query() == {"hits": 3}
        assert len(transport.requests) == 1
        assert transport.requests[0].url.params["locale_code"] == "en"
