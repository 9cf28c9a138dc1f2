"""Tests for apitree.client.transport."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from apitree.client.transport import Transport, extract_response_data
from apitree.exceptions import (
    AuthError,
    ConnectionError_,
    DocumentParseError,
    NotFoundError,
    ServerError,
)
from apitree.exit_codes import EXIT_AUTH_FAILURE, EXIT_CONNECTION_ERROR, EXIT_NOT_FOUND

URL = "https://api.example.com/v1/items"


def _response(status: int, **kwargs: Any) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", URL), **kwargs)


# ---------------------------------------------------------------------------
# Transport.request
# ---------------------------------------------------------------------------


class TestRequest:
    def test_sends_method_params_headers(self, make_transport) -> None:
        seen: list[httpx.Request] = []
        transport = make_transport({URL: {"ok": True}}, seen)

        async def go() -> httpx.Response:
            async with transport:
                return await transport.request(
                    "get", URL, params={"q": "x"}, headers={"X-Test": "1"}
                )

        response = asyncio.run(go())

        assert response.json() == {"ok": True}
        assert seen[0].method == "GET"
        assert seen[0].url.params["q"] == "x"
        assert seen[0].headers["X-Test"] == "1"

    def test_json_body(self, make_transport) -> None:
        seen: list[httpx.Request] = []
        transport = make_transport({URL: {}}, seen)
        asyncio.run(transport.request("POST", URL, json_body={"name": "n"}))
        assert seen[0].headers["content-type"] == "application/json"
        assert b'"name"' in seen[0].content

    def test_content_wins_over_json(self, make_transport) -> None:
        seen: list[httpx.Request] = []
        transport = make_transport({URL: {}}, seen)
        asyncio.run(transport.request("POST", URL, json_body={"a": 1}, content=b"raw"))
        assert seen[0].content == b"raw"

    @pytest.mark.parametrize(
        "status,exc_type",
        [
            (401, AuthError),
            (403, AuthError),
            (404, NotFoundError),
            (400, ServerError),
            (429, ServerError),
            (500, ServerError),
            (503, ServerError),
        ],
    )
    def test_status_mapping(self, make_transport, status: int, exc_type: type) -> None:
        transport = make_transport({URL: _response(status, json={"error": {"message": "nope"}})})
        with pytest.raises(exc_type, match=f"HTTP {status}: nope"):
            asyncio.run(transport.request("GET", URL))

    def test_message_from_detail(self, make_transport) -> None:
        transport = make_transport({URL: _response(422, json={"detail": "bad field"})})
        with pytest.raises(ServerError, match="bad field"):
            asyncio.run(transport.request("GET", URL))

    def test_message_from_text_body(self, make_transport) -> None:
        transport = make_transport({URL: _response(502, text="Bad Gateway")})
        with pytest.raises(ServerError, match="HTTP 502: Bad Gateway"):
            asyncio.run(transport.request("GET", URL))

    def test_exit_codes(self, make_transport) -> None:
        transport = make_transport({URL: _response(401)})
        with pytest.raises(AuthError) as exc_info:
            asyncio.run(transport.request("GET", URL))
        assert exc_info.value.exit_code == EXIT_AUTH_FAILURE

        with pytest.raises(NotFoundError) as exc_info:
            asyncio.run(transport.request("GET", "https://api.example.com/missing"))
        assert exc_info.value.exit_code == EXIT_NOT_FOUND

    def test_network_error(self, make_transport) -> None:
        transport = make_transport({URL: httpx.ConnectError("refused")})
        with pytest.raises(ConnectionError_, match="refused") as exc_info:
            asyncio.run(transport.request("GET", URL))
        assert exc_info.value.exit_code == EXIT_CONNECTION_ERROR

    def test_timeout(self, make_transport) -> None:
        transport = make_transport({URL: httpx.ReadTimeout("slow")})
        with pytest.raises(ConnectionError_):
            asyncio.run(transport.request("GET", URL))

    def test_client_reopened_after_close(self, make_transport) -> None:
        transport = make_transport({URL: {"n": 1}})

        async def go() -> Any:
            await transport.request("GET", URL)
            await transport.aclose()
            return (await transport.request("GET", URL)).json()

        assert asyncio.run(go()) == {"n": 1}

    def test_concurrent_requests_share_client(self, make_transport) -> None:
        seen: list[httpx.Request] = []
        routes = {f"https://api.example.com/{i}": {"i": i} for i in range(5)}
        transport = make_transport(routes, seen)

        async def go() -> list[Any]:
            responses = await asyncio.gather(
                *(transport.request("GET", url) for url in routes)
            )
            return [r.json()["i"] for r in responses]

        assert asyncio.run(go()) == [0, 1, 2, 3, 4]
        assert len(seen) == 5


# ---------------------------------------------------------------------------
# Transport.get_document
# ---------------------------------------------------------------------------


class TestGetDocument:
    def test_json_document(self, make_transport) -> None:
        transport = make_transport({URL: {"items": []}})
        assert asyncio.run(transport.get_document(URL)) == {"items": []}

    def test_yaml_document(self, make_transport) -> None:
        transport = make_transport({
            URL: _response(200, text="name: x\n", headers={"content-type": "application/yaml"}),
        })
        assert asyncio.run(transport.get_document(URL)) == {"name": "x"}

    def test_sends_headers(self, make_transport) -> None:
        seen: list[httpx.Request] = []
        transport = make_transport({URL: {}}, seen)
        asyncio.run(transport.get_document(URL, headers={"X-User-Ip": "0.0.0.0"}))
        assert seen[0].headers["X-User-Ip"] == "0.0.0.0"

    def test_non_object_rejected(self, make_transport) -> None:
        transport = make_transport({URL: [1, 2]})
        with pytest.raises(DocumentParseError):
            asyncio.run(transport.get_document(URL))


# ---------------------------------------------------------------------------
# extract_response_data
# ---------------------------------------------------------------------------


class TestExtractResponseData:
    def test_json(self) -> None:
        assert extract_response_data(_response(200, json={"a": 1})) == {"a": 1}

    def test_text(self) -> None:
        assert extract_response_data(_response(200, text="hello")) == "hello"

    def test_empty(self) -> None:
        assert extract_response_data(_response(204)) is None


def test_default_config() -> None:
    transport = Transport()
    assert transport._client is None
    assert transport._config.timeout == 30.0
