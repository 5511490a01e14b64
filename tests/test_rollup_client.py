from __future__ import annotations

import json

import httpx
import pytest

from taskledger.rollup.client import RollupClient


def _client(handler: httpx.MockTransport) -> RollupClient:
    http = httpx.Client(transport=handler, base_url="http://rollup.test")
    return RollupClient("http://rollup.test", client=http)


def test_finish_returns_none_on_202() -> None:
    seen: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/finish"
        seen.append(json.loads(request.content))
        return httpx.Response(202)

    client = _client(httpx.MockTransport(handler))

    assert client.finish("reject") is None
    assert seen == [{"status": "reject"}]


def test_finish_parses_next_request() -> None:
    body = {
        "request_type": "advance_state",
        "data": {"metadata": {"msg_sender": "0xabc"}, "payload": "0x7b7d"},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    request = _client(httpx.MockTransport(handler)).finish("accept")

    assert request is not None
    assert request.request_type == "advance_state"
    assert request.data["payload"] == "0x7b7d"


def test_finish_raises_on_server_error() -> None:
    client = _client(httpx.MockTransport(lambda request: httpx.Response(500)))
    with pytest.raises(httpx.HTTPStatusError):
        client.finish("accept")


def test_outputs_are_hex_encoded() -> None:
    posted: list[tuple[str, dict[str, str]]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        posted.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"index": 0})

    client = _client(httpx.MockTransport(handler))
    client.add_notice("ok")
    client.add_report("no")

    assert posted == [
        ("/notice", {"payload": "0x6f6b"}),
        ("/report", {"payload": "0x6e6f"}),
    ]


def test_injected_client_is_not_closed() -> None:
    http = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(202)))
    with RollupClient("http://unused", client=http):
        pass
    assert http.is_closed is False
