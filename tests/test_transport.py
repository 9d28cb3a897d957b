import json

import httpx
import pytest

from client.transport import HttpxTransport, TransportError


def make_transport(handler) -> HttpxTransport:
    return HttpxTransport(
        "http://api.test/api/v1",
        {"Accept": "application/json"},
        transport=httpx.MockTransport(handler),
    )


async def test_json_body_and_headers_are_sent():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"success": True, "data": {"id": "e1"}})

    transport = make_transport(handler)
    response = await transport.dispatch(
        "POST", "/enrollments", {"Authorization": "Bearer T1"}, {"courseId": "c1"}, 5.0, {"ref": "x"}
    )

    assert response.status == 201
    assert response.ok
    assert response.body == {"success": True, "data": {"id": "e1"}}
    assert seen["url"] == "http://api.test/api/v1/enrollments?ref=x"
    assert seen["headers"]["Authorization"] == "Bearer T1"
    assert seen["headers"]["Accept"] == "application/json"
    assert seen["body"] == {"courseId": "c1"}
    await transport.aclose()


async def test_text_and_empty_bodies():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/text"):
            return httpx.Response(502, text="Bad Gateway")
        return httpx.Response(204)

    transport = make_transport(handler)

    text = await transport.dispatch("GET", "/text", {}, None, 5.0)
    empty = await transport.dispatch("DELETE", "/empty", {}, None, 5.0)

    assert (text.status, text.body, text.ok) == (502, "Bad Gateway", False)
    assert (empty.status, empty.body) == (204, None)


async def test_timeout_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(TransportError) as exc_info:
        await make_transport(handler).dispatch("GET", "/courses", {}, None, 0.01)

    assert exc_info.value.timed_out is True


async def test_connection_error_raises_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as exc_info:
        await make_transport(handler).dispatch("GET", "/courses", {}, None, 1.0)

    assert exc_info.value.timed_out is False
