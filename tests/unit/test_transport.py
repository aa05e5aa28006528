"""
Unit tests for the httpx transport and synthesized responses.

Uses ``httpx.MockTransport`` so no network access is needed.
"""

import json

import httpx
import pytest

from callapi.core.config import Settings
from callapi.core.types import CALL_API
from callapi.middleware import ApiMiddleware, get_json
from callapi.transport import HttpResponse, HttpxTransport, fake_json_response


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFakeJsonResponse:
    def test_shape(self):
        res = fake_json_response({"a": 1})
        assert res.ok is True
        assert res.status == 200
        assert res.status_text == "OK"
        assert res.json() == {"a": 1}

    def test_headers(self):
        res = fake_json_response(None)
        assert res.headers.get("Content-Type") == "application/json"
        assert res.headers.get("content-type") == "application/json"
        assert "faked header" in res.headers.get("ETag")


class TestHttpxTransport:
    @pytest.mark.asyncio
    async def test_request_mapping(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["method"] = request.method
            captured["url"] = str(request.url)
            captured["auth"] = request.headers.get("Authorization")
            captured["body"] = json.loads(request.content)
            captured["cookie"] = request.headers.get("Cookie")
            captured["timeout"] = request.extensions["timeout"]["read"]
            captured["trace"] = request.extensions.get("trace_tag")
            return httpx.Response(201, json={"id": 1})

        async with mock_client(handler) as client:
            transport = HttpxTransport(client)
            res = await transport(
                "http://127.0.0.1/api/users",
                {
                    "method": "post",
                    "body": {"name": "ada"},
                    "headers": {"Authorization": "Bearer t"},
                    "credentials": "include",
                    "params": {"page": 2},
                    "cookies": {"sid": "abc", "lang": "en"},
                    "timeout": 2.5,
                    "extensions": {"trace_tag": "users"},
                },
            )

        assert captured == {
            "method": "POST",
            "url": "http://127.0.0.1/api/users?page=2",
            "auth": "Bearer t",
            "body": {"name": "ada"},
            "cookie": "sid=abc; lang=en",
            "timeout": 2.5,
            "trace": "users",
        }
        assert isinstance(res, HttpResponse)
        assert res.ok is True
        assert res.status == 201
        assert res.status_text == "Created"
        assert await res.json() == {"id": 1}

    @pytest.mark.asyncio
    async def test_cookies_appended_to_explicit_cookie_header(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["cookie"] = request.headers.get("Cookie")
            return httpx.Response(200)

        async with mock_client(handler) as client:
            await HttpxTransport(client)(
                "http://127.0.0.1/x",
                {
                    "method": "GET",
                    "headers": {"Cookie": "theme=dark"},
                    "cookies": {"sid": "abc"},
                },
            )

        assert captured["cookie"] == "theme=dark; sid=abc"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("follow, expected", [(True, 200), (False, 302)])
    async def test_follow_redirects_option(self, follow, expected):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(302, headers={"Location": "/new"})
            return httpx.Response(200)

        async with mock_client(handler) as client:
            res = await HttpxTransport(client)(
                "http://127.0.0.1/old", {"method": "GET", "follow_redirects": follow}
            )

        assert res.status == expected

    @pytest.mark.asyncio
    async def test_string_body_sent_raw(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["content"] = request.content
            return httpx.Response(204)

        async with mock_client(handler) as client:
            res = await HttpxTransport(client)(
                "http://127.0.0.1/raw", {"method": "PUT", "body": "a=1&b=2"}
            )

        assert captured["content"] == b"a=1&b=2"
        assert await get_json(res) is None

    @pytest.mark.asyncio
    async def test_non_ok_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="missing")

        async with mock_client(handler) as client:
            res = await HttpxTransport(client)("http://127.0.0.1/x", {"method": "GET"})

        assert res.ok is False
        assert res.status == 404
        assert res.status_text == "Not Found"
        assert await get_json(res) is None

    @pytest.mark.asyncio
    async def test_network_error_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with mock_client(handler) as client:
            with pytest.raises(httpx.ConnectError):
                await HttpxTransport(client)("http://127.0.0.1/x", {"method": "GET"})

    @pytest.mark.asyncio
    async def test_external_client_not_closed(self):
        client = mock_client(lambda request: httpx.Response(200))
        async with HttpxTransport(client) as transport:
            await transport("http://127.0.0.1/x", {"method": "GET"})
        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_uses_settings(self):
        settings = Settings(HTTP_TIMEOUT=3.5, HTTP_USER_AGENT="tests/1.0")
        transport = HttpxTransport(settings=settings)
        client = transport._get_client()
        assert client.timeout.read == 3.5
        assert client.headers["User-Agent"] == "tests/1.0"
        await transport.aclose()
        assert client.is_closed is True


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_middleware_with_httpx_transport(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/users/1":
                return httpx.Response(200, json={"id": 1, "name": "ada"})
            return httpx.Response(500, json={"error": "boom"})

        dispatched = []
        async with mock_client(handler) as client:
            middleware = ApiMiddleware(
                lambda: {"base": "http://127.0.0.1/api"},
                transport=HttpxTransport(client),
            )
            dispatch = middleware(dispatched.append)
            for path in ("users/1", "broken"):
                await dispatch(
                    {
                        CALL_API: {
                            "endpoint": lambda state, path=path: f"{state['base']}/{path}",
                            "method": "GET",
                            "types": ["REQUEST", "SUCCESS", "FAILURE"],
                        }
                    }
                )

        assert [a["type"] for a in dispatched] == [
            "REQUEST", "SUCCESS", "REQUEST", "FAILURE",
        ]
        assert dispatched[1]["payload"] == {"id": 1, "name": "ada"}
        assert dispatched[3]["error"] is True
        assert dispatched[3]["payload"].status == 500
        assert dispatched[3]["payload"].response == {"error": "boom"}
