"""
HTTP Transport
==============

Default transport for :class:`~callapi.middleware.ApiMiddleware`, built on
``httpx.AsyncClient``, plus a synthesized response for bodies replayed from
somewhere other than the network.

Any ``async (endpoint, config) -> ResponseLike`` callable can stand in for
:class:`HttpxTransport`; the orchestrator does not tell them apart.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from callapi.core.config import Settings, get_settings
from callapi.infra.telemetry import get_logger

logger = get_logger(__name__)

# Options forwarded to ``AsyncClient.request`` as-is; ``cookies`` is handled
# separately because httpx deprecates per-request cookies
PASSTHROUGH_OPTIONS = ("params", "timeout", "follow_redirects", "extensions")

# ── Responses ────────────────────────────────────────────────────────────────

class HttpResponse:
    """Adapts ``httpx.Response`` to the ResponseLike contract."""

    __slots__ = ("_response",)

    def __init__(self, response: httpx.Response):
        self._response = response

    @property
    def ok(self) -> bool:
        return self._response.is_success

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def status_text(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def raw(self) -> httpx.Response:
        return self._response

    async def json(self) -> Any:
        return self._response.json()

    def __repr__(self) -> str:
        return f"<HttpResponse [{self.status} {self.status_text}]>"

class _FakeHeaders:
    """Answers every lookup; only JSON bodies can be replayed."""

    def get(self, name: str = "", default: Any = None) -> str:
        if name.lower() == "content-type":
            return "application/json"
        return "faked header - cache is only supported for json responses"

@dataclass(frozen=True, slots=True)
class FakeJsonResponse:
    """A successful 200 response whose ``json()`` returns ``body``."""

    body: Any
    ok: bool = True
    status: int = 200
    status_text: str = "OK"
    headers: _FakeHeaders = field(default_factory=_FakeHeaders)

    def json(self) -> Any:
        return self.body

def fake_json_response(body: Any) -> FakeJsonResponse:
    """Synthesize a response that replays an already-decoded JSON body."""
    return FakeJsonResponse(body)

# ── Transport ────────────────────────────────────────────────────────────────

class HttpxTransport:
    """
    Performs calls with an ``httpx.AsyncClient``.

    The client is created lazily from :class:`Settings` unless one is passed
    in; a passed-in client is never closed by this transport.

    Usage:
        async with HttpxTransport() as transport:
            response = await transport("https://api.example.com/users", {"method": "GET"})
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        settings: Settings | None = None,
    ):
        self._client = client
        self._owns_client = client is None
        self._settings = settings or get_settings()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._settings.HTTP_TIMEOUT,
                follow_redirects=self._settings.HTTP_FOLLOW_REDIRECTS,
                headers={"User-Agent": self._settings.HTTP_USER_AGENT},
            )
        return self._client

    async def __call__(self, endpoint: str, config: Mapping[str, Any]) -> HttpResponse:
        kwargs: dict[str, Any] = {
            key: config[key] for key in PASSTHROUGH_OPTIONS if key in config
        }

        body = config.get("body")
        if isinstance(body, (str, bytes)):
            kwargs["content"] = body
        elif body is not None:
            kwargs["json"] = body

        credentials = config.get("credentials")
        if credentials is not None:
            # Browser credential modes have no httpx counterpart
            logger.debug("credentials_ignored", credentials=str(credentials))

        headers = httpx.Headers(config.get("headers"))
        cookies = config.get("cookies")
        if cookies:
            pairs = [f"{name}={value}" for name, value in dict(cookies).items()]
            if "Cookie" in headers:
                pairs.insert(0, headers["Cookie"])
            headers["Cookie"] = "; ".join(pairs)

        method = str(config.get("method") or "GET").upper()
        response = await self._get_client().request(
            method,
            endpoint,
            headers=headers,
            **kwargs,
        )
        logger.debug(
            "response_received",
            endpoint=endpoint,
            status=response.status_code,
        )
        return HttpResponse(response)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
