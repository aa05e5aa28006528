"""Transports: the default httpx client and synthesized responses."""

from .http import FakeJsonResponse, HttpResponse, HttpxTransport, fake_json_response

__all__ = [
    "FakeJsonResponse",
    "HttpResponse",
    "HttpxTransport",
    "fake_json_response",
]
