"""
Canonical Type Definitions
===========================

Single source of truth for shared types used across the codebase.

This module defines:
- CALL_API: the key that marks a request as an API-call request (RSAA)
- HttpMethod: HTTP verbs accepted in a call descriptor
- CredentialsPolicy: transport-level credential policy tokens
- ResponseLike / Transport: the minimal transport contract
- TypeDescriptor / Notification: lifecycle descriptor and FSA shapes
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from enum import StrEnum
from typing import Any, Protocol, TypeAlias

__all__ = [
    "CALL_API",
    "CredentialsPolicy",
    "HttpMethod",
    "Notification",
    "ResponseLike",
    "Transport",
    "TypeDescriptor",
]

CALL_API = "[CALL_API]"

class HttpMethod(StrEnum):
    """HTTP verbs a call descriptor may use."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"

class CredentialsPolicy(StrEnum):
    """Credential policies understood by the transport layer."""

    OMIT = "omit"
    SAME_ORIGIN = "same-origin"
    INCLUDE = "include"

# {type, payload?, meta?, error?}. Mappings rather than classes so that
# defaults can be merged shallowly and callers can pass plain dicts.
TypeDescriptor: TypeAlias = dict[str, Any]
Notification: TypeAlias = dict[str, Any]

class _Headers(Protocol):
    def get(self, name: str, default: Any = None) -> Any: ...

class ResponseLike(Protocol):
    """What the orchestrator needs from a response, real or synthesized."""

    ok: bool
    status: int
    status_text: str
    headers: _Headers

    def json(self) -> Any: ...

class Transport(Protocol):
    def __call__(
        self, endpoint: str, config: Mapping[str, Any]
    ) -> Awaitable[ResponseLike]: ...
