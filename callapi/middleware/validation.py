"""
RSAA Validation
===============

Recognises API-call requests (RSAAs) and checks them against the default
rule catalog. ``validate_rsaa`` is the default validator of
:class:`~callapi.middleware.orchestrator.ApiMiddleware`; any callable with the
same signature, ``(request) -> list[str]``, may replace it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from callapi.core.types import CALL_API, CredentialsPolicy, HttpMethod

VALID_CALL_API_KEYS = frozenset({
    "endpoint",
    "options",
    "method",
    "body",
    "headers",
    "credentials",
    "bailout",
    "types",
})

VALID_TYPE_DESCRIPTOR_KEYS = frozenset({"type", "payload", "meta"})

_SLOT_NAMES = ("request", "success", "failure")


def is_rsaa(obj: Any) -> bool:
    """Is the given request an API-call request?"""
    return isinstance(obj, Mapping) and CALL_API in obj


def is_type_identifier(obj: Any) -> bool:
    """Bare lifecycle identifiers are strings or enum members."""
    return isinstance(obj, (str, Enum))


def is_valid_type_descriptor(obj: Any) -> bool:
    """Is the given object a full lifecycle descriptor?"""
    if not isinstance(obj, Mapping):
        return False
    if not set(obj) <= VALID_TYPE_DESCRIPTOR_KEYS:
        return False
    return "type" in obj and is_type_identifier(obj["type"])


def _is_mapping_or_callable(obj: Any) -> bool:
    return isinstance(obj, Mapping) or callable(obj)


def validate_rsaa(request: Any) -> list[str]:
    """
    Check a request against the default rule catalog.

    Returns:
        Human-readable violations; an empty list means the request is valid.
    """
    if not is_rsaa(request):
        return ["RSAAs must be plain mappings with a [CALL_API] property"]

    errors = [f"Invalid root key: {key}" for key in request if key != CALL_API]

    call_api = request[CALL_API]
    if not isinstance(call_api, Mapping):
        errors.append("[CALL_API] property must be a plain mapping")
        return errors

    errors.extend(
        f"Invalid [CALL_API] key: {key}"
        for key in call_api
        if key not in VALID_CALL_API_KEYS
    )

    endpoint = call_api.get("endpoint")
    if endpoint is None:
        errors.append("[CALL_API] must have an endpoint property")
    elif not (isinstance(endpoint, str) or callable(endpoint)):
        errors.append("[CALL_API].endpoint property must be a string or a function")

    method = call_api.get("method")
    if method is None:
        errors.append("[CALL_API] must have a method property")
    elif not isinstance(method, str):
        errors.append("[CALL_API].method property must be a string")
    elif method.upper() not in HttpMethod.__members__:
        errors.append(f"Invalid [CALL_API].method: {method.upper()}")

    for name in ("headers", "options"):
        value = call_api.get(name)
        if value is not None and not _is_mapping_or_callable(value):
            errors.append(
                f"[CALL_API].{name} property must be undefined, "
                "a plain mapping, or a function"
            )

    credentials = call_api.get("credentials")
    if credentials is not None:
        if not isinstance(credentials, str):
            errors.append("[CALL_API].credentials property must be undefined, or a string")
        elif credentials not in {c.value for c in CredentialsPolicy}:
            errors.append(f"Invalid [CALL_API].credentials: {credentials}")

    bailout = call_api.get("bailout")
    if bailout is not None and not (isinstance(bailout, bool) or callable(bailout)):
        errors.append(
            "[CALL_API].bailout property must be undefined, a boolean, or a function"
        )

    types = call_api.get("types")
    if types is None:
        errors.append("[CALL_API] must have a types property")
    elif (
        isinstance(types, (str, bytes))
        or not isinstance(types, Sequence)
        or len(types) != 3
    ):
        errors.append("[CALL_API].types property must be an array of length 3")
    else:
        for slot, descriptor in zip(_SLOT_NAMES, types, strict=True):
            if not (is_type_identifier(descriptor) or is_valid_type_descriptor(descriptor)):
                errors.append(f"Invalid {slot} type")

    return errors


def is_valid_rsaa(request: Any) -> bool:
    """Is the given request a valid API-call request?"""
    return not validate_rsaa(request)


def request_type_of(request: Any) -> Any | None:
    """
    Best-effort lookup of the request-type identifier of a (possibly invalid)
    RSAA, used to report validation failures.
    """
    call_api = request.get(CALL_API) if isinstance(request, Mapping) else None
    if not isinstance(call_api, Mapping):
        return None
    types = call_api.get("types")
    if isinstance(types, (str, bytes)) or not isinstance(types, Sequence) or not types:
        return None
    request_type = types[0]
    if isinstance(request_type, Mapping):
        request_type = request_type.get("type")
    return request_type or None
