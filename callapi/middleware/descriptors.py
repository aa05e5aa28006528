"""
Lifecycle Descriptors
=====================

Helpers that turn the ``types`` triple of a call descriptor into finished
notifications:

- get_json:                   decode a response body when it is JSON
- normalize_type_descriptors: expand bare identifiers, inject default payloads
- action_with:                resolve a descriptor's payload/meta into an FSA
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping, Sequence
from typing import Any

from callapi.core.exceptions import ApiError, InternalError
from callapi.core.types import Notification, ResponseLike, TypeDescriptor
from callapi.infra.telemetry import get_logger

from .validation import is_type_identifier

logger = get_logger(__name__)

EMPTY_STATUS_CODES = frozenset({204, 205})


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def get_json(response: ResponseLike) -> Any:
    """
    Extract the JSON body of a response.

    Returns ``None`` without touching the body for 204/205 responses and for
    responses whose ``Content-Type`` does not mention JSON.
    """
    if response.status in EMPTY_STATUS_CODES:
        return None
    content_type = response.headers.get("Content-Type")
    if not content_type or "json" not in content_type:
        return None
    return await _maybe_await(response.json())


async def _success_payload(request: Any, state: Any, response: ResponseLike) -> Any:
    return await get_json(response)


async def _failure_payload(request: Any, state: Any, response: ResponseLike) -> ApiError:
    body = await get_json(response)
    return ApiError(response.status, response.status_text, body)


def _expand(descriptor: Any) -> TypeDescriptor:
    if is_type_identifier(descriptor):
        return {"type": descriptor}
    return dict(descriptor)


def normalize_type_descriptors(
    types: Sequence[Any],
) -> tuple[TypeDescriptor, TypeDescriptor, TypeDescriptor]:
    """
    Blow up bare identifiers into full lifecycle descriptors and add defaults.

    The success descriptor gets a ``payload`` that decodes the JSON body, the
    failure descriptor one that wraps the decoded body in an :class:`ApiError`.
    Keys given explicitly always win over these defaults. The input is never
    mutated.
    """
    request_type, success_type, failure_type = types
    return (
        _expand(request_type),
        {"payload": _success_payload, **_expand(success_type)},
        {"payload": _failure_payload, **_expand(failure_type)},
    )


async def action_with(
    descriptor: Mapping[str, Any], args: Sequence[Any]
) -> Notification:
    """
    Evaluate a lifecycle descriptor to an FSA.

    ``payload`` and ``meta`` may be plain values or callables taking ``args``
    (``request, state[, response]``) and returning a value or an awaitable.
    A failing resolver never propagates: the payload becomes an
    :class:`InternalError` and ``error`` is set. A failing ``meta`` resolver
    also drops ``meta`` and overwrites any payload already resolved.
    """
    action: Notification = dict(descriptor)

    if "payload" in action:
        try:
            payload = action["payload"]
            action["payload"] = await _maybe_await(
                payload(*args) if callable(payload) else payload
            )
        except Exception as e:
            logger.warning(
                "payload_resolver_failed", exc=e, notification_type=str(action.get("type"))
            )
            action["payload"] = InternalError(str(e))
            action["error"] = True

    if "meta" in action:
        try:
            meta = action["meta"]
            action["meta"] = await _maybe_await(meta(*args) if callable(meta) else meta)
        except Exception as e:
            logger.warning(
                "meta_resolver_failed", exc=e, notification_type=str(action.get("type"))
            )
            del action["meta"]
            action["payload"] = InternalError(str(e))
            action["error"] = True

    return action
