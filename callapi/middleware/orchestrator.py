"""
Call Orchestrator
=================

The dispatch-pipeline stage that processes API-call requests (RSAAs).

Lifecycle of one request:
  PASS-THROUGH? → VALIDATE → NORMALIZE → BAILOUT → ENDPOINT → HEADERS
  → OPTIONS → REQUEST-SENT → FETCH → SUCCESS | FAILURE

Design principles:
- Each step is an async function returning a StepOutcome; the first
  non-CONTINUE outcome ends the request
- A failed step becomes exactly one request-type error notification
- Nothing raised by user callables or the transport escapes ``dispatch``
- No state is shared between requests; the state accessor is only read

Usage:
    middleware = ApiMiddleware(store.get_state)
    dispatch = middleware(store.dispatch)
    await dispatch({CALL_API: {...}})
"""

from __future__ import annotations

import functools
import inspect
import uuid
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from callapi.core.exceptions import InvalidRSAA, RequestError
from callapi.core.types import CALL_API, Transport
from callapi.infra.telemetry import (
    get_logger,
    reset_request_context,
    set_request_context,
)

from .descriptors import action_with, normalize_type_descriptors
from .fields import as_field
from .validation import is_rsaa, request_type_of, validate_rsaa

logger = get_logger(__name__)

Dispatch = Callable[[Any], Any]
Validator = Callable[[Any], list[str]]

# ── Step Contracts ───────────────────────────────────────────────────────────

class StepStatus(StrEnum):
    CONTINUE = "continue"
    BAILED = "bailed"
    FAILED = "failed"

@dataclass(frozen=True, slots=True)
class StepOutcome:
    """Result of one orchestration step."""

    step: str
    status: StepStatus
    value: Any = None
    error: RequestError | None = None

    @classmethod
    def ok(cls, step: str, value: Any = None) -> StepOutcome:
        return cls(step=step, status=StepStatus.CONTINUE, value=value)

    @classmethod
    def failed(cls, step: str, message: str) -> StepOutcome:
        return cls(step=step, status=StepStatus.FAILED, error=RequestError(message))

async def _forward(next_: Dispatch, action: Any) -> Any:
    result = next_(action)
    if inspect.isawaitable(result):
        result = await result
    return result

# ── Middleware ───────────────────────────────────────────────────────────────

class ApiMiddleware:
    """
    Pipeline stage that performs the HTTP call described by an RSAA.

    Args:
        get_state:  Zero-argument callable returning the current app state.
        transport:  ``async transport(endpoint, config) -> response``.
                    Defaults to an :class:`HttpxTransport` owned by the
                    middleware and released by :meth:`aclose`.
        validator:  ``validator(request) -> list[str]``; defaults to
                    :func:`validate_rsaa`.
    """

    def __init__(
        self,
        get_state: Callable[[], Any],
        *,
        transport: Transport | None = None,
        validator: Validator = validate_rsaa,
    ):
        self._owns_transport = transport is None
        if transport is None:
            from callapi.transport import HttpxTransport

            transport = HttpxTransport()
        self._get_state = get_state
        self._transport = transport
        self._validator = validator

    def __call__(self, next_: Dispatch) -> Callable[[Any], Awaitable[Any]]:
        """Bind the stage to the next dispatcher in the pipeline."""

        async def dispatch(action: Any) -> Any:
            return await self.handle(action, next_)

        return dispatch

    async def aclose(self) -> None:
        """Close the default transport; a transport passed in is left open."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> ApiMiddleware:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def handle(self, action: Any, next_: Dispatch) -> Any:
        """Process one request, forwarding notifications to ``next_``."""
        if not is_rsaa(action):
            return await _forward(next_, action)

        request_type = request_type_of(action)
        context_tokens = set_request_context(
            request_id=uuid.uuid4().hex[:8],
            action_type=str(request_type) if request_type is not None else None,
        )
        try:
            violations = self._validator(action)
            if violations:
                logger.warning("invalid_rsaa", violations="; ".join(violations))
                if request_type is None:
                    return None
                return await _forward(
                    next_,
                    {
                        "type": request_type,
                        "payload": InvalidRSAA(violations),
                        "error": True,
                    },
                )

            execution = _CallExecution(
                action=action,
                next_=next_,
                get_state=self._get_state,
                transport=self._transport,
            )
            return await execution.run()
        finally:
            reset_request_context(context_tokens)

# ── Execution Context ────────────────────────────────────────────────────────

class _CallExecution:
    """Per-request mutable execution context. Not shared across requests."""

    def __init__(
        self,
        action: Mapping[str, Any],
        next_: Dispatch,
        get_state: Callable[[], Any],
        transport: Transport,
    ):
        self.action = action
        self.next_ = next_
        self.get_state = get_state
        self.transport = transport

        call_api = action[CALL_API]
        self.request_type, self.success_type, self.failure_type = (
            normalize_type_descriptors(call_api["types"])
        )
        self.method = str(call_api.get("method") or "GET").upper()
        self.body = call_api.get("body")
        self.credentials = call_api.get("credentials")
        self.bailout = call_api.get("bailout", False)

        # Replaced by resolved values as the field steps succeed
        self.fields: dict[str, Any] = {
            "endpoint": call_api.get("endpoint"),
            "headers": call_api.get("headers"),
            "options": call_api.get("options") or {},
        }
        self.response: Any = None

    async def run(self) -> Any:
        steps: tuple[Callable[[], Awaitable[StepOutcome]], ...] = (
            self._check_bailout,
            functools.partial(self._resolve_field, "endpoint"),
            functools.partial(self._resolve_field, "headers"),
            functools.partial(self._resolve_field, "options"),
            self._send_request,
            self._fetch,
        )
        for step in steps:
            outcome = await step()
            if outcome.status is StepStatus.BAILED:
                logger.debug("call_bailed_out")
                return None
            if outcome.status is StepStatus.FAILED:
                return await self._fail(outcome)
        return await self._respond()

    # ── Steps ────────────────────────────────────────────────────────

    async def _check_bailout(self) -> StepOutcome:
        if isinstance(self.bailout, bool):
            if self.bailout:
                return StepOutcome(step="bailout", status=StepStatus.BAILED)
            return StepOutcome.ok("bailout")
        # Only True or a function result abandons the call
        if not callable(self.bailout):
            return StepOutcome.ok("bailout")
        try:
            should_bail = await as_field(self.bailout).resolve(self.get_state())
        except Exception as e:
            logger.warning("bailout_failed", exc=e)
            return StepOutcome.failed("bailout", "[CALL_API].bailout function failed")
        if should_bail:
            return StepOutcome(step="bailout", status=StepStatus.BAILED)
        return StepOutcome.ok("bailout")

    async def _resolve_field(self, name: str) -> StepOutcome:
        try:
            value = await as_field(self.fields[name]).resolve(self.get_state())
        except Exception as e:
            logger.warning("field_resolution_failed", exc=e, field=name)
            return StepOutcome.failed(name, f"[CALL_API].{name} function failed")
        self.fields[name] = value
        return StepOutcome.ok(name, value)

    async def _send_request(self) -> StepOutcome:
        notification = await action_with(
            self.request_type, (self.action, self.get_state())
        )
        await _forward(self.next_, notification)
        return StepOutcome.ok("request")

    async def _fetch(self) -> StepOutcome:
        endpoint = self.fields["endpoint"]
        logger.debug("request_sent", endpoint=str(endpoint), method=self.method)
        try:
            config = {
                **(self.fields["options"] or {}),
                "method": self.method,
                "body": self.body,
                "credentials": self.credentials,
                "headers": self.fields["headers"],
            }
            self.response = await self.transport(endpoint, config)
        except Exception as e:
            logger.warning("transport_failed", exc=e, endpoint=str(endpoint))
            return StepOutcome.failed("fetch", str(e))
        return StepOutcome.ok("fetch", self.response)

    # ── Terminal notifications ──────────────────────────────────────

    async def _fail(self, outcome: StepOutcome) -> Any:
        notification = await action_with(
            {**self.request_type, "payload": outcome.error, "error": True},
            (self.action, self.get_state()),
        )
        return await _forward(self.next_, notification)

    async def _respond(self) -> Any:
        args = (self.action, self.get_state(), self.response)
        if self.response.ok:
            logger.debug("call_succeeded", status=self.response.status)
            notification = await action_with(self.success_type, args)
        else:
            logger.debug("call_failed", status=self.response.status)
            notification = await action_with(
                {**self.failure_type, "error": True}, args
            )
        return await _forward(self.next_, notification)
