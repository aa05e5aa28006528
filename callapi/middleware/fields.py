"""
Dynamic Fields
==============

``endpoint``, ``headers``, ``options`` and ``bailout`` accept either a value
or a function of the current state. Both cases are wrapped in one small
tagged union so the orchestrator resolves every field the same way.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias


@dataclass(frozen=True, slots=True)
class Static:
    """A field given as a plain value."""

    value: Any

    async def resolve(self, state: Any) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class Dynamic:
    """A field given as a function of state; may return an awaitable."""

    fn: Callable[[Any], Any]

    async def resolve(self, state: Any) -> Any:
        result = self.fn(state)
        if inspect.isawaitable(result):
            result = await result
        return result


Field: TypeAlias = Static | Dynamic


def as_field(value: Any) -> Field:
    """Tag a raw descriptor value as static or dynamic."""
    if callable(value):
        return Dynamic(value)
    return Static(value)
