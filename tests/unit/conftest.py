"""Shared fakes for the unit tests."""

from dataclasses import dataclass, field
from typing import Any

import pytest


@dataclass
class StubResponse:
    """Minimal ResponseLike with a JSON body."""

    ok: bool = True
    status: int = 200
    status_text: str = "OK"
    body: Any = None
    content_type: str | None = "application/json"
    json_calls: int = 0

    @property
    def headers(self) -> dict[str, str]:
        return {"Content-Type": self.content_type} if self.content_type else {}

    async def json(self) -> Any:
        self.json_calls += 1
        return self.body


@dataclass
class RecordingTransport:
    """Records calls and returns a fixed response (or raises)."""

    response: Any = None
    exc: Exception | None = None
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    async def __call__(self, endpoint, config):
        self.calls.append((endpoint, dict(config)))
        if self.exc is not None:
            raise self.exc
        return self.response


@pytest.fixture
def dispatched():
    return []
