"""Error values carried in error notifications.

These are payloads, not control flow: the orchestrator constructs them and
places them in a notification's ``payload`` instead of raising them.

Includes:
- InvalidRSAA: the request failed validation
- InternalError: a payload or meta resolver raised
- RequestError: bailout/field evaluation or the transport call failed
- ApiError: the server answered with a non-ok status
"""

from datetime import UTC, datetime
from typing import Any


class CallApiError(Exception):
    """Base class for all error values produced by callapi."""

    name = "CallApiError"

    def __init__(self, message: str, error_code: str = "CALL_API_ERROR"):
        self.message = message
        self.error_code = error_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "name": self.name,
            "error": self.error_code,
            "message": self.message,
            "timestamp": self.timestamp,
        }


class InvalidRSAA(CallApiError):
    """An API-call request failed validation."""

    name = "InvalidRSAA"

    def __init__(self, validation_errors: list[str]):
        super().__init__("Invalid RSAA", error_code="INVALID_RSAA")
        self.validation_errors = list(validation_errors)

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["validation_errors"] = list(self.validation_errors)
        return base


class InternalError(CallApiError):
    """A payload or meta resolver failed while building a notification."""

    name = "InternalError"

    def __init__(self, message: str):
        super().__init__(message, error_code="INTERNAL_ERROR")


class RequestError(CallApiError):
    """The call could not be made (bailout, field function or network failure)."""

    name = "RequestError"

    def __init__(self, message: str):
        super().__init__(message, error_code="REQUEST_ERROR")


class ApiError(CallApiError):
    """The server responded, but not with a 2xx status."""

    name = "ApiError"

    def __init__(self, status: int, status_text: str, response: Any = None):
        super().__init__(f"{status} - {status_text}", error_code="API_ERROR")
        self.status = status
        self.status_text = status_text
        self.response = response

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base.update(
            {
                "status": self.status,
                "status_text": self.status_text,
                "response": self.response,
            }
        )
        return base
