"""
callapi
=======

A dispatch-pipeline stage that turns API-call requests (RSAAs) into HTTP
calls and request/success/failure notifications (FSAs).
"""

from callapi.core.exceptions import (
    ApiError,
    CallApiError,
    InternalError,
    InvalidRSAA,
    RequestError,
)
from callapi.core.types import CALL_API, CredentialsPolicy, HttpMethod
from callapi.middleware import (
    ApiMiddleware,
    get_json,
    is_rsaa,
    is_valid_rsaa,
    normalize_type_descriptors,
    validate_rsaa,
)
from callapi.transport import HttpxTransport, fake_json_response

__version__ = "1.0.0"

__all__ = [
    "CALL_API",
    "ApiError",
    "ApiMiddleware",
    "CallApiError",
    "CredentialsPolicy",
    "HttpMethod",
    "HttpxTransport",
    "InternalError",
    "InvalidRSAA",
    "RequestError",
    "fake_json_response",
    "get_json",
    "is_rsaa",
    "is_valid_rsaa",
    "normalize_type_descriptors",
    "validate_rsaa",
]
