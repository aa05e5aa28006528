"""
Middleware Layer
================

Modules:
- validation:    RSAA recognition and the default rule catalog
- descriptors:   lifecycle descriptor normalization and resolution
- fields:        static/dynamic value-or-function fields
- orchestrator:  the ApiMiddleware pipeline stage
"""

from .descriptors import action_with, get_json, normalize_type_descriptors
from .orchestrator import ApiMiddleware, StepOutcome, StepStatus
from .validation import is_rsaa, is_valid_rsaa, is_valid_type_descriptor, validate_rsaa

__all__ = [
    "ApiMiddleware",
    "StepOutcome",
    "StepStatus",
    "action_with",
    "get_json",
    "is_rsaa",
    "is_valid_rsaa",
    "is_valid_type_descriptor",
    "normalize_type_descriptors",
    "validate_rsaa",
]
