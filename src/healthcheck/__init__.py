"""Health check runner: check registry, result summarizer, diagnostics."""

from .diagnostic import Diagnostic, summarize
from .errors import (
    HealthCheckError,
    HealthCheckWarning,
    InvalidReturnShape,
    MissingCheckError,
    NoChecksRegisteredError,
    NotAnInstanceError,
    UnresolvedCheckError,
    UnsupportedCheckError,
    ValidationWarning,
)
from .registry import CheckRecord, HealthCheck
from .status import Status

__all__ = [
    "CheckRecord",
    "Diagnostic",
    "HealthCheck",
    "HealthCheckError",
    "HealthCheckWarning",
    "InvalidReturnShape",
    "MissingCheckError",
    "NoChecksRegisteredError",
    "NotAnInstanceError",
    "Status",
    "UnresolvedCheckError",
    "UnsupportedCheckError",
    "ValidationWarning",
    "summarize",
]
