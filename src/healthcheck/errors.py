"""Exceptions and warning categories raised by the health check runner.

Problems with how checks are registered or invoked are fatal and raise a
``HealthCheckError``. Problems with what a check returned are never fatal:
they are reported through :mod:`warnings` and the result is coerced.
"""

from __future__ import annotations


class HealthCheckError(Exception):
    """Base class for fatal registration and invocation errors."""


class NotAnInstanceError(HealthCheckError, TypeError):
    """An instance-only operation was called on the class."""


class MissingCheckError(HealthCheckError, ValueError):
    """A check declaration has no usable ``check``."""


class UnresolvedCheckError(HealthCheckError, LookupError):
    """A method name could not be found on the registering caller."""


class UnsupportedCheckError(HealthCheckError, TypeError):
    """The resolved invocant does not support the resolved method."""


class NoChecksRegisteredError(HealthCheckError, RuntimeError):
    """``check`` was called before any checks were registered."""


# ── Warning categories ───────────────────────────────────────────────────────


class HealthCheckWarning(UserWarning):
    """Base category for non-fatal result problems."""


class ValidationWarning(HealthCheckWarning):
    """A result has a missing or invalid id, status, timestamp or results."""


class InvalidReturnShape(HealthCheckWarning):
    """A check returned something other than a mapping or key/value pairs."""
