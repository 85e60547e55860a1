"""Health check status values.

Statuses follow the Nagios plugin return codes, so the numeric aliases
0-3 map to OK, WARNING, CRITICAL and UNKNOWN.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class Status(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"

    @property
    def severity(self) -> int:
        """Rank used when rolling up child statuses, most severe is highest."""
        return _SEVERITY[self]

    @classmethod
    def parse(cls, value: Any) -> Status | None:
        """Return the canonical status for ``value`` or None if it isn't one.

        Accepts the names in any case and the numeric codes 0-3, either as
        ints or as single digit strings.
        """
        if isinstance(value, Status):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return _BY_CODE.get(value)
        if isinstance(value, str):
            if value in _DIGITS:
                return _BY_CODE[int(value)]
            try:
                return cls(value.upper())
            except ValueError:
                return None
        return None


# Indexes correspond to the Nagios plugin return codes.
_BY_CODE = dict(enumerate([Status.OK, Status.WARNING, Status.CRITICAL, Status.UNKNOWN]))
_DIGITS = ("0", "1", "2", "3")

_SEVERITY = {
    Status.OK: 0,
    Status.UNKNOWN: 1,
    Status.WARNING: 2,
    Status.CRITICAL: 3,
}


def worst(statuses: list[Status]) -> Status | None:
    """Most severe of ``statuses``, None when empty."""
    return max(statuses, key=lambda s: s.severity, default=None)
