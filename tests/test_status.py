"""Tests for status parsing and severity."""

from __future__ import annotations

import pytest

from healthcheck.status import Status, worst


class TestParse:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("OK", Status.OK),
            ("ok", Status.OK),
            ("Warning", Status.WARNING),
            ("critical", Status.CRITICAL),
            ("UNKNOWN", Status.UNKNOWN),
            (0, Status.OK),
            (1, Status.WARNING),
            (2, Status.CRITICAL),
            (3, Status.UNKNOWN),
            ("2", Status.CRITICAL),
            (Status.WARNING, Status.WARNING),
        ],
    )
    def test_accepted(self, value, expected) -> None:
        assert Status.parse(value) is expected

    @pytest.mark.parametrize(
        "value", [None, "", "bogus", 4, "12", -1, True, 1.0, ["OK"], "²", "02", "٣", " 1"],
    )
    def test_rejected(self, value) -> None:
        assert Status.parse(value) is None

    def test_value_is_plain_string(self) -> None:
        assert Status.CRITICAL.value == "CRITICAL"
        assert Status.CRITICAL == "CRITICAL"


class TestSeverity:
    def test_order(self) -> None:
        ranked = sorted(Status, key=lambda s: s.severity)
        assert ranked == [Status.OK, Status.UNKNOWN, Status.WARNING, Status.CRITICAL]

    def test_worst(self) -> None:
        assert worst([Status.OK, Status.WARNING]) is Status.WARNING
        assert worst([Status.WARNING, Status.CRITICAL, Status.OK]) is Status.CRITICAL
        assert worst([Status.OK, Status.UNKNOWN]) is Status.UNKNOWN
        assert worst([Status.OK, Status.OK]) is Status.OK

    def test_worst_empty(self) -> None:
        assert worst([]) is None
