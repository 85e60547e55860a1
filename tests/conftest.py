"""Shared test fixtures."""

from __future__ import annotations

import warnings
from collections.abc import Iterator
from typing import Any

import pytest

from healthcheck.config import settings


@pytest.fixture
def caught() -> Iterator[list[warnings.WarningMessage]]:
    """Record every warning raised inside the test, duplicates included."""
    with warnings.catch_warnings(record=True) as records:
        warnings.simplefilter("always")
        yield records


@pytest.fixture
def strict_exceptions(monkeypatch: pytest.MonkeyPatch) -> None:
    """Let exceptions from checks propagate instead of becoming CRITICAL."""
    monkeypatch.setattr(settings, "catch_exceptions", False)


def messages(records: list[warnings.WarningMessage]) -> list[str]:
    return [str(r.message) for r in records]


def returning(result: Any):
    """A check function that returns a copy of ``result``."""
    def check(**params: Any) -> Any:
        return dict(result) if isinstance(result, dict) else result
    return check
