"""Tests for settings loaded from the environment."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from healthcheck.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        for name in ("COERCE_INVALID_STATUS", "CATCH_EXCEPTIONS", "RUNTIME", "NEGATION_PREFIX"):
            monkeypatch.delenv(f"HEALTHCHECK_{name}", raising=False)
        s = Settings(_env_file=None)
        assert s.coerce_invalid_status is True
        assert s.catch_exceptions is True
        assert s.runtime is False
        assert s.negation_prefix == "!"

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("HEALTHCHECK_COERCE_INVALID_STATUS", "false")
        monkeypatch.setenv("HEALTHCHECK_RUNTIME", "1")
        monkeypatch.setenv("HEALTHCHECK_NEGATION_PREFIX", "~")
        s = Settings(_env_file=None)
        assert s.coerce_invalid_status is False
        assert s.runtime is True
        assert s.negation_prefix == "~"

    def test_blank_prefix_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, negation_prefix=" ")
