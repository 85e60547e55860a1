from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Runner behaviour loaded from environment / .env file."""

    model_config = {
        "env_prefix": "HEALTHCHECK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Replace a non-empty but invalid status with UNKNOWN after warning.
    # False keeps the value as returned by the check.
    coerce_invalid_status: bool = True

    # Turn exceptions raised by a check into a CRITICAL result
    catch_exceptions: bool = True

    # Record elapsed seconds on each result unless check(runtime=...) says otherwise
    runtime: bool = False

    # Tags starting with this exclude checks instead of selecting them
    negation_prefix: str = "!"

    @field_validator("negation_prefix")
    @classmethod
    def prefix_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("negation_prefix must not be blank")
        return value


settings = Settings()
