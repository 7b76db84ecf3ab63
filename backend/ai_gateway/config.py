"""
AI Gateway — Application Configuration
=======================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
       The gateway must not serve traffic without at least one Gemini key.
How:   Pydantic Settings reads scalar values from the environment (or .env);
       indexed credentials (GEMINI_API_KEY_1, GEMINI_API_KEY_2, ...) are
       collected separately because their count is not known in advance.
Who:   Imported by the credential pool, tier selector and failover engine.
When:  Loaded once at module import time; validated before the service starts.
"""

import os
from typing import List, Mapping, Optional

from dotenv import dotenv_values
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from ai_gateway.exceptions import ConfigurationError

PLACEHOLDER_KEY = "your_gemini_api_key_here"


class Settings(BaseSettings):
    """
    Gateway settings loaded from environment variables.

    Attributes are grouped by concern for readability.
    """

    # ── Google Gemini ─────────────────────────────────────────────────────
    # What: Primary API key. Additional keys use GEMINI_API_KEY_<n>, n = 1, 2, ...
    # How to obtain: https://aistudio.google.com/app/apikey
    gemini_api_key: str = Field(
        default="",
        description="Primary Google Gemini API key",
    )

    # What: Model bound to the fast tier (chat, translation)
    gemini_fast_model: str = Field(default="gemini-2.0-flash")

    # What: Model bound to the deep tier (summaries, notes, explanations, rewrites)
    gemini_deep_model: str = Field(default="gemini-2.5-pro")

    # What: Provider-side timeout applied by the Gemini client, in seconds
    request_timeout: int = Field(default=60, ge=5, le=600)

    # ── Failover ──────────────────────────────────────────────────────────
    # What: Seconds after which every exhausted key becomes selectable again
    failover_reset_window: float = Field(default=300.0, gt=0)

    # What: Pause after every key in the pool has hit its quota
    failover_cooldown: float = Field(default=3.0, ge=0)

    # ── Logging ───────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def api_keys(self, environ: Optional[Mapping[str, str]] = None) -> List[str]:
        """
        Collect the primary key followed by GEMINI_API_KEY_1..N.

        Indexed keys are read until the first gap. Values in the process
        environment win over the .env file, matching pydantic-settings.
        Placeholder and blank values are skipped.
        """
        if environ is None:
            merged = {
                k.upper(): v
                for k, v in dotenv_values(".env").items()
                if v is not None
            }
            merged.update({k.upper(): v for k, v in os.environ.items()})
            environ = merged

        keys: List[str] = []
        if _usable(self.gemini_api_key):
            keys.append(self.gemini_api_key.strip())

        index = 1
        while f"GEMINI_API_KEY_{index}" in environ:
            value = environ[f"GEMINI_API_KEY_{index}"]
            if _usable(value):
                keys.append(value.strip())
            index += 1
        return keys

    def validate_required_for_production(
        self, environ: Optional[Mapping[str, str]] = None
    ) -> None:
        """
        What:  Validates that at least one credential is configured.
        When:  Called while building the credential pool at startup.
        Why:   Fail fast with clear guidance instead of failing the first request.
        """
        errors = []
        if not self.api_keys(environ):
            errors.append(
                "GEMINI_API_KEY is not set. "
                "Get a free key at https://aistudio.google.com/app/apikey"
            )
        if self.gemini_fast_model.strip() == "" or self.gemini_deep_model.strip() == "":
            errors.append("GEMINI_FAST_MODEL and GEMINI_DEEP_MODEL must not be empty")
        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


def _usable(value: Optional[str]) -> bool:
    return bool(value and value.strip() and value.strip() != PLACEHOLDER_KEY)


# Singleton instance — configuration is immutable after startup
settings = Settings()
