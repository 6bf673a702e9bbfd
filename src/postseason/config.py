"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

import logging

from pydantic import model_validator
from pydantic_settings import BaseSettings

VALID_ENVS = frozenset({"development", "test", "production"})


class Settings(BaseSettings):
    """Postseason client configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Environment
    postseason_env: str = "development"

    # Campaign API (bracket/games/roster/standings reads and simulate calls)
    postseason_api_base_url: str = "http://localhost:8000"
    postseason_api_token: str = ""
    postseason_http_timeout: float = 30.0
    # Simulating the rest of the playoffs is one long request.
    postseason_sim_timeout: float = 300.0

    # Notifications
    postseason_notification_stagger_seconds: float = 0.6

    # Logging
    postseason_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_env(self) -> Settings:
        if self.postseason_env not in VALID_ENVS:
            msg = (
                f"POSTSEASON_ENV must be one of {sorted(VALID_ENVS)}, "
                f"got {self.postseason_env!r}"
            )
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def _require_https_in_production(self) -> Settings:
        """The API token travels in a header, so production must use TLS."""
        if self.postseason_env == "production" and not self.postseason_api_base_url.startswith(
            "https://"
        ):
            msg = "POSTSEASON_API_BASE_URL must use https:// in production."
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def _clamp_stagger(self) -> Settings:
        if self.postseason_notification_stagger_seconds < 0:
            self.postseason_notification_stagger_seconds = 0.0
        return self


def configure_logging(settings: Settings) -> None:
    """Install the root logging config for scripts and embedding apps."""
    logging.basicConfig(
        level=getattr(logging, settings.postseason_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
