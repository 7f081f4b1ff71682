"""Settings module for the broadcast relay."""

from enum import Enum
from typing import Any, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment types."""

    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


ENVIRONMENT_DEFAULTS: dict[Environment, dict[str, Any]] = {
    Environment.PRODUCTION: {"LOG_CONSOLE_FORMAT": "json", "LOG_LEVEL": "WARNING"},
    Environment.STAGING: {"LOG_CONSOLE_FORMAT": "json", "LOG_LEVEL": "INFO"},
    Environment.DEV: {"LOG_CONSOLE_FORMAT": "human", "LOG_LEVEL": "DEBUG"},
}


class Settings(BaseSettings):  # type: ignore[misc]
    """
    Main settings class.

    Every field can be overridden by an environment variable of the same
    name (case sensitive), e.g. ``PORT=9000``.
    """

    model_config = SettingsConfigDict(case_sensitive=True)

    # Environment configuration
    ENV: Environment = Environment.DEV

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    SHUTDOWN_TIMEOUT_SECONDS: int = 5

    # Directory with index.html, client.js and style.css.
    # Empty means the static directory shipped inside the package.
    STATIC_DIR: str = ""

    # Logging settings
    LOG_FILE_PATH: str = "logs/logging_errors.log"
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]
    LOG_LEVEL: str = "INFO"
    LOG_CONSOLE_FORMAT: Literal["human", "json"] = "human"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize settings with environment-specific defaults."""
        super().__init__(**kwargs)
        self._apply_environment_defaults()

    def _apply_environment_defaults(self) -> None:
        """
        Apply environment-specific configuration defaults.

        Only fields left unset are changed; values from the environment or
        passed to the constructor are kept.
        """
        for field, value in ENVIRONMENT_DEFAULTS[self.ENV].items():
            if field not in self.model_fields_set:
                setattr(self, field, value)


app_settings = Settings()
