"""Application configuration using Pydantic v2 Settings.

Centralized configuration that loads from environment variables
and provides type-safe access throughout the application.
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from studio.strategies.template_engine.theme import DEFAULT_THEME_FONTS

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./studio.db",
        description="Async SQLAlchemy URL for the project store.",
    )

    # Editing session
    reconcile_debounce_seconds: float = Field(
        default=0.8,
        ge=0.0,
        description="Quiet period after a template edit before state is reconciled.",
    )
    grouping_debounce_seconds: float = Field(
        default=0.3,
        ge=0.0,
        description="Quiet period after a template edit before field groups are recomputed.",
    )
    history_limit: int = Field(
        default=100,
        ge=1,
        description="Maximum number of template snapshots kept for undo/redo.",
    )
    undo_window_seconds: float = Field(
        default=3.0,
        ge=0.0,
        description="How long a deleted field can be restored.",
    )
    notice_seconds: float = Field(
        default=3.0,
        ge=0.0,
        description="How long a user-facing notice stays visible.",
    )

    # Template engine
    rename_policy: str = Field(
        default="heuristic",
        description="State reconciliation policy: 'heuristic' or 'strict'.",
    )
    key_suffix_max: int = Field(
        default=9999,
        ge=9,
        description="Upper bound of the random numeric suffix given to duplicated keys.",
    )
    theme_fonts: list[str] = Field(
        default_factory=lambda: list(DEFAULT_THEME_FONTS),
        description="Font families recognised by the theme rewriter.",
    )

    # API
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API.",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory for info.log and error.log.",
    )

    @field_validator("rename_policy")
    @classmethod
    def validate_rename_policy(cls, v: str) -> str:
        """Only the known reconciliation policies are accepted."""
        v = v.lower()
        if v not in {"heuristic", "strict"}:
            raise ValueError(
                f"Unknown rename_policy '{v}'. Valid options: 'heuristic', 'strict'"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    def configure_logging(self) -> None:
        """Configure global logging based on settings."""
        import structlog

        level = getattr(logging, self.log_level, logging.INFO)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=level,
        )

        logger.setLevel(level)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global Settings instance.

    Returns:
        The singleton Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings
