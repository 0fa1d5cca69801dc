"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ONE_WEEK_IN_SECONDS = 7 * 86400


class AppSettings(BaseSettings):
    """Centralized environment configuration.

    Every field can be overridden with a ``LINKVOTE_``-prefixed environment
    variable or a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="LINKVOTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    redis_url: str = Field(default="redis://localhost:6379/0")
    key_prefix: str = Field(
        default="", description="Namespace prepended to every key this system owns"
    )

    vote_score: float = Field(default=432.0, gt=0)
    disvote_score: float = Field(default=-432.0, lt=0)
    voting_window_seconds: int = Field(default=ONE_WEEK_IN_SECONDS, gt=0)

    articles_per_page: int = Field(default=25, gt=0)
    group_cache_ttl_seconds: int = Field(default=60, gt=0)
    max_vote_attempts: int = Field(default=5, gt=0)

    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case and check the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Invalid log_level: {v}"
            raise ValueError(msg)
        return level


def get_settings(**overrides: object) -> AppSettings:
    """Get a settings instance, with explicit values taking precedence."""
    return AppSettings(**overrides)
