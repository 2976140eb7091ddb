"""Monitor bot configuration"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

MONITOR_DIR = Path(__file__).parent.parent
BACKEND_DIR = MONITOR_DIR.parent
ENV_FILE = MONITOR_DIR / ".env"

BOT_NAME = "DirtOnYou"


class MonitorSettings(BaseSettings):
    """Monitor bot settings"""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Discord
    discord_bot_token: str = Field(..., description="Discord bot token")
    operator_id: int = Field(
        ..., description="Admin user; runs admin commands and receives backfill DMs"
    )
    main_server_id: int | None = Field(
        default=None, description="Guild whose reports aggregate every guild"
    )
    discord_guild_id: int | None = Field(
        default=None, description="Sync slash commands to this guild only"
    )

    # Database
    database_url: str = Field(..., description="PostgreSQL database URL")
    db_timeout: float = Field(default=5.0, gt=0, description="Per-operation database timeout")
    db_ssl: str = Field(default="prefer", description="asyncpg ssl mode")

    # Backfill
    backfill_page_size: int = Field(
        default=100, ge=1, le=100, description="Messages per history page"
    )
    backfill_page_delay: float = Field(default=0.0, ge=0, description="Pause between history pages")

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v.startswith(("postgresql://", "postgres://")):
            raise ValueError("DATABASE_URL must start with 'postgresql://' or 'postgres://'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper


@lru_cache
def get_settings() -> MonitorSettings:
    """Get cached settings instance"""
    return MonitorSettings()  # type: ignore[call-arg]
