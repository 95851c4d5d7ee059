"""Deploy bot configuration"""

import logging
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# === Path Configuration ===
DEPLOYBOT_DIR = Path(__file__).parent
ENV_FILE = DEPLOYBOT_DIR / ".env"

BOT_NAME = "deploybot"
BOT_VERSION = "0.1.0"


class DeployBotSettings(BaseSettings):
    """Deploy bot settings"""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Discord
    discord_bot_token: str = Field(..., description="Discord bot token")
    command_prefix: str = Field(default="$", description="Prefix for text commands")

    # Queue
    idle_timeout_minutes: float = Field(
        default=30, gt=0, description="Minutes before the current deployer gets a reminder"
    )

    # Health server
    health_enabled: bool = Field(default=True, description="Serve HTTP health endpoints")
    health_host: str = Field(default="0.0.0.0", description="Health server bind host")
    health_port: int = Field(default=8080, description="Health server port")

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

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

    @property
    def idle_timeout(self) -> timedelta:
        return timedelta(minutes=self.idle_timeout_minutes)


@lru_cache
def get_settings() -> DeployBotSettings:
    """Get cached settings instance"""
    return DeployBotSettings()  # type: ignore[call-arg]
