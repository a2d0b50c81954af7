from pydantic import Field
from pydantic_settings import BaseSettings


class BotSettings(BaseSettings):
    discord_token: str = Field(..., description="Discord bot token")

    environment: str = Field(default="development", description="Environment")
    log_level: str = Field(default="INFO", description="Logging level")

    # Development settings
    debug: bool = Field(default=False, description="Enable debug mode")

    # Redis configuration
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    redis_key_prefix: str = Field(default="", description="Prefix for per-guild command hashes")
    storage_timeout: float = Field(default=5.0, gt=0, description="Timeout in seconds for a single storage call")

    # Custom commands
    max_output_length: int = Field(default=2000, gt=0, description="Maximum length of a command output")
    command_permission: str = Field(
        default="MANAGE_MESSAGES",
        description="hikari.Permissions member required to manage custom commands",
    )
    notify_storage_failures: bool = Field(
        default=False,
        description="Reply in chat when a custom command cannot be served because storage is down",
    )
    audit_channel_id: int | None = Field(
        default=None,
        description="Channel that receives a message whenever a custom command is registered or removed",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = BotSettings()
