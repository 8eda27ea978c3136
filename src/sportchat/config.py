"""Configuration management for SportChat."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class RedisConfig(BaseModel):
    """Key-value store connection configuration."""

    url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    socket_timeout: float = Field(default=5.0, description="Socket timeout in seconds")


class WebhookConfig(BaseModel):
    """External agent webhook configuration."""

    url: str | None = Field(default=None, description="Agent webhook URL")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")


class AuthConfig(BaseModel):
    """Session cookie configuration."""

    session_ttl_days: int = Field(default=7, description="Session lifetime in days")
    cookie_name: str = Field(default="auth_token", description="Session cookie name")


class ApiConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Origins allowed to call the API with credentials",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Log level"
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )


class Config(BaseSettings):
    """Main application configuration."""

    redis: RedisConfig = Field(default_factory=RedisConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Application settings
    timezone: str = Field(
        default="Europe/Moscow", description="Timezone used for calendar dates"
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    environment: Literal["development", "production"] = Field(
        default="development", description="Application environment"
    )

    class Config:
        env_nested_delimiter = "__"
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global configuration instance
config = Config()
