from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    app_name: str = Field(default="Room Relay")
    app_version: str = Field(default="1.0.0")
    app_description: str = Field(
        default="A real-time room-based message relay over WebSocket"
    )

    # Server Host and Port
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    reload: bool = Field(default=False)

    # CORS Configuration
    cors_origins: List[str] = Field(default=["*"])
    cors_methods: List[str] = Field(default=["*"])
    cors_headers: List[str] = Field(default=["*"])
    cors_credentials: bool = Field(default=True)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # WebSocket Configuration
    max_connections: int = Field(default=1000)
    outbox_max_size: int = Field(default=256)

    # Development/Production Mode
    debug: bool = Field(default=False)
    environment: str = Field(default="development")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance"""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment variables"""
    global settings
    settings = Settings()
    return settings
