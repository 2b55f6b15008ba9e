"""
Application configuration loaded from environment variables.
"""
from typing import Optional

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Remote chat service
    chatbot_api_url: str = "http://localhost:8090"
    chatbot_timeout_seconds: Optional[float] = None

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    # Session
    session_secret: str = "dev-secret-change-in-production"
    session_expire_hours: int = 24

    # Debug mode
    debug: bool = True

    # Server bind address
    host: str = "127.0.0.1"
    port: int = 8000

    # Window geometry (px)
    drag_margin: int = 10
    corner_margin: int = 24
    mobile_margin: int = 16
    drag_handle_height: int = 72
    minimized_height: int = 64
    mobile_breakpoint: int = 768
    fullscreen_breakpoint: int = 480

    # Chat input
    max_message_length: int = 500

    # Background housekeeping
    error_banner_seconds: int = 8
    sweep_interval_seconds: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
