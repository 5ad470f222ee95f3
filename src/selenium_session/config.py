"""Configuration settings for selenium-session."""

import logging
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    # MCP server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # API Key Authentication (optional)
    api_key: Optional[str] = None  # Direct API key via env var
    api_key_file: Optional[str] = None  # Path to file containing API key (for Docker secrets)

    # Browser
    selenium_grid_url: Optional[str] = None  # None launches a local browser
    default_browser: str = "chrome"
    headless: bool = True
    window_width: int = 1024
    window_height: int = 768

    # Base URL for relative visits
    app_host: Optional[str] = None

    # Synchronization (seconds)
    default_wait_time: float = 2.0
    frame_wait_time: float = 5.0
    window_wait_time: float = 5.0
    ignore_hidden_elements: bool = True

    # WebDriver timeouts
    page_load_timeout_seconds: int = 30
    script_timeout_seconds: int = 30
    implicit_wait_seconds: int = 0

    # Session management
    max_concurrent_sessions: int = 10
    session_max_lifetime_seconds: int = 900  # 15 minutes
    session_max_idle_seconds: int = 300  # 5 minutes
    sweep_interval_seconds: int = 60  # 1 minute

    # Content limits
    dom_max_chars: int = 20000

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "SELENIUM_SESSION_"}

    def get_api_key(self) -> str | None:
        """Get API key from file or environment variable.

        If api_key_file is set, reads the API key from that file.
        File takes precedence over direct api_key environment variable.

        Returns:
            API key string or None if not configured.
        """
        if self.api_key_file:
            try:
                key = Path(self.api_key_file).read_text().strip()
                if key:
                    logger.info(f"Loaded API key from file: {self.api_key_file}")
                    return key
            except FileNotFoundError:
                logger.warning(f"API key file not found: {self.api_key_file}")
            except PermissionError:
                logger.warning(f"Permission denied reading API key file: {self.api_key_file}")
            except OSError as e:
                logger.warning(f"Error reading API key file: {e}")

        return self.api_key


# Global settings instance
settings = Settings()
