"""Configuration management using Pydantic Settings.

Loads configuration from environment variables with .env file support.
"""

from typing import Optional

from pydantic_settings import BaseSettings

from meli_bot.config.constants import DEFAULT_REFRESH_SKEW_MINUTES


class Settings(BaseSettings):
    """Application configuration."""

    # Mercado Livre application credentials
    ml_app_id: Optional[str] = None
    ml_client_secret: Optional[str] = None
    ml_redirect_uri: Optional[str] = None

    # Storage
    database_url: str = "sqlite+aiosqlite:///./meli_bot.db"

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    environment: str = "development"

    # API Configuration
    api_base_url: str = "https://api.mercadolibre.com"
    auth_base_url: str = "https://auth.mercadolivre.com.br"
    http_timeout_seconds: float = 10.0

    # Credential lifecycle
    refresh_skew_minutes: int = DEFAULT_REFRESH_SKEW_MINUTES

    # Skip orders that were already messaged
    dedupe_deliveries: bool = True

    # GlitchTip Error Monitoring
    glitchtip_dsn: Optional[str] = None

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False
        str_strip_whitespace = True
        extra = "ignore"

    @property
    def refresh_skew_ms(self) -> int:
        """Refresh margin in milliseconds."""
        return self.refresh_skew_minutes * 60 * 1000


# Create a global settings instance
settings = Settings()
