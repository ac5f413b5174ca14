"""Application configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Ketabyar"

    # Frontend
    frontend_port: int = 3000

    # Database
    database_url: str = "sqlite+aiosqlite:///./ketabyar.db"

    # CORS - dynamically built based on frontend_port
    cors_origins: list[str] = []

    # Authentication (optional - for network-exposed deployments)
    # Set API_AUTH_TOKEN to enable authentication on admin endpoints
    api_auth_token: Optional[str] = None

    # Generative-language provider
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"

    # Translation settings
    translation_temperature: float = 0.1  # Near-deterministic output
    translation_top_p: float = 0.5
    translation_max_tokens: int = 500
    context_window_chars: int = 100  # Characters before and after the selection
    default_target_language: str = "fa"
    translation_cache_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Build CORS origins based on frontend port
        if not self.cors_origins:
            self.cors_origins = [
                f"http://localhost:{self.frontend_port}",
                f"http://127.0.0.1:{self.frontend_port}",
            ]


settings = Settings()
