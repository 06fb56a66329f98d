"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Calendar Assistant"
    debug: bool = False
    secret_key: str = "change-me-in-production"  # Signs the session cookie

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all
    cookie_secure: bool = True

    # Database
    database_url: str = "sqlite:///./calendar_assistant.db"

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    oauth_redirect_path: str = "/oauth2/callback"

    # LLM (OpenAI-compatible chat completions)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"


settings = Settings()
