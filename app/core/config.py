# app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,  # Environment vars are uppercase
        extra="ignore",      # Ignore unexpected vars instead of raising
    )

    # Core application settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./flashgen.db"
    HOST: str = "0.0.0.0"
    PORT: int = 8101
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_FILE: str | None = None

    # CORS settings
    ALLOWED_ORIGINS: list[str] = ["*"]  # In production, specify actual origins
    ALLOW_CREDENTIALS: bool = True
    ALLOWED_METHODS: list[str] = ["*"]
    ALLOWED_HEADERS: list[str] = ["*"]

    # JWT settings
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 10080  # 7 days

    # AI completion service (OpenRouter compatible)
    OPENROUTER_API_KEY: str | None = None
    AI_MODEL: str = "mistralai/mistral-7b-instruct:free"
    AI_API_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    AI_TEMPERATURE: float = 0.7
    AI_MAX_TOKENS: int = 2000
    AI_TIMEOUT_SECONDS: float = 60.0
    AI_TARGET_LANGUAGE: str = "Polish"
    APP_URL: str = "https://flashlearn-ai.com"
    APP_TITLE: str = "FlashLearn AI"


def _validate_settings(settings: Settings) -> None:
    """Validate critical application settings."""
    if not settings.DATABASE_URL:
        raise ValueError("DATABASE_URL is required")

    # Environment-specific validations
    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        print("WARNING: DEBUG is enabled in production. Consider setting DEBUG=False.")
    if settings.ENVIRONMENT == "production" and settings.JWT_SECRET == DEFAULT_JWT_SECRET:
        raise ValueError("JWT_SECRET must be set in production")
    # The API key is checked per request so the app can boot without it
    if not settings.OPENROUTER_API_KEY:
        print("WARNING: OPENROUTER_API_KEY is not set; flashcard generation will fail.")


# Initialize settings with error handling
try:
    settings = Settings()
    _validate_settings(settings)
except Exception as e:
    print(f"Error initializing settings: {e}")
    raise
