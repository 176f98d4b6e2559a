"""Application settings loaded from .env file."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # OpenRouter (OpenAI-compatible chat completions)
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_MODEL: str = "google/gemini-2.0-flash-001"
    OPENROUTER_TIMEOUT_SECONDS: int = 60
    APP_HOST: str = "http://localhost:5173"
    APP_TITLE: str = "AI SQL Generator"

    # Generation loop
    GENERATION_TEMPERATURE: float = 0.1
    GENERATION_MAX_TOKENS: int = 1024
    GENERATION_MAX_TURNS: int = 10

    # Target database
    DATA_DB_URL: str = ""
    SCHEMA_CACHE_TTL_SECONDS: int = 3600

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:5173"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
