"""Application settings loaded from .env file."""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# Written by scripts/seed_demo_db.py; independent of the working directory
DEMO_DB_PATH = Path(__file__).resolve().parent.parent / "scripts" / "demo.db"


def _split(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Target database
    DATABASE_URL: str = f"sqlite:///{DEMO_DB_PATH}"

    # Ollama
    OLLAMA_HOST: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "qwen2.5-coder:3b"
    OLLAMA_TIMEOUT_SECONDS: int = 120
    OLLAMA_MAX_RETRIES: int = 3

    # Schema catalog
    SCHEMA_EXCLUDE_TABLES: str = "migrations,password_resets,personal_access_tokens,failed_jobs"
    SCHEMA_TTL_SECONDS: int = 0   # 0 = never auto-refresh

    # Query generation / execution
    CONTEXT_MAX_CHARS: int = 12_000
    MAX_RESULT_ROWS: int = 500
    INTENT_LOCALES: str = "en,es,fr,de"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:5173"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def exclude_table_list(self) -> list[str]:
        return _split(self.SCHEMA_EXCLUDE_TABLES)

    @property
    def intent_locale_list(self) -> list[str]:
        return _split(self.INTENT_LOCALES)


settings = Settings()
