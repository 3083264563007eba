# barberpro/config.py
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite+aiosqlite:///./barberpro.db"
    STORE_KEY_PREFIX: str = "barberpro_"

    OPENAI_API_KEY: str | None = None            # sin key → IA deshabilitada
    LLM_MODEL: str = "gpt-4o-mini"
    IMAGE_MODEL: str = "gpt-image-1"
    LLM_TIMEOUT: int = 60

    # Clave estática compartida del panel admin (no es un modelo de seguridad)
    ADMIN_PASSPHRASE: str = "admin123"
    MONTH_LOCALE: str = "pt_BR"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )


# singleton
@lru_cache
def get_settings() -> Settings:
    return Settings()
