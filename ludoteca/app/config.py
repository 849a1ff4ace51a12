from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    API_URL: str = "http://localhost:3000"
    API_TOKEN: Optional[str] = None
    REQUEST_TIMEOUT: float = 10.0
    FETCH_WINDOW_MONTHS: int = 12
    ITEMS_PER_PAGE: int = 20
    DEFAULT_LANG: str = "es"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )


settings = Settings()

API_URL = settings.API_URL
API_TOKEN = settings.API_TOKEN
REQUEST_TIMEOUT = settings.REQUEST_TIMEOUT
DEFAULT_LANG = settings.DEFAULT_LANG
LOG_LEVEL = settings.LOG_LEVEL
