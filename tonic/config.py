from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./tonic.db"
    log_level: str = "INFO"

    # Supplement catalog snapshot (empty = bundled tonic/data/catalog.json)
    catalog_path: str = ""

    # Check-in insights
    recent_insight_window: int = 5  # Number of recently shown insight keys to avoid
    trailing_average_days: int = 7


@lru_cache
def get_settings() -> Settings:
    return Settings()
