from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "relief"
    POSTGRES_USER: str = "relief"
    POSTGRES_PASSWORD: str = "relief"
    # Full SQLAlchemy URL; takes precedence over the POSTGRES_* parts (tests use sqlite)
    DATABASE_URL: Optional[str] = None

    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"

    LOG_LEVEL: str = "INFO"
    RUN_MIGRATIONS: bool = True

    # Stock thresholds: LOW_STOCK when available <= max(MIN_UNITS, RATIO * total)
    LOW_STOCK_MIN_UNITS: int = 5
    LOW_STOCK_RATIO: float = 0.2
    DEFAULT_RESPONSE_HOURS: int = 24

    # Seconds to cache item-type and location display names
    LOOKUP_CACHE_TTL: int = 300

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
