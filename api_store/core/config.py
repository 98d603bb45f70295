from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINTS_FILE = Path(__file__).resolve().parent.parent / "data" / "default_endpoints.yaml"


class Settings(BaseSettings):
    PROJECT_NAME: str = "API Store"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: Optional[str] = None
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "api_store"
    POSTGRES_PORT: int = 5432
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT: int = 60  # seconds
    DB_ECHO: bool = False
    AUTO_CREATE_SCHEMA: bool = True

    # Catalog
    DEFAULT_ENDPOINTS_PATH: str = str(DEFAULT_ENDPOINTS_FILE)

    # YAML formatter service
    FORMATTER_HOST: str = "localhost"
    FORMATTER_PORT: int = 6001
    FORMATTER_TIMEOUT: float = 30.0

    # Redis (Celery broker)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379

    # Kafka
    TESTING: bool = False
    KAFKA_BOOTSTRAP_SERVERS: str = "localhost:9092"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def formatter_url(self) -> str:
        return f"http://{self.FORMATTER_HOST}:{self.FORMATTER_PORT}"


settings = Settings()
