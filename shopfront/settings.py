import enum
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL


class LogLevel(str, enum.Enum):
    """Possible log levels."""

    NOTSET = "NOTSET"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"


class Settings(BaseSettings):
    """
    Application settings.

    These parameters can be configured
    with environment variables.
    """

    host: str = "127.0.0.1"
    port: int = 8000
    # quantity of workers for uvicorn
    workers_count: int = 1
    # Enable uvicorn reloading
    reload: bool = False

    # Current environment
    environment: str = "dev"

    log_level: LogLevel = LogLevel.INFO

    # Variables for the database
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "shopfront"
    db_pass: str = "shopfront"
    db_base: str = "shopfront"
    db_driver: str = "mysql+aiomysql"
    db_echo: bool = False
    # Full URL override (SHOPFRONT_DB_DSN), replaces the parts above
    db_dsn: Optional[str] = None

    # Origins allowed to call the API (the admin frontend)
    cors_origins: List[str] = ["http://localhost:4200"]

    # Grpc endpoint for opentelemetry.
    # E.G. http://localhost:4317
    opentelemetry_endpoint: Optional[str] = None

    # Application modules holding a models.py
    app_names: List[str] = ["users", "categories", "products"]

    @property
    def db_url(self) -> URL:
        """
        Assemble database URL from settings.

        :return: database URL.
        """
        if self.db_dsn:
            return URL(self.db_dsn)
        return URL.build(
            scheme=self.db_driver,
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_pass,
            path=f"/{self.db_base}",
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SHOPFRONT_",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
