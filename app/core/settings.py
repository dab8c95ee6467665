"""
Configuration & Environment Management for the Event Tickets API
"""

import json
from functools import lru_cache
from typing import Annotated, List, Optional, Union

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import NoDecode


class DatabaseSettings(PydanticBaseSettings):
    """Database configuration settings"""

    # Full URL override, e.g. sqlite+aiosqlite:///./tickets.db
    DB_URL: Optional[str] = None

    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "event_tickets"

    # Connection Pool Settings
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True
    DB_ECHO: bool = False

    # Connection Timeouts
    DB_COMMAND_TIMEOUT: int = 60
    DB_STATEMENT_TIMEOUT: str = "60s"
    DB_LOCK_TIMEOUT: str = "30s"

    # Create missing tables at startup instead of running migrations
    DB_AUTO_CREATE: bool = True

    @property
    def database_url(self) -> str:
        """Generate database URL for async connections"""
        if self.DB_URL:
            return self.DB_URL
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class MonitoringSettings(PydanticBaseSettings):
    """Monitoring and observability settings"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    ENABLE_PROMETHEUS: bool = True
    PROMETHEUS_PATH: str = "/metrics"

    # Seconds
    SLOW_REQUEST_THRESHOLD: float = 2.0

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class Settings(PydanticBaseSettings):
    """Main application settings"""

    # Environment
    ENVIRONMENT: str = "development"
    TESTING: bool = False
    VERSION: str = "1.0.0"

    PROJECT_NAME: str = "Event Tickets API"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = Field(
        default=5000, validation_alias=AliasChoices("PORT", "SERVER_PORT")
    )

    # CORS Configuration
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")  # type: ignore
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and v.startswith("["):
            return [str(origin) for origin in json.loads(v)]
        elif isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # Component Settings
    database: DatabaseSettings = DatabaseSettings()
    monitoring: MonitoringSettings = MonitoringSettings()

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
        "validate_assignment": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
