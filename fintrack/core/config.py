# fintrack/core/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "FinTrack API"
    DEBUG: bool = False
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    # Database Configuration
    DATABASE_URL: str
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    # Create tables on startup (local development / tests). Use Alembic otherwise.
    AUTO_CREATE_TABLES: bool = False

    # JWT / Security Configuration
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    @property
    def is_sqlite(self) -> bool:
        """SQLite needs a different pool setup than server databases"""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_memory_db(self) -> bool:
        return self.is_sqlite and (":memory:" in self.DATABASE_URL or self.DATABASE_URL.rstrip("/").endswith(":"))


def get_settings() -> Settings:
    """Build settings from the environment / .env file"""
    return Settings()
