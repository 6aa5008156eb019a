from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    ENV_STATE: Optional[str] = None

    """Loads the dotenv file."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class GlobalConfig(BaseConfig):
    DATABASE_URL: str = "sqlite:///intake.db"
    DB_FORCE_ROLL_BACK: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "https://alephiclabs.com",
        "https://www.alephiclabs.com",
    ]

    # MinIO Config
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_ROOT_USER: Optional[str] = None
    MINIO_ROOT_PASSWORD: Optional[str] = None
    MINIO_BUCKET: str = "alephic-labs-ai-lab-resumes"
    MINIO_SECURE: bool = False

    # Email Config
    EMAIL_API_URL: str = "https://api.resend.com/emails"
    EMAIL_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "website@alephiclabs.com"
    EMAIL_FROM_NAME: str = "Alephic Labs Website"
    EMAIL_TO: str = "contact@alephiclabs.com"

    # Submission log
    SPREADSHEET_NAME: str = "Alephic Labs - Submissions"
    TIMEZONE: str = "America/New_York"

    # Where the site's forms post to
    INTAKE_URL: str = "http://localhost:8000/api/intake"


class DevConfig(GlobalConfig):
    LOG_LEVEL: str = "DEBUG"
    model_config = SettingsConfigDict(env_prefix="DEV_")


class ProdConfig(GlobalConfig):
    model_config = SettingsConfigDict(env_prefix="PROD_")


class TestConfig(GlobalConfig):
    DATABASE_URL: str = "sqlite:///test.db"
    DB_FORCE_ROLL_BACK: bool = True
    EMAIL_API_KEY: Optional[str] = "test-key"
    model_config = SettingsConfigDict(env_prefix="TEST_")


@lru_cache()
def get_config(env_state: Optional[str]):
    """Instantiate config based on the environment."""
    configs = {"dev": DevConfig, "prod": ProdConfig, "test": TestConfig}
    return configs[env_state or "dev"]()


config = get_config(BaseConfig().ENV_STATE)
