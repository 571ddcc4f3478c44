"""
Application settings
"""
# Standard library imports
import os
from typing import List, Dict, Any, Optional

# Third-party imports
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Basic app info
    APP_NAME: str = "Holiday Cards"
    APP_VERSION: str = "1.0.0"
    POD_ENV: str = Field(default="test")
    DEBUG: bool = Field(default_factory=lambda: Settings._get_debug())
    RELOAD: bool = False

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)
    WORKERS: int = 1

    # Public base URL, used for deep links when the request carries no origin
    APP_URL: str = Field(default="http://localhost:3000")

    # Development database
    DEV_DB_HOST: str = "localhost:3306"
    DEV_DB_USER: str = "root"
    DEV_DB_PASSWORD: str = ""

    # Production database
    ONLINE_DB_HOST: str = "localhost:3306"
    ONLINE_DB_USER: str = "root"
    ONLINE_DB_PASSWORD: str = ""

    REDIS_DEV_URL: str = "redis://localhost:6379/0"
    REDIS_YUFA_URL: str = "redis://localhost:6379/0"
    REDIS_ONLINE_URL: str = "redis://localhost:6379/0"

    DB_NAME: str = "holiday_cards"

    # Connection pool
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_CONNECTIONS: int = Field(default=20)
    DB_POOL_TIMEOUT: int = Field(default=30)
    DB_POOL_RECYCLE: int = Field(default=3600)

    # Rate limiting
    RATE_LIMIT_BACKEND: str = Field(default="memory", description="memory or redis")
    RATE_LIMIT_IP_MAX: int = Field(default=10)
    RATE_LIMIT_DEVICE_MAX: int = Field(default=3)
    RATE_LIMIT_WINDOW_HOURS: int = Field(default=24)
    RATE_LIMIT_SWEEP_THRESHOLD: int = Field(default=10000)

    # Card lifecycle
    CARD_EXPIRATION_DAYS: int = Field(default=30, ge=1)
    CLEANUP_AUTH_TOKEN: str = Field(default="")

    # Object storage (S3 compatible)
    STORAGE_ENDPOINT: str = Field(default="")
    STORAGE_ACCESS_KEY_ID: str = Field(default="")
    STORAGE_SECRET_ACCESS_KEY: str = Field(default="")
    STORAGE_BUCKET_NAME: str = Field(default="")
    STORAGE_REGION: str = Field(default="us-east-1")

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    LOG_LEVEL: str = Field(default="info")

    # Generative AI
    GEMINI_API_KEY: str = Field(default="")
    GENERATION_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    LLM_PROVIDERS: Dict[str, Any] = Field(
        default={
            "gemini": {
                "api_key": "",
                "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
                "models": {
                    "gemini-2.5-flash": {
                        "id": "gemini-2.5-flash",
                        "name": "Gemini 2.5 Flash"
                    },
                    "imagen-3": {
                        "id": "imagen-3.0-generate-002",
                        "name": "Imagen 3"
                    }
                }
            }
        },
        description="LLM provider table"
    )
    DEFAULT_LLM_PROVIDER: str = Field(default="gemini", description="Default provider")
    DEFAULT_LLM_MODEL_KEY: str = Field(default="gemini-2.5-flash", description="Default text model key")
    DEFAULT_IMAGE_MODEL_KEY: str = Field(default="imagen-3", description="Default image model key")

    @property
    def REDIS_KEY_PREFIXES(self) -> dict:
        """Redis key prefixes"""
        return {
            "RATE_LIMIT": "holiday_cards:rate_limit:",
        }

    @staticmethod
    def _get_debug() -> bool:
        """DEBUG follows POD_ENV"""
        return os.getenv("POD_ENV", "test").lower() != "online"

    @property
    def DB_HOST(self) -> str:
        if self.POD_ENV == "online":
            return self.ONLINE_DB_HOST
        else:
            return self.DEV_DB_HOST

    @property
    def DB_USER(self) -> str:
        if self.POD_ENV == "online":
            return self.ONLINE_DB_USER
        else:
            return self.DEV_DB_USER

    @property
    def DB_PASSWORD(self) -> str:
        if self.POD_ENV == "online":
            return self.ONLINE_DB_PASSWORD
        else:
            return self.DEV_DB_PASSWORD

    @property
    def REDIS_URL(self) -> str:
        """Redis URL for the current environment"""
        if self.POD_ENV == "online":
            return self.REDIS_ONLINE_URL
        elif self.POD_ENV == "yufa":
            return self.REDIS_YUFA_URL
        else:
            return self.REDIS_DEV_URL

    @property
    def RATE_LIMIT_WINDOW_MS(self) -> int:
        return self.RATE_LIMIT_WINDOW_HOURS * 60 * 60 * 1000

    @property
    def DOCS_URL(self) -> Optional[str]:
        return "/docs" if self.DEBUG else None

    @property
    def REDOC_URL(self) -> Optional[str]:
        return "/redoc" if self.DEBUG else None

    @property
    def OPENAPI_URL(self) -> Optional[str]:
        return "/openapi.json" if self.DEBUG else None


settings = Settings()
