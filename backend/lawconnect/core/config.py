from pydantic_settings import BaseSettings
from typing import List
import os

# Explicitly define path to .env file in backend directory
# Current file is in backend/lawconnect/core/, so we need to go up 3 levels to backend/
BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
ENV_PATH = os.path.join(BACKEND_DIR, ".env")

class Settings(BaseSettings):
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "LawConnect"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Database
    MONGODB_URL: str
    DATABASE_NAME: str = "lawconnect"
    MONGODB_MAX_POOL_SIZE: int = 5
    MONGODB_MIN_POOL_SIZE: int = 0
    MONGODB_MAX_IDLE_TIME_MS: int = 10000

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    PASSWORD_HASH_ROUNDS: int = 10

    # Password reset
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60
    CLIENT_URL: str = "http://localhost:3000"

    # AI assistant
    AI_API_BASE_URL: str = "https://batgpt.vercel.app/api/gpt"
    AI_MODEL_NAME: str = "GPT-5"
    AI_TIMEOUT_SECONDS: float = 30.0
    AI_HISTORY_DEFAULT_LIMIT: int = 20
    AI_HISTORY_MAX_LIMIT: int = 100

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    RESET_TOKEN_SWEEP_INTERVAL_SECONDS: float = 3600.0

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ENV_PATH
        case_sensitive = True
        extra = "ignore"

settings = Settings()
