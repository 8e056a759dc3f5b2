import json
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_project_root = Path(__file__).resolve().parents[1]
load_dotenv(_project_root / ".env", override=False)


def _coerce_json(value: str):
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./trustimonials.db"
    DB_POOL_SIZE: int = 20
    DB_POOL_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30

    # JSON list or comma separated origins.
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000"

    AUTH_JWT_SECRET: str = "dev-secret-change-me"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: str | None = None

    FRONTEND_URL: str = "http://localhost:3000"
    # Public origin of this API as seen by host pages; falls back to the request origin.
    PUBLIC_BASE_URL: str | None = None
    EMBED_SCRIPT_CACHE_SECONDS: int = 3600
    DEFAULT_WALL_ITEMS: int = 12

    PUBLIC_SUBMISSION_RATE_LIMIT: int = 10
    PUBLIC_SUBMISSION_RATE_WINDOW_SECONDS: int = 15 * 60

    @field_validator("PUBLIC_SUBMISSION_RATE_LIMIT", "PUBLIC_SUBMISSION_RATE_WINDOW_SECONDS")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Rate limit settings must be positive integers")
        return value

    @property
    def cors_origins(self) -> list[str]:
        parsed = _coerce_json(self.BACKEND_CORS_ORIGINS)
        if isinstance(parsed, list):
            return sorted({str(origin).strip() for origin in parsed if str(origin).strip()})
        return sorted({origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()})

    @property
    def frontend_url(self) -> str:
        return self.FRONTEND_URL.rstrip("/")

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
