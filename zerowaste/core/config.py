from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string; sqlite:// for local dev)
      - JWT_SECRET (signing secret for access tokens)

    Optional:
      - MIDTRANS_SERVER_KEY / MIDTRANS_CLIENT_KEY (payments are disabled without them)
      - SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY (only when STORAGE_BACKEND=supabase)
      - BASE_URL (prefix used to render image links)
      - FRONTEND_URL (payment redirect callbacks, CORS)
    """

    PROJECT_NAME: str = "ZeroWaste Market API"
    API_PREFIX: str = "/api"

    # development | production
    ENVIRONMENT: str = "development"

    DATABASE_URL: str

    # Access tokens
    JWT_SECRET: str
    JWT_ALG: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24

    # Account flows
    REQUIRE_EMAIL_VERIFICATION: bool = True
    VERIFICATION_TOKEN_HOURS: int = 24
    RESET_TOKEN_MINUTES: int = 60

    # Links
    BASE_URL: str = "http://localhost:5000"
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # Uploaded files: local | supabase
    STORAGE_BACKEND: str = "local"
    UPLOAD_DIR: str = "uploads"

    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_BUCKET: str = "assets"

    # Payment gateway
    MIDTRANS_SERVER_KEY: str | None = None
    MIDTRANS_CLIENT_KEY: str | None = None
    MIDTRANS_IS_PRODUCTION: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
