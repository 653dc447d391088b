# classy_backend/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)
      - STRIPE_SECRET_KEY
      - STRIPE_WEBHOOK_SECRET (signing secret of the webhook endpoint)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (needed for image uploads)
      - SITE_URL (storefront origin used when the request has no Origin header)
      - ADMIN_ENFORCE_AUTH (require a verified admin token on admin routes)
    """

    PROJECT_NAME: str = "Classy Diamonds API"
    API_V1_STR: str = "/api/v1"

    # Supabase / DB config
    DATABASE_URL: str
    SUPABASE_URL: str
    SUPABASE_KEY: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "assets"

    # Stripe
    STRIPE_SECRET_KEY: str
    STRIPE_WEBHOOK_SECRET: str
    STRIPE_CURRENCY: str = "usd"

    # Storefront
    SITE_URL: str = "http://localhost:3000"
    STORE_INBOX_EMAIL: str | None = None
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Admin routes: when False, the bearer identity is only used to attribute
    # log entries and ADMIN_FALLBACK_IDENTITY stands in when it is missing.
    ADMIN_ENFORCE_AUTH: bool = False
    ADMIN_FALLBACK_IDENTITY: str = "admin"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
