from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Server settings, read from the environment or .env.

    Required:
      - DATABASE_URL     Postgres DSN in deployments, sqlite for local runs/tests
      - AUTH_JWT_SECRET  signing secret shared with the auth provider

    Everything else has a default.
    """

    PROJECT_NAME: str = "Storefront API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str

    AUTH_JWT_SECRET: str
    AUTH_JWT_ALG: str = "HS256"

    # ISO currency of catalog prices; checkout amounts are in its minor unit
    CURRENCY: str = "usd"

    # JSON list in the environment, e.g. '["https://shop.example.com"]'
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Parsed once per process."""
    return Settings()
