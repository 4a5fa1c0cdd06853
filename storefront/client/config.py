from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class CartClientSettings(BaseSettings):
    """
    Settings for the client-side cart and wishlist stores.

    Read from CART_CLIENT_* environment variables or .env.
    """

    API_BASE_URL: str = "http://localhost:8000/api/v1"
    CACHE_DIR: Path = Path(".storefront")
    TIMEOUT: float = 10.0

    model_config = SettingsConfigDict(
        env_prefix="CART_CLIENT_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_client_settings() -> CartClientSettings:
    return CartClientSettings()
