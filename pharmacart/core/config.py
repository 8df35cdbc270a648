from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RATE_SOURCES: List[str] = [
    "https://api.exchangerate-api.com/v4/latest/INR",
    "https://api.frankfurter.app/latest?from=INR",
    "https://cdn.jsdelivr.net/npm/@fawazahmed0/currency-api@latest/v1/currencies/inr.json",
]

BUNDLED_CATALOG = Path(__file__).resolve().parent.parent / "data" / "products.json"


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    CATALOG_PATH, RATES_REFRESH_INTERVAL_SECONDS, RATE_SOURCE_URLS as a JSON list).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "PharmaCart Pricing"
    debug: bool = False
    version: str = "0.1.0"

    # Catalog
    catalog_path: Optional[Path] = None  # bundled sample when not provided
    default_page_size: int = Field(50, ge=1, le=500)

    # Exchange rates
    rate_source_urls: List[str] = Field(
        default_factory=lambda: list(DEFAULT_RATE_SOURCES)
    )
    rates_refresh_interval_seconds: float = Field(120.0, gt=0)
    rates_refresh_enabled: bool = True
    # httpx transport default; sources are not retried, a failure moves on
    http_timeout_seconds: float = 5.0
    http_retries: int = Field(0, ge=0, le=5)

    # Cart sessions (in memory only)
    session_idle_ttl_seconds: float = Field(3600.0, gt=0)
    max_sessions: int = Field(10000, ge=1)

    def init_post_load(self) -> None:
        """Finalize derived fields."""
        if self.catalog_path is None:
            self.catalog_path = BUNDLED_CATALOG


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
