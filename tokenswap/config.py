from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Log renderer: JSON lines or human-readable console output",
    )

    # Upstream price feed
    price_feed_base_url: str = Field(
        default="https://interview.switcheo.com",
        description="Base URL of the upstream price feed",
    )
    price_feed_path: str = Field(
        default="/prices.json",
        description="Path of the JSON price list on the upstream feed",
    )

    # Cache Settings
    price_cache_ttl_seconds: float = Field(
        default=60,
        gt=0,
        description="Seconds a fetched price list is served without refetching",
    )

    # Timeouts
    request_timeout_seconds: float = Field(
        default=10,
        gt=0,
        description="Upper bound for a single price feed request",
    )

    # Simulated settlement
    settlement_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Artificial delay applied to every simulated swap",
    )

    # Swap session registry
    swap_session_idle_ttl_seconds: float = Field(
        default=1800,
        gt=0,
        description="Sessions untouched for this long are dropped",
    )
    swap_session_max: int = Field(
        default=1000,
        ge=1,
        description="Open sessions kept before the least recently used is evicted",
    )

    @property
    def price_feed_url(self) -> str:
        return f"{self.price_feed_base_url.rstrip('/')}{self.price_feed_path}"


# Global settings instance
settings = Settings()
