"""Runtime configuration loaded from ``PAGEMETA_*`` environment variables."""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings with environment variable support."""

    model_config = SettingsConfigDict(env_prefix="PAGEMETA_", env_file=".env", extra="ignore")

    # Transport
    proxy_base: str = Field(
        default="https://cors-anywhere.herokuapp.com/",
        description="Base address prefixed to the target URL in proxied mode.",
    )
    proxy_access_url: str = Field(
        default="https://cors-anywhere.herokuapp.com/corsdemo",
        description="Page where a user requests temporary access to the proxy.",
    )
    default_transport: Literal["direct", "proxied"] = "proxied"
    fetch_timeout: float = Field(default=10.0, gt=0, description="Per-fetch timeout in seconds.")
    max_content_size: int = Field(default=10 * 1024 * 1024, description="Response body cap in bytes.")
    max_redirects: int = Field(default=10, ge=0)

    # Batch
    max_concurrency: Optional[int] = Field(
        default=10,
        description="Maximum number of in-flight fetches per batch (0 or empty = unbounded).",
    )
    www_domains: List[str] = Field(
        default_factory=lambda: ["purina.com"],
        description="Domain families whose hosts must carry a 'www.' prefix.",
    )

    # API
    batch_rate_limit: str = "10/minute"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
