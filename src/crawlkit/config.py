"""Configuration using pydantic-settings."""

from typing import Literal

from pydantic_settings import BaseSettings


class CrawlerSettings(BaseSettings):
    """Crawler configuration."""

    timeout: float = 10.0
    user_agent: str = "crawlkit/0.1 (+https://github.com/crawlkit)"
    max_connections: int = 100
    max_keepalive_connections: int = 20
    queue_order: Literal["lifo", "fifo"] = "lifo"
    respect_robots: bool = False
    robots_cache_ttl: float = 3600.0

    model_config = {"env_prefix": "CRAWLKIT_"}


settings = CrawlerSettings()
