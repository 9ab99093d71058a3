"""
Crawler configuration.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/89.0.4389.114 Safari/537.36"
)


@dataclass(slots=True)
class CrawlerConfig:
    """Settings shared by every request issued during a crawl."""
    max_concurrent_requests: int = 40
    request_timeout_ms: int = 15000
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.max_concurrent_requests < 1:
            raise ValueError(
                f"max_concurrent_requests must be at least 1, got {self.max_concurrent_requests}"
            )
        if self.request_timeout_ms < 0:
            raise ValueError(
                f"request_timeout_ms must not be negative, got {self.request_timeout_ms}"
            )
        if not self.user_agent:
            raise ValueError("user_agent must not be empty")

    @property
    def request_timeout_s(self) -> Optional[float]:
        """Timeout in seconds as expected by requests (0 disables it)."""
        if self.request_timeout_ms == 0:
            return None
        return self.request_timeout_ms / 1000

    @property
    def headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent}
