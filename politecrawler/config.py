from dataclasses import dataclass, field
from typing import FrozenSet, Iterable


DEFAULT_USER_AGENT = "politecrawler/1.0 (+https://example.com; contact: crawler@example.com)"


def _normalize_domains(domains: Iterable[str]) -> FrozenSet[str]:
    return frozenset(d.strip().lower() for d in domains if d and d.strip())


@dataclass(frozen=True)
class CrawlConfig:
    max_workers: int = 4
    requests_per_second: float = 1.0
    allowed_domains: FrozenSet[str] = field(default_factory=frozenset)
    blocked_domains: FrozenSet[str] = field(default_factory=frozenset)
    default_crawl_delay: float = 1.0
    max_retries: int = 3
    backoff_seconds: float = 1.0
    connect_timeout: float = 10.0
    request_timeout: float = 30.0
    max_connections: int = 16
    user_agent: str = DEFAULT_USER_AGENT
    metrics_interval: float = 0.0

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        # frozen dataclass: bypass __setattr__ to store the normalized sets
        object.__setattr__(self, "allowed_domains", _normalize_domains(self.allowed_domains))
        object.__setattr__(self, "blocked_domains", _normalize_domains(self.blocked_domains))
        object.__setattr__(self, "default_crawl_delay", max(0.0, self.default_crawl_delay))
