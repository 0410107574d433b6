from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol


@dataclass(frozen=True)
class CrawlTask:
    url: str
    priority: int


@dataclass(frozen=True)
class FetchResult:
    status: int
    content_type: str
    text: str
    size_bytes: int
    location: Optional[str] = None


class HttpClientProtocol(Protocol):
    def fetch(self, url: str) -> Optional[FetchResult]: ...


# (html, base_url) -> absolute link URLs
LinkExtractor = Callable[[str, str], List[str]]


class OutcomeStatus(Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchOutcome:
    status: OutcomeStatus
    attempts: int = 0
    links_admitted: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED
