"""Crawl error taxonomy and the shutdown token shared by all workers."""
import threading
from typing import Optional


class CrawlInterrupted(Exception):
    """Raised from a cancellable wait once shutdown has been requested."""


class RecoverableFetchError(Exception):
    """One fetch attempt failed in a way that is eligible for a retry."""


class TransportError(RecoverableFetchError):
    pass


class RedirectError(RecoverableFetchError):
    def __init__(self, status: int, location: Optional[str]):
        super().__init__(f"HTTP {status} redirect to {location or '(no Location)'}")
        self.status = status
        self.location = location


class HttpStatusError(RecoverableFetchError):
    def __init__(self, status: int):
        super().__init__(f"HTTP {status}")
        self.status = status


class UnsupportedContentType(RecoverableFetchError):
    def __init__(self, content_type: str):
        super().__init__(f"Unsupported content type: {content_type or '(none)'}")
        self.content_type = content_type


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check(self) -> None:
        if self._event.is_set():
            raise CrawlInterrupted()

    def sleep(self, seconds: float) -> None:
        """Sleep up to `seconds`, raising CrawlInterrupted if cancelled meanwhile."""
        if seconds <= 0:
            self.check()
            return
        if self._event.wait(seconds):
            raise CrawlInterrupted()
