"""One task's fetch: GET, classify the response, retry with linear backoff, extract links.

Redirects are not followed in place. The ``Location`` target is admitted to
the frontier at the task's own priority and the attempt still counts against
the retry budget. Extracted links are admitted one priority lower, so a task
at priority ``p`` can reach at most ``p - 1`` hops further.
"""
import logging
import time
from typing import Callable, Optional
from urllib.parse import urljoin

from .errors import (
    CrawlInterrupted,
    HttpStatusError,
    RecoverableFetchError,
    RedirectError,
    TransportError,
    UnsupportedContentType,
)
from .metrics import Metrics
from .types import CrawlTask, FetchOutcome, FetchResult, HttpClientProtocol, LinkExtractor, OutcomeStatus


logger = logging.getLogger(__name__)

REDIRECT_STATUSES = (301, 302)
HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")
DEFAULT_MAX_RETRIES = 3


class FetchPipeline:
    def __init__(
        self,
        http: HttpClientProtocol,
        extract_links: LinkExtractor,
        admit: Callable[[str, int], bool],
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = 1.0,
        sleep: Callable[[float], None] | None = None,
        metrics: Optional[Metrics] = None,
    ):
        self.http = http
        self.extract_links = extract_links
        self.admit = admit
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep or time.sleep
        self.metrics = metrics or Metrics()

    def _attempt(self, task: CrawlTask) -> FetchResult:
        t0 = time.perf_counter()
        try:
            response = self.http.fetch(task.url)
        except CrawlInterrupted:
            raise
        except Exception as exc:
            self.metrics.record_fetch(False, 0, (time.perf_counter() - t0) * 1000.0)
            raise TransportError(f"{type(exc).__name__} fetching {task.url}: {exc}") from exc
        dt_ms = (time.perf_counter() - t0) * 1000.0
        if response is None:
            self.metrics.record_fetch(False, 0, dt_ms)
            raise TransportError(f"No response from {task.url}")
        ok = response.status < 300
        self.metrics.record_fetch(ok, response.size_bytes, dt_ms)
        if response.status in REDIRECT_STATUSES:
            self.metrics.record_redirect()
            location = urljoin(task.url, response.location) if response.location else None
            if location:
                self.admit(location, task.priority)
            raise RedirectError(response.status, location)
        if response.status >= 400:
            raise HttpStatusError(response.status)
        content_type = response.content_type or ""
        if not any(ct in content_type.lower() for ct in HTML_CONTENT_TYPES):
            raise UnsupportedContentType(content_type)
        return response

    def _admit_links(self, task: CrawlTask, html: str) -> int:
        next_priority = task.priority - 1
        admitted = 0
        for link in self.extract_links(html, task.url):
            if not link or link.strip().lower().startswith("javascript:"):
                continue
            if self.admit(link, next_priority):
                admitted += 1
        return admitted

    def fetch(self, task: CrawlTask) -> FetchOutcome:
        if task.priority <= 0:
            logger.debug("Dropping %s: priority %d exhausted", task.url, task.priority)
            return FetchOutcome(OutcomeStatus.SKIPPED)

        logger.info("Crawling: %s, priority: %d", task.url, task.priority)
        retries = 0
        while True:
            try:
                response = self._attempt(task)
            except RecoverableFetchError as exc:
                retries += 1
                if retries >= self.max_retries:
                    logger.error("Error crawling %s after %d retries: %s", task.url, self.max_retries, exc)
                    self.metrics.record_task(False)
                    return FetchOutcome(OutcomeStatus.FAILED, attempts=retries, error=str(exc))
                logger.info("Retry %d for %s: %s", retries, task.url, exc)
                self.metrics.record_retry()
                self._sleep(self.backoff_seconds * retries)
                continue
            admitted = self._admit_links(task, response.text)
            self.metrics.record_task(True)
            logger.debug("Crawled %s: %d new links", task.url, admitted)
            return FetchOutcome(OutcomeStatus.SUCCEEDED, attempts=retries + 1, links_admitted=admitted)
