import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, List, Optional

from .config import CrawlConfig
from .errors import CancelToken, CrawlInterrupted
from .frontier import Frontier
from .metrics import Metrics, StatsLogger
from .net import HttpClient
from .parsing import Extractor, UrlTools
from .pipeline import FetchPipeline
from .politeness import PolitenessRegistry
from .rate import RateLimiter
from .types import HttpClientProtocol, LinkExtractor


class Crawler:
    def __init__(
        self,
        config: CrawlConfig,
        http_client: HttpClientProtocol | None = None,
        link_extractor: LinkExtractor | None = None,
    ):
        self.config = config
        self.http = http_client or HttpClient(
            config.user_agent,
            connect_timeout=config.connect_timeout,
            request_timeout=config.request_timeout,
            concurrency=config.max_workers,
            max_connections=config.max_connections,
        )
        self.token = CancelToken()
        self.metrics = Metrics()
        self.frontier = Frontier()
        self.rate = RateLimiter(config.requests_per_second, sleep=self.token.sleep)
        self.politeness = PolitenessRegistry(self.http, config.default_crawl_delay, sleep=self.token.sleep)
        self.pipeline = FetchPipeline(
            self.http,
            link_extractor or Extractor.extract_links,
            self.add_url,
            max_retries=config.max_retries,
            backoff_seconds=config.backoff_seconds,
            sleep=self.token.sleep,
            metrics=self.metrics,
        )
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []
        self.stats_thread: Optional[StatsLogger] = None

    def add_url(self, url: str, priority: int) -> bool:
        canonical = UrlTools.canonicalize(url)
        if canonical is None:
            logging.debug("Dropping malformed URL: %r", url)
            self.metrics.record_admission(False)
            return False
        if not UrlTools.is_valid(canonical, self.config.allowed_domains, self.config.blocked_domains):
            logging.debug("Dropping rejected URL: %s", canonical)
            self.metrics.record_admission(False)
            return False
        admitted = self.frontier.admit(canonical, priority)
        self.metrics.record_admission(admitted)
        return admitted

    def add_urls(self, urls: Iterable[str], priority: int) -> int:
        return sum(1 for url in urls if self.add_url(url, priority))

    def is_visited(self, url: str) -> bool:
        canonical = UrlTools.canonicalize(url)
        return canonical is not None and self.frontier.is_visited(canonical)

    def worker(self) -> None:
        while not self.token.cancelled:
            task = self.frontier.take()
            if task is None:
                return
            try:
                if task.priority > 0:
                    self.rate.acquire()
                    self.politeness.await_turn(task.url)
                self.token.check()
                self.pipeline.fetch(task)
            except CrawlInterrupted:
                logging.debug("Worker interrupted while handling %s", task.url)
                return
            except Exception:
                logging.exception("Unexpected error while crawling %s", task.url)
            finally:
                self.frontier.task_done()

    @property
    def running(self) -> bool:
        return any(not f.done() for f in self._futures)

    def start(self) -> None:
        if self._executor is not None:
            raise RuntimeError("Crawler already started")
        logging.info(
            "Starting crawl: %d workers, %.2f req/s, allowed domains: %s, blocked domains: %s",
            self.config.max_workers,
            self.config.requests_per_second,
            ", ".join(sorted(self.config.allowed_domains)) or "(all)",
            ", ".join(sorted(self.config.blocked_domains)) or "(none)",
        )
        if self.config.metrics_interval and self.config.metrics_interval > 0:
            self.stats_thread = StatsLogger(self.metrics, self.config.metrics_interval, logging.info)
            self.stats_thread.start()
        self._executor = ThreadPoolExecutor(max_workers=self.config.max_workers, thread_name_prefix="crawl-worker")
        self._futures = [self._executor.submit(self.worker) for _ in range(self.config.max_workers)]

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Wait until every admitted task has been processed."""
        return self.frontier.wait_idle(timeout)

    def stop(self, wait: bool = True) -> None:
        self.token.cancel()
        self.frontier.close()
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
        if self.stats_thread:
            self.stats_thread.stop()
        totals, _ = self.metrics.snapshot()
        logging.info(
            "Stopped. Visited: %d, pages: %d, failed: %d, pending: %d",
            self.frontier.visited_count,
            totals.pages_ok,
            totals.tasks_failed,
            len(self.frontier),
        )

    def run(self, timeout: Optional[float] = None) -> bool:
        """Crawl until the frontier drains or `timeout` elapses; True if it drained."""
        self.start()
        try:
            return self.wait_idle(timeout)
        finally:
            self.stop()


def new_crawler(
    max_workers: int,
    requests_per_second: float,
    allowed_domains: Iterable[str] = (),
    blocked_domains: Iterable[str] = (),
    **kwargs,
) -> Crawler:
    http_client = kwargs.pop("http_client", None)
    link_extractor = kwargs.pop("link_extractor", None)
    config = CrawlConfig(
        max_workers=max_workers,
        requests_per_second=requests_per_second,
        allowed_domains=frozenset(allowed_domains),
        blocked_domains=frozenset(blocked_domains),
        **kwargs,
    )
    return Crawler(config, http_client=http_client, link_extractor=link_extractor)
