"""Per-host crawl delays learned from robots.txt.

Only the ``Crawl-delay`` directive of the ``User-agent: *`` group is
interpreted. A host's delay is resolved once per run; every failure path
(transport error, non-200 status, no directive, bad number) resolves to the
configured default.
"""
import logging
import math
import threading
import time
from concurrent.futures import Future
from typing import Callable, Dict, Optional
from urllib.parse import urlsplit

from .errors import CrawlInterrupted
from .types import HttpClientProtocol


logger = logging.getLogger(__name__)


def parse_crawl_delay(text: str) -> Optional[float]:
    """Return the ``Crawl-delay`` (seconds) of the ``User-agent: *`` group, or None."""
    in_wildcard = False
    group_has_directives = False
    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue
        if line.startswith("User-agent:"):
            agent = line[len("User-agent:"):].strip()
            if group_has_directives:
                in_wildcard = False
                group_has_directives = False
            in_wildcard = in_wildcard or agent == "*"
            continue
        group_has_directives = True
        if in_wildcard and line.startswith("Crawl-delay:"):
            value = line[len("Crawl-delay:"):].strip()
            try:
                delay = float(value)
            except ValueError:
                return None
            if not math.isfinite(delay) or delay < 0:
                return None
            return delay
    return None


class PolitenessRegistry:
    def __init__(
        self,
        http: HttpClientProtocol,
        default_delay: float = 1.0,
        now: Callable[[], float] | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        self.http = http
        self.default_delay = default_delay
        self._now = now or time.monotonic
        self._sleep = sleep or time.sleep
        self._lock = threading.Lock()
        self._delays: Dict[str, "Future[float]"] = {}
        self._last_start: Dict[str, float] = {}

    def _fetch_delay(self, scheme: str, host: str) -> float:
        robots_url = f"{scheme}://{host}/robots.txt"
        response = self.http.fetch(robots_url)
        if response is None:
            logger.debug("robots.txt unreachable for %s, using default delay", host)
            return self.default_delay
        if response.status != 200:
            logger.debug("robots.txt for %s returned HTTP %d, using default delay", host, response.status)
            return self.default_delay
        delay = parse_crawl_delay(response.text)
        if delay is None:
            return self.default_delay
        logger.info("Crawl-delay for %s: %.2fs", host, delay)
        return delay

    def ensure_delay_known(self, scheme: str, host: str) -> float:
        with self._lock:
            future = self._delays.get(host)
            owner = future is None
            if owner:
                future = Future()
                self._delays[host] = future
        if not owner:
            return future.result()
        try:
            delay = self._fetch_delay(scheme, host)
        except Exception:
            logger.warning("robots.txt lookup failed for %s, using default delay", host, exc_info=True)
            delay = self.default_delay
        future.set_result(delay)
        return delay

    def crawl_delay(self, host: str) -> Optional[float]:
        with self._lock:
            future = self._delays.get(host)
        if future is None or not future.done():
            return None
        return future.result()

    def await_turn(self, url: str) -> float:
        """Block until `url`'s host may be requested again; returns the seconds slept."""
        try:
            parts = urlsplit(url)
            host = parts.netloc
            delay = self.ensure_delay_known(parts.scheme, host)
            with self._lock:
                now = self._now()
                last = self._last_start.get(host)
                start = now if last is None else max(now, last + delay)
                self._last_start[host] = start
            sleep_for = start - now
            if sleep_for > 0:
                self._sleep(sleep_for)
            return sleep_for
        except CrawlInterrupted:
            raise
        except Exception:
            logger.warning("Politeness check failed for %s, continuing", url, exc_info=True)
            return 0.0
