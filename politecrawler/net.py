import logging
from typing import Optional

import urllib3
from urllib3 import exceptions as urllib3_exc

from .types import FetchResult


logger = logging.getLogger(__name__)


class HttpClient:
    """urllib3 transport. Retries and redirects are left to the fetch pipeline."""

    def __init__(
        self,
        user_agent: str,
        connect_timeout: float = 10.0,
        request_timeout: float = 30.0,
        concurrency: int = 8,
        max_connections: int = 16,
    ):
        self.user_agent = user_agent
        self.timeout = urllib3.Timeout(connect=connect_timeout, read=request_timeout)
        self.http = urllib3.PoolManager(
            num_pools=max(8, concurrency),
            maxsize=max_connections,
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
                "Accept-Encoding": "gzip, deflate",
            },
            retries=False,
        )

    def fetch(self, url: str) -> Optional[FetchResult]:
        try:
            response = self.http.request(
                "GET",
                url,
                timeout=self.timeout,
                preload_content=True,
                redirect=False,
            )
        except urllib3_exc.HTTPError as exc:
            logger.debug("Transport error for %s: %s", url, exc)
            return None
        body = response.data or b""
        content_type = response.headers.get("Content-Type", "") or ""
        # callers classify by content type; robots.txt is read whatever it is served as
        text = body.decode("utf-8", errors="ignore")
        return FetchResult(
            status=response.status,
            content_type=content_type,
            text=text,
            size_bytes=len(body),
            location=response.headers.get("Location"),
        )
