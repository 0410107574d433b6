import heapq
import itertools
import threading
from typing import List, Optional, Set, Tuple

from .types import CrawlTask


class Frontier:
    """Priority queue of pending tasks plus the set of every URL ever admitted.

    A URL is pushed only by the call that inserted it into ``visited``, so each
    canonical URL is admitted at most once per crawl. Higher priority is served
    first, insertion order breaks ties. ``task_done``/``wait_idle`` follow the
    ``queue.Queue`` join protocol.
    """

    def __init__(self) -> None:
        self._visited: Set[str] = set()
        self._heap: List[Tuple[int, int, CrawlTask]] = []
        self._seq = itertools.count()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._all_done = threading.Condition(self._lock)
        self._unfinished = 0
        self._closed = False

    def admit(self, url: str, priority: int) -> bool:
        with self._lock:
            if url in self._visited:
                return False
            self._visited.add(url)
            heapq.heappush(self._heap, (-priority, next(self._seq), CrawlTask(url, priority)))
            self._unfinished += 1
            self._not_empty.notify()
            return True

    def take(self, timeout: Optional[float] = None) -> Optional[CrawlTask]:
        """Highest-priority task, blocking while empty; None once closed or on timeout."""
        with self._not_empty:
            if not self._not_empty.wait_for(lambda: self._heap or self._closed, timeout):
                return None
            if self._closed:
                return None
            _, _, task = heapq.heappop(self._heap)
            return task

    def task_done(self) -> None:
        with self._lock:
            if self._unfinished <= 0:
                raise ValueError("task_done() called too many times")
            self._unfinished -= 1
            if self._unfinished == 0:
                self._all_done.notify_all()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        with self._all_done:
            self._all_done.wait_for(lambda: self._unfinished == 0 or self._closed, timeout)
            return self._unfinished == 0

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._not_empty.notify_all()
            self._all_done.notify_all()

    def is_visited(self, url: str) -> bool:
        with self._lock:
            return url in self._visited

    @property
    def visited_count(self) -> int:
        with self._lock:
            return len(self._visited)

    @property
    def unfinished(self) -> int:
        with self._lock:
            return self._unfinished

    def __len__(self) -> int:
        with self._lock:
            return len(self._heap)
