import threading
import time

import pytest

from politecrawler.rate import RateLimiter


def make_clock():
    timeline = [0.0]
    sleeps = []

    def now():
        return timeline[0]

    def sleep(s):
        sleeps.append(s)
        timeline[0] += s

    return timeline, sleeps, now, sleep


def test_rate_limiter_waits():
    timeline, sleeps, now, sleep = make_clock()
    rl = RateLimiter(2.0, now=now, sleep=sleep)
    rl.acquire()
    assert sleeps == []  # first call no wait
    rl.acquire()
    assert sleeps and 0.49 <= sleeps[-1] <= 0.5


def test_rate_limiter_n_acquires_span_at_least_n_minus_one_intervals():
    timeline, sleeps, now, sleep = make_clock()
    rl = RateLimiter(4.0, now=now, sleep=sleep)
    for _ in range(5):
        rl.acquire()
    assert timeline[0] >= (5 - 1) * 0.25 - 1e-9


def test_rate_limiter_no_wait_after_idle_gap():
    timeline, sleeps, now, sleep = make_clock()
    rl = RateLimiter(1.0, now=now, sleep=sleep)
    rl.acquire()
    timeline[0] += 5.0
    assert rl.acquire() == 0
    assert sleeps == []


def test_rate_limiter_rejects_non_positive_rate():
    with pytest.raises(ValueError):
        RateLimiter(0)


def test_rate_limiter_concurrent_callers_get_distinct_slots():
    rl = RateLimiter(50.0)  # 20ms interval
    finished = []
    lock = threading.Lock()

    def grab():
        rl.acquire()
        with lock:
            finished.append(time.monotonic())

    threads = [threading.Thread(target=grab) for _ in range(6)]
    t0 = time.monotonic()
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    # six permits need at least five intervals, whatever the thread interleaving
    assert time.monotonic() - t0 >= 5 * 0.02 - 0.005
    assert len(finished) == 6
