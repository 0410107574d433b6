import threading
import time

from politecrawler.frontier import Frontier


def test_admit_is_idempotent():
    f = Frontier()
    assert f.admit("https://a.com/x", 5)
    assert not f.admit("https://a.com/x", 9)
    assert len(f) == 1
    assert f.is_visited("https://a.com/x")
    task = f.take(timeout=0.1)
    assert task.url == "https://a.com/x"
    assert task.priority == 5


def test_take_highest_priority_first_fifo_on_ties():
    f = Frontier()
    f.admit("https://a.com/low", 1)
    f.admit("https://a.com/high", 7)
    f.admit("https://a.com/mid-1", 3)
    f.admit("https://a.com/mid-2", 3)
    order = [f.take(timeout=0.1).url for _ in range(4)]
    assert order == ["https://a.com/high", "https://a.com/mid-1", "https://a.com/mid-2", "https://a.com/low"]


def test_visited_survives_dequeue():
    f = Frontier()
    f.admit("https://a.com/x", 1)
    f.take(timeout=0.1)
    f.task_done()
    assert not f.admit("https://a.com/x", 1)
    assert f.visited_count == 1


def test_concurrent_admission_of_same_url_admits_once():
    f = Frontier()
    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(16)

    def admit():
        barrier.wait()
        ok = f.admit("https://a.com/same", 3)
        with lock:
            results.append(ok)

    threads = [threading.Thread(target=admit) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results.count(True) == 1
    assert len(f) == 1


def test_take_times_out_when_empty():
    f = Frontier()
    assert f.take(timeout=0.05) is None


def test_take_blocks_until_admit():
    f = Frontier()
    got = []

    def consumer():
        got.append(f.take(timeout=2.0))

    t = threading.Thread(target=consumer)
    t.start()
    time.sleep(0.05)
    f.admit("https://a.com/late", 2)
    t.join(timeout=2.0)
    assert got and got[0].url == "https://a.com/late"


def test_close_wakes_blocked_takers():
    f = Frontier()
    got = []
    t = threading.Thread(target=lambda: got.append(f.take()))
    t.start()
    time.sleep(0.05)
    f.close()
    t.join(timeout=2.0)
    assert not t.is_alive()
    assert got == [None]


def test_wait_idle_tracks_task_done():
    f = Frontier()
    f.admit("https://a.com/1", 1)
    f.admit("https://a.com/2", 1)
    assert f.unfinished == 2
    assert not f.wait_idle(timeout=0.01)
    for _ in range(2):
        f.take(timeout=0.1)
        f.task_done()
    assert f.wait_idle(timeout=0.1)
    assert f.unfinished == 0
