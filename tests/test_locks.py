import threading
import time

from py_colstore.storage.locks import RWLock


def test_readers_share_the_lock():
    lock = RWLock()
    inside = threading.Barrier(3, timeout=5)

    def reader():
        with lock.read():
            # all three readers must be inside at once to pass the barrier
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not any(t.is_alive() for t in threads)


def test_writer_excludes_readers():
    lock = RWLock()
    events = []

    lock.acquire_write()

    def reader():
        with lock.read():
            events.append("read")

    t = threading.Thread(target=reader)
    t.start()
    time.sleep(0.05)
    assert events == []

    events.append("write-done")
    lock.release_write()
    t.join(timeout=5)
    assert events == ["write-done", "read"]


def test_writers_are_serialized():
    lock = RWLock()
    counter = {"n": 0}

    def bump():
        for _ in range(200):
            with lock.write():
                n = counter["n"]
                counter["n"] = n + 1

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert counter["n"] == 1600


def test_lock_released_on_exception():
    lock = RWLock()
    try:
        with lock.write():
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    # would block forever if the writer were still held
    with lock.read():
        pass
    with lock.write():
        pass
