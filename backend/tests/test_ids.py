"""
Tests for batch id generation.
"""
import threading

from app.core.ids import BatchIdGenerator


class TestBatchIdGenerator:
    def test_millisecond_timestamp(self):
        generate = BatchIdGenerator(clock=lambda: 1718031234.5)
        assert generate() == "1718031234500"

    def test_same_millisecond_still_unique(self):
        generate = BatchIdGenerator(clock=lambda: 1718031234.5)

        ids = [generate() for _ in range(3)]

        assert ids == ["1718031234500", "1718031234501", "1718031234502"]

    def test_clock_going_backwards(self):
        ticks = iter([1718031234.5, 1718031200.0])
        generate = BatchIdGenerator(clock=lambda: next(ticks))

        first, second = generate(), generate()

        assert int(second) > int(first)

    def test_unique_across_threads(self):
        generate = BatchIdGenerator(clock=lambda: 1718031234.5)
        ids = []
        lock = threading.Lock()

        def worker():
            for _ in range(50):
                value = generate()
                with lock:
                    ids.append(value)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ids) == 200
        assert len(set(ids)) == 200
