"""
Tests for the keyed lock guarding start/resume.
"""
import threading
import time

from planta.services.locks import KeyedLock


class TestKeyedLock:
    def test_same_key_is_serialized(self):
        locks = KeyedLock()
        inside = []
        overlaps = []

        def worker():
            with locks.hold(("tareas_chasis", "VIN1")):
                if inside:
                    overlaps.append(True)
                inside.append(1)
                time.sleep(0.01)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert overlaps == []
        assert len(locks) == 0

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        entered = threading.Event()

        def other():
            with locks.hold(("tareas_chasis", "VIN2")):
                entered.set()

        with locks.hold(("tareas_chasis", "VIN1")):
            t = threading.Thread(target=other)
            t.start()
            assert entered.wait(timeout=2)
            t.join()
            assert len(locks) == 1

    def test_released_on_error(self):
        locks = KeyedLock()
        try:
            with locks.hold("k"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert len(locks) == 0
        with locks.hold("k"):
            assert len(locks) == 1
