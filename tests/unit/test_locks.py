"""Tests for keyed locks."""

from __future__ import annotations

import threading
import time

from basic_auth_operator.utils.locks import KeyedLock


class TestKeyedLock:
    """Test cases for KeyedLock."""

    def test_same_key_serializes(self):
        """Test that holders of the same key never overlap."""
        locks = KeyedLock()
        active = 0
        max_active = 0
        guard = threading.Lock()

        def work():
            nonlocal active, max_active
            with locks.hold("default/web"):
                with guard:
                    active += 1
                    max_active = max(max_active, active)
                time.sleep(0.01)
                with guard:
                    active -= 1

        threads = [threading.Thread(target=work) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert max_active == 1
        assert len(locks) == 1

    def test_different_keys_are_independent(self):
        """Test that another key can be held while one is held."""
        locks = KeyedLock()
        acquired = threading.Event()

        def other():
            with locks.hold("b"):
                acquired.set()

        with locks.hold("a"):
            t = threading.Thread(target=other)
            t.start()
            assert acquired.wait(timeout=1.0)
            t.join()

    def test_reentrant(self):
        """Test that the same thread may re-enter its own key."""
        locks = KeyedLock()
        with locks.hold("a"):
            with locks.hold("a"):
                pass
