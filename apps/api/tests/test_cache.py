#!/usr/bin/env python3

from __future__ import annotations

import threading
import unittest

from packages.treeshuffle_core.cache import ResultCache


class ResultCacheTests(unittest.TestCase):
    def test_oldest_entry_is_evicted(self) -> None:
        cache = ResultCache(capacity=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        self.assertNotIn("a", cache)
        self.assertEqual(cache.keys(), ["b", "c"])
        self.assertIsNone(cache.get("a"))

    def test_overwrite_keeps_insertion_age(self) -> None:
        cache = ResultCache(capacity=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("a", 10)
        cache.put("c", 3)
        self.assertEqual(cache.keys(), ["b", "c"])

    def test_capacity_floor_and_clear(self) -> None:
        cache = ResultCache(capacity=0)
        cache.put("a", 1)
        cache.put("b", 2)
        self.assertEqual(len(cache), 1)
        cache.clear()
        self.assertEqual(len(cache), 0)

    def test_concurrent_puts_stay_bounded(self) -> None:
        cache = ResultCache(capacity=5)

        def worker(offset: int) -> None:
            for n in range(50):
                cache.put((offset, n), n)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(cache), 5)


if __name__ == "__main__":
    unittest.main()
