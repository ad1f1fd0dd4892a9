"""Tests for the frontend benchmark cache."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cubo_frontend.benchmark_cache import BenchmarkCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_hit_within_ttl():
    clock = FakeClock()
    cache = BenchmarkCache(ttl_seconds=1800, clock=clock)
    cache.put("CRM para vendas", "texto")
    clock.now += 1799
    assert cache.get("CRM para vendas") == "texto"


def test_expires_after_ttl():
    clock = FakeClock()
    cache = BenchmarkCache(ttl_seconds=1800, clock=clock)
    cache.put("CRM para vendas", "texto")
    clock.now += 1800
    assert cache.get("CRM para vendas") is None
    assert len(cache) == 0


def test_key_ignores_case_and_whitespace():
    cache = BenchmarkCache(clock=FakeClock())
    cache.put("  CRM Para Vendas ", "texto")
    assert cache.get("crm para vendas") == "texto"


def test_blank_description_not_cached():
    cache = BenchmarkCache(clock=FakeClock())
    cache.put("   ", "texto")
    assert len(cache) == 0
    assert cache.get("") is None


def test_put_overwrites_and_restarts_ttl():
    clock = FakeClock()
    cache = BenchmarkCache(ttl_seconds=10, clock=clock)
    cache.put("a", "v1")
    clock.now += 8
    cache.put("a", "v2")
    clock.now += 8
    assert cache.get("a") == "v2"


def test_clear_and_instances_are_independent():
    first = BenchmarkCache(clock=FakeClock())
    second = BenchmarkCache(clock=FakeClock())
    first.put("a", "v")
    assert second.get("a") is None
    first.clear()
    assert len(first) == 0


def test_stats():
    cache = BenchmarkCache(clock=FakeClock())
    cache.put("a", "v")
    cache.get("a")
    cache.get("b")
    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["entries"] == 1
