"""Freshness cache tests - in-memory KV only, no network."""

import json

import pytest

from rpg_card import background
from rpg_card import cache as cache_module
from rpg_card.cache import FreshnessCache, MemoryKV
from rpg_card.models import UserRecord


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class RecordingKV:
    def __init__(self):
        self.calls = []
        self.data = {}

    def get(self, key):
        self.calls.append(("get", key))
        return self.data.get(key)

    def setex(self, key, seconds, value):
        self.calls.append(("setex", key, seconds))
        self.data[key] = value


class BrokenKV:
    def get(self, key):
        raise ConnectionError("kv down")

    def setex(self, key, seconds, value):
        raise ConnectionError("kv down")


class TestMemoryKV:
    def test_get_before_expiry(self):
        clock = FakeClock()
        kv = MemoryKV(clock)
        kv.setex("k", 10, "v")
        clock.now += 9.9
        assert kv.get("k") == "v"

    def test_expires_by_itself(self):
        clock = FakeClock()
        kv = MemoryKV(clock)
        kv.setex("k", 10, "v")
        clock.now += 10
        assert kv.get("k") is None

    def test_replace_resets_ttl(self):
        clock = FakeClock()
        kv = MemoryKV(clock)
        kv.setex("k", 10, "old")
        clock.now += 8
        kv.setex("k", 10, "new")
        clock.now += 8
        assert kv.get("k") == "new"

    def test_expired_entries_are_dropped_on_write(self):
        clock = FakeClock()
        kv = MemoryKV(clock)
        kv.setex("a", 10, "v")
        clock.now += 11
        kv.setex("b", 10, "v")
        assert "a" not in kv._data
        assert kv.get("b") == "v"


class TestFreshnessCache:
    def test_miss_returns_none(self, memory_cache):
        assert memory_cache.get("nobody") is None

    def test_set_and_get(self, memory_cache, alice):
        memory_cache.set("alice", alice)
        assert memory_cache.get("alice") == alice

    def test_key_is_case_insensitive(self, memory_cache, alice):
        memory_cache.set("Alice", alice)
        assert memory_cache.get("ALICE") == alice

    def test_distinct_keys_do_not_interfere(self, memory_cache, alice):
        bob = UserRecord(login="bob", followers=1)
        memory_cache.set("alice", alice)
        memory_cache.set("bob", bob)
        assert memory_cache.get("alice") == alice
        assert memory_cache.get("bob") == bob

    def test_expired_entry_is_absent(self, alice):
        clock = FakeClock()
        cache = FreshnessCache(MemoryKV(clock), ttl=60)
        cache.set("alice", alice)
        clock.now += 61
        assert cache.get("alice") is None

    def test_ttl_is_delegated_to_backend(self, alice):
        kv = RecordingKV()
        FreshnessCache(kv, ttl=123).set("alice", alice)
        assert kv.calls == [("setex", "rpg-card:user:alice", 123)]
        assert json.loads(kv.data["rpg-card:user:alice"])["login"] == "alice"

    def test_last_write_wins(self, memory_cache, alice):
        newer = UserRecord(login="alice", followers=99)
        memory_cache.set("alice", alice)
        memory_cache.set("alice", newer)
        assert memory_cache.get("alice") == newer

    def test_backend_errors_are_swallowed(self, alice):
        cache = FreshnessCache(BrokenKV())
        cache.set("alice", alice)
        assert cache.get("alice") is None

    @pytest.mark.parametrize("raw", ["not json", json.dumps({"bio": "no login"}), json.dumps([1, 2])])
    def test_corrupt_entry_is_a_miss(self, raw):
        kv = RecordingKV()
        kv.data["rpg-card:user:alice"] = raw
        assert FreshnessCache(kv).get("alice") is None

    def test_decoded_payload_is_accepted(self, alice):
        kv = RecordingKV()
        kv.data["rpg-card:user:alice"] = alice.to_dict()
        assert FreshnessCache(kv).get("alice") == alice

    def test_set_async_completes_in_background(self, memory_cache, alice):
        future = memory_cache.set_async("alice", alice)
        assert background.drain()
        assert future.done()
        assert memory_cache.get("alice") == alice

    def test_set_async_failure_does_not_raise(self, alice):
        future = FreshnessCache(BrokenKV()).set_async("alice", alice)
        assert background.drain()
        assert future.exception() is None


class TestKVClient:
    def test_unconfigured_returns_none(self, monkeypatch):
        monkeypatch.setattr(cache_module.config, "KV_REST_API_URL", "")
        monkeypatch.setattr(cache_module.config, "KV_REST_API_TOKEN", "")
        assert cache_module.get_kv_client() is None

    def test_configured_builds_redis(self, monkeypatch):
        created = {}

        class FakeRedis:
            def __init__(self, url, token):
                created.update(url=url, token=token)

        monkeypatch.setattr(cache_module, "Redis", FakeRedis)
        monkeypatch.setattr(cache_module.config, "KV_REST_API_URL", "https://kv.example")
        monkeypatch.setattr(cache_module.config, "KV_REST_API_TOKEN", "secret")
        assert isinstance(cache_module.get_kv_client(), FakeRedis)
        assert created == {"url": "https://kv.example", "token": "secret"}

    def test_client_failure_falls_back(self, monkeypatch):
        def boom(url, token):
            raise RuntimeError("bad url")

        monkeypatch.setattr(cache_module, "Redis", boom)
        monkeypatch.setattr(cache_module.config, "KV_REST_API_URL", "https://kv.example")
        monkeypatch.setattr(cache_module.config, "KV_REST_API_TOKEN", "secret")
        assert cache_module.get_kv_client() is None

    def test_shared_cache_uses_memory_without_kv(self, monkeypatch):
        monkeypatch.setattr(cache_module, "_shared", None)
        monkeypatch.setattr(cache_module, "get_kv_client", lambda: None)
        shared = cache_module.get_cache()
        assert shared is cache_module.get_cache()
        assert isinstance(shared._kv, MemoryKV)
