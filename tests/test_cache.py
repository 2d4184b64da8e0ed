"""
Caché TTL en memoria e invalidación por prefijo de delegación.
"""
from designaciones import cache as cache_module
from designaciones.cache import TTLCache, invalidate_entity, query_cache, scope_cache_key


class TestTTLCache:

    def test_expiry(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr(cache_module.time, "monotonic", lambda: now[0])
        cache = TTLCache(ttl_seconds=10)
        cache.set("k", "v")
        assert cache.get("k") == "v"
        now[0] += 10
        assert cache.get("k") is None

    def test_get_or_set_calls_loader_once(self):
        cache = TTLCache(ttl_seconds=60)
        calls = []

        def loader():
            calls.append(1)
            return []

        assert cache.get_or_set("k", loader) == []
        assert cache.get_or_set("k", loader) == []
        assert len(calls) == 1

    def test_invalidate_prefix(self):
        cache = TTLCache(ttl_seconds=60)
        cache.set("delegate:del_a:leagues:", 1)
        cache.set("delegate:del_a:teams:", 2)
        cache.set("delegate:del_b:leagues:", 3)
        assert cache.invalidate_prefix("delegate:del_a:") == 2
        assert "delegate:del_b:leagues:" in cache
        assert "delegate:del_a:teams:" not in cache


class TestInvalidateEntity:

    def test_scope_keys(self):
        assert scope_cache_key("del_a") == "delegate:del_a:"
        assert scope_cache_key(None) == "delegate:__all__:"

    def test_invalidates_delegate_and_global_views(self):
        query_cache.set(f"{scope_cache_key('del_a')}leagues:ACTIVE:", [1])
        query_cache.set(f"{scope_cache_key(None)}leagues::", [1, 2])
        query_cache.set(f"{scope_cache_key('del_a')}referees::", [3])
        query_cache.set(f"{scope_cache_key('del_b')}leagues::", [4])

        invalidate_entity("leagues", "del_a")

        assert f"{scope_cache_key('del_a')}leagues:ACTIVE:" not in query_cache
        assert f"{scope_cache_key(None)}leagues::" not in query_cache
        assert f"{scope_cache_key('del_a')}referees::" in query_cache
        assert f"{scope_cache_key('del_b')}leagues::" in query_cache
