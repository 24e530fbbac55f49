"""Tests for the tag-invalidated TTL cache."""

from newsdesk_ledger.cache import (
    EMPLOYEE_PAYMENTS_INVALIDATION,
    ORDERS_INVALIDATION,
    RESTORE_INVALIDATION,
    Invalidation,
    TaggedCache,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestTaggedCache:
    """Expiry and tag invalidation."""

    def test_get_set(self):
        cache = TaggedCache(default_ttl=30)
        cache.set("k", {"a": 1}, tags=("business",))

        assert cache.get("k") == {"a": 1}
        assert cache.hits == 1
        assert cache.get("missing") is None
        assert cache.misses == 1

    def test_entries_expire(self):
        clock = FakeClock()
        cache = TaggedCache(default_ttl=30, clock=clock)
        cache.set("k", "v")

        clock.now += 29
        assert cache.get("k") == "v"
        clock.now += 1
        assert cache.get("k") is None

    def test_invalidate_tag_drops_only_dependents(self):
        cache = TaggedCache()
        cache.set("business", 1, tags=("business", "orders"))
        cache.set("notes", 2, tags=("notifications",))

        assert cache.invalidate_tag("orders") == 1
        assert cache.get("business") is None
        assert cache.get("notes") == 2

    def test_apply_invalidation(self):
        cache = TaggedCache()
        cache.set("business", 1, tags=("business",))

        cache.apply(EMPLOYEE_PAYMENTS_INVALIDATION)

        assert cache.get("business") is None
        assert cache.pop_stale_paths() == set(EMPLOYEE_PAYMENTS_INVALIDATION.paths)
        assert cache.pop_stale_paths() == set()

    async def test_get_or_compute(self):
        cache = TaggedCache()
        calls = []

        async def compute():
            calls.append(1)
            return {"orders": []}

        first = await cache.get_or_compute("k", compute, tags=("business",))
        second = await cache.get_or_compute("k", compute, tags=("business",))

        assert first == second == {"orders": []}
        assert len(calls) == 1

    def test_clear(self):
        cache = TaggedCache()
        cache.set("k", 1)
        cache.invalidate_path("/admin/orders")
        cache.clear()
        assert cache.get("k") is None
        assert cache.pop_stale_paths() == set()

    def test_stats(self):
        cache = TaggedCache()
        cache.set("k", 1, tags=("business",))
        cache.get("k")
        cache.get("other")
        cache.invalidate_path("/admin/orders")

        assert cache.stats() == {"entries": 1, "stale_paths": 1, "hits": 1, "misses": 1}


class TestInvalidation:
    def test_union_keeps_order_without_duplicates(self):
        merged = ORDERS_INVALIDATION | Invalidation(tags=("orders", "payments"), paths=("/x",))

        assert merged.tags == ("business", "orders", "payments")
        assert merged.paths[-1] == "/x"

    def test_restore_invalidates_everything(self):
        assert {"business", "orders", "payments", "transactions", "notifications"} <= set(
            RESTORE_INVALIDATION.tags
        )
