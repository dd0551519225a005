"""Role resolution and caching."""

import pytest

from draftflow.contracts import ActorRole
from draftflow.security import ActorRoleResolver, RoleCache, StaticRoleLookup, resolve_role


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("super_admin", ActorRole.ADMIN),
        ("admin", ActorRole.ADMIN),
        ("broker", ActorRole.BROKER),
        ("principal", ActorRole.BROKER),
        ("system", ActorRole.SYSTEM),
        ("coordinator", ActorRole.MARKETING),
        (None, ActorRole.MARKETING),
        ("", ActorRole.MARKETING),
    ],
)
def test_resolve_role(raw, expected):
    assert resolve_role(raw) is expected


def test_cache_entries_expire():
    clock = FakeClock()
    cache = RoleCache(ttl_seconds=10, clock=clock)
    cache.set("u1", ActorRole.BROKER)

    clock.now = 9.9
    assert cache.get("u1") is ActorRole.BROKER
    clock.now = 10.0
    assert cache.get("u1") is None
    assert len(cache) == 0


def test_separate_caches_do_not_share_entries():
    first = RoleCache()
    second = RoleCache()
    first.set("u1", ActorRole.ADMIN)

    assert second.get("u1") is None


class CountingLookup:
    def __init__(self, roles):
        self.roles = dict(roles)
        self.calls = 0

    async def __call__(self, actor_id):
        self.calls += 1
        return self.roles.get(actor_id)


@pytest.mark.asyncio
async def test_resolver_caches_lookups():
    lookup = CountingLookup({"u1": "principal"})
    resolver = ActorRoleResolver(lookup)

    assert await resolver.resolve("u1") is ActorRole.BROKER
    assert await resolver.resolve("u1") is ActorRole.BROKER
    assert lookup.calls == 1


@pytest.mark.asyncio
async def test_resolver_invalidation_picks_up_role_change():
    lookup = CountingLookup({"u1": "broker", "u2": "admin"})
    resolver = ActorRoleResolver(lookup)
    await resolver.resolve("u1")
    await resolver.resolve("u2")

    lookup.roles["u1"] = "super_admin"
    resolver.invalidate("u1")
    assert await resolver.resolve("u1") is ActorRole.ADMIN
    assert lookup.calls == 3

    resolver.invalidate()
    assert len(resolver.cache) == 0


@pytest.mark.asyncio
async def test_static_lookup_defaults_unknown_actor_to_marketing():
    resolver = ActorRoleResolver(StaticRoleLookup({"sys": "system"}))

    assert await resolver.resolve("sys") is ActorRole.SYSTEM
    assert await resolver.resolve("stranger") is ActorRole.MARKETING
