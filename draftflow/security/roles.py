"""Actor role resolution with an instance-owned TTL cache."""

from __future__ import annotations

import time
from typing import Callable, Dict, Mapping, Optional, Protocol, Tuple

from ..contracts import ActorRole

_ROLE_ALIASES = {
    "super_admin": ActorRole.ADMIN,
    "admin": ActorRole.ADMIN,
    "broker": ActorRole.BROKER,
    "principal": ActorRole.BROKER,
    "system": ActorRole.SYSTEM,
}


def resolve_role(raw_role: Optional[str]) -> ActorRole:
    """Map an account role to the workflow role it acts as.

    Anything not recognized as admin, broker or system acts as marketing.
    """
    if not raw_role:
        return ActorRole.MARKETING
    return _ROLE_ALIASES.get(raw_role.strip().lower(), ActorRole.MARKETING)


class RoleCache:
    """Time-bounded cache of resolved roles keyed by actor id."""

    def __init__(
        self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, ActorRole]] = {}

    def get(self, actor_id: str) -> Optional[ActorRole]:
        entry = self._entries.get(actor_id)
        if entry is None:
            return None
        stored_at, role = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[actor_id]
            return None
        return role

    def set(self, actor_id: str, role: ActorRole) -> None:
        self._entries[actor_id] = (self._clock(), role)

    def invalidate(self, actor_id: str) -> None:
        self._entries.pop(actor_id, None)

    def invalidate_all(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RoleLookup(Protocol):
    async def __call__(self, actor_id: str) -> Optional[str]:
        """Return the raw account role for ``actor_id`` or ``None``."""


class StaticRoleLookup:
    """Look roles up in a fixed mapping, e.g. the ``roles.actors`` config."""

    def __init__(self, actors: Mapping[str, str]) -> None:
        self._actors = dict(actors)

    async def __call__(self, actor_id: str) -> Optional[str]:
        return self._actors.get(actor_id)


class ActorRoleResolver:
    """Resolves actor ids to workflow roles through a cached lookup."""

    def __init__(self, lookup: RoleLookup, cache: Optional[RoleCache] = None) -> None:
        self._lookup = lookup
        self.cache = cache or RoleCache()

    async def resolve(self, actor_id: str) -> ActorRole:
        cached = self.cache.get(actor_id)
        if cached is not None:
            return cached
        role = resolve_role(await self._lookup(actor_id))
        self.cache.set(actor_id, role)
        return role

    def invalidate(self, actor_id: Optional[str] = None) -> None:
        """Drop one actor from the cache, or everyone when no id is given."""
        if actor_id is None:
            self.cache.invalidate_all()
        else:
            self.cache.invalidate(actor_id)
