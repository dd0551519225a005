from .roles import (
    ActorRoleResolver,
    RoleCache,
    RoleLookup,
    StaticRoleLookup,
    resolve_role,
)

__all__ = [
    "ActorRoleResolver",
    "RoleCache",
    "RoleLookup",
    "StaticRoleLookup",
    "resolve_role",
]
