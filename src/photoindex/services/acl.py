"""Access control checked before any batch operation touches the store."""
from __future__ import annotations

import enum
from typing import Any, Optional, Protocol

from photoindex.models.user import Role


class Resource(str, enum.Enum):
    PHOTOS = "photos"
    ALBUMS = "albums"
    LABELS = "labels"


class Action(str, enum.Enum):
    UPDATE = "update"
    DELETE = "delete"
    PRIVATE = "private"


class AccessControl(Protocol):
    def allowed(self, caller: Any, resource: Resource, action: Action) -> bool: ...


ALL_ACTIONS = frozenset(Action)

DEFAULT_GRANTS: dict[Role, dict[Resource, frozenset]] = {
    Role.ADMIN: {resource: ALL_ACTIONS for resource in Resource},
    Role.FAMILY: {Resource.PHOTOS: frozenset({Action.UPDATE, Action.PRIVATE})},
}


class RoleAccess:
    """Grants by the caller's role.

    The caller is a `User` (or anything with `role`, `user_disabled` and
    `anonymous` attributes). No caller, a disabled or an anonymous caller is
    always denied.
    """

    def __init__(self, grants: Optional[dict[Role, dict[Resource, frozenset]]] = None):
        self.grants = DEFAULT_GRANTS if grants is None else grants

    def allowed(self, caller: Any, resource: Resource, action: Action) -> bool:
        if caller is None:
            return False
        if getattr(caller, "user_disabled", False) or getattr(caller, "anonymous", True):
            return False
        role = getattr(caller, "role", None)
        return action in self.grants.get(role, {}).get(resource, frozenset())
