"""Permission checks for SK Portal endpoints.

Permissions come from the caller's role (see ``roles.py``). Endpoints
declare what they need with ``require_permission``; which approval
decision a reviewer may take is decided later by the transition table.
"""

from functools import wraps
from typing import Callable, Iterable, Union

from fastapi import HTTPException, status

from .permissions import Permission

PermissionLike = Union[str, Permission]


def _as_string(permission: PermissionLike) -> str:
    return str(permission) if isinstance(permission, Permission) else permission


class PermissionChecker:
    """Answers permission questions for one role's permission list.

    ``resource:*`` in the list grants every action on that resource.
    """

    def __init__(self, granted: Iterable[str]):
        self.permissions = set(granted)

    def has_permission(self, permission: PermissionLike) -> bool:
        wanted = _as_string(permission)
        if wanted in self.permissions:
            return True
        resource, _, _ = wanted.partition(":")
        return f"{resource}:*" in self.permissions

    def has_any_permission(self, permissions: Iterable[PermissionLike]) -> bool:
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: Iterable[PermissionLike]) -> bool:
        return all(self.has_permission(p) for p in permissions)


def require_permission(*permissions: PermissionLike, require_all: bool = False):
    """
    Decorator factory for async endpoints that take ``current_profile``.

    Args:
        permissions: Permission strings or Permission objects
        require_all: Require every permission instead of any one

    Usage:
        @router.put("/requests/{request_id}/roster")
        @require_permission("roster:update")
        async def commit_roster(request_id: UUID, current_profile: Profile = Depends(get_current_profile)):
            ...
    """
    required = [_as_string(p) for p in permissions]

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            profile = kwargs.get("current_profile")
            if profile is None:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Authentication required",
                )
            if not profile.role:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Profile has no assigned role",
                )

            checker = PermissionChecker(profile.permissions)
            allowed = (
                checker.has_all_permissions(required)
                if require_all
                else checker.has_any_permission(required)
            )
            if not allowed:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=f"Role {profile.role} lacks permission: {', '.join(required)}",
                )

            return await func(*args, **kwargs)

        return wrapper
    return decorator
