"""Role-based permissions for admin routes.

Permissions are ``resource:action`` strings; the admin role holds all of
them through the ``*`` wildcard.
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends

from backoffice.api.exceptions import PermissionDeniedError
from backoffice.api.middleware.auth import get_user_context
from backoffice.api.models.context import UserContext
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "admin": frozenset({"*"}),
    "manager": frozenset(
        {
            "audit_logs:create",
            "audit_logs:read",
            "data_history:read",
        }
    ),
    "user": frozenset({"audit_logs:create"}),
}


def has_permission(user: UserContext, resource: str, action: str) -> bool:
    granted = ROLE_PERMISSIONS.get(user.role, frozenset())
    return "*" in granted or f"{resource}:{action}" in granted


def require_permission(
    resource: str, action: str
) -> Callable[..., Awaitable[UserContext]]:
    """Build a dependency that returns the caller if they hold ``resource:action``.

    Usage:
        @router.get("", dependencies=[Depends(require_permission("audit_logs", "read"))])
    """

    async def dependency(user: UserContext = Depends(get_user_context)) -> UserContext:
        if not has_permission(user, resource, action):
            logger.warning(
                "permission_denied",
                user_id=user.user_id,
                role=user.role,
                permission=f"{resource}:{action}",
            )
            raise PermissionDeniedError(f"Missing permission {resource}:{action}")
        return user

    return dependency
