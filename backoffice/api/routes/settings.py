"""Site settings endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse

from backoffice.api.dependencies import AuditLoggerDep, SettingsDep, SettingsServiceDep
from backoffice.api.exceptions import PermissionDeniedError
from backoffice.api.middleware.auth import UserContextDep
from backoffice.api.models.context import UserContext
from backoffice.api.models.settings import SettingsUpdateResponse
from backoffice.api.rbac import has_permission, require_permission
from backoffice.api.routes.utils import client_ip
from backoffice.audit.models import AuditAction
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/settings")


def _parse_keys(keys: str | None) -> list[str] | None:
    if not keys:
        return None
    parsed = [key.strip() for key in keys.split(",") if key.strip()]
    return parsed or None


@router.get("")
async def get_settings(
    user: UserContextDep,
    settings: SettingsDep,
    service: SettingsServiceDep,
    category: str | None = Query(default=None, description="Only settings in this category"),
    keys: str | None = Query(default=None, description="Comma-separated setting keys"),
) -> JSONResponse:
    """Return settings as a flat ``{key: typed value}`` object.

    Admins may read everything. Other authenticated users may only request
    keys listed in ``api.auth.safe_read_keys``.
    """
    key_list = _parse_keys(keys)
    safe = set(settings.api.auth.safe_read_keys)
    only_safe_keys = key_list is not None and set(key_list) <= safe

    if not only_safe_keys and not has_permission(user, "settings", "read"):
        raise PermissionDeniedError("Admin access required")

    snapshot = await service.get_all(category=category, keys=key_list)

    headers = {"X-Cache": "HIT" if snapshot.cache_hit else "MISS"}
    if snapshot.last_updated is not None:
        headers["X-Settings-Last-Updated"] = snapshot.last_updated.isoformat()

    logger.debug(
        "settings_read",
        category=category,
        keys=key_list,
        cache_hit=snapshot.cache_hit,
        count=len(snapshot.values),
    )
    return JSONResponse(content=snapshot.values, headers=headers)


@router.put("", response_model=SettingsUpdateResponse)
async def update_settings(
    request: Request,
    service: SettingsServiceDep,
    audit: AuditLoggerDep,
    values: dict[str, Any] = Body(..., description="Partial map of setting key to new value"),
    user: UserContext = Depends(require_permission("settings", "update")),
) -> SettingsUpdateResponse:
    """Update the given settings; each value is encoded per its stored data type.

    Keys that do not exist are reported in ``skipped`` and never created.
    """
    result = await service.set_all(values, updated_by=user.user_id)

    await audit.log(
        AuditAction.SETTINGS_CHANGE,
        {"updated": result.updated, "skipped": result.skipped},
        user.user_id,
        user_role=user.role,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    return SettingsUpdateResponse(updated=result.updated, skipped=result.skipped)
