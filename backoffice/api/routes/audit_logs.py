"""Audit log endpoints."""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request, Response, status

from backoffice.api.dependencies import AuditLoggerDep, SettingsDep
from backoffice.api.exceptions import BackofficeAPIError, InvalidRequestError
from backoffice.api.models.audit import AuditLogCreate, AuditLogCreated, AuditLogsCleared
from backoffice.api.models.context import UserContext
from backoffice.api.models.pagination import PaginatedResponse, Pagination
from backoffice.api.rbac import require_permission
from backoffice.api.routes.utils import client_ip
from backoffice.audit.export import ExportFormat
from backoffice.audit.models import AuditLogEntry, AuditLogFilter, AuditLogStats
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/audit-logs")

_MEDIA_TYPES = {ExportFormat.CSV: "text/csv", ExportFormat.JSON: "application/json"}


@router.post("", response_model=AuditLogCreated, status_code=status.HTTP_201_CREATED)
async def create_audit_log(
    body: AuditLogCreate,
    request: Request,
    audit: AuditLoggerDep,
    user: UserContext = Depends(require_permission("audit_logs", "create")),
) -> AuditLogCreated:
    """Record a user action.

    IP address and user agent come from the request headers unless given
    in the body. Only admins may attribute an entry to another user.
    """
    action = (body.action or "").strip()
    if not action:
        raise InvalidRequestError("Missing action")

    if isinstance(body.details, dict):
        details = dict(body.details)
    elif body.details:
        details = {"message": body.details}
    else:
        details = {}
    if body.entity:
        details.setdefault("entity", body.entity)

    user_id = body.user_id if body.user_id and user.role == "admin" else user.user_id

    result = await audit.log(
        action,
        details,
        user_id,
        user_role=user.role,
        ip_address=body.ip_address or client_ip(request),
        user_agent=body.user_agent or request.headers.get("user-agent"),
        session_id=body.session_id,
    )
    if not result.ok:
        raise BackofficeAPIError("Failed to create audit log")

    return AuditLogCreated(id=str(result.entry.id) if result.entry else None)


@router.get("", response_model=None)
async def list_audit_logs(
    audit: AuditLoggerDep,
    settings: SettingsDep,
    _user: UserContext = Depends(require_permission("audit_logs", "read")),
    user_id: str | None = Query(default=None, alias="userId"),
    action: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    q: str | None = Query(default=None, description="Search action, user and details"),
    limit: int | None = Query(default=None, ge=1, le=1000),
    page: int | None = Query(default=None, ge=1),
    page_size: int | None = Query(default=None, alias="pageSize", ge=1, le=1000),
    format: Literal["csv", "json"] | None = Query(default=None),
) -> Response | PaginatedResponse[AuditLogEntry] | list[AuditLogEntry]:
    """List audit logs newest first.

    Passing ``page`` or ``pageSize`` switches to a paginated envelope;
    ``format`` returns a CSV or JSON download instead.
    """
    criteria = dict(
        user_id=user_id,
        action=action,
        start_date=start_date,
        end_date=end_date,
        q=q,
    )

    if format is not None:
        export_format = ExportFormat(format)
        body = await audit.export_logs(
            export_format,
            AuditLogFilter(**criteria, limit=limit or settings.audit.default_query_limit),
        )
        return Response(
            content=body,
            media_type=_MEDIA_TYPES[export_format],
            headers={"Content-Disposition": f'attachment; filename="audit-logs.{format}"'},
        )

    if page is not None or page_size is not None:
        size = page_size or limit or settings.audit.default_page_size
        current = page or 1
        page_filter = AuditLogFilter(**criteria, limit=size, offset=(current - 1) * size)
        entries = await audit.get_logs(page_filter)
        total = await audit.count_logs(page_filter)
        return PaginatedResponse[AuditLogEntry](
            data=entries,
            pagination=Pagination.build(page=current, page_size=size, total=total),
        )

    return await audit.get_logs(
        AuditLogFilter(**criteria, limit=limit or settings.audit.default_query_limit)
    )


@router.get("/stats", response_model=AuditLogStats)
async def audit_log_stats(
    audit: AuditLoggerDep,
    _user: UserContext = Depends(require_permission("audit_logs", "read")),
) -> AuditLogStats:
    """Totals, recent activity and the most frequent actions and users."""
    return await audit.get_log_stats()


@router.delete("", response_model=AuditLogsCleared)
async def clear_audit_logs(
    audit: AuditLoggerDep,
    user: UserContext = Depends(require_permission("audit_logs", "delete")),
    older_than_days: int | None = Query(default=None, alias="olderThanDays", ge=0),
) -> AuditLogsCleared:
    """Delete every audit log, or only those older than ``olderThanDays``."""
    removed = await audit.clear_logs(older_than_days)
    logger.info(
        "audit_logs_deleted",
        removed=removed,
        older_than_days=older_than_days,
        user_id=user.user_id,
    )
    if not older_than_days:
        return AuditLogsCleared(message="All audit logs cleared", removed=removed)
    return AuditLogsCleared(
        message="Old audit logs cleared",
        removed=removed,
        older_than_days=older_than_days,
    )
