"""Data history endpoints: browse, compare and revert tracked changes."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request

from backoffice.api.dependencies import (
    AuditLoggerDep,
    HistoryStoreDep,
    RecordGatewayDep,
    RevertEngineDep,
)
from backoffice.api.models.context import UserContext
from backoffice.api.models.history import BulkRevertRequest, RestoreResponse, TrackingRequest
from backoffice.api.rbac import require_permission
from backoffice.api.routes.utils import client_ip
from backoffice.audit.models import AuditAction
from backoffice.db.errors import NotFoundError
from backoffice.history.errors import VersionNotFoundError
from backoffice.history.models import (
    ActionSummary,
    BulkRevertResult,
    HistoryAction,
    HistoryFilter,
    HistoryPage,
    HistoryRecord,
    HistoryStats,
    TimelineEntry,
    TrackingResult,
    VersionComparison,
)
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/data-history")

can_read = require_permission("data_history", "read")
can_revert = require_permission("data_history", "update")
can_manage = require_permission("data_history", "manage")


@router.get("", response_model=HistoryPage)
async def list_history(
    history: HistoryStoreDep,
    _user: UserContext = Depends(can_read),
    table: str | None = Query(default=None, description="Tracked table name"),
    record_id: str | None = Query(default=None, alias="recordId"),
    action: HistoryAction | None = Query(default=None),
    changed_by: str | None = Query(default=None, alias="changedBy"),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    limit: int = Query(default=50, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
) -> HistoryPage:
    """List history entries newest first with the total match count."""
    return await history.list_history(
        HistoryFilter(
            table_name=table,
            record_id=record_id,
            action=action,
            changed_by=changed_by,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=offset,
        )
    )


@router.get("/record", response_model=list[HistoryRecord])
async def record_history(
    history: HistoryStoreDep,
    table: str = Query(...),
    record_id: str = Query(..., alias="recordId"),
    limit: int = Query(default=50, ge=1, le=1000),
    _user: UserContext = Depends(can_read),
) -> list[HistoryRecord]:
    """Every change to one row, newest first."""
    return await history.get_record_history(table, record_id, limit=limit)


@router.get("/latest", response_model=HistoryRecord)
async def latest_version(
    history: HistoryStoreDep,
    table: str = Query(...),
    record_id: str = Query(..., alias="recordId"),
    _user: UserContext = Depends(can_read),
) -> HistoryRecord:
    record = await history.get_latest_version(table, record_id)
    if record is None:
        raise NotFoundError("No history for this record")
    return record


@router.get("/compare", response_model=VersionComparison)
async def compare_versions(
    engine: RevertEngineDep,
    id1: int = Query(...),
    id2: int = Query(...),
    _user: UserContext = Depends(can_read),
) -> VersionComparison:
    """Field differences between the restorable states of two entries."""
    return await engine.compare_history_versions(id1, id2)


@router.get("/stats", response_model=HistoryStats)
async def history_stats(
    history: HistoryStoreDep,
    days: int = Query(default=30, ge=1, le=3650),
    table: str | None = Query(default=None),
    _user: UserContext = Depends(can_read),
) -> HistoryStats:
    return await history.get_stats(days=days, table_name=table)


@router.get("/timeline", response_model=list[TimelineEntry])
async def change_timeline(
    history: HistoryStoreDep,
    table: str = Query(...),
    record_id: str = Query(..., alias="recordId"),
    _user: UserContext = Depends(can_read),
) -> list[TimelineEntry]:
    """Chronological change timeline of one row."""
    return await history.get_change_timeline(table, record_id)


@router.get("/summary", response_model=list[ActionSummary])
async def change_summary(
    history: HistoryStoreDep,
    table: str = Query(...),
    record_id: str = Query(..., alias="recordId"),
    _user: UserContext = Depends(can_read),
) -> list[ActionSummary]:
    return await history.get_record_change_summary(table, record_id)


@router.get("/tracked-tables")
async def tracked_tables(
    gateway: RecordGatewayDep,
    _user: UserContext = Depends(can_read),
) -> dict[str, list[str]]:
    return {"tables": await gateway.get_tracked_tables()}


@router.post("/tracking", response_model=TrackingResult)
async def enable_tracking(
    body: TrackingRequest,
    gateway: RecordGatewayDep,
    user: UserContext = Depends(can_manage),
) -> TrackingResult:
    """Start recording changes to a table. Safe to repeat."""
    result = await gateway.enable_table_tracking(body.table_name)
    logger.info("tracking_requested", table_name=body.table_name, changed=result.changed, user_id=user.user_id)
    return result


@router.delete("/tracking/{table_name}", response_model=TrackingResult)
async def disable_tracking(
    table_name: str,
    gateway: RecordGatewayDep,
    user: UserContext = Depends(can_manage),
) -> TrackingResult:
    result = await gateway.disable_table_tracking(table_name)
    logger.info("untracking_requested", table_name=table_name, changed=result.changed, user_id=user.user_id)
    return result


@router.post("/bulk-revert", response_model=BulkRevertResult)
async def bulk_revert(
    body: BulkRevertRequest,
    request: Request,
    engine: RevertEngineDep,
    audit: AuditLoggerDep,
    user: UserContext = Depends(can_revert),
) -> BulkRevertResult:
    """Revert several entries; failures are reported per entry."""
    result = await engine.bulk_revert(body.history_ids, acting_user_id=user.user_id)
    await audit.log(
        AuditAction.DATA_REVERTED,
        {
            "historyIds": body.history_ids,
            "succeeded": [s.history_id for s in result.success],
            "failed": [f.history_id for f in result.failed],
        },
        user.user_id,
        user_role=user.role,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return result


@router.get("/{history_id}", response_model=HistoryRecord)
async def get_history_entry(
    history_id: int,
    history: HistoryStoreDep,
    _user: UserContext = Depends(can_read),
) -> HistoryRecord:
    record = await history.get(history_id)
    if record is None:
        raise VersionNotFoundError(history_id)
    return record


@router.post("/{history_id}/restore", response_model=RestoreResponse)
async def restore_version(
    history_id: int,
    request: Request,
    engine: RevertEngineDep,
    audit: AuditLoggerDep,
    user: UserContext = Depends(can_revert),
) -> RestoreResponse:
    """Restore the row behind a history entry to the state it captured."""
    record = await engine.revert_to_version(history_id, acting_user_id=user.user_id)
    await audit.log(
        AuditAction.DATA_REVERTED,
        {"historyId": history_id},
        user.user_id,
        user_role=user.role,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return RestoreResponse(history_id=history_id, record=record)
