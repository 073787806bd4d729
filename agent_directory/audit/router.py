import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from agent_directory.audit import service as audit_service
from agent_directory.audit.schemas import AuditLogFilters, AuditLogPage, AuditLogResponse
from agent_directory.core.dependencies import DbSession, Principal, require_permissions

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=AuditLogPage)
async def list_audit_logs(
    filters: Annotated[AuditLogFilters, Query()],
    user: Annotated[Principal, Depends(require_permissions("audit.read"))],
    db: DbSession,
):
    items, meta = await audit_service.find_all(db, filters)
    return AuditLogPage(items=[AuditLogResponse.model_validate(e) for e in items], meta=meta)


@router.get("/export", response_model=list[AuditLogResponse])
async def export_audit_logs(
    filters: Annotated[AuditLogFilters, Query()],
    user: Annotated[Principal, Depends(require_permissions("audit.export"))],
    db: DbSession,
):
    return await audit_service.export_logs(db, filters)


@router.get("/{log_id}", response_model=AuditLogResponse)
async def get_audit_log(
    log_id: uuid.UUID,
    user: Annotated[Principal, Depends(require_permissions("audit.read"))],
    db: DbSession,
):
    return await audit_service.find_one(db, log_id)
