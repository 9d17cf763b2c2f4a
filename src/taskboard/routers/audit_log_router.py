# routers/audit_log_router.py
import math
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session

from taskboard.authentication import require_admin, verify_token
from taskboard.database import get_db
from taskboard.models.audit_log import AuditLogRead
from taskboard.models.client_user import ClientUser
from taskboard.repositories.audit_log_repository import AuditLogRepository
from taskboard.services.audit_service import to_audit_reads


# Pydantic models for response
class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AuditLogPage(BaseModel):
    logs: List[AuditLogRead]
    pagination: Pagination


router = APIRouter(prefix="/admin/audit-logs", tags=["Audit Logs"], dependencies=[Depends(verify_token)])


@router.get("/", response_model=AuditLogPage)
def get_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    performed_by: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    admin: ClientUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Audit trail across all boards, newest first (administrators only)"""
    entries, total = AuditLogRepository(db).search_entries(
        action=action,
        entity_type=entity_type,
        performed_by=performed_by,
        start=start_date,
        end=end_date,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return AuditLogPage(
        logs=to_audit_reads(db, entries),
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)),
    )
