# repositories/audit_log_repository.py
from datetime import datetime
from typing import Any, List, Optional, Tuple
from sqlalchemy import func
from sqlmodel import Session, select

from taskboard.models.audit_log import AuditLog


class AuditLogRepository:
    def __init__(self, session: Session):
        self.session = session

    def add_entry(self, entry: AuditLog) -> AuditLog:
        self.session.add(entry)
        self.session.flush()
        return entry

    def get_entries(self, entity_type: str, entity_id: Any) -> List[AuditLog]:
        statement = select(AuditLog).where(
            AuditLog.entity_type == entity_type,
            AuditLog.entity_id == str(entity_id),
        ).order_by(AuditLog.id)
        return list(self.session.exec(statement).all())

    def search_entries(
        self,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        performed_by: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Tuple[List[AuditLog], int]:
        """
        Filtered page of entries, newest first, together with the total match count.
        """
        conditions = []
        if action:
            conditions.append(AuditLog.action == action)
        if entity_type:
            conditions.append(AuditLog.entity_type == entity_type)
        if performed_by is not None:
            conditions.append(AuditLog.performed_by == performed_by)
        if start is not None:
            conditions.append(AuditLog.created_at >= start)
        if end is not None:
            conditions.append(AuditLog.created_at <= end)

        total = self.session.exec(select(func.count()).select_from(AuditLog).where(*conditions)).one()
        statement = (
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.exec(statement).all()), total

    def get_board_entries(self, board_id: int, limit: int = 50, before: Optional[datetime] = None) -> List[AuditLog]:
        statement = select(AuditLog).where(AuditLog.board_id == board_id)
        if before is not None:
            statement = statement.where(AuditLog.created_at < before)
        statement = statement.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
        return list(self.session.exec(statement).all())
