# services/audit_service.py
from typing import Any, Dict, List, Optional
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from taskboard.models.audit_log import AuditLog, AuditLogRead, AuditUser
from taskboard.repositories.audit_log_repository import AuditLogRepository
from taskboard.repositories.client_user_repository import ClientUsersRepository


def record_audit(
    session: Session,
    action: str,
    entity_type: str,
    entity_id: Any,
    performed_by: Optional[int],
    board_id: Optional[int] = None,
    entity_name: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Optional[AuditLog]:
    """Write an audit entry after the audited change has been committed.

    Audit failures are logged and rolled back; they never undo or fail the
    operation being recorded.
    """
    entry = AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        entity_name=entity_name,
        performed_by=performed_by,
        board_id=board_id,
        details=details,
    )
    try:
        AuditLogRepository(session).add_entry(entry)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to log audit '{action}' for {entity_type} {entity_id}: {e}")
        return None
    logger.info(f"audit {action} {entity_type}={entity_id} by user={performed_by}")
    return entry


def to_audit_reads(session: Session, entries: List[AuditLog]) -> List[AuditLogRead]:
    """Attach the acting user's name and email to each entry."""
    users_repository = ClientUsersRepository(session)
    users = {}
    reads = []
    for entry in entries:
        performer = None
        if entry.performed_by is not None:
            if entry.performed_by not in users:
                users[entry.performed_by] = users_repository.get_user(entry.performed_by)
            user = users[entry.performed_by]
            if user is not None:
                performer = AuditUser(id=user.id, name=user.name, email=user.email)
        reads.append(
            AuditLogRead(
                id=entry.id,
                action=entry.action,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                entity_name=entry.entity_name,
                board_id=entry.board_id,
                performed_by=performer,
                details=entry.details,
                created_at=entry.created_at,
            )
        )
    return reads
