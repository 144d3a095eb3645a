"""
Audit trail writes and reads.

Audit entries are best effort: a failed write is logged and rolled back, and
never turns a completed auth operation into an error.
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fastapi import Request
from typing import Optional, Dict, Any, List
import logging

from .audit_models import AuditLog

# Set up logging
logger = logging.getLogger(__name__)

async def create_audit_log(
    db: Session,
    action: str,
    user_id: Optional[int] = None,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None
) -> Optional[AuditLog]:
    """
    Creates an audit log entry.

    Args:
        db: The database session.
        action: A string describing the action performed (e.g., 'USER_LOGIN_SUCCESS', 'TOKEN_REFRESH_DENIED').
        user_id: The ID of an existing user who performed the action (if applicable).
        request: The FastAPI request object to extract IP address (if available).
        details: A dictionary containing additional context or data related to the action.

    Returns:
        The created AuditLog object, or None if it could not be written.
    """
    ip_address = None
    if request and request.client:
        ip_address = request.client.host

    audit_entry = AuditLog(
        user_id=user_id,
        action=action,
        ip_address=ip_address,
        details=details
    )
    db.add(audit_entry)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Could not write audit entry {action} for user {user_id}")
        return None
    db.refresh(audit_entry)
    return audit_entry


def get_audit_logs(
    db: Session,
    user_id_filter: Optional[int] = None,
    limit: int = 100,
    offset: int = 0
) -> List[AuditLog]:
    """
    Retrieves audit logs, newest first, optionally filtered by user_id.
    """
    query = db.query(AuditLog).order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())

    if user_id_filter:
        query = query.filter(AuditLog.user_id == user_id_filter)

    return query.limit(limit).offset(offset).all()
