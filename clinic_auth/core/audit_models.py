"""
Audit trail of authentication and user management events.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base
from ..auth.models import User

class AuditLog(Base):
    """
    One auth event.

    ``user_id`` points at the acting user and is cleared when that user is
    deleted; the ids involved are also kept in ``details`` so the entry stays
    readable afterwards. Tokens, hashes and passwords are never stored.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_user_id_timestamp", "user_id", "timestamp"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(64), nullable=False, index=True)
    details = Column(JSON, nullable=True)
    ip_address = Column(String(45), nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # The admin listing shows the username of every entry
    user = relationship(User, lazy="joined")

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', user_id={self.user_id})>"
