from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text

from hireflow.database import TenantBase


class Requirement(TenantBase):
    """A hiring need raised by RMG and assigned to recruiters."""

    __tablename__ = "requirements"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    positions = Column(Integer, nullable=False, default=1)
    skills = Column(JSON, nullable=False, default=dict)  # {"required": [...], "preferred": [...]}
    status = Column(String(20), nullable=False, default="open")
    priority = Column(String(20), nullable=False, default="medium")
    due_date = Column(Date, nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_requirement_created_by", "created_by_id"),
        Index("idx_requirement_assigned_to", "assigned_to_id"),
        Index("idx_requirement_status", "status"),
        Index("idx_requirement_priority", "priority"),
        Index("idx_requirement_due_date", "due_date"),
        Index("idx_requirement_created_at", "created_at"),
    )
