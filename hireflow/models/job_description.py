from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text

from hireflow.database import TenantBase


class JobDescription(TenantBase):
    """A published job posting, optionally derived from a requirement."""

    __tablename__ = "job_descriptions"

    id = Column(Integer, primary_key=True)
    requirement_id = Column(Integer, ForeignKey("requirements.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False, default=dict)
    employment_type = Column(String(20), nullable=False, default="full_time")
    location_type = Column(String(20), nullable=False, default="onsite")
    status = Column(String(20), nullable=False, default="draft")
    is_active = Column(Boolean, nullable=False, default=True)
    shareable_link = Column(String(64), nullable=True, unique=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_jd_requirement", "requirement_id"),
        Index("idx_jd_created_by", "created_by_id"),
        Index("idx_jd_shareable_link", "shareable_link"),
        Index("idx_jd_is_active", "is_active"),
        Index("idx_jd_status", "status"),
        Index("idx_jd_published_at", "published_at"),
        Index("idx_jd_employment_type", "employment_type"),
        Index("idx_jd_location_type", "location_type"),
    )
