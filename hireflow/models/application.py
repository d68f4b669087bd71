from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint

from hireflow.database import TenantBase


class Application(TenantBase):
    """A candidate's application to a job description."""

    __tablename__ = "applications"

    id = Column(Integer, primary_key=True)
    job_description_id = Column(Integer, ForeignKey("job_descriptions.id", ondelete="CASCADE"), nullable=False)
    candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default="applied")
    cover_letter = Column(Text, nullable=True)
    applied_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("job_description_id", "candidate_id", name="uq_application_job_candidate"),
        Index("idx_application_job_description", "job_description_id"),
        Index("idx_application_candidate", "candidate_id"),
        Index("idx_application_status", "status"),
        Index("idx_application_applied_at", "applied_at"),
    )
