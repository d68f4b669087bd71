from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Index, Integer, String

from hireflow.database import TenantBase


class Candidate(TenantBase):
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False, unique=True)
    phone = Column(String(30), nullable=True)
    hashed_password = Column(String(255), nullable=True)  # only for self-registered candidates
    total_experience = Column(Float, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    industries = Column(JSON, nullable=False, default=list)
    resume_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_candidate_email", "email"),
        Index("idx_candidate_phone", "phone"),
        Index("idx_candidate_total_experience", "total_experience"),
        Index("idx_candidate_is_active", "is_active"),
        Index("idx_candidate_created_at", "created_at"),
    )
