"""Company staff accounts, stored in each tenant database."""

import enum
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String

from hireflow.database import TenantBase


class UserRole(str, enum.Enum):
    company_admin = "company_admin"
    rmg_admin = "rmg_admin"
    recruiter = "recruiter"


class Department(str, enum.Enum):
    rmg = "rmg"
    recruitment = "recruitment"


# Default permission flags per role
ROLE_PERMISSIONS = {
    UserRole.company_admin: {
        "can_create_requirements": True,
        "can_assign_requirements": True,
        "can_create_jds": True,
        "can_view_all_applications": True,
    },
    UserRole.rmg_admin: {
        "can_create_requirements": True,
        "can_assign_requirements": True,
        "can_create_jds": False,
        "can_view_all_applications": True,
    },
    UserRole.recruiter: {
        "can_create_requirements": False,
        "can_assign_requirements": False,
        "can_create_jds": True,
        "can_view_all_applications": False,
    },
}


class User(TenantBase):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False, unique=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)
    department = Column(String(20), nullable=True)  # required unless company_admin
    phone = Column(String(30), nullable=True)
    permissions = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    login_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(DateTime(timezone=True), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_by_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_user_email", "email"),
        Index("idx_user_role", "role"),
        Index("idx_user_department", "department"),
        Index("idx_user_is_active", "is_active"),
        Index("idx_user_created_at", "created_at"),
    )

    @property
    def is_locked(self) -> bool:
        return self.lock_until is not None and self.lock_until > datetime.now(timezone.utc)
