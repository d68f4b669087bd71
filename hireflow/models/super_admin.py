from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from hireflow.database import MasterBase


class SuperAdmin(MasterBase):
    """Platform operator account; manages tenants from the master database."""

    __tablename__ = "super_admins"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="super_admin")
    is_active = Column(Boolean, nullable=False, default=True)
    login_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(DateTime(timezone=True), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    @property
    def is_locked(self) -> bool:
        return self.lock_until is not None and self.lock_until > datetime.now(timezone.utc)
