"""
Tenant model, stored in the master database.

Each Tenant is one customer company with its own database, named after
``subdomain``. The subdomain is the routing key and must never change once
the tenant database has been provisioned.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String

from hireflow.database import MasterBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_branding() -> dict:
    return {
        "logo": None,
        "wallpaper": None,
        "primary_color": "#007bff",
        "secondary_color": "#6c757d",
        "theme": "light",
    }


def default_tenant_settings() -> dict:
    return {
        "allow_candidate_registration": True,
        "require_email_verification": True,
        "max_applications_per_candidate": 10,
    }


class SubscriptionPlan(str, enum.Enum):
    basic = "basic"
    premium = "premium"
    enterprise = "enterprise"


class SubscriptionStatus(str, enum.Enum):
    active = "active"
    suspended = "suspended"
    cancelled = "cancelled"


class Tenant(MasterBase):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String(100), nullable=False)
    subdomain = Column(String(30), nullable=False, unique=True)
    email = Column(String(254), nullable=False, unique=True)
    phone = Column(String(30), nullable=True)
    address = Column(JSON, nullable=True)
    branding = Column(JSON, nullable=False, default=default_branding)

    plan = Column(String(20), nullable=False, default=SubscriptionPlan.basic.value)
    subscription_status = Column(String(20), nullable=False, default=SubscriptionStatus.active.value)
    subscription_start = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    subscription_end = Column(DateTime(timezone=True), nullable=True)
    max_users = Column(Integer, nullable=False, default=10)
    max_recruiters = Column(Integer, nullable=False, default=5)

    admin_username = Column(String(50), nullable=False, unique=True)
    admin_temp_password = Column(String(255), nullable=False)  # bcrypt hash
    password_changed = Column(Boolean, nullable=False, default=False)

    is_active = Column(Boolean, nullable=False, default=True)
    settings = Column(JSON, nullable=False, default=default_tenant_settings)
    created_by_id = Column(Integer, ForeignKey("super_admins.id", ondelete="SET NULL"), nullable=True)
    last_activity = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("idx_tenant_subdomain", "subdomain"),
        Index("idx_tenant_is_active", "is_active"),
        Index("idx_tenant_subscription_status", "subscription_status"),
        Index("idx_tenant_created_at", "created_at"),
    )

    def can_add_users(self, current_user_count: int) -> bool:
        return current_user_count < self.max_users

    def can_add_recruiters(self, current_recruiter_count: int) -> bool:
        return current_recruiter_count < self.max_recruiters
