from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from hireflow.models.tenant import SubscriptionPlan, SubscriptionStatus


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None


class SubscriptionIn(BaseModel):
    plan: SubscriptionPlan = SubscriptionPlan.basic
    max_users: int = Field(10, ge=1)
    max_recruiters: int = Field(5, ge=0)


class TenantCreate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[Address] = None
    subscription: SubscriptionIn = Field(default_factory=SubscriptionIn)


class BrandingUpdate(BaseModel):
    logo: Optional[str] = None
    wallpaper: Optional[str] = None
    primary_color: Optional[str] = Field(None, pattern=r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
    secondary_color: Optional[str] = Field(None, pattern=r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
    theme: Optional[str] = Field(None, pattern=r"^(light|dark)$")


class TenantUpdate(BaseModel):
    """Mutable tenant fields. The subdomain is deliberately absent."""

    company_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[Address] = None
    branding: Optional[BrandingUpdate] = None
    plan: Optional[SubscriptionPlan] = None
    subscription_status: Optional[SubscriptionStatus] = None
    subscription_end: Optional[datetime] = None
    max_users: Optional[int] = Field(None, ge=1)
    max_recruiters: Optional[int] = Field(None, ge=0)
    settings: Optional[dict[str, Any]] = None


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_name: str
    subdomain: str
    email: str
    phone: Optional[str] = None
    address: Optional[dict[str, Any]] = None
    branding: dict[str, Any]
    plan: str
    subscription_status: str
    max_users: int
    max_recruiters: int
    admin_username: str
    is_active: bool
    settings: dict[str, Any]
    created_at: datetime


class TenantSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_name: str
    subdomain: str
    created_at: datetime


class TenantCredentials(BaseModel):
    username: str
    temp_password: str
    login_url: str


class TenantCreatedResponse(BaseModel):
    tenant: TenantResponse
    credentials: TenantCredentials


class TenantListResponse(BaseModel):
    tenants: list[TenantResponse]
    total: int
    skip: int
    limit: int


class TenantPublicInfo(BaseModel):
    """What a tenant's own users see about their company (branding etc.)."""

    model_config = ConfigDict(from_attributes=True)

    company_name: str
    subdomain: str
    branding: dict[str, Any]
    settings: dict[str, Any]


class DashboardStats(BaseModel):
    tenants: dict[str, int]
    plan_distribution: dict[str, int]
    recent_tenants: list[TenantSummary]
