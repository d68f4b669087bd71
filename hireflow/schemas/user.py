from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from hireflow.schemas.tenant import TenantPublicInfo


class TenantUserLogin(BaseModel):
    """``login`` is an email, or the tenant's provisioned admin username."""

    login: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1)


class PasswordUpdate(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    department: Optional[str] = None
    permissions: dict[str, Any]
    last_login: Optional[datetime] = None


class TenantUserToken(BaseModel):
    user: UserResponse
    tenant: TenantPublicInfo
    token: str
    token_type: str = "bearer"


class CurrentUser(BaseModel):
    user: UserResponse
    tenant: TenantPublicInfo
