from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SuperAdminRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


class SuperAdminLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SuperAdminResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    last_login: Optional[datetime] = None


class SuperAdminToken(BaseModel):
    super_admin: SuperAdminResponse
    token: str
    token_type: str = "bearer"
