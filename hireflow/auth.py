import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.config import settings
from hireflow.database import get_db, get_master_db
from hireflow.exceptions import (
    AccountDisabledError,
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    TokenExpiredError,
)
from hireflow.models.super_admin import SuperAdmin
from hireflow.models.tenant import Tenant
from hireflow.models.user import User
from hireflow.routes.tenant import require_tenant

logger = logging.getLogger(__name__)

SUPER_ADMIN_ROLE = "super_admin"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim in token data.")

    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate a token, returning its claims."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        logger.info("Token expired")
        raise TokenExpiredError()
    except JWTError as e:
        logger.warning("JWT decoding failed: %s", e)
        raise InvalidTokenError()

    if payload.get("sub") is None:
        raise InvalidTokenError("Token does not contain 'sub' field")
    return payload


async def require_super_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_master_db),
) -> SuperAdmin:
    """Resolve the bearer token to an active super admin."""
    if credentials is None:
        raise AuthenticationError("Not authorized to access this route")

    payload = decode_access_token(credentials.credentials)
    if payload.get("role") != SUPER_ADMIN_ROLE:
        raise AuthorizationError("Super admin access required")

    try:
        admin_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidTokenError()

    result = await db.execute(select(SuperAdmin).where(SuperAdmin.id == admin_id))
    admin = result.scalars().first()
    if admin is None:
        logger.warning("Super admin %s from token no longer exists", admin_id)
        raise InvalidTokenError("User belonging to this token no longer exists")
    if not admin.is_active:
        raise AccountDisabledError()
    return admin


async def require_tenant_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tenant: Tenant = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user of the request's tenant."""
    if credentials is None:
        raise AuthenticationError("Not authorized to access this route")

    payload = decode_access_token(credentials.credentials)
    # Tokens are only valid on the subdomain that issued them
    if payload.get("tenant") != tenant.subdomain:
        raise InvalidTokenError("Token was not issued for this tenant")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidTokenError()

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()
    if user is None:
        raise InvalidTokenError("User belonging to this token no longer exists")
    if not user.is_active:
        raise AccountDisabledError()
    return user
