import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.auth import hash_password, verify_password
from hireflow.config import settings
from hireflow.exceptions import (
    AccountDisabledError,
    AccountLockedError,
    DuplicateResourceError,
    InvalidCredentialsError,
)
from hireflow.models.super_admin import SuperAdmin
from hireflow.models.tenant import Tenant
from hireflow.models.user import User

logger = logging.getLogger(__name__)


async def get_super_admin_by_email(email: str, db: AsyncSession) -> SuperAdmin | None:
    result = await db.execute(select(SuperAdmin).where(SuperAdmin.email == email.lower()))
    return result.scalars().first()


async def register_super_admin(name: str, email: str, password: str, db: AsyncSession) -> SuperAdmin:
    if await get_super_admin_by_email(email, db) is not None:
        raise DuplicateResourceError("Super admin", "email", email.lower())

    admin = SuperAdmin(
        name=name,
        email=email.lower(),
        hashed_password=hash_password(password),
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    logger.info("Super admin registered: id=%d", admin.id)
    return admin


async def _check_login(account: SuperAdmin | User | None, password: str, db: AsyncSession) -> None:
    """
    Check credentials and apply the failed-login lockout policy.

    Each wrong password increments ``login_attempts``; reaching
    ``settings.max_login_attempts`` locks the account for
    ``settings.lockout_minutes``. A successful login resets the counter.
    """
    if account is None:
        raise InvalidCredentialsError()
    if account.is_locked:
        raise AccountLockedError()
    if not account.is_active:
        raise AccountDisabledError()

    if not verify_password(password, account.hashed_password):
        account.login_attempts = (account.login_attempts or 0) + 1
        if account.login_attempts >= settings.max_login_attempts:
            account.lock_until = datetime.now(timezone.utc) + timedelta(minutes=settings.lockout_minutes)
            account.login_attempts = 0
            logger.warning("%s %d locked after repeated failed logins", type(account).__name__, account.id)
        await db.commit()
        raise InvalidCredentialsError()

    account.login_attempts = 0
    account.lock_until = None
    account.last_login = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(account)


async def authenticate_super_admin(email: str, password: str, db: AsyncSession) -> SuperAdmin:
    admin = await get_super_admin_by_email(email, db)
    await _check_login(admin, password, db)
    return admin


# ── Tenant users (db is a session on the tenant database) ─────────────────


async def get_user_by_email(email: str, db: AsyncSession) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalars().first()


async def get_user_by_id(user_id: int, db: AsyncSession) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalars().first()


async def authenticate_tenant_user(login: str, password: str, tenant: Tenant, db: AsyncSession) -> User:
    """
    Sign in a user of ``tenant`` by email.

    The provisioned admin username (``<subdomain>_admin``) is accepted in
    place of the company admin's email, so the credentials handed out at
    provisioning work as issued.
    """
    email = tenant.email if login.lower() == tenant.admin_username else login
    user = await get_user_by_email(email, db)
    await _check_login(user, password, db)
    return user


async def change_password(user: User, current_password: str, new_password: str, db: AsyncSession) -> User:
    if not verify_password(current_password, user.hashed_password):
        raise InvalidCredentialsError("Current password is incorrect")
    user.hashed_password = hash_password(new_password)
    await db.commit()
    await db.refresh(user)
    logger.info("Password changed for user %d", user.id)
    return user
