from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.api.deps import get_current_admin, get_current_customer, get_request_ip
from eatoff.core.config import settings
from eatoff.core.database import get_session
from eatoff.models.admin_refresh_token import AdminRefreshToken
from eatoff.models.admin_user import AdminUser
from eatoff.models.customer import Customer
from eatoff.schemas.auth import (
    AdminUserOut,
    CustomerOut,
    LoginRequest,
    RefreshRequest,
    TokenResponse,
)
from eatoff.services.auth import (
    CUSTOMER_ROLE,
    create_access_token,
    create_refresh_token,
    hash_refresh_token,
    verify_password,
)
from eatoff.services.rate_limit import LoginRateLimiter
from eatoff.utils.time import utc_now

router = APIRouter(tags=["auth"])

login_limiter = LoginRateLimiter(
    settings.LOGIN_RATE_LIMIT_MAX_ATTEMPTS,
    settings.LOGIN_RATE_LIMIT_WINDOW_SEC,
)


def _limiter_key(ip: str | None, email: str) -> str:
    return ip or email


async def _check_rate_limit(request: Request, email: str) -> str | None:
    ip = await get_request_ip(request)
    key = _limiter_key(ip, email)
    if not login_limiter.allow(key):
        raise HTTPException(
            status_code=429,
            detail="Too many login attempts",
            headers={"Retry-After": str(login_limiter.retry_after(key))},
        )
    return ip


@router.post("/api/auth/login", response_model=TokenResponse)
async def customer_login(
    payload: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    ip = await _check_rate_limit(request, payload.email)
    result = await session.execute(select(Customer).where(Customer.email == payload.email))
    customer = result.scalars().first()
    if not customer or not verify_password(payload.password, customer.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    login_limiter.reset(_limiter_key(ip, payload.email))
    return TokenResponse(
        access_token=create_access_token(str(customer.id), CUSTOMER_ROLE, customer.email)
    )


@router.get("/api/auth/me", response_model=CustomerOut)
async def customer_me(customer: Customer = Depends(get_current_customer)) -> Customer:
    return customer


@router.post("/api/admin/auth/login", response_model=TokenResponse)
async def admin_login(
    payload: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    ip = await _check_rate_limit(request, payload.email)
    result = await session.execute(select(AdminUser).where(AdminUser.email == payload.email))
    admin = result.scalars().first()
    if not admin or not admin.is_active:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(payload.password, admin.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    login_limiter.reset(_limiter_key(ip, payload.email))

    refresh_token = create_refresh_token()
    admin.last_login_at = utc_now()
    session.add(
        AdminRefreshToken(
            admin_id=admin.id,
            token_hash=hash_refresh_token(refresh_token),
            expires_at=utc_now() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            ip=ip,
            user_agent=request.headers.get("user-agent"),
        )
    )
    await session.commit()

    return TokenResponse(
        access_token=create_access_token(str(admin.id), admin.role, admin.email),
        refresh_token=refresh_token,
    )


@router.post("/api/admin/auth/refresh", response_model=TokenResponse)
async def admin_refresh(
    payload: RefreshRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    result = await session.execute(
        select(AdminRefreshToken).where(
            AdminRefreshToken.token_hash == hash_refresh_token(payload.refresh_token)
        )
    )
    token = result.scalars().first()
    if not token or not token.is_usable(utc_now()):
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    admin = await session.get(AdminUser, token.admin_id)
    if not admin or not admin.is_active:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    new_refresh = create_refresh_token()
    token.revoked_at = utc_now()
    token.last_used_at = utc_now()
    session.add(
        AdminRefreshToken(
            admin_id=admin.id,
            token_hash=hash_refresh_token(new_refresh),
            expires_at=utc_now() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            ip=await get_request_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    )
    await session.commit()

    return TokenResponse(
        access_token=create_access_token(str(admin.id), admin.role, admin.email),
        refresh_token=new_refresh,
    )


@router.get("/api/admin/auth/me", response_model=AdminUserOut)
async def admin_me(admin: AdminUser = Depends(get_current_admin)) -> AdminUser:
    return admin
