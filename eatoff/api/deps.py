from __future__ import annotations

import ipaddress

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from eatoff.core.config import settings
from eatoff.core.database import get_session
from eatoff.models.admin_user import AdminUser
from eatoff.models.customer import Customer
from eatoff.services.auth import (
    ADMIN_ROLES,
    CUSTOMER_ROLE,
    AdminPrincipal,
    AuthError,
    decode_token,
    token_subject,
)

security = HTTPBearer(auto_error=False)


def _bearer_payload(credentials: HTTPAuthorizationCredentials | None) -> dict:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    try:
        return decode_token(credentials.credentials)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


async def get_current_customer(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> Customer:
    payload = _bearer_payload(credentials)
    try:
        customer_id = token_subject(payload, (CUSTOMER_ROLE,))
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    customer = await session.get(Customer, customer_id)
    if customer is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return customer


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> AdminUser:
    payload = _bearer_payload(credentials)
    try:
        admin_id = token_subject(payload, ADMIN_ROLES)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    admin = await session.get(AdminUser, admin_id)
    if not admin or not admin.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user")
    return admin


def require_role(*roles: str):
    async def _guard(admin: AdminUser = Depends(get_current_admin)) -> AdminPrincipal:
        if admin.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return AdminPrincipal(id=admin.id, email=admin.email, role=admin.role)

    return _guard


async def get_request_ip(request: Request) -> str | None:
    def _valid_ip(raw: str | None) -> str | None:
        if not raw:
            return None
        try:
            return str(ipaddress.ip_address(raw.strip()))
        except ValueError:
            return None

    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            for candidate in forwarded.split(","):
                parsed = _valid_ip(candidate)
                if parsed:
                    return parsed
        real_ip = _valid_ip(request.headers.get("x-real-ip"))
        if real_ip:
            return real_ip

    if request.client:
        return _valid_ip(request.client.host)
    return None
