from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from eatoff.core.config import settings
from eatoff.utils.time import utc_now

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

CUSTOMER_ROLE = "customer"
ADMIN_ROLES = ("admin", "agent")


class AuthError(Exception):
    pass


@dataclass(frozen=True)
class AdminPrincipal:
    id: int
    email: str
    role: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(password, hashed)


def create_access_token(subject: str, role: str, email: str | None = None) -> str:
    now = utc_now()
    payload = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token() -> str:
    return secrets.token_urlsafe(48)


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise AuthError("Invalid or expired token") from exc


def token_subject(payload: dict, allowed_roles: tuple[str, ...]) -> int:
    if payload.get("role") not in allowed_roles:
        raise AuthError("Token not valid for this resource")
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError) as exc:
        raise AuthError("Invalid token") from exc
