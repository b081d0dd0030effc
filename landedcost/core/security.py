"""Credentials and API tokens.

Browser users come from ``settings.UI_USERS``. API clients trade either the
same credentials or the service API key for a JWT pair whose ``scope`` claim
is the caller's role; the cost-type endpoints read it back to enforce the
admin-only rule.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from .config import settings

ALGORITHM = "HS256"
AUDIENCE = "landedcost-clients"
ISSUER = "landedcost"
SERVICE_ROLE = "admin"


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenPayload(BaseModel):
    sub: str
    exp: datetime
    iat: datetime
    typ: str
    aud: str
    iss: str
    scope: str | None = None

    @property
    def scopes(self) -> list[str]:
        return (self.scope or "").split()

    @property
    def role(self) -> str | None:
        scopes = self.scopes
        return scopes[0] if scopes else None


def _token(subject: str, role: str | None, typ: str, lifetime: timedelta) -> str:
    issued = datetime.now(tz=timezone.utc)
    claims: dict[str, Any] = {
        "sub": subject,
        "typ": typ,
        "aud": AUDIENCE,
        "iss": ISSUER,
        "iat": int(issued.timestamp()),
        "exp": int((issued + lifetime).timestamp()),
    }
    if role:
        claims["scope"] = role
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=ALGORITHM)


def issue_token_pair(subject: str, scope: str | None = None) -> TokenPair:
    access = timedelta(minutes=settings.JWT_ACCESS_TTL_MIN)
    return TokenPair(
        access_token=_token(subject, scope, "access", access),
        refresh_token=_token(subject, scope, "refresh", timedelta(days=settings.JWT_REFRESH_TTL_DAYS)),
        expires_in=int(access.total_seconds()),
    )


def decode_token(token: str, *, verify_type: str | None = None) -> TokenPayload:
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM], audience=AUDIENCE, issuer=ISSUER)
        payload = TokenPayload.model_validate(claims)
    except (JWTError, ValidationError) as exc:
        raise ValueError("Invalid token") from exc
    if verify_type and payload.typ != verify_type:
        raise ValueError("Invalid token type")
    return payload


def refresh_access_token(refresh_token: str) -> TokenPair:
    payload = decode_token(refresh_token, verify_type="refresh")
    return issue_token_pair(payload.sub, scope=payload.role)


def verify_password(plain: str, stored: str) -> bool:
    """Check ``plain`` against a bcrypt hash, or a plain development password."""

    stored = (stored or "").strip()
    if not stored:
        return False
    if stored.startswith("$2"):
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), stored.encode("utf-8"))
        except ValueError:
            return False
    return plain == stored


def find_user(email: str, password: str) -> dict[str, str] | None:
    """Return the configured UI user matching the credentials, if any."""

    wanted = (email or "").strip().lower()
    for user in settings.UI_USERS:
        if user.get("email", "").lower() == wanted and verify_password(password, user.get("password", "")):
            return user
    return None
