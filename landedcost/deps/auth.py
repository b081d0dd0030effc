from __future__ import annotations

import hmac

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param

from ..core.config import settings
from ..core.security import SERVICE_ROLE, decode_token
from ..middlewares import principal_ctx_var, role_ctx_var
from .session import User, UserSession

ADMIN_ONLY_MESSAGE = "Cette section est réservée aux administrateurs"


class AuthContext:
    def __init__(self, *, subject: str, scheme: str, role: str | None = None) -> None:
        self.subject = subject
        self.scheme = scheme
        self.role = role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _unauthorized(detail: str = "Unauthorized") -> None:
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _set_principal(request: Request, principal: str, role: str | None = None) -> None:
    principal_ctx_var.set(principal)
    role_ctx_var.set(role)
    request.state.principal = principal
    request.state.role = role


async def require_ui_session(request: Request) -> User:
    """Gate for UI routes: the login flow must have stored a user."""

    user = UserSession(request).current()
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    _set_principal(request, f"ui:{user.email}", user.role)
    return user


async def require_ui_or_token(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> AuthContext:
    user = UserSession(request).current()
    if user is not None:
        subject = f"ui:{user.email}"
        _set_principal(request, subject, user.role)
        return AuthContext(subject=subject, scheme="session", role=user.role)

    api_key = (settings.API_KEY or "").strip()
    provided_key = (x_api_key or "").strip()
    if api_key and provided_key and hmac.compare_digest(api_key, provided_key):
        _set_principal(request, "api-key", SERVICE_ROLE)
        return AuthContext(subject="api-key", scheme="api_key", role=SERVICE_ROLE)

    if authorization:
        scheme, credentials = get_authorization_scheme_param(authorization)
        if scheme.lower() == "bearer" and credentials:
            try:
                payload = decode_token(credentials, verify_type="access")
            except ValueError as exc:
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
            subject = f"jwt:{payload.sub}"
            _set_principal(request, subject, payload.role)
            request.state.token_payload = payload
            return AuthContext(subject=subject, scheme="jwt", role=payload.role)

    if not api_key:
        _set_principal(request, "anonymous")
        return AuthContext(subject="anonymous", scheme="open")

    if provided_key:
        _unauthorized("Invalid API key")
    _unauthorized("Authorization required")


async def require_admin(auth: AuthContext = Depends(require_ui_or_token)) -> AuthContext:
    if not auth.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ADMIN_ONLY_MESSAGE)
    return auth
