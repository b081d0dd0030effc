from __future__ import annotations

import logging

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..core.jinja import get_templates
from ..core.security import find_user
from ..deps.session import User, UserSession

router = APIRouter()
templates = get_templates()
logger = logging.getLogger("landedcost.auth")

LOGIN_FAILED = "Email ou mot de passe incorrect"


def _safe_next(target: str | None) -> str:
    if not target or not target.startswith("/") or target.startswith("//"):
        return "/"
    return target


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, next: str = "/"):
    if UserSession(request).current() is not None:
        return RedirectResponse(url=_safe_next(next), status_code=302)
    return templates.TemplateResponse(
        request, "login.html", {"next": _safe_next(next), "error": "", "email": ""}
    )


@router.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form("/"),
):
    found = find_user(email, password)
    if found is None:
        logger.info("auth.login_failed", extra={"extra_data": {"email": email.strip().lower()}})
        return templates.TemplateResponse(
            request,
            "login.html",
            {"next": _safe_next(next), "error": LOGIN_FAILED, "email": email},
            status_code=401,
        )
    user = User.model_validate({key: found[key] for key in ("id", "email", "name", "role")})
    UserSession(request).set(user)
    logger.info("auth.login", extra={"extra_data": {"email": user.email, "role": user.role}})
    return RedirectResponse(url=_safe_next(next), status_code=302)


@router.get("/logout")
def logout(request: Request):
    UserSession(request).clear()
    return RedirectResponse(url="/login", status_code=302)
