"""Application wiring for the landed-cost dashboard.

Brings together configuration, database setup, middlewares, routers and
error handling. ``landedcost.main`` adds JSON logging on top.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings
from .core.errors import http_exception_handler, store_exception_handler, validation_exception_handler
from .db.session import Base, engine
from .db.store import StoreError
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Importing the models registers the four tables with the metadata.
from . import models as _models  # noqa: F401

app = FastAPI(title=settings.APP_NAME)

app.mount("/static", StaticFiles(directory=str(settings.STATIC_DIR)), name="static")

Base.metadata.create_all(bind=engine)

# Starlette runs the last-added middleware first: request ids wrap everything.
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.APP_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=False,  # set True once the app is always served over HTTPS
)
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StoreError, store_exception_handler)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, include_in_schema=False)


from .routers import auth_ui as auth_ui_router  # noqa: E402

app.include_router(auth_ui_router.router)

from .routers import api_auth as api_auth_router  # noqa: E402

app.include_router(api_auth_router.router)

from .routers import api_records as api_records_router  # noqa: E402

app.include_router(api_records_router.router)

# UI pages last: "/{slug}" would otherwise shadow the routes above.
from .routers import ui as ui_router  # noqa: E402

app.include_router(ui_router.router)

__all__ = ["app"]
