"""HTML pages: dashboard plus one generic screen per resource.

Dialogs are rendered server-side from query parameters
(``?dialog=new``, ``?dialog=edit&key=…``, ``?dialog=delete&key=…``).
Service outcomes come back as effects; ``_apply`` turns ``Notify`` into a
flash message kept in the session and ``Redirect`` into a 303.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..core.config import settings
from ..core.jinja import get_templates
from ..db.store import RecordStore, StoreError
from ..deps.auth import ADMIN_ONLY_MESSAGE, require_ui_session
from ..deps.session import User
from ..deps.store import get_store
from ..schemas.forms import field_specs, parse_form
from ..services import dashboard
from ..services.effects import Notify, Outcome, Redirect
from ..services.records import DeletionDialog, MutationDialog, RecordList
from ..services.resources import RESOURCES, Resource

templates = get_templates()
logger = logging.getLogger("landedcost.ui")

router = APIRouter(dependencies=[Depends(require_ui_session)])

FLASH_KEY = "flash"


def _flash(request: Request, notifies: list[Notify]) -> None:
    if not notifies:
        return
    queue = list(request.session.get(FLASH_KEY) or [])
    queue.extend({"level": n.level, "message": n.message} for n in notifies)
    request.session[FLASH_KEY] = queue


def _pop_flash(request: Request) -> list[dict[str, str]]:
    return list(request.session.pop(FLASH_KEY, None) or [])


def _apply(request: Request, outcome: Outcome) -> RedirectResponse | None:
    _flash(request, outcome.notifications)
    redirect = outcome.redirect
    if redirect is None:
        return None
    return RedirectResponse(url=redirect.url, status_code=303)


def _render(
    request: Request,
    user: User,
    template: str,
    context: dict[str, Any],
    *,
    notifies: list[Notify] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    messages = _pop_flash(request)
    messages.extend({"level": n.level, "message": n.message} for n in notifies or [])
    nav = [r for r in RESOURCES.values() if user.is_admin or not r.admin_only]
    base = {"user": user, "messages": messages, "nav": nav, "active": context.get("active", "dashboard")}
    return templates.TemplateResponse(request, template, {**base, **context}, status_code=status_code)


def _resource(slug: str) -> Resource:
    try:
        return RESOURCES[slug]
    except KeyError:
        raise HTTPException(status_code=404, detail="Not found") from None


def _admin_gate(request: Request, user: User, resource: Resource) -> RedirectResponse | None:
    if not resource.admin_only or user.is_admin:
        return None
    logger.info(
        "ui.admin_gate", extra={"extra_data": {"resource": resource.slug, "email": user.email, "role": user.role}}
    )
    return _apply(request, Outcome(ok=False, effects=[Notify("error", ADMIN_ONLY_MESSAGE), Redirect("/")]))


def _list_url(resource: Resource, **params: Any) -> str:
    query = {key: value for key, value in params.items() if value not in (None, "")}
    return f"{resource.url}?{urlencode(query)}" if query else resource.url


def _fetch(store: RecordStore, resource: Resource, key: str | None) -> dict[str, Any] | None:
    if not key:
        return None
    rows = store.select(resource.table, filters={resource.primary_key: key}, limit=1)
    return rows[0] if rows else None


def _form_context(dialog: MutationDialog, values: dict[str, Any], errors: dict[str, str]) -> dict[str, Any]:
    return {
        "mode": dialog.mode,
        "title": dialog.title,
        "fields": field_specs(dialog.resource.form),
        "values": values,
        "errors": errors,
        "options": dialog.options,
        "preview_total": dialog.preview_total(values),
        "key": dialog.resource.key_of(dialog.record) if dialog.record else None,
    }


def _delete_context(dialog: DeletionDialog) -> tuple[dict[str, Any], list[Notify]]:
    counts, notifies = dialog.dependents()
    context = {
        "identity": dialog.identity(),
        "dependents": counts,
        "key": dialog.resource.key_of(dialog.record),
    }
    return context, notifies


def _records_page(
    request: Request,
    user: User,
    store: RecordStore,
    resource: Resource,
    *,
    q: str = "",
    form: dict[str, Any] | None = None,
    delete: dict[str, Any] | None = None,
    notifies: list[Notify] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    listing = RecordList(store, resource)
    problems = listing.load()
    view = listing.view(q)
    context = {
        "active": resource.slug,
        "resource": resource,
        "q": q,
        "records": view,
        "total": len(listing.records),
        "loaded": listing.loaded,
        "summary": resource.summary(listing.records) if resource.summary else [],
        "form": form,
        "delete": delete,
        "list_url": _list_url(resource, q=q),
    }
    return _render(
        request,
        user,
        "records.html",
        context,
        notifies=[*(notifies or []), *problems],
        status_code=status_code,
    )


@router.get("/", response_class=HTMLResponse)
def dashboard_page(request: Request, store: RecordStore = Depends(get_store), user: User = Depends(require_ui_session)):
    stats, notifies = dashboard.overview(store)
    found, alert_notifies = dashboard.alerts(
        store,
        today=date.today(),
        low_stock_threshold=settings.LOW_STOCK_THRESHOLD,
        expiry_window_days=settings.EXPIRY_WINDOW_DAYS,
    )
    top, top_notifies = dashboard.top_cost_products(store)
    # One failure surfaces once, not per panel.
    problems = list(dict.fromkeys([*notifies, *alert_notifies, *top_notifies]))
    context = {"active": "dashboard", "stats": stats, "alerts": found, "top_products": top}
    return _render(request, user, "dashboard.html", context, notifies=problems)


@router.get("/{slug}", response_class=HTMLResponse)
def records_page(
    request: Request,
    slug: str,
    q: str = "",
    dialog: str = "",
    key: str = "",
    store: RecordStore = Depends(get_store),
    user: User = Depends(require_ui_session),
):
    resource = _resource(slug)
    gate = _admin_gate(request, user, resource)
    if gate is not None:
        return gate

    notifies: list[Notify] = []
    form = delete = None
    if dialog in {"new", "edit", "delete"}:
        record = None
        if dialog != "new":
            try:
                record = _fetch(store, resource, key)
            except StoreError:
                logger.exception("ui.fetch_failed", extra={"extra_data": {"resource": slug, "key": key}})
                record = None
            if record is None:
                return RedirectResponse(url=_list_url(resource, q=q), status_code=303)
        if dialog == "delete":
            delete, problems = _delete_context(DeletionDialog(store, resource, record))
            notifies.extend(problems)
        else:
            editor = MutationDialog(store, resource, record)
            notifies.extend(editor.load_options())
            form = _form_context(editor, editor.initial_values(), {})
    return _records_page(request, user, store, resource, q=q, form=form, delete=delete, notifies=notifies)


@router.post("/{slug}/save", response_class=HTMLResponse)
async def save_record(
    request: Request,
    slug: str,
    store: RecordStore = Depends(get_store),
    user: User = Depends(require_ui_session),
):
    resource = _resource(slug)
    gate = _admin_gate(request, user, resource)
    if gate is not None:
        return gate

    raw = dict(await request.form())
    key = str(raw.pop("_key", "") or "")
    q = str(raw.pop("_q", "") or "")
    record = None
    if key:
        try:
            record = _fetch(store, resource, key)
        except StoreError:
            logger.exception("ui.fetch_failed", extra={"extra_data": {"resource": slug, "key": key}})
            _flash(request, [Notify("error", resource.copy.save_failed)])
            return RedirectResponse(url=_list_url(resource, q=q), status_code=303)
        if record is None:
            _flash(request, [Notify("error", resource.copy.save_failed)])
            return RedirectResponse(url=_list_url(resource, q=q), status_code=303)

    editor = MutationDialog(store, resource, record)
    values = parse_form(resource.form, raw)
    outcome = editor.submit(values)
    redirect = _apply(request, outcome)
    if redirect is not None:
        return redirect

    # Dialog stays open with the submitted values.
    notifies = editor.load_options()
    form = _form_context(editor, {**editor.initial_values(), **values}, outcome.errors)
    status_code = 422 if outcome.errors else 200
    return _records_page(request, user, store, resource, q=q, form=form, notifies=notifies, status_code=status_code)


@router.post("/{slug}/delete", response_class=HTMLResponse)
async def delete_record(
    request: Request,
    slug: str,
    store: RecordStore = Depends(get_store),
    user: User = Depends(require_ui_session),
):
    resource = _resource(slug)
    gate = _admin_gate(request, user, resource)
    if gate is not None:
        return gate

    raw = await request.form()
    key = str(raw.get("_key") or "")
    q = str(raw.get("_q") or "")
    try:
        record = _fetch(store, resource, key)
    except StoreError:
        logger.exception("ui.fetch_failed", extra={"extra_data": {"resource": slug, "key": key}})
        record = None
    if record is None:
        # Already gone: acknowledge like a successful delete.
        record = {resource.primary_key: key}

    confirmation = DeletionDialog(store, resource, record)
    outcome = confirmation.confirm()
    redirect = _apply(request, outcome)
    if redirect is not None:
        return redirect
    delete, notifies = _delete_context(confirmation)
    return _records_page(request, user, store, resource, q=q, delete=delete, notifies=notifies)


@router.post("/ui/{slug}/total", response_class=HTMLResponse)
async def preview_total(
    request: Request,
    slug: str,
    store: RecordStore = Depends(get_store),
    user: User = Depends(require_ui_session),
):
    resource = _resource(slug)
    if resource.admin_only and not user.is_admin:
        raise HTTPException(status_code=403, detail=ADMIN_ONLY_MESSAGE)
    raw = dict(await request.form())
    total = MutationDialog(store, resource).preview_total(raw)
    if total is None:
        raise HTTPException(status_code=404, detail="No cost breakdown")
    currency = str(raw.get("devise") or "EUR")
    return templates.TemplateResponse(request, "_total.html", {"total": total, "currency": currency})
