"""Headless CRUD over the same record services the HTML screens use."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from ..core.errors import ErrorEnvelope
from ..db.store import RecordStore
from ..deps.auth import ADMIN_ONLY_MESSAGE, AuthContext, require_ui_or_token
from ..deps.store import get_store
from ..services.effects import Outcome
from ..services.records import DeletionDialog, MutationDialog, RecordList
from ..services.resources import RESOURCES, Resource

router = APIRouter(prefix="/api/v1", tags=["records"])


def resource_for(slug: str, auth: AuthContext = Depends(require_ui_or_token)) -> Resource:
    resource = RESOURCES.get(slug)
    if resource is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    if resource.admin_only and not auth.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ADMIN_ONLY_MESSAGE)
    return resource


def _get_or_404(store: RecordStore, resource: Resource, key: str) -> dict[str, Any]:
    rows = store.select(resource.table, filters={resource.primary_key: key}, limit=1)
    if not rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return rows[0]


def _failure(outcome: Outcome) -> ErrorEnvelope:
    if outcome.errors:
        return ErrorEnvelope(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"fields": outcome.errors},
        )
    message = outcome.notifications[0].message if outcome.notifications else "Store error"
    return ErrorEnvelope(status_code=status.HTTP_502_BAD_GATEWAY, code="store_error", message=message)


@router.get("/{slug}")
def api_list(q: str = "", resource: Resource = Depends(resource_for), store: RecordStore = Depends(get_store)):
    listing = RecordList(store, resource)
    problems = listing.load()
    if problems:
        return ErrorEnvelope(status_code=status.HTTP_502_BAD_GATEWAY, code="store_error", message=problems[0].message)
    return listing.view(q)


@router.get("/{slug}/{key}")
def api_get(key: str, resource: Resource = Depends(resource_for), store: RecordStore = Depends(get_store)):
    return _get_or_404(store, resource, key)


@router.post("/{slug}", status_code=status.HTTP_201_CREATED)
def api_create(
    payload: dict[str, Any] = Body(...),
    resource: Resource = Depends(resource_for),
    store: RecordStore = Depends(get_store),
):
    outcome = MutationDialog(store, resource).submit(payload)
    if not outcome.ok:
        return _failure(outcome)
    return outcome.record


@router.put("/{slug}/{key}")
def api_update(
    key: str,
    payload: dict[str, Any] = Body(...),
    resource: Resource = Depends(resource_for),
    store: RecordStore = Depends(get_store),
):
    record = _get_or_404(store, resource, key)
    # Fields left out of the body keep their stored values.
    merged = {**resource.to_form(record), **payload}
    if isinstance(payload.get("couts"), dict):
        merged.update(payload["couts"])
    outcome = MutationDialog(store, resource, record).submit(merged)
    if not outcome.ok:
        return _failure(outcome)
    return _get_or_404(store, resource, key)


@router.delete("/{slug}/{key}")
def api_delete(key: str, resource: Resource = Depends(resource_for), store: RecordStore = Depends(get_store)):
    rows = store.select(resource.table, filters={resource.primary_key: key}, limit=1)
    record = rows[0] if rows else {resource.primary_key: key}
    outcome = DeletionDialog(store, resource, record).confirm()
    if not outcome.ok:
        return _failure(outcome)
    return {"status": "deleted"}
