from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from ..core.config import settings
from ..db.rest import RestRecordStore, build_client
from ..db.session import get_db
from ..db.store import RecordStore, SqlRecordStore


def get_store(db: Session = Depends(get_db)):
    """Yield the configured record store for the duration of one request."""

    if settings.STORE_BACKEND == "rest":
        client = build_client(settings.STORE_URL, settings.STORE_API_KEY, settings.STORE_TIMEOUT)
        try:
            yield RestRecordStore(client)
        finally:
            client.close()
        return
    store: RecordStore = SqlRecordStore(db)
    yield store
