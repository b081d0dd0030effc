"""Generic query client over the four record tables.

Every screen in the dashboard talks to its data through the small capability
set defined by :class:`RecordStore`: select (optionally ordered, filtered by
equality and limited), insert one row, update one row by key and delete one
row by key. Rows travel as plain dictionaries keyed by the store's column
names so the UI and API layers never touch ORM objects.

:class:`SqlRecordStore` backs the protocol with the local SQLAlchemy
database. The REST backend lives in :mod:`landedcost.db.rest`.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from sqlalchemy import asc, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger("landedcost.store")


class StoreError(Exception):
    """Any failed read or write against the record store."""

    def __init__(self, message: str, *, table: str | None = None, operation: str | None = None) -> None:
        super().__init__(message)
        self.table = table
        self.operation = operation


class RecordStore(Protocol):
    def select(
        self,
        table: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...

    def insert(self, table: str, payload: Mapping[str, Any]) -> dict[str, Any]: ...

    def update(self, table: str, key_field: str, key: Any, payload: Mapping[str, Any]) -> None: ...

    def delete(self, table: str, key_field: str, key: Any) -> None: ...


def _row_to_dict(obj: Any) -> dict[str, Any]:
    return {column.key: getattr(obj, column.key) for column in obj.__table__.columns}


class SqlRecordStore:
    """Record store backed by the SQLAlchemy models in ``landedcost.models``."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _model(self, table: str, operation: str):
        from ..models import TABLES

        try:
            return TABLES[table]
        except KeyError:
            raise StoreError(f"Unknown table {table!r}", table=table, operation=operation) from None

    def _column(self, model, name: str, table: str, operation: str):
        column = model.__table__.columns.get(name)
        if column is None:
            raise StoreError(f"Unknown column {name!r}", table=table, operation=operation)
        return column

    def select(
        self,
        table: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        model = self._model(table, "select")
        stmt = select(model)
        for name, value in (filters or {}).items():
            stmt = stmt.where(self._column(model, name, table, "select") == value)
        if order_by:
            column = self._column(model, order_by, table, "select")
            stmt = stmt.order_by(desc(column) if descending else asc(column))
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            rows = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc), table=table, operation="select") from exc
        return [_row_to_dict(row) for row in rows]

    def insert(self, table: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        model = self._model(table, "insert")
        known = {key: value for key, value in payload.items() if key in model.__table__.columns}
        obj = model(**known)
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(str(exc), table=table, operation="insert") from exc
        logger.info("store.insert", extra={"extra_data": {"table": table}})
        return _row_to_dict(obj)

    def update(self, table: str, key_field: str, key: Any, payload: Mapping[str, Any]) -> None:
        model = self._model(table, "update")
        column = self._column(model, key_field, table, "update")
        try:
            obj = self.db.execute(select(model).where(column == key)).scalars().first()
            if obj is None:
                # Same contract as an UPDATE … WHERE that matches nothing.
                return
            for name, value in payload.items():
                if name in model.__table__.columns:
                    setattr(obj, name, value)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(str(exc), table=table, operation="update") from exc
        logger.info("store.update", extra={"extra_data": {"table": table, "key": str(key)}})

    def delete(self, table: str, key_field: str, key: Any) -> None:
        model = self._model(table, "delete")
        column = self._column(model, key_field, table, "delete")
        try:
            obj = self.db.execute(select(model).where(column == key)).scalars().first()
            if obj is None:
                return
            self.db.delete(obj)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(str(exc), table=table, operation="delete") from exc
        logger.info("store.delete", extra={"extra_data": {"table": table, "key": str(key)}})
