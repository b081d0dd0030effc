"""Generic record screens: list loader, local filter, mutation and deletion.

One implementation serves every entity; the differences live in the
:class:`~landedcost.services.resources.Resource` passed in.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from ..db.store import RecordStore, StoreError
from ..schemas.forms import error_messages
from .costs import sum_costs
from .effects import Notify, Outcome, Redirect
from .resources import Resource

logger = logging.getLogger("landedcost.records")

DEPENDENTS_FAILED = "Impossible de vérifier les éléments liés à cet élément"


def get_path(record: Mapping[str, Any] | None, path: str) -> Any:
    """Follow a dotted ``path`` through nested mappings; ``None`` when absent."""

    current: Any = record
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def filter_records(records: Iterable[dict[str, Any]], query: str | None, fields: Iterable[str]) -> list[dict[str, Any]]:
    rows = list(records)
    needle = (query or "").strip().lower()
    if not needle:
        return rows
    paths = tuple(fields)
    matches = []
    for row in rows:
        for path in paths:
            value = get_path(row, path)
            if isinstance(value, str) and needle in value.lower():
                matches.append(row)
                break
    return matches


def _join(rows: list[dict[str, Any]], related: list[dict[str, Any]], attr: str, local: str, remote: str) -> None:
    for row in rows:
        key = row.get(local)
        row[attr] = next((other for other in related if key is not None and other.get(remote) == key), None)


class RecordList:
    """Cached rows of one resource plus the derived filtered view."""

    def __init__(self, store: RecordStore, resource: Resource):
        self.store = store
        self.resource = resource
        self.records: list[dict[str, Any]] = []
        self.loading = False
        self.loaded = False

    def load(self) -> list[Notify]:
        self.loading = True
        resource = self.resource
        try:
            rows = self.store.select(resource.table, order_by=resource.order_by, descending=resource.descending)
            for lookup in resource.lookups:
                related = self.store.select(lookup.table)
                _join(rows, related, lookup.attr, lookup.local_key, lookup.remote_key)
        except StoreError as exc:
            logger.exception(
                "records.load_failed",
                extra={"extra_data": {"resource": resource.slug, "table": exc.table, "operation": exc.operation}},
            )
            return [Notify("error", resource.copy.load_failed)]
        finally:
            self.loading = False
        self.records = rows
        self.loaded = True
        return []

    def view(self, query: str | None) -> list[dict[str, Any]]:
        return filter_records(self.records, query, self.resource.search_fields)

    def find(self, key: Any) -> dict[str, Any] | None:
        if key is None:
            return None
        return next((row for row in self.records if str(self.resource.key_of(row)) == str(key)), None)


class MutationDialog:
    """Create/edit form for one resource."""

    def __init__(self, store: RecordStore, resource: Resource, record: dict[str, Any] | None = None):
        self.store = store
        self.resource = resource
        self.record = record
        self.options: dict[str, list[tuple[str, str]]] = {}

    @property
    def mode(self) -> str:
        return "create" if self.record is None else "edit"

    @property
    def title(self) -> str:
        copy = self.resource.copy
        return copy.create_title if self.mode == "create" else copy.edit_title

    def initial_values(self) -> dict[str, Any]:
        schema = self.resource.form
        if self.record is None:
            values: dict[str, Any] = {}
            for name, info in schema.model_fields.items():
                values[name] = None if info.is_required() else info.get_default(call_default_factory=True)
            return values
        flattened = self.resource.to_form(self.record)
        return {name: flattened.get(name) for name in schema.model_fields}

    def load_options(self) -> list[Notify]:
        self.options = {}
        try:
            for source in self.resource.options:
                rows = self.store.select(source.table, order_by=source.order_by, descending=source.descending)
                self.options[source.field] = [
                    (str(row.get(source.value)), str(row.get(source.label) or row.get(source.value)))
                    for row in rows
                ]
        except StoreError as exc:
            self.options = {}
            logger.exception(
                "records.options_failed",
                extra={"extra_data": {"resource": self.resource.slug, "table": exc.table}},
            )
            return [Notify("error", self.resource.copy.load_failed)]
        return []

    def validate(self, raw: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, str]]:
        schema = self.resource.form
        try:
            model = schema.model_validate(dict(raw))
        except ValidationError as exc:
            return {}, error_messages(schema, exc)
        return model.model_dump(), {}

    def preview_total(self, raw: Mapping[str, Any]) -> float | None:
        if not self.resource.cost_fields:
            return None
        return sum_costs(raw, self.resource.cost_fields)

    def submit(self, raw: Mapping[str, Any]) -> Outcome:
        resource = self.resource
        values, errors = self.validate(raw)
        if errors:
            return Outcome(ok=False, errors=errors)

        payload = resource.to_payload(values)
        try:
            if self.record is None:
                saved = self.store.insert(resource.table, payload)
                message = resource.copy.created
            else:
                key = resource.key_of(self.record)
                payload.pop(resource.primary_key, None)
                self.store.update(resource.table, resource.primary_key, key, payload)
                saved = {**self.record, **payload}
                message = resource.copy.updated
        except StoreError as exc:
            logger.exception(
                "records.save_failed",
                extra={"extra_data": {"resource": resource.slug, "mode": self.mode, "operation": exc.operation}},
            )
            return Outcome(ok=False, effects=[Notify("error", resource.copy.save_failed)])

        logger.info(
            "records.saved",
            extra={"extra_data": {"resource": resource.slug, "mode": self.mode, "key": resource.key_of(saved)}},
        )
        return Outcome(ok=True, effects=[Notify("success", message), Redirect(resource.url)], record=saved)


class DeletionDialog:
    """Confirmation step before a hard delete by primary key."""

    def __init__(self, store: RecordStore, resource: Resource, record: dict[str, Any]):
        self.store = store
        self.resource = resource
        self.record = record
        self.in_flight = False

    def identity(self) -> dict[str, Any]:
        return {name: self.record.get(name) for name in self.resource.identity_fields}

    def dependents(self) -> tuple[list[tuple[str, int]], list[Notify]]:
        """Count of rows in other tables that reference this record.

        Those rows are kept when the record goes away. Counting stops at the
        first table the store cannot read, and that failure is reported.
        """

        key = self.resource.key_of(self.record)
        counts: list[tuple[str, int]] = []
        for dependent in self.resource.dependents:
            try:
                rows = self.store.select(dependent.table, filters={dependent.field: key})
            except StoreError:
                logger.exception(
                    "records.dependents_failed",
                    extra={"extra_data": {"resource": self.resource.slug, "table": dependent.table}},
                )
                return counts, [Notify("error", DEPENDENTS_FAILED)]
            counts.append((dependent.label, len(rows)))
        return counts, []

    def confirm(self) -> Outcome:
        resource = self.resource
        if self.in_flight:
            return Outcome(ok=False)
        self.in_flight = True
        key = resource.key_of(self.record)
        try:
            self.store.delete(resource.table, resource.primary_key, key)
        except StoreError as exc:
            logger.exception(
                "records.delete_failed",
                extra={"extra_data": {"resource": resource.slug, "key": key, "operation": exc.operation}},
            )
            return Outcome(ok=False, effects=[Notify("error", resource.copy.delete_failed)])
        finally:
            self.in_flight = False
        logger.info("records.deleted", extra={"extra_data": {"resource": resource.slug, "key": key}})
        return Outcome(
            ok=True,
            effects=[Notify("success", resource.copy.deleted), Redirect(resource.url)],
            record=self.record,
        )
