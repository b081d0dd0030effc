"""Shared plumbing for the entity form schemas.

Each entity form is a pydantic model. Field metadata (label, widget, tab
group, custom messages) rides along in ``json_schema_extra`` so templates
can render the form straight from the schema and validation errors can be
turned into inline French messages.
"""

from __future__ import annotations

import types
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal, Mapping, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

DEFAULT_MESSAGES = {
    "required": "Champ requis",
    "range": "Montant invalide",
    "number": "Nombre invalide",
    "choice": "Valeur invalide",
    "date": "Date invalide",
}

_REQUIRED_TYPES = {"missing", "string_too_short", "string_type"}
_RANGE_TYPES = {"greater_than_equal", "greater_than", "less_than_equal", "less_than"}
_NUMBER_TYPES = {"float_parsing", "float_type", "int_parsing", "int_type", "int_from_float", "finite_number"}


def form_field(
    default: Any = ...,
    *,
    label: str,
    widget: str | None = None,
    group: str = "general",
    required_message: str | None = None,
    range_message: str | None = None,
    placeholder: str | None = None,
    **kwargs: Any,
) -> Any:
    extra: dict[str, Any] = {"group": group}
    if widget:
        extra["widget"] = widget
    if required_message:
        extra["required_message"] = required_message
    if range_message:
        extra["range_message"] = range_message
    if placeholder:
        extra["placeholder"] = placeholder
    return Field(default, title=label, json_schema_extra=extra, **kwargs)


class FormSchema(BaseModel):
    """Base for entity forms: strip strings, blank optional values fall back."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", allow_inf_nan=False)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if not (isinstance(value, str) and not value.strip()):
            return value
        field = cls.model_fields[info.field_name]
        if field.is_required():
            return value
        # Optional blanks become the explicit absent marker (None) or the numeric default.
        return field.get_default(call_default_factory=True)


def validate_iso_date(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(DEFAULT_MESSAGES["date"]) from exc
    return value


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    widget: str
    required: bool
    group: str
    choices: tuple[str, ...] = ()
    placeholder: str = ""


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _extra(schema: type[BaseModel], name: str) -> dict[str, Any]:
    extra = schema.model_fields[name].json_schema_extra
    return extra if isinstance(extra, dict) else {}


def field_specs(schema: type[BaseModel]) -> list[FieldSpec]:
    """Describe every field of ``schema`` for the form templates."""

    specs: list[FieldSpec] = []
    for name, info in schema.model_fields.items():
        extra = _extra(schema, name)
        annotation = _unwrap_optional(info.annotation)
        choices: tuple[str, ...] = ()
        widget = extra.get("widget")
        if get_origin(annotation) is Literal:
            choices = tuple(str(arg) for arg in get_args(annotation))
            widget = widget or "select"
        elif annotation is bool:
            widget = widget or "checkbox"
        elif annotation in (int, float):
            widget = widget or "number"
        specs.append(
            FieldSpec(
                name=name,
                label=info.title or name,
                widget=widget or "text",
                required=info.is_required(),
                group=str(extra.get("group", "general")),
                choices=choices,
                placeholder=str(extra.get("placeholder", "")),
            )
        )
    return specs


def error_messages(schema: type[BaseModel], exc: ValidationError) -> dict[str, str]:
    """Map a pydantic error list to one French message per field."""

    messages: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        name = str(loc[0]) if loc else "__all__"
        if name in messages:
            continue
        extra = _extra(schema, name) if name in schema.model_fields else {}
        kind = error.get("type", "")
        if kind in _REQUIRED_TYPES:
            message = extra.get("required_message") or DEFAULT_MESSAGES["required"]
        elif kind in _RANGE_TYPES:
            message = extra.get("range_message") or DEFAULT_MESSAGES["range"]
        elif kind in _NUMBER_TYPES:
            message = DEFAULT_MESSAGES["number"]
        elif kind == "literal_error":
            message = DEFAULT_MESSAGES["choice"]
        elif kind == "value_error":
            message = str(error.get("ctx", {}).get("error") or DEFAULT_MESSAGES["choice"])
        else:
            message = DEFAULT_MESSAGES["choice"]
        messages[name] = message
    return messages


def parse_form(schema: type[BaseModel], raw: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize raw form input before validation.

    HTML forms omit unchecked checkboxes, so boolean fields are read as
    presence flags when the value is not already a bool.
    """

    data = {key: value for key, value in raw.items() if key in schema.model_fields}
    for name, info in schema.model_fields.items():
        if _unwrap_optional(info.annotation) is not bool:
            continue
        value = raw.get(name)
        if isinstance(value, bool):
            continue
        data[name] = str(value).strip().lower() in {"on", "true", "1", "yes"} if value is not None else False
    return data
