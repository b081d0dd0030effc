"""Jinja2 environment with the dashboard's formatting filters."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from fastapi.templating import Jinja2Templates

from ..services.records import get_path
from ..services.resources import RESOURCES, STATUS_VARIANTS
from .config import settings

_LOCAL_TZ = ZoneInfo(settings.TZ) if settings.TZ else None

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}


def _to_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        dt = value
        if dt.tzinfo is not None and _LOCAL_TZ:
            dt = dt.astimezone(_LOCAL_TZ)
        return dt.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return _to_date(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def _fmt_date(value: Any, fmt: str = "%d/%m/%Y") -> str:
    """Day/month/year, or ``-`` when there is no date."""

    day = _to_date(value)
    return day.strftime(fmt) if day else "-"


def _fmt_money(value: Any, currency: str | None = "EUR") -> str:
    if value is None:
        return "-"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "-"
    code = (currency or "EUR").strip() or "EUR"
    return f"{number:.2f} {CURRENCY_SYMBOLS.get(code, code)}"


def _fmt_number(value: Any) -> str:
    if value is None:
        return "-"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "-"
    return str(int(number)) if number.is_integer() else f"{number:g}"


def _fmt_percent(value: Any) -> str:
    if value is None:
        return "-"
    return f"{_fmt_number(value)} %"


def get_templates() -> Jinja2Templates:
    """Create a ``Jinja2Templates`` instance with our standard filters registered."""

    templates = Jinja2Templates(directory=str(settings.TEMPLATES_DIR))
    env = templates.env
    env.filters["fmt_date"] = _fmt_date
    env.filters["fmt_money"] = _fmt_money
    env.filters["fmt_number"] = _fmt_number
    env.filters["fmt_percent"] = _fmt_percent
    env.filters["get_path"] = get_path
    env.globals["STATUS_VARIANTS"] = STATUS_VARIANTS
    env.globals["RESOURCES"] = RESOURCES
    env.globals["APP_NAME"] = settings.APP_NAME
    return templates
