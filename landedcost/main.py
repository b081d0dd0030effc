"""ASGI entrypoint: ``uvicorn landedcost.main:app``."""

from landedcost.core.config import settings
from landedcost.core.logging import configure_logging
from . import app

configure_logging(settings.LOG_LEVEL)

__all__ = ["app"]
