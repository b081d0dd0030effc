"""Side-effect commands returned by the record services.

Handlers never flash messages or redirect on their own. They return
``Notify`` and ``Redirect`` values inside an :class:`Outcome`; the UI router
turns them into flash messages and HTTP redirects, the JSON API ignores the
redirects, and tests simply inspect them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

NotifyLevel = Literal["success", "error", "info"]


@dataclass(frozen=True)
class Notify:
    level: NotifyLevel
    message: str


@dataclass(frozen=True)
class Redirect:
    url: str


Effect = Union[Notify, Redirect]


@dataclass
class Outcome:
    ok: bool
    effects: list[Effect] = field(default_factory=list)
    record: dict[str, Any] | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def notifications(self) -> list[Notify]:
        return [effect for effect in self.effects if isinstance(effect, Notify)]

    @property
    def redirect(self) -> Redirect | None:
        return next((effect for effect in self.effects if isinstance(effect, Redirect)), None)
