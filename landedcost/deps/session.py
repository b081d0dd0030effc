"""Browser session user.

The signed cookie session (Starlette ``SessionMiddleware``) holds the logged
in user under a single key. ``UserSession`` is the only code that reads or
writes it, so handlers never poke at ``request.session`` for identity.
"""

from __future__ import annotations

from typing import Literal

from fastapi import Request
from pydantic import BaseModel, ValidationError

SESSION_KEY = "ui_user"

Role = Literal["admin", "finance", "product"]


class User(BaseModel):
    id: str
    email: str
    name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class UserSession:
    def __init__(self, request: Request) -> None:
        self.request = request

    def current(self) -> User | None:
        data = self.request.session.get(SESSION_KEY)
        if not data:
            return None
        try:
            return User.model_validate(data)
        except ValidationError:
            self.clear()
            return None

    def set(self, user: User) -> None:
        self.request.session[SESSION_KEY] = user.model_dump()

    def clear(self) -> None:
        self.request.session.pop(SESSION_KEY, None)
