from __future__ import annotations

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    """Either an API key or UI user credentials."""

    api_key: str | None = Field(default=None, alias="apiKey")
    email: str | None = None
    password: str | None = None

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {"email": "finance@example.com", "password": "finance123"}
        },
    }


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int

    model_config = {
        "json_schema_extra": {
            "example": {
                "access_token": "<jwt>",
                "refresh_token": "<jwt>",
                "token_type": "bearer",
                "expires_in": 900,
            }
        }
    }


class RefreshRequest(BaseModel):
    refresh_token: str

    model_config = {
        "json_schema_extra": {
            "example": {"refresh_token": "<jwt>"}
        }
    }
