# Response schemas for the browser-facing routes.
# Created: 2026-10-19

from __future__ import annotations

from pydantic import BaseModel


class APIResponse(BaseModel):
    """Base response wrapper."""

    model_config = {"from_attributes": True}


class ErrorResponse(APIResponse):
    """Error envelope rendered for every PlaydeckError."""

    error: str


class OkResponse(APIResponse):
    """Simple success response."""

    ok: bool = True


class AuthStatus(APIResponse):
    """Whether this browser can use the proxy routes right now."""

    authed: bool
