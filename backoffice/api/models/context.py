"""Request context models for middleware and observability."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

Role = Literal["admin", "manager", "user"]


class UserContext(BaseModel):
    """Caller identity extracted from the bearer token claims."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    """JWT 'sub' claim."""

    email: str | None = None

    role: Role = "user"
    """Role used for permission checks."""


class RequestContext(BaseModel):
    """Identifiers bound to every log line of a request."""

    trace_id: str
    span_id: str = ""
    request_id: str
    user_id: str | None = None
