"""Helpers shared by route modules."""

from fastapi import Request


def client_ip(request: Request) -> str | None:
    """Caller address, preferring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.headers.get("client-ip"):
        return request.headers["client-ip"]
    return request.client.host if request.client else None
