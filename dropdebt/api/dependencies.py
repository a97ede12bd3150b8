"""Dependency injection for FastAPI endpoints"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import Request


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def resolve_now(now: Optional[datetime]) -> datetime:
    """Clock for a request: the caller's `now` if given, current UTC time otherwise"""
    return now if now is not None else datetime.now(timezone.utc)
