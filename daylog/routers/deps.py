"""
Shared request dependencies: owner identity and the caller's "today".
"""
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import Header, Query

from daylog.core.errors import NotAuthenticatedError


def utc_today() -> date:
    return datetime.now(tz=timezone.utc).date()


def get_owner_id(
    x_owner_id: Optional[str] = Header(
        default=None,
        description="Authenticated owner identity, set by the auth layer in front of the API.",
    ),
) -> str:
    owner_id = (x_owner_id or "").strip()
    if not owner_id:
        raise NotAuthenticatedError()
    return owner_id


def get_today(
    today: Optional[date] = Query(
        default=None,
        description="Caller's notion of today (YYYY-MM-DD). Defaults to today (UTC).",
        examples=["2026-02-21"],
    ),
) -> date:
    return today or utc_today()
