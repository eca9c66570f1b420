"""Users service endpoints.

GET /api/v1/users/count - Count users by creation window and verification
GET /api/v1/users - One page of users, sorted and filtered
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query

from userdash.api.app import get_db_session
from userdash.db import repo
from userdash.db.repo import SORTABLE_FIELDS, DbSession
from userdash.models.domain import CountQuery
from userdash.models.types import CountResponse, UserRow, UsersPage

router = APIRouter()

MAX_PAGE_SIZE = 100


def _as_utc(moment: datetime | None) -> datetime | None:
    """Naive query datetimes are taken to be UTC."""
    if moment is not None and moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _parse_sort(raw: str | None) -> tuple[str, str]:
    """Parse ``{"<key>": "asc|desc"}`` into (key, direction).

    Raises:
        HTTPException: 400 for anything but a single known key and direction.
    """
    if raw is None:
        return "createdAt", "desc"
    try:
        sort = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail="sort must be a JSON object") from e

    if not isinstance(sort, dict) or len(sort) != 1:
        raise HTTPException(status_code=400, detail="sort must have exactly one key")
    ((key, direction),) = sort.items()
    if key not in SORTABLE_FIELDS:
        raise HTTPException(status_code=400, detail=f"Cannot sort by {key}")
    if not isinstance(direction, str) or direction.lower() not in ("asc", "desc"):
        raise HTTPException(status_code=400, detail="sort direction must be asc or desc")
    return key, direction.lower()


@router.get("/users/count", response_model=CountResponse)
def count_users(
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    verified: bool | None = Query(default=None),
    session: DbSession = Depends(get_db_session),
) -> CountResponse:
    """Count users.

    Args:
        start_date: Inclusive lower bound on creation time.
        end_date: Inclusive upper bound on creation time.
        verified: Restrict to verified (true) or unverified (false) users.
        session: Database session (injected).

    Raises:
        HTTPException: 400 if startDate is after endDate.
    """
    start_date, end_date = _as_utc(start_date), _as_utc(end_date)
    if start_date is not None and end_date is not None and start_date > end_date:
        raise HTTPException(status_code=400, detail="startDate must not be after endDate")

    query = CountQuery(start_date=start_date, end_date=end_date, verified=verified)
    return CountResponse(count=repo.count_users(session, query))


@router.get("/users", response_model=UsersPage)
def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=MAX_PAGE_SIZE),
    sort: str | None = Query(default=None),
    filter_text: str | None = Query(default=None, alias="filter"),
    session: DbSession = Depends(get_db_session),
) -> UsersPage:
    """List users for the server-paginated table.

    Args:
        page: 1-based page number.
        limit: Page size.
        sort: JSON object with one key, e.g. ``{"createdAt": "desc"}``.
        filter_text: Case-insensitive substring of name or email.
        session: Database session (injected).

    Raises:
        HTTPException: 400 for a malformed sort.
    """
    sort_key, direction = _parse_sort(sort)

    users, total = repo.list_users(
        session,
        page=page,
        limit=limit,
        sort_key=sort_key,
        direction=direction,
        filter_text=filter_text.strip() if filter_text else None,
    )
    return UsersPage(data=[UserRow(**u.to_row()) for u in users], total=total)
