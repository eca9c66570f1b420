"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries, keeping domain logic pure.
Returns domain models (not SQLAlchemy entities) to external callers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Literal

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from userdash.db.schema import User
from userdash.models.domain import CountQuery, UserEntity

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession", "SORTABLE_FIELDS"]

# Wire sort key -> mapped column
SORTABLE_FIELDS = {
    "name": User.name,
    "email": User.email,
    "verified": User.verified,
    "createdAt": User.created_at,
}


def _to_db_time(moment: datetime) -> datetime:
    """SQLite stores naive datetimes; normalize everything to naive UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


# ============================================================================
# Converters: SQLAlchemy -> Domain
# ============================================================================


def _user_to_entity(user: User) -> UserEntity:
    """Convert SQLAlchemy User to domain entity."""
    return UserEntity(
        id=user.id,
        name=user.name,
        email=user.email,
        verified=user.verified,
        created_at=user.created_at.replace(tzinfo=timezone.utc),
    )


# ============================================================================
# User Repository
# ============================================================================


def get_user(session: DbSession, user_id: str) -> UserEntity | None:
    """Get user by ID."""
    user = session.query(User).filter(User.id == user_id).first()
    return _user_to_entity(user) if user else None


def create_user(session: DbSession, entity: UserEntity) -> UserEntity:
    """Create a new user."""
    user = User(
        id=entity.id,
        name=entity.name,
        email=entity.email,
        verified=entity.verified,
        created_at=_to_db_time(entity.created_at),
    )
    session.add(user)
    return entity


def count_users(session: DbSession, query: CountQuery) -> int:
    """Count users matching a CountQuery.

    Both date bounds are inclusive; absent bounds are unbounded.
    """
    q = session.query(func.count(User.id))
    if query.start_date is not None:
        q = q.filter(User.created_at >= _to_db_time(query.start_date))
    if query.end_date is not None:
        q = q.filter(User.created_at <= _to_db_time(query.end_date))
    if query.verified is not None:
        q = q.filter(User.verified.is_(query.verified))
    return q.scalar() or 0


def list_users(
    session: DbSession,
    *,
    page: int,
    limit: int,
    sort_key: str = "createdAt",
    direction: Literal["asc", "desc"] = "desc",
    filter_text: str | None = None,
) -> tuple[list[UserEntity], int]:
    """Get one page of users and the total matching the filter.

    Args:
        session: Database session.
        page: 1-based page number.
        limit: Page size.
        sort_key: Wire name of the sort column (see SORTABLE_FIELDS).
        direction: "asc" or "desc".
        filter_text: Case-insensitive substring matched on name or email.

    Returns:
        Tuple of (users on the page, total matching users).

    Raises:
        ValueError: If sort_key is not sortable or page/limit are not positive.
    """
    if sort_key not in SORTABLE_FIELDS:
        raise ValueError(f"Unsupported sort key: {sort_key}")
    if page < 1 or limit < 1:
        raise ValueError(f"page and limit must be positive, got page={page} limit={limit}")

    q = session.query(User)
    if filter_text:
        pattern = f"%{filter_text.lower()}%"
        q = q.filter(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))

    total = q.count()

    column = SORTABLE_FIELDS[sort_key]
    ordering = column.asc() if direction == "asc" else column.desc()
    # Tie-break on id so pages never overlap
    users = q.order_by(ordering, User.id.asc()).offset((page - 1) * limit).limit(limit).all()

    return [_user_to_entity(u) for u in users], total
