"""Domain models for userdash.

Pure Python dataclasses representing domain entities.
These models are independent of SQLAlchemy and httpx so that the
stats pipeline and the table contract can be tested without either.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal


# ============================================================================
# Users
# ============================================================================


@dataclass
class UserEntity:
    """Domain model for a registered user."""

    id: str
    name: str
    email: str
    verified: bool
    created_at: datetime

    def to_row(self) -> dict:
        """Row shape served to the users table (camelCase keys)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "verified": self.verified,
            "createdAt": to_iso(self.created_at),
        }


# ============================================================================
# Count queries
# ============================================================================


def to_iso(moment: datetime) -> str:
    """Serialize a datetime as ISO-8601 UTC with a trailing Z.

    Naive datetimes are taken to already be in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class CountQuery:
    """Parameterized user count request.

    Every field is optional. An absent bound means the range is open
    on that side; an absent ``verified`` means no verification filter.
    """

    start_date: datetime | None = None
    end_date: datetime | None = None
    verified: bool | None = None

    def to_params(self) -> dict[str, str]:
        """Query-string parameters, omitting absent fields."""
        params: dict[str, str] = {}
        if self.start_date is not None:
            params["startDate"] = to_iso(self.start_date)
        if self.end_date is not None:
            params["endDate"] = to_iso(self.end_date)
        if self.verified is not None:
            params["verified"] = "true" if self.verified else "false"
        return params


# ============================================================================
# Metric views
# ============================================================================

MetricState = Literal["loading", "ready", "failed"]


@dataclass(frozen=True)
class MetricView:
    """Published state of one dashboard statistic.

    While ``loading`` is true, ``value`` and ``description`` may already be
    staged but are not final. Instances are immutable; every change
    replaces the whole view so readers never see a half-written one.
    """

    state: MetricState = "loading"
    value: str | None = None
    description: str | None = None
    error: str | None = None

    @property
    def loading(self) -> bool:
        return self.state == "loading"

    @property
    def staged(self) -> bool:
        return self.value is not None
