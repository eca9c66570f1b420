"""User statistics aggregation.

Computes the registered, new and verified user metrics from the count
endpoint and publishes them to a StatsBoard.

Fetch graph:
    registered ─> verified ─┐
                            ├─> settle (all three loading flags drop together)
    new ────────────────────┘

The change arithmetic and description text are pure functions so they
can be tested without a client.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Awaitable, Callable, TypeVar

from userdash.client.users_api import UsersApiClient
from userdash.models.domain import CountQuery
from userdash.stats.board import StatsBoard, StatsSnapshot
from userdash.stats.dates import month_bounds, month_name, shift_months, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RegisteredUsers:
    """Total users and the change versus the last month's signups."""

    total: int
    last_month: int
    change: float


# ============================================================================
# Pure computations
# ============================================================================


def registered_change(total: int, last_month: int) -> float:
    """Percent change of total users relative to last month's signups.

    There is no zero-guard: a zero denominator gives the IEEE result
    (inf for a positive total, nan for 0/0) instead of raising.
    """
    if last_month == 0:
        if total == 0:
            return math.nan
        return math.copysign(math.inf, total)
    return (total - last_month) / last_month * 100


def verified_change(total: int, verified: int) -> float:
    """Percent of users that are verified; 0 when there are no users."""
    if total == 0:
        return 0.0
    not_verified = total - verified
    return (total - not_verified) / total * 100


def format_percent(change: float) -> str:
    """Absolute change to one decimal, with non-finite values spelled out.

    Ties on the exact binary value round up (0.25 -> "0.3").
    """
    magnitude = abs(change)
    if math.isnan(magnitude):
        return "NaN"
    if math.isinf(magnitude):
        return "Infinity"
    return str(Decimal(magnitude).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def describe_registered(change: float) -> str:
    # nan and 0 both fall through to "less"
    trend = "more" if change > 0 else "less"
    return f"{format_percent(change)}% {trend} than last month"


def describe_new(first_day: datetime, last_day: datetime) -> str:
    return (
        f"{month_name(first_day.month)} {first_day.day} - "
        f"{month_name(last_day.month)} {last_day.day}"
    )


def describe_verified(change: float) -> str:
    return f"{format_percent(change)}% of the users are verified"


# ============================================================================
# Aggregator
# ============================================================================


class StatsAggregator:
    """Runs the statistics fetch graph for one page instance.

    Each metric routine stages its own view; ``run`` joins them and
    settles the board exactly once. A failing routine only fails its own
    view (and verified, which needs the registered total).
    """

    def __init__(
        self,
        client: UsersApiClient,
        board: StatsBoard | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.client = client
        self.board = board or StatsBoard()
        self.clock = clock

    async def registered_users(self, now: datetime) -> RegisteredUsers:
        """Total users vs. signups in the last month."""
        total, last_month = await asyncio.gather(
            self.client.count(CountQuery()),
            self.client.count(CountQuery(start_date=shift_months(now, -1), end_date=now)),
        )
        change = registered_change(total, last_month)

        self.board.stage("registered", str(total), describe_registered(change))
        return RegisteredUsers(total=total, last_month=last_month, change=change)

    async def new_users(self, now: datetime) -> None:
        """Signups from the first day of the current month until now."""
        first_day, last_day = month_bounds(now)
        count = await self.client.count(CountQuery(start_date=first_day, end_date=now))

        self.board.stage("new", str(count), describe_new(first_day, last_day))

    async def verified_users(self, registered: RegisteredUsers) -> None:
        """Verified users as a share of the registered total."""
        verified = await self.client.count(CountQuery(verified=True))
        change = verified_change(registered.total, verified)

        self.board.stage("verified", str(verified), describe_verified(change))

    async def run(self, now: datetime | None = None) -> StatsSnapshot:
        """Compute all three metrics and settle the board.

        Args:
            now: Reference time for the date windows. Defaults to the clock.

        Returns:
            The settled snapshot.
        """
        now = now or self.clock()
        failures: dict[str, str] = {}

        async def capture(name: str, step: Awaitable[T]) -> T | None:
            try:
                return await step
            except Exception as e:
                logger.warning(f"Metric {name} failed: {e}")
                failures[name] = str(e) or type(e).__name__
                return None

        async def registered_then_verified() -> None:
            registered = await capture("registered", self.registered_users(now))
            if registered is None:
                logger.warning("Metric verified skipped: registered users unavailable")
                failures["verified"] = "registered users unavailable"
                return
            await capture("verified", self.verified_users(registered))

        logger.info(f"Computing user stats at {now.isoformat()}")
        await asyncio.gather(registered_then_verified(), capture("new", self.new_users(now)))

        self.board.settle(failures)
        snapshot = self.board.snapshot
        logger.info(f"User stats settled (page_ready={snapshot.page_ready})")
        return snapshot
