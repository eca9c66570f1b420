"""Admin users page.

Three user statistics plus the server-paginated users table.
The page owns the lifecycle: ``mount`` starts the stats pipeline once,
``unmount`` cancels it and discards anything that arrives later.
"""

from __future__ import annotations

import asyncio
import logging

from userdash.client.users_api import UsersApiClient
from userdash.config import Settings
from userdash.models.domain import MetricView
from userdash.models.types import DashboardPayload, MetricViewPayload, StatsPayload
from userdash.stats.aggregator import StatsAggregator
from userdash.stats.board import StatsBoard, StatsSnapshot
from userdash.stats.dates import format_date
from userdash.table.contract import ColumnSpec, FormatArgs, SortOrder, SortSpec, TableContract
from userdash.table.server_table import ServerTable

logger = logging.getLogger(__name__)


def format_verified(args: FormatArgs) -> str:
    return "true" if args.value else "false"


def format_created_at(args: FormatArgs) -> str:
    if args.value is None:
        return ""
    return format_date(args.value)


def users_table_contract(endpoint: str) -> TableContract:
    """Columns and default sort of the admin users table."""
    columns = {
        "name": ColumnSpec(key="name", display_name="Name", sortable=True),
        "email": ColumnSpec(key="email", display_name="Email", sortable=True),
        "verified": ColumnSpec(key="verified", display_name="Verified", formatter=format_verified),
        "createdAt": ColumnSpec(
            key="createdAt",
            display_name="Created At",
            sortable=True,
            formatter=format_created_at,
        ),
    }
    return TableContract(
        endpoint=endpoint,
        columns=columns,
        default_sort=SortSpec(key="createdAt", order=SortOrder.DESC),
    )


def _view_payload(view: MetricView) -> MetricViewPayload:
    return MetricViewPayload(
        state=view.state,
        loading=view.loading,
        value=view.value,
        description=view.description,
        error=view.error,
    )


class UsersAdminPage:
    """One mounted instance of the admin users page."""

    def __init__(self, client: UsersApiClient, settings: Settings | None = None):
        settings = settings or Settings()
        self.client = client
        self.board = StatsBoard()
        self.aggregator = StatsAggregator(client, self.board)
        self.contract = users_table_contract(client.users_endpoint)
        self.table = ServerTable(self.contract, client, page_size=settings.page_size)
        self._task: asyncio.Task[StatsSnapshot] | None = None

    @property
    def stats(self) -> StatsSnapshot:
        return self.board.snapshot

    @property
    def mounted(self) -> bool:
        return self._task is not None and not self.board.closed

    def mount(self) -> asyncio.Task[StatsSnapshot]:
        """Start the stats pipeline; calling again returns the same task.

        Raises:
            RuntimeError: If the page was already unmounted.
        """
        if self.board.closed:
            raise RuntimeError("Page was unmounted")
        if self._task is None:
            logger.info("Mounting admin users page")
            self._task = asyncio.create_task(self.aggregator.run())
        return self._task

    async def wait_ready(self) -> StatsSnapshot:
        """Mount if needed and wait for the stats to settle."""
        return await self.mount()

    async def unmount(self) -> None:
        """Stop the pipeline and ignore any result still in flight.

        Cancelling the caller while it waits here still propagates.
        """
        self.board.close()
        task = self._task
        if task is not None and not task.done():
            logger.info("Unmounting admin users page with stats in flight")
            task.cancel()
            # wait() does not re-raise the pipeline's own cancellation
            await asyncio.wait([task])

    def to_payload(self) -> DashboardPayload:
        snapshot = self.board.snapshot
        return DashboardPayload(
            stats=StatsPayload(
                registered=_view_payload(snapshot.registered),
                new=_view_payload(snapshot.new),
                verified=_view_payload(snapshot.verified),
            ),
            page_ready=snapshot.page_ready,
            table=self.contract.to_payload(),
        )
