"""Server-driven paginated table consumer.

Fetches one page of rows from a TableContract's endpoint and re-fetches
whenever the sort, page, page size or filter changes.

State machine:
    idle -> fetching -> displaying <-> fetching
                     -> error -> fetching (any event or retry)
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Literal

from pydantic import ValidationError

from userdash.client.users_api import UsersApiClient, UsersApiError
from userdash.models.types import RowsPage
from userdash.table.contract import SortOrder, SortSpec, TableContract

logger = logging.getLogger(__name__)

TableState = Literal["idle", "fetching", "displaying", "error"]


class ServerTable:
    """Pagination and sort state for one TableContract.

    Rows from a failed fetch are not applied; the previous rows stay
    available so the table can keep showing them next to the error.
    Responses to superseded requests are ignored.
    """

    def __init__(self, contract: TableContract, client: UsersApiClient, page_size: int = 10):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.contract = contract
        self.client = client
        self.page = 1
        self.page_size = page_size
        self.sort: SortSpec = contract.default_sort
        self.filter_text = ""
        self.state: TableState = "idle"
        self.rows: list[dict[str, Any]] = []
        self.total = 0
        self.error: str | None = None
        self._request_seq = 0

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    def query_params(self) -> dict[str, str]:
        params = {
            "page": str(self.page),
            "limit": str(self.page_size),
            "sort": json.dumps(self.sort.to_mapping()),
        }
        if self.filter_text:
            params["filter"] = self.filter_text
        return params

    async def load(self) -> None:
        """Fetch the current page."""
        self._request_seq += 1
        seq = self._request_seq
        self.state = "fetching"

        try:
            payload = await self.client.fetch_json(self.contract.endpoint, self.query_params())
            page = RowsPage.model_validate(payload)
        except (UsersApiError, ValidationError) as e:
            if seq != self._request_seq:
                return
            logger.warning(f"Table fetch from {self.contract.endpoint} failed: {e}")
            self.state = "error"
            self.error = str(e)
            return

        if seq != self._request_seq:
            logger.debug(f"Dropping stale table response #{seq}")
            return

        self.rows = page.data
        self.total = page.total
        self.error = None
        self.state = "displaying"

    async def retry(self) -> None:
        await self.load()

    async def sort_by(self, key: str) -> None:
        """Sort on a column; repeating the active key flips the direction.

        Raises:
            ValueError: If the column does not exist or is not sortable.
        """
        if key == self.sort.key:
            sort = SortSpec(key=key, order=self.sort.order.flipped())
        else:
            sort = SortSpec(key=key, order=SortOrder.ASC)
        self.contract.validate_sort(sort)

        self.sort = sort
        self.page = 1
        await self.load()

    async def go_to_page(self, page: int) -> None:
        """Raises ValueError for pages outside 1..page_count."""
        if page < 1 or page > self.page_count:
            raise ValueError(f"Page {page} out of range 1..{self.page_count}")
        self.page = page
        await self.load()

    async def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self.page = 1
        await self.load()

    async def set_filter(self, text: str) -> None:
        self.filter_text = text.strip()
        self.page = 1
        await self.load()

    def rendered_rows(self) -> list[list[str]]:
        return [self.contract.render_row(row) for row in self.rows]
