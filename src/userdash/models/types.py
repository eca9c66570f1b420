"""Pydantic models for the userdash API.

Wire shapes use camelCase to match the users service contract;
Python attributes stay snake_case via aliases.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class CountResponse(BaseModel):
    """Response of GET /api/v1/users/count."""

    count: int = Field(ge=0)


class UserRow(BaseModel):
    """One row of the users table."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    verified: bool
    created_at: str = Field(alias="createdAt")


class RowsPage(BaseModel):
    """Generic page of rows as consumed by a server-paginated table."""

    data: list[dict[str, Any]]
    total: int = Field(ge=0)


class UsersPage(BaseModel):
    """One page of users plus the unpaginated total."""

    data: list[UserRow]
    total: int


class MetricViewPayload(BaseModel):
    """Serialized MetricView for the admin dashboard."""

    state: Literal["loading", "ready", "failed"]
    loading: bool
    value: str | None
    description: str | None
    error: str | None


class StatsPayload(BaseModel):
    """The three user statistics."""

    registered: MetricViewPayload
    new: MetricViewPayload
    verified: MetricViewPayload


class ColumnPayload(BaseModel):
    """Serialized ColumnSpec (formatters stay server-side)."""

    model_config = ConfigDict(populate_by_name=True)

    key: str
    display_name: str = Field(alias="displayName")
    sortable: bool
    formatted: bool


class TableContractPayload(BaseModel):
    """Serialized table contract."""

    model_config = ConfigDict(populate_by_name=True)

    endpoint: str
    columns: list[ColumnPayload]
    default_sort: dict[str, Literal["asc", "desc"]] = Field(alias="defaultSort")


class DashboardPayload(BaseModel):
    """Full admin users dashboard."""

    model_config = ConfigDict(populate_by_name=True)

    stats: StatsPayload
    page_ready: bool = Field(alias="pageReady")
    table: TableContractPayload
