"""Declarative schema for server-paginated, sortable tables.

A TableContract names the endpoint rows come from, the columns in
display order (each with an optional pure formatter), and the sort used
before the user picks one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from userdash.models.types import ColumnPayload, TableContractPayload


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> SortOrder:
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


@dataclass(frozen=True)
class FormatArgs:
    """Argument bundle passed to a column formatter."""

    value: Any


Formatter = Callable[[FormatArgs], str]


@dataclass(frozen=True)
class ColumnSpec:
    """One table column.

    Attributes:
        key: Field name in each row record; unique per table.
        display_name: Header label.
        sortable: Whether the user may sort on this column.
        formatter: Pure function mapping FormatArgs to display text.
            None means the raw value is shown as-is.
    """

    key: str
    display_name: str
    sortable: bool = False
    formatter: Formatter | None = None


@dataclass(frozen=True)
class SortSpec:
    """At most one active sort key and its direction."""

    key: str
    order: SortOrder = SortOrder.DESC

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, SortOrder | str]) -> SortSpec:
        """Build from a ``{key: order}`` mapping with exactly one entry.

        Raises:
            ValueError: If the mapping has zero or several keys, or an unknown order.
        """
        if len(mapping) != 1:
            raise ValueError(f"Exactly one sort key is allowed, got {list(mapping)}")
        ((key, order),) = mapping.items()
        return cls(key=key, order=SortOrder(order))

    def to_mapping(self) -> dict[str, str]:
        return {self.key: self.order.value}


def display_value(value: Any) -> str:
    """Identity display used when a column has no formatter."""
    if value is None:
        return ""
    return str(value)


class TableContract:
    """Endpoint, ordered columns and default sort for one table.

    Raises:
        ValueError: On construction, if a column is keyed under a name other
            than its own key, or the default sort targets a missing or
            unsortable column.
    """

    def __init__(
        self,
        endpoint: str,
        columns: Mapping[str, ColumnSpec],
        default_sort: SortSpec,
    ):
        for key, column in columns.items():
            if column.key != key:
                raise ValueError(f"Column keyed as {key!r} declares key {column.key!r}")
        if not columns:
            raise ValueError("A table needs at least one column")

        self.endpoint = endpoint
        self.columns: dict[str, ColumnSpec] = dict(columns)
        self.default_sort = default_sort
        self.validate_sort(default_sort)

    def validate_sort(self, sort: SortSpec) -> None:
        column = self.columns.get(sort.key)
        if column is None:
            raise ValueError(f"Unknown sort column: {sort.key}")
        if not column.sortable:
            raise ValueError(f"Column {sort.key} is not sortable")

    def headers(self) -> list[str]:
        return [column.display_name for column in self.columns.values()]

    def render_cell(self, key: str, row: Mapping[str, Any]) -> str:
        """Display text for one cell.

        A key missing from the row is formatted as None.
        """
        column = self.columns[key]
        raw = row.get(key)
        if column.formatter is not None:
            return column.formatter(FormatArgs(value=raw))
        return display_value(raw)

    def render_row(self, row: Mapping[str, Any]) -> list[str]:
        return [self.render_cell(key, row) for key in self.columns]

    def to_payload(self) -> TableContractPayload:
        return TableContractPayload(
            endpoint=self.endpoint,
            columns=[
                ColumnPayload(
                    key=column.key,
                    display_name=column.display_name,
                    sortable=column.sortable,
                    formatted=column.formatter is not None,
                )
                for column in self.columns.values()
            ],
            default_sort=self.default_sort.to_mapping(),
        )
