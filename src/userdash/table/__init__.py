"""Server-paginated table contract and its consumer.

Re-exports the schema types pages declare tables with.
"""

from userdash.table.contract import (
    ColumnSpec,
    FormatArgs,
    SortOrder,
    SortSpec,
    TableContract,
)

__all__ = [
    "ColumnSpec",
    "FormatArgs",
    "SortOrder",
    "SortSpec",
    "TableContract",
]
