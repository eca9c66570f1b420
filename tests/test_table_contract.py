"""Tests for the table contract and the users table columns."""

import pytest

from userdash.pages.users import users_table_contract
from userdash.table import ColumnSpec, FormatArgs, SortOrder, SortSpec, TableContract

ENDPOINT = "http://users.test/api/v1/users"

ROW = {
    "id": "u1",
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "verified": False,
    "createdAt": "2024-01-01T00:00:00Z",
}


class TestUsersTableContract:
    """The admin users table declaration."""

    def test_column_order(self):
        """Insertion order defines display order."""
        contract = users_table_contract(ENDPOINT)
        assert list(contract.columns) == ["name", "email", "verified", "createdAt"]
        assert contract.headers() == ["Name", "Email", "Verified", "Created At"]

    def test_sortable_columns(self):
        """Verified is the only unsortable column."""
        contract = users_table_contract(ENDPOINT)
        sortable = [key for key, column in contract.columns.items() if column.sortable]
        assert sortable == ["name", "email", "createdAt"]

    def test_default_sort(self):
        """Default sort is createdAt descending."""
        contract = users_table_contract(ENDPOINT)
        assert contract.default_sort == SortSpec(key="createdAt", order=SortOrder.DESC)
        assert contract.default_sort.to_mapping() == {"createdAt": "desc"}

    def test_renders_formatted_row(self):
        """Booleans and ISO dates never show raw."""
        contract = users_table_contract(ENDPOINT)
        cells = contract.render_row(ROW)
        assert cells == ["Ada Lovelace", "ada@example.com", "false", "Jan 01, 2024"]

    def test_renders_verified_true(self):
        """True maps to "true"."""
        contract = users_table_contract(ENDPOINT)
        assert contract.render_cell("verified", dict(ROW, verified=True)) == "true"

    def test_missing_key_formats_none(self):
        """A row without a column key is formatted as None."""
        contract = users_table_contract(ENDPOINT)
        row = {k: v for k, v in ROW.items() if k not in ("verified", "email")}
        assert contract.render_row(row) == ["Ada Lovelace", "", "false", "Jan 01, 2024"]

    def test_payload(self):
        """Payload lists columns with camelCase keys and the default sort."""
        payload = users_table_contract(ENDPOINT).to_payload().model_dump(by_alias=True)
        assert payload["endpoint"] == ENDPOINT
        assert payload["defaultSort"] == {"createdAt": "desc"}
        assert payload["columns"][2] == {
            "key": "verified",
            "displayName": "Verified",
            "sortable": False,
            "formatted": True,
        }


class TestTableContractValidation:
    """Construction-time checks."""

    def test_column_key_must_match(self):
        """Mapping key and ColumnSpec.key must agree."""
        with pytest.raises(ValueError):
            TableContract(
                ENDPOINT,
                {"name": ColumnSpec(key="email", display_name="Email", sortable=True)},
                SortSpec(key="email"),
            )

    def test_default_sort_on_unknown_column(self):
        """The default sort must target a declared column."""
        with pytest.raises(ValueError):
            TableContract(
                ENDPOINT,
                {"name": ColumnSpec(key="name", display_name="Name", sortable=True)},
                SortSpec(key="createdAt"),
            )

    def test_default_sort_on_unsortable_column(self):
        """The default sort must target a sortable column."""
        with pytest.raises(ValueError):
            TableContract(
                ENDPOINT,
                {"name": ColumnSpec(key="name", display_name="Name")},
                SortSpec(key="name"),
            )

    def test_identity_display(self):
        """Columns without a formatter show the raw value as text."""
        contract = TableContract(
            ENDPOINT,
            {"age": ColumnSpec(key="age", display_name="Age", sortable=True)},
            SortSpec(key="age", order=SortOrder.ASC),
        )
        assert contract.render_cell("age", {"age": 42}) == "42"
        assert contract.render_cell("age", {}) == ""

    def test_formatter_receives_format_args(self):
        """Formatters are called with FormatArgs(value=raw)."""
        received = []

        def formatter(args):
            received.append(args)
            return "x"

        contract = TableContract(
            ENDPOINT,
            {"n": ColumnSpec(key="n", display_name="N", sortable=True, formatter=formatter)},
            SortSpec(key="n"),
        )
        contract.render_cell("n", {"n": 3})
        assert received == [FormatArgs(value=3)]


class TestSortSpec:
    """At most one active sort key."""

    def test_from_mapping(self):
        """A single-entry mapping parses."""
        assert SortSpec.from_mapping({"name": "asc"}) == SortSpec("name", SortOrder.ASC)

    def test_from_mapping_rejects_several_keys(self):
        """Two keys are not allowed."""
        with pytest.raises(ValueError):
            SortSpec.from_mapping({"name": "asc", "email": "desc"})

    def test_from_mapping_rejects_bad_order(self):
        """Unknown directions are rejected."""
        with pytest.raises(ValueError):
            SortSpec.from_mapping({"name": "sideways"})

    def test_flipped(self):
        """Directions toggle."""
        assert SortOrder.ASC.flipped() is SortOrder.DESC
        assert SortOrder.DESC.flipped() is SortOrder.ASC
