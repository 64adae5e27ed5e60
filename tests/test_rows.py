"""Tests for decoding row payloads."""

import pytest

from gameshop_tables.errors import ConversionError, RowDecodeError
from gameshop_tables.rows import decode_row, decode_rows, load_rows
from gameshop_tables.values import ColumnValue


class TestDecodeRow:
    """Tests for decode_row."""

    def test_decode(self):
        """Test each field is typed independently."""
        row = decode_row({"id": 1, "name": "Azul", "price": 39.5, "in_stock": True, "note": None})

        assert row == {
            "id": ColumnValue.float_(1.0),
            "name": ColumnValue.str_("Azul"),
            "price": ColumnValue.float_(39.5),
            "in_stock": ColumnValue.bool_(True),
            "note": None,
        }

    def test_empty_object(self):
        """Test an object without fields is an empty row."""
        assert decode_row({}) == {}

    def test_not_an_object(self):
        """Test non-object rows are decode errors."""
        with pytest.raises(RowDecodeError, match="Expected a row object"):
            decode_row([1, 2])

    def test_nested_value(self):
        """Test nested values fail naming the column."""
        with pytest.raises(ConversionError) as exc_info:
            decode_row({"id": 1, "tags": ["a"]})
        assert exc_info.value.column == "tags"
        assert "tags" in str(exc_info.value)


class TestDecodeRows:
    """Tests for decode_rows and load_rows."""

    def test_array(self):
        """Test an array response yields one row per object."""
        rows = decode_rows([{"id": 1}, {"id": 2}])
        assert rows == [{"id": ColumnValue.float_(1.0)}, {"id": ColumnValue.float_(2.0)}]

    def test_single(self):
        """Test a by-id response is a single object."""
        rows = decode_rows({"id": 3}, single=True)
        assert rows == [{"id": ColumnValue.float_(3.0)}]

    def test_single_expected_object(self):
        """Test a by-id response that is an array is rejected."""
        with pytest.raises(RowDecodeError):
            decode_rows([{"id": 3}], single=True)

    def test_array_expected(self):
        """Test a list response that is an object is rejected."""
        with pytest.raises(RowDecodeError, match="Expected an array"):
            decode_rows({"id": 3})

    def test_array_of_non_objects(self):
        """Test array items must be objects."""
        with pytest.raises(RowDecodeError):
            decode_rows([{"id": 1}, 2])

    def test_load_rows(self):
        """Test parsing JSON text."""
        rows = load_rows('[{"name": "Catan", "players": null}]')
        assert rows == [{"name": ColumnValue.str_("Catan"), "players": None}]

    def test_load_rows_invalid_json(self):
        """Test invalid JSON is a decode error."""
        with pytest.raises(RowDecodeError, match="Invalid JSON"):
            load_rows("[{")
