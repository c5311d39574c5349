"""Tests for registry value rendering and parsing rules."""

from __future__ import annotations

import pytest

from varsave.domain.enums import VarType
from varsave.domain.errors import ValueConversionError
from varsave.domain.values import parse_value, value_to_string


class TestValueToString:
    def test_text_is_verbatim(self) -> None:
        assert value_to_string(VarType.STR, "hello world=1") == "hello world=1"

    def test_integer_renders_decimal(self) -> None:
        assert value_to_string(VarType.UINT16, 80) == "80"
        assert value_to_string(VarType.INT32, -12) == "-12"

    def test_float_renders_six_places(self) -> None:
        assert value_to_string(VarType.FLOAT, 1.5) == "1.500000"
        assert value_to_string(VarType.FLOAT, 2) == "2.000000"

    def test_uint64_upper_bound(self) -> None:
        assert value_to_string(VarType.UINT64, 2**64 - 1) == "18446744073709551615"

    @pytest.mark.parametrize(
        ("var_type", "value"),
        [
            (VarType.UINT16, 65536),
            (VarType.UINT16, -1),
            (VarType.INT16, 40000),
            (VarType.UINT32, 2**32),
        ],
    )
    def test_out_of_range_raises(self, var_type: VarType, value: int) -> None:
        with pytest.raises(ValueConversionError, match="out of range"):
            value_to_string(var_type, value)

    def test_bool_is_not_an_integer(self) -> None:
        with pytest.raises(ValueConversionError, match="expected integer"):
            value_to_string(VarType.INT32, True)

    def test_mistyped_text_value_raises(self) -> None:
        with pytest.raises(ValueConversionError, match="expected text"):
            value_to_string(VarType.STR, 42)

    def test_blob_has_no_text_form(self) -> None:
        with pytest.raises(ValueConversionError, match="no text representation"):
            value_to_string(VarType.BLOB, b"\x00\x01")


class TestParseValue:
    def test_parses_decimal_and_hex(self) -> None:
        assert parse_value(VarType.UINT16, "80") == 80
        assert parse_value(VarType.UINT16, "0x10") == 16

    def test_parses_float(self) -> None:
        assert parse_value(VarType.FLOAT, "1.500000") == 1.5

    def test_text_kept_as_is(self) -> None:
        assert parse_value(VarType.STR, " padded ") == " padded "

    def test_invalid_integer_raises(self) -> None:
        with pytest.raises(ValueConversionError, match="invalid uint16 literal"):
            parse_value(VarType.UINT16, "loud")

    def test_range_checked_after_parse(self) -> None:
        with pytest.raises(ValueConversionError, match="out of range"):
            parse_value(VarType.INT16, "99999")

    def test_blob_cannot_be_parsed(self) -> None:
        with pytest.raises(ValueConversionError):
            parse_value(VarType.BLOB, "00")
