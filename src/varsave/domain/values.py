"""Registry value rules — canonical text rendering and parsing of typed values."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from varsave.domain.enums import VarType
from varsave.domain.errors import ValueConversionError

# Inclusive (min, max) bounds per integer type
INTEGER_RANGES: MappingProxyType[VarType, tuple[int, int]] = MappingProxyType(
    {
        VarType.INT16: (-(2**15), 2**15 - 1),
        VarType.UINT16: (0, 2**16 - 1),
        VarType.INT32: (-(2**31), 2**31 - 1),
        VarType.UINT32: (0, 2**32 - 1),
        VarType.INT64: (-(2**63), 2**63 - 1),
        VarType.UINT64: (0, 2**64 - 1),
    }
)


def _check_integer(var_type: VarType, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueConversionError(f"expected integer for {var_type.value}, got {type(value).__name__}")
    low, high = INTEGER_RANGES[var_type]
    if not low <= value <= high:
        raise ValueConversionError(f"value {value} out of range for {var_type.value} [{low}, {high}]")
    return value


def value_to_string(var_type: VarType, value: Any) -> str:
    """Render a typed registry value in its canonical text form.

    Integers render as decimal, floats with six decimal places (``%f``),
    strings verbatim. Blobs have no text form.

    Raises ValueConversionError if the value cannot be rendered.
    """
    if var_type is VarType.STR:
        if not isinstance(value, str):
            raise ValueConversionError(f"expected text for str, got {type(value).__name__}")
        return value

    if var_type in INTEGER_RANGES:
        return str(_check_integer(var_type, value))

    if var_type is VarType.FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueConversionError(f"expected number for float, got {type(value).__name__}")
        return "%f" % value

    raise ValueConversionError(f"{var_type.value} values have no text representation")


def parse_value(var_type: VarType, text: str) -> Any:
    """Parse text into a value of the given type (inverse of value_to_string).

    Raises ValueConversionError if the text is not valid for the type.
    """
    if var_type is VarType.STR:
        return text

    if var_type in INTEGER_RANGES:
        try:
            number = int(text.strip(), 0)
        except ValueError as exc:
            raise ValueConversionError(f"invalid {var_type.value} literal: {text!r}") from exc
        return _check_integer(var_type, number)

    if var_type is VarType.FLOAT:
        try:
            return float(text.strip())
        except ValueError as exc:
            raise ValueConversionError(f"invalid float literal: {text!r}") from exc

    raise ValueConversionError(f"{var_type.value} values cannot be parsed from text")


def check_value(var_type: VarType, value: Any) -> Any:
    """Validate that a native value fits the variable type. Returns the value unchanged."""
    value_to_string(var_type, value)
    return value
