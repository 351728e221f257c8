"""Value types for dmm."""
from __future__ import annotations
from enum import Enum
from typing import Any


class DmmType(Enum):
    INTEGER = "Integer"
    TEXT = "Text"
    BOOLEAN = "Boolean"
    NONE = "None"


TRUE_GLYPH = ":)"
FALSE_GLYPH = ":("
NONE_GLYPH = "-"


class DmmValue:
    """Wraps a Python value with its dmm type.

    Two values are equal when they have the same type and the same payload;
    values of different types are never equal (``1`` is not ``:)``).
    """

    __slots__ = ("value", "type")

    def __init__(self, value: Any, dmm_type: DmmType):
        self.value = value
        self.type = dmm_type

    def __repr__(self):
        return f"DmmValue({self.type.value}: {self.value!r})"

    def __str__(self):
        if self.type == DmmType.NONE:
            return NONE_GLYPH
        if self.type == DmmType.BOOLEAN:
            return TRUE_GLYPH if self.value else FALSE_GLYPH
        return str(self.value)

    def __eq__(self, other):
        if not isinstance(other, DmmValue):
            return NotImplemented
        return self.type == other.type and self.value == other.value

    def __hash__(self):
        return hash((self.type, self.value))


# ============================================================
# Constructors
# ============================================================

def dmm_integer(value: int) -> DmmValue:
    return DmmValue(int(value), DmmType.INTEGER)

def dmm_text(value: str) -> DmmValue:
    return DmmValue(value, DmmType.TEXT)

def dmm_bool(value: bool) -> DmmValue:
    return DmmValue(bool(value), DmmType.BOOLEAN)

def dmm_none() -> DmmValue:
    return DmmValue(None, DmmType.NONE)


# ============================================================
# Helpers
# ============================================================

def type_name(value: DmmValue) -> str:
    return value.type.value

def is_integer(value: DmmValue) -> bool:
    return value.type == DmmType.INTEGER

def is_boolean(value: DmmValue) -> bool:
    return value.type == DmmType.BOOLEAN

def orderable(left: DmmValue, right: DmmValue) -> bool:
    """Ordering is only defined between values of the same type."""
    return left.type == right.type

def less_than(left: DmmValue, right: DmmValue) -> bool:
    if left.type == DmmType.NONE:
        return False
    return left.value < right.value

def greater_than(left: DmmValue, right: DmmValue) -> bool:
    if left.type == DmmType.NONE:
        return False
    return left.value > right.value

def truncating_divide(dividend: int, divisor: int) -> int:
    """Integer division rounding toward zero (-7 / 2 == -3)."""
    quotient = abs(dividend) // abs(divisor)
    if (dividend < 0) != (divisor < 0):
        return -quotient
    return quotient

def source_text(value: DmmValue) -> str:
    """How the value is written in a program (or typed as an answer)."""
    if value.type == DmmType.TEXT:
        return f"<{value.value}>"
    return str(value)
