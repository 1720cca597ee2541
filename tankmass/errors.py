#!/usr/bin/env python3
from typing import Optional


class RangeError(ValueError):
    """An input field is outside its supported range."""

    def __init__(self, field: str, value: float, low: float, high: float):
        self.field = field
        self.value = value
        self.low = low
        self.high = high
        super().__init__(
            f"{field.replace('_', ' ').capitalize()} {value} out of supported range [{low}, {high}]."
        )


class TableLookupError(LookupError):
    """An exact-match entry is absent from its reference table."""

    def __init__(self, table: str, value: float, hint: Optional[str] = None):
        self.table = table
        self.value = value
        msg = f"{value} not found in {table} table."
        if hint:
            msg += f" {hint}"
        super().__init__(msg)


class TableDataError(ValueError):
    """Reference table data is malformed (empty, ragged, unsorted...)."""
