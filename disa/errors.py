"""
Errors raised by DISA.

Every error is terminal for a run: nothing here is retried. Messages carry
the column name / group key needed to find the problem in the data.
"""

from __future__ import annotations
from typing import Iterable, Optional, Sequence


class DisaError(Exception):
    """Base class for all DISA errors."""


class SchemaError(DisaError, KeyError):
    """A requested column is not present in the dataset."""

    def __init__(self, missing: Sequence[str], available: Iterable[str] = (),
                 reason: Optional[str] = None) -> None:
        self.missing = list(missing)
        self.available = list(available)
        if reason:
            msg = f"Column(s) {', '.join(self.missing)}: {reason}"
        else:
            msg = f"Missing column(s): {', '.join(self.missing)}. Available={self.available}"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class SchemaMismatchError(DisaError, ValueError):
    """Fragments passed to combine() do not share one schema."""


class LoadError(DisaError, OSError):
    """The dataset could not be read or lacks a required column."""


class RowLimitError(LoadError):
    """The dataset has more rows than the configured ceiling."""


class AllNullGroupError(DisaError, ValueError):
    """A group has no observed value to take a median from (strict mode only)."""

    def __init__(self, column: str, groups: Sequence[object]) -> None:
        self.column = column
        self.groups = list(groups)
        shown = ", ".join(str(g) for g in self.groups[:10])
        more = f" (+{len(self.groups) - 10} more)" if len(self.groups) > 10 else ""
        super().__init__(f"Column {column!r} is all null in group(s): {shown}{more}")
