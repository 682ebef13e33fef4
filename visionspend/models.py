"""
Value types shared across the ingestion pipeline.

Transactions are frozen: edits produce a new value with the same id via
dataclasses.replace, and collections of them are held as tuples.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

UNCATEGORIZED = "Uncategorized"
UNKNOWN_DESCRIPTION = "Unknown Description"

SORT_DIRECTIONS = ('asc', 'desc')

IMPORT_STATUSES = ('ok', 'empty', 'unsupported', 'unreadable')


class UnsupportedFileTypeError(ValueError):
    """Raised when an uploaded file has an extension we cannot import."""


class EditRejected(ValueError):
    """Raised when a user edit would produce an invalid transaction."""


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    description: str
    amount: float  # Negative for expenses, positive for income
    category: str = UNCATEGORIZED

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def is_income(self) -> bool:
        return self.amount >= 0


@dataclass(frozen=True)
class Accepted:
    """Field roles resolved for one row, still as raw strings."""
    date_text: str
    description: str
    amount_text: str
    category: str = ""


@dataclass(frozen=True)
class Rejected:
    reason: str


@dataclass(frozen=True)
class DateRange:
    """Inclusive date bounds; either side may be left open."""
    start: Optional[date] = None
    end: Optional[date] = None

    def contains(self, value: date) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class SortDescriptor:
    column: Optional[str] = 'date'
    direction: str = 'desc'

    def __post_init__(self):
        if self.direction not in SORT_DIRECTIONS:
            raise ValueError(f"Invalid sort direction: {self.direction}. Expected one of: {SORT_DIRECTIONS}")


@dataclass(frozen=True)
class ImportResult:
    """Outcome of importing one file, reported once to the caller."""
    file_name: str
    status: str
    transactions: Tuple[Transaction, ...] = ()
    message: str = ""
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status == 'ok'

    @property
    def count(self) -> int:
        return len(self.transactions)
