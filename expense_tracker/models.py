"""Records shared by the stores and the engines.

Persisted records keep their camelCase JSON keys (``categoryGroup``,
``createdAt``, ``lastEntryDate``) so existing data files keep loading.
:func:`entry_from_record` is the single place where legacy shapes are
normalized; everything downstream works with canonical :class:`Entry`
objects.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from numbers import Real
from typing import Any, Dict, Optional

from .categories import (
    CATEGORY_TO_GROUP,
    GROUPS,
    category_group,
    normalize_group,
)

logger = logging.getLogger(__name__)

INCOME = 'income'
EXPENSE = 'expense'
ENTRY_TYPES = (INCOME, EXPENSE)

DATE_FORMAT = '%Y-%m-%d'


class EntryValidationError(ValueError):
    """Raised when an entry write is rejected before touching the store."""


class BudgetValidationError(ValueError):
    """Raised when a budget cannot be set."""


def parse_date(value: Any) -> date:
    """Parse a calendar date from a ``date``, ``datetime`` or ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.strptime(value.strip()[:10], DATE_FORMAT).date()
        except ValueError:
            raise ValueError(f"Invalid date format: {value}. Use YYYY-MM-DD")
    raise ValueError(f"Invalid date: {value!r}")


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(float(value)) and value > 0


@dataclass
class Entry:
    """One income or expense record.

    Attributes:
        id: Stable identifier assigned by the store
        amount: Positive magnitude, currency-agnostic
        type: ``income`` or ``expense``
        category: Leaf category (see :mod:`expense_tracker.categories`)
        category_group: ``needs``/``lifestyle``/``savings``; may hold an
            unrecognized value for legacy rows
        date: Day the entry is attributed to
        note: Optional free text
        created_at: Creation time in epoch milliseconds, for ordering only
    """
    id: str
    amount: float
    type: str
    category: str
    category_group: Optional[str]
    date: date
    note: Optional[str] = None
    created_at: float = 0.0

    @property
    def priority(self) -> Optional[str]:
        """Legacy name of :attr:`category_group`."""
        return self.category_group

    @property
    def is_expense(self) -> bool:
        return self.type == EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type == INCOME

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            'id': self.id,
            'amount': self.amount,
            'type': self.type,
            'category': self.category,
            'categoryGroup': self.category_group,
            'priority': self.category_group,
            'date': self.date.strftime(DATE_FORMAT),
            'createdAt': self.created_at,
        }
        if self.note:
            record['note'] = self.note
        return record


def resolve_entry_group(record: Dict[str, Any]) -> Optional[str]:
    """Resolve the group of a raw record: ``categoryGroup``, then ``priority``, then the category table."""
    for key in ('categoryGroup', 'category_group', 'priority'):
        group = normalize_group(record.get(key))
        if group:
            return group
    return category_group(record.get('category'))


def entry_from_record(record: Dict[str, Any]) -> Entry:
    """Build a canonical :class:`Entry` from a persisted record.

    Raises:
        ValueError: If the record lacks an id, a positive amount, a known
            type or a parseable date
    """
    if not isinstance(record, dict):
        raise ValueError(f"Entry record must be an object, got {type(record).__name__}")
    entry_id = record.get('id')
    if not entry_id:
        raise ValueError("Entry record has no id")
    amount = record.get('amount')
    if isinstance(amount, str):
        try:
            amount = float(amount)
        except ValueError:
            raise ValueError(f"Entry {entry_id}: invalid amount {record.get('amount')!r}")
    if not _is_positive_number(amount):
        raise ValueError(f"Entry {entry_id}: amount must be positive")
    entry_type = str(record.get('type', '')).strip().lower()
    if entry_type not in ENTRY_TYPES:
        raise ValueError(f"Entry {entry_id}: unknown type {record.get('type')!r}")

    group = resolve_entry_group(record)
    if entry_type == EXPENSE and group not in GROUPS:
        logger.warning(
            "Entry %s has unrecognized category group %r; it is excluded from group totals",
            entry_id, group,
        )

    note = record.get('note')
    created_at = record.get('createdAt', record.get('created_at', 0))
    try:
        created_at = float(created_at or 0)
    except (TypeError, ValueError):
        created_at = 0.0

    return Entry(
        id=str(entry_id),
        amount=float(amount),
        type=entry_type,
        category=str(record.get('category') or ''),
        category_group=group,
        date=parse_date(record.get('date')),
        note=str(note) if note else None,
        created_at=created_at,
    )


def validate_entry(entry: Entry, require_known_category: bool = True, check_group: bool = True) -> Entry:
    """Check an entry about to be written and fill in its group.

    Args:
        entry: Candidate entry
        require_known_category: Reject categories outside the fixed table
        check_group: Require the group to match the category; off when an
            edit leaves a stored (possibly legacy) classification untouched

    Returns:
        The entry, with ``category_group`` derived from the category when
        it was missing

    Raises:
        EntryValidationError: If any field is invalid
    """
    if not _is_positive_number(entry.amount):
        raise EntryValidationError("Amount must be a positive number")
    if entry.type not in ENTRY_TYPES:
        raise EntryValidationError(f"Type must be one of {', '.join(ENTRY_TYPES)}")
    if not entry.category:
        raise EntryValidationError("Category is required")
    if require_known_category and entry.category not in CATEGORY_TO_GROUP:
        raise EntryValidationError(f"Unknown category: {entry.category}")
    if not isinstance(entry.date, date):
        raise EntryValidationError("Date is required")

    expected = category_group(entry.category)
    group = normalize_group(entry.category_group) or expected
    if check_group:
        if expected and group != expected:
            raise EntryValidationError(
                f"Category {entry.category} belongs to {expected}, not {group}"
            )
        if entry.type == EXPENSE and group not in GROUPS:
            raise EntryValidationError("Please select a category group")

    note = entry.note.strip() if isinstance(entry.note, str) else None
    return replace(entry, amount=float(entry.amount), category_group=group, note=note or None)


@dataclass
class Budget:
    """Monthly spending cap for one category; ``month`` is zero-based."""
    category: str
    amount: float
    month: int
    year: int

    @property
    def key(self) -> tuple:
        return (self.category, self.month, self.year)

    def to_record(self) -> Dict[str, Any]:
        return {
            'category': self.category,
            'amount': self.amount,
            'month': self.month,
            'year': self.year,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Budget':
        if not isinstance(record, dict):
            raise ValueError("Budget record must be an object")
        month = int(record['month'])
        if not 0 <= month <= 11:
            raise ValueError(f"Budget month out of range: {month}")
        return cls(
            category=str(record['category']),
            amount=float(record['amount']),
            month=month,
            year=int(record['year']),
        )


@dataclass
class StreakData:
    current_streak: int = 0
    longest_streak: int = 0
    last_entry_date: Optional[date] = None
    total_days_with_entries: int = 0

    def to_record(self) -> Dict[str, Any]:
        return {
            'currentStreak': self.current_streak,
            'longestStreak': self.longest_streak,
            'lastEntryDate': self.last_entry_date.strftime(DATE_FORMAT) if self.last_entry_date else '',
            'totalDaysWithEntries': self.total_days_with_entries,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'StreakData':
        if not isinstance(record, dict):
            raise ValueError("Streak record must be an object")
        last = record.get('lastEntryDate') or None
        return cls(
            current_streak=int(record.get('currentStreak', 0) or 0),
            longest_streak=int(record.get('longestStreak', 0) or 0),
            last_entry_date=parse_date(last) if last else None,
            total_days_with_entries=int(record.get('totalDaysWithEntries', 0) or 0),
        )


@dataclass(frozen=True)
class MonthlyData:
    """Totals for one calendar month."""
    total_income: float = 0.0
    total_needs: float = 0.0
    total_lifestyle: float = 0.0
    total_savings: float = 0.0
    balance: float = 0.0

    @property
    def total_wants(self) -> float:
        """Older name of :attr:`total_lifestyle`."""
        return self.total_lifestyle

    @property
    def total_expenses(self) -> float:
        """Spending for the month; savings allocations are not spending."""
        return self.total_needs + self.total_lifestyle

    @property
    def has_activity(self) -> bool:
        return self.total_income > 0 or self.total_needs > 0 or self.total_lifestyle > 0


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    is_unlocked: bool = field(default=False, compare=False)
