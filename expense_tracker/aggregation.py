"""Monthly aggregation of entries.

Turns the flat entry log into per-month totals, per-group totals and
per-category breakdowns.  Months are addressed as ``(year, month)`` with a
zero-based month index, matching the persisted budget rows.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Tuple

import pandas as pd

from .categories import CATEGORY_TO_GROUP, GROUPS, LIFESTYLE, NEEDS, SAVINGS, category_label
from .formatting import round_half_up
from .models import EXPENSE, INCOME, Entry, MonthlyData
from .storage import EntryStore

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = ['id', 'amount', 'type', 'category', 'category_group', 'date', 'note', 'created_at']


@dataclass(frozen=True)
class CategoryShare:
    """One slice of the monthly expense breakdown."""
    category: str
    name: str
    group: str
    value: float
    percentage: int


@dataclass(frozen=True)
class TrendPoint:
    date: date
    needs: float
    lifestyle: float
    savings: float
    total: float


@dataclass(frozen=True)
class MonthComparison:
    label: str
    year: int
    month: int
    income: float
    needs: float
    lifestyle: float
    savings: float


# ---------------------------------------------------------------------------
# Month arithmetic
# ---------------------------------------------------------------------------

def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move ``delta`` months from ``(year, month)``; returns ``(year, month)``.

    Example:
        >>> shift_month(2024, 0, -1)
        (2023, 11)
    """
    return divmod(year * 12 + month + delta, 12)


def current_month(today: date) -> Tuple[int, int]:
    return today.year, today.month - 1


def months_ago(today: date, count: int) -> Tuple[int, int]:
    year, month = current_month(today)
    return shift_month(year, month, -count)


def month_label(month: int) -> str:
    return calendar.month_abbr[month + 1]


# ---------------------------------------------------------------------------
# Frames
# ---------------------------------------------------------------------------

def entries_frame(entries: Iterable[Entry]) -> pd.DataFrame:
    """Build a DataFrame with one row per entry (columns in ``ENTRY_COLUMNS``)."""
    rows = [
        {
            'id': e.id,
            'amount': float(e.amount),
            'type': e.type,
            'category': e.category,
            'category_group': e.category_group,
            'date': e.date,
            'note': e.note,
            'created_at': e.created_at,
        }
        for e in entries
    ]
    return pd.DataFrame(rows, columns=ENTRY_COLUMNS)


def _expense_rows(frame: pd.DataFrame) -> pd.DataFrame:
    return frame[frame['type'] == EXPENSE]


def _income_rows(frame: pd.DataFrame) -> pd.DataFrame:
    return frame[frame['type'] == INCOME]


def _group_totals(frame: pd.DataFrame) -> Dict[str, float]:
    expenses = _expense_rows(frame)
    unrecognized = expenses[~expenses['category_group'].isin(GROUPS)]
    if not unrecognized.empty:
        logger.debug(
            "%d expense entries with unrecognized groups left out of group totals",
            len(unrecognized),
        )
    totals = expenses.groupby('category_group')['amount'].sum()
    return {group: float(totals.get(group, 0.0)) for group in GROUPS}


def summarize_entries(entries: Iterable[Entry]) -> MonthlyData:
    """Compute income, group totals and balance for a set of entries."""
    frame = entries_frame(entries)
    income = float(_income_rows(frame)['amount'].sum())
    groups = _group_totals(frame)
    return MonthlyData(
        total_income=income,
        total_needs=groups[NEEDS],
        total_lifestyle=groups[LIFESTYLE],
        total_savings=groups[SAVINGS],
        balance=income - groups[NEEDS] - groups[LIFESTYLE] - groups[SAVINGS],
    )


# ---------------------------------------------------------------------------
# Monthly queries
# ---------------------------------------------------------------------------

def monthly_data(store: EntryStore, year: int, month: int) -> MonthlyData:
    """Totals for one calendar month; empty months yield all zeros."""
    return summarize_entries(store.list_by_month(year, month))


def category_group_data(store: EntryStore, year: int, month: int) -> Dict[str, float]:
    """Expense totals per group for a month."""
    return _group_totals(entries_frame(store.list_by_month(year, month)))


def live_category_breakdown(store: EntryStore, year: int, month: int) -> List[CategoryShare]:
    """Expense totals per leaf category with their share of the month, largest first."""
    expenses = _expense_rows(entries_frame(store.list_by_month(year, month)))
    if expenses.empty:
        return []
    total = float(expenses['amount'].sum())
    per_category = expenses.groupby('category', sort=False)['amount'].sum()

    shares = [
        CategoryShare(
            category=str(category),
            name=category_label(str(category)),
            group=CATEGORY_TO_GROUP.get(str(category), NEEDS),
            value=float(value),
            percentage=round_half_up(value / total * 100) if total > 0 else 0,
        )
        for category, value in per_category.items()
    ]
    return sorted(shares, key=lambda s: s.value, reverse=True)


def category_spending(store: EntryStore, category: str, year: int, month: int) -> float:
    """Total expense amount recorded for one category in a month."""
    return float(sum(
        e.amount for e in store.list_by_month(year, month)
        if e.type == EXPENSE and e.category == category
    ))


def entries_grouped_by_date(store: EntryStore, year: int, month: int) -> Dict[str, List[Entry]]:
    """Month entries keyed by ``YYYY-MM-DD``, each list in month-listing order."""
    grouped: Dict[str, List[Entry]] = {}
    for entry in store.list_by_month(year, month):
        grouped.setdefault(entry.date.isoformat(), []).append(entry)
    return grouped


def recent_monthly_data(store: EntryStore, today: date, count: int, skip: int = 0) -> List[MonthlyData]:
    """Monthly totals for ``count`` months, newest first.

    Args:
        store: Entry store
        today: Current date
        count: Number of months to return
        skip: Months to skip back from the current month first (1 starts
            with the previous month)
    """
    result = []
    for offset in range(skip, skip + count):
        year, month = months_ago(today, offset)
        result.append(monthly_data(store, year, month))
    return result


def spending_trend(store: EntryStore, today: date, days: int = 7) -> List[TrendPoint]:
    """Daily expense totals per group for the last ``days`` days, oldest first."""
    frame = _expense_rows(entries_frame(store.list()))
    points = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        totals = _group_totals(frame[frame['date'] == day])
        points.append(TrendPoint(
            date=day,
            needs=totals[NEEDS],
            lifestyle=totals[LIFESTYLE],
            savings=totals[SAVINGS],
            total=totals[NEEDS] + totals[LIFESTYLE] + totals[SAVINGS],
        ))
    return points


def monthly_comparison(store: EntryStore, today: date, months: int = 6) -> List[MonthComparison]:
    """Income, group spending and balance for the last ``months`` months, oldest first."""
    result = []
    for offset in range(months - 1, -1, -1):
        year, month = months_ago(today, offset)
        data = monthly_data(store, year, month)
        result.append(MonthComparison(
            label=month_label(month),
            year=year,
            month=month,
            income=data.total_income,
            needs=data.total_needs,
            lifestyle=data.total_lifestyle,
            savings=data.balance,
        ))
    return result
