"""Trend and growth metrics.

Every function takes the entry store and ``today`` explicitly.  "Expenses"
always means needs plus lifestyle spending; money moved into savings
categories is not counted as spending.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Sequence

from .aggregation import category_spending, monthly_data, months_ago, recent_monthly_data
from .categories import ALL_CATEGORIES
from .formatting import round_half_up
from .storage import EntryStore

RISING = 'rising'
FALLING = 'falling'
IMPROVING = 'improving'
DECLINING = 'declining'
STABLE = 'stable'


@dataclass(frozen=True)
class CategoryGrowth:
    category: str
    current_amount: float
    previous_amount: float
    growth_percent: int


@dataclass(frozen=True)
class AnalyticsMetrics:
    total_income: float
    total_expenses: float
    savings_amount: float
    savings_rate: int
    expense_growth: int
    monthly_burn_rate: int
    six_month_average: int
    category_growth: List[CategoryGrowth] = field(default_factory=list)


# ============ CORE METRICS ============

def savings_rate(income: float, expenses: float) -> int:
    """Share of income left after expenses, as a rounded percentage (0 without income).

    Example:
        >>> savings_rate(1000, 0)
        100
        >>> savings_rate(0, 500)
        0
    """
    if income <= 0:
        return 0
    return round_half_up((income - expenses) / income * 100)


def expense_growth(current_expenses: float, previous_expenses: float) -> int:
    """Month-over-month expense change in percent.

    A month with spending after a month without any counts as 100% growth.
    """
    if previous_expenses == 0:
        return 100 if current_expenses > 0 else 0
    return round_half_up((current_expenses - previous_expenses) / previous_expenses * 100)


def monthly_burn_rate(expenses: float, days_in_month: int, days_passed: int) -> int:
    """Project month-to-date spending onto the whole month."""
    if days_passed == 0:
        return 0
    return round_half_up(expenses / days_passed * days_in_month)


def growth_percent(current: float, previous: float) -> int:
    if previous > 0:
        return round_half_up((current - previous) / previous * 100)
    if current > 0:
        return 100
    return 0


# ============ CATEGORY GROWTH ============

def category_growth(store: EntryStore, today: date) -> List[CategoryGrowth]:
    """Per-category change between the previous and the current month.

    Categories with no spending in either month are left out.
    """
    current = months_ago(today, 0)
    previous = months_ago(today, 1)

    result = []
    for category in ALL_CATEGORIES:
        current_amount = category_spending(store, category, *current)
        previous_amount = category_spending(store, category, *previous)
        if current_amount == 0 and previous_amount == 0:
            continue
        result.append(CategoryGrowth(
            category=category,
            current_amount=current_amount,
            previous_amount=previous_amount,
            growth_percent=growth_percent(current_amount, previous_amount),
        ))
    return result


# ============ MOVING AVERAGE ============

def six_month_average(store: EntryStore, today: date) -> int:
    """Average monthly expenses over the last six months, ignoring months without spending."""
    expenses = [
        data.total_expenses
        for data in recent_monthly_data(store, today, 6)
        if data.total_expenses > 0
    ]
    if not expenses:
        return 0
    return round_half_up(sum(expenses) / len(expenses))


# ============ TREND ANALYSIS ============

def _majority_direction(values: Sequence[float], up: str, down: str) -> str:
    """Classify a newest-first series by majority vote over adjacent pairs.

    ``up`` wins when at least ``ceil(len / 2)`` pairs have the newer value
    strictly above the older one; ``down`` is the mirror case.
    """
    if len(values) < 2:
        return STABLE
    up_count = 0
    down_count = 0
    for newer, older in zip(values, values[1:]):
        if newer > older:
            up_count += 1
        elif newer < older:
            down_count += 1

    needed = math.ceil(len(values) / 2)
    if up_count >= needed:
        return up
    if down_count >= needed:
        return down
    return STABLE


def expense_trend(store: EntryStore, today: date, months: int = 3) -> str:
    """``rising``, ``falling`` or ``stable`` over the last ``months`` months (current included)."""
    expenses = [data.total_expenses for data in recent_monthly_data(store, today, months)]
    return _majority_direction(expenses, RISING, FALLING)


def savings_trend(store: EntryStore, today: date, months: int = 3) -> str:
    """``improving``, ``declining`` or ``stable`` savings rate over the last ``months`` months."""
    rates = [
        savings_rate(data.total_income, data.total_expenses)
        for data in recent_monthly_data(store, today, months)
    ]
    return _majority_direction(rates, IMPROVING, DECLINING)


# ============ WANTS VS NEEDS RATIO ============

def wants_ratio(store: EntryStore, today: date) -> int:
    """Lifestyle share of the current month's expenses, in percent."""
    data = monthly_data(store, *months_ago(today, 0))
    if data.total_expenses == 0:
        return 0
    return round_half_up(data.total_lifestyle / data.total_expenses * 100)


# ============ MAIN ANALYTICS FUNCTION ============

def analytics_metrics(store: EntryStore, today: date) -> AnalyticsMetrics:
    """All current-month metrics in one pass over the store."""
    current = monthly_data(store, *months_ago(today, 0))
    previous = monthly_data(store, *months_ago(today, 1))

    total_expenses = current.total_expenses
    days_in_month = calendar.monthrange(today.year, today.month)[1]

    return AnalyticsMetrics(
        total_income=current.total_income,
        total_expenses=total_expenses,
        savings_amount=current.total_income - total_expenses,
        savings_rate=savings_rate(current.total_income, total_expenses),
        expense_growth=expense_growth(total_expenses, previous.total_expenses),
        monthly_burn_rate=monthly_burn_rate(total_expenses, days_in_month, today.day),
        six_month_average=six_month_average(store, today),
        category_growth=category_growth(store, today),
    )
