"""Category-wise monthly budgets.

Budget rows are kept per ``(category, month, year)`` and never deleted when
a month ends.  The first budget read after the calendar month changes
copies the amounts of the last tracked month into the new month.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from .aggregation import category_spending, current_month, months_ago
from .categories import ALL_CATEGORIES, is_known_category
from .models import Budget, BudgetValidationError
from .state_storage import BudgetStore
from .storage import EntryStore

logger = logging.getLogger(__name__)

GREEN = 'green'
YELLOW = 'yellow'
RED = 'red'

RED_THRESHOLD = 90
YELLOW_THRESHOLD = 70


@dataclass(frozen=True)
class CategoryBudgetStatus:
    category: str
    budget_amount: float
    spent_amount: float
    remaining_amount: float
    percentage: float
    status: str


@dataclass(frozen=True)
class BudgetSummary:
    total_budget: float = 0.0
    total_spent: float = 0.0
    total_remaining: float = 0.0
    overall_percentage: float = 0.0
    overall_status: str = GREEN


def status_for_percentage(percentage: float) -> str:
    """Map budget usage to a traffic-light tier.

    Example:
        >>> status_for_percentage(89.9)
        'yellow'
        >>> status_for_percentage(90)
        'red'
    """
    if percentage >= RED_THRESHOLD:
        return RED
    if percentage >= YELLOW_THRESHOLD:
        return YELLOW
    return GREEN


# ============ ROLLOVER ============

def rollover_budgets(budgets: BudgetStore, today: date) -> int:
    """Carry the last tracked month's budgets into the current month.

    Runs at most once per month change: afterwards the marker points at the
    current month.  Old rows are kept for history.

    Returns:
        Number of budget rows created
    """
    last = budgets.last_budget_month()
    if last is None:
        return 0

    year, month = current_month(today)
    if last == (month, year):
        return 0

    last_month, last_year = last
    carried = [
        Budget(category=b.category, amount=b.amount, month=month, year=year)
        for b in budgets.for_month(last_month, last_year)
    ]
    added = budgets.extend(carried)
    budgets.set_last_budget_month(month, year)
    logger.info(
        "Carried %d budget(s) from %d-%02d to %d-%02d",
        added, last_year, last_month + 1, year, month + 1,
    )
    return added


# ============ STORAGE FUNCTIONS ============

def get_budgets(budgets: BudgetStore, today: date) -> List[Budget]:
    """All budget rows, after applying any pending month rollover."""
    rollover_budgets(budgets, today)
    return budgets.list()


def set_budget(budgets: BudgetStore, category: str, amount: float, today: date) -> Budget:
    """Set the current month's budget for a category.

    Raises:
        BudgetValidationError: If the category is unknown or the amount is
            not positive
    """
    if not is_known_category(category):
        raise BudgetValidationError(f"Unknown category: {category}")
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not amount > 0:
        raise BudgetValidationError("Budget amount must be a positive number")

    rollover_budgets(budgets, today)
    year, month = current_month(today)
    budget = budgets.set(category, amount, month, year)
    budgets.set_last_budget_month(month, year)
    return budget


def get_budget_for_category(
    budgets: BudgetStore,
    category: str,
    today: date,
    period: Optional[Tuple[int, int]] = None,
) -> float:
    """Budget amount for a category (0 when none is set).

    Args:
        budgets: Budget store
        category: Leaf category
        today: Current date
        period: Optional ``(year, month)``; defaults to the current month
    """
    rollover_budgets(budgets, today)
    year, month = period or current_month(today)
    budget = budgets.find(category, month, year)
    return budget.amount if budget else 0.0


def remove_budget(budgets: BudgetStore, category: str, today: date) -> bool:
    """Drop the current month's budget for a category; history is untouched."""
    rollover_budgets(budgets, today)
    year, month = current_month(today)
    return budgets.remove(category, month, year)


# ============ BUDGET STATUS CALCULATIONS ============

def budget_status(
    budgets: BudgetStore,
    entries: EntryStore,
    category: str,
    today: date,
    period: Optional[Tuple[int, int]] = None,
) -> Optional[CategoryBudgetStatus]:
    """Spending against the budget of one category, or ``None`` without a budget."""
    year, month = period or current_month(today)
    budget_amount = get_budget_for_category(budgets, category, today, (year, month))
    if budget_amount == 0:
        return None

    spent = category_spending(entries, category, year, month)
    percentage = spent / budget_amount * 100
    return CategoryBudgetStatus(
        category=category,
        budget_amount=budget_amount,
        spent_amount=spent,
        remaining_amount=budget_amount - spent,
        percentage=percentage,
        status=status_for_percentage(percentage),
    )


def all_budget_statuses(
    budgets: BudgetStore,
    entries: EntryStore,
    today: date,
    period: Optional[Tuple[int, int]] = None,
) -> List[CategoryBudgetStatus]:
    """Status rows for every category that has a budget in the period."""
    statuses = []
    for category in ALL_CATEGORIES:
        status = budget_status(budgets, entries, category, today, period)
        if status is not None:
            statuses.append(status)
    return statuses


def total_budget_summary(
    budgets: BudgetStore,
    entries: EntryStore,
    today: date,
    period: Optional[Tuple[int, int]] = None,
) -> BudgetSummary:
    """Budget and spending summed over all budgeted categories."""
    statuses = all_budget_statuses(budgets, entries, today, period)
    if not statuses:
        return BudgetSummary()

    total_budget = sum(s.budget_amount for s in statuses)
    total_spent = sum(s.spent_amount for s in statuses)
    overall_percentage = total_spent / total_budget * 100 if total_budget > 0 else 0.0
    return BudgetSummary(
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=total_budget - total_spent,
        overall_percentage=overall_percentage,
        overall_status=status_for_percentage(overall_percentage),
    )


def consecutive_green_months(
    budgets: BudgetStore,
    entries: EntryStore,
    today: date,
    limit: int = 3,
) -> int:
    """Count completed months, newest first, that had budgets and stayed green.

    Counting stops at the first month without budgets or with a yellow or
    red overall status, or after ``limit`` months.
    """
    count = 0
    for offset in range(1, limit + 1):
        period = months_ago(today, offset)
        summary = total_budget_summary(budgets, entries, today, period)
        if summary.total_budget == 0 or summary.overall_status != GREEN:
            break
        count += 1
    return count
