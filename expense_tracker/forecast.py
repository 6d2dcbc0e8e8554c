"""Forecasts from recent monthly history.

Predictions use a linearly recency-weighted average of past months; the
current (partial) month is never part of the history window.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Sequence

import numpy as np

from .aggregation import monthly_data, recent_monthly_data
from .formatting import round_half_up
from .models import MonthlyData
from .storage import EntryStore

logger = logging.getLogger(__name__)

HIGH = 'high'
MEDIUM = 'medium'
LOW = 'low'

UP = 'up'
DOWN = 'down'
STABLE = 'stable'

# Share of the reference month's expenses an average change must exceed
DIRECTION_THRESHOLD = 0.05


@dataclass(frozen=True)
class Forecast:
    predicted_expenses: int = 0
    predicted_savings: int = 0
    predicted_income: int = 0
    confidence: str = LOW
    based_on_months: int = 0


@dataclass(frozen=True)
class YearEndProjection:
    projected_yearly_income: float
    projected_yearly_expenses: float
    projected_yearly_savings: float
    months_remaining: int


@dataclass(frozen=True)
class NextMonthChange:
    expense_change: int
    direction: str
    percent_change: int


def weighted_average(values: Sequence[float]) -> int:
    """Recency-weighted mean; index 0 is the most recent value.

    Weights run from ``len(values)`` for the newest value down to 1.

    Example:
        >>> weighted_average([200, 100])
        167
    """
    if len(values) == 0:
        return 0
    weights = np.arange(len(values), 0, -1, dtype=float)
    return round_half_up(float(np.average(np.asarray(values, dtype=float), weights=weights)))


def forecast_confidence(values: Sequence[float]) -> str:
    """Confidence from the number of months and the spread of expenses.

    Fewer than 2 months is ``low`` and fewer than 4 ``medium``; otherwise the
    coefficient of variation of the non-zero values decides.
    """
    if len(values) < 2:
        return LOW
    if len(values) < 4:
        return MEDIUM

    valid = np.asarray([v for v in values if v > 0], dtype=float)
    if len(valid) < 2:
        return LOW
    mean = float(valid.mean())
    if mean == 0:
        return LOW

    cv = float(valid.std()) / mean
    if cv < 0.2:
        return HIGH
    if cv < 0.4:
        return MEDIUM
    return LOW


def historical_data(store: EntryStore, today: date, months: int) -> List[MonthlyData]:
    """Totals for the ``months`` months before the current one, newest first."""
    return recent_monthly_data(store, today, months, skip=1)


def generate_forecast(store: EntryStore, today: date, months_to_analyze: int = 6) -> Forecast:
    """Predict next month's income, expenses and savings."""
    valid = [
        data for data in historical_data(store, today, months_to_analyze)
        if data.total_income > 0 or data.total_expenses > 0
    ]
    if not valid:
        return Forecast()

    incomes = [data.total_income for data in valid]
    expenses = [data.total_expenses for data in valid]

    predicted_income = weighted_average(incomes)
    predicted_expenses = weighted_average(expenses)
    confidence = forecast_confidence(expenses)
    logger.debug(
        "Forecast from %d month(s): income=%d expenses=%d confidence=%s",
        len(valid), predicted_income, predicted_expenses, confidence,
    )
    return Forecast(
        predicted_expenses=predicted_expenses,
        predicted_savings=predicted_income - predicted_expenses,
        predicted_income=predicted_income,
        confidence=confidence,
        based_on_months=len(valid),
    )


def year_end_projection(store: EntryStore, today: date) -> YearEndProjection:
    """Actual totals of this year so far plus forecasts for the remaining months."""
    current_index = today.month - 1
    months_remaining = 12 - current_index - 1
    forecast = generate_forecast(store, today, 6)

    actual_income = 0.0
    actual_expenses = 0.0
    for month in range(current_index + 1):
        data = monthly_data(store, today.year, month)
        actual_income += data.total_income
        actual_expenses += data.total_expenses

    projected_income = actual_income + forecast.predicted_income * months_remaining
    projected_expenses = actual_expenses + forecast.predicted_expenses * months_remaining
    return YearEndProjection(
        projected_yearly_income=projected_income,
        projected_yearly_expenses=projected_expenses,
        projected_yearly_savings=projected_income - projected_expenses,
        months_remaining=months_remaining,
    )


def predict_next_month_change(store: EntryStore, today: date) -> NextMonthChange:
    """Direction of spending from the average change over the last three months."""
    history = historical_data(store, today, 3)
    if len(history) < 2:
        return NextMonthChange(expense_change=0, direction=STABLE, percent_change=0)

    changes = [
        newer.total_expenses - older.total_expenses
        for newer, older in zip(history, history[1:])
    ]
    average_change = sum(changes) / len(changes)
    reference = history[0].total_expenses
    percent_change = round_half_up(average_change / reference * 100) if reference > 0 else 0

    if average_change > reference * DIRECTION_THRESHOLD:
        direction = UP
    elif average_change < -reference * DIRECTION_THRESHOLD:
        direction = DOWN
    else:
        direction = STABLE
    return NextMonthChange(
        expense_change=round_half_up(average_change),
        direction=direction,
        percent_change=percent_change,
    )
