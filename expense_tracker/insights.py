"""Rule-based financial insights and the daily tip."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from .analytics import (
    DECLINING,
    FALLING,
    IMPROVING,
    RISING,
    analytics_metrics,
    expense_trend,
    savings_trend,
    wants_ratio,
)
from .budget import GREEN, RED, all_budget_statuses, total_budget_summary
from .state_storage import BudgetStore
from .storage import EntryStore

WARNING = 'warning'
NEUTRAL = 'neutral'
POSITIVE = 'positive'

TYPE_ORDER = {WARNING: 0, NEUTRAL: 1, POSITIVE: 2}
MAX_INSIGHTS = 5

DAILY_TIPS = [
    "Track every expense, no matter how small.",
    "Review your spending weekly to stay on track.",
    "The 50/30/20 rule: 50% needs, 30% wants, 20% savings.",
    "Set up automatic savings to pay yourself first.",
    "Wait 24 hours before making impulse purchases.",
    "Pack lunch to save money on eating out.",
    "Review subscriptions monthly - cancel unused ones.",
    "Build an emergency fund covering 3-6 months expenses.",
    "Compare prices before big purchases.",
    "Small daily savings add up to big annual savings.",
]


@dataclass(frozen=True)
class Insight:
    type: str
    icon: str
    message: str


# ============ INSIGHT RULES ============

def low_savings_insight(rate: int) -> Optional[Insight]:
    if rate < 0:
        return Insight(WARNING, '🚨', f"You're spending more than you earn! Currently at {abs(rate)}% in the red.")
    if rate < 10:
        return Insight(WARNING, '⚠️', f"Your savings rate is very low at {rate}%. Try to save at least 20% of income.")
    if rate < 20:
        return Insight(NEUTRAL, '💡', f"Savings rate of {rate}% is decent. Push for 20%+ for better financial health.")
    return None


def high_savings_insight(rate: int) -> Optional[Insight]:
    if rate >= 40:
        return Insight(POSITIVE, '🌟', f"Excellent! You're saving {rate}% of your income. Keep it up!")
    if rate >= 30:
        return Insight(POSITIVE, '💪', f"Great savings rate of {rate}%! You're building a solid financial foundation.")
    if rate >= 20:
        return Insight(POSITIVE, '✅', f"Good job maintaining a healthy {rate}% savings rate.")
    return None


def wants_insight(ratio: int) -> Optional[Insight]:
    if ratio > 50:
        return Insight(WARNING, '🛍️', f"{ratio}% of spending is on wants. Consider reducing discretionary expenses.")
    if ratio > 40:
        return Insight(NEUTRAL, '💭', f"{ratio}% going to wants. Review if all purchases align with your goals.")
    if 0 < ratio <= 30:
        return Insight(POSITIVE, '🎯', f"Only {ratio}% on wants - you're prioritizing needs effectively!")
    return None


def expense_trend_insight(trend: str) -> Optional[Insight]:
    if trend == RISING:
        return Insight(WARNING, '📈', "Expenses have been rising for 3 months. Review your spending patterns.")
    if trend == FALLING:
        return Insight(POSITIVE, '📉', "Great work! Your expenses have been decreasing consistently.")
    return None


def savings_trend_insight(trend: str) -> Optional[Insight]:
    if trend == IMPROVING:
        return Insight(POSITIVE, '🚀', "Your savings rate has been improving! Keep the momentum going.")
    if trend == DECLINING:
        return Insight(WARNING, '📊', "Savings rate declining over recent months. Time to reassess spending.")
    return None


def budget_insight(budgets: BudgetStore, entries: EntryStore, today: date) -> Optional[Insight]:
    summary = total_budget_summary(budgets, entries, today)
    if summary.total_budget == 0:
        return Insight(NEUTRAL, '📋', "Set up category budgets to get better control over your spending!")

    over = sum(1 for s in all_budget_statuses(budgets, entries, today) if s.status == RED)
    if over > 0:
        subject = 'categories are' if over > 1 else 'category is'
        return Insight(WARNING, '🔴', f"{over} {subject} over budget. Review your spending!")
    if summary.overall_status == GREEN:
        return Insight(POSITIVE, '🎉', "All categories within budget! You're managing your money well.")
    return None


def growth_insight(growth: int) -> Optional[Insight]:
    if growth > 30:
        return Insight(WARNING, '⚡', f"Expenses jumped {growth}% from last month. Was there an unusual expense?")
    if growth < -20:
        return Insight(POSITIVE, '💰', f"Spending down {abs(growth)}% from last month. Great discipline!")
    return None


# ============ MAIN INSIGHT GENERATOR ============

def generate_insights(entries: EntryStore, budgets: BudgetStore, today: date) -> List[Insight]:
    """Up to five insights, warnings first, then neutral notes, then positives."""
    metrics = analytics_metrics(entries, today)
    candidates = [
        low_savings_insight(metrics.savings_rate),
        high_savings_insight(metrics.savings_rate),
        wants_insight(wants_ratio(entries, today)),
        expense_trend_insight(expense_trend(entries, today, 3)),
        savings_trend_insight(savings_trend(entries, today, 3)),
        budget_insight(budgets, entries, today),
        growth_insight(metrics.expense_growth),
    ]
    insights = [insight for insight in candidates if insight is not None]
    insights.sort(key=lambda insight: TYPE_ORDER[insight.type])
    return insights[:MAX_INSIGHTS]


def daily_tip(today: date) -> Insight:
    """Tip of the day, rotating through the tip list by day of the year."""
    day_of_year = today.timetuple().tm_yday
    return Insight(NEUTRAL, '💡', DAILY_TIPS[day_of_year % len(DAILY_TIPS)])
