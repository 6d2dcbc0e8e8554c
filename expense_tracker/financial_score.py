"""0-100 financial health score.

Four sub-scores are combined with fixed weights:

* savings (40%): savings rate of the current month
* budget (30%): overall budget usage of the current month
* stability (20%): month-over-month expense growth
* consistency (10%): how many of the last six months were tracked
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, List

from .aggregation import recent_monthly_data
from .analytics import analytics_metrics
from .budget import total_budget_summary
from .formatting import round_half_up
from .state_storage import BudgetStore
from .storage import EntryStore

WEIGHTS = {
    'savings': 0.40,
    'budget': 0.30,
    'stability': 0.20,
    'consistency': 0.10,
}

EXCELLENT = 'Excellent'
GOOD = 'Good'
AVERAGE = 'Average'
POOR = 'Poor'

CONSISTENCY_MONTHS = 6

# (upper bound on usage %, score), checked in order
BUDGET_STEPS = [(70, 100), (85, 80), (100, 60), (120, 30)]
# (upper bound on |growth| %, score), checked in order
STABILITY_STEPS = [(5, 100), (10, 85), (20, 70), (30, 50), (50, 30)]

STRONG_THRESHOLD = 70
WEAK_THRESHOLD = 50

AREA_NAMES = [
    ('savings_score', 'savings'),
    ('budget_score', 'budget control'),
    ('stability_score', 'expense stability'),
    ('consistency_score', 'tracking consistency'),
]


@dataclass(frozen=True)
class ScoreBreakdown:
    savings_score: int
    budget_score: int
    stability_score: int
    consistency_score: int

    def as_dict(self) -> Dict[str, int]:
        return {
            'savings_score': self.savings_score,
            'budget_score': self.budget_score,
            'stability_score': self.stability_score,
            'consistency_score': self.consistency_score,
        }


@dataclass(frozen=True)
class FinancialScore:
    score: int
    rating: str
    explanation: str
    breakdown: ScoreBreakdown


# ============ SUB-SCORES ============

def savings_score(rate: float) -> int:
    """Linear ramp from 0 at a 0% savings rate to 100 at 30% or more."""
    if rate <= 0:
        return 0
    if rate >= 30:
        return 100
    return round_half_up(rate / 30 * 100)


def budget_score(total_budget: float, usage_percent: float) -> int:
    """Step score on overall budget usage; 50 when no budgets are set."""
    if total_budget == 0:
        return 50
    for limit, score in BUDGET_STEPS:
        if usage_percent <= limit:
            return score
    return 0


def stability_score(growth: float) -> int:
    """Step score on the absolute month-over-month expense growth."""
    growth_abs = abs(growth)
    for limit, score in STABILITY_STEPS:
        if growth_abs <= limit:
            return score
    return 10


def consistency_score(store: EntryStore, today: date) -> int:
    """Share of the last six months (current included) with any activity."""
    months = recent_monthly_data(store, today, CONSISTENCY_MONTHS)
    tracked = sum(1 for data in months if data.has_activity)
    return round_half_up(tracked / CONSISTENCY_MONTHS * 100)


# ============ RATING & EXPLANATION ============

def get_rating(score: float) -> str:
    if score >= 80:
        return EXCELLENT
    if score >= 60:
        return GOOD
    if score >= 40:
        return AVERAGE
    return POOR


def _areas(breakdown: ScoreBreakdown):
    strong: List[str] = []
    weak: List[str] = []
    values = breakdown.as_dict()
    for key, name in AREA_NAMES:
        if values[key] >= STRONG_THRESHOLD:
            strong.append(name)
        elif values[key] < WEAK_THRESHOLD:
            weak.append(name)
    return strong, weak


def generate_explanation(score: int, breakdown: ScoreBreakdown) -> str:
    """One or two sentences describing the score bracket and the areas behind it."""
    strong, weak = _areas(breakdown)

    if score >= 80:
        detail = f"Especially strong in {' and '.join(strong)}." if strong else ''
        return f"Outstanding financial discipline! {detail}".strip()
    if score >= 60:
        detail = f"Focus on improving {' and '.join(weak)} for a better score." if weak else ''
        return f"Good financial habits. {detail}".strip()
    if score >= 40:
        if weak:
            detail = f"Work on {' and '.join(weak)} to boost your score."
        else:
            detail = 'Track your finances more consistently.'
        return f"Room for improvement. {detail}"
    return 'Time to take control! Start by tracking all expenses and setting up budgets.'


# ============ MAIN SCORE FUNCTION ============

def financial_score(entries: EntryStore, budgets: BudgetStore, today: date) -> FinancialScore:
    """Compute the weighted score, its rating and a short explanation.

    Args:
        entries: Entry store
        budgets: Budget store (a pending month rollover is applied)
        today: Current date

    Returns:
        FinancialScore with the per-area breakdown
    """
    metrics = analytics_metrics(entries, today)
    summary = total_budget_summary(budgets, entries, today)

    breakdown = ScoreBreakdown(
        savings_score=savings_score(metrics.savings_rate),
        budget_score=budget_score(summary.total_budget, summary.overall_percentage),
        stability_score=stability_score(metrics.expense_growth),
        consistency_score=consistency_score(entries, today),
    )
    total = round_half_up(
        breakdown.savings_score * WEIGHTS['savings']
        + breakdown.budget_score * WEIGHTS['budget']
        + breakdown.stability_score * WEIGHTS['stability']
        + breakdown.consistency_score * WEIGHTS['consistency']
    )
    return FinancialScore(
        score=total,
        rating=get_rating(total),
        explanation=generate_explanation(total, breakdown),
        breakdown=breakdown,
    )
