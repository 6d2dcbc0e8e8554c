"""Daily-entry streaks and achievements.

The streak only moves for entries dated today or yesterday; backdated
entries are recorded normally but never extend or break it.  Achievements
unlock once and stay unlocked.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List

from .aggregation import monthly_data
from .analytics import savings_rate
from .budget import consecutive_green_months
from .models import Achievement, StreakData
from .state_storage import BudgetStore, StateStore
from .storage import EntryStore

logger = logging.getLogger(__name__)

FIRST_ENTRY = 'first_entry'
WEEK_WARRIOR = 'week_warrior'
MONTH_MASTER = 'month_master'
CONSISTENT_TRACKER = 'consistent_tracker'
SAVER = 'saver'
BUDGET_MASTER = 'budget_master'

ACHIEVEMENTS = [
    Achievement(FIRST_ENTRY, 'Getting Started', 'Add your first entry', 'Sparkles'),
    Achievement(WEEK_WARRIOR, 'Week Warrior', 'Maintain a 7-day streak', 'Flame'),
    Achievement(MONTH_MASTER, 'Month Master', 'Maintain a 30-day streak', 'Trophy'),
    Achievement(CONSISTENT_TRACKER, 'Consistent Tracker', 'Track for 90 consecutive days', 'Target'),
    Achievement(SAVER, 'Smart Saver', 'Save 20% or more in a month', 'PiggyBank'),
    Achievement(BUDGET_MASTER, 'Budget Master', 'Stay under budget for 3 months', 'Award'),
]
ACHIEVEMENT_IDS = [a.id for a in ACHIEVEMENTS]

STREAK_MILESTONES = [
    (7, WEEK_WARRIOR),
    (30, MONTH_MASTER),
    (90, CONSISTENT_TRACKER),
]

SAVER_RATE = 20
BUDGET_MASTER_MONTHS = 3


# ========== STREAKS ==========

def update_streak(state: StateStore, entry_date: date, today: date) -> StreakData:
    """Apply a newly recorded entry to the streak.

    Args:
        state: State store holding the streak
        entry_date: Date of the recorded entry
        today: Current date

    Returns:
        The streak after the update (unchanged for older entries)
    """
    streak = state.get_streak()
    yesterday = today - timedelta(days=1)
    if entry_date not in (today, yesterday):
        return streak

    last = streak.last_entry_date
    if last is None or last == yesterday:
        streak.current_streak += 1
    elif last != today:
        streak.current_streak = 1

    if last != today:
        streak.total_days_with_entries += 1
    streak.last_entry_date = today
    streak.longest_streak = max(streak.longest_streak, streak.current_streak)
    state.save_streak(streak)
    logger.debug("Streak now %d (longest %d)", streak.current_streak, streak.longest_streak)
    return streak


def validate_streak(state: StateStore, today: date) -> StreakData:
    """Zero the current streak when the last entry day is older than yesterday."""
    streak = state.get_streak()
    last = streak.last_entry_date
    if last in (today, today - timedelta(days=1)):
        return streak
    if streak.current_streak != 0:
        logger.info("Streak of %d day(s) broken; last entry on %s", streak.current_streak, last)
        streak.current_streak = 0
        state.save_streak(streak)
    return streak


# ========== ACHIEVEMENTS ==========

def achievements(state: StateStore) -> List[Achievement]:
    """All achievement definitions with their unlock flag set."""
    unlocked = set(state.unlocked_achievements())
    return [
        Achievement(a.id, a.name, a.description, a.icon, is_unlocked=a.id in unlocked)
        for a in ACHIEVEMENTS
    ]


def unlock_achievement(state: StateStore, achievement_id: str) -> bool:
    """Unlock an achievement.

    Returns:
        True only when the achievement exists and was newly unlocked
    """
    if achievement_id not in ACHIEVEMENT_IDS:
        logger.warning("Ignoring unknown achievement id %r", achievement_id)
        return False
    newly = state.add_unlocked_achievement(achievement_id)
    if newly:
        logger.info("Achievement unlocked: %s", achievement_id)
    return newly


def unlocked_count(state: StateStore) -> int:
    return sum(1 for a in achievements(state) if a.is_unlocked)


def total_achievements() -> int:
    return len(ACHIEVEMENTS)


def check_first_entry(state: StateStore, entries: EntryStore) -> List[str]:
    if len(entries) > 0 and unlock_achievement(state, FIRST_ENTRY):
        return [FIRST_ENTRY]
    return []


def check_streak_achievements(state: StateStore, current_streak: int) -> List[str]:
    unlocked = []
    for days, achievement_id in STREAK_MILESTONES:
        if current_streak >= days and unlock_achievement(state, achievement_id):
            unlocked.append(achievement_id)
    return unlocked


def check_saver(state: StateStore, entries: EntryStore, year: int, month: int) -> List[str]:
    """Unlock Smart Saver when the given month saves at least 20% of its income."""
    data = monthly_data(entries, year, month)
    if data.total_income <= 0:
        return []
    if savings_rate(data.total_income, data.total_expenses) >= SAVER_RATE and unlock_achievement(state, SAVER):
        return [SAVER]
    return []


def check_budget_master(state: StateStore, budgets: BudgetStore, entries: EntryStore, today: date) -> List[str]:
    """Unlock Budget Master after three completed months in a row within budget."""
    streak = consecutive_green_months(budgets, entries, today, BUDGET_MASTER_MONTHS)
    if streak >= BUDGET_MASTER_MONTHS and unlock_achievement(state, BUDGET_MASTER):
        return [BUDGET_MASTER]
    return []
