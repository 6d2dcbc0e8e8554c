"""Application facade over the stores and engines.

:class:`ExpenseTracker` owns one entry store, one budget store and one
state store, reads "today" from an injectable clock and wires the write
paths together (recording an entry also moves the streak and evaluates
achievements).  Every query delegates to the engine modules.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import aggregation, analytics, budget, export, forecast, gamification, insights
from .config import (
    DATA_DIR,
    ENTRIES_FILENAME,
    EXPORT_DIR,
    ambient_theme,
    ensure_data_directories,
)
from .financial_score import FinancialScore, financial_score
from .forecast import Forecast, NextMonthChange, YearEndProjection
from .insights import Insight
from .models import Achievement, Budget, Entry, MonthlyData, StreakData
from .state_storage import BudgetStore, JsonBudgetStore, JsonStateStore, StateStore
from .storage import EntryStore, JsonEntryStore

logger = logging.getLogger(__name__)


class ExpenseTracker:
    """Entries, budgets, streaks and every derived metric behind one object.

    Args:
        entries: Entry store (in-memory when omitted)
        budgets: Budget store (in-memory when omitted)
        state: Streak/achievement/theme store (in-memory when omitted)
        clock: Callable returning the current date
        ambient: Theme used until the user picks one; defaults to the
            ``EXPENSE_TRACKER_THEME`` environment preference
    """

    def __init__(
        self,
        entries: Optional[EntryStore] = None,
        budgets: Optional[BudgetStore] = None,
        state: Optional[StateStore] = None,
        clock: Optional[Callable[[], date]] = None,
        ambient: Optional[str] = None,
        export_dir: Optional[Path] = None,
    ):
        self.entries = entries if entries is not None else EntryStore()
        self.budgets = budgets if budgets is not None else BudgetStore()
        self.state = state if state is not None else StateStore()
        self._clock = clock or date.today
        self._ambient = ambient or ambient_theme()
        self.export_dir = Path(export_dir) if export_dir is not None else EXPORT_DIR
        self.last_unlocked: List[str] = []

    @classmethod
    def from_data_dir(
        cls,
        data_dir: Optional[Path] = None,
        clock: Optional[Callable[[], date]] = None,
    ) -> 'ExpenseTracker':
        """Build a tracker whose stores live as JSON files in ``data_dir``."""
        if data_dir is None:
            data_dir, export_dir = DATA_DIR, EXPORT_DIR
        else:
            data_dir = Path(data_dir)
            export_dir = data_dir / "exports"
        ensure_data_directories(data_dir)
        logger.debug("Opening tracker data in %s", data_dir)
        return cls(
            entries=JsonEntryStore(data_dir / ENTRIES_FILENAME),
            budgets=JsonBudgetStore.in_directory(data_dir),
            state=JsonStateStore(data_dir),
            clock=clock,
            export_dir=export_dir,
        )

    @property
    def today(self) -> date:
        return self._clock()

    def _period(self, year: Optional[int], month: Optional[int]) -> Tuple[int, int]:
        current_year, current_month = aggregation.current_month(self.today)
        return (
            current_year if year is None else year,
            current_month if month is None else month,
        )

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def add_entry(
        self,
        amount: float,
        type: str,
        category: str,
        date: Any,
        note: Optional[str] = None,
        category_group: Optional[str] = None,
    ) -> Entry:
        """Record an entry, then update the streak and achievements.

        Ids of achievements unlocked by this call are left in
        :attr:`last_unlocked`.

        Raises:
            EntryValidationError: If the entry is invalid
        """
        today = self.today
        entry = self.entries.add(amount, type, category, date, note=note, category_group=category_group)

        streak = gamification.update_streak(self.state, entry.date, today)
        unlocked = gamification.check_first_entry(self.state, self.entries)
        unlocked += gamification.check_streak_achievements(self.state, streak.current_streak)
        unlocked += gamification.check_saver(self.state, self.entries, entry.date.year, entry.date.month - 1)
        unlocked += gamification.check_budget_master(self.state, self.budgets, self.entries, today)
        self.last_unlocked = unlocked
        return entry

    def update_entry(self, entry_id: str, **changes: Any) -> Optional[Entry]:
        return self.entries.update(entry_id, **changes)

    def delete_entry(self, entry_id: str) -> bool:
        return self.entries.delete(entry_id)

    def clear_entries(self) -> None:
        """Delete every entry; budgets, streak and achievements are kept."""
        logger.info("Clearing %d entries", len(self.entries))
        self.entries.clear()

    def get_entries(self) -> List[Entry]:
        return self.entries.list()

    def entries_for_month(self, year: Optional[int] = None, month: Optional[int] = None) -> List[Entry]:
        return self.entries.list_by_month(*self._period(year, month))

    def entries_grouped_by_date(self, year: Optional[int] = None, month: Optional[int] = None) -> Dict[str, List[Entry]]:
        return aggregation.entries_grouped_by_date(self.entries, *self._period(year, month))

    # ------------------------------------------------------------------
    # Aggregation and analytics
    # ------------------------------------------------------------------

    def monthly_data(self, year: Optional[int] = None, month: Optional[int] = None) -> MonthlyData:
        return aggregation.monthly_data(self.entries, *self._period(year, month))

    def category_group_data(self, year: Optional[int] = None, month: Optional[int] = None) -> Dict[str, float]:
        return aggregation.category_group_data(self.entries, *self._period(year, month))

    def category_breakdown(self, year: Optional[int] = None, month: Optional[int] = None) -> List[aggregation.CategoryShare]:
        return aggregation.live_category_breakdown(self.entries, *self._period(year, month))

    def spending_trend(self, days: int = 7) -> List[aggregation.TrendPoint]:
        return aggregation.spending_trend(self.entries, self.today, days)

    def monthly_comparison(self, months: int = 6) -> List[aggregation.MonthComparison]:
        return aggregation.monthly_comparison(self.entries, self.today, months)

    def analytics_metrics(self) -> analytics.AnalyticsMetrics:
        return analytics.analytics_metrics(self.entries, self.today)

    def category_growth(self) -> List[analytics.CategoryGrowth]:
        return analytics.category_growth(self.entries, self.today)

    def expense_trend(self, months: int = 3) -> str:
        return analytics.expense_trend(self.entries, self.today, months)

    def savings_trend(self, months: int = 3) -> str:
        return analytics.savings_trend(self.entries, self.today, months)

    def wants_ratio(self) -> int:
        return analytics.wants_ratio(self.entries, self.today)

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def get_budgets(self) -> List[Budget]:
        return budget.get_budgets(self.budgets, self.today)

    def set_budget(self, category: str, amount: float) -> Budget:
        return budget.set_budget(self.budgets, category, amount, self.today)

    def remove_budget(self, category: str) -> bool:
        return budget.remove_budget(self.budgets, category, self.today)

    def budget_for_category(self, category: str) -> float:
        return budget.get_budget_for_category(self.budgets, category, self.today)

    def budget_status(self, category: str) -> Optional[budget.CategoryBudgetStatus]:
        return budget.budget_status(self.budgets, self.entries, category, self.today)

    def budget_statuses(self) -> List[budget.CategoryBudgetStatus]:
        return budget.all_budget_statuses(self.budgets, self.entries, self.today)

    def budget_summary(self) -> budget.BudgetSummary:
        return budget.total_budget_summary(self.budgets, self.entries, self.today)

    # ------------------------------------------------------------------
    # Forecast, score and insights
    # ------------------------------------------------------------------

    def forecast(self, months_to_analyze: int = 6) -> Forecast:
        return forecast.generate_forecast(self.entries, self.today, months_to_analyze)

    def year_end_projection(self) -> YearEndProjection:
        return forecast.year_end_projection(self.entries, self.today)

    def predict_next_month_change(self) -> NextMonthChange:
        return forecast.predict_next_month_change(self.entries, self.today)

    def financial_score(self) -> FinancialScore:
        return financial_score(self.entries, self.budgets, self.today)

    def insights(self) -> List[Insight]:
        return insights.generate_insights(self.entries, self.budgets, self.today)

    def daily_tip(self) -> Insight:
        return insights.daily_tip(self.today)

    # ------------------------------------------------------------------
    # Streaks and achievements
    # ------------------------------------------------------------------

    def streak(self) -> StreakData:
        return self.state.get_streak()

    def on_focus(self) -> StreakData:
        """Run when the host app regains focus; breaks a stale streak."""
        return gamification.validate_streak(self.state, self.today)

    def achievements(self) -> List[Achievement]:
        return gamification.achievements(self.state)

    def unlocked_count(self) -> int:
        return gamification.unlocked_count(self.state)

    def total_achievements(self) -> int:
        return gamification.total_achievements()

    # ------------------------------------------------------------------
    # Preferences and export
    # ------------------------------------------------------------------

    def get_theme(self) -> str:
        return self.state.get_theme(self._ambient)

    def set_theme(self, theme: str) -> None:
        self.state.set_theme(theme)

    def export_csv(self) -> str:
        return export.export_csv(self.entries.list())

    def write_export(self, directory: Optional[Path] = None) -> Path:
        return export.write_export(self.entries.list(), directory or self.export_dir, self.today)
