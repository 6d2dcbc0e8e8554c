"""Budget rows and small singleton records (streak, achievements, theme).

Each concern is an independent JSON record on disk so that a corrupt file
only resets that one concern.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from .config import (
    ACHIEVEMENTS_FILENAME,
    BUDGET_MONTH_FILENAME,
    BUDGETS_FILENAME,
    STREAK_FILENAME,
    THEME_FILENAME,
    THEMES,
)
from .models import Budget, StreakData
from .storage import read_json, write_json

logger = logging.getLogger(__name__)

MonthKey = Tuple[int, int]  # (zero-based month, year)


class BudgetStore:
    """Append-only history of monthly budget rows plus the last tracked month."""

    def __init__(
        self,
        budgets: Optional[Iterable[Budget]] = None,
        last_month: Optional[MonthKey] = None,
    ):
        self._budgets: List[Budget] = [replace(b) for b in (budgets or [])]
        self._last_month = last_month

    def list(self) -> List[Budget]:
        return [replace(b) for b in self._budgets]

    def find(self, category: str, month: int, year: int) -> Optional[Budget]:
        for budget in self._budgets:
            if budget.key == (category, month, year):
                return replace(budget)
        return None

    def for_month(self, month: int, year: int) -> List[Budget]:
        return [replace(b) for b in self._budgets if b.month == month and b.year == year]

    def set(self, category: str, amount: float, month: int, year: int) -> Budget:
        """Create the row for ``(category, month, year)`` or update its amount."""
        for budget in self._budgets:
            if budget.key == (category, month, year):
                budget.amount = float(amount)
                self._persist_budgets()
                return replace(budget)
        budget = Budget(category=category, amount=float(amount), month=month, year=year)
        self._budgets.append(budget)
        self._persist_budgets()
        return replace(budget)

    def extend(self, budgets: Iterable[Budget]) -> int:
        """Append rows whose key is not present yet; returns how many were added."""
        existing = {b.key for b in self._budgets}
        added = 0
        for budget in budgets:
            if budget.key in existing:
                continue
            self._budgets.append(replace(budget))
            existing.add(budget.key)
            added += 1
        if added:
            self._persist_budgets()
        return added

    def remove(self, category: str, month: int, year: int) -> bool:
        remaining = [b for b in self._budgets if b.key != (category, month, year)]
        if len(remaining) == len(self._budgets):
            return False
        self._budgets = remaining
        self._persist_budgets()
        return True

    def last_budget_month(self) -> Optional[MonthKey]:
        return self._last_month

    def set_last_budget_month(self, month: int, year: int) -> None:
        self._last_month = (month, year)
        self._persist_marker()

    def _persist_budgets(self) -> None:
        """Hook for subclasses that mirror writes somewhere."""

    def _persist_marker(self) -> None:
        """Hook for subclasses that mirror writes somewhere."""


class JsonBudgetStore(BudgetStore):
    """Budget store persisted as ``budgets.json`` and ``budget_month.json``."""

    def __init__(self, budgets_path: Path, marker_path: Path):
        self.budgets_path = Path(budgets_path)
        self.marker_path = Path(marker_path)
        super().__init__(self._load_budgets(), self._load_marker())

    @classmethod
    def in_directory(cls, data_dir: Path) -> 'JsonBudgetStore':
        data_dir = Path(data_dir)
        return cls(data_dir / BUDGETS_FILENAME, data_dir / BUDGET_MONTH_FILENAME)

    def _load_budgets(self) -> List[Budget]:
        data = read_json(self.budgets_path, [])
        if not isinstance(data, list):
            logger.warning("Budgets file %s does not hold a list; ignoring it", self.budgets_path)
            return []
        budgets: List[Budget] = []
        seen = set()
        for i, record in enumerate(data):
            try:
                budget = Budget.from_record(record)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Skipping budget #%d in %s: %s", i + 1, self.budgets_path, e)
                continue
            if budget.key in seen:
                # Later duplicates of a (category, month, year) key win
                budgets = [b for b in budgets if b.key != budget.key]
            seen.add(budget.key)
            budgets.append(budget)
        return budgets

    def _load_marker(self) -> Optional[MonthKey]:
        data = read_json(self.marker_path, None)
        if data is None:
            return None
        try:
            month, year = int(data['month']), int(data['year'])
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed budget month marker in %s", self.marker_path)
            return None
        if not 0 <= month <= 11:
            logger.warning("Ignoring out-of-range budget month marker in %s", self.marker_path)
            return None
        return (month, year)

    def _persist_budgets(self) -> None:
        write_json(self.budgets_path, [b.to_record() for b in self._budgets])

    def _persist_marker(self) -> None:
        if self._last_month is None:
            return
        month, year = self._last_month
        write_json(self.marker_path, {'month': month, 'year': year})


class StateStore:
    """Streak record, unlocked achievement ids and the theme preference."""

    def __init__(
        self,
        streak: Optional[StreakData] = None,
        unlocked: Optional[Iterable[str]] = None,
        theme: Optional[str] = None,
    ):
        self._streak = replace(streak) if streak else StreakData()
        self._unlocked: List[str] = list(dict.fromkeys(unlocked or []))
        self._theme = theme if theme in THEMES else None

    def get_streak(self) -> StreakData:
        return replace(self._streak)

    def save_streak(self, streak: StreakData) -> None:
        self._streak = replace(streak)
        self._persist_streak()

    def unlocked_achievements(self) -> List[str]:
        return list(self._unlocked)

    def add_unlocked_achievement(self, achievement_id: str) -> bool:
        """Record an unlock; returns ``False`` if it was already recorded."""
        if achievement_id in self._unlocked:
            return False
        self._unlocked.append(achievement_id)
        self._persist_achievements()
        return True

    def get_theme(self, ambient: str = 'light') -> str:
        """Stored theme, or ``ambient`` when the user never chose one."""
        return self._theme or ambient

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Theme must be one of {', '.join(THEMES)}")
        self._theme = theme
        self._persist_theme()

    def _persist_streak(self) -> None:
        """Hook for subclasses that mirror writes somewhere."""

    def _persist_achievements(self) -> None:
        """Hook for subclasses that mirror writes somewhere."""

    def _persist_theme(self) -> None:
        """Hook for subclasses that mirror writes somewhere."""


class JsonStateStore(StateStore):
    """State store keeping each record in its own JSON file under ``data_dir``."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.streak_path = self.data_dir / STREAK_FILENAME
        self.achievements_path = self.data_dir / ACHIEVEMENTS_FILENAME
        self.theme_path = self.data_dir / THEME_FILENAME
        super().__init__(self._load_streak(), self._load_unlocked(), self._load_theme())

    def _load_streak(self) -> StreakData:
        data = read_json(self.streak_path, None)
        if data is None:
            return StreakData()
        try:
            return StreakData.from_record(data)
        except (TypeError, ValueError) as e:
            logger.warning("Resetting malformed streak record in %s: %s", self.streak_path, e)
            return StreakData()

    def _load_unlocked(self) -> List[str]:
        data = read_json(self.achievements_path, [])
        if not isinstance(data, list):
            logger.warning("Achievements file %s does not hold a list; ignoring it", self.achievements_path)
            return []
        return [str(item) for item in data if isinstance(item, str)]

    def _load_theme(self) -> Optional[str]:
        data: Any = read_json(self.theme_path, None)
        if isinstance(data, dict):
            data = data.get('theme')
        return data if data in THEMES else None

    def _persist_streak(self) -> None:
        write_json(self.streak_path, self._streak.to_record())

    def _persist_achievements(self) -> None:
        write_json(self.achievements_path, list(self._unlocked))

    def _persist_theme(self) -> None:
        write_json(self.theme_path, {'theme': self._theme})
