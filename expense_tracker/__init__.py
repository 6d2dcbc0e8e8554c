"""Top-level package for the expense tracker engine.

The package turns a log of income and expense entries into derived
metrics.  The primary modules are:

* ``storage`` / ``state_storage`` - entry, budget and streak stores
* ``aggregation`` - monthly totals and category breakdowns
* ``analytics`` - savings rate, growth and trends
* ``budget`` - category budgets with monthly rollover
* ``forecast`` - next-month and year-end projections
* ``financial_score`` - the 0-100 health score
* ``gamification`` - streaks and achievements
* ``insights`` - rule-based advice

Most hosts only need :class:`ExpenseTracker`:

```python
from expense_tracker import ExpenseTracker

tracker = ExpenseTracker.from_data_dir("data")
tracker.add_entry(450, "expense", "FoodGroceries", "2024-03-02")
print(tracker.financial_score().rating)
```
"""

from .models import (  # noqa: F401  # re-exported for convenience
    Achievement,
    Budget,
    BudgetValidationError,
    Entry,
    EntryValidationError,
    MonthlyData,
    StreakData,
)
from .storage import EntryStore, JsonEntryStore  # noqa: F401
from .state_storage import BudgetStore, JsonBudgetStore, JsonStateStore, StateStore  # noqa: F401
from .tracker import ExpenseTracker  # noqa: F401

__version__ = "0.3.0"

__all__ = [
    "Achievement",
    "Budget",
    "BudgetStore",
    "BudgetValidationError",
    "Entry",
    "EntryStore",
    "EntryValidationError",
    "ExpenseTracker",
    "JsonBudgetStore",
    "JsonEntryStore",
    "JsonStateStore",
    "MonthlyData",
    "StateStore",
    "StreakData",
]
