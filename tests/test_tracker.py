from datetime import date, timedelta

import pytest

from expense_tracker import EntryValidationError, ExpenseTracker


class FakeClock:
    def __init__(self, today):
        self.today = today

    def __call__(self):
        return self.today

    def advance(self, days):
        self.today += timedelta(days=days)


@pytest.fixture
def clock():
    return FakeClock(date(2024, 3, 15))


def test_add_entry_moves_streak_and_unlocks_first_entry(clock):
    tracker = ExpenseTracker(clock=clock)
    entry = tracker.add_entry(120, 'expense', 'Meals', clock.today)
    assert entry.category_group == 'needs'
    assert tracker.streak().current_streak == 1
    assert tracker.last_unlocked == ['first_entry']
    assert tracker.unlocked_count() == 1

    clock.advance(1)
    tracker.add_entry(80, 'expense', 'Meals', clock.today)
    assert tracker.streak().current_streak == 2
    assert tracker.last_unlocked == []


def test_backdated_entry_is_stored_but_does_not_start_a_streak(clock):
    tracker = ExpenseTracker(clock=clock)
    tracker.add_entry(120, 'expense', 'Meals', '2024-02-01')
    assert tracker.streak().current_streak == 0
    assert tracker.last_unlocked == ['first_entry']
    assert len(tracker.get_entries()) == 1


def test_invalid_entry_does_not_touch_state(clock):
    tracker = ExpenseTracker(clock=clock)
    with pytest.raises(EntryValidationError):
        tracker.add_entry(0, 'expense', 'Meals', clock.today)
    assert tracker.get_entries() == []
    assert tracker.streak().current_streak == 0
    assert tracker.unlocked_count() == 0


def test_on_focus_breaks_stale_streak(clock):
    tracker = ExpenseTracker(clock=clock)
    tracker.add_entry(50, 'expense', 'Fuel', clock.today)
    clock.advance(3)
    assert tracker.on_focus().current_streak == 0


def test_saver_unlocks_from_entry_month(clock):
    tracker = ExpenseTracker(clock=clock)
    tracker.add_entry(2000, 'income', 'FutureGoals', clock.today)
    assert set(tracker.last_unlocked) == {'first_entry', 'saver'}


def test_queries_default_to_current_month(clock):
    tracker = ExpenseTracker(clock=clock)
    tracker.add_entry(3000, 'income', 'FutureGoals', '2024-03-01')
    tracker.add_entry(600, 'expense', 'Shopping', '2024-03-02')
    tracker.add_entry(400, 'expense', 'Meals', '2024-02-02')
    tracker.set_budget('Shopping', 1000)

    assert tracker.monthly_data().total_lifestyle == 600
    assert tracker.monthly_data(2024, 1).total_needs == 400
    assert [e.category for e in tracker.entries_for_month()] == ['Shopping', 'FutureGoals']
    assert tracker.budget_status('Shopping').status == 'green'
    assert tracker.budget_summary().total_budget == 1000
    assert tracker.wants_ratio() == 100
    assert tracker.forecast().predicted_expenses == 400
    assert 0 <= tracker.financial_score().score <= 100
    assert len(tracker.insights()) <= 5
    assert len(tracker.achievements()) == tracker.total_achievements()


def test_update_and_delete_entries(clock):
    tracker = ExpenseTracker(clock=clock)
    entry = tracker.add_entry(100, 'expense', 'Meals', clock.today)
    assert tracker.update_entry(entry.id, category='Hobbies').category_group == 'lifestyle'
    assert tracker.update_entry('missing', amount=5) is None
    assert tracker.delete_entry(entry.id) is True
    assert tracker.delete_entry(entry.id) is False


def test_theme_falls_back_to_ambient(clock):
    tracker = ExpenseTracker(clock=clock, ambient='dark')
    assert tracker.get_theme() == 'dark'
    tracker.set_theme('light')
    assert tracker.get_theme() == 'light'


def test_data_dir_round_trip(tmp_path, clock):
    tracker = ExpenseTracker.from_data_dir(tmp_path, clock=clock)
    tracker.add_entry(250, 'expense', 'EatingOut', clock.today, note='pizza')
    tracker.set_budget('EatingOut', 2000)
    tracker.set_theme('dark')

    reopened = ExpenseTracker.from_data_dir(tmp_path, clock=clock)
    assert [e.note for e in reopened.get_entries()] == ['pizza']
    assert reopened.budget_for_category('EatingOut') == 2000
    assert reopened.streak().current_streak == 1
    assert [a.id for a in reopened.achievements() if a.is_unlocked] == ['first_entry']
    assert reopened.get_theme() == 'dark'

    path = reopened.write_export(tmp_path / 'out')
    assert path.name == 'expenses_2024-03-15.csv'
    assert len(path.read_text(encoding='utf-8').splitlines()) == 2


def test_clear_entries_keeps_budgets(clock):
    tracker = ExpenseTracker(clock=clock)
    tracker.add_entry(100, 'expense', 'Meals', clock.today)
    tracker.set_budget('Meals', 500)
    tracker.clear_entries()
    assert tracker.get_entries() == []
    assert tracker.budget_for_category('Meals') == 500


def test_default_export_goes_under_the_data_dir(tmp_path, clock):
    data_dir = tmp_path / 'data'
    tracker = ExpenseTracker.from_data_dir(data_dir, clock=clock)
    tracker.add_entry(40, 'expense', 'Meals', clock.today)

    path = tracker.write_export()
    assert path.parent == data_dir / 'exports'
    assert path.exists()
