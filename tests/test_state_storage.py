import json
from datetime import date

import pytest

from expense_tracker.models import Budget, StreakData
from expense_tracker.state_storage import BudgetStore, JsonBudgetStore, JsonStateStore, StateStore


def test_budget_set_upserts_by_key():
    store = BudgetStore()
    store.set('Meals', 1000, 2, 2024)
    store.set('Meals', 1500, 2, 2024)
    store.set('Meals', 900, 3, 2024)
    assert len(store.list()) == 2
    assert store.find('Meals', 2, 2024).amount == 1500.0


def test_budget_extend_skips_existing_keys():
    store = BudgetStore([Budget('Meals', 1000, 2, 2024)])
    added = store.extend([Budget('Meals', 5, 2, 2024), Budget('Fuel', 300, 2, 2024)])
    assert added == 1
    assert store.find('Meals', 2, 2024).amount == 1000


def test_json_budget_store_round_trip(tmp_path):
    store = JsonBudgetStore.in_directory(tmp_path)
    store.set('Shopping', 2000, 1, 2024)
    store.set_last_budget_month(1, 2024)

    reloaded = JsonBudgetStore.in_directory(tmp_path)
    assert reloaded.find('Shopping', 1, 2024).amount == 2000.0
    assert reloaded.last_budget_month() == (1, 2024)
    marker = json.loads((tmp_path / 'budget_month.json').read_text(encoding='utf-8'))
    assert marker == {'month': 1, 'year': 2024}


def test_json_budget_store_ignores_malformed_rows(tmp_path):
    (tmp_path / 'budgets.json').write_text(json.dumps([
        {'category': 'Meals', 'amount': 100, 'month': 0, 'year': 2024},
        {'category': 'Meals', 'amount': 100, 'month': 13, 'year': 2024},
        {'category': 'Meals'},
        {'category': 'Meals', 'amount': 250, 'month': 0, 'year': 2024},
    ]), encoding='utf-8')
    (tmp_path / 'budget_month.json').write_text('[]', encoding='utf-8')
    store = JsonBudgetStore.in_directory(tmp_path)
    assert [b.amount for b in store.list()] == [250.0]
    assert store.last_budget_month() is None


def test_state_store_unlocks_once():
    state = StateStore()
    assert state.add_unlocked_achievement('first_entry') is True
    assert state.add_unlocked_achievement('first_entry') is False
    assert state.unlocked_achievements() == ['first_entry']


def test_streak_copies_are_independent():
    state = StateStore()
    streak = state.get_streak()
    streak.current_streak = 9
    assert state.get_streak().current_streak == 0


def test_theme_defaults_to_ambient_and_rejects_unknown_values():
    state = StateStore()
    assert state.get_theme('dark') == 'dark'
    state.set_theme('light')
    assert state.get_theme('dark') == 'light'
    with pytest.raises(ValueError):
        state.set_theme('sepia')


def test_json_state_store_round_trip(tmp_path):
    state = JsonStateStore(tmp_path)
    state.save_streak(StreakData(current_streak=2, longest_streak=4, last_entry_date=date(2024, 3, 14),
                                 total_days_with_entries=6))
    state.add_unlocked_achievement('week_warrior')
    state.set_theme('dark')

    reloaded = JsonStateStore(tmp_path)
    assert reloaded.get_streak() == StreakData(2, 4, date(2024, 3, 14), 6)
    assert reloaded.unlocked_achievements() == ['week_warrior']
    assert reloaded.get_theme() == 'dark'


def test_json_state_store_recovers_from_corrupt_files(tmp_path):
    (tmp_path / 'streak.json').write_text('{"currentStreak": "many"}', encoding='utf-8')
    (tmp_path / 'achievements.json').write_text('oops', encoding='utf-8')
    (tmp_path / 'theme.json').write_text('{"theme": "neon"}', encoding='utf-8')
    state = JsonStateStore(tmp_path)
    assert state.get_streak() == StreakData()
    assert state.unlocked_achievements() == []
    assert state.get_theme('light') == 'light'
