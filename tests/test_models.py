import logging
from datetime import date

import pytest

from expense_tracker.models import (
    Budget,
    Entry,
    EntryValidationError,
    StreakData,
    entry_from_record,
    parse_date,
    validate_entry,
)


def _record(**overrides):
    record = {
        'id': 'a1',
        'amount': 250,
        'type': 'expense',
        'category': 'Shopping',
        'date': '2024-03-02',
        'createdAt': 1709337600000,
    }
    record.update(overrides)
    return record


def test_legacy_priority_is_normalized():
    entry = entry_from_record(_record(priority='want'))
    assert entry.category_group == 'lifestyle'
    assert entry.priority == 'lifestyle'


def test_category_group_field_wins_over_priority():
    entry = entry_from_record(_record(category='Fuel', categoryGroup='needs', priority='want'))
    assert entry.category_group == 'needs'


def test_missing_group_falls_back_to_category_table():
    entry = entry_from_record(_record(category='FoodGroceries'))
    assert entry.category_group == 'needs'
    assert entry.date == date(2024, 3, 2)
    assert entry.created_at == 1709337600000


def test_unrecognized_group_is_kept_and_logged(caplog):
    with caplog.at_level(logging.WARNING, logger='expense_tracker.models'):
        entry = entry_from_record(_record(category='Crypto', categoryGroup='luxury'))
    assert entry.category_group == 'luxury'
    assert 'unrecognized category group' in caplog.text


@pytest.mark.parametrize('overrides', [
    {'amount': 0},
    {'amount': -10},
    {'id': ''},
    {'type': 'transfer'},
    {'date': '02/03/2024'},
])
def test_malformed_records_are_rejected(overrides):
    with pytest.raises(ValueError):
        entry_from_record(_record(**overrides))


def test_to_record_writes_both_group_keys():
    entry = entry_from_record(_record(note='shoes'))
    record = entry.to_record()
    assert record['categoryGroup'] == 'lifestyle'
    assert record['priority'] == 'lifestyle'
    assert record['date'] == '2024-03-02'
    assert record['note'] == 'shoes'


def _entry(**overrides):
    values = dict(
        id='x', amount=100, type='expense', category='Meals',
        category_group=None, date=date(2024, 3, 1),
    )
    values.update(overrides)
    return Entry(**values)


def test_validate_entry_derives_group_and_strips_note():
    entry = validate_entry(_entry(note='  lunch  '))
    assert entry.category_group == 'needs'
    assert entry.note == 'lunch'
    assert entry.amount == 100.0


def test_validate_entry_rejects_bad_input():
    with pytest.raises(EntryValidationError):
        validate_entry(_entry(amount=0))
    with pytest.raises(EntryValidationError):
        validate_entry(_entry(category='Crypto'))
    with pytest.raises(EntryValidationError):
        validate_entry(_entry(category_group='lifestyle'))


def test_validation_error_is_a_value_error():
    assert issubclass(EntryValidationError, ValueError)


def test_parse_date_accepts_strings_and_dates():
    assert parse_date('2024-01-31') == date(2024, 1, 31)
    assert parse_date(date(2024, 1, 31)) == date(2024, 1, 31)
    with pytest.raises(ValueError):
        parse_date('')


def test_budget_record_month_must_be_zero_based():
    assert Budget.from_record({'category': 'Meals', 'amount': 500, 'month': 0, 'year': 2024}).month == 0
    with pytest.raises(ValueError):
        Budget.from_record({'category': 'Meals', 'amount': 500, 'month': 12, 'year': 2024})


def test_streak_record_uses_empty_string_for_no_date():
    record = StreakData().to_record()
    assert record == {
        'currentStreak': 0,
        'longestStreak': 0,
        'lastEntryDate': '',
        'totalDaysWithEntries': 0,
    }
    restored = StreakData.from_record({'currentStreak': 3, 'longestStreak': 5, 'lastEntryDate': '2024-03-14'})
    assert restored.last_entry_date == date(2024, 3, 14)
    assert restored.total_days_with_entries == 0
