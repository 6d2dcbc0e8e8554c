import json
from datetime import date

import pytest

from expense_tracker.aggregation import monthly_data
from expense_tracker.models import EntryValidationError
from expense_tracker.storage import EntryStore, JsonEntryStore, read_json


def _ticking_clock(start=1000.0):
    state = {'now': start}

    def clock():
        state['now'] += 10
        return state['now']
    return clock


def test_add_assigns_id_group_and_created_at():
    store = EntryStore(clock=_ticking_clock())
    entry = store.add(120, 'expense', 'Transport', '2024-03-02')
    assert entry.id
    assert entry.category_group == 'needs'
    assert entry.created_at == 1010.0
    assert len(store) == 1


def test_invalid_add_leaves_store_unchanged():
    store = EntryStore()
    with pytest.raises(EntryValidationError):
        store.add(-5, 'expense', 'Transport', '2024-03-02')
    with pytest.raises(EntryValidationError):
        store.add(5, 'expense', 'Transport', 'not-a-date')
    assert len(store) == 0


def test_created_at_is_strictly_increasing_with_a_frozen_clock():
    store = EntryStore(clock=lambda: 5000.0)
    first = store.add(10, 'expense', 'Meals', '2024-03-02')
    second = store.add(20, 'expense', 'Meals', '2024-03-02')
    assert second.created_at > first.created_at


def test_list_by_month_filters_and_sorts_newest_first():
    store = EntryStore(clock=_ticking_clock())
    old = store.add(10, 'expense', 'Meals', '2024-03-01')
    new = store.add(20, 'expense', 'Meals', '2024-03-20')
    store.add(30, 'expense', 'Meals', '2024-04-01')
    march = store.list_by_month(2024, 2)
    assert [e.id for e in march] == [new.id, old.id]
    assert store.list_by_month(2023, 2) == []


def test_update_rederives_group_when_category_changes():
    store = EntryStore()
    entry = store.add(99, 'expense', 'Meals', '2024-03-02')
    updated = store.update(entry.id, category='Hobbies', amount=150)
    assert updated.category_group == 'lifestyle'
    assert updated.amount == 150.0
    assert updated.created_at == entry.created_at
    assert store.get(entry.id).category == 'Hobbies'


def test_update_rejects_invalid_changes_without_mutating():
    store = EntryStore()
    entry = store.add(99, 'expense', 'Meals', '2024-03-02')
    with pytest.raises(EntryValidationError):
        store.update(entry.id, amount=0)
    with pytest.raises(EntryValidationError):
        store.update(entry.id, id='other')
    assert store.get(entry.id).amount == 99.0


def test_unknown_ids():
    store = EntryStore()
    assert store.update('missing', amount=5) is None
    assert store.delete('missing') is False


def test_delete_and_clear():
    store = EntryStore()
    a = store.add(1, 'expense', 'Meals', '2024-03-02')
    store.add(2, 'expense', 'Meals', '2024-03-02')
    assert store.delete(a.id) is True
    assert len(store) == 1
    store.clear()
    assert store.list() == []


def test_json_store_persists_and_reloads(tmp_path):
    path = tmp_path / 'entries.json'
    store = JsonEntryStore(path)
    store.add(500, 'income', 'FutureGoals', date(2024, 3, 1), note='stipend')
    store.add(75, 'expense', 'EatingOut', date(2024, 3, 2))

    reloaded = JsonEntryStore(path)
    assert [e.amount for e in reloaded.list()] == [500.0, 75.0]
    assert reloaded.list()[0].note == 'stipend'
    saved = json.loads(path.read_text(encoding='utf-8'))
    assert saved[1]['categoryGroup'] == 'lifestyle'


def test_corrupt_file_falls_back_to_empty(tmp_path, caplog):
    path = tmp_path / 'entries.json'
    path.write_text('{not json', encoding='utf-8')
    store = JsonEntryStore(path)
    assert store.list() == []
    assert 'Could not read' in caplog.text


def test_bad_records_are_skipped(tmp_path):
    path = tmp_path / 'entries.json'
    path.write_text(json.dumps([
        {'id': 'ok', 'amount': 10, 'type': 'expense', 'category': 'Meals', 'date': '2024-03-01'},
        {'id': 'bad', 'amount': -1, 'type': 'expense', 'category': 'Meals', 'date': '2024-03-01'},
        'garbage',
    ]), encoding='utf-8')
    store = JsonEntryStore(path)
    assert [e.id for e in store.list()] == ['ok']


def test_read_json_missing_file_returns_default(tmp_path):
    assert read_json(tmp_path / 'missing.json', {'a': 1}) == {'a': 1}


def test_legacy_priority_row_stays_editable(tmp_path):
    path = tmp_path / 'entries.json'
    path.write_text(json.dumps([
        {'id': 'a1', 'amount': 200, 'type': 'expense', 'category': 'Shopping',
         'priority': 'need', 'date': '2024-03-02'},
    ]), encoding='utf-8')
    store = JsonEntryStore(path)
    assert monthly_data(store, 2024, 2).total_needs == 200

    updated = store.update('a1', note='birthday')
    assert updated.note == 'birthday'
    assert updated.category_group == 'needs'
    assert JsonEntryStore(path).get('a1').note == 'birthday'

    recategorized = store.update('a1', category='Hobbies')
    assert recategorized.category_group == 'lifestyle'
    with pytest.raises(EntryValidationError):
        store.update('a1', category_group='needs')


class FailingEntryStore(EntryStore):
    def __init__(self):
        super().__init__()
        self.fail = False

    def _persist(self, entries):
        if self.fail:
            raise OSError("disk full")


def test_failed_persist_leaves_entries_unchanged():
    store = FailingEntryStore()
    entry = store.add(50, 'expense', 'Meals', '2024-03-02')
    store.fail = True

    with pytest.raises(OSError):
        store.add(75, 'expense', 'Meals', '2024-03-03')
    with pytest.raises(OSError):
        store.update(entry.id, amount=80)
    with pytest.raises(OSError):
        store.delete(entry.id)
    with pytest.raises(OSError):
        store.clear()

    assert [(e.id, e.amount) for e in store.list()] == [(entry.id, 50.0)]
