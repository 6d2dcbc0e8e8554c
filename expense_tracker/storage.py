"""Entry store and JSON file helpers.

The engines only talk to an :class:`EntryStore`.  The base class keeps
entries in memory (handy for tests and for hosts with their own
persistence); :class:`JsonEntryStore` mirrors every write to a JSON file.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from .models import (
    Entry,
    EntryValidationError,
    entry_from_record,
    parse_date,
    validate_entry,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {'amount', 'type', 'category', 'category_group', 'date', 'note'}
# Changing any of these re-checks that the category and its group agree
GROUP_FIELDS = {'type', 'category', 'category_group'}


def read_json(path: Path, default: Any) -> Any:
    """Load a JSON document, falling back to ``default`` when missing or corrupt.

    A corrupt or unreadable file is never propagated to the caller; it is
    reported on the module logger and treated as empty.
    """
    if not path.exists():
        return default
    try:
        with path.open('r', encoding='utf-8') as handle:
            return json.load(handle)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s, using defaults: %s", path, e)
        return default


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with path.open('w', encoding='utf-8') as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
    except OSError as e:
        raise OSError(f"Failed to save {path}: {e}") from e


def _epoch_millis() -> float:
    return time.time() * 1000


class EntryStore:
    """Ordered, in-memory collection of entries keyed by id."""

    def __init__(
        self,
        entries: Optional[Iterable[Entry]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize the store.

        Args:
            entries: Initial entries in insertion order
            clock: Returns the current time in epoch milliseconds; used for
                ``created_at`` only
        """
        self._entries: List[Entry] = [replace(e) for e in (entries or [])]
        self._clock = clock or _epoch_millis

    def __len__(self) -> int:
        return len(self._entries)

    def list(self) -> List[Entry]:
        """All entries in insertion order."""
        return [replace(e) for e in self._entries]

    def get(self, entry_id: str) -> Optional[Entry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return replace(entry)
        return None

    def list_by_month(self, year: int, month: int) -> List[Entry]:
        """Entries dated in a calendar month, newest ``created_at`` first.

        Args:
            year: Calendar year
            month: Zero-based month index (0 = January)
        """
        matches = [
            replace(e) for e in self._entries
            if e.date.year == year and e.date.month == month + 1
        ]
        return sorted(matches, key=lambda e: e.created_at, reverse=True)

    def add(
        self,
        amount: float,
        type: str,
        category: str,
        date: Any,
        note: Optional[str] = None,
        category_group: Optional[str] = None,
    ) -> Entry:
        """Validate and append a new entry.

        Raises:
            EntryValidationError: If the entry is invalid; the store is
                left unchanged
        """
        try:
            day = parse_date(date)
        except ValueError as e:
            raise EntryValidationError(str(e)) from e
        candidate = Entry(
            id=uuid.uuid4().hex,
            amount=amount,
            type=type,
            category=category,
            category_group=category_group,
            date=day,
            note=note,
            created_at=self._next_created_at(),
        )
        entry = validate_entry(candidate)
        self._commit(self._entries + [entry])
        return replace(entry)

    def update(self, entry_id: str, **changes: Any) -> Optional[Entry]:
        """Replace fields of an existing entry in place.

        Returns:
            The updated entry, or ``None`` if no entry has ``entry_id``

        Raises:
            EntryValidationError: If a change is not allowed or the result
                is invalid; the store is left unchanged
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise EntryValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        for index, entry in enumerate(self._entries):
            if entry.id != entry_id:
                continue
            if 'date' in changes:
                try:
                    changes['date'] = parse_date(changes['date'])
                except ValueError as e:
                    raise EntryValidationError(str(e)) from e
            if 'category' in changes and 'category_group' not in changes:
                changes['category_group'] = None
            updated = validate_entry(
                replace(entry, **changes),
                require_known_category='category' in changes,
                check_group=bool(GROUP_FIELDS & set(changes)),
            )
            entries = list(self._entries)
            entries[index] = updated
            self._commit(entries)
            return replace(updated)
        return None

    def delete(self, entry_id: str) -> bool:
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._commit(remaining)
        return True

    def clear(self) -> None:
        """Remove every entry."""
        self._commit([])

    def _next_created_at(self) -> float:
        now = float(self._clock())
        if self._entries:
            # Keeps insertion order as the tie-break within one millisecond
            now = max(now, max(e.created_at for e in self._entries) + 1)
        return now

    def _commit(self, entries: List[Entry]) -> None:
        # The new list only replaces the current one once it is persisted
        self._persist(entries)
        self._entries = entries

    def _persist(self, entries: List[Entry]) -> None:
        """Hook for subclasses that mirror writes somewhere."""


class JsonEntryStore(EntryStore):
    """Entry store persisted as a JSON list of records."""

    def __init__(self, path: Path, clock: Optional[Callable[[], float]] = None):
        self.path = Path(path)
        super().__init__(self._load(), clock=clock)

    def _load(self) -> List[Entry]:
        data = read_json(self.path, [])
        if not isinstance(data, list):
            logger.warning("Entries file %s does not hold a list; ignoring it", self.path)
            return []
        entries: List[Entry] = []
        for i, record in enumerate(data):
            try:
                entries.append(entry_from_record(record))
            except (ValueError, TypeError) as e:
                logger.warning("Skipping entry #%d in %s: %s", i + 1, self.path, e)
        return entries

    def _persist(self, entries: List[Entry]) -> None:
        records: List[Dict[str, Any]] = [e.to_record() for e in entries]
        write_json(self.path, records)
