"""CSV export of the entry log."""

from __future__ import annotations

import csv
import logging
from datetime import date
from pathlib import Path
from typing import Iterable

import pandas as pd

from .models import DATE_FORMAT, Entry

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ['Date', 'Type', 'Category', 'Priority', 'Amount', 'Note']


def _format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


def export_frame(entries: Iterable[Entry]) -> pd.DataFrame:
    """Entries as a string table with the export column headers, in stored order."""
    rows = [
        {
            'Date': entry.date.strftime(DATE_FORMAT),
            'Type': entry.type,
            'Category': entry.category,
            'Priority': entry.category_group or '',
            'Amount': _format_amount(entry.amount),
            'Note': entry.note or '',
        }
        for entry in entries
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS, dtype=str)


def export_csv(entries: Iterable[Entry]) -> str:
    """Render entries as CSV with every field quoted.

    Example:
        >>> print(export_csv([]))
        "Date","Type","Category","Priority","Amount","Note"
        <BLANKLINE>
    """
    return export_frame(entries).to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')


def export_filename(today: date) -> str:
    return f"expenses_{today.strftime(DATE_FORMAT)}.csv"


def write_export(entries: Iterable[Entry], directory: Path, today: date) -> Path:
    """Write ``expenses_<YYYY-MM-DD>.csv`` into ``directory`` and return its path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    frame = export_frame(entries)
    path = directory / export_filename(today)
    frame.to_csv(path, index=False, quoting=csv.QUOTE_ALL, lineterminator='\n', encoding='utf-8')
    logger.info("Exported %d entries to %s", len(frame), path)
    return path
