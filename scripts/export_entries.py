#!/usr/bin/env python3
"""Export every recorded entry to a dated CSV file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_tracker import ExpenseTracker
from expense_tracker.config import configure_logging


def main(data_dir: Optional[Path] = None, output_dir: Optional[Path] = None) -> Optional[Path]:
    tracker = ExpenseTracker.from_data_dir(data_dir)
    entries = tracker.get_entries()
    if not entries:
        print("No entries to export.")
        return None
    path = tracker.write_export(output_dir)
    print(f"Wrote {len(entries)} entries to {path}")
    return path


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Export expense tracker entries to CSV.')
    parser.add_argument('--data-dir', type=Path, default=None, help='Directory holding the JSON data files')
    parser.add_argument('--output-dir', type=Path, default=None, help='Where to write the CSV (defaults to the export dir)')
    parser.add_argument('--log-level', default=None, help='Logging level, e.g. INFO or DEBUG')
    args = parser.parse_args()
    configure_logging(args.log_level)
    main(data_dir=args.data_dir, output_dir=args.output_dir)
