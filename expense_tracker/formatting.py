"""Rounding and display helpers shared by the engines."""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Union


def round_half_up(value: Union[float, int]) -> int:
    """Round to the nearest integer, halves towards positive infinity.

    Python's built-in ``round`` uses banker's rounding (``round(2.5) == 2``);
    every percentage and average in the engines rounds halves up instead.

    Example:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(-2.5)
        -2
    """
    return int(math.floor(float(value) + 0.5))


def format_currency(amount: Union[float, int], symbol: str = '₹') -> str:
    """Format an amount with Indian digit grouping and no decimals.

    Example:
        >>> format_currency(1234567)
        '₹12,34,567'
    """
    rounded = round_half_up(abs(amount))
    digits = str(rounded)
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ','.join(groups) + ',' + tail
    sign = '-' if amount < 0 and rounded else ''
    return f"{sign}{symbol}{digits}"


def format_entry_date(day: date, today: date) -> str:
    """Human label for an entry date: ``Today``, ``Yesterday`` or ``Mon, 5 Feb``."""
    if day == today:
        return 'Today'
    if day == today - timedelta(days=1):
        return 'Yesterday'
    return f"{day.strftime('%a')}, {day.day} {day.strftime('%b')}"
