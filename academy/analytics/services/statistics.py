"""
Statistics helpers used by the analytics reports.

These functions take plain values and never touch the database.
"""

import csv
import io
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Sequence

# Inclusive (lower, upper) bounds of the percentage bins
SCORE_BINS = (
    ("0-20", 0, 20),
    ("21-40", 21, 40),
    ("41-60", 41, 60),
    ("61-80", 61, 80),
    ("81-100", 81, 100),
)


def calculate_current_streak(active_dates: Iterable[date], today: date) -> int:
    """
    Count consecutive active days ending today.

    Args:
        active_dates: Days with at least one activity
        today: The day the streak is anchored on

    Returns:
        Length of the streak; 0 when there was no activity today
    """
    days = set(active_dates)
    streak = 0
    current = today
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def calculate_median(values: Sequence[float]) -> float:
    if not values:
        return 0
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[middle]
    return (ordered[middle - 1] + ordered[middle]) / 2


def score_distribution(percentages: Iterable[float]) -> List[Dict[str, Any]]:
    """
    Count percentages per bin.

    A value falls into the first bin whose upper bound it does not exceed,
    so 20.5 lands in ``21-40``. Values outside 0-100 go to the edge bins.
    """
    counts = {label: 0 for label, _lower, _upper in SCORE_BINS}
    for value in percentages:
        for label, _lower, upper in SCORE_BINS:
            if value <= upper:
                counts[label] += 1
                break
        else:
            counts[SCORE_BINS[-1][0]] += 1
    return [{"range": label, "count": counts[label]} for label, _lower, _upper in SCORE_BINS]


def safe_percentage(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return part / whole * 100


def rows_to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """
    Render dict rows as CSV text.

    The header comes from the keys of the first row. ``None`` values are
    written as empty cells.
    """
    if not rows:
        return ""
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=list(rows[0].keys()),
        extrasaction="ignore",
        lineterminator="\n",
    )
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()
