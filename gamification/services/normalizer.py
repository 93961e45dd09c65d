"""
Parsing boundary for loosely typed sheet values.

Every default substitution for points, levels and comma-joined lists
happens here. None of these functions raise.
"""

import math
import re
from typing import Any, Iterable, Mapping, Optional, Union

from gamification.models import GamificationRecord, RosterEntry
from .level_service import calculate_level

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(raw: Any) -> Optional[int]:
    """Parse the leading integer of raw, or None if there is none."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if math.isnan(raw) or math.isinf(raw):
            return None
        return int(raw)
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return None
    return int(match.group(1))


def parse_points(raw: Any) -> int:
    """Points as a non-negative integer; anything unparseable is 0."""
    value = _leading_int(raw)
    if value is None or value < 0:
        return 0
    return value


def parse_level(raw: Any) -> int:
    """Stored level as an integer >= 1; anything unparseable is 1."""
    value = _leading_int(raw)
    if value is None or value < 1:
        return 1
    return value


def split_list(raw: Any) -> list[str]:
    """
    Split comma-joined text into trimmed, non-empty entries.

    Order and duplicates are preserved. A list (a sheet cell returned as a
    JSON array) is taken item by item; any other non-string value is empty.
    """
    if isinstance(raw, (list, tuple)):
        parts = [str(item) for item in raw if item is not None]
    elif isinstance(raw, str):
        parts = raw.split(",")
    else:
        return []
    return [part.strip() for part in parts if part.strip()]


def reconcile_level(calculated: int, stored: int) -> int:
    """A stored level can raise the displayed level but never lower it."""
    return max(calculated, stored)


def has_points(raw: Any) -> bool:
    """
    Whether a points value counts as present.

    Zero (number or string) is present; None, empty strings, NaN and
    False are not.
    """
    if raw is None or raw is False or raw == "":
        return False
    if isinstance(raw, float) and math.isnan(raw):
        return False
    return True


def record_level(record: GamificationRecord) -> int:
    """Reconciled level of a record."""
    points = parse_points(record.points)
    return reconcile_level(calculate_level(points), parse_level(record.level))


def coerce_records(
    rows: Iterable[Union[GamificationRecord, Mapping[str, Any]]],
) -> list[GamificationRecord]:
    """Validate raw rows into GamificationRecord, passing models through."""
    return [
        row if isinstance(row, GamificationRecord) else GamificationRecord.model_validate(row)
        for row in rows
    ]


def coerce_roster(
    rows: Iterable[Union[RosterEntry, Mapping[str, Any]]],
) -> list[RosterEntry]:
    """Validate raw rows into RosterEntry, passing models through."""
    return [
        row if isinstance(row, RosterEntry) else RosterEntry.model_validate(row)
        for row in rows
    ]
