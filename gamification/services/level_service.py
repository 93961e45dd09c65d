"""Level curve: points to level, level to threshold, and level progress."""

from typing import Optional

from gamification.models import LevelProgress

# Minimum points for levels 2..10; level 1 starts at 0.
LEVEL_THRESHOLDS = (100, 300, 600, 1000, 1500, 2100, 2800, 3600, 4500)

# Past the table, each level is a fixed-width band.
HIGH_LEVEL_START = 5500
HIGH_LEVEL_STEP = 1000


def calculate_level(points: int) -> int:
    """
    Map accumulated points to a level (>= 1).

    Levels 1-10 follow LEVEL_THRESHOLDS, level 10 lasting until 5500.
    From 5500 on: 10 + (points - 5500) // 1000, so 5500..6499 is still
    level 10 and 6500 is level 11.
    """
    if points >= HIGH_LEVEL_START:
        return 10 + (points - HIGH_LEVEL_START) // HIGH_LEVEL_STEP

    level = 1
    for threshold in LEVEL_THRESHOLDS:
        if points < threshold:
            break
        level += 1
    return level


def level_threshold(level: int) -> int:
    """
    Minimum points needed to reach a level.

    Note: level 11 starts at 5500 here while calculate_level only reports
    level 11 from 6500. Both numbers are relied upon; keep them as they are.
    """
    if level <= 1:
        return 0
    if level <= 10:
        return LEVEL_THRESHOLDS[level - 2]
    return HIGH_LEVEL_START + (level - 11) * HIGH_LEVEL_STEP


def progress_to_next_level(points: int) -> LevelProgress:
    """
    Calculate progress within the current level.

    Returns:
        LevelProgress with points earned in the level, the width of the
        level band and a percentage clamped to [0, 100]
    """
    current_level = calculate_level(points)
    current_threshold = level_threshold(current_level)
    next_threshold = level_threshold(current_level + 1)

    earned = points - current_threshold
    needed = next_threshold - current_threshold

    if needed > 0:
        percent = min(max(earned / needed * 100, 0.0), 100.0)
    else:
        percent = 100.0

    return LevelProgress(
        earnedInLevel=earned,
        neededForLevel=needed,
        percent=percent,
    )


def check_level_up(current_level: int, new_total: int) -> Optional[int]:
    """Return the level for new_total if it is above current_level, else None."""
    new_level = calculate_level(new_total)
    if new_level > current_level:
        return new_level
    return None
