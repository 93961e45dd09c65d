from .level_service import (
    calculate_level,
    level_threshold,
    progress_to_next_level,
    check_level_up,
)
from .normalizer import (
    parse_points,
    parse_level,
    split_list,
    reconcile_level,
    has_points,
)
from .student_service import StudentService, process_students
from .leaderboard_service import LeaderboardService, build_leaderboard, build_class_leaderboard
from .stats_service import StatsService, resolve_user_stats

__all__ = [
    "calculate_level",
    "level_threshold",
    "progress_to_next_level",
    "check_level_up",
    "parse_points",
    "parse_level",
    "split_list",
    "reconcile_level",
    "has_points",
    "StudentService",
    "process_students",
    "LeaderboardService",
    "build_leaderboard",
    "build_class_leaderboard",
    "StatsService",
    "resolve_user_stats",
]
