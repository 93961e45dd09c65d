from .records import GamificationRecord, RosterEntry
from .student import (
    ProcessedStudentData,
    ProcessResult,
    GamificationSummary,
    ClassRanking,
)
from .leaderboard import LeaderboardEntry
from .stats import LevelProgress, LevelStatus, UserStats, UserDashboardStats
from .award import (
    AwardRequest,
    BulkAwardRequest,
    BadgeAwardRequest,
    BulkBadgeAwardRequest,
    AwardResult,
    BulkAwardResult,
)

__all__ = [
    "GamificationRecord",
    "RosterEntry",
    "ProcessedStudentData",
    "ProcessResult",
    "GamificationSummary",
    "ClassRanking",
    "LeaderboardEntry",
    "LevelProgress",
    "LevelStatus",
    "UserStats",
    "UserDashboardStats",
    "AwardRequest",
    "BulkAwardRequest",
    "BadgeAwardRequest",
    "BulkBadgeAwardRequest",
    "AwardResult",
    "BulkAwardResult",
]
