"""Stats service for a single user's points, level, badges and rank."""

import asyncio
from typing import Any, Iterable, Mapping, Optional, Union

from gamification.datasources import DataSource
from gamification.models import GamificationRecord, UserStats, UserDashboardStats
from .level_service import progress_to_next_level
from .leaderboard_service import build_class_leaderboard, rank_of
from .normalizer import (
    coerce_records,
    has_points,
    parse_points,
    record_level,
    split_list,
)


def resolve_user_stats(
    records: Iterable[Union[GamificationRecord, Mapping[str, Any]]],
    username: str,
) -> UserStats:
    """
    Resolve points, level, badges and rank for one user.

    A user without any record gets UserStats() (rank 0). Otherwise the
    rank is the 1-based position among all records that have points,
    ordered by points descending, or that count + 1 when the user's
    record has no points value.
    """
    record_list = coerce_records(records)
    record = next((r for r in record_list if r.studentUsername == username), None)

    if record is None:
        return UserStats(points=0, level=1, badges=[], rank=0)

    ranked = [r for r in record_list if has_points(r.points)]
    ranked.sort(key=lambda r: parse_points(r.points), reverse=True)

    rank = next(
        (i + 1 for i, r in enumerate(ranked) if r.studentUsername == username),
        len(ranked) + 1,
    )

    return UserStats(
        points=parse_points(record.points),
        level=record_level(record),
        badges=split_list(record.badges),
        rank=rank,
    )


class StatsService:
    """Service for the student dashboard stats."""

    def __init__(self, datasource: DataSource):
        self.datasource = datasource

    async def get_user_stats(
        self,
        username: str,
        class_id: Optional[str] = None,
    ) -> UserDashboardStats:
        """
        Get dashboard stats for a user.

        Args:
            username: Student username
            class_id: The student's class, enables classRank

        Returns:
            UserDashboardStats with level progress, roster size and class rank
        """
        roster, records = await asyncio.gather(
            self.datasource.get_students(),
            self.datasource.get_gamification(),
        )

        stats = resolve_user_stats(records, username)

        class_rank = None
        if class_id:
            class_leaderboard = build_class_leaderboard(records, roster, class_id)
            class_rank = rank_of(class_leaderboard, username)

        return UserDashboardStats(
            **stats.model_dump(),
            progress=progress_to_next_level(stats.points),
            totalStudents=len(roster),
            classRank=class_rank,
        )
