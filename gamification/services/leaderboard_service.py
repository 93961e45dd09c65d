"""Leaderboard service for ranking students by points."""

import asyncio
from typing import Any, Iterable, Mapping, Optional, Union

from gamification.datasources import DataSource
from gamification.models import GamificationRecord, RosterEntry, LeaderboardEntry
from .normalizer import (
    coerce_records,
    coerce_roster,
    has_points,
    parse_points,
    record_level,
    split_list,
)


def _find_by_username(roster: list[RosterEntry], username: Optional[str]) -> Optional[RosterEntry]:
    for entry in roster:
        if entry.username == username:
            return entry
    return None


def build_leaderboard(
    records: Iterable[Union[GamificationRecord, Mapping[str, Any]]],
    roster: Iterable[Union[RosterEntry, Mapping[str, Any]]],
) -> list[LeaderboardEntry]:
    """
    Rank records by points, highest first.

    Records without a username or without a points value are left out;
    zero points still count. Equal points keep their input order.

    Args:
        records: Gamification records
        roster: Roster used to look up full names by username

    Returns:
        List of LeaderboardEntry sorted by points descending
    """
    roster_list = coerce_roster(roster)

    entries = []
    for record in coerce_records(records):
        if not record.studentUsername or not has_points(record.points):
            continue
        student = _find_by_username(roster_list, record.studentUsername)
        entries.append(LeaderboardEntry(
            username=record.studentUsername,
            fullName=(student.fullName if student else None) or record.studentUsername,
            points=parse_points(record.points),
            level=record_level(record),
            badges=len(split_list(record.badges)),
        ))

    # list.sort is stable, so ties keep input order
    entries.sort(key=lambda e: e.points, reverse=True)
    return entries


def build_class_leaderboard(
    records: Iterable[Union[GamificationRecord, Mapping[str, Any]]],
    roster: Iterable[Union[RosterEntry, Mapping[str, Any]]],
    class_id: str,
) -> list[LeaderboardEntry]:
    """
    Leaderboard restricted to one class.

    A record belongs to the class of the roster entry that shares its
    username; records with no roster entry are excluded.
    """
    roster_list = coerce_roster(roster)

    class_records = []
    for record in coerce_records(records):
        student = _find_by_username(roster_list, record.studentUsername)
        if student is not None and student.classId == class_id:
            class_records.append(record)

    class_roster = [entry for entry in roster_list if entry.classId == class_id]
    return build_leaderboard(class_records, class_roster)


def rank_of(entries: list[LeaderboardEntry], username: Optional[str]) -> int:
    """1-based position of username in entries, or len(entries) + 1 if absent."""
    for i, entry in enumerate(entries):
        if entry.username == username:
            return i + 1
    return len(entries) + 1


class LeaderboardService:
    """Service for generating student leaderboards."""

    def __init__(self, datasource: DataSource):
        self.datasource = datasource

    async def get_leaderboard(
        self,
        class_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[LeaderboardEntry]:
        """
        Generate the global or class leaderboard.

        Args:
            class_id: Restrict to one class, None for everyone
            limit: Keep only the first entries, None for all

        Returns:
            List of LeaderboardEntry sorted by points descending
        """
        roster, records = await asyncio.gather(
            self.datasource.get_students(),
            self.datasource.get_gamification(),
        )

        if class_id:
            leaderboard = build_class_leaderboard(records, roster, class_id)
        else:
            leaderboard = build_leaderboard(records, roster)

        if limit is not None:
            leaderboard = leaderboard[:limit]
        return leaderboard
