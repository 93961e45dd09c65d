#!/usr/bin/env python3
"""
Classroom Leaderboard Viewer
Prints the global or class leaderboard and, optionally, one student's stats.

Usage:
    python example.py [--class-id=c1] [--user=amy] [--limit=10]

Example:
    SHEETS_API_URL=https://script.google.com/macros/s/.../exec python example.py --class-id=c1 --user=amy
"""

import argparse
import asyncio
import sys
from typing import Optional

from tabulate import tabulate

from gamification.config import Config
from gamification.datasources import DataSourceError, SpreadsheetDataSource
from gamification.models import LeaderboardEntry, UserDashboardStats
from gamification.services import LeaderboardService, StatsService


def progress_bar(percent: float, width: int = 20) -> str:
    """Render a text progress bar"""
    filled = int(round(percent / 100 * width))
    return "#" * filled + "-" * (width - filled)


def print_leaderboard(entries: list[LeaderboardEntry], title: str):
    """Print leaderboard table"""
    print(f"\n{title} ({len(entries)} shown):")
    print("-" * 80)

    if not entries:
        print("No students with points yet")
        return

    table_data = [
        [i + 1, entry.fullName, entry.username, entry.points, entry.level, entry.badges]
        for i, entry in enumerate(entries)
    ]

    print(tabulate(
        table_data,
        headers=["Rank", "Name", "Username", "Points", "Level", "Badges"],
        tablefmt="grid"
    ))


def print_user_stats(username: str, stats: UserDashboardStats):
    """Print a student's stats"""
    print("=" * 80)
    print(f"STATS FOR {username}")
    print("=" * 80)

    if stats.rank == 0:
        print("No gamification record yet")
        return

    progress = stats.progress
    print(f"  Points:  {stats.points}")
    print(f"  Level:   {stats.level}")
    print(f"  Progress: [{progress_bar(progress.percent)}] "
          f"{progress.earnedInLevel}/{progress.neededForLevel} ({progress.percent:.0f}%)")
    print(f"  Rank:    {stats.rank} of {stats.totalStudents}")
    if stats.classRank is not None:
        print(f"  Class rank: {stats.classRank}")
    print(f"  Badges:  {', '.join(stats.badges) if stats.badges else '-'}")


async def run(class_id: Optional[str], user: Optional[str], limit: int) -> None:
    config = Config.from_env()
    datasource = SpreadsheetDataSource(
        api_url=config.sheets_api_url,
        request_timeout=config.request_timeout,
        max_retries=config.max_retries,
    )

    try:
        leaderboard_service = LeaderboardService(datasource)
        entries = await leaderboard_service.get_leaderboard(class_id=class_id, limit=limit)
        title = f"CLASS {class_id} LEADERBOARD" if class_id else "LEADERBOARD"
        print_leaderboard(entries, title)

        if user:
            stats_service = StatsService(datasource)
            stats = await stats_service.get_user_stats(username=user, class_id=class_id)
            print()
            print_user_stats(user, stats)
    finally:
        await datasource.close()


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Show the classroom leaderboard and student stats"
    )
    parser.add_argument(
        "--class-id",
        default=None,
        help="Show the leaderboard of one class"
    )
    parser.add_argument(
        "--user",
        default=None,
        help="Also show stats for this username"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of leaderboard entries (default: 10)"
    )

    args = parser.parse_args()

    if args.limit < 1:
        print(f"Error: --limit must be at least 1, got {args.limit}")
        sys.exit(1)

    try:
        asyncio.run(run(args.class_id, args.user, args.limit))
    except DataSourceError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print()
    print("=" * 80)


if __name__ == "__main__":
    main()
