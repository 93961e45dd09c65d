"""Per-user progress and stats models."""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class LevelProgress(BaseModel):
    """
    Progress inside the current level.

    percent is always within [0, 100].
    """
    model_config = ConfigDict(populate_by_name=True)

    earnedInLevel: int = Field(description="Points earned since the current level threshold")
    neededForLevel: int = Field(description="Width of the current level band")
    percent: float = Field(ge=0, le=100)


class UserStats(BaseModel):
    """
    Gamification stats for a single user.

    rank 0 means the user has no record yet.
    """
    model_config = ConfigDict(populate_by_name=True)

    points: int = 0
    level: int = 1
    badges: list[str] = Field(default_factory=list)
    rank: int = 0


class UserDashboardStats(UserStats):
    """UserStats enriched for the student dashboard."""

    progress: LevelProgress
    totalStudents: int = Field(description="Number of roster rows")
    classRank: Optional[int] = Field(default=None, description="Rank in the class leaderboard, None without a class")


class LevelStatus(BaseModel):
    """Level and progress for a point total."""
    model_config = ConfigDict(populate_by_name=True)

    points: int
    level: int = Field(description="Level calculated from points alone")
    progress: LevelProgress
