"""Leaderboard entry model for API responses."""

from pydantic import BaseModel, Field, ConfigDict


class LeaderboardEntry(BaseModel):
    """
    A single entry in the leaderboard.
    """
    model_config = ConfigDict(populate_by_name=True)

    username: str
    fullName: str = Field(description="Roster name, or the username when not on the roster")
    points: int
    level: int = Field(description="Reconciled level")
    badges: int = Field(description="Number of badges")
