"""Point and badge award request and result models."""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class AwardRequest(BaseModel):
    """Award points to one student."""
    model_config = ConfigDict(populate_by_name=True)

    classId: str
    studentUsername: str
    points: int = Field(gt=0, description="Points to add")
    reason: str = ""


class BulkAwardRequest(BaseModel):
    """Award the same number of points to several students."""
    model_config = ConfigDict(populate_by_name=True)

    studentIds: list[str] = Field(description="Processed student ids (classId-username)")
    points: int = Field(gt=0, description="Points to add to each student")
    reason: str = ""


class BadgeAwardRequest(BaseModel):
    """Award a badge to one student."""
    model_config = ConfigDict(populate_by_name=True)

    classId: str
    studentUsername: str
    badgeId: str = Field(description="Badge identifier in the badge sheet")
    badgeName: str = Field(min_length=1, description="Badge name appended to the student's badges")


class BulkBadgeAwardRequest(BaseModel):
    """Award the same badge to several students."""
    model_config = ConfigDict(populate_by_name=True)

    studentIds: list[str] = Field(description="Processed student ids (classId-username)")
    badgeId: str
    badgeName: str = Field(min_length=1)


class AwardResult(BaseModel):
    """
    Outcome of a single award.

    success reflects the award itself. A failed level write-back after a
    successful award keeps success=True, sets levelUpdated=False and
    reports the failure in error.
    """
    model_config = ConfigDict(populate_by_name=True)

    studentId: str
    success: bool
    newTotal: Optional[int] = Field(default=None, description="Points after the award, when reported")
    newLevel: Optional[int] = Field(default=None, description="Level reached by the award, if it is a level-up")
    levelUpdated: bool = Field(default=False, description="Whether the new level was written back")
    error: Optional[str] = None


class BulkAwardResult(BaseModel):
    """Outcome of a bulk award."""
    model_config = ConfigDict(populate_by_name=True)

    successful: int
    failed: int
    results: list[AwardResult]
