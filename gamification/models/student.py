"""Processed student view models."""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class ProcessedStudentData(BaseModel):
    """
    A roster student joined with their gamification record.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Composite id: classId (or 'no-class') and username")
    name: str
    username: Optional[str] = None
    className: str = Field(alias="class", description="Class display name")
    classId: Optional[str] = None
    points: int = Field(description="Parsed points, never negative")
    level: int = Field(description="Reconciled level (max of calculated and stored)")
    badges: int = Field(description="Number of badges")
    achievements: list[str] = Field(description="Badge names followed by achievement names")


class ProcessResult(BaseModel):
    """
    Processed students plus the duplicate-id diagnostic.

    A non-empty duplicateIds list means upstream identities collided;
    the students list is still complete.
    """
    model_config = ConfigDict(populate_by_name=True)

    students: list[ProcessedStudentData]
    duplicateIds: list[str] = Field(default_factory=list, description="Ids that occurred more than once")

    @property
    def has_duplicates(self) -> bool:
        return bool(self.duplicateIds)


class GamificationSummary(BaseModel):
    """Headline numbers for a set of processed students."""
    model_config = ConfigDict(populate_by_name=True)

    totalStudents: int
    averagePoints: int = Field(description="Mean points rounded half up")
    topStudent: Optional[ProcessedStudentData] = None


class ClassRanking(BaseModel):
    """Aggregate points for one class."""
    model_config = ConfigDict(populate_by_name=True)

    classId: str
    className: str
    studentCount: int
    totalPoints: int
    averagePoints: int = Field(description="Mean points rounded half up")
    topStudent: Optional[ProcessedStudentData] = None
