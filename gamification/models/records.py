"""Raw input rows as returned by the spreadsheet API."""

from typing import Any, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


def _identifier(value: Any) -> Optional[str]:
    """Sheets hand back numeric-looking identifiers as numbers."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


class GamificationRecord(BaseModel):
    """
    One gamification row per (class, student).

    Numeric and list fields are kept exactly as the sheet returned them
    (numbers, numeric strings, empty strings or missing). Use the
    normalizer functions to read them.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    classId: Optional[str] = Field(default=None, description="Class identifier")
    studentUsername: Optional[str] = Field(default=None, description="Student username, unique within a class")
    points: Any = Field(default=None, description="Accumulated points, possibly a numeric string")
    level: Any = Field(default=None, description="Stored level, possibly stale or manually overridden")
    badges: Any = Field(default=None, description="Comma-separated badge names")
    achievements: Any = Field(default=None, description="Comma-separated achievement names")
    updatedAt: Any = Field(default=None, description="Last update timestamp (informational)")

    @field_validator("classId", "studentUsername", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Optional[str]:
        return _identifier(value)


class RosterEntry(BaseModel):
    """
    One enrolled student from the roster sheet.

    The roster may contain the same (classId, username) pair more than once.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    username: Optional[str] = Field(default=None, description="Student username")
    classId: Optional[str] = Field(default=None, description="Class identifier")
    fullName: Optional[str] = Field(default=None, description="Display name")
    class_name: Optional[str] = Field(default=None, alias="class", description="Class display name")

    @field_validator("username", "classId", "fullName", "class_name", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Optional[str]:
        return _identifier(value)

    @property
    def key(self) -> str:
        """Composite identity used for deduplication and display ids."""
        return f"{self.classId or 'no-class'}-{self.username}"
