"""Abstract base class for data sources."""

from abc import ABC, abstractmethod
from typing import Optional


class DataSourceError(Exception):
    """The upstream store rejected a request or returned an unusable answer."""


class DataSource(ABC):
    """
    Abstract interface for the classroom data store.

    Rows are returned as plain dicts, exactly as the store holds them;
    parsing happens in the services.
    """

    @abstractmethod
    async def get_gamification(self) -> list[dict]:
        """
        Retrieve all gamification records.

        Returns:
            List of dicts with classId, studentUsername, points, level,
            badges, achievements and updatedAt fields (any may be missing)
        """
        pass

    @abstractmethod
    async def get_students(self) -> list[dict]:
        """
        Retrieve the student roster.

        Returns:
            List of dicts with username, classId, fullName and class fields.
            The same student may appear more than once.
        """
        pass

    @abstractmethod
    async def award_points(
        self,
        class_id: Optional[str],
        username: Optional[str],
        points: int,
        reason: str = "",
    ) -> Optional[int]:
        """
        Add points to a student's record.

        Args:
            class_id: Class identifier
            username: Student username
            points: Points to add
            reason: Free-text reason stored with the award

        Returns:
            The student's new point total, or None if the store did not report it
        """
        pass

    @abstractmethod
    async def award_badge(
        self,
        class_id: Optional[str],
        username: Optional[str],
        badge_id: str,
        badge_name: str,
    ) -> Optional[int]:
        """
        Append a badge to a student's record.

        The store credits the badge's point value along with it.

        Args:
            class_id: Class identifier
            username: Student username
            badge_id: Badge identifier in the badge sheet
            badge_name: Badge name added to the comma-separated badges field

        Returns:
            The student's new point total, or None if the store did not report it
        """
        pass

    @abstractmethod
    async def update_level(
        self,
        class_id: Optional[str],
        username: Optional[str],
        level: int,
    ) -> None:
        """Overwrite the stored level of a student's record."""
        pass

    async def close(self) -> None:
        """
        Clean up resources (e.g., close HTTP sessions).

        Override this if the data source holds resources that need cleanup.
        """
        pass
