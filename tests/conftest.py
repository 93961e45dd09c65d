from typing import Optional

import httpx
import pytest

from gamification.datasources import DataSource, DataSourceError

BADGE_POINTS = 50


class FakeDataSource(DataSource):
    """In-memory data source recording writes."""

    def __init__(
        self,
        students: Optional[list[dict]] = None,
        gamification: Optional[list[dict]] = None,
        fail_awards_for: Optional[set[str]] = None,
        unreachable_for: Optional[set[str]] = None,
        fail_level_updates: bool = False,
    ):
        self.students = students or []
        self.gamification = gamification or []
        self.fail_awards_for = fail_awards_for or set()
        self.unreachable_for = unreachable_for or set()
        self.fail_level_updates = fail_level_updates
        self.awards: list[tuple] = []
        self.badge_awards: list[tuple] = []
        self.level_updates: list[tuple] = []
        self.closed = False

    async def get_gamification(self) -> list[dict]:
        return [dict(row) for row in self.gamification]

    async def get_students(self) -> list[dict]:
        return [dict(row) for row in self.students]

    def _check_award(self, action: str, username) -> None:
        if username in self.fail_awards_for:
            raise DataSourceError(f"{action}: cannot award {username}")
        if username in self.unreachable_for:
            request = httpx.Request("POST", "https://sheet.example/exec")
            raise httpx.HTTPStatusError(
                "Server error '500 Internal Server Error'",
                request=request,
                response=httpx.Response(500, request=request),
            )

    def _add_points(self, class_id, username, points) -> Optional[dict]:
        for row in self.gamification:
            if row.get("studentUsername") == username and row.get("classId") == class_id:
                row["points"] = int(row.get("points") or 0) + points
                return row
        return None

    async def award_points(self, class_id, username, points, reason=""):
        self._check_award("awardPoints", username)
        self.awards.append((class_id, username, points, reason))
        row = self._add_points(class_id, username, points)
        return row["points"] if row is not None else None

    async def award_badge(self, class_id, username, badge_id, badge_name):
        self._check_award("awardBadge", username)
        self.badge_awards.append((class_id, username, badge_id, badge_name))
        row = self._add_points(class_id, username, BADGE_POINTS)
        if row is None:
            return None
        row["badges"] = ",".join(filter(None, [row.get("badges") or "", badge_name]))
        return row["points"]

    async def update_level(self, class_id, username, level):
        if self.fail_level_updates:
            raise DataSourceError("updateLevel: sheet locked")
        self.level_updates.append((class_id, username, level))

    async def close(self) -> None:
        self.closed = True


ROSTER = [
    {"username": "amy", "classId": "c1", "fullName": "Amy Adams", "class": "Class 1A"},
    {"username": "ben", "classId": "c1", "fullName": "Ben Brown", "class": "Class 1A"},
    {"username": "amy", "classId": "c1", "fullName": "Amy Adams", "class": "Class 1A"},
    {"username": "cho", "classId": "c2", "fullName": "Cho Chen", "class": "Class 2B"},
    {"username": "dee", "classId": "c2", "fullName": "", "class": "Class 2B"},
]

RECORDS = [
    {"classId": "c1", "studentUsername": "amy", "points": "1200", "level": "3",
     "badges": "gold,silver", "achievements": "", "updatedAt": "2024-01-01"},
    {"classId": "c1", "studentUsername": "ben", "points": 250, "level": 1,
     "badges": "", "achievements": "helper"},
    {"classId": "c2", "studentUsername": "cho", "points": "1800", "level": "8",
     "badges": "gold", "achievements": "quiz master, early bird"},
]


@pytest.fixture()
def make_datasource():
    def _make(students=None, gamification=None, **kwargs) -> FakeDataSource:
        return FakeDataSource(
            students=[dict(s) for s in (ROSTER if students is None else students)],
            gamification=[dict(r) for r in (RECORDS if gamification is None else gamification)],
            **kwargs,
        )
    return _make


@pytest.fixture()
def datasource(make_datasource) -> FakeDataSource:
    return make_datasource()
