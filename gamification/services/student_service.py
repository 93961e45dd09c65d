"""Student service for joining the roster with gamification records."""

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Union

import httpx

from gamification.datasources import DataSource, DataSourceError
from gamification.models import (
    GamificationRecord,
    RosterEntry,
    ProcessedStudentData,
    ProcessResult,
    GamificationSummary,
    ClassRanking,
    AwardResult,
    BulkAwardResult,
)
from .level_service import calculate_level, check_level_up
from .normalizer import (
    coerce_records,
    coerce_roster,
    parse_level,
    parse_points,
    reconcile_level,
    split_list,
)

logger = logging.getLogger(__name__)

UNKNOWN_CLASS = "Unknown Class"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def dedupe_roster(roster: Iterable[RosterEntry]) -> list[RosterEntry]:
    """Keep the first roster entry for each classId/username key."""
    seen: set[str] = set()
    unique: list[RosterEntry] = []
    for entry in roster:
        if entry.key in seen:
            continue
        seen.add(entry.key)
        unique.append(entry)
    return unique


def find_duplicate_ids(ids: Iterable[str]) -> list[str]:
    """Ids that repeat an earlier one, once per repeat, in order."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for student_id in ids:
        if student_id in seen:
            duplicates.append(student_id)
        else:
            seen.add(student_id)
    return duplicates


def _find_record(
    records: list[GamificationRecord], entry: RosterEntry
) -> Optional[GamificationRecord]:
    for record in records:
        if record.studentUsername == entry.username and record.classId == entry.classId:
            return record
    return None


def process_student(
    entry: RosterEntry, record: Optional[GamificationRecord]
) -> ProcessedStudentData:
    """Build the processed view of one roster entry and its record (if any)."""
    if record is None:
        record = GamificationRecord()

    points = parse_points(record.points)
    level = reconcile_level(calculate_level(points), parse_level(record.level))
    badge_names = split_list(record.badges)
    achievement_names = split_list(record.achievements)

    return ProcessedStudentData(
        id=entry.key,
        name=entry.fullName or entry.username or "",
        username=entry.username,
        className=entry.class_name or UNKNOWN_CLASS,
        classId=entry.classId,
        points=points,
        level=level,
        badges=len(badge_names),
        achievements=badge_names + achievement_names,
    )


def process_students(
    roster: Iterable[Union[RosterEntry, Mapping[str, Any]]],
    records: Iterable[Union[GamificationRecord, Mapping[str, Any]]],
) -> ProcessResult:
    """
    Join each unique roster student to their gamification record.

    Records match on both username and classId. Students without a record
    get zero points and level 1. Repeated ids in the output are reported
    in ProcessResult.duplicateIds; the student list is always complete.
    """
    unique_roster = dedupe_roster(coerce_roster(roster))
    record_list = coerce_records(records)

    students = [
        process_student(entry, _find_record(record_list, entry))
        for entry in unique_roster
    ]

    # Ids equal the dedupe key today, so this stays empty unless the two diverge.
    return ProcessResult(
        students=students,
        duplicateIds=find_duplicate_ids(s.id for s in students),
    )


def filter_students(
    students: Iterable[ProcessedStudentData],
    class_id: Optional[str] = None,
    level: Optional[int] = None,
    search: Optional[str] = None,
) -> list[ProcessedStudentData]:
    """
    Filter processed students.

    Args:
        students: Processed students
        class_id: Exact class id, None for all classes
        level: Exact level, None for all levels
        search: Case-insensitive substring of name, username or class name
    """
    query = (search or "").strip().lower()
    filtered = []
    for student in students:
        if class_id is not None and student.classId != class_id:
            continue
        if level is not None and student.level != level:
            continue
        if query and not (
            query in student.name.lower()
            or query in (student.username or "").lower()
            or query in student.className.lower()
        ):
            continue
        filtered.append(student)
    return filtered


def _top_student(students: list[ProcessedStudentData]) -> Optional[ProcessedStudentData]:
    # First student wins ties.
    top = None
    for student in students:
        if top is None or student.points > top.points:
            top = student
    return top


def summarize_students(students: list[ProcessedStudentData]) -> GamificationSummary:
    """Total students, average points and the top student."""
    if not students:
        return GamificationSummary(totalStudents=0, averagePoints=0, topStudent=None)

    total_points = sum(s.points for s in students)
    return GamificationSummary(
        totalStudents=len(students),
        averagePoints=_round_half_up(total_points / len(students)),
        topStudent=_top_student(students),
    )


def rank_classes(students: list[ProcessedStudentData]) -> list[ClassRanking]:
    """
    Aggregate points per class, best average first.

    Only students with both a class id and a class name define a class.
    """
    class_names: dict[str, str] = {}
    for student in students:
        if student.classId and student.className:
            class_names[student.classId] = student.className

    rankings = []
    for class_id, class_name in class_names.items():
        members = [s for s in students if s.classId == class_id]
        total_points = sum(s.points for s in members)
        rankings.append(ClassRanking(
            classId=class_id,
            className=class_name,
            studentCount=len(members),
            totalPoints=total_points,
            averagePoints=_round_half_up(total_points / len(members)) if members else 0,
            topStudent=_top_student(members),
        ))

    rankings.sort(key=lambda r: r.averagePoints, reverse=True)
    return rankings


def badge_recipients(
    students: Iterable[ProcessedStudentData], badge_name: str
) -> list[ProcessedStudentData]:
    """Students whose achievement list contains badge_name."""
    return [s for s in students if badge_name in s.achievements]


class StudentService:
    """Service for the class roster views and point and badge awards."""

    def __init__(self, datasource: DataSource):
        self.datasource = datasource

    async def process(self) -> ProcessResult:
        """Fetch both collections and process them, logging any id collisions."""
        roster, records = await asyncio.gather(
            self.datasource.get_students(),
            self.datasource.get_gamification(),
        )
        result = process_students(roster, records)
        if result.has_duplicates:
            logger.warning(f"Duplicate student ids detected: {result.duplicateIds}")
        return result

    async def get_students(
        self,
        class_id: Optional[str] = None,
        level: Optional[int] = None,
        search: Optional[str] = None,
    ) -> ProcessResult:
        """
        Get processed students, optionally filtered.

        The duplicate-id diagnostic always covers the unfiltered set.
        """
        result = await self.process()
        return ProcessResult(
            students=filter_students(result.students, class_id, level, search),
            duplicateIds=result.duplicateIds,
        )

    async def get_summary(self) -> GamificationSummary:
        result = await self.process()
        return summarize_students(result.students)

    async def get_class_rankings(self) -> list[ClassRanking]:
        result = await self.process()
        return rank_classes(result.students)

    async def get_badge_recipients(self, badge_name: str) -> list[ProcessedStudentData]:
        result = await self.process()
        return badge_recipients(result.students, badge_name)

    async def _award(
        self,
        student: ProcessedStudentData,
        description: str,
        award_call: Callable[[], Awaitable[Optional[int]]],
    ) -> AwardResult:
        """
        Run one award and write back a level-up.

        The stored level is only updated when the new total reaches a
        level above the student's current (reconciled) level. Once the
        award went through the result is successful, even when the level
        write-back fails.
        """
        try:
            new_total = await award_call()
        except (DataSourceError, httpx.HTTPError) as e:
            logger.error(f"Awarding {description} to {student.id} failed: {e}")
            return AwardResult(studentId=student.id, success=False, error=str(e))

        new_level = check_level_up(student.level, new_total) if new_total is not None else None
        if new_level is None:
            return AwardResult(studentId=student.id, success=True, newTotal=new_total)

        logger.info(f"{student.id} reached level {new_level}")
        try:
            await self.datasource.update_level(
                class_id=student.classId,
                username=student.username,
                level=new_level,
            )
        except (DataSourceError, httpx.HTTPError) as e:
            logger.error(f"Writing level {new_level} for {student.id} failed: {e}")
            return AwardResult(
                studentId=student.id,
                success=True,
                newTotal=new_total,
                newLevel=new_level,
                levelUpdated=False,
                error=f"Level update failed: {e}",
            )

        return AwardResult(
            studentId=student.id,
            success=True,
            newTotal=new_total,
            newLevel=new_level,
            levelUpdated=True,
        )

    async def _award_bulk(
        self,
        student_ids: list[str],
        award_one: Callable[[ProcessedStudentData], Awaitable[AwardResult]],
    ) -> BulkAwardResult:
        """Run award_one concurrently per student id; unknown ids are reported, not raised."""
        result = await self.process()
        by_id = {s.id: s for s in result.students}

        async def run(student_id: str) -> AwardResult:
            student = by_id.get(student_id)
            if student is None:
                return AwardResult(studentId=student_id, success=False, error="Student not found")
            return await award_one(student)

        results = await asyncio.gather(*(run(sid) for sid in student_ids))
        successful = sum(1 for r in results if r.success)

        return BulkAwardResult(
            successful=successful,
            failed=len(results) - successful,
            results=list(results),
        )

    async def _find_student(self, class_id: str, username: str) -> tuple[str, Optional[ProcessedStudentData]]:
        result = await self.process()
        student_id = RosterEntry(username=username, classId=class_id).key
        student = next((s for s in result.students if s.id == student_id), None)
        return student_id, student

    async def award_points(
        self,
        student: ProcessedStudentData,
        points: int,
        reason: str = "",
    ) -> AwardResult:
        """Award points to a student and write back a level-up."""
        return await self._award(
            student,
            f"{points} points",
            lambda: self.datasource.award_points(
                class_id=student.classId,
                username=student.username,
                points=points,
                reason=reason,
            ),
        )

    async def award_badge(
        self,
        student: ProcessedStudentData,
        badge_id: str,
        badge_name: str,
    ) -> AwardResult:
        """Award a badge to a student and write back a level-up from its points."""
        return await self._award(
            student,
            f"badge {badge_name!r}",
            lambda: self.datasource.award_badge(
                class_id=student.classId,
                username=student.username,
                badge_id=badge_id,
                badge_name=badge_name,
            ),
        )

    async def award_points_bulk(
        self,
        student_ids: list[str],
        points: int,
        reason: str = "",
    ) -> BulkAwardResult:
        """
        Award the same points to several students concurrently.

        Unknown ids and failed awards are reported per student.
        """
        return await self._award_bulk(
            student_ids,
            lambda student: self.award_points(student, points, reason),
        )

    async def award_badge_bulk(
        self,
        student_ids: list[str],
        badge_id: str,
        badge_name: str,
    ) -> BulkAwardResult:
        """Award the same badge to several students concurrently."""
        return await self._award_bulk(
            student_ids,
            lambda student: self.award_badge(student, badge_id, badge_name),
        )

    async def award_points_to(
        self,
        class_id: str,
        username: str,
        points: int,
        reason: str = "",
    ) -> AwardResult:
        """Award points to the student identified by class id and username."""
        student_id, student = await self._find_student(class_id, username)
        if student is None:
            return AwardResult(studentId=student_id, success=False, error="Student not found")
        return await self.award_points(student, points, reason)

    async def award_badge_to(
        self,
        class_id: str,
        username: str,
        badge_id: str,
        badge_name: str,
    ) -> AwardResult:
        """Award a badge to the student identified by class id and username."""
        student_id, student = await self._find_student(class_id, username)
        if student is None:
            return AwardResult(studentId=student_id, success=False, error="Student not found")
        return await self.award_badge(student, badge_id, badge_name)
