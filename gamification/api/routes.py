"""API routes for the classroom gamification service."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from gamification.config import Config
from gamification.datasources import DataSource
from gamification.models import (
    LevelStatus,
    ProcessResult,
    ProcessedStudentData,
    GamificationSummary,
    ClassRanking,
    LeaderboardEntry,
    UserDashboardStats,
    AwardRequest,
    BadgeAwardRequest,
    BulkBadgeAwardRequest,
    AwardResult,
    BulkAwardRequest,
    BulkAwardResult,
)
from gamification.services import (
    StudentService,
    LeaderboardService,
    StatsService,
    calculate_level,
    progress_to_next_level,
)
from .dependencies import get_config, get_datasource

router = APIRouter(prefix="/v1")


@router.get("/levels/progress", response_model=LevelStatus)
async def get_level_progress(
    points: int = Query(
        ...,
        ge=0,
        description="Accumulated points",
        examples=[1200],
    ),
) -> LevelStatus:
    """
    Get the level and level progress for a point total.

    Returns: points, level, progress (earnedInLevel, neededForLevel, percent)
    """
    return LevelStatus(
        points=points,
        level=calculate_level(points),
        progress=progress_to_next_level(points),
    )


@router.get("/students", response_model=ProcessResult)
async def get_students(
    classId: Optional[str] = Query(
        None,
        description="Class filter",
        examples=["c1"],
    ),
    level: Optional[int] = Query(
        None,
        ge=1,
        description="Level filter",
    ),
    search: Optional[str] = Query(
        None,
        description="Search by name, username or class name",
    ),
    datasource: DataSource = Depends(get_datasource),
) -> ProcessResult:
    """
    Get roster students joined with their gamification records.

    Returns: students and duplicateIds (ids that occurred more than once)
    """
    service = StudentService(datasource)
    return await service.get_students(
        class_id=classId,
        level=level,
        search=search,
    )


@router.get("/students/summary", response_model=GamificationSummary)
async def get_students_summary(
    datasource: DataSource = Depends(get_datasource),
) -> GamificationSummary:
    """
    Get headline numbers for all students.

    Returns: totalStudents, averagePoints, topStudent
    """
    service = StudentService(datasource)
    return await service.get_summary()


@router.get("/classes/rankings", response_model=list[ClassRanking])
async def get_class_rankings(
    datasource: DataSource = Depends(get_datasource),
) -> list[ClassRanking]:
    """
    Get classes ranked by average points.

    Returns: classId, className, studentCount, totalPoints, averagePoints, topStudent
    """
    service = StudentService(datasource)
    return await service.get_class_rankings()


@router.get("/badges/{badgeName}/recipients", response_model=list[ProcessedStudentData])
async def get_badge_recipients(
    badgeName: str = Path(..., description="Badge name"),
    datasource: DataSource = Depends(get_datasource),
) -> list[ProcessedStudentData]:
    """Get the students who hold a badge."""
    service = StudentService(datasource)
    return await service.get_badge_recipients(badgeName)


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def get_leaderboard(
    classId: Optional[str] = Query(
        None,
        description="Restrict to one class",
        examples=["c1"],
    ),
    limit: Optional[int] = Query(
        None,
        ge=1,
        description="Maximum number of entries (defaults to the configured limit)",
    ),
    datasource: DataSource = Depends(get_datasource),
    config: Config = Depends(get_config),
) -> list[LeaderboardEntry]:
    """
    Get the global or class leaderboard, highest points first.

    Returns ranked list: username, fullName, points, level, badges
    """
    service = LeaderboardService(datasource)
    return await service.get_leaderboard(
        class_id=classId,
        limit=limit if limit is not None else config.leaderboard_limit,
    )


@router.get("/stats/{username}", response_model=UserDashboardStats)
async def get_user_stats(
    username: str = Path(..., description="Student username"),
    classId: Optional[str] = Query(
        None,
        description="The student's class, enables classRank",
    ),
    datasource: DataSource = Depends(get_datasource),
) -> UserDashboardStats:
    """
    Get dashboard stats for a student.

    Returns: points, level, badges, rank, progress, totalStudents, classRank
    """
    service = StatsService(datasource)
    return await service.get_user_stats(username=username, class_id=classId)


@router.post("/points/award", response_model=AwardResult)
async def award_points(
    request: AwardRequest,
    datasource: DataSource = Depends(get_datasource),
) -> AwardResult:
    """
    Award points to one student, raising the stored level on a level-up.

    Returns: studentId, success, newTotal, newLevel, levelUpdated, error
    """
    service = StudentService(datasource)
    return await service.award_points_to(
        class_id=request.classId,
        username=request.studentUsername,
        points=request.points,
        reason=request.reason,
    )


@router.post("/points/award/bulk", response_model=BulkAwardResult)
async def award_points_bulk(
    request: BulkAwardRequest,
    datasource: DataSource = Depends(get_datasource),
) -> BulkAwardResult:
    """
    Award the same points to several students.

    Returns: successful and failed counts plus per-student results
    """
    service = StudentService(datasource)
    return await service.award_points_bulk(
        student_ids=request.studentIds,
        points=request.points,
        reason=request.reason,
    )


@router.post("/badges/award", response_model=AwardResult)
async def award_badge(
    request: BadgeAwardRequest,
    datasource: DataSource = Depends(get_datasource),
) -> AwardResult:
    """
    Award a badge to one student, raising the stored level on a level-up.

    Returns: studentId, success, newTotal, newLevel, levelUpdated, error
    """
    service = StudentService(datasource)
    return await service.award_badge_to(
        class_id=request.classId,
        username=request.studentUsername,
        badge_id=request.badgeId,
        badge_name=request.badgeName,
    )


@router.post("/badges/award/bulk", response_model=BulkAwardResult)
async def award_badge_bulk(
    request: BulkBadgeAwardRequest,
    datasource: DataSource = Depends(get_datasource),
) -> BulkAwardResult:
    """
    Award the same badge to several students.

    Returns: successful and failed counts plus per-student results
    """
    service = StudentService(datasource)
    return await service.award_badge_bulk(
        student_ids=request.studentIds,
        badge_id=request.badgeId,
        badge_name=request.badgeName,
    )
