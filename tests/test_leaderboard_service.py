import asyncio

from gamification.services.leaderboard_service import (
    LeaderboardService,
    build_class_leaderboard,
    build_leaderboard,
    rank_of,
)

from conftest import RECORDS, ROSTER


def test_sorted_by_points_with_stable_ties():
    records = [
        {"studentUsername": "x", "points": 50},
        {"studentUsername": "y", "points": 200},
        {"studentUsername": "z", "points": 200},
    ]

    leaderboard = build_leaderboard(records, [])

    assert [e.username for e in leaderboard] == ["y", "z", "x"]
    assert [e.fullName for e in leaderboard] == ["y", "z", "x"]


def test_zero_points_are_kept_and_missing_points_dropped():
    records = [
        {"studentUsername": "zero", "points": 0},
        {"studentUsername": "zero-str", "points": "0"},
        {"studentUsername": "none", "points": None},
        {"studentUsername": "empty", "points": ""},
        {"studentUsername": "absent"},
        {"studentUsername": "", "points": 10},
        {"points": 10},
    ]

    leaderboard = build_leaderboard(records, [])

    assert [e.username for e in leaderboard] == ["zero", "zero-str"]


def test_joins_full_name_and_reconciles_level():
    leaderboard = build_leaderboard(RECORDS, ROSTER)

    assert [(e.username, e.fullName) for e in leaderboard] == [
        ("cho", "Cho Chen"),
        ("amy", "Amy Adams"),
        ("ben", "Ben Brown"),
    ]
    cho, amy, ben = leaderboard
    assert (cho.points, cho.level, cho.badges) == (1800, 8, 1)
    assert (amy.points, amy.level, amy.badges) == (1200, 5, 2)
    assert (ben.points, ben.level, ben.badges) == (250, 2, 0)


def test_malformed_points_rank_as_zero():
    records = [
        {"studentUsername": "bad", "points": "N/A"},
        {"studentUsername": "good", "points": "10"},
    ]
    leaderboard = build_leaderboard(records, [])
    assert [(e.username, e.points) for e in leaderboard] == [("good", 10), ("bad", 0)]


def test_class_leaderboard_uses_roster_class():
    records = RECORDS + [
        # Record claims c1 but the roster puts eve in c2
        {"classId": "c1", "studentUsername": "eve", "points": 5000},
        # No roster entry at all
        {"classId": "c1", "studentUsername": "ghost", "points": 9000},
    ]
    roster = ROSTER + [{"username": "eve", "classId": "c2", "fullName": "Eve"}]

    c1 = build_class_leaderboard(records, roster, "c1")
    c2 = build_class_leaderboard(records, roster, "c2")

    assert [e.username for e in c1] == ["amy", "ben"]
    assert [e.username for e in c2] == ["eve", "cho"]


def test_class_leaderboard_unknown_class_is_empty():
    assert build_class_leaderboard(RECORDS, ROSTER, "c404") == []


def test_rank_of():
    leaderboard = build_leaderboard(RECORDS, ROSTER)
    assert rank_of(leaderboard, "cho") == 1
    assert rank_of(leaderboard, "ben") == 3
    assert rank_of(leaderboard, "dee") == 4


def test_service_applies_limit(datasource):
    service = LeaderboardService(datasource)
    leaderboard = asyncio.run(service.get_leaderboard(limit=2))
    assert [e.username for e in leaderboard] == ["cho", "amy"]


def test_service_class_leaderboard(datasource):
    service = LeaderboardService(datasource)
    leaderboard = asyncio.run(service.get_leaderboard(class_id="c1"))
    assert [e.username for e in leaderboard] == ["amy", "ben"]
