import asyncio

from gamification.models import RosterEntry
from gamification.services.student_service import (
    StudentService,
    badge_recipients,
    dedupe_roster,
    filter_students,
    find_duplicate_ids,
    process_students,
    rank_classes,
    summarize_students,
)

from conftest import RECORDS, ROSTER


def _by_username(result):
    return {s.username: s for s in result.students}


def test_end_to_end_single_student():
    roster = [{"username": "amy", "classId": "c1", "fullName": "Amy"}]
    records = [{"studentUsername": "amy", "classId": "c1", "points": "1200", "level": "3",
                "badges": "gold,silver", "achievements": ""}]

    result = process_students(roster, records)

    assert len(result.students) == 1
    amy = result.students[0]
    assert amy.id == "c1-amy"
    assert amy.name == "Amy"
    assert amy.points == 1200
    assert amy.level == 5
    assert amy.badges == 2
    assert amy.achievements == ["gold", "silver"]
    assert amy.className == "Unknown Class"
    assert not result.has_duplicates


def test_duplicate_roster_rows_collapse_to_one():
    roster = [{"username": "a", "classId": "c1"}, {"username": "a", "classId": "c1"}]
    result = process_students(roster, [])
    assert [s.id for s in result.students] == ["c1-a"]


def test_dedupe_keeps_first_occurrence():
    roster = [
        RosterEntry(username="a", classId="c1", fullName="First"),
        RosterEntry(username="b", classId=None),
        RosterEntry(username="a", classId="c1", fullName="Second"),
        RosterEntry(username="b", classId=""),
    ]
    unique = dedupe_roster(roster)
    assert [(e.username, e.fullName) for e in unique] == [("a", "First"), ("b", None)]
    assert unique[1].key == "no-class-b"


def test_same_username_in_two_classes_is_two_students():
    roster = [{"username": "amy", "classId": "c1"}, {"username": "amy", "classId": "c2"}]
    records = [{"studentUsername": "amy", "classId": "c2", "points": 300}]

    result = process_students(roster, records)

    assert [(s.id, s.points) for s in result.students] == [("c1-amy", 0), ("c2-amy", 300)]


def test_record_does_not_match_on_username_alone():
    roster = [{"username": "amy", "classId": "c1"}]
    records = [{"studentUsername": "amy", "classId": "c2", "points": 900, "level": 7}]

    amy = process_students(roster, records).students[0]

    assert amy.points == 0
    assert amy.level == 1


def test_malformed_numbers_do_not_raise():
    roster = [{"username": "amy", "classId": "c1"}]
    records = [{"studentUsername": "amy", "classId": "c1", "points": "N/A", "level": "high"}]

    amy = process_students(roster, records).students[0]

    assert amy.points == 0
    assert amy.level == 1


def test_badges_and_achievements_are_concatenated():
    result = process_students(ROSTER, RECORDS)
    cho = _by_username(result)["cho"]
    assert cho.badges == 1
    assert cho.achievements == ["gold", "quiz master", "early bird"]
    assert cho.level == 8


def test_student_without_record_gets_defaults():
    dee = _by_username(process_students(ROSTER, RECORDS))["dee"]
    assert dee.name == "dee"
    assert dee.points == 0
    assert dee.level == 1
    assert dee.badges == 0
    assert dee.achievements == []


def test_inputs_are_not_mutated():
    roster = [dict(r) for r in ROSTER]
    records = [dict(r) for r in RECORDS]
    process_students(roster, records)
    assert roster == ROSTER
    assert records == RECORDS


def test_find_duplicate_ids():
    assert find_duplicate_ids(["a", "b", "a", "c", "a"]) == ["a", "a"]
    assert find_duplicate_ids(["a", "b"]) == []


def test_filter_students():
    students = process_students(ROSTER, RECORDS).students

    assert [s.username for s in filter_students(students, class_id="c1")] == ["amy", "ben"]
    assert [s.username for s in filter_students(students, level=8)] == ["cho"]
    assert [s.username for s in filter_students(students, search="class 2")] == ["cho", "dee"]
    assert [s.username for s in filter_students(students, search="AMY")] == ["amy"]
    assert filter_students(students, class_id="c1", level=8) == []


def test_summarize_students():
    summary = summarize_students(process_students(ROSTER, RECORDS).students)
    assert summary.totalStudents == 4
    # 3250 / 4 = 812.5 rounds up
    assert summary.averagePoints == 813
    assert summary.topStudent.username == "cho"


def test_summarize_empty():
    summary = summarize_students([])
    assert summary.totalStudents == 0
    assert summary.averagePoints == 0
    assert summary.topStudent is None


def test_top_student_first_wins_ties():
    roster = [{"username": "a", "classId": "c1"}, {"username": "b", "classId": "c1"}]
    records = [
        {"studentUsername": "a", "classId": "c1", "points": 100},
        {"studentUsername": "b", "classId": "c1", "points": 100},
    ]
    summary = summarize_students(process_students(roster, records).students)
    assert summary.topStudent.username == "a"


def test_rank_classes():
    rankings = rank_classes(process_students(ROSTER, RECORDS).students)

    assert [r.classId for r in rankings] == ["c2", "c1"]
    c2, c1 = rankings
    assert (c2.className, c2.studentCount, c2.totalPoints, c2.averagePoints) == ("Class 2B", 2, 1800, 900)
    assert (c1.className, c1.studentCount, c1.totalPoints, c1.averagePoints) == ("Class 1A", 2, 1450, 725)
    assert c1.topStudent.username == "amy"


def test_rank_classes_skips_students_without_class_id():
    students = process_students([{"username": "x", "classId": "c9"}], []).students
    # Class name falls back to "Unknown Class", which still names the class
    assert [r.className for r in rank_classes(students)] == ["Unknown Class"]
    assert rank_classes(process_students([{"username": "y"}], []).students) == []


def test_badge_recipients():
    students = process_students(ROSTER, RECORDS).students
    assert [s.username for s in badge_recipients(students, "gold")] == ["amy", "cho"]
    assert badge_recipients(students, "bronze") == []


def test_service_get_students_filters(datasource):
    service = StudentService(datasource)
    result = asyncio.run(service.get_students(class_id="c2"))
    assert [s.username for s in result.students] == ["cho", "dee"]
    assert result.duplicateIds == []


def test_service_award_triggers_level_up(datasource):
    service = StudentService(datasource)

    result = asyncio.run(service.award_points_to("c1", "ben", 100, reason="homework"))

    assert result.success
    assert result.studentId == "c1-ben"
    assert result.newTotal == 350
    assert result.newLevel == 3
    assert result.levelUpdated
    assert datasource.awards == [("c1", "ben", 100, "homework")]
    assert datasource.level_updates == [("c1", "ben", 3)]


def test_service_award_without_level_up(datasource):
    service = StudentService(datasource)

    result = asyncio.run(service.award_points_to("c1", "amy", 100))

    assert result.success
    assert result.newTotal == 1300
    assert result.newLevel is None
    assert datasource.level_updates == []


def test_service_award_unknown_student(datasource):
    service = StudentService(datasource)
    result = asyncio.run(service.award_points_to("c1", "zed", 10))
    assert not result.success
    assert result.error == "Student not found"
    assert datasource.awards == []


def test_service_bulk_award_reports_failures(make_datasource):
    datasource = make_datasource(fail_awards_for={"amy"})
    service = StudentService(datasource)

    result = asyncio.run(service.award_points_bulk(["c1-amy", "c1-ben", "c9-zed"], 50))

    assert result.successful == 1
    assert result.failed == 2
    by_id = {r.studentId: r for r in result.results}
    assert by_id["c1-ben"].success
    assert by_id["c1-ben"].newTotal == 300
    assert "cannot award amy" in by_id["c1-amy"].error
    assert by_id["c9-zed"].error == "Student not found"


def test_service_bulk_award_collects_transport_errors(make_datasource):
    datasource = make_datasource(unreachable_for={"amy"})
    service = StudentService(datasource)

    result = asyncio.run(service.award_points_bulk(["c1-amy", "c1-ben"], 50))

    assert result.successful == 1
    assert result.failed == 1
    by_id = {r.studentId: r for r in result.results}
    assert not by_id["c1-amy"].success
    assert "500" in by_id["c1-amy"].error
    assert by_id["c1-ben"].success
    assert by_id["c1-ben"].newTotal == 300


def test_service_award_transport_error_is_a_failed_result(make_datasource):
    datasource = make_datasource(unreachable_for={"ben"})
    service = StudentService(datasource)

    result = asyncio.run(service.award_points_to("c1", "ben", 100))

    assert not result.success
    assert result.newTotal is None
    assert datasource.level_updates == []


def test_service_level_write_back_failure_keeps_award(make_datasource):
    datasource = make_datasource(fail_level_updates=True)
    service = StudentService(datasource)

    result = asyncio.run(service.award_points_to("c1", "ben", 100))

    assert result.success
    assert result.newTotal == 350
    assert result.newLevel == 3
    assert not result.levelUpdated
    assert "sheet locked" in result.error
    assert datasource.awards == [("c1", "ben", 100, "")]


def test_service_bulk_level_write_back_failure_counts_as_success(make_datasource):
    datasource = make_datasource(fail_level_updates=True)
    service = StudentService(datasource)

    result = asyncio.run(service.award_points_bulk(["c1-ben", "c1-amy"], 100))

    assert result.successful == 2
    assert result.failed == 0
    by_id = {r.studentId: r for r in result.results}
    assert not by_id["c1-ben"].levelUpdated
    assert by_id["c1-amy"].error is None


def test_service_badge_award_triggers_level_up(datasource):
    service = StudentService(datasource)

    result = asyncio.run(service.award_badge_to("c1", "ben", "b7", "Helper"))

    assert result.success
    assert result.newTotal == 300
    assert result.newLevel == 3
    assert result.levelUpdated
    assert datasource.badge_awards == [("c1", "ben", "b7", "Helper")]
    assert datasource.level_updates == [("c1", "ben", 3)]
    assert datasource.awards == []


def test_service_badge_award_unknown_student(datasource):
    service = StudentService(datasource)
    result = asyncio.run(service.award_badge_to("c2", "zed", "b7", "Helper"))
    assert not result.success
    assert result.studentId == "c2-zed"
    assert datasource.badge_awards == []


def test_service_badge_bulk_award(make_datasource):
    datasource = make_datasource(fail_awards_for={"cho"})
    service = StudentService(datasource)

    result = asyncio.run(service.award_badge_bulk(["c1-amy", "c2-cho", "c2-dee"], "b1", "Gold"))

    assert result.successful == 2
    assert result.failed == 1
    by_id = {r.studentId: r for r in result.results}
    assert by_id["c1-amy"].newTotal == 1250
    assert by_id["c1-amy"].newLevel is None
    assert "cannot award cho" in by_id["c2-cho"].error
    # dee has no record, so the store reports no total
    assert by_id["c2-dee"].success
    assert by_id["c2-dee"].newTotal is None
    assert datasource.level_updates == []
