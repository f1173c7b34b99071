"""Tests for schedule metrics, statistics and failure diagnostics."""

from timetable_engine.scheduler.diagnostics import (
    DiagnosticsCollector,
    calculate_schedule_metrics,
    calculate_schedule_statistics,
    population_stddev,
    teacher_loads,
)
from timetable_engine.scheduler.models import (
    ClassroomType,
    Day,
    FailureReason,
    ScheduleItem,
    Session,
    SessionType,
)


class TestMetrics:
    """Tests for calculate_schedule_metrics function."""

    def test_margins_and_waste(self, make_course, make_classroom):
        courses = [
            make_course(1, teacher_id=1, departments=[("A", 30)]),
            make_course(2, teacher_id=2, departments=[("B", 10)]),
        ]
        rooms = [make_classroom(100, capacity=40)]
        schedule = [
            ScheduleItem(1, 100, Day.MONDAY, "08:00-09:00", SessionType.THEORY),
            ScheduleItem(2, 100, Day.MONDAY, "09:00-10:00", SessionType.THEORY),
        ]
        metrics = calculate_schedule_metrics(schedule, courses, rooms)
        assert metrics.avg_capacity_margin == 50.0
        assert metrics.max_capacity_waste == 75.0
        assert metrics.teacher_load_stddev == 0.0

    def test_empty_schedule(self):
        metrics = calculate_schedule_metrics([], [], [])
        assert metrics.avg_capacity_margin == 0.0
        assert metrics.max_capacity_waste == 0.0

    def test_teacher_loads(self, make_course):
        course = make_course(1, teacher_id=4)
        schedule = [
            ScheduleItem(1, 100, Day.MONDAY, "08:00-10:00", SessionType.THEORY, session_hours=2),
            ScheduleItem(1, 100, Day.MONDAY, "10:00-11:00", SessionType.THEORY),
        ]
        assert teacher_loads(schedule, {1: course}) == {4: 3}

    def test_population_stddev(self):
        assert population_stddev([]) == 0.0
        assert population_stddev([5]) == 0.0
        assert population_stddev([2, 4, 4, 4, 5, 5, 7, 9]) == 2.0


class TestStatistics:
    """Tests for calculate_schedule_statistics function."""

    def test_counts(self, make_classroom):
        rooms = [
            make_classroom(100, name="A-101"),
            make_classroom(101, name="LAB-1", type=ClassroomType.LAB),
        ]
        schedule = [
            ScheduleItem(1, 100, Day.WEDNESDAY, "08:00-09:00", SessionType.THEORY),
            ScheduleItem(1, 100, Day.MONDAY, "08:00-09:00", SessionType.THEORY),
            ScheduleItem(2, 101, Day.MONDAY, "09:00-10:00", SessionType.LAB),
        ]
        stats = calculate_schedule_statistics(schedule, rooms)
        assert list(stats.by_day.items()) == [("monday", 2), ("wednesday", 1)]
        assert stats.by_classroom == {"A-101": 2, "LAB-1": 1}
        assert stats.by_session_type == {"theory": 2, "lab": 1}

    def test_empty(self):
        stats = calculate_schedule_statistics([], [])
        assert stats.by_day == {}


class TestDiagnosticsCollector:
    """Tests for DiagnosticsCollector."""

    def test_records_grouped_by_day(self, make_course):
        course = make_course(1, code="PHYS101")
        collector = DiagnosticsCollector()
        diagnostic = collector.new_session(Session(SessionType.THEORY, 2))

        collector.record(diagnostic, Day.MONDAY, "08:00-10:00", FailureReason.TEACHER_CONFLICT, "x")
        collector.record(diagnostic, Day.MONDAY, "09:00-11:00", FailureReason.TEACHER_CONFLICT, "x")
        collector.record(diagnostic, Day.TUESDAY, "08:00-10:00", FailureReason.NO_CLASSROOM, "y")
        collector.add_failure(course, diagnostic)

        assert collector.has_failures(1)
        assert not collector.has_failures(2)
        assert [d.day for d in diagnostic.attempted_days] == [Day.MONDAY, Day.TUESDAY]
        assert diagnostic.reason_counts() == {"teacher_conflict": 2, "no_classroom": 1}

        summary = collector.reason_summary(1)
        assert summary.startswith("No suitable time slot or classroom found")
        assert "teacher conflicts: 2" in summary
        assert "no classroom: 1" in summary

        built = collector.build()
        assert len(built) == 1
        assert built[0].code == "PHYS101"
        assert built[0].to_dict()["failed_sessions"][0]["session_hours"] == 2

    def test_summary_without_attempts(self, make_course):
        collector = DiagnosticsCollector()
        collector.add_failure(make_course(1), collector.new_session(Session(SessionType.LAB, 1)))
        assert collector.reason_summary(1) == "No suitable time slot or classroom found"
