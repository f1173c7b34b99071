"""Schedule quality metrics, distribution statistics and failure diagnostics."""

import math
from collections import defaultdict
from typing import Any

import pandas as pd

from .constants import NO_PLACEMENT_REASON
from .models import (
    ClassroomData,
    CourseData,
    CourseDiagnostic,
    Day,
    DayAttempt,
    FailureReason,
    ScheduleItem,
    ScheduleMetrics,
    ScheduleStatistics,
    Session,
    SessionDiagnostic,
    SlotAttempt,
)

# Display order for failure summaries
_REASON_LABELS = {
    FailureReason.TEACHER_UNAVAILABLE: "teacher unavailable",
    FailureReason.TEACHER_CONFLICT: "teacher conflicts",
    FailureReason.DEPARTMENT_CONFLICT: "department conflicts",
    FailureReason.NO_CLASSROOM: "no classroom",
    FailureReason.INSUFFICIENT_BLOCKS: "insufficient consecutive blocks",
}


def teacher_loads(
    schedule: list[ScheduleItem], course_index: dict[int, CourseData]
) -> dict[int, int]:
    """Sum placed session hours per teacher."""
    loads: dict[int, int] = defaultdict(int)
    for item in schedule:
        course = course_index.get(item.course_id)
        if course is not None and course.teacher_id is not None:
            loads[course.teacher_id] += item.session_hours
    return dict(loads)


def population_stddev(values: list[float]) -> float:
    """Population standard deviation, 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def calculate_schedule_metrics(
    schedule: list[ScheduleItem],
    courses: list[CourseData],
    classrooms: list[ClassroomData],
) -> ScheduleMetrics:
    """Compute quality metrics of a schedule.

    Args:
        schedule: Schedule items
        courses: Courses referenced by the items
        classrooms: Classrooms referenced by the items

    Returns:
        ScheduleMetrics with average capacity margin %, maximum capacity
        waste % and teacher-load standard deviation, rounded to one decimal
    """
    course_index = {c.id: c for c in courses}
    classroom_index = {c.id: c for c in classrooms}

    margins: list[float] = []
    max_waste = 0.0
    for item in schedule:
        course = course_index.get(item.course_id)
        classroom = classroom_index.get(item.classroom_id)
        if course is None or classroom is None:
            continue
        if classroom.capacity > 0:
            margin = (classroom.capacity - course.adjusted_seat_count) / classroom.capacity * 100
        else:
            margin = 0.0
        margins.append(margin)
        max_waste = max(max_waste, margin)

    avg_margin = sum(margins) / len(margins) if margins else 0.0
    loads = teacher_loads(schedule, course_index)

    return ScheduleMetrics(
        avg_capacity_margin=round(avg_margin, 1),
        max_capacity_waste=round(max_waste, 1),
        teacher_load_stddev=round(population_stddev(list(loads.values())), 1),
    )


def _counts(series: pd.Series) -> dict[str, int]:
    return {str(key): int(count) for key, count in series.value_counts().items()}


def calculate_schedule_statistics(
    schedule: list[ScheduleItem],
    classrooms: list[ClassroomData],
) -> ScheduleStatistics:
    """Count schedule items by day, classroom and session type.

    Args:
        schedule: Schedule items
        classrooms: Classrooms (for display names)

    Returns:
        ScheduleStatistics; days are listed in week order
    """
    if not schedule:
        return ScheduleStatistics()

    names = {c.id: c.name for c in classrooms}
    df = pd.DataFrame(
        [
            {
                "day": item.day.value,
                "classroom": names.get(item.classroom_id, str(item.classroom_id)),
                "session_type": item.session_type.value,
            }
            for item in schedule
        ]
    )

    by_day = _counts(df["day"])
    return ScheduleStatistics(
        by_day={day.value: by_day[day.value] for day in Day if day.value in by_day},
        by_classroom=_counts(df["classroom"]),
        by_session_type=_counts(df["session_type"]),
    )


class DiagnosticsCollector:
    """Collects why sessions could not be placed.

    The placement loop opens a SessionDiagnostic per session attempt,
    records every rejected window into it, and hands it back with
    ``add_failure`` if the session ends up unplaced.
    """

    def __init__(self) -> None:
        self._failures: dict[int, list[SessionDiagnostic]] = {}
        self._courses: dict[int, CourseData] = {}

    def new_session(self, session: Session) -> SessionDiagnostic:
        return SessionDiagnostic(session_type=session.type, session_hours=session.hours)

    def record(
        self,
        diagnostic: SessionDiagnostic,
        day: Day,
        time_range: str,
        reason: FailureReason,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record a rejected window for a session."""
        if not diagnostic.attempted_days or diagnostic.attempted_days[-1].day != day:
            diagnostic.attempted_days.append(DayAttempt(day=day))
        diagnostic.attempted_days[-1].attempts.append(
            SlotAttempt(
                time_range=time_range,
                reason=reason,
                message=message,
                details=details or {},
            )
        )

    def add_failure(self, course: CourseData, diagnostic: SessionDiagnostic) -> None:
        """Register a session of a course that could not be placed."""
        self._courses[course.id] = course
        self._failures.setdefault(course.id, []).append(diagnostic)

    def has_failures(self, course_id: int) -> bool:
        return course_id in self._failures

    def reason_summary(self, course_id: int) -> str:
        """Human-readable reason for an unscheduled course.

        Returns:
            Fixed message followed by counts of rejected windows per reason
        """
        counts: dict[FailureReason, int] = defaultdict(int)
        for session in self._failures.get(course_id, []):
            for day_attempt in session.attempted_days:
                for attempt in day_attempt.attempts:
                    counts[attempt.reason] += 1

        summary_parts = [
            f"{label}: {counts[reason]}"
            for reason, label in _REASON_LABELS.items()
            if counts[reason] > 0
        ]
        if not summary_parts:
            return NO_PLACEMENT_REASON
        return f"{NO_PLACEMENT_REASON} ({', '.join(summary_parts)})"

    def build(self) -> list[CourseDiagnostic]:
        """Build the per-course diagnostic trees in failure order."""
        diagnostics = []
        for course_id, sessions in self._failures.items():
            course = self._courses[course_id]
            diagnostics.append(
                CourseDiagnostic(
                    course_id=course.id,
                    code=course.code,
                    name=course.name,
                    total_hours=course.total_hours,
                    student_count=course.student_count,
                    faculty=course.faculty,
                    level=course.level,
                    term=course.term,
                    teacher_id=course.teacher_id,
                    departments=list(course.departments),
                    failed_sessions=list(sessions),
                )
            )
        return diagnostics
