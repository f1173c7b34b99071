"""Course ordering and session bookkeeping helpers."""

from functools import cmp_to_key

from .constants import (
    DIFFICULTY_DURATION_WEIGHT,
    DIFFICULTY_SCARCITY_WEIGHT,
    DIFFICULTY_STUDENT_WEIGHT,
    DIFFICULTY_TIE_TOLERANCE,
    NO_CLASSROOM_SCARCITY,
)
from .models import ClassroomData, CourseData, Session
from .rooms import can_host_session_type


def count_capable_classrooms(course: CourseData, classrooms: list[ClassroomData]) -> int:
    """Count active classrooms able to host at least one of the course's sessions.

    A classroom counts if its capacity covers the adjusted seat count and
    its type suits any session type of the course.
    """
    session_types = {s.type for s in course.sessions}
    adjusted = course.adjusted_seat_count
    return sum(
        1
        for c in classrooms
        if c.is_active
        and c.capacity >= adjusted
        and any(can_host_session_type(t, c.type) for t in session_types)
    )


def calculate_course_difficulty(course: CourseData, classrooms: list[ClassroomData]) -> float:
    """Estimate how hard a course is to place.

    Large courses, courses with few capable classrooms and courses with
    long sessions score higher and are placed first.

    Args:
        course: Course to score
        classrooms: All classrooms

    Returns:
        students*2 + (1/capable_count or 100)*5 + average session hours
    """
    capable = count_capable_classrooms(course, classrooms)
    scarcity = 1 / capable if capable > 0 else NO_CLASSROOM_SCARCITY
    avg_session_hours = (
        course.session_hours / len(course.sessions) if course.sessions else 0
    )
    return (
        course.student_count * DIFFICULTY_STUDENT_WEIGHT
        + scarcity * DIFFICULTY_SCARCITY_WEIGHT
        + avg_session_hours * DIFFICULTY_DURATION_WEIGHT
    )


def rank_courses(
    courses: list[CourseData],
    classrooms: list[ClassroomData],
    teacher_loads: dict[int, int] | None = None,
) -> list[CourseData]:
    """Sort courses so the hardest are placed first.

    Sorting order:
    1. Difficulty descending (differences up to 0.1 are ties)
    2. Lower current teacher load first, when both courses have a teacher
    3. Input order

    Args:
        courses: Courses to rank
        classrooms: All classrooms
        teacher_loads: Teacher id -> hours already placed

    Returns:
        New list of courses in placement order
    """
    loads = teacher_loads or {}
    difficulty = {c.id: calculate_course_difficulty(c, classrooms) for c in courses}

    def compare(a: CourseData, b: CourseData) -> int:
        delta = difficulty[b.id] - difficulty[a.id]
        if abs(delta) > DIFFICULTY_TIE_TOLERANCE:
            return 1 if delta > 0 else -1

        if a.teacher_id is not None and b.teacher_id is not None:
            a_load = loads.get(a.teacher_id, 0)
            b_load = loads.get(b.teacher_id, 0)
            if a_load != b_load:
                return a_load - b_load

        return 0

    return sorted(courses, key=cmp_to_key(compare))


def remaining_sessions(course: CourseData, fixed_hours: int = 0) -> list[Session]:
    """Sessions still to place once fixed hours are accounted for.

    Sessions are taken largest first; fixed hours consume whole sessions
    and then shorten the next one.

    Args:
        course: Course whose sessions to place
        fixed_hours: Hours already covered by fixed placements

    Returns:
        Sessions (largest first) that the placement loop must place
    """
    pending: list[Session] = []
    for session in sorted(course.sessions, key=lambda s: s.hours, reverse=True):
        if session.hours <= 0:
            continue
        if fixed_hours >= session.hours:
            fixed_hours -= session.hours
            continue
        if fixed_hours > 0:
            pending.append(Session(type=session.type, hours=session.hours - fixed_hours))
            fixed_hours = 0
        else:
            pending.append(Session(type=session.type, hours=session.hours))
    return pending
