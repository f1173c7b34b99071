"""Hill-climbing improvement of a generated schedule.

The improver repeatedly swaps the day/time of two placed sessions and
keeps the swap when the soft score does not get worse. A session that
covers several blocks is moved as a whole, so only sessions of equal
length are swapped with each other. Fixed placements and classroom
assignments are never changed.
"""

import logging
import random
from dataclasses import replace

from .availability import is_classroom_available, is_teacher_available
from .conflicts import find_conflict
from .constants import (
    DEFAULT_HILL_CLIMBING_ITERATIONS,
    IDEAL_MAX_RATIO,
    IDEAL_MIN_RATIO,
    PENALTY_THRESHOLD_RATIO,
    SOFT_SCORE_IDEAL_BONUS,
    SOFT_SCORE_LOAD_STDDEV_WEIGHT,
    SOFT_SCORE_WASTE_PENALTY,
)
from .diagnostics import population_stddev, teacher_loads
from .models import ClassroomData, CourseData, ScheduleItem, TimeBlock
from .timegrid import parse_time_range, time_ranges_overlap

logger = logging.getLogger(__name__)


def calculate_soft_score(
    schedule: list[ScheduleItem],
    course_index: dict[int, CourseData],
    classroom_index: dict[int, ClassroomData],
) -> float:
    """Score a whole schedule on soft constraints.

    +10 per item whose utilization ratio is in [0.7, 0.9], -5 per item with
    ratio below 0.4, minus 0.5 times the teacher-load standard deviation.
    """
    score = 0.0
    for item in schedule:
        course = course_index.get(item.course_id)
        classroom = classroom_index.get(item.classroom_id)
        if course is None or classroom is None or classroom.capacity <= 0:
            continue
        ratio = course.adjusted_seat_count / classroom.capacity
        if IDEAL_MIN_RATIO <= ratio <= IDEAL_MAX_RATIO:
            score += SOFT_SCORE_IDEAL_BONUS
        elif ratio < PENALTY_THRESHOLD_RATIO:
            score -= SOFT_SCORE_WASTE_PENALTY

    loads = list(teacher_loads(schedule, course_index).values())
    score -= SOFT_SCORE_LOAD_STDDEV_WEIGHT * population_stddev(loads)
    return score


def group_session_runs(schedule: list[ScheduleItem]) -> list[list[ScheduleItem]]:
    """Group non-fixed items into the sessions they were placed as.

    Consecutive items of the same course, classroom, day and session type
    whose time ranges chain end-to-start form one run.
    """
    runs: list[list[ScheduleItem]] = []
    for item in schedule:
        if item.is_fixed:
            continue
        if runs:
            last = runs[-1][-1]
            if (
                last.course_id == item.course_id
                and last.classroom_id == item.classroom_id
                and last.day == item.day
                and last.session_type == item.session_type
                and last.end == item.start
            ):
                runs[-1].append(item)
                continue
        runs.append([item])
    return runs


def _is_move_valid(
    moved: ScheduleItem,
    others: list[ScheduleItem],
    course_index: dict[int, CourseData],
    classroom_index: dict[int, ClassroomData],
) -> bool:
    course = course_index.get(moved.course_id)
    classroom = classroom_index.get(moved.classroom_id)
    if course is None or classroom is None:
        return False

    block = TimeBlock(*parse_time_range(moved.time_range))
    if not is_teacher_available(course.teacher_availability, moved.day, block):
        return False
    if not is_classroom_available(classroom.availability, moved.day, block):
        return False

    for other in others:
        if (
            other.classroom_id == moved.classroom_id
            and other.day == moved.day
            and time_ranges_overlap(other.start, other.end, moved.start, moved.end)
        ):
            return False

    return find_conflict(others, moved, course_index) is None


def improve_schedule(
    schedule: list[ScheduleItem],
    courses: list[CourseData],
    classrooms: list[ClassroomData],
    iterations: int = DEFAULT_HILL_CLIMBING_ITERATIONS,
    rng: random.Random | None = None,
) -> int:
    """Improve a schedule in place by hill climbing.

    Each iteration picks two distinct non-fixed sessions of equal length
    and swaps their day and times. The swap is rejected if any moved item
    would conflict with the rest of the schedule, if its teacher or
    classroom is unavailable at the new time, or if its classroom is
    already taken then. Otherwise it is kept iff the soft score does not
    decrease.

    Args:
        schedule: Schedule items, modified in place
        courses: Courses referenced by the items
        classrooms: Classrooms referenced by the items
        iterations: Number of swap attempts
        rng: Random source

    Returns:
        Number of accepted swaps
    """
    rng = rng or random.Random()
    course_index = {c.id: c for c in courses}
    classroom_index = {c.id: c for c in classrooms}

    runs = group_session_runs(schedule)
    if len(runs) < 2:
        return 0

    current_score = calculate_soft_score(schedule, course_index, classroom_index)
    accepted = 0

    for _ in range(iterations):
        first = rng.choice(runs)
        partners = [r for r in runs if r is not first and len(r) == len(first)]
        if not partners:
            continue
        second = rng.choice(partners)

        if [(i.day, i.time_range) for i in first] == [(i.day, i.time_range) for i in second]:
            continue

        moved_first = [
            replace(item, day=target.day, time_range=target.time_range)
            for item, target in zip(first, second)
        ]
        moved_second = [
            replace(item, day=target.day, time_range=target.time_range)
            for item, target in zip(second, first)
        ]

        swapped_ids = {id(i) for i in first} | {id(i) for i in second}
        rest = [i for i in schedule if id(i) not in swapped_ids]

        valid = all(
            _is_move_valid(m, rest + moved_second, course_index, classroom_index)
            for m in moved_first
        ) and all(
            _is_move_valid(m, rest + moved_first, course_index, classroom_index)
            for m in moved_second
        )
        if not valid:
            continue

        new_score = calculate_soft_score(
            rest + moved_first + moved_second, course_index, classroom_index
        )
        if new_score < current_score:
            continue

        for item, moved in zip(first + second, moved_first + moved_second):
            item.day = moved.day
            item.time_range = moved.time_range
        current_score = new_score
        accepted += 1

    logger.info(f"Hill climbing accepted {accepted}/{iterations} swaps")
    return accepted
