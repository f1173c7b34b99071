"""Processing of manually pinned (fixed) placements."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from .models import (
    ClassroomData,
    CourseData,
    Day,
    LunchOverflowWarning,
    ScheduleItem,
    TimeSettings,
)
from .rooms import select_fixed_classroom
from .timegrid import calculate_duration, time_ranges_overlap

logger = logging.getLogger(__name__)


@dataclass
class FixedPlacementResult:
    """Items created from fixed placements and the hours they account for."""

    items: list[ScheduleItem] = field(default_factory=list)
    hours_by_course: dict[int, int] = field(default_factory=dict)
    warnings: list[LunchOverflowWarning] = field(default_factory=list)
    skipped: int = 0


def process_fixed_placements(
    courses: list[CourseData],
    classrooms: list[ClassroomData],
    settings: TimeSettings,
) -> FixedPlacementResult:
    """Turn every course's fixed placements into schedule items.

    Each pinned entry becomes a single item covering its whole range, with
    ``session_hours`` set to the range length rounded up (at least 1).
    Entries with an unknown day, a malformed time range or no usable
    classroom are skipped.

    Args:
        courses: Courses to process
        classrooms: All classrooms
        settings: Time settings (for the lunch window)

    Returns:
        FixedPlacementResult with items, hours per course and lunch warnings
    """
    result = FixedPlacementResult()
    hours_by_course: dict[int, int] = defaultdict(int)

    for course in courses:
        for fixed in course.fixed_placements:
            day = Day.parse(fixed.day)
            if day is None:
                logger.warning(
                    f"Skipping fixed placement of {course.code}: unknown day '{fixed.day}'"
                )
                result.skipped += 1
                continue

            try:
                duration = calculate_duration(fixed.start, fixed.end)
            except ValueError:
                logger.warning(
                    f"Skipping fixed placement of {course.code}: "
                    f"invalid time range '{fixed.time_range}'"
                )
                result.skipped += 1
                continue

            classroom = select_fixed_classroom(
                classrooms, fixed.session_type, fixed.classroom_id
            )
            if classroom is None:
                logger.warning(
                    f"Skipping fixed placement of {course.code} on {day.value} "
                    f"{fixed.time_range}: no compatible classroom"
                )
                result.skipped += 1
                continue

            session_hours = max(1, duration)
            result.items.append(
                ScheduleItem(
                    course_id=course.id,
                    classroom_id=classroom.id,
                    day=day,
                    time_range=fixed.time_range,
                    session_type=fixed.session_type,
                    session_hours=session_hours,
                    is_fixed=True,
                )
            )
            hours_by_course[course.id] += session_hours

            if time_ranges_overlap(
                fixed.start, fixed.end, settings.lunch_start, settings.lunch_end
            ):
                result.warnings.append(
                    LunchOverflowWarning(
                        course_id=course.id,
                        code=course.code,
                        day=day.value,
                        time_range=fixed.time_range,
                        message=(
                            f"Fixed placement {fixed.time_range} overlaps the lunch "
                            f"break {settings.lunch_start}-{settings.lunch_end}"
                        ),
                    )
                )

    result.hours_by_course = dict(hours_by_course)
    logger.info(
        f"Processed fixed placements: {len(result.items)} items, "
        f"{result.skipped} skipped, {len(result.warnings)} lunch overlaps"
    )
    return result
