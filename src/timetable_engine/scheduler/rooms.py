"""Classroom selection and occupancy tracking."""

import logging
from collections import defaultdict
from collections.abc import Mapping
from functools import cmp_to_key

from .availability import are_blocks_available
from .constants import (
    CLASSROOM_SCORE_TOLERANCE,
    IDEAL_MAX_RATIO,
    IDEAL_MIN_RATIO,
    IDEAL_PEAK_RATIO,
    OVERFULL_SCORE,
    PENALTY_THRESHOLD_RATIO,
)
from .models import (
    ClassroomData,
    ClassroomType,
    Day,
    ScheduleItem,
    SessionType,
    TimeBlock,
    calculate_adjusted_seat_count,
)
from .timegrid import blocks_covering

logger = logging.getLogger(__name__)


def score_utilization(adjusted: int, capacity: int) -> float:
    """Score how well a group of students fills a classroom.

    The ideal fill ratio is 0.7-0.9, peaking at 0.8. Nearly empty rooms
    score low and overfull rooms are effectively excluded.

    Args:
        adjusted: Adjusted seat count of the course
        capacity: Classroom capacity

    Returns:
        Utilization score (higher is better)
    """
    if capacity <= 0:
        return OVERFULL_SCORE

    ratio = adjusted / capacity
    if IDEAL_MIN_RATIO <= ratio <= IDEAL_MAX_RATIO:
        return 100 - abs(ratio - IDEAL_PEAK_RATIO) * 100
    if ratio < PENALTY_THRESHOLD_RATIO:
        return ratio * 50
    if ratio > 1.0:
        return OVERFULL_SCORE
    if ratio < IDEAL_MIN_RATIO:
        return 50 + (ratio - PENALTY_THRESHOLD_RATIO) / 0.3 * 40
    return 100 - (ratio - IDEAL_MAX_RATIO) / 0.1 * 30


def is_type_compatible(
    session_type: SessionType, classroom_type: ClassroomType, allow_hybrid: bool = False
) -> bool:
    """Check whether a classroom type can host a session type.

    Lab sessions need a lab (or, with ``allow_hybrid``, a hybrid room);
    every other session needs a non-lab room.
    """
    if session_type == SessionType.LAB:
        return classroom_type == ClassroomType.LAB or (
            allow_hybrid and classroom_type == ClassroomType.HYBRID
        )
    return classroom_type != ClassroomType.LAB


def can_host_session_type(session_type: SessionType, classroom_type: ClassroomType) -> bool:
    """Looser compatibility used when estimating classroom scarcity.

    Lab sessions accept lab or hybrid rooms, theory sessions any non-lab
    room and "all" sessions any room.
    """
    if session_type == SessionType.ALL:
        return True
    return is_type_compatible(session_type, classroom_type, allow_hybrid=True)


def candidate_classrooms(
    classrooms: list[ClassroomData], session_type: SessionType, adjusted: int
) -> list[ClassroomData]:
    """Active classrooms of compatible type and sufficient capacity."""
    return [
        c
        for c in classrooms
        if c.is_active
        and c.capacity >= adjusted
        and is_type_compatible(session_type, c.type)
    ]


class ClassroomOccupancy:
    """Tracks which classrooms are taken at each (day, block).

    Items are indexed by every grid block they overlap.
    """

    def __init__(self, blocks: list[TimeBlock]) -> None:
        self.blocks = blocks
        # (day, time_range) -> classroom ids
        self.occupied: dict[tuple[Day, str], set[int]] = defaultdict(set)

    def _keys(self, item: ScheduleItem) -> list[tuple[Day, str]]:
        covered = blocks_covering(item.start, item.end, self.blocks)
        return [(item.day, block.time_range) for block in covered]

    def reserve(self, item: ScheduleItem) -> None:
        """Mark an item's classroom as taken for the blocks it covers."""
        for key in self._keys(item):
            self.occupied[key].add(item.classroom_id)

    def release(self, item: ScheduleItem) -> None:
        """Free an item's classroom for the blocks it covers."""
        for key in self._keys(item):
            self.occupied[key].discard(item.classroom_id)


def _compare_candidates(
    a: tuple[ClassroomData, float], b: tuple[ClassroomData, float], preferred: str
) -> int:
    room_a, score_a = a
    room_b, score_b = b

    if abs(score_a - score_b) > CLASSROOM_SCORE_TOLERANCE:
        return -1 if score_a > score_b else 1

    a_preferred = bool(preferred) and room_a.priority_department == preferred
    b_preferred = bool(preferred) and room_b.priority_department == preferred
    if a_preferred != b_preferred:
        return -1 if a_preferred else 1

    return room_a.capacity - room_b.capacity


def find_classroom(
    classrooms: list[ClassroomData],
    session_type: SessionType,
    student_count: int,
    occupied_by_block: Mapping[tuple[Day, str], set[int]],
    capacity_margin: float,
    preferred_department: str,
    day: Day,
    blocks: list[TimeBlock],
) -> ClassroomData | None:
    """Find the best classroom for a session spanning consecutive blocks.

    Priority order:
    1. Utilization score (scores within one point are equal)
    2. Classroom whose priority department is the course's main department
    3. Smaller capacity

    Args:
        classrooms: All classrooms
        session_type: Type of the session being placed
        student_count: Students enrolled in the course
        occupied_by_block: (day, time_range) -> ids of taken classrooms
        capacity_margin: Course capacity margin percentage
        preferred_department: Course's main department
        day: Day of the window
        blocks: Consecutive blocks of the window

    Returns:
        Best classroom, or None if none is usable for every block
    """
    adjusted = calculate_adjusted_seat_count(student_count, capacity_margin)

    usable = [
        c
        for c in candidate_classrooms(classrooms, session_type, adjusted)
        if are_blocks_available(c.availability, day, blocks)
        and all(
            c.id not in occupied_by_block.get((day, block.time_range), set())
            for block in blocks
        )
    ]
    if not usable:
        return None

    scored = [(c, score_utilization(adjusted, c.capacity)) for c in usable]
    scored.sort(
        key=cmp_to_key(lambda a, b: _compare_candidates(a, b, preferred_department))
    )
    return scored[0][0]


def select_fixed_classroom(
    classrooms: list[ClassroomData],
    session_type: SessionType,
    classroom_id: int | None = None,
) -> ClassroomData | None:
    """Resolve the classroom of a fixed placement.

    A pinned classroom id is used as given. Without one, the first active
    classroom compatible with the session type is chosen, with hybrid
    rooms accepted for lab sessions.

    Returns:
        Classroom, or None if the id is unknown or nothing is compatible
    """
    if classroom_id is not None:
        for classroom in classrooms:
            if classroom.id == classroom_id:
                return classroom
        logger.warning(f"Fixed placement references unknown classroom {classroom_id}")
        return None

    for classroom in classrooms:
        if classroom.is_active and is_type_compatible(
            session_type, classroom.type, allow_hybrid=True
        ):
            return classroom
    return None
