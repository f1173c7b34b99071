"""Conflict detection between scheduled course sessions."""

from collections import defaultdict
from dataclasses import dataclass, field

from .models import CourseData, Day, FailureReason, ScheduleItem, TimeBlock
from .timegrid import blocks_covering, parse_time_range, time_ranges_overlap


@dataclass
class Conflict:
    """Why a candidate placement clashes with the existing schedule."""

    reason: FailureReason
    conflicting_courses: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        courses = ", ".join(self.conflicting_courses)
        if self.reason == FailureReason.TEACHER_CONFLICT:
            return f"Teacher already teaching {courses}"
        return f"Overlaps compulsory course(s) of the same departments: {courses}"


def pair_conflict(existing: CourseData, candidate: CourseData) -> FailureReason | None:
    """Check whether two courses may not share a time block.

    Rules, in order:
    1. same (non-null) teacher -> teacher conflict
    2. same course -> department conflict (its students cannot attend both)
    3. no common department -> no conflict
    4. both compulsory, same term and level -> department conflict
    5. same level and the candidate is compulsory -> department conflict,
       regardless of term. The rule is intentionally asymmetric: it looks
       at the candidate's category only.

    Args:
        existing: Course already occupying the block
        candidate: Course being placed

    Returns:
        Failure reason, or None if the courses may overlap
    """
    if (
        existing.teacher_id is not None
        and candidate.teacher_id is not None
        and existing.teacher_id == candidate.teacher_id
    ):
        return FailureReason.TEACHER_CONFLICT

    if existing.id == candidate.id:
        return FailureReason.DEPARTMENT_CONFLICT

    if not existing.department_names & candidate.department_names:
        return None

    if (
        existing.is_compulsory
        and candidate.is_compulsory
        and existing.term == candidate.term
        and existing.level == candidate.level
    ):
        return FailureReason.DEPARTMENT_CONFLICT

    if existing.level == candidate.level and candidate.is_compulsory:
        return FailureReason.DEPARTMENT_CONFLICT

    return None


def _summarize(
    clashes: list[tuple[FailureReason, CourseData]],
) -> Conflict | None:
    if not clashes:
        return None
    reasons = {reason for reason, _ in clashes}
    reason = (
        FailureReason.TEACHER_CONFLICT
        if FailureReason.TEACHER_CONFLICT in reasons
        else FailureReason.DEPARTMENT_CONFLICT
    )
    codes = sorted({course.code for _, course in clashes})
    return Conflict(reason=reason, conflicting_courses=codes)


def find_conflict(
    placed: list[ScheduleItem],
    candidate: ScheduleItem,
    course_index: dict[int, CourseData],
) -> Conflict | None:
    """Find the conflict a candidate item would create, if any.

    Every placed item on the same day whose time range overlaps the
    candidate's is checked against the candidate's course.

    Args:
        placed: Items already in the schedule
        candidate: Item being considered
        course_index: Courses by id

    Returns:
        Conflict describing the clash, or None
    """
    candidate_course = course_index[candidate.course_id]
    start, end = parse_time_range(candidate.time_range)

    clashes = []
    for item in placed:
        if item is candidate or item.day != candidate.day:
            continue
        if not time_ranges_overlap(item.start, item.end, start, end):
            continue
        existing = course_index.get(item.course_id)
        if existing is None:
            continue
        reason = pair_conflict(existing, candidate_course)
        if reason is not None:
            clashes.append((reason, existing))

    return _summarize(clashes)


def has_conflict(
    placed: list[ScheduleItem],
    candidate: ScheduleItem,
    course_index: dict[int, CourseData],
) -> bool:
    """Check whether a candidate item clashes with the placed items."""
    return find_conflict(placed, candidate, course_index) is not None


class ConflictChecker:
    """Incremental conflict index used by the placement loop.

    Items are indexed by every (day, block time range) of the grid they
    overlap, so a fixed placement spanning several blocks blocks each of
    them.
    """

    def __init__(self, course_index: dict[int, CourseData], blocks: list[TimeBlock]) -> None:
        self.course_index = course_index
        self.blocks = blocks
        # (day, time_range) -> items overlapping that block
        self._by_block: dict[tuple[Day, str], list[ScheduleItem]] = defaultdict(list)

    def _keys(self, item: ScheduleItem) -> list[tuple[Day, str]]:
        covered = blocks_covering(item.start, item.end, self.blocks)
        return [(item.day, block.time_range) for block in covered]

    def add(self, item: ScheduleItem) -> None:
        """Register an item in the index."""
        for key in self._keys(item):
            self._by_block[key].append(item)

    def remove(self, item: ScheduleItem) -> None:
        """Remove a previously added item from the index."""
        for key in self._keys(item):
            remaining = [i for i in self._by_block.get(key, []) if i is not item]
            if remaining:
                self._by_block[key] = remaining
            else:
                self._by_block.pop(key, None)

    def check(
        self,
        course: CourseData,
        day: Day,
        block: TimeBlock,
        ignore: ScheduleItem | None = None,
    ) -> Conflict | None:
        """Check whether a course may be placed in a block.

        Args:
            course: Course being placed
            day: Candidate day
            block: Candidate block
            ignore: Item to leave out of the check (used when moving it)

        Returns:
            Conflict describing the clash, or None
        """
        clashes = []
        for item in self._by_block.get((day, block.time_range), []):
            if item is ignore:
                continue
            existing = self.course_index.get(item.course_id)
            if existing is None:
                continue
            reason = pair_conflict(existing, course)
            if reason is not None:
                clashes.append((reason, existing))
        return _summarize(clashes)
