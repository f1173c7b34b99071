"""Greedy timetable generation with hill-climbing improvement."""

import logging
import math
import random
import time
from dataclasses import dataclass, field

from ..exceptions import SchedulerTimeoutError
from .availability import is_teacher_available
from .config.settings import EngineSettings
from .conflicts import ConflictChecker
from .constants import NO_ACTIVE_CLASSROOMS_REASON
from .diagnostics import (
    DiagnosticsCollector,
    calculate_schedule_metrics,
    calculate_schedule_statistics,
)
from .fixed import process_fixed_placements
from .improver import improve_schedule
from .models import (
    WORKING_DAYS,
    ClassroomData,
    CourseData,
    Day,
    FailureReason,
    LunchOverflowWarning,
    ScheduleItem,
    ScheduleResult,
    Session,
    SessionDiagnostic,
    SessionType,
    TimeBlock,
    UnscheduledCourse,
)
from .rooms import ClassroomOccupancy, candidate_classrooms, find_classroom
from .timegrid import are_blocks_consecutive, build_time_blocks
from .utils import rank_courses, remaining_sessions

logger = logging.getLogger(__name__)


@dataclass
class PlacementState:
    """Running state of one placement run.

    Attributes:
        schedule: Items placed so far (fixed items first)
        conflicts: Conflict index over the placed items
        occupancy: Classroom occupancy over the placed items
        teacher_loads: Teacher id -> placed hours
    """

    course_index: dict[int, CourseData]
    conflicts: ConflictChecker
    occupancy: ClassroomOccupancy
    schedule: list[ScheduleItem] = field(default_factory=list)
    teacher_loads: dict[int, int] = field(default_factory=dict)

    @classmethod
    def create(cls, courses: list[CourseData], blocks: list[TimeBlock]) -> "PlacementState":
        course_index = {c.id: c for c in courses}
        return cls(
            course_index=course_index,
            conflicts=ConflictChecker(course_index, blocks),
            occupancy=ClassroomOccupancy(blocks),
        )

    def commit(self, item: ScheduleItem) -> None:
        """Add an item to the schedule and every index."""
        self.schedule.append(item)
        self.conflicts.add(item)
        self.occupancy.reserve(item)
        teacher_id = self.course_index[item.course_id].teacher_id
        if teacher_id is not None:
            self.teacher_loads[teacher_id] = (
                self.teacher_loads.get(teacher_id, 0) + item.session_hours
            )

    def rollback(self, items: list[ScheduleItem]) -> None:
        """Undo tentative commits."""
        for item in items:
            self.schedule = [i for i in self.schedule if i is not item]
            self.conflicts.remove(item)
            self.occupancy.release(item)
            teacher_id = self.course_index[item.course_id].teacher_id
            if teacher_id is not None:
                self.teacher_loads[teacher_id] -= item.session_hours


class TimetableScheduler:
    """Builds a weekly timetable for a term.

    Pipeline:
    1. Build the time grid from the time settings
    2. Place fixed placements
    3. Rank courses by difficulty (hardest first)
    4. Greedily place every remaining session in a random day/window
       with the best-fitting classroom
    5. Improve the result by hill climbing
    6. Collect metrics, statistics and diagnostics for unplaced sessions
    """

    def __init__(
        self,
        classrooms: list[ClassroomData],
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            classrooms: All classrooms (inactive ones are never used by the loop)
            settings: Run settings; defaults apply when None
            rng: Random source; overrides the seed from the settings
        """
        self.classrooms = classrooms
        self.settings = settings or EngineSettings()
        self._rng = rng
        self.diagnostics = DiagnosticsCollector()

    def schedule(self, courses: list[CourseData]) -> ScheduleResult:
        """Generate a timetable for the given active courses.

        Args:
            courses: Active courses of the term

        Returns:
            ScheduleResult with items, unscheduled courses and diagnostics

        Raises:
            InvalidTimeSettingsError: If the time settings are unusable
            SchedulerTimeoutError: If the run exceeds its time limit
        """
        started = time.monotonic()
        seed = self.settings.seed
        if seed is None:
            seed = random.randrange(2**32)
        rng = self._rng or random.Random(seed)
        self.diagnostics = DiagnosticsCollector()

        blocks = build_time_blocks(self.settings.time)
        logger.info(
            f"Scheduling {len(courses)} courses in {len(self.classrooms)} classrooms "
            f"over {len(blocks)} blocks/day (seed={seed})"
        )

        if not courses:
            return ScheduleResult(
                success=False,
                message="No active courses to schedule",
                seed=seed,
            )

        if not any(c.is_active for c in self.classrooms):
            logger.warning("No active classrooms, nothing can be placed")
            return ScheduleResult(
                success=False,
                message="No active classrooms available",
                unscheduled=[
                    self._unscheduled(course, NO_ACTIVE_CLASSROOMS_REASON)
                    for course in courses
                ],
                seed=seed,
                duration_seconds=round(time.monotonic() - started, 3),
            )

        fixed = process_fixed_placements(courses, self.classrooms, self.settings.time)
        state = PlacementState.create(courses, blocks)
        for item in fixed.items:
            state.commit(item)

        ranked = rank_courses(courses, self.classrooms, state.teacher_loads)

        for processed, course in enumerate(ranked):
            self._check_timeout(started, processed, len(ranked))

            sessions = remaining_sessions(course, fixed.hours_by_course.get(course.id, 0))
            if not sessions:
                continue

            if self.settings.combine_theory_lab:
                sessions = self._place_combined(course, sessions, state, blocks, rng)

            for session in sessions:
                diagnostic = self.diagnostics.new_session(session)
                if self._place_session(course, session, state, blocks, rng, diagnostic):
                    continue

                if self.settings.allow_session_split and session.hours > 1:
                    diagnostic.split_attempted = True
                    if self._place_split(course, session, state, blocks, rng):
                        continue

                logger.debug(
                    f"Could not place {session.hours}h {session.type.value} "
                    f"session of {course.code}"
                )
                self.diagnostics.add_failure(course, diagnostic)

        if self.settings.hill_climbing_iterations > 0:
            improve_schedule(
                state.schedule,
                courses,
                self.classrooms,
                self.settings.hill_climbing_iterations,
                rng,
            )

        return self._build_result(courses, ranked, state, fixed.warnings, seed, started)

    def _check_timeout(self, started: float, processed: int, total: int) -> None:
        timeout = self.settings.timeout_seconds
        if timeout and time.monotonic() - started > timeout:
            raise SchedulerTimeoutError(timeout, processed, total)

    def _place_session(
        self,
        course: CourseData,
        session: Session,
        state: PlacementState,
        blocks: list[TimeBlock],
        rng: random.Random,
        diagnostic: SessionDiagnostic,
    ) -> bool:
        """Place a session as one contiguous run of blocks on a single day.

        Days are tried in random order and, per day, every window start in
        random order. Every rejected window is recorded in the diagnostic.

        Returns:
            True if the session was placed
        """
        duration = session.hours
        days = list(WORKING_DAYS)
        rng.shuffle(days)

        for day in days:
            if duration > len(blocks):
                self.diagnostics.record(
                    diagnostic,
                    day,
                    "",
                    FailureReason.INSUFFICIENT_BLOCKS,
                    f"Session needs {duration} blocks, the day only has {len(blocks)}",
                    {"required_blocks": duration, "available_blocks": len(blocks)},
                )
                continue

            starts = list(range(len(blocks) - duration + 1))
            rng.shuffle(starts)
            for start in starts:
                window = blocks[start : start + duration]
                items = self._try_window(course, session.type, day, window, state, diagnostic)
                if items is not None:
                    return True

        return False

    def _check_window(
        self,
        course: CourseData,
        day: Day,
        window: list[TimeBlock],
        state: PlacementState,
    ) -> tuple[FailureReason, str, dict] | None:
        """Check contiguity, teacher availability and conflicts of a window.

        Returns:
            (reason, message, details) of the first failure, or None
        """
        if not are_blocks_consecutive(window):
            gap = next(
                (a, b) for a, b in zip(window, window[1:]) if a.end != b.start
            )
            return (
                FailureReason.INSUFFICIENT_BLOCKS,
                f"Not enough consecutive blocks (gap between {gap[0].end} and {gap[1].start})",
                {},
            )

        for block in window:
            if not is_teacher_available(course.teacher_availability, day, block):
                return (
                    FailureReason.TEACHER_UNAVAILABLE,
                    f"Teacher not available at {block.time_range}",
                    {"teacher_available_hours": course.teacher_availability.hours_on(day)},
                )

            conflict = state.conflicts.check(course, day, block)
            if conflict is not None:
                return (
                    conflict.reason,
                    conflict.message,
                    {"conflicting_courses": conflict.conflicting_courses},
                )

        return None

    def _try_window(
        self,
        course: CourseData,
        session_type: SessionType,
        day: Day,
        window: list[TimeBlock],
        state: PlacementState,
        diagnostic: SessionDiagnostic | None = None,
    ) -> list[ScheduleItem] | None:
        """Try to place a session in a window, committing one item per block.

        Returns:
            Committed items, or None if the window was rejected
        """
        time_range = f"{window[0].start}-{window[-1].end}"

        failure = self._check_window(course, day, window, state)
        if failure is not None:
            reason, message, details = failure
            logger.debug(f"{course.code} {day.value} {time_range}: {message}")
            if diagnostic is not None:
                self.diagnostics.record(diagnostic, day, time_range, reason, message, details)
            return None

        classroom = find_classroom(
            self.classrooms,
            session_type,
            course.student_count,
            state.occupancy.occupied,
            course.capacity_margin,
            course.main_department,
            day,
            window,
        )
        if classroom is None:
            logger.debug(f"{course.code} {day.value} {time_range}: no classroom")
            if diagnostic is not None:
                self.diagnostics.record(
                    diagnostic,
                    day,
                    time_range,
                    FailureReason.NO_CLASSROOM,
                    f"No suitable {session_type.value} classroom for {time_range}",
                    {
                        "required_capacity": course.adjusted_seat_count,
                        "candidate_classrooms": len(
                            candidate_classrooms(
                                self.classrooms, session_type, course.adjusted_seat_count
                            )
                        ),
                        "required_type": session_type.value,
                    },
                )
            return None

        items = [
            ScheduleItem(
                course_id=course.id,
                classroom_id=classroom.id,
                day=day,
                time_range=block.time_range,
                session_type=session_type,
            )
            for block in window
        ]
        for item in items:
            state.commit(item)
        logger.debug(f"Placed {course.code} {day.value} {time_range} in {classroom.name}")
        return items

    def _place_on_day(
        self,
        course: CourseData,
        session_type: SessionType,
        duration: int,
        day: Day,
        state: PlacementState,
        blocks: list[TimeBlock],
        rng: random.Random,
    ) -> list[ScheduleItem] | None:
        """Place a run of ``duration`` blocks somewhere on a given day."""
        if duration > len(blocks):
            return None
        starts = list(range(len(blocks) - duration + 1))
        rng.shuffle(starts)
        for start in starts:
            items = self._try_window(
                course, session_type, day, blocks[start : start + duration], state
            )
            if items is not None:
                return items
        return None

    def _place_split(
        self,
        course: CourseData,
        session: Session,
        state: PlacementState,
        blocks: list[TimeBlock],
        rng: random.Random,
    ) -> bool:
        """Place a session as ceil(hours/2)-sized chunks, all on one day.

        Returns:
            True if every chunk was placed on the same day
        """
        chunk_size = math.ceil(session.hours / 2)
        days = list(WORKING_DAYS)
        rng.shuffle(days)

        for day in days:
            placed: list[ScheduleItem] = []
            remaining = session.hours
            while remaining > 0:
                size = min(chunk_size, remaining)
                items = self._place_on_day(course, session.type, size, day, state, blocks, rng)
                if items is None:
                    break
                placed.extend(items)
                remaining -= size

            if remaining == 0:
                logger.debug(f"Split {session.hours}h session of {course.code} on {day.value}")
                return True
            state.rollback(placed)

        return False

    def _place_combined(
        self,
        course: CourseData,
        sessions: list[Session],
        state: PlacementState,
        blocks: list[TimeBlock],
        rng: random.Random,
    ) -> list[Session]:
        """Try to place one theory and one lab session on the same day.

        Returns:
            Sessions still to place (both pair members removed on success)
        """
        theory = next((s for s in sessions if s.type == SessionType.THEORY), None)
        lab = next((s for s in sessions if s.type == SessionType.LAB), None)
        if theory is None or lab is None:
            return sessions

        days = list(WORKING_DAYS)
        rng.shuffle(days)
        for day in days:
            placed: list[ScheduleItem] = []
            for session in (theory, lab):
                items = self._place_on_day(
                    course, session.type, session.hours, day, state, blocks, rng
                )
                if items is None:
                    break
                placed.extend(items)
            else:
                logger.debug(f"Placed theory and lab of {course.code} on {day.value}")
                return [s for s in sessions if s is not theory and s is not lab]
            state.rollback(placed)

        return sessions

    def _unscheduled(self, course: CourseData, reason: str) -> UnscheduledCourse:
        return UnscheduledCourse(
            course_id=course.id,
            code=course.code,
            name=course.name,
            total_hours=course.total_hours,
            student_count=course.student_count,
            reason=reason,
        )

    def _build_result(
        self,
        courses: list[CourseData],
        ranked: list[CourseData],
        state: PlacementState,
        lunch_warnings: list[LunchOverflowWarning],
        seed: int,
        started: float,
    ) -> ScheduleResult:
        unscheduled = [
            self._unscheduled(course, self.diagnostics.reason_summary(course.id))
            for course in ranked
            if self.diagnostics.has_failures(course.id)
        ]

        placed_by_course: dict[int, int] = {}
        for item in state.schedule:
            placed_by_course[item.course_id] = (
                placed_by_course.get(item.course_id, 0) + item.session_hours
            )
        required = sum(c.session_hours for c in courses)
        placed = sum(min(placed_by_course.get(c.id, 0), c.session_hours) for c in courses)
        success_rate = round(placed / required * 100, 1) if required else 100.0

        message = (
            f"Scheduled {len(state.schedule)} items"
            if not unscheduled
            else f"Scheduled {len(state.schedule)} items, "
            f"{len(unscheduled)} course(s) could not be fully scheduled"
        )
        logger.info(message)

        return ScheduleResult(
            success=bool(state.schedule),
            message=message,
            schedule=state.schedule,
            unscheduled=unscheduled,
            diagnostics=self.diagnostics.build(),
            metrics=calculate_schedule_metrics(state.schedule, courses, self.classrooms),
            statistics=calculate_schedule_statistics(state.schedule, self.classrooms),
            lunch_overflow_warnings=lunch_warnings,
            success_rate=success_rate,
            seed=seed,
            duration_seconds=round(time.monotonic() - started, 3),
        )


def create_scheduler(
    classrooms: list[ClassroomData],
    settings: EngineSettings | None = None,
) -> TimetableScheduler:
    """Create a scheduler for the given classrooms and settings."""
    return TimetableScheduler(classrooms, settings)

