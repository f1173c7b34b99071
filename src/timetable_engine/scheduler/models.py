"""Data models for the timetable engine."""

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ..exceptions import InvalidDataError, InvalidTimeSettingsError
from ..normalization import build_alias_lookup, normalize_token
from .constants import (
    DEFAULT_DAY_END,
    DEFAULT_DAY_START,
    DEFAULT_LUNCH_END,
    DEFAULT_LUNCH_START,
    DEFAULT_SLOT_DURATION,
)

logger = logging.getLogger(__name__)


class Day(str, Enum):
    """Working days of the academic week.

    Values are the canonical (English) names; ``alternate_name`` gives the
    Turkish name used by the second naming scheme. ``Day.parse`` accepts
    either scheme.
    """

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"

    @property
    def alternate_name(self) -> str:
        """Name of the day in the alternate (Turkish) scheme."""
        return DAY_ALTERNATE_NAMES[self]

    @classmethod
    def parse(cls, value: Any) -> "Day | None":
        """Resolve a day name from either naming scheme.

        Args:
            value: Day name such as "monday", "Monday" or "Pazartesi"

        Returns:
            Matching Day, or None if the name is not a working day
        """
        if isinstance(value, Day):
            return value
        canonical = normalize_token(value, _DAY_LOOKUP)
        return cls(canonical) if canonical else None


DAY_ALTERNATE_NAMES = {
    Day.MONDAY: "Pazartesi",
    Day.TUESDAY: "Salı",
    Day.WEDNESDAY: "Çarşamba",
    Day.THURSDAY: "Perşembe",
    Day.FRIDAY: "Cuma",
}

_DAY_LOOKUP = build_alias_lookup(
    {day.value: (name, day.value[:3]) for day, name in DAY_ALTERNATE_NAMES.items()}
)

WORKING_DAYS = list(Day)


class SessionType(str, Enum):
    """Type of a course session."""

    THEORY = "theory"
    LAB = "lab"
    ALL = "all"  # may use any non-lab room; counts every room type as a candidate

    @classmethod
    def parse(cls, value: Any) -> "SessionType":
        """Parse a session type from English or Turkish spelling."""
        if isinstance(value, SessionType):
            return value
        canonical = normalize_token(value, _SESSION_TYPE_LOOKUP)
        if canonical is None:
            raise InvalidDataError(f"Unknown session type: {value!r}", "session")
        return cls(canonical)


_SESSION_TYPE_LOOKUP = build_alias_lookup(
    {
        "theory": ("teorik", "theoretical", "lecture"),
        "lab": ("laboratory", "laboratuvar"),
        "all": ("tümü", "any"),
    }
)


class ClassroomType(str, Enum):
    """Type of a classroom."""

    THEORY = "theory"
    LAB = "lab"
    HYBRID = "hybrid"

    @classmethod
    def parse(cls, value: Any) -> "ClassroomType":
        """Parse a classroom type from English or Turkish spelling."""
        if isinstance(value, ClassroomType):
            return value
        canonical = normalize_token(value, _CLASSROOM_TYPE_LOOKUP)
        if canonical is None:
            raise InvalidDataError(f"Unknown classroom type: {value!r}", "classroom")
        return cls(canonical)


_CLASSROOM_TYPE_LOOKUP = build_alias_lookup(
    {
        "theory": ("teorik", "lecture"),
        "lab": ("laboratory", "laboratuvar"),
        "hybrid": ("hibrit",),
    }
)


class Category(str, Enum):
    """Course category."""

    COMPULSORY = "compulsory"
    ELECTIVE = "elective"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        if isinstance(value, Category):
            return value
        canonical = normalize_token(value, _CATEGORY_LOOKUP)
        if canonical is None:
            raise InvalidDataError(f"Unknown course category: {value!r}", "course")
        return cls(canonical)


_CATEGORY_LOOKUP = build_alias_lookup(
    {
        "compulsory": ("zorunlu", "mandatory", "required"),
        "elective": ("seçmeli", "optional"),
    }
)


class Term(str, Enum):
    """Academic term."""

    FALL = "fall"
    SPRING = "spring"

    @classmethod
    def parse(cls, value: Any) -> "Term":
        if isinstance(value, Term):
            return value
        canonical = normalize_token(value, _TERM_LOOKUP)
        if canonical is None:
            raise InvalidDataError(f"Unknown term: {value!r}", "course")
        return cls(canonical)


_TERM_LOOKUP = build_alias_lookup(
    {
        "fall": ("güz", "autumn"),
        "spring": ("bahar",),
    }
)


class FailureReason(str, Enum):
    """Reasons a time window was rejected for a session."""

    TEACHER_UNAVAILABLE = "teacher_unavailable"
    TEACHER_CONFLICT = "teacher_conflict"
    DEPARTMENT_CONFLICT = "department_conflict"
    NO_CLASSROOM = "no_classroom"
    INSUFFICIENT_BLOCKS = "insufficient_blocks"


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "")
    return bool(value)


def calculate_adjusted_seat_count(student_count: int, capacity_margin: float) -> int:
    """Seats a classroom must provide once the course's capacity margin is applied.

    Args:
        student_count: Total enrolled students
        capacity_margin: Percentage (0-30) of students not expected to attend

    Returns:
        ceil(student_count * (1 - margin/100)) when margin > 0, else student_count
    """
    if capacity_margin > 0:
        return math.ceil(student_count * (1 - capacity_margin / 100))
    return student_count


@dataclass(frozen=True)
class TimeBlock:
    """A fixed-duration slot of the working day."""

    start: str
    end: str

    @property
    def time_range(self) -> str:
        """Range string such as '08:00-09:00'."""
        return f"{self.start}-{self.end}"

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass
class TimeSettings:
    """Term-wide time settings used to build the time grid."""

    slot_duration: int = DEFAULT_SLOT_DURATION
    day_start: str = DEFAULT_DAY_START
    day_end: str = DEFAULT_DAY_END
    lunch_start: str = DEFAULT_LUNCH_START
    lunch_end: str = DEFAULT_LUNCH_END

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeSettings":
        """Create settings from a dictionary; missing keys take defaults.

        Raises:
            InvalidTimeSettingsError: If slot_duration is not an integer
        """
        raw_slot = data.get("slot_duration", DEFAULT_SLOT_DURATION)
        try:
            slot_duration = int(raw_slot)
        except (TypeError, ValueError):
            raise InvalidTimeSettingsError("slot_duration", raw_slot, "must be an integer") from None

        return cls(
            slot_duration=slot_duration,
            day_start=data.get("day_start", DEFAULT_DAY_START),
            day_end=data.get("day_end", DEFAULT_DAY_END),
            lunch_start=data.get("lunch_start", DEFAULT_LUNCH_START),
            lunch_end=data.get("lunch_end", DEFAULT_LUNCH_END),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "slot_duration": self.slot_duration,
            "day_start": self.day_start,
            "day_end": self.day_end,
            "lunch_start": self.lunch_start,
            "lunch_end": self.lunch_end,
        }


@dataclass
class Availability:
    """Sparse per-day allow-list of slot start times.

    An unconfigured map (no keys at all) means available everywhere. Once
    any day key is present, days that are missing or empty are fully
    unavailable.
    """

    slots: dict[Day, frozenset[str]] = field(default_factory=dict)
    configured: bool = False

    @classmethod
    def from_raw(cls, raw: Any) -> "Availability":
        """Parse an availability map without ever raising.

        Accepts None, a {day: [start, ...]} mapping, or the same mapping
        serialized as JSON text. Anything unparseable is logged and treated
        as fully open.
        """
        if isinstance(raw, Availability):
            return raw
        if raw is None or raw == "":
            return cls()

        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning(f"Malformed availability JSON treated as open: {raw[:60]!r}")
                return cls()

        if not isinstance(raw, dict):
            logger.warning(f"Availability must be a mapping, got {type(raw).__name__}")
            return cls()

        if not raw:
            return cls()

        slots: dict[Day, set[str]] = {}
        for key, times in raw.items():
            day = Day.parse(key)
            if day is None:
                logger.warning(f"Ignoring non-working day '{key}' in availability map")
                continue
            if isinstance(times, str):
                times = [times]
            elif not isinstance(times, (list, tuple, set)):
                logger.warning(f"Availability for '{key}' is not a list; day treated as empty")
                times = []
            day_slots = slots.setdefault(day, set())
            day_slots.update(str(t).strip() for t in times if t is not None)

        return cls(
            slots={day: frozenset(times) for day, times in slots.items()},
            configured=True,
        )

    def allows(self, day: Day, start: str) -> bool:
        """Check whether a slot starting at ``start`` on ``day`` is allowed."""
        if not self.configured:
            return True
        return start in self.slots.get(day, frozenset())

    def hours_on(self, day: Day) -> list[str]:
        """Sorted slot starts listed for a day (empty if none)."""
        return sorted(self.slots.get(day, frozenset()))

    def to_dict(self) -> dict[str, list[str]]:
        return {day.value: sorted(times) for day, times in self.slots.items()}


@dataclass
class Session:
    """A portion of a course's weekly hours of one type."""

    type: SessionType
    hours: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        return cls(type=SessionType.parse(data["type"]), hours=int(data["hours"]))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "hours": self.hours}


@dataclass
class DepartmentEnrollment:
    """Students of one department enrolled in a course."""

    department: str
    student_count: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DepartmentEnrollment":
        return cls(
            department=str(data["department"]),
            student_count=int(data.get("student_count", 0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"department": self.department, "student_count": self.student_count}


@dataclass
class FixedPlacement:
    """A manually pinned session that the engine must not move."""

    day: str
    start: str
    end: str
    session_type: SessionType
    classroom_id: int | None = None

    @property
    def time_range(self) -> str:
        return f"{self.start}-{self.end}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FixedPlacement":
        return cls(
            day=str(data["day"]),
            start=str(data["start"]).strip(),
            end=str(data["end"]).strip(),
            session_type=SessionType.parse(data.get("session_type", "theory")),
            classroom_id=data.get("classroom_id"),
        )


@dataclass
class CourseData:
    """Read-only snapshot of a course prepared for scheduling."""

    id: int
    code: str
    name: str
    teacher_id: int | None
    faculty: str
    level: str
    category: Category
    term: Term
    total_hours: int
    capacity_margin: float = 0.0
    sessions: list[Session] = field(default_factory=list)
    departments: list[DepartmentEnrollment] = field(default_factory=list)
    teacher_availability: Availability = field(default_factory=Availability)
    fixed_placements: list[FixedPlacement] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CourseData":
        """Create a CourseData from a snapshot dictionary."""
        if "id" not in data:
            raise InvalidDataError("missing 'id'", "course", data.get("code"))

        try:
            sessions = [Session.from_dict(s) for s in data.get("sessions", [])]
            departments = [
                DepartmentEnrollment.from_dict(d) for d in data.get("departments", [])
            ]
            fixed = [FixedPlacement.from_dict(f) for f in data.get("fixed_placements", [])]
            margin = float(data.get("capacity_margin", 0) or 0)
            total_hours = data.get("total_hours")
            total_hours = (
                int(total_hours)
                if total_hours is not None
                else sum(s.hours for s in sessions)
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidDataError(str(e), "course", data["id"]) from e

        if not 0 <= margin <= 30:
            logger.warning(
                f"Course {data['id']}: capacity margin {margin}% clamped to 0-30%"
            )
            margin = min(30.0, max(0.0, margin))

        return cls(
            id=data["id"],
            code=str(data.get("code", "")),
            name=str(data.get("name", "")),
            teacher_id=data.get("teacher_id"),
            faculty=str(data.get("faculty", "")),
            level=str(data.get("level", "")),
            category=Category.parse(data.get("category", "compulsory")),
            term=Term.parse(data.get("term", "fall")),
            total_hours=total_hours,
            capacity_margin=margin,
            sessions=sessions,
            departments=departments,
            teacher_availability=Availability.from_raw(data.get("teacher_availability")),
            fixed_placements=fixed,
        )

    @property
    def student_count(self) -> int:
        """Total students across all departments."""
        return sum(d.student_count for d in self.departments)

    @property
    def main_department(self) -> str:
        """First listed department, used for classroom preference."""
        return self.departments[0].department if self.departments else ""

    @property
    def department_names(self) -> set[str]:
        return {d.department for d in self.departments}

    @property
    def adjusted_seat_count(self) -> int:
        return calculate_adjusted_seat_count(self.student_count, self.capacity_margin)

    @property
    def is_compulsory(self) -> bool:
        return self.category == Category.COMPULSORY

    @property
    def session_hours(self) -> int:
        """Total hours over all sessions."""
        return sum(s.hours for s in self.sessions)


@dataclass
class ClassroomData:
    """Read-only snapshot of a classroom."""

    id: int
    name: str
    capacity: int
    type: ClassroomType
    priority_department: str | None = None
    availability: Availability = field(default_factory=Availability)
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClassroomData":
        """Create a ClassroomData from a snapshot dictionary."""
        if "id" not in data:
            raise InvalidDataError("missing 'id'", "classroom", data.get("name"))
        try:
            capacity = int(data["capacity"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidDataError("capacity must be an integer", "classroom", data["id"]) from e

        return cls(
            id=data["id"],
            name=str(data.get("name", data["id"])),
            capacity=capacity,
            type=ClassroomType.parse(data.get("type", "theory")),
            priority_department=data.get("priority_department") or None,
            availability=Availability.from_raw(data.get("availability")),
            is_active=_parse_bool(data.get("is_active", True)),
        )


@dataclass
class ScheduleItem:
    """A placement of one course session in a classroom at a given time.

    Non-fixed items cover exactly one time block; fixed items cover their
    pinned range and carry its length in ``session_hours``.
    """

    course_id: int
    classroom_id: int
    day: Day
    time_range: str
    session_type: SessionType
    session_hours: int = 1
    is_fixed: bool = False

    @property
    def start(self) -> str:
        return self.time_range.split("-")[0].strip()

    @property
    def end(self) -> str:
        return self.time_range.split("-")[-1].strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "course_id": self.course_id,
            "classroom_id": self.classroom_id,
            "day": self.day.value,
            "time_range": self.time_range,
            "session_type": self.session_type.value,
            "session_hours": self.session_hours,
            "is_fixed": self.is_fixed,
        }


@dataclass
class SlotAttempt:
    """One rejected time window for a session."""

    time_range: str
    reason: FailureReason
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "time_range": self.time_range,
            "reason": self.reason.value,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class DayAttempt:
    """All rejected windows of a session on one day."""

    day: Day
    attempts: list[SlotAttempt] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.value,
            "attempted_time_slots": [a.to_dict() for a in self.attempts],
        }


@dataclass
class SessionDiagnostic:
    """Failure record of a session that could not be placed."""

    session_type: SessionType
    session_hours: int
    attempted_days: list[DayAttempt] = field(default_factory=list)
    split_attempted: bool = False

    def reason_counts(self) -> dict[str, int]:
        """Count rejected windows by failure reason."""
        counts: dict[str, int] = {}
        for day_attempt in self.attempted_days:
            for attempt in day_attempt.attempts:
                counts[attempt.reason.value] = counts.get(attempt.reason.value, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_type": self.session_type.value,
            "session_hours": self.session_hours,
            "split_attempted": self.split_attempted,
            "reason_counts": self.reason_counts(),
            "attempted_days": [d.to_dict() for d in self.attempted_days],
        }


@dataclass
class CourseDiagnostic:
    """Failure tree of a course with unplaced sessions."""

    course_id: int
    code: str
    name: str
    total_hours: int
    student_count: int
    faculty: str
    level: str
    term: Term
    teacher_id: int | None
    departments: list[DepartmentEnrollment]
    failed_sessions: list[SessionDiagnostic] = field(default_factory=list)

    def reason_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for session in self.failed_sessions:
            for reason, count in session.reason_counts().items():
                counts[reason] = counts.get(reason, 0) + count
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "course_id": self.course_id,
            "code": self.code,
            "name": self.name,
            "total_hours": self.total_hours,
            "student_count": self.student_count,
            "faculty": self.faculty,
            "level": self.level,
            "term": self.term.value,
            "teacher_id": self.teacher_id,
            "departments": [d.to_dict() for d in self.departments],
            "failed_sessions": [s.to_dict() for s in self.failed_sessions],
        }


@dataclass
class UnscheduledCourse:
    """A course with at least one unplaced session."""

    course_id: int
    code: str
    name: str
    total_hours: int
    student_count: int
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "course_id": self.course_id,
            "code": self.code,
            "name": self.name,
            "total_hours": self.total_hours,
            "student_count": self.student_count,
            "reason": self.reason,
        }


@dataclass
class LunchOverflowWarning:
    """A fixed placement that spans the lunch break."""

    course_id: int
    code: str
    day: str
    time_range: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "course_id": self.course_id,
            "code": self.code,
            "day": self.day,
            "time_range": self.time_range,
            "message": self.message,
        }


@dataclass
class ScheduleMetrics:
    """Quality metrics of a generated schedule."""

    avg_capacity_margin: float = 0.0
    max_capacity_waste: float = 0.0
    teacher_load_stddev: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "avg_capacity_margin": self.avg_capacity_margin,
            "max_capacity_waste": self.max_capacity_waste,
            "teacher_load_stddev": self.teacher_load_stddev,
        }


@dataclass
class ScheduleStatistics:
    """Distribution of schedule items."""

    by_day: dict[str, int] = field(default_factory=dict)
    by_classroom: dict[str, int] = field(default_factory=dict)
    by_session_type: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "by_day": self.by_day,
            "by_classroom": self.by_classroom,
            "by_session_type": self.by_session_type,
        }


@dataclass
class ScheduleResult:
    """Result of a timetable generation run."""

    success: bool = False
    message: str = ""
    schedule: list[ScheduleItem] = field(default_factory=list)
    unscheduled: list[UnscheduledCourse] = field(default_factory=list)
    diagnostics: list[CourseDiagnostic] = field(default_factory=list)
    metrics: ScheduleMetrics = field(default_factory=ScheduleMetrics)
    statistics: ScheduleStatistics = field(default_factory=ScheduleStatistics)
    lunch_overflow_warnings: list[LunchOverflowWarning] = field(default_factory=list)
    success_rate: float = 0.0
    seed: int | None = None
    duration_seconds: float = 0.0
    generation_date: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def scheduled_count(self) -> int:
        """Number of schedule items produced."""
        return len(self.schedule)

    @property
    def unscheduled_count(self) -> int:
        """Number of courses with unplaced sessions."""
        return len(self.unscheduled)

    @property
    def perfect(self) -> bool:
        return not self.unscheduled

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "scheduled_count": self.scheduled_count,
            "unscheduled_count": self.unscheduled_count,
            "success_rate": self.success_rate,
            "perfect": self.perfect,
            "generation_date": self.generation_date,
            "seed": self.seed,
            "duration_seconds": self.duration_seconds,
            "schedule": [item.to_dict() for item in self.schedule],
            "unscheduled": [u.to_dict() for u in self.unscheduled],
            "metrics": self.metrics.to_dict(),
            "statistics": self.statistics.to_dict(),
            "lunch_overflow_warnings": [w.to_dict() for w in self.lunch_overflow_warnings],
        }
        if self.unscheduled:
            data["diagnostics"] = [d.to_dict() for d in self.diagnostics]
        return data
