"""Test fixtures for timetable engine tests."""

import pytest

from timetable_engine.scheduler.config.settings import EngineSettings
from timetable_engine.scheduler.models import (
    Availability,
    Category,
    ClassroomData,
    ClassroomType,
    CourseData,
    DepartmentEnrollment,
    FixedPlacement,
    Session,
    SessionType,
    Term,
    TimeSettings,
)


def build_course(
    id: int = 1,
    code: str | None = None,
    teacher_id: int | None = None,
    level: str = "1",
    category: Category = Category.COMPULSORY,
    term: Term = Term.FALL,
    sessions: list[tuple[SessionType, int]] | None = None,
    departments: list[tuple[str, int]] | None = None,
    capacity_margin: float = 0.0,
    teacher_availability: dict | None = None,
    fixed_placements: list[FixedPlacement] | None = None,
) -> CourseData:
    sessions = sessions if sessions is not None else [(SessionType.THEORY, 2)]
    departments = departments if departments is not None else [("CENG", 30)]
    return CourseData(
        id=id,
        code=code or f"C{id:03d}",
        name=f"Course {id}",
        teacher_id=teacher_id,
        faculty="Engineering",
        level=level,
        category=category,
        term=term,
        total_hours=sum(hours for _, hours in sessions),
        capacity_margin=capacity_margin,
        sessions=[Session(type=t, hours=h) for t, h in sessions],
        departments=[DepartmentEnrollment(d, n) for d, n in departments],
        teacher_availability=Availability.from_raw(teacher_availability),
        fixed_placements=fixed_placements or [],
    )


def build_classroom(
    id: int = 100,
    capacity: int = 40,
    type: ClassroomType = ClassroomType.THEORY,
    priority_department: str | None = None,
    availability: dict | None = None,
    is_active: bool = True,
    name: str | None = None,
) -> ClassroomData:
    return ClassroomData(
        id=id,
        name=name or f"R{id}",
        capacity=capacity,
        type=type,
        priority_department=priority_department,
        availability=Availability.from_raw(availability),
        is_active=is_active,
    )


@pytest.fixture
def make_course():
    """Factory for CourseData with sensible defaults."""
    return build_course


@pytest.fixture
def make_classroom():
    """Factory for ClassroomData with sensible defaults."""
    return build_classroom


@pytest.fixture
def time_settings():
    """Default term time settings (08:00-18:00, lunch 12:00-13:00)."""
    return TimeSettings()


@pytest.fixture
def engine_settings():
    """Seeded engine settings for reproducible runs."""
    return EngineSettings(seed=42, timeout_seconds=None)


@pytest.fixture
def snapshot_dict():
    """A small snapshot document as loaded from JSON."""
    return {
        "settings": {"preset": "fast", "seed": 7},
        "courses": [
            {
                "id": 1,
                "code": "CENG101",
                "name": "Introduction to Programming",
                "teacher_id": 10,
                "faculty": "Engineering",
                "level": "1",
                "category": "zorunlu",
                "term": "güz",
                "sessions": [
                    {"type": "teorik", "hours": 2},
                    {"type": "lab", "hours": 2},
                ],
                "departments": [{"department": "CENG", "student_count": 35}],
                "teacher_availability": {"Pazartesi": ["09:00", "10:00", "11:00"]},
            },
            {
                "id": 2,
                "code": "MATH101",
                "name": "Calculus I",
                "teacher_id": 11,
                "faculty": "Science",
                "level": "1",
                "category": "compulsory",
                "term": "fall",
                "sessions": [{"type": "theory", "hours": 3}],
                "departments": [
                    {"department": "CENG", "student_count": 35},
                    {"department": "EE", "student_count": 20},
                ],
            },
        ],
        "classrooms": [
            {"id": 100, "name": "A-101", "capacity": 60, "type": "teorik"},
            {"id": 101, "name": "LAB-1", "capacity": 40, "type": "lab"},
        ],
    }
