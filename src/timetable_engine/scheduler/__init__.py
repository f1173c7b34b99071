"""University timetable generation.

This package assigns course sessions to (day, time block, classroom)
triples for a term. Fixed placements are honored first, then courses are
placed greedily in order of difficulty and the result is improved by hill
climbing. Sessions that cannot be placed are reported with per-window
failure diagnostics.

Main classes:
- TimetableScheduler: Runs one generation over a snapshot
- EngineSettings: Run settings and presets
- ConfigLoader: Loads a snapshot from a configuration directory

Usage:
    from timetable_engine.scheduler import TimetableScheduler, load_snapshot

    snapshot = load_snapshot("term.json")
    scheduler = TimetableScheduler(snapshot.classrooms, snapshot.settings)
    result = scheduler.schedule(snapshot.courses)
"""

from .algorithm import PlacementState, TimetableScheduler, create_scheduler
from .availability import is_classroom_available, is_teacher_available
from .config import ConfigLoader, EngineSettings, Snapshot, load_snapshot
from .conflicts import Conflict, ConflictChecker, find_conflict, has_conflict
from .diagnostics import (
    DiagnosticsCollector,
    calculate_schedule_metrics,
    calculate_schedule_statistics,
)
from .exporter import export_schedule_json, load_result_json
from .fixed import FixedPlacementResult, process_fixed_placements
from .improver import calculate_soft_score, improve_schedule
from .models import (
    Availability,
    Category,
    ClassroomData,
    ClassroomType,
    CourseData,
    Day,
    FailureReason,
    ScheduleItem,
    ScheduleResult,
    Session,
    SessionType,
    Term,
    TimeBlock,
    TimeSettings,
)
from .rooms import find_classroom, score_utilization
from .timegrid import build_time_blocks
from .unscheduled_excel_generator import generate_unscheduled_excel
from .utils import calculate_course_difficulty, rank_courses

__all__ = [
    # Main scheduler
    "TimetableScheduler",
    "PlacementState",
    "create_scheduler",
    # Configuration
    "ConfigLoader",
    "EngineSettings",
    "Snapshot",
    "load_snapshot",
    # Models
    "Availability",
    "Category",
    "ClassroomData",
    "ClassroomType",
    "CourseData",
    "Day",
    "FailureReason",
    "ScheduleItem",
    "ScheduleResult",
    "Session",
    "SessionType",
    "Term",
    "TimeBlock",
    "TimeSettings",
    # Components
    "build_time_blocks",
    "is_teacher_available",
    "is_classroom_available",
    "Conflict",
    "ConflictChecker",
    "find_conflict",
    "has_conflict",
    "find_classroom",
    "score_utilization",
    "FixedPlacementResult",
    "process_fixed_placements",
    "calculate_course_difficulty",
    "rank_courses",
    "calculate_soft_score",
    "improve_schedule",
    "DiagnosticsCollector",
    "calculate_schedule_metrics",
    "calculate_schedule_statistics",
    # Export
    "export_schedule_json",
    "load_result_json",
    "generate_unscheduled_excel",
]
