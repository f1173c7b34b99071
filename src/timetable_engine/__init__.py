"""Timetable Engine - weekly university timetable generation.

Example usage:
    from timetable_engine import TimetableScheduler, load_snapshot

    snapshot = load_snapshot("term.json")
    scheduler = TimetableScheduler(snapshot.classrooms, snapshot.settings)
    result = scheduler.schedule(snapshot.courses)

    print(f"Placed items: {result.scheduled_count}")
    print(f"Success rate: {result.success_rate}%")

    # Export to JSON
    from timetable_engine.scheduler import export_schedule_json
    export_schedule_json(result, "schedule.json")
"""

from .exceptions import (
    ConfigFileNotFoundError,
    InvalidDataError,
    InvalidTimeSettingsError,
    SchedulerError,
    SchedulerTimeoutError,
)
from .scheduler import (
    EngineSettings,
    ScheduleResult,
    TimetableScheduler,
    load_snapshot,
)

__version__ = "0.1.0"

__all__ = [
    # Main scheduler
    "TimetableScheduler",
    "EngineSettings",
    "ScheduleResult",
    "load_snapshot",
    # Exceptions
    "SchedulerError",
    "InvalidTimeSettingsError",
    "InvalidDataError",
    "ConfigFileNotFoundError",
    "SchedulerTimeoutError",
]
