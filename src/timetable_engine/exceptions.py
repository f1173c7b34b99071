"""Custom exceptions for the timetable engine."""


class SchedulerError(Exception):
    """Base exception for timetable engine errors."""

    pass


class InvalidTimeSettingsError(SchedulerError):
    """Time settings cannot produce a time grid."""

    def __init__(self, field: str, value: object, reason: str | None = None):
        self.field = field
        self.value = value
        message = f"Invalid time setting '{field}': {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidDataError(SchedulerError):
    """A course or classroom record is unusable."""

    def __init__(self, message: str, entity: str | None = None, record_id: object = None):
        self.entity = entity
        self.record_id = record_id
        location = ""
        if entity:
            location += f" in {entity}"
        if record_id is not None:
            location += f" '{record_id}'"
        super().__init__(f"Invalid data{location}: {message}")


class ConfigFileNotFoundError(SchedulerError):
    """Configuration directory or snapshot file is missing."""

    def __init__(self, path: object):
        self.path = path
        super().__init__(f"Configuration not found: {path}")


class SchedulerTimeoutError(SchedulerError):
    """Schedule generation exceeded its time limit."""

    def __init__(self, timeout_seconds: float, courses_processed: int, total_courses: int):
        self.timeout_seconds = timeout_seconds
        self.courses_processed = courses_processed
        self.total_courses = total_courses
        super().__init__(
            f"Scheduler timeout exceeded: {timeout_seconds}s "
            f"({courses_processed}/{total_courses} courses processed)"
        )
