"""Configuration loaders for the scheduler."""

from .classrooms import ClassroomConfig
from .courses import CourseConfig
from .loader import ConfigLoader, Snapshot, load_snapshot
from .settings import EngineSettings

__all__ = [
    "ConfigLoader",
    "ClassroomConfig",
    "CourseConfig",
    "EngineSettings",
    "Snapshot",
    "load_snapshot",
]
