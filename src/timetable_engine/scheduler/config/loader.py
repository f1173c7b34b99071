"""Unified configuration loader."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from ...exceptions import ConfigFileNotFoundError, InvalidDataError
from ..models import ClassroomData, CourseData
from .classrooms import ClassroomConfig
from .courses import CourseConfig
from .settings import EngineSettings

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    """Everything one engine run consumes."""

    settings: EngineSettings
    courses: list[CourseData]
    classrooms: list[ClassroomData]


class ConfigLoader:
    """Unified loader for a configuration directory."""

    def __init__(self, config_dir: Path | str):
        """
        Initialize configuration loader.

        Args:
            config_dir: Path to directory containing configuration files.
                       Expected files:
                       - courses.json
                       - classrooms.csv (or classrooms.json)
                       - settings.json (optional, defaults apply)

        Raises:
            ConfigFileNotFoundError: If the directory or a required file is missing
        """
        self.config_dir = Path(config_dir)
        if not self.config_dir.is_dir():
            raise ConfigFileNotFoundError(self.config_dir)

        courses_path = self._get_path("courses.json")
        if courses_path is None:
            raise ConfigFileNotFoundError(self.config_dir / "courses.json")

        classrooms_path = self._get_path("classrooms.csv") or self._get_path(
            "classrooms.json"
        )
        if classrooms_path is None:
            raise ConfigFileNotFoundError(self.config_dir / "classrooms.csv")

        self.courses = CourseConfig(courses_path)
        self.classrooms = ClassroomConfig(classrooms_path)
        self.settings = self._load_settings(self._get_path("settings.json"))

    def _get_path(self, filename: str) -> Path | None:
        """Get path to config file if it exists."""
        path = self.config_dir / filename
        return path if path.exists() else None

    def _load_settings(self, path: Path | None) -> EngineSettings:
        if path is None:
            logger.info("No settings.json found, using default settings")
            return EngineSettings()
        with open(path, encoding="utf-8") as f:
            return EngineSettings.from_dict(json.load(f))

    def snapshot(self) -> Snapshot:
        return Snapshot(
            settings=self.settings,
            courses=self.courses.courses,
            classrooms=self.classrooms.classrooms,
        )


def load_snapshot(path: Path | str) -> Snapshot:
    """Load a snapshot from a configuration directory or a single JSON file.

    The JSON document has the shape
    ``{"settings": {...}, "courses": [...], "classrooms": [...]}``.

    Raises:
        ConfigFileNotFoundError: If the path does not exist
        InvalidDataError: If the document or one of its records is invalid
    """
    path = Path(path)
    if path.is_dir():
        return ConfigLoader(path).snapshot()
    if not path.exists():
        raise ConfigFileNotFoundError(path)

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidDataError(f"malformed JSON: {e}", "snapshot") from e

    if not isinstance(data, dict):
        raise InvalidDataError("snapshot must be a JSON object", "snapshot")

    courses = CourseConfig()
    courses.load_records(data.get("courses", []))
    classrooms = [ClassroomData.from_dict(c) for c in data.get("classrooms", [])]

    return Snapshot(
        settings=EngineSettings.from_dict(data.get("settings", {})),
        courses=courses.courses,
        classrooms=classrooms,
    )
