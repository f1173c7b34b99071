"""Course configuration loader."""

import json
from pathlib import Path

from ...exceptions import InvalidDataError
from ..models import CourseData


class CourseConfig:
    """Loader for courses from courses.json."""

    def __init__(self, courses_path: Path | None = None):
        self.courses: list[CourseData] = []
        self._by_id: dict[int, CourseData] = {}

        if courses_path and courses_path.exists():
            with open(courses_path, encoding="utf-8") as f:
                self.load_records(json.load(f))

    def load_records(self, records: list[dict]) -> None:
        """Parse course records and add them to the loader."""
        for record in records:
            course = CourseData.from_dict(record)
            if course.id in self._by_id:
                raise InvalidDataError("duplicate course id", "course", course.id)
            self.courses.append(course)
            self._by_id[course.id] = course

    def get_course(self, course_id: int) -> CourseData | None:
        return self._by_id.get(course_id)
