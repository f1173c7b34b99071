"""Classroom configuration loader."""

import csv
import json
from pathlib import Path

from ...exceptions import InvalidDataError
from ..models import ClassroomData

_FALSE_VALUES = {"false", "0", "no", "hayır", "hayir"}


class ClassroomConfig:
    """Loader for classrooms from classrooms.csv or classrooms.json."""

    def __init__(self, classrooms_path: Path | None = None):
        self.classrooms: list[ClassroomData] = []
        self._by_id: dict[int, ClassroomData] = {}

        if classrooms_path and classrooms_path.exists():
            if classrooms_path.suffix.lower() == ".csv":
                self._load_csv(classrooms_path)
            else:
                self._load_json(classrooms_path)

    def _add(self, classroom: ClassroomData) -> None:
        if classroom.id in self._by_id:
            raise InvalidDataError("duplicate classroom id", "classroom", classroom.id)
        self.classrooms.append(classroom)
        self._by_id[classroom.id] = classroom

    def _load_csv(self, path: Path) -> None:
        """Load classrooms from CSV; availability is JSON text in its cell."""
        with open(path, encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                raw_id = (row.get("id") or "").strip()
                if not raw_id:
                    raise InvalidDataError(
                        f"missing 'id' on line {reader.line_num}", "classroom"
                    )
                is_active = (row.get("is_active") or "true").strip().lower()
                self._add(
                    ClassroomData.from_dict(
                        {
                            "id": int(raw_id) if raw_id.isdigit() else raw_id,
                            "name": (row.get("name") or raw_id).strip(),
                            "capacity": (row.get("capacity") or "").strip(),
                            "type": (row.get("type") or "theory").strip(),
                            "priority_department": (
                                row.get("priority_department") or ""
                            ).strip(),
                            "availability": (row.get("availability") or "").strip(),
                            "is_active": is_active not in _FALSE_VALUES,
                        }
                    )
                )

    def _load_json(self, path: Path) -> None:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        for record in data:
            self._add(ClassroomData.from_dict(record))

    def get_classroom(self, classroom_id: int) -> ClassroomData | None:
        return self._by_id.get(classroom_id)
