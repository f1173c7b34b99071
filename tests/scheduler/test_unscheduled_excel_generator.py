"""Tests for schedule export and the unscheduled courses report."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from openpyxl import load_workbook

from timetable_engine.exceptions import InvalidDataError
from timetable_engine.scheduler.algorithm import TimetableScheduler
from timetable_engine.scheduler.exporter import export_schedule_json, load_result_json
from timetable_engine.scheduler.unscheduled_excel_generator import (
    UnscheduledExcelGenerator,
    generate_unscheduled_excel,
)

SAMPLE_DIAGNOSTICS = [
    {
        "course_id": 2,
        "code": "MATH101",
        "name": "Calculus I",
        "failed_sessions": [
            {
                "session_type": "theory",
                "session_hours": 2,
                "split_attempted": False,
                "reason_counts": {"department_conflict": 2, "no_classroom": 1},
                "attempted_days": [
                    {
                        "day": "monday",
                        "attempted_time_slots": [
                            {
                                "time_range": "08:00-10:00",
                                "reason": "department_conflict",
                                "message": "Overlaps CENG101",
                                "details": {"conflicting_courses": ["CENG101"]},
                            },
                            {
                                "time_range": "09:00-11:00",
                                "reason": "department_conflict",
                                "message": "Overlaps CENG101",
                                "details": {"conflicting_courses": ["CENG101"]},
                            },
                        ],
                    },
                    {
                        "day": "tuesday",
                        "attempted_time_slots": [
                            {
                                "time_range": "08:00-10:00",
                                "reason": "no_classroom",
                                "message": "No suitable theory classroom",
                                "details": {"required_capacity": 55},
                            }
                        ],
                    },
                ],
            }
        ],
    }
]

SAMPLE_RESULT = {
    "success": True,
    "unscheduled_count": 1,
    "success_rate": 62.5,
    "schedule": [],
    "unscheduled": [
        {
            "course_id": 2,
            "code": "MATH101",
            "name": "Calculus I",
            "total_hours": 3,
            "student_count": 55,
            "reason": "No suitable time slot or classroom found (department conflicts: 2)",
        }
    ],
    "diagnostics": SAMPLE_DIAGNOSTICS,
}


class TestExporter:
    """Tests for JSON export of results."""

    def test_export_and_load(self, tmp_path, make_course, make_classroom, engine_settings):
        result = TimetableScheduler([make_classroom()], engine_settings).schedule(
            [make_course(1, teacher_id=1)]
        )
        output = tmp_path / "nested" / "schedule.json"
        export_schedule_json(result, output)

        data = load_result_json(output)
        assert data["success"] is True
        assert data["seed"] == 42
        assert len(data["schedule"]) == 2
        assert "diagnostics" not in data

    def test_export_without_diagnostics(self, tmp_path, make_course, make_classroom, engine_settings):
        result = TimetableScheduler([make_classroom(capacity=10)], engine_settings).schedule(
            [make_course(1, teacher_id=1)]
        )
        assert result.diagnostics

        output = tmp_path / "schedule.json"
        assert export_schedule_json(result, output, include_diagnostics=False) == output

        data = load_result_json(output)
        assert "diagnostics" not in data
        assert data["unscheduled"][0]["course_id"] == 1

    def test_export_keeps_diagnostics_by_default(
        self, tmp_path, make_course, make_classroom, engine_settings
    ):
        result = TimetableScheduler([make_classroom(capacity=10)], engine_settings).schedule(
            [make_course(1, teacher_id=1)]
        )
        output = export_schedule_json(result, tmp_path / "schedule.json")
        assert load_result_json(output)["diagnostics"][0]["course_id"] == 1

    def test_load_rejects_other_documents(self, tmp_path):
        path = tmp_path / "other.json"
        path.write_text(json.dumps({"foo": 1}), encoding="utf-8")
        with pytest.raises(InvalidDataError):
            load_result_json(path)

    def test_load_rejects_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidDataError):
            load_result_json(path)


class TestUnscheduledExcelGenerator:
    """Tests for UnscheduledExcelGenerator."""

    def test_translate(self):
        generator = UnscheduledExcelGenerator()
        assert generator.translate_reason("no_classroom") == "No suitable classroom"
        assert generator.translate_reason("other") == "other"
        assert generator.translate_day("Salı") == "Tuesday"

    def test_count_by_reason(self):
        counts = UnscheduledExcelGenerator().count_by_reason(SAMPLE_DIAGNOSTICS)
        assert counts == {"department_conflict": 2, "no_classroom": 1}

    def test_workbook_sheets(self):
        wb = UnscheduledExcelGenerator().create_workbook(SAMPLE_RESULT)
        assert wb.sheetnames == ["Unscheduled", "Attempts"]

        ws = wb["Unscheduled"]
        assert ws["A1"].value == "UNSCHEDULED COURSES"
        assert ws["C4"].value == 1
        assert ws["C5"].value == "62.5%"

        attempts = wb["Attempts"]
        assert attempts["A1"].value == "Code"
        assert attempts.max_row == 4
        assert attempts["C2"].value == "Monday"
        assert attempts["E2"].value == "Department conflict"
        assert attempts["F2"].value == "conflicting courses: CENG101"
        assert attempts["C4"].value == "Tuesday"

    def test_course_rows(self):
        wb = UnscheduledExcelGenerator().create_workbook(SAMPLE_RESULT)
        ws = wb["Unscheduled"]
        codes = [row[1] for row in ws.iter_rows(values_only=True)]
        assert "MATH101" in codes

    def test_empty_result(self):
        wb = UnscheduledExcelGenerator().create_workbook({"unscheduled": []})
        assert wb["Attempts"].max_row == 1

    def test_generate_file(self):
        with TemporaryDirectory() as tmpdir:
            input_path = Path(tmpdir) / "schedule.json"
            input_path.write_text(json.dumps(SAMPLE_RESULT), encoding="utf-8")
            output_path = Path(tmpdir) / "reports" / "unscheduled.xlsx"

            result = generate_unscheduled_excel(input_path, output_path)

            assert result == output_path
            assert output_path.exists()
            wb = load_workbook(output_path)
            assert wb["Unscheduled"]["A1"].value == "UNSCHEDULED COURSES"
