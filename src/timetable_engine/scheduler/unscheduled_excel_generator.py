"""Excel report of unscheduled courses and why their sessions failed."""

from datetime import datetime
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from .exporter import load_result_json
from .models import Day

REASON_LABELS = {
    "teacher_unavailable": "Teacher unavailable",
    "teacher_conflict": "Teacher conflict",
    "department_conflict": "Department conflict",
    "no_classroom": "No suitable classroom",
    "insufficient_blocks": "Not enough consecutive blocks",
}

STRINGS = {
    "title": "UNSCHEDULED COURSES",
    "generated": "Generated:",
    "total_count": "Unscheduled courses:",
    "success_rate": "Success rate:",
    "by_reason": "Rejected windows by reason:",
    "col_number": "#",
    "col_code": "Code",
    "col_course": "Course",
    "col_students": "Students",
    "col_hours": "Hours",
    "col_reason": "Reason",
    "col_session": "Session",
    "col_day": "Day",
    "col_time": "Time",
    "col_failure": "Failure",
    "col_details": "Details",
}

COURSE_COLUMN_WIDTHS = {
    "A": 5.0,   # #
    "B": 14.0,  # Code
    "C": 40.0,  # Course
    "D": 10.0,  # Students
    "E": 8.0,   # Hours
    "F": 70.0,  # Reason
}

ATTEMPT_COLUMN_WIDTHS = {
    "A": 14.0,  # Code
    "B": 14.0,  # Session
    "C": 14.0,  # Day
    "D": 14.0,  # Time
    "E": 30.0,  # Failure
    "F": 60.0,  # Details
}

# Fonts
FONT_TITLE = Font(name="Calibri", size=16, bold=True)
FONT_HEADER = Font(name="Calibri", size=11, bold=True)
FONT_SUMMARY = Font(name="Calibri", size=11, bold=False)
FONT_SUMMARY_BOLD = Font(name="Calibri", size=11, bold=True)
FONT_CELL = Font(name="Calibri", size=10, bold=False)

FILL_HEADER = PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid")

# Alignments
ALIGN_CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)
ALIGN_LEFT = Alignment(horizontal="left", vertical="center", wrap_text=True)

# Borders
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


def _format_details(details: dict) -> str:
    parts = []
    for key, value in details.items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value) or "-"
        parts.append(f"{key.replace('_', ' ')}: {value}")
    return "; ".join(parts)


class UnscheduledExcelGenerator:
    """Generates an Excel report from an exported schedule result."""

    def __init__(self):
        self.strings = STRINGS

    def translate_reason(self, reason: str) -> str:
        """Human-readable label of a failure reason code."""
        return REASON_LABELS.get(reason, reason)

    def translate_day(self, day: str) -> str:
        parsed = Day.parse(day)
        return parsed.value.capitalize() if parsed else day

    def count_by_reason(self, diagnostics: list[dict]) -> dict[str, int]:
        """Count rejected windows by reason over all diagnostics.

        Args:
            diagnostics: Course diagnostic dictionaries

        Returns:
            Dictionary mapping reason code to count
        """
        counts: dict[str, int] = {}
        for course in diagnostics:
            for session in course.get("failed_sessions", []):
                for reason, count in session.get("reason_counts", {}).items():
                    counts[reason] = counts.get(reason, 0) + count
        return counts

    def _write_header_row(self, ws, row: int, headers: list[tuple[str, str]]) -> None:
        for col, header_text in headers:
            cell = ws[f"{col}{row}"]
            cell.value = header_text
            cell.font = FONT_HEADER
            cell.fill = FILL_HEADER
            cell.alignment = ALIGN_CENTER
            cell.border = THIN_BORDER
        ws.row_dimensions[row].height = 22.0

    def _write_cell(self, ws, ref: str, value, align: Alignment = ALIGN_LEFT) -> None:
        ws[ref] = value
        ws[ref].font = FONT_CELL
        ws[ref].alignment = align
        ws[ref].border = THIN_BORDER

    def setup_header(self, ws, data: dict) -> int:
        """Set up title, date, totals and success rate.

        Returns:
            Next row number after header.
        """
        ws.merge_cells("A1:F1")
        ws["A1"] = self.strings["title"]
        ws["A1"].font = FONT_TITLE
        ws["A1"].alignment = ALIGN_CENTER

        rows = [
            (self.strings["generated"], datetime.now().strftime("%d.%m.%Y %H:%M")),
            (self.strings["total_count"], data.get("unscheduled_count", 0)),
            (self.strings["success_rate"], f"{data.get('success_rate', 0)}%"),
        ]
        for offset, (label, value) in enumerate(rows):
            row = 3 + offset
            ws[f"A{row}"] = label
            ws[f"A{row}"].font = FONT_SUMMARY_BOLD
            ws[f"C{row}"] = value
            ws[f"C{row}"].font = FONT_SUMMARY

        return 3 + len(rows) + 1

    def setup_summary(self, ws, diagnostics: list[dict], start_row: int) -> int:
        """Set up the breakdown of rejected windows by reason.

        Returns:
            Next row number after summary.
        """
        counts = self.count_by_reason(diagnostics)

        ws[f"A{start_row}"] = self.strings["by_reason"]
        ws[f"A{start_row}"].font = FONT_SUMMARY_BOLD

        row = start_row + 1
        for reason, count in sorted(counts.items(), key=lambda x: -x[1]):
            ws[f"B{row}"] = self.translate_reason(reason)
            ws[f"B{row}"].font = FONT_SUMMARY
            ws[f"D{row}"] = count
            ws[f"D{row}"].font = FONT_SUMMARY
            row += 1

        return row + 1

    def setup_course_table(self, ws, unscheduled: list[dict], start_row: int) -> None:
        """Set up the table of unscheduled courses."""
        self._write_header_row(
            ws,
            start_row,
            [
                ("A", self.strings["col_number"]),
                ("B", self.strings["col_code"]),
                ("C", self.strings["col_course"]),
                ("D", self.strings["col_students"]),
                ("E", self.strings["col_hours"]),
                ("F", self.strings["col_reason"]),
            ],
        )

        ordered = sorted(unscheduled, key=lambda u: (-u.get("student_count", 0), u.get("code", "")))
        for i, course in enumerate(ordered, 1):
            row = start_row + i
            self._write_cell(ws, f"A{row}", i, ALIGN_CENTER)
            self._write_cell(ws, f"B{row}", course.get("code", ""))
            self._write_cell(ws, f"C{row}", course.get("name", ""))
            self._write_cell(ws, f"D{row}", course.get("student_count", 0), ALIGN_CENTER)
            self._write_cell(ws, f"E{row}", course.get("total_hours", 0), ALIGN_CENTER)
            self._write_cell(ws, f"F{row}", course.get("reason", ""))

    def setup_attempts_sheet(self, ws, diagnostics: list[dict]) -> int:
        """List every rejected window of every failed session.

        Returns:
            Number of attempt rows written.
        """
        for col, width in ATTEMPT_COLUMN_WIDTHS.items():
            ws.column_dimensions[col].width = width

        self._write_header_row(
            ws,
            1,
            [
                ("A", self.strings["col_code"]),
                ("B", self.strings["col_session"]),
                ("C", self.strings["col_day"]),
                ("D", self.strings["col_time"]),
                ("E", self.strings["col_failure"]),
                ("F", self.strings["col_details"]),
            ],
        )

        row = 2
        for course in diagnostics:
            for session in course.get("failed_sessions", []):
                session_label = f"{session.get('session_type', '')} {session.get('session_hours', '')}h"
                for day_attempt in session.get("attempted_days", []):
                    for attempt in day_attempt.get("attempted_time_slots", []):
                        self._write_cell(ws, f"A{row}", course.get("code", ""))
                        self._write_cell(ws, f"B{row}", session_label)
                        self._write_cell(ws, f"C{row}", self.translate_day(day_attempt.get("day", "")))
                        self._write_cell(ws, f"D{row}", attempt.get("time_range", ""), ALIGN_CENTER)
                        self._write_cell(ws, f"E{row}", self.translate_reason(attempt.get("reason", "")))
                        self._write_cell(ws, f"F{row}", _format_details(attempt.get("details", {})))
                        row += 1
        return row - 2

    def create_workbook(self, data: dict) -> Workbook:
        """Create the report workbook from exported result data.

        Args:
            data: Dictionary produced by ScheduleResult.to_dict()

        Returns:
            Populated Workbook object.
        """
        unscheduled = data.get("unscheduled", [])
        diagnostics = data.get("diagnostics", [])

        wb = Workbook()
        ws = wb.active
        ws.title = "Unscheduled"
        for col, width in COURSE_COLUMN_WIDTHS.items():
            ws.column_dimensions[col].width = width

        next_row = self.setup_header(ws, data)
        next_row = self.setup_summary(ws, diagnostics, next_row)
        self.setup_course_table(ws, unscheduled, next_row)

        self.setup_attempts_sheet(wb.create_sheet("Attempts"), diagnostics)
        return wb

    def save(self, wb: Workbook, output_path: Path) -> None:
        """Save workbook to file, creating parent directories."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)


def generate_unscheduled_excel(input_path: Path, output_path: Path) -> Path:
    """Generate Excel report of unscheduled courses.

    Args:
        input_path: Path to an exported schedule result JSON file.
        output_path: Output Excel file path.

    Returns:
        Path to generated file.
    """
    generator = UnscheduledExcelGenerator()
    wb = generator.create_workbook(load_result_json(input_path))
    generator.save(wb, Path(output_path))
    return Path(output_path)
