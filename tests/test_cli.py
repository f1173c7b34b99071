"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from timetable_engine.cli import app

runner = CliRunner()


@pytest.fixture
def snapshot_file(tmp_path, snapshot_dict):
    path = tmp_path / "term.json"
    path.write_text(json.dumps(snapshot_dict, ensure_ascii=False), encoding="utf-8")
    return path


class TestScheduleCommand:
    """Tests for the schedule command."""

    def test_writes_result(self, tmp_path, snapshot_file):
        output = tmp_path / "out" / "schedule.json"
        result = runner.invoke(app, ["schedule", str(snapshot_file), "-o", str(output)])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["seed"] == 7
        assert data["success"] is True

    def test_seed_option(self, tmp_path, snapshot_file):
        output = tmp_path / "schedule.json"
        result = runner.invoke(
            app, ["schedule", str(snapshot_file), "-o", str(output), "--seed", "99", "--preset", "quality"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text(encoding="utf-8"))["seed"] == 99

    def test_report_option(self, tmp_path, snapshot_file):
        output = tmp_path / "schedule.json"
        report = tmp_path / "unscheduled.xlsx"
        result = runner.invoke(
            app, ["schedule", str(snapshot_file), "-o", str(output), "--report", str(report)]
        )

        assert result.exit_code == 0, result.output
        assert report.exists()

    def test_no_diagnostics_option(self, tmp_path, snapshot_file):
        data = json.loads(snapshot_file.read_text(encoding="utf-8"))
        for classroom in data["classrooms"]:
            classroom["capacity"] = 1
        snapshot_file.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

        output = tmp_path / "schedule.json"
        result = runner.invoke(
            app, ["schedule", str(snapshot_file), "-o", str(output), "--no-diagnostics"]
        )

        assert result.exit_code == 0, result.output
        written = json.loads(output.read_text(encoding="utf-8"))
        assert written["unscheduled"]
        assert "diagnostics" not in written

    def test_missing_input(self, tmp_path):
        result = runner.invoke(app, ["schedule", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_invalid_snapshot(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"courses": [{"id": 1, "sessions": [{"type": "seminar", "hours": 1}]}]}))
        result = runner.invoke(app, ["schedule", str(path), "-o", str(tmp_path / "s.json")])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestTimegridCommand:
    """Tests for the timegrid command."""

    def test_default_grid(self):
        result = runner.invoke(app, ["timegrid"])
        assert result.exit_code == 0
        assert "Time blocks (9)" in result.output

    def test_invalid_settings(self):
        result = runner.invoke(app, ["timegrid", "--slot", "0"])
        assert result.exit_code == 1


class TestReportCommand:
    """Tests for the report command."""

    def test_report_from_result(self, tmp_path, snapshot_file):
        output = tmp_path / "schedule.json"
        runner.invoke(app, ["schedule", str(snapshot_file), "-o", str(output)])

        result = runner.invoke(app, ["report", str(output)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "schedule_unscheduled.xlsx").exists()

    def test_missing_result(self, tmp_path):
        result = runner.invoke(app, ["report", str(tmp_path / "none.json")])
        assert result.exit_code == 1

    def test_rejects_non_result_json(self, tmp_path, snapshot_file):
        result = runner.invoke(app, ["report", str(snapshot_file)])
        assert result.exit_code == 1
        assert "Error" in result.output
