"""Tests for time grid construction and time helpers."""

import pytest

from timetable_engine.exceptions import InvalidTimeSettingsError
from timetable_engine.scheduler.models import TimeBlock, TimeSettings
from timetable_engine.scheduler.timegrid import (
    are_blocks_consecutive,
    blocks_covering,
    build_time_blocks,
    calculate_duration,
    minutes_to_time,
    parse_time_range,
    time_ranges_overlap,
    time_to_minutes,
)


class TestTimeHelpers:
    """Tests for time arithmetic helpers."""

    def test_time_to_minutes(self):
        assert time_to_minutes("08:30") == 510
        assert time_to_minutes("9:05") == 545

    @pytest.mark.parametrize("value", ["8", "25:00", "08:60", "ab:cd", ""])
    def test_invalid_time(self, value):
        with pytest.raises(ValueError):
            time_to_minutes(value)

    def test_minutes_to_time(self):
        assert minutes_to_time(510) == "08:30"
        assert minutes_to_time(0) == "00:00"

    def test_duration_rounds_up(self):
        assert calculate_duration("09:00", "11:00") == 2
        assert calculate_duration("09:00", "10:30") == 2
        assert calculate_duration("09:00", "09:45") == 1

    def test_parse_time_range(self):
        assert parse_time_range("08:00-09:00") == ("08:00", "09:00")
        assert parse_time_range(" 08:00 - 09:00 ") == ("08:00", "09:00")

    def test_overlap(self):
        assert time_ranges_overlap("08:00", "10:00", "09:00", "11:00")
        assert not time_ranges_overlap("08:00", "09:00", "09:00", "10:00")

    def test_consecutive(self):
        blocks = [TimeBlock("08:00", "09:00"), TimeBlock("09:00", "10:00")]
        assert are_blocks_consecutive(blocks)
        assert not are_blocks_consecutive(
            [TimeBlock("11:00", "12:00"), TimeBlock("13:00", "14:00")]
        )
        assert are_blocks_consecutive([TimeBlock("08:00", "09:00")])

    def test_blocks_covering(self):
        blocks = build_time_blocks(TimeSettings())
        covered = blocks_covering("08:30", "10:00", blocks)
        assert [b.time_range for b in covered] == ["08:00-09:00", "09:00-10:00"]


class TestBuildTimeBlocks:
    """Tests for build_time_blocks function."""

    def test_default_grid(self):
        blocks = build_time_blocks(TimeSettings())
        assert [b.start for b in blocks] == [
            "08:00",
            "09:00",
            "10:00",
            "11:00",
            "13:00",
            "14:00",
            "15:00",
            "16:00",
            "17:00",
        ]
        assert blocks[-1].end == "18:00"

    def test_blocks_avoid_lunch(self):
        settings = TimeSettings(lunch_start="12:30", lunch_end="13:30")
        blocks = build_time_blocks(settings)
        for block in blocks:
            assert not time_ranges_overlap(block.start, block.end, "12:30", "13:30")

    def test_no_partial_trailing_block(self):
        settings = TimeSettings(slot_duration=90, day_end="17:00")
        blocks = build_time_blocks(settings)
        assert all(time_to_minutes(b.end) <= time_to_minutes("17:00") for b in blocks)
        assert blocks[-1].end == "17:00"

    def test_contiguous_outside_lunch(self):
        blocks = build_time_blocks(TimeSettings())
        assert blocks[0].end == blocks[1].start
        assert blocks[3].end != blocks[4].start

    def test_idempotent(self):
        settings = TimeSettings(slot_duration=50)
        assert build_time_blocks(settings) == build_time_blocks(settings)

    def test_non_positive_slot_raises(self):
        with pytest.raises(InvalidTimeSettingsError):
            build_time_blocks(TimeSettings(slot_duration=0))

    def test_malformed_time_raises(self):
        with pytest.raises(InvalidTimeSettingsError) as exc_info:
            build_time_blocks(TimeSettings(day_start="8am"))
        assert exc_info.value.field == "day_start"

    def test_end_before_start_raises(self):
        with pytest.raises(InvalidTimeSettingsError):
            build_time_blocks(TimeSettings(day_start="18:00", day_end="08:00"))
