"""Tests for classroom selection and occupancy tracking."""

import pytest

from timetable_engine.scheduler.models import (
    ClassroomType,
    Day,
    ScheduleItem,
    SessionType,
    TimeBlock,
    TimeSettings,
)
from timetable_engine.scheduler.rooms import (
    ClassroomOccupancy,
    can_host_session_type,
    candidate_classrooms,
    find_classroom,
    is_type_compatible,
    score_utilization,
    select_fixed_classroom,
)
from timetable_engine.scheduler.timegrid import build_time_blocks

NINE = TimeBlock("09:00", "10:00")
TEN = TimeBlock("10:00", "11:00")


class TestScoreUtilization:
    """Tests for score_utilization function."""

    @pytest.mark.parametrize(
        "adjusted,capacity,expected",
        [
            (69, 100, 88.67),
            (70, 100, 90.0),
            (80, 100, 100.0),
            (90, 100, 90.0),
            (91, 100, 97.0),
            (100, 100, 70.0),
            (20, 100, 10.0),
            (40, 100, 50.0),
        ],
    )
    def test_score_bands(self, adjusted, capacity, expected):
        assert score_utilization(adjusted, capacity) == pytest.approx(expected, abs=0.01)

    def test_overfull_is_excluded(self):
        assert score_utilization(101, 100) == -1000

    def test_zero_capacity(self):
        assert score_utilization(10, 0) == -1000

    def test_ideal_band_beats_edges(self):
        assert score_utilization(80, 100) > score_utilization(91, 100)
        assert score_utilization(80, 100) > score_utilization(69, 100)


class TestTypeCompatibility:
    """Tests for session/classroom type compatibility."""

    def test_lab_needs_lab(self):
        assert is_type_compatible(SessionType.LAB, ClassroomType.LAB)
        assert not is_type_compatible(SessionType.LAB, ClassroomType.HYBRID)
        assert not is_type_compatible(SessionType.LAB, ClassroomType.THEORY)

    def test_lab_in_hybrid_when_allowed(self):
        assert is_type_compatible(SessionType.LAB, ClassroomType.HYBRID, allow_hybrid=True)

    def test_theory_never_in_lab(self):
        assert is_type_compatible(SessionType.THEORY, ClassroomType.THEORY)
        assert is_type_compatible(SessionType.THEORY, ClassroomType.HYBRID)
        assert not is_type_compatible(SessionType.THEORY, ClassroomType.LAB)

    def test_all_session_placement_avoids_labs(self):
        assert not is_type_compatible(SessionType.ALL, ClassroomType.LAB)

    def test_scarcity_compatibility(self):
        assert can_host_session_type(SessionType.ALL, ClassroomType.LAB)
        assert can_host_session_type(SessionType.LAB, ClassroomType.HYBRID)
        assert not can_host_session_type(SessionType.THEORY, ClassroomType.LAB)


class TestCandidateClassrooms:
    """Tests for candidate_classrooms function."""

    def test_filters_inactive_type_and_capacity(self, make_classroom):
        rooms = [
            make_classroom(1, capacity=50),
            make_classroom(2, capacity=50, is_active=False),
            make_classroom(3, capacity=50, type=ClassroomType.LAB),
            make_classroom(4, capacity=20),
        ]
        ids = [c.id for c in candidate_classrooms(rooms, SessionType.THEORY, 30)]
        assert ids == [1]


class TestFindClassroom:
    """Tests for find_classroom function."""

    def _find(self, rooms, student_count=40, occupied=None, margin=0, preferred="", blocks=None):
        return find_classroom(
            rooms,
            SessionType.THEORY,
            student_count,
            occupied or {},
            margin,
            preferred,
            Day.MONDAY,
            blocks or [NINE],
        )

    def test_picks_best_utilization(self, make_classroom):
        rooms = [make_classroom(1, capacity=200), make_classroom(2, capacity=50)]
        assert self._find(rooms).id == 2

    def test_prefers_priority_department_on_tie(self, make_classroom):
        rooms = [
            make_classroom(1, capacity=50),
            make_classroom(2, capacity=50, priority_department="CENG"),
        ]
        assert self._find(rooms, preferred="CENG").id == 2

    def test_smaller_capacity_on_tie(self, make_classroom):
        # 80/101 and 80/100 score within one point
        rooms = [make_classroom(1, capacity=101), make_classroom(2, capacity=100)]
        assert self._find(rooms, student_count=80).id == 2

    def test_capacity_margin_allows_smaller_room(self, make_classroom):
        rooms = [make_classroom(1, capacity=36)]
        assert self._find(rooms, student_count=40) is None
        # ceil(40 * 0.9) = 36
        assert self._find(rooms, student_count=40, margin=10).id == 1

    def test_skips_occupied(self, make_classroom):
        rooms = [make_classroom(1, capacity=50), make_classroom(2, capacity=60)]
        occupied = {(Day.MONDAY, TEN.time_range): {1}}
        assert self._find(rooms, occupied=occupied, blocks=[NINE, TEN]).id == 2

    def test_every_block_must_be_available(self, make_classroom):
        rooms = [
            make_classroom(1, capacity=50, availability={"monday": ["09:00"]}),
            make_classroom(2, capacity=60),
        ]
        assert self._find(rooms, blocks=[NINE]).id == 1
        assert self._find(rooms, blocks=[NINE, TEN]).id == 2

    def test_none_when_nothing_fits(self, make_classroom):
        rooms = [make_classroom(1, capacity=10)]
        assert self._find(rooms) is None


class TestClassroomOccupancy:
    """Tests for ClassroomOccupancy."""

    def test_reserve_and_release(self):
        occupancy = ClassroomOccupancy(build_time_blocks(TimeSettings()))
        item = ScheduleItem(1, 100, Day.MONDAY, "09:00-10:00", SessionType.THEORY)
        occupancy.reserve(item)
        assert occupancy.occupied[(Day.MONDAY, "09:00-10:00")] == {100}
        occupancy.release(item)
        assert occupancy.occupied[(Day.MONDAY, "09:00-10:00")] == set()

    def test_multi_block_item(self):
        occupancy = ClassroomOccupancy(build_time_blocks(TimeSettings()))
        item = ScheduleItem(
            1, 100, Day.MONDAY, "09:00-11:00", SessionType.THEORY, session_hours=2, is_fixed=True
        )
        occupancy.reserve(item)
        assert 100 in occupancy.occupied[(Day.MONDAY, "09:00-10:00")]
        assert 100 in occupancy.occupied[(Day.MONDAY, "10:00-11:00")]


class TestSelectFixedClassroom:
    """Tests for select_fixed_classroom function."""

    def test_pinned_id(self, make_classroom):
        rooms = [make_classroom(1), make_classroom(2, type=ClassroomType.LAB)]
        assert select_fixed_classroom(rooms, SessionType.THEORY, 2).id == 2

    def test_unknown_id(self, make_classroom):
        assert select_fixed_classroom([make_classroom(1)], SessionType.THEORY, 9) is None

    def test_first_compatible(self, make_classroom):
        rooms = [
            make_classroom(1, type=ClassroomType.THEORY),
            make_classroom(2, type=ClassroomType.HYBRID),
        ]
        assert select_fixed_classroom(rooms, SessionType.LAB).id == 2
        assert select_fixed_classroom(rooms, SessionType.THEORY).id == 1
