"""Teacher and classroom availability checks.

Availability maps are parsed once by ``Availability.from_raw`` and then
queried here. The same rules apply to teachers and classrooms:

- an empty map is available everywhere
- a non-empty map makes every day it does not list (or lists empty) unavailable
- otherwise a block is available iff its start time is listed for that day
"""

from .models import Availability, Day, TimeBlock


def is_available(availability: Availability, day: Day | str, block: TimeBlock) -> bool:
    """Check whether a single block is available on a day.

    Args:
        availability: Parsed availability map
        day: Day in either naming scheme
        block: Block to check

    Returns:
        True if the block may be used
    """
    if not availability.configured:
        return True
    parsed = Day.parse(day)
    if parsed is None:
        return False
    return availability.allows(parsed, block.start)


def is_teacher_available(availability: Availability, day: Day | str, block: TimeBlock) -> bool:
    """Check the teacher's working hours for a block."""
    return is_available(availability, day, block)


def is_classroom_available(availability: Availability, day: Day | str, block: TimeBlock) -> bool:
    """Check a classroom's availability map for a block."""
    return is_available(availability, day, block)


def are_blocks_available(
    availability: Availability, day: Day | str, blocks: list[TimeBlock]
) -> bool:
    """Check that every block of a window is available."""
    return all(is_available(availability, day, block) for block in blocks)
