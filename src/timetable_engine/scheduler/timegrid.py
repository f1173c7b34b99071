"""Time grid construction and "HH:MM" time arithmetic."""

import math
import re

from ..exceptions import InvalidTimeSettingsError
from .models import TimeBlock, TimeSettings

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def time_to_minutes(value: str) -> int:
    """Convert an "HH:MM" string to minutes since midnight.

    Args:
        value: Time string such as "08:30"

    Returns:
        Minutes since midnight

    Raises:
        ValueError: If the string is not a valid "HH:MM" time
    """
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to a zero-padded "HH:MM" string."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def calculate_duration(start: str, end: str) -> int:
    """Duration between two times in whole hours, rounded up."""
    return math.ceil((time_to_minutes(end) - time_to_minutes(start)) / 60)


def parse_time_range(time_range: str) -> tuple[str, str]:
    """Split "HH:MM-HH:MM" into its start and end times."""
    start, _, end = time_range.partition("-")
    return start.strip(), end.strip()


def time_ranges_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """Check whether two half-open time ranges overlap."""
    return time_to_minutes(start1) < time_to_minutes(end2) and time_to_minutes(
        start2
    ) < time_to_minutes(end1)


def are_blocks_consecutive(blocks: list[TimeBlock]) -> bool:
    """Check that each block ends exactly where the next one starts.

    A window of blocks straddling the lunch break is not consecutive.
    """
    return all(
        current.end == following.start
        for current, following in zip(blocks, blocks[1:])
    )


def blocks_covering(start: str, end: str, blocks: list[TimeBlock]) -> list[TimeBlock]:
    """Grid blocks overlapping the range [start, end).

    Args:
        start: Range start "HH:MM"
        end: Range end "HH:MM"
        blocks: Time grid

    Returns:
        Blocks of the grid that the range touches, in grid order
    """
    return [b for b in blocks if time_ranges_overlap(start, end, b.start, b.end)]


def _validated_minutes(field: str, value: str) -> int:
    try:
        return time_to_minutes(value)
    except ValueError:
        raise InvalidTimeSettingsError(field, value, "expected HH:MM") from None


def build_time_blocks(settings: TimeSettings) -> list[TimeBlock]:
    """Build the ordered list of time blocks of a working day.

    Blocks of ``slot_duration`` minutes are laid from ``day_start``; any
    block overlapping the lunch window is dropped, and generation stops at
    the first block that would end after ``day_end``.

    Args:
        settings: Term-wide time settings

    Returns:
        Ordered list of TimeBlocks

    Raises:
        InvalidTimeSettingsError: If the settings cannot produce a grid
    """
    if not isinstance(settings.slot_duration, int) or settings.slot_duration <= 0:
        raise InvalidTimeSettingsError(
            "slot_duration", settings.slot_duration, "must be a positive integer"
        )

    start = _validated_minutes("day_start", settings.day_start)
    end = _validated_minutes("day_end", settings.day_end)
    lunch_start = _validated_minutes("lunch_start", settings.lunch_start)
    lunch_end = _validated_minutes("lunch_end", settings.lunch_end)

    if end <= start:
        raise InvalidTimeSettingsError(
            "day_end", settings.day_end, f"must be after day_start {settings.day_start}"
        )

    blocks: list[TimeBlock] = []
    current = start
    while current < end:
        block_end = current + settings.slot_duration
        if block_end > end:
            break

        # Skip blocks that overlap the lunch break
        if current < lunch_end and block_end > lunch_start:
            current = block_end
            continue

        blocks.append(TimeBlock(minutes_to_time(current), minutes_to_time(block_end)))
        current = block_end

    return blocks
