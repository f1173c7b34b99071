"""JSON export and re-loading of schedule results."""

import json
import logging
from pathlib import Path
from typing import Any

from ..exceptions import InvalidDataError
from .models import ScheduleResult

logger = logging.getLogger(__name__)

# Keys every exported result carries
RESULT_KEYS = ("schedule", "unscheduled", "success_rate")


def export_schedule_json(
    result: ScheduleResult,
    output_path: Path | str,
    include_diagnostics: bool = True,
) -> Path:
    """Write a schedule result as JSON.

    The per-window failure tree can be large for terms with many unplaced
    sessions; ``include_diagnostics=False`` leaves it out and keeps only the
    unscheduled summaries with their reason strings.

    Args:
        result: ScheduleResult to export
        output_path: Path to output JSON file
        include_diagnostics: Keep the "diagnostics" section when present

    Returns:
        Path of the written file
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = result.to_dict()
    if not include_diagnostics:
        data.pop("diagnostics", None)

    with open(output, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    logger.info(
        f"Exported {result.scheduled_count} items and "
        f"{result.unscheduled_count} unscheduled courses to {output}"
    )
    return output


def load_result_json(input_path: Path | str) -> dict[str, Any]:
    """Load a result written by export_schedule_json.

    Raises:
        InvalidDataError: If the file is not an exported schedule result
    """
    try:
        with open(input_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidDataError(f"malformed JSON: {e}", "result", str(input_path)) from e

    if not isinstance(data, dict) or any(key not in data for key in RESULT_KEYS):
        raise InvalidDataError(
            f"expected a schedule result with {', '.join(RESULT_KEYS)}",
            "result",
            str(input_path),
        )
    return data
