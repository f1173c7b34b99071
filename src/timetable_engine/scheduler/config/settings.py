"""Engine run settings and presets."""

from dataclasses import dataclass, field
from typing import Any

from ...exceptions import InvalidDataError
from ..constants import DEFAULT_HILL_CLIMBING_ITERATIONS, DEFAULT_TIME_LIMIT, ENGINE_PRESETS
from ..models import TimeSettings


@dataclass
class EngineSettings:
    """Settings of one schedule generation run.

    Attributes:
        time: Term-wide time settings
        hill_climbing_iterations: Swap attempts of the local improver
        timeout_seconds: Wall-clock limit of the placement loop (0 or None disables it)
        seed: Random seed; a fresh seed is drawn when None
        allow_session_split: Retry failed multi-hour sessions as same-day chunks
        combine_theory_lab: Try to place a theory and a lab session on the same day
        preset: Name of the preset these settings started from
    """

    time: TimeSettings = field(default_factory=TimeSettings)
    hill_climbing_iterations: int = DEFAULT_HILL_CLIMBING_ITERATIONS
    timeout_seconds: float | None = DEFAULT_TIME_LIMIT
    seed: int | None = None
    allow_session_split: bool = False
    combine_theory_lab: bool = False
    preset: str = "default"

    @classmethod
    def from_preset(cls, name: str = "default", **overrides: Any) -> "EngineSettings":
        """Create settings from a named preset.

        Args:
            name: One of "default", "fast", "quality"
            **overrides: Field values replacing the preset's

        Raises:
            InvalidDataError: If the preset is unknown
        """
        if name not in ENGINE_PRESETS:
            raise InvalidDataError(
                f"unknown preset '{name}' (expected one of {', '.join(ENGINE_PRESETS)})",
                "settings",
            )
        values: dict[str, Any] = {**ENGINE_PRESETS[name], "preset": name}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineSettings":
        """Create settings from a settings.json document.

        Time settings may be nested under "time" or given at the top level.
        Keys present in the document are applied as given, so an explicit
        null (e.g. "timeout_seconds": null) replaces the preset value.
        """
        time_data = data.get("time", data)
        overrides = {
            key: data[key]
            for key in (
                "hill_climbing_iterations",
                "timeout_seconds",
                "seed",
                "allow_session_split",
                "combine_theory_lab",
            )
            if key in data
        }
        settings = cls.from_preset(
            data.get("preset", "default"), time=TimeSettings.from_dict(time_data)
        )
        for key, value in overrides.items():
            setattr(settings, key, value)
        return settings

    def to_dict(self) -> dict[str, Any]:
        return {
            "preset": self.preset,
            "time": self.time.to_dict(),
            "hill_climbing_iterations": self.hill_climbing_iterations,
            "timeout_seconds": self.timeout_seconds,
            "seed": self.seed,
            "allow_session_split": self.allow_session_split,
            "combine_theory_lab": self.combine_theory_lab,
        }
