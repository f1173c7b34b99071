"""Constants for timetable generation."""

# Default term-wide time settings
DEFAULT_SLOT_DURATION = 60
DEFAULT_DAY_START = "08:00"
DEFAULT_DAY_END = "18:00"
DEFAULT_LUNCH_START = "12:00"
DEFAULT_LUNCH_END = "13:00"

# Classroom utilization scoring (ratio = adjusted seats / capacity)
IDEAL_MIN_RATIO = 0.7
IDEAL_MAX_RATIO = 0.9
IDEAL_PEAK_RATIO = 0.8
PENALTY_THRESHOLD_RATIO = 0.4
OVERFULL_SCORE = -1000.0

# Scores closer than this are considered equal when ranking classrooms
CLASSROOM_SCORE_TOLERANCE = 1.0

# Difficulty score weights
DIFFICULTY_STUDENT_WEIGHT = 2
DIFFICULTY_SCARCITY_WEIGHT = 5
DIFFICULTY_DURATION_WEIGHT = 1
# Substitutes 1/0 when no classroom can host a course
NO_CLASSROOM_SCARCITY = 100

# Difficulties closer than this are ordered by teacher load instead
DIFFICULTY_TIE_TOLERANCE = 0.1

# Hill climbing soft score
SOFT_SCORE_IDEAL_BONUS = 10.0
SOFT_SCORE_WASTE_PENALTY = 5.0
SOFT_SCORE_LOAD_STDDEV_WEIGHT = 0.5

DEFAULT_HILL_CLIMBING_ITERATIONS = 30
DEFAULT_TIME_LIMIT = 60

# Engine presets: (hill climbing iterations, timeout seconds)
ENGINE_PRESETS = {
    "default": {"hill_climbing_iterations": 30, "timeout_seconds": 60},
    "fast": {"hill_climbing_iterations": 10, "timeout_seconds": 30},
    "quality": {"hill_climbing_iterations": 100, "timeout_seconds": 120},
}

NO_ACTIVE_CLASSROOMS_REASON = "no active classrooms"
NO_PLACEMENT_REASON = "No suitable time slot or classroom found"
