"""
Scoring utility functions.
Numeric coercion and regression-severity helpers used by scoring.velocity.
"""
from typing import Any, Dict, Iterable
import math

MIN_SEVERITY = 1
MAX_SEVERITY = 5
# each full 20% of decrease adds one severity step
SEVERITY_STEP_PERCENT = 20


def to_number(value: Any) -> float:
    """Coerce a field value to float. None, blanks, unparsable strings and NaN become 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def sum_field(tasks: Iterable[Dict[str, Any]], field_name: str) -> float:
    """Sum a field across tasks, treating missing or non-numeric values as 0."""
    return sum(to_number(task.get(field_name)) for task in tasks)


def percent_decrease(current: float, previous: float) -> float:
    """Percentage drop from previous to current, rounded to one decimal place."""
    if not previous:
        return 0.0
    return float(f"{(previous - current) / previous * 100:.1f}")


def severity_for_decrease(percent: float) -> int:
    """Map a percentage decrease to a severity in [-5, -1]; any drop is at least -1."""
    steps = math.floor(percent / SEVERITY_STEP_PERCENT)
    return -min(MAX_SEVERITY, max(MIN_SEVERITY, steps))
