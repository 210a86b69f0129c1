"""
Unified data models for normalized entities and derived results.
Tasks and pull requests stay plain dicts so unknown source fields pass through;
the classes here cover the small fixed-shape pieces.
"""

from typing import Any, Dict, Mapping, Optional

STATUS_DONE = 'Done'
STATUS_TODO = 'Todo'

UNASSIGNED_LABEL = 'Unassigned'
NO_SIZE_LABEL = 'No Size'

# logical project keys; the actual field names are configured per project
SPRINT = 'SPRINT'
SIZE = 'SIZE'
ESTIMATE_DAYS = 'ESTIMATE_DAYS'
ACTUAL_DAYS = 'ACTUAL_DAYS'

DEFAULT_FIELD_NAMES = {
    SPRINT: 'Sprint',
    SIZE: 'Size',
    ESTIMATE_DAYS: 'Estimate (days)',
    ACTUAL_DAYS: 'Actual (days)',
}


class ProjectKeys:
    """
    Field-indirection table: maps the logical keys SPRINT, SIZE, ESTIMATE_DAYS and
    ACTUAL_DAYS to the record field names used by a given GitHub project.
    """

    def __init__(self, sprint: str = None, size: str = None, estimate_days: str = None, actual_days: str = None):
        self.sprint = sprint or DEFAULT_FIELD_NAMES[SPRINT]
        self.size = size or DEFAULT_FIELD_NAMES[SIZE]
        self.estimate_days = estimate_days or DEFAULT_FIELD_NAMES[ESTIMATE_DAYS]
        self.actual_days = actual_days or DEFAULT_FIELD_NAMES[ACTUAL_DAYS]

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> 'ProjectKeys':
        """Build from either {'SPRINT': 'Sprint', ...} or the dashboard config shape
        {'Sprint': {'value': 'Sprint'}, ...}. Unknown or empty entries keep the defaults.
        """
        if not isinstance(mapping, Mapping):
            return cls()
        resolved: Dict[str, Optional[str]] = {}
        for logical, default_name in DEFAULT_FIELD_NAMES.items():
            entry = mapping.get(logical, mapping.get(logical.lower(), mapping.get(default_name)))
            if isinstance(entry, Mapping):
                entry = entry.get('value')
            resolved[logical] = str(entry) if entry else None
        return cls(
            sprint=resolved[SPRINT],
            size=resolved[SIZE],
            estimate_days=resolved[ESTIMATE_DAYS],
            actual_days=resolved[ACTUAL_DAYS],
        )

    def field(self, logical: str) -> str:
        """Return the configured field name for a logical key."""
        return self.as_dict()[logical]

    def fields(self) -> list:
        return [self.sprint, self.size, self.estimate_days, self.actual_days]

    def as_dict(self) -> Dict[str, str]:
        return {
            SPRINT: self.sprint,
            SIZE: self.size,
            ESTIMATE_DAYS: self.estimate_days,
            ACTUAL_DAYS: self.actual_days,
        }

    def __eq__(self, other):
        return isinstance(other, ProjectKeys) and self.as_dict() == other.as_dict()

    def __repr__(self):
        return f"ProjectKeys({self.as_dict()!r})"


class Insight:
    """
    A velocity regression signal. Severity is negative, in [-5, -1].
    """

    def __init__(self, text: str, severity: int):
        self.text = text
        self.severity = severity

    def to_dict(self) -> Dict[str, Any]:
        return {'text': self.text, 'severity': self.severity}

    def __eq__(self, other):
        return isinstance(other, Insight) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Insight(text={self.text!r}, severity={self.severity})"

    def __str__(self):
        return f"[{self.severity}] {self.text}"
