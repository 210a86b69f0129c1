"""
Timeline planning and time estimation over numeric issue fields.

Issues carrying a numeric value in a chosen field (an estimate in days, hours,
...) are spread over a number of developers with a greedy scheduler. The
schedule then yields per-developer workload, the critical path, outliers and
the overall duration. Times are epoch milliseconds; weekday holidays use
JavaScript numbering (0 = Sunday) and are evaluated in UTC.
"""
from typing import Any, Dict, Iterable, List, Optional, Set
import math
import re

SORT_LARGEST_FIRST = 'largest-first'
SORT_SMALLEST_FIRST = 'smallest-first'
SORT_ROUND_ROBIN = 'round-robin'

VIEW_ALL = 'all'
VIEW_OUTLIERS_ONLY = 'outliers-only'
VIEW_CRITICAL_PATH = 'critical-path'
VIEW_WORKLOAD_BALANCE = 'workload-balance'

# number of leading records sampled when detecting numeric fields
NUMERIC_SAMPLE_SIZE = 5
# tasks ending within this many ms of the latest end are on the critical path
CRITICAL_PATH_TOLERANCE_MS = 1000

HOUR_MS = 1000 * 60 * 60
DAY_MS = HOUR_MS * 24
UNIT_MS = {
    'hours': HOUR_MS,
    'days': DAY_MS,
    'weeks': DAY_MS * 7,
    'months': DAY_MS * 30,
}
# 1970-01-01 was a Thursday
_EPOCH_WEEKDAY = 4

_LEADING_NUMBER_RE = re.compile(r'^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')


def parse_numeric(value: Any) -> Optional[float]:
    """Finite float from a field value, or None. Strings are read up to their first
    non-numeric character ("3 days" -> 3.0); booleans are not numbers here.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = _LEADING_NUMBER_RE.match(value)
        if not match:
            return None
        number = float(match.group(0))
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _field_value(issue: Dict[str, Any], field_name: str) -> Any:
    value = issue.get(field_name)
    if value is None:
        custom = issue.get('customFields')
        if isinstance(custom, dict):
            value = custom.get(field_name)
    return value


def get_numeric_fields(issues: List[Dict[str, Any]], field_names: Iterable[str]) -> List[str]:
    """Sorted names of the fields holding a number in at least one of the first few issues."""
    if not issues:
        return []
    sample = [i for i in issues[:NUMERIC_SAMPLE_SIZE] if isinstance(i, dict)]
    return sorted(
        name for name in field_names
        if any(parse_numeric(_field_value(issue, name)) is not None for issue in sample)
    )


def extract_issues_with_values(field_name: str, issues: List[Dict[str, Any]], require_positive: bool = False) -> List[Dict[str, Any]]:
    """[{'issue', 'value'}] for every issue with a numeric `field_name`, in input order."""
    if not field_name or not issues:
        return []
    items = []
    for issue in issues:
        if not isinstance(issue, dict):
            continue
        value = parse_numeric(_field_value(issue, field_name))
        if value is None or (require_positive and value <= 0):
            continue
        items.append({'issue': issue, 'value': value})
    return items


def unit_from_field_name(field_name: str) -> str:
    lower = field_name.lower()
    for needle, unit in (('day', 'days'), ('hour', 'hours'), ('week', 'weeks'), ('month', 'months')):
        if needle in lower:
            return unit
    return 'units'


def convert_to_ms(value: float, unit: str) -> float:
    # unknown units are treated as hours
    return value * UNIT_MS.get(unit, HOUR_MS)


def convert_from_ms(ms: float, unit: str) -> float:
    return ms / UNIT_MS.get(unit, HOUR_MS)


def _weekday(ms: float) -> int:
    return (math.floor(ms / DAY_MS) + _EPOCH_WEEKDAY) % 7


def calculate_end_time(start: float, duration_ms: float, holiday_days: Set[int]) -> float:
    """End of a task starting at `start` that only progresses on non-holiday weekdays."""
    if set(range(7)) <= set(holiday_days):
        return start + duration_ms
    current = start
    remaining = duration_ms
    while remaining > 0:
        next_day = (math.floor(current / DAY_MS) + 1) * DAY_MS
        if _weekday(current) in holiday_days:
            current = next_day
        else:
            advance = min(remaining, next_day - current)
            current += advance
            remaining -= advance
    return current


def _sorted_for_strategy(items: List[Dict[str, Any]], sort_strategy: str) -> List[Dict[str, Any]]:
    if sort_strategy == SORT_ROUND_ROBIN:
        return list(items)
    if sort_strategy == SORT_SMALLEST_FIRST:
        return sorted(items, key=lambda item: item['value'])
    return sorted(items, key=lambda item: item['value'], reverse=True)


def schedule_tasks(
    issues_with_values: List[Dict[str, Any]],
    num_developers: int,
    unit: str,
    sort_strategy: str = SORT_LARGEST_FIRST,
    base_time: float = 0,
    holidays: Iterable[int] = (),
) -> List[Dict[str, Any]]:
    """
    Greedy schedule: each task goes to the developer who frees up first
    (lowest index on ties).

    Returns one dict per task with issue, developer_index, start_time, end_time,
    duration (in the field's unit), issue_title and issue_number.
    """
    if not issues_with_values or num_developers < 1:
        return []

    availability = [0.0] * num_developers
    holiday_set = set(holidays)
    scheduled = []
    for item in _sorted_for_strategy(issues_with_values, sort_strategy):
        developer = min(range(num_developers), key=availability.__getitem__)
        start_time = base_time + availability[developer]
        end_time = calculate_end_time(start_time, convert_to_ms(item['value'], unit), holiday_set)
        issue = item['issue'] if isinstance(item['issue'], dict) else {}
        scheduled.append({
            'issue': item['issue'],
            'developer_index': developer,
            'start_time': start_time,
            'end_time': end_time,
            'duration': item['value'],
            'issue_title': issue.get('title') or 'Untitled',
            'issue_number': issue.get('issue_number') or issue.get('number') or issue.get('id') or 'N/A',
        })
        availability[developer] = end_time - base_time
    return scheduled


def _threshold(value: Any) -> Optional[float]:
    threshold = parse_numeric(value)
    if threshold is None or threshold <= 0:
        return None
    return threshold


def calculate_outliers(scheduled_tasks: List[Dict[str, Any]], outlier_threshold: Any) -> List[Dict[str, Any]]:
    """Scheduled tasks whose duration exceeds a positive threshold."""
    threshold = _threshold(outlier_threshold)
    if threshold is None:
        return []
    return [task for task in scheduled_tasks if task['duration'] > threshold]


def calculate_developer_workload(scheduled_tasks: List[Dict[str, Any]]) -> Dict[int, Dict[str, float]]:
    workload: Dict[int, Dict[str, float]] = {}
    for task in scheduled_tasks:
        entry = workload.setdefault(task['developer_index'], {'total': 0, 'tasks': 0, 'max_end_time': 0})
        entry['total'] += task['duration']
        entry['tasks'] += 1
        entry['max_end_time'] = max(entry['max_end_time'], task['end_time'])
    return workload


def find_critical_path_tasks(scheduled_tasks: List[Dict[str, Any]]) -> Set[int]:
    """Indexes of the tasks finishing together with the latest developer."""
    if not scheduled_tasks:
        return set()
    max_time = max(0, max(task['end_time'] for task in scheduled_tasks))
    return {
        index for index, task in enumerate(scheduled_tasks)
        if task['end_time'] >= max_time - CRITICAL_PATH_TOLERANCE_MS
    }


def filter_scheduled_tasks(
    scheduled_tasks: List[Dict[str, Any]],
    view_mode: str,
    outliers: List[Dict[str, Any]],
    critical_path_tasks: Set[int],
) -> List[Dict[str, Any]]:
    if view_mode == VIEW_OUTLIERS_ONLY:
        return outliers
    if view_mode == VIEW_CRITICAL_PATH:
        return [task for index, task in enumerate(scheduled_tasks) if index in critical_path_tasks]
    return scheduled_tasks


def calculate_total_duration(scheduled_tasks: List[Dict[str, Any]], unit: str) -> float:
    """Span from the first start to the last end, in `unit`."""
    if not scheduled_tasks:
        return 0
    span = max(t['end_time'] for t in scheduled_tasks) - min(t['start_time'] for t in scheduled_tasks)
    return convert_from_ms(span, unit)


def calculate_estimate(issues_with_values: List[Dict[str, Any]], total_items: int, num_developers: int) -> Optional[float]:
    """Total value divided across developers; a single item is its own estimate."""
    if not issues_with_values or num_developers < 1:
        return None
    values = [item['value'] for item in issues_with_values]
    if total_items == 1:
        return values[0] or 0
    return sum(values) / num_developers


def calculate_estimation_outliers(issues_with_values: List[Dict[str, Any]], outlier_threshold: Any) -> List[Dict[str, Any]]:
    """Items above a positive threshold, largest first."""
    threshold = _threshold(outlier_threshold)
    if threshold is None:
        return []
    return sorted(
        (item for item in issues_with_values if item['value'] > threshold),
        key=lambda item: item['value'],
        reverse=True,
    )


def create_timeline_planning_data(
    issues: List[Dict[str, Any]],
    field_name: str,
    num_developers: int = 1,
    sort_strategy: str = SORT_LARGEST_FIRST,
    base_time: float = 0,
    holidays: Iterable[int] = (),
    outlier_threshold: Any = None,
    view_mode: str = VIEW_ALL,
) -> Dict[str, Any]:
    """
    Schedule the issues' `field_name` values over `num_developers` and summarize.

    Returns {unit, tasks, workload, critical_path, outliers, total_duration, estimate}.
    `tasks` is filtered by `view_mode`; the scheduled issue objects are left out
    so the result stays serializable.
    """
    unit = unit_from_field_name(field_name or '')
    items = extract_issues_with_values(field_name, issues, require_positive=True)
    scheduled = schedule_tasks(items, num_developers, unit, sort_strategy, base_time, holidays)
    outliers = calculate_outliers(scheduled, outlier_threshold)
    critical = find_critical_path_tasks(scheduled)
    visible = filter_scheduled_tasks(scheduled, view_mode, outliers, critical)
    return {
        'unit': unit,
        'tasks': [{k: v for k, v in task.items() if k != 'issue'} for task in visible],
        'workload': calculate_developer_workload(scheduled),
        'critical_path': sorted(critical),
        'outliers': len(outliers),
        'total_duration': calculate_total_duration(scheduled, unit),
        'estimate': calculate_estimate(items, len(items), num_developers),
    }
