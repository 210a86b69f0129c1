"""
Bucket ordering and grouping.
Buckets are sprint names or creation-month keys (YYYY-MM). Sprint names sort by
their first run of digits so "Sprint-2" lands before "Sprint-10"; the reserved
NO_SPRINT_LABEL bucket never takes part in the sort and always goes last.
"""
from functools import cmp_to_key
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union
import re

from normalize.models import STATUS_DONE

NO_SPRINT_LABEL = 'No Sprint'

_DIGITS_RE = re.compile(r'\d+')
_WHITESPACE_RE = re.compile(r'\s+')
_MONTH_RE = re.compile(r'^(\d{4})-(\d{2})')

BucketSelector = Union[str, Callable[[Dict[str, Any]], Any]]


def _first_number(label: str) -> Optional[int]:
    match = _DIGITS_RE.search(label)
    return int(match.group()) if match else None


def _compare_labels(a: str, b: str) -> int:
    num_a = _first_number(a)
    num_b = _first_number(b)
    if num_a is not None and num_b is not None:
        return (num_a > num_b) - (num_a < num_b)
    return (a > b) - (a < b)


def sort_sprints_numerically(labels: List[str]) -> List[str]:
    """Sort labels in place (numeric when both carry digits, lexicographic otherwise) and return them."""
    labels.sort(key=cmp_to_key(_compare_labels))
    return labels


def sorted_sprints(labels: Iterable[str]) -> List[str]:
    """Pure variant of sort_sprints_numerically."""
    return sort_sprints_numerically(list(labels))


def category_label(value: Any) -> str:
    """String form of a field value used as a chart category.
    Integral floats drop their fraction (3.0 -> "3") and booleans are lowercase.
    """
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_bucket_label(value: Any) -> str:
    """Collapse whitespace runs and trim; empty values map to NO_SPRINT_LABEL."""
    if value is None:
        return NO_SPRINT_LABEL
    label = _WHITESPACE_RE.sub(' ', category_label(value)).strip()
    return label or NO_SPRINT_LABEL


def order_buckets(labels: Iterable[str]) -> List[str]:
    """Named buckets in numeric order, followed by NO_SPRINT_LABEL when it is present."""
    labels = list(dict.fromkeys(labels))
    named = sorted_sprints(label for label in labels if label != NO_SPRINT_LABEL)
    if NO_SPRINT_LABEL in labels:
        named.append(NO_SPRINT_LABEL)
    return named


def named_buckets(labels: Iterable[str]) -> List[str]:
    return [label for label in labels if label != NO_SPRINT_LABEL]


def _select(task: Dict[str, Any], selector: BucketSelector) -> Any:
    if callable(selector):
        return selector(task)
    return task.get(selector)


def group_by_bucket(tasks: Iterable[Dict[str, Any]], selector: BucketSelector) -> Tuple[List[str], Dict[str, List[Dict[str, Any]]]]:
    """
    Group Done tasks by bucket label.

    :param tasks: canonical task dicts.
    :param selector: field name holding the bucket value, or a callable returning it.
    :returns: (sorted_buckets, bucketed_tasks); tasks without a value land under NO_SPRINT_LABEL.
    """
    bucketed: Dict[str, List[Dict[str, Any]]] = {}
    for task in tasks:
        if task.get('Status') != STATUS_DONE:
            continue
        label = normalize_bucket_label(_select(task, selector))
        bucketed.setdefault(label, []).append(task)
    return order_buckets(bucketed.keys()), bucketed


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (a trailing Z is accepted). Naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_creation_month(task: Dict[str, Any]) -> Optional[str]:
    """Return the YYYY-MM creation month of a task or pull request, or None."""
    created = task.get('createdAt') or task.get('created_at')
    if not created:
        return None
    parsed = parse_datetime(created)
    if parsed is not None:
        return parsed.strftime('%Y-%m')
    text = str(created).strip()
    # partial dates such as "2024-03" still carry a usable month
    match = _MONTH_RE.match(text)
    if match and 1 <= int(match.group(2)) <= 12:
        return f"{match.group(1)}-{match.group(2)}"
    return None
