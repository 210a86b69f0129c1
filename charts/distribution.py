"""
Label and field distribution bars over an explicit selection of category values.
An empty selection yields no chart data; counting "all values" is never attempted.
"""
from typing import Any, Dict, List

from normalize.util import normalize_labels
from charts.buckets import category_label


def _count_bar(categories: List[str], counts: Dict[str, int]) -> Dict[str, Any]:
    return {
        'categories': list(categories),
        'series': [
            {
                'name': 'Issue Count',
                'type': 'bar',
                'data': [counts[c] for c in categories],
                'emphasis': {'focus': 'self'},
            }
        ],
    }


def create_label_chart_data(issues: List[Dict[str, Any]], selected_labels: List[str]) -> Dict[str, Any]:
    """Number of issues carrying each selected label."""
    if not selected_labels:
        return {'categories': [], 'series': []}
    counts = {label: 0 for label in selected_labels}
    for issue in issues:
        issue_labels = set(normalize_labels(issue.get('labels')))
        for label in counts:
            if label in issue_labels:
                counts[label] += 1
    return _count_bar(selected_labels, counts)


def field_value(issue: Dict[str, Any], field_name: str) -> str:
    value = issue.get(field_name)
    return category_label(value) if value else ''


def create_field_chart_data(issues: List[Dict[str, Any]], field_name: str, selected_values: List[str]) -> Dict[str, Any]:
    """Number of issues whose string-coerced `field_name` equals each selected value."""
    if not selected_values:
        return {'categories': [], 'series': []}
    counts = {value: 0 for value in selected_values}
    for issue in issues:
        value = field_value(issue, field_name)
        if value in counts:
            counts[value] += 1
    return _count_bar(selected_values, counts)
