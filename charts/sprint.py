"""
Sprint-level chart data: size breakdown per sprint (or creation month) and
completed-task / effort velocity series with regression insights.
"""
from typing import Any, Dict, List

from normalize.models import ProjectKeys, STATUS_DONE, NO_SIZE_LABEL
from charts.buckets import normalize_bucket_label, order_buckets, get_creation_month, group_by_bucket, category_label
from charts.assignee import bar_layout, build_bar_series
from scoring.utils import sum_field
from scoring.velocity import generate_velocity_insights


def _size_bar(buckets: List[str], counts: Dict[str, Dict[str, int]], sizes: List[str]) -> Dict[str, Any]:
    layout = bar_layout(len(sizes))
    series = [
        build_bar_series(size, [counts.get(b, {}).get(size, 0) for b in buckets], layout)
        for size in sizes
    ]
    return {'categories': buckets, 'series': series, 'layout': layout}


def create_sprint_size_chart_data(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> Dict[str, Any]:
    """All tasks (any status) per sprint, stacked by size; the no-sprint bucket goes last."""
    counts: Dict[str, Dict[str, int]] = {}
    sizes: Dict[str, None] = {}
    for task in tasks:
        sprint = normalize_bucket_label(task.get(project_keys.sprint))
        size = category_label(task.get(project_keys.size) or NO_SIZE_LABEL)
        sizes.setdefault(size)
        per_size = counts.setdefault(sprint, {})
        per_size[size] = per_size.get(size, 0) + 1
    return _size_bar(order_buckets(counts.keys()), counts, list(sizes))


def create_size_by_creation_month_chart_data(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> Dict[str, Any]:
    """All tasks per creation month, stacked by size. Tasks without a creation date are left out."""
    counts: Dict[str, Dict[str, int]] = {}
    sizes: Dict[str, None] = {}
    for task in tasks:
        month = get_creation_month(task)
        if not month:
            continue
        size = category_label(task.get(project_keys.size) or NO_SIZE_LABEL)
        sizes.setdefault(size)
        per_size = counts.setdefault(month, {})
        per_size[size] = per_size.get(size, 0) + 1
    return _size_bar(sorted(counts.keys()), counts, list(sizes))


def _velocity_series(buckets: List[str], bucketed: Dict[str, List[Dict[str, Any]]], effort_field: str) -> List[Dict[str, Any]]:
    return [
        {'name': 'Completed Tasks', 'type': 'bar', 'data': [len(bucketed[b]) for b in buckets]},
        {
            'name': 'Effort (days)',
            'type': 'line',
            'yAxisIndex': 1,
            'data': [sum_field(bucketed[b], effort_field) for b in buckets],
        },
    ]


def create_velocity_chart_data(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> Dict[str, Any]:
    """Completed tasks and effort per sprint plus the velocity insights for the latest sprint."""
    buckets, bucketed = group_by_bucket(tasks, project_keys.sprint)
    insights = generate_velocity_insights(tasks, project_keys.sprint, project_keys.actual_days)
    return {
        'categories': buckets,
        'series': _velocity_series(buckets, bucketed, project_keys.actual_days),
        'insights': [insight.to_dict() for insight in insights],
    }


def create_velocity_chart_data_by_creation_date(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> Dict[str, Any]:
    """Completed tasks and effort per creation month. No insights are derived for months."""
    bucketed: Dict[str, List[Dict[str, Any]]] = {}
    for task in tasks:
        if task.get('Status') != STATUS_DONE:
            continue
        month = get_creation_month(task)
        if month:
            bucketed.setdefault(month, []).append(task)
    months = sorted(bucketed.keys())
    return {
        'categories': months,
        'series': _velocity_series(months, bucketed, project_keys.actual_days),
        'insights': [],
    }
