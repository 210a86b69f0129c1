"""
Assignee chart data: completed work per assignee as bar, line and pie structures.
Only Done tasks are counted. Project fields are read through ProjectKeys.
"""
from typing import Any, Dict, List, Optional

from normalize.models import ProjectKeys, STATUS_DONE, UNASSIGNED_LABEL, NO_SIZE_LABEL
from charts.buckets import normalize_bucket_label, order_buckets, get_creation_month, category_label
from scoring.utils import to_number


def _size_of(task: Dict[str, Any], project_keys: ProjectKeys) -> str:
    size = task.get(project_keys.size)
    return category_label(size) if size else NO_SIZE_LABEL


def _assignees_or_none(task: Dict[str, Any]) -> Optional[List[str]]:
    assignees = task.get('assignees')
    return list(assignees) if assignees else None


def task_weight(task: Dict[str, Any], project_keys: ProjectKeys):
    """Actual days, else estimate days, else 1. Zero and non-numeric values count as missing."""
    return to_number(task.get(project_keys.actual_days)) or to_number(task.get(project_keys.estimate_days)) or 1


def bar_layout(size_count: int) -> Dict[str, Any]:
    """Presentational toggle for stacked bars: stack only once two or more sizes exist."""
    stacked = size_count > 1
    return {'stacked': stacked, 'focus': 'series' if stacked else 'self'}


def build_bar_series(name: str, data: List[int], layout: Dict[str, Any], stack: str = 'sizes') -> Dict[str, Any]:
    series = {'name': name, 'type': 'bar'}
    if layout['stacked']:
        series['stack'] = stack
    series['data'] = data
    series['emphasis'] = {'focus': layout['focus']}
    return series


def create_chart_data(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> Dict[str, Any]:
    """Done tasks per (assignee, size). Tasks with no assignee count under "Unassigned"."""
    counts: Dict[str, Dict[str, int]] = {}
    sizes: Dict[str, None] = {}
    for task in tasks:
        if task.get('Status') != STATUS_DONE:
            continue
        size = _size_of(task, project_keys)
        for assignee in _assignees_or_none(task) or [UNASSIGNED_LABEL]:
            per_size = counts.setdefault(assignee, {})
            sizes.setdefault(size)
            per_size[size] = per_size.get(size, 0) + 1

    assignees = list(counts.keys())
    layout = bar_layout(len(sizes))
    series = [
        build_bar_series(size, [counts[a].get(size, 0) for a in assignees], layout)
        for size in sizes
    ]
    return {'categories': assignees, 'series': series, 'layout': layout}


def _line_series(assignees: List[str], buckets: List[str], data: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            'name': assignee,
            'type': 'line',
            'data': [data.get(bucket, {}).get(assignee, 0) for bucket in buckets],
        }
        for assignee in assignees
    ]


def create_line_chart_data(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> Dict[str, Any]:
    """
    Weighted Done work per assignee per sprint.

    Unassigned tasks are skipped here, unlike the bar chart. Sprints seen on any task
    (done or not) are kept on the axis so empty sprints still show as zero.
    """
    sprint_data: Dict[str, Dict[str, Any]] = {}
    assignees: Dict[str, None] = {}
    all_sprints: Dict[str, None] = {}
    stats = {'totalTasks': 0, 'doneTasks': 0, 'tasksWithSprint': 0, 'tasksWithAssignees': 0, 'processedTasks': 0}

    for task in tasks:
        stats['totalTasks'] += 1
        if task.get(project_keys.sprint):
            stats['tasksWithSprint'] += 1
            all_sprints.setdefault(normalize_bucket_label(task.get(project_keys.sprint)))
        if _assignees_or_none(task):
            stats['tasksWithAssignees'] += 1
        if task.get('Status') != STATUS_DONE:
            continue
        stats['doneTasks'] += 1

        sprint = normalize_bucket_label(task.get(project_keys.sprint))
        all_sprints.setdefault(sprint)
        task_assignees = _assignees_or_none(task)
        if not task_assignees:
            continue
        stats['processedTasks'] += 1
        weight = task_weight(task, project_keys)
        per_assignee = sprint_data.setdefault(sprint, {})
        for assignee in task_assignees:
            per_assignee[assignee] = per_assignee.get(assignee, 0) + weight
            assignees.setdefault(assignee)

    sorted_sprints = order_buckets(all_sprints.keys())
    return {
        'sprints': list(sprint_data.keys()),
        'all_sprints': sorted_sprints,
        'assignee_series': _line_series(list(assignees), sorted_sprints, sprint_data),
        'sprint_stats': stats,
    }


def create_line_chart_data_by_creation_date(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> Dict[str, Any]:
    """Same shape as create_line_chart_data, bucketed by creation month (YYYY-MM)."""
    month_data: Dict[str, Dict[str, Any]] = {}
    assignees: Dict[str, None] = {}
    stats = {'totalTasks': 0, 'doneTasks': 0, 'tasksWithSprint': 0, 'tasksWithAssignees': 0, 'processedTasks': 0}

    for task in tasks:
        stats['totalTasks'] += 1
        if task.get('Status') != STATUS_DONE:
            continue
        stats['doneTasks'] += 1
        month = get_creation_month(task)
        task_assignees = _assignees_or_none(task)
        if not month or not task_assignees:
            continue
        stats['tasksWithAssignees'] += 1
        stats['processedTasks'] += 1
        weight = task_weight(task, project_keys)
        per_assignee = month_data.setdefault(month, {})
        for assignee in task_assignees:
            per_assignee[assignee] = per_assignee.get(assignee, 0) + weight
            assignees.setdefault(assignee)

    months = sorted(month_data.keys())
    return {
        'sprints': months,
        'all_sprints': months,
        'assignee_series': _line_series(list(assignees), months, month_data),
        'sprint_stats': stats,
    }


def _size_counts_by_assignee(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> Dict[str, Dict[str, int]]:
    counts: Dict[str, Dict[str, int]] = {}
    for task in tasks:
        if task.get('Status') != STATUS_DONE:
            continue
        task_assignees = _assignees_or_none(task)
        if not task_assignees:
            continue
        size = _size_of(task, project_keys)
        for assignee in task_assignees:
            per_size = counts.setdefault(assignee, {})
            per_size[size] = per_size.get(size, 0) + 1
    return counts


def create_pie_chart_data(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> List[Dict[str, Any]]:
    """One pie per assignee: distribution of their Done tasks across sizes."""
    counts = _size_counts_by_assignee(tasks, project_keys)
    return [
        {'assignee': assignee, 'data': [{'name': size, 'value': n} for size, n in per_size.items()]}
        for assignee, per_size in counts.items()
    ]


def create_assignees_by_size_pie_data(tasks: List[Dict[str, Any]], project_keys: ProjectKeys) -> Dict[str, List[Dict[str, Any]]]:
    """Transpose of create_pie_chart_data: size -> [{name: assignee, value: count}]."""
    by_size: Dict[str, Dict[str, int]] = {}
    for task in tasks:
        if task.get('Status') != STATUS_DONE:
            continue
        task_assignees = _assignees_or_none(task)
        if not task_assignees:
            continue
        per_assignee = by_size.setdefault(_size_of(task, project_keys), {})
        for assignee in task_assignees:
            per_assignee[assignee] = per_assignee.get(assignee, 0) + 1
    return {
        size: [{'name': assignee, 'value': n} for assignee, n in per_assignee.items()]
        for size, per_assignee in by_size.items()
    }


__all__ = [
    'create_chart_data',
    'create_line_chart_data',
    'create_line_chart_data_by_creation_date',
    'create_pie_chart_data',
    'create_assignees_by_size_pie_data',
    'task_weight',
]
