"""
Sprint velocity insights.
Compares the two most recent named sprints and reports regressions in completed
task count and in completed effort. Increases and ties produce nothing.
"""
from typing import Any, Dict, List

from normalize.models import Insight
from charts.buckets import group_by_bucket, named_buckets, BucketSelector
from .utils import percent_decrease, severity_for_decrease, sum_field


def _count_insight(current: str, previous: str, current_count: int, previous_count: int) -> Insight:
    decrease = percent_decrease(current_count, previous_count)
    return Insight(
        text=f"Sprint velocity decreased by {decrease:.1f}% in {current} compared to {previous} "
        f"({current_count} vs {previous_count} tasks)",
        severity=severity_for_decrease(decrease),
    )


def _effort_insight(current: str, previous: str, current_effort: float, previous_effort: float) -> Insight:
    decrease = percent_decrease(current_effort, previous_effort)
    return Insight(
        text=f"Sprint effort decreased by {decrease:.1f}% in {current} compared to {previous} "
        f"({current_effort:.1f} vs {previous_effort:.1f} days)",
        severity=severity_for_decrease(decrease),
    )


def generate_velocity_insights(tasks: List[Dict[str, Any]], sprint_field: BucketSelector, effort_field: str) -> List[Insight]:
    """
    Generate velocity regression insights for the latest sprint.

    Parameters:
        tasks: canonical task dicts; only Done tasks are considered.
        sprint_field: field name (or callable) giving each task's sprint.
        effort_field: field name holding completed effort in days.

    Returns:
        A list of zero, one or two Insight objects. Tasks with no sprint are ignored,
        and fewer than two named sprints means no comparison is possible.
    """
    sorted_buckets, bucketed = group_by_bucket(tasks, sprint_field)
    sprints = named_buckets(sorted_buckets)
    insights: List[Insight] = []
    if len(sprints) < 2:
        return insights

    previous, current = sprints[-2], sprints[-1]
    current_tasks = bucketed[current]
    previous_tasks = bucketed[previous]

    if len(current_tasks) < len(previous_tasks):
        insights.append(_count_insight(current, previous, len(current_tasks), len(previous_tasks)))

    current_effort = sum_field(current_tasks, effort_field)
    previous_effort = sum_field(previous_tasks, effort_field)
    if current_effort < previous_effort:
        insights.append(_effort_insight(current, previous, current_effort, previous_effort))

    return insights
