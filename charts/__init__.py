"""
Charts package: pure builders turning canonical tasks and pull requests into
category/series structures for bar, line and pie charts.
"""

from .buckets import NO_SPRINT_LABEL, sort_sprints_numerically, group_by_bucket, get_creation_month
from .assignee import (
    create_chart_data,
    create_line_chart_data,
    create_line_chart_data_by_creation_date,
    create_pie_chart_data,
    create_assignees_by_size_pie_data,
)
from .activity import (
    create_author_line_chart_data,
    create_reviewer_line_chart_data,
    create_reviewer_pie_chart_data,
    create_author_pie_chart_data,
)
from .distribution import create_label_chart_data, create_field_chart_data
from .pull_requests import (
    create_code_churn_chart_data,
    create_pr_lifecycle_data,
    create_author_pr_frequency_data,
    create_pr_review_time_data,
)
from .timeline import create_timeline_planning_data, get_numeric_fields

__all__ = [
    "NO_SPRINT_LABEL",
    "sort_sprints_numerically",
    "group_by_bucket",
    "get_creation_month",
    "create_chart_data",
    "create_line_chart_data",
    "create_line_chart_data_by_creation_date",
    "create_pie_chart_data",
    "create_assignees_by_size_pie_data",
    "create_author_line_chart_data",
    "create_reviewer_line_chart_data",
    "create_reviewer_pie_chart_data",
    "create_author_pie_chart_data",
    "create_label_chart_data",
    "create_field_chart_data",
    "create_code_churn_chart_data",
    "create_pr_lifecycle_data",
    "create_author_pr_frequency_data",
    "create_pr_review_time_data",
    "create_timeline_planning_data",
    "get_numeric_fields",
]
