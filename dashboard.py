"""
Dashboard assembly: run every chart builder over one set of tasks and pull requests.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from normalize.models import ProjectKeys, STATUS_DONE
from normalize.util import convert_tasks, normalize_pull_request, normalize_labels
from charts import (
    create_chart_data,
    create_line_chart_data,
    create_line_chart_data_by_creation_date,
    create_pie_chart_data,
    create_assignees_by_size_pie_data,
    create_author_line_chart_data,
    create_reviewer_line_chart_data,
    create_reviewer_pie_chart_data,
    create_author_pie_chart_data,
    create_label_chart_data,
    create_field_chart_data,
    create_code_churn_chart_data,
    create_pr_lifecycle_data,
    create_author_pr_frequency_data,
    create_pr_review_time_data,
    create_timeline_planning_data,
)
from charts.sprint import (
    create_sprint_size_chart_data,
    create_size_by_creation_month_chart_data,
    create_velocity_chart_data,
    create_velocity_chart_data_by_creation_date,
)
from textmine.rca import rca_sentences, sentence_frequencies, create_word_cloud_data
from textmine.completion import process_sentences_with_ai

logger = logging.getLogger(__name__)


def _has_label(task: Dict[str, Any], label: str) -> bool:
    """True when the issue carries `label`, or its Type field equals it (case-insensitive)."""
    wanted = label.lower()
    issue_type = task.get('Type')
    if isinstance(issue_type, str) and issue_type.lower() == wanted:
        return True
    return any(name.lower() == wanted for name in normalize_labels(task.get('labels')))


def build_rca_summary(issues: List[Dict[str, Any]], api_key: Optional[str] = None, label: Optional[str] = None) -> Dict[str, Any]:
    """Mine RCA sentences from issue bodies (optionally only issues carrying `label`),
    merge near-duplicates when an api_key is given, and build word-cloud data.
    """
    if label:
        issues = [i for i in issues if _has_label(i, label)]
    sentences = rca_sentences(issues)
    processed = process_sentences_with_ai(sentences, api_key)
    frequencies = sentence_frequencies(processed['normalizedSentences'])
    return {
        'issues_considered': len(issues),
        'sentences': len(sentences),
        'frequencies': frequencies,
        'word_cloud': create_word_cloud_data(frequencies, processed['filteredSentences']),
    }


def build_dashboard(
    tasks: List[Dict[str, Any]],
    prs: Optional[List[Dict[str, Any]]] = None,
    project_keys: Optional[ProjectKeys] = None,
    selected_labels: Optional[List[str]] = None,
    field_name: Optional[str] = None,
    selected_values: Optional[List[str]] = None,
    api_key: Optional[str] = None,
    rca_label: Optional[str] = None,
    timeline_field: Optional[str] = None,
    developers: int = 1,
    generated_at: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Compute all chart data for already-normalized tasks and pull requests.

    Parameters:
        tasks (list): canonical task dicts.
        prs (list): canonical pull request dicts.
        project_keys (ProjectKeys): field-indirection table; defaults apply when omitted.
        selected_labels (list): labels to chart in the label distribution.
        field_name (str): field for the field distribution, charted over selected_values.
        api_key (str): text-completion key used to merge RCA sentences; optional.
        rca_label (str): only mine RCA text from issues carrying this label (or of this Type).
        timeline_field (str): numeric field scheduled in the timeline; defaults to the estimate field.
        developers (int): number of developers the timeline is spread over.

    Returns:
        dict: serializable dashboard with one entry per chart.
    """
    project_keys = project_keys or ProjectKeys()
    prs = prs or []
    velocity = create_velocity_chart_data(tasks, project_keys)
    dashboard = {
        'generated_at': generated_at or datetime.now(timezone.utc).isoformat(),
        'project_keys': project_keys.as_dict(),
        'summary': {
            'total_tasks': len(tasks),
            'done_tasks': sum(1 for t in tasks if t.get('Status') == STATUS_DONE),
            'pull_requests': len(prs),
        },
        'insights': velocity['insights'],
        'assignee_bar': create_chart_data(tasks, project_keys),
        'assignee_line': create_line_chart_data(tasks, project_keys),
        'assignee_line_by_month': create_line_chart_data_by_creation_date(tasks, project_keys),
        'assignee_pie': create_pie_chart_data(tasks, project_keys),
        'assignees_by_size_pie': create_assignees_by_size_pie_data(tasks, project_keys),
        'sprint_size': create_sprint_size_chart_data(tasks, project_keys),
        'size_by_month': create_size_by_creation_month_chart_data(tasks, project_keys),
        'velocity': velocity,
        'velocity_by_month': create_velocity_chart_data_by_creation_date(tasks, project_keys),
        'author_line': create_author_line_chart_data(prs),
        'reviewer_line': create_reviewer_line_chart_data(prs),
        'author_pie': create_author_pie_chart_data(prs),
        'reviewer_pie': create_reviewer_pie_chart_data(prs),
        'code_churn': create_code_churn_chart_data(prs),
        'pr_lifecycle': create_pr_lifecycle_data(prs),
        'pr_frequency': create_author_pr_frequency_data(prs),
        'pr_review_time': create_pr_review_time_data(prs),
        'label_distribution': create_label_chart_data(tasks, selected_labels or []),
        'field_distribution': create_field_chart_data(tasks, field_name, selected_values or []) if field_name else None,
        'rca': build_rca_summary(tasks, api_key=api_key, label=rca_label),
        'timeline': create_timeline_planning_data(tasks, timeline_field or project_keys.estimate_days, num_developers=developers),
    }
    logger.info(
        "Built dashboard for %d tasks (%d done) and %d pull requests",
        dashboard['summary']['total_tasks'], dashboard['summary']['done_tasks'], len(prs),
    )
    return dashboard


def build_dashboard_from_raw(
    raw_tasks: List[Dict[str, Any]],
    raw_prs: Optional[List[Dict[str, Any]]] = None,
    source: str = 'auto',
    project_keys: Optional[ProjectKeys] = None,
    **kwargs,
) -> Dict[str, Any]:
    """Normalize raw REST/GraphQL records and PR nodes, then build the dashboard."""
    project_keys = project_keys or ProjectKeys()
    tasks = convert_tasks(raw_tasks, source=source, project_keys=project_keys)
    prs = [normalize_pull_request(pr) for pr in raw_prs or []]
    return build_dashboard(tasks, prs, project_keys=project_keys, **kwargs)
