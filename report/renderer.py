"""
Report renderer: turn a dashboard dict into text, Markdown, CSV, JSON or HTML.
HTML and Markdown go through the Jinja2 templates in report/templates.
"""

from typing import Any, Dict, Iterable, List, Optional
import csv
import io
import json
import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), 'templates')

# dashboard keys holding {categories, series} charts, with their display titles
CATEGORY_CHARTS = [
    ('assignee_bar', 'Completed Tasks by Assignee and Size'),
    ('sprint_size', 'Tasks by Sprint and Size'),
    ('size_by_month', 'Tasks by Creation Month and Size'),
    ('velocity', 'Sprint Velocity'),
    ('velocity_by_month', 'Velocity by Creation Month'),
    ('label_distribution', 'Label Distribution'),
    ('field_distribution', 'Field Distribution'),
    ('pr_lifecycle', 'PR Lifecycle'),
]

# dashboard keys holding line charts: (key, axis key, series key, title)
LINE_CHARTS = [
    ('assignee_line', 'all_sprints', 'assignee_series', 'Assignee Effort by Sprint'),
    ('assignee_line_by_month', 'all_sprints', 'assignee_series', 'Assignee Effort by Creation Month'),
    ('author_line', 'months', 'author_series', 'Review Comments Received by Author'),
    ('reviewer_line', 'months', 'reviewer_series', 'Review Comments Given by Reviewer'),
    ('code_churn', 'months', 'series', 'Code Churn'),
    ('pr_frequency', 'months', 'author_series', 'PR Submission Frequency by Author'),
]

PIE_CHARTS = [
    ('author_pie', 'Review Comments Received'),
    ('reviewer_pie', 'Review Comments Given'),
]


def _environment() -> Environment:
    return Environment(loader=FileSystemLoader(TEMPLATES_DIR), autoescape=select_autoescape(['html', 'xml']))


def _as_table(categories: List[Any], series: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Pivot a categories/series chart into header + rows for tabular output."""
    header = ['category'] + [str(s.get('name')) for s in series]
    rows = []
    for idx, category in enumerate(categories):
        row = [category]
        for s in series:
            data = s.get('data') or []
            row.append(data[idx] if idx < len(data) else '')
        rows.append(row)
    return {'header': header, 'rows': rows}


def chart_tables(dashboard: Dict[str, Any]) -> List[Dict[str, Any]]:
    """All non-empty charts of a dashboard as titled tables, in display order."""
    tables = []
    for key, title in CATEGORY_CHARTS:
        chart = dashboard.get(key)
        if chart and chart.get('categories'):
            tables.append({'key': key, 'title': title, **_as_table(chart['categories'], chart.get('series') or [])})
    for key, axis_key, series_key, title in LINE_CHARTS:
        chart = dashboard.get(key)
        if chart and chart.get(axis_key) and chart.get(series_key):
            tables.append({'key': key, 'title': title, **_as_table(chart[axis_key], chart[series_key])})
    for key, title in PIE_CHARTS:
        slices = dashboard.get(key) or []
        if slices:
            tables.append({'key': key, 'title': title, 'header': ['name', 'value'], 'rows': [[s.get('name'), s.get('value')] for s in slices]})
    timeline = dashboard.get('timeline') or {}
    if timeline.get('tasks'):
        tables.append({
            'key': 'timeline',
            'title': 'Timeline Plan',
            'header': ['issue', 'developer', f"duration ({timeline.get('unit')})"],
            'rows': [[t['issue_number'], t['developer_index'] + 1, t['duration']] for t in timeline['tasks']],
        })
    return tables


def render_text(dashboard: Dict[str, Any]) -> str:
    """Render a plain-text summary with insights."""
    summary = dashboard.get('summary') or {}
    lines = [
        f"Total Tasks: {summary.get('total_tasks', 0)}",
        f"Done Tasks: {summary.get('done_tasks', 0)}",
        f"Pull Requests: {summary.get('pull_requests', 0)}",
    ]
    insights = dashboard.get('insights') or []
    if insights:
        lines.append("Insights:")
        lines.extend(f"  [{i.get('severity')}] {i.get('text')}" for i in insights)
    else:
        lines.append("Insights: none")
    return "\n".join(lines)


def render_markdown(dashboard: Dict[str, Any]) -> str:
    tmpl = _environment().get_template('dashboard.md.j2')
    return tmpl.render(dashboard=dashboard, summary=dashboard.get('summary') or {}, tables=chart_tables(dashboard), rca=dashboard.get('rca') or {})


def render_html(dashboard: Dict[str, Any], scope: Optional[str] = None) -> str:
    tmpl = _environment().get_template('dashboard.html.j2')
    context = {
        'dashboard': dashboard,
        'summary': dashboard.get('summary') or {},
        'insights': dashboard.get('insights') or [],
        'tables': chart_tables(dashboard),
        'rca': dashboard.get('rca') or {},
        'generated_at': dashboard.get('generated_at'),
        'scope': scope,
        'chart_json': json.dumps(dashboard, default=str).replace('</', '<\\/'),
    }
    return tmpl.render(**context)


def _csv_rows(tables: Iterable[Dict[str, Any]]):
    for table in tables:
        header = table['header']
        for row in table['rows']:
            for column, value in zip(header[1:], row[1:]):
                yield [table['key'], row[0], column, value]


def render_csv(dashboard: Dict[str, Any]) -> str:
    """Long-format CSV: one row per (chart, category, series) value."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(['chart', 'category', 'series', 'value'])
    for row in _csv_rows(chart_tables(dashboard)):
        writer.writerow(row)
    return output.getvalue()


def render_json(dashboard: Dict[str, Any]) -> str:
    return json.dumps(dashboard, indent=2, default=str)


def render(dashboard: Dict[str, Any], fmt: str = 'text', scope: Optional[str] = None) -> str:
    """Main render function. Unknown formats fall back to plain text."""
    fmt_l = (fmt or 'text').lower()
    if fmt_l in ('md', 'markdown'):
        return render_markdown(dashboard)
    if fmt_l == 'csv':
        return render_csv(dashboard)
    if fmt_l in ('html', 'htm'):
        return render_html(dashboard, scope=scope)
    if fmt_l in ('json', 'js'):
        return render_json(dashboard)
    return render_text(dashboard)
