"""
Pull request analytics: code churn and submission frequency per creation month,
lifecycle counts by state, and review turnaround time against PR size.
"""
from typing import Any, Dict, Iterable, List

from charts.buckets import get_creation_month, parse_datetime
from scoring.utils import to_number

UNKNOWN_AUTHOR = 'Unknown'

LIFECYCLE_CATEGORIES = ['Total PRs', 'Merged', 'Closed', 'Open', 'With Comments', 'Avg Comments/PR']


def _pr_dicts(prs: Iterable[Dict[str, Any]]):
    return [pr for pr in prs or [] if isinstance(pr, dict)]


def _count(pr: Dict[str, Any], key: str) -> int:
    return int(to_number(pr.get(key)))


def create_code_churn_chart_data(prs: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Additions, deletions (line axis) and changed files (second axis) per creation month."""
    churn: Dict[str, Dict[str, int]] = {}
    for pr in _pr_dicts(prs):
        month = get_creation_month(pr)
        if not month:
            continue
        totals = churn.setdefault(month, {'additions': 0, 'deletions': 0, 'files': 0})
        totals['additions'] += _count(pr, 'additions')
        totals['deletions'] += _count(pr, 'deletions')
        totals['files'] += _count(pr, 'changedFiles')

    months = sorted(churn.keys())
    return {
        'months': months,
        'series': [
            {'name': 'Additions', 'type': 'line', 'data': [churn[m]['additions'] for m in months]},
            {'name': 'Deletions', 'type': 'line', 'data': [churn[m]['deletions'] for m in months]},
            {'name': 'Files Changed', 'type': 'line', 'yAxisIndex': 1, 'data': [churn[m]['files'] for m in months]},
        ] if months else [],
    }


def create_pr_lifecycle_data(prs: List[Dict[str, Any]]) -> Dict[str, Any]:
    """PR counts by state plus review-comment coverage, as a single horizontal bar series."""
    prs = _pr_dicts(prs)
    if not prs:
        return {'categories': [], 'series': [], 'metrics': {}}

    metrics = {'total': 0, 'open': 0, 'closed': 0, 'merged': 0, 'withComments': 0, 'totalComments': 0}
    for pr in prs:
        metrics['total'] += 1
        state = pr.get('state')
        if isinstance(state, str) and state:
            state = state.lower()
            metrics[state] = metrics.get(state, 0) + 1
        comments = pr.get('reviewComments') or []
        if comments:
            metrics['withComments'] += 1
            metrics['totalComments'] += len(comments)

    average = round(metrics['totalComments'] / metrics['total'], 1)
    return {
        'categories': list(LIFECYCLE_CATEGORIES),
        'series': [{
            'name': 'Count',
            'type': 'bar',
            'data': [
                metrics['total'],
                metrics['merged'],
                metrics['closed'],
                metrics['open'],
                metrics['withComments'],
                average,
            ],
        }],
        'metrics': metrics,
    }


def create_author_pr_frequency_data(prs: List[Dict[str, Any]], selected_authors: List[str] = None) -> Dict[str, Any]:
    """
    PRs opened per author per creation month.

    Every dated PR puts its month on the axis; `selected_authors` (when given)
    limits which authors get a series.
    """
    freq: Dict[str, Dict[str, int]] = {}
    months = set()
    for pr in _pr_dicts(prs):
        month = get_creation_month(pr)
        if not month:
            continue
        months.add(month)
        per_month = freq.setdefault(pr.get('author') or UNKNOWN_AUTHOR, {})
        per_month[month] = per_month.get(month, 0) + 1

    months = sorted(months)
    authors = list(selected_authors) if selected_authors else list(freq)
    return {
        'months': months,
        'authors': list(freq),
        'author_series': [
            {'name': author, 'type': 'line', 'data': [freq.get(author, {}).get(m, 0) for m in months]}
            for author in authors
        ],
    }


def create_pr_review_time_data(prs: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Hours from creation to merge (or close when unmerged) against PR size.

    PRs still open, undated, or with a non-positive turnaround are left out.
    Returns {points, timeline, average_hours}; timeline is ordered by creation.
    """
    points = []
    for pr in _pr_dicts(prs):
        created = parse_datetime(pr.get('createdAt') or pr.get('created_at'))
        completed = parse_datetime(pr.get('mergedAt') or pr.get('closedAt'))
        if created is None or completed is None:
            continue
        hours = (completed - created).total_seconds() / 3600
        if hours <= 0:
            continue
        points.append({
            'size': _count(pr, 'additions') + _count(pr, 'deletions'),
            'review_hours': hours,
            'title': pr.get('title'),
            'number': pr.get('number'),
            'createdAt': created.isoformat(),
            '_created': created,
        })

    timeline = [[p['createdAt'], p['review_hours']] for p in sorted(points, key=lambda p: p['_created'])]
    for point in points:
        del point['_created']
    average = round(sum(p['review_hours'] for p in points) / len(points), 1) if points else None
    return {'points': points, 'timeline': timeline, 'average_hours': average}
