"""
Pull request review activity: comments received by PR authors and comments given
by reviewers, per creation month (line) and in total (pie).
A comment written by the PR's own author never counts on either side.
PRs with no review comments contribute nothing, not even an empty bucket.
"""
from typing import Any, Dict, Iterable, List

from charts.buckets import get_creation_month


def _reviewed_prs(prs: Iterable[Dict[str, Any]]):
    for pr in prs or []:
        if not isinstance(pr, dict):
            continue
        comments = pr.get('reviewComments')
        if not comments:
            continue
        yield pr, [c for c in comments if isinstance(c, dict)]


def _is_self_comment(pr: Dict[str, Any], comment: Dict[str, Any]) -> bool:
    return comment.get('author') == pr.get('author')


def _monthly_series(time_data: Dict[str, Dict[str, int]], people: List[str]):
    months = sorted(time_data.keys())
    series = [
        {'name': person, 'type': 'line', 'data': [time_data[m].get(person, 0) for m in months]}
        for person in people
    ]
    return months, series


def create_author_line_chart_data(prs: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Review comments received per PR author per month."""
    time_data: Dict[str, Dict[str, int]] = {}
    authors: Dict[str, None] = {}
    for pr, comments in _reviewed_prs(prs):
        month = get_creation_month(pr)
        if not month:
            continue
        author = pr.get('author')
        authors.setdefault(author)
        per_author = time_data.setdefault(month, {})
        per_author.setdefault(author, 0)
        per_author[author] += sum(1 for c in comments if not _is_self_comment(pr, c))

    months, series = _monthly_series(time_data, list(authors))
    return {'months': months, 'author_series': series}


def create_reviewer_line_chart_data(prs: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Review comments given per reviewer per month (bucketed by the PR's creation month)."""
    time_data: Dict[str, Dict[str, int]] = {}
    reviewers: Dict[str, None] = {}
    for pr, comments in _reviewed_prs(prs):
        month = get_creation_month(pr)
        if not month:
            continue
        for comment in comments:
            if _is_self_comment(pr, comment):
                continue
            reviewer = comment.get('author')
            reviewers.setdefault(reviewer)
            per_reviewer = time_data.setdefault(month, {})
            per_reviewer[reviewer] = per_reviewer.get(reviewer, 0) + 1

    months, series = _monthly_series(time_data, list(reviewers))
    return {'months': months, 'reviewer_series': series}


def create_reviewer_pie_chart_data(prs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Total review comments given per reviewer."""
    totals: Dict[str, int] = {}
    for pr, comments in _reviewed_prs(prs):
        for comment in comments:
            if _is_self_comment(pr, comment):
                continue
            reviewer = comment.get('author')
            totals[reviewer] = totals.get(reviewer, 0) + 1
    return [{'name': reviewer, 'value': count} for reviewer, count in totals.items()]


def create_author_pie_chart_data(prs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Total review comments received per PR author."""
    totals: Dict[str, int] = {}
    for pr, comments in _reviewed_prs(prs):
        author = pr.get('author')
        totals[author] = totals.get(author, 0) + sum(1 for c in comments if not _is_self_comment(pr, c))
    return [{'name': author, 'value': count} for author, count in totals.items()]
