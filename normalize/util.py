"""
Normalization utility helpers.
Map raw REST issue payloads, GraphQL project items and GraphQL pull request nodes
onto the canonical task / pull request dicts the chart aggregators consume.
None of these raise on missing or malformed fields; they fall back to None/[]/"Todo".
"""
from typing import Any, Dict, Iterable, List, Optional

from normalize.models import ProjectKeys, STATUS_DONE, STATUS_TODO


def _as_dict(raw: Any) -> Dict[str, Any]:
    return raw if isinstance(raw, dict) else {}


def _node_values(nodes: Any, key: str) -> List[str]:
    """Pull `key` out of each node; plain strings are kept as-is, anything else is dropped."""
    if isinstance(nodes, dict):
        # GraphQL connections arrive as {'nodes': [...]}
        nodes = nodes.get('nodes')
    if not isinstance(nodes, (list, tuple)):
        return []
    values = []
    for node in nodes:
        if isinstance(node, str):
            values.append(node)
        elif isinstance(node, dict) and node.get(key):
            values.append(node.get(key))
    return values


def normalize_labels(labels: Any) -> List[str]:
    """Return label names from either label nodes ({'name': ...}) or plain strings."""
    return _node_values(labels, 'name')


def normalize_assignees(assignees: Any) -> List[str]:
    """Return assignee logins from either user nodes ({'login': ...}) or plain strings."""
    return _node_values(assignees, 'login')


def _repo_parts(repository_url: Any) -> Optional[List[str]]:
    if not isinstance(repository_url, str) or not repository_url:
        return None
    return repository_url.split('/')


def _repository_from_url(repository_url: Any) -> Optional[str]:
    parts = _repo_parts(repository_url)
    if parts is None:
        return None
    # best-effort: last path segment, whatever the URL shape
    return parts[-1] or None


def _repo_owner_from_url(repository_url: Any) -> Optional[str]:
    parts = _repo_parts(repository_url)
    # https://api.github.com/repos/<owner>/<repo> -> owner is segment 4;
    # shorter URLs give no owner even though _repository_from_url still answers
    if parts is None or len(parts) <= 4:
        return None
    return parts[4] or None


def from_rest_format(raw: Dict[str, Any], project_keys: Optional[ProjectKeys] = None) -> Dict[str, Any]:
    """Create a canonical task from a GitHub REST issue payload.
    REST issues carry no project custom fields, so the four project-key fields are always None.
    """
    raw = _as_dict(raw)
    project_keys = project_keys or ProjectKeys()
    task = {
        'id': raw.get('node_id') or None,
        'title': raw.get('title') or None,
        'issue_number': raw.get('number') or None,
        'repository': _repository_from_url(raw.get('repository_url')),
        'repo_owner': _repo_owner_from_url(raw.get('repository_url')),
        'labels': normalize_labels(raw.get('labels')),
        'assignees': normalize_assignees(raw.get('assignees')),
        'Title': raw.get('title') or None,
        'Status': STATUS_DONE if raw.get('state') == 'closed' else STATUS_TODO,
        'number': raw.get('number') or None,
        'body': raw.get('body') or None,
        'state': raw.get('state') or None,
        'html_url': raw.get('html_url') or None,
        'createdAt': raw.get('created_at') or raw.get('createdAt') or None,
        'links': [],
    }
    for field_name in project_keys.fields():
        task[field_name] = None
    return task


def from_graphql_format(raw: Dict[str, Any], project_keys: Optional[ProjectKeys] = None) -> Dict[str, Any]:
    """Create a canonical task from an already-flattened GraphQL ProjectV2 item.
    All source keys are forwarded; the canonical fields are then overridden.
    """
    raw = _as_dict(raw)
    task = dict(raw)
    status = raw.get('Status') or STATUS_TODO
    task.update({
        'id': raw.get('id') or None,
        'title': raw.get('title') or None,
        'issue_number': raw.get('issue_number') or None,
        'repository': raw.get('repository') or None,
        'repo_owner': raw.get('repo_owner') or None,
        'labels': normalize_labels(raw.get('labels')),
        'assignees': normalize_assignees(raw.get('assignees')),
        'Title': raw.get('title') or None,
        'Status': status,
        'number': raw.get('issue_number') or None,
        'body': raw.get('body') or None,
        # legacy consumers read `state`
        'state': status,
        'html_url': raw.get('html_url') or None,
        'links': raw.get('links') or [],
    })
    if project_keys is not None:
        for field_name in project_keys.fields():
            task.setdefault(field_name, None)
    return task


def _looks_like_rest(raw: Dict[str, Any]) -> bool:
    return 'repository_url' in raw or 'node_id' in raw


def convert_tasks(items: Iterable[Dict[str, Any]], source: str = 'auto', project_keys: Optional[ProjectKeys] = None) -> List[Dict[str, Any]]:
    """Convert a batch of raw records. `source` is 'rest', 'graphql' or 'auto' (decided per record)."""
    tasks = []
    for raw in items or []:
        raw_dict = _as_dict(raw)
        if source == 'rest' or (source == 'auto' and _looks_like_rest(raw_dict)):
            tasks.append(from_rest_format(raw_dict, project_keys))
        else:
            tasks.append(from_graphql_format(raw_dict, project_keys))
    return tasks


def _login(node: Any) -> Optional[str]:
    if isinstance(node, str):
        return node or None
    if isinstance(node, dict):
        return node.get('login') or None
    return None


def _normalize_review_comment(comment: Dict[str, Any], review_author: Optional[str] = None) -> Dict[str, Any]:
    comment = _as_dict(comment)
    normalized = {
        'body': comment.get('body') or '',
        'createdAt': comment.get('createdAt') or comment.get('created_at'),
        'author': _login(comment.get('author')),
        'path': comment.get('path'),
        'position': comment.get('position'),
    }
    if review_author:
        normalized['reviewAuthor'] = review_author
    return normalized


def normalize_pull_request(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Create a canonical pull request from a GraphQL PR node.

    Review comments are flattened out of reviews.nodes[].comments.nodes[]; a flat
    reviewComments list, when already present, is normalized instead.
    """
    raw = _as_dict(raw)
    reviews = raw.get('reviews')
    if isinstance(reviews, dict):
        reviews = reviews.get('nodes')
    reviews = reviews if isinstance(reviews, list) else []

    review_comments: List[Dict[str, Any]] = []
    if isinstance(raw.get('reviewComments'), list):
        review_comments = [_normalize_review_comment(c) for c in raw.get('reviewComments')]
    else:
        for review in reviews:
            review = _as_dict(review)
            review_author = _login(review.get('author'))
            comments = review.get('comments')
            comments = comments.get('nodes') if isinstance(comments, dict) else comments
            for comment in comments or []:
                review_comments.append(_normalize_review_comment(comment, review_author))

    pr = dict(raw)
    pr.update({
        'id': raw.get('id') or None,
        'title': raw.get('title') or None,
        'number': raw.get('number') or None,
        'createdAt': raw.get('createdAt') or raw.get('created_at'),
        'closedAt': raw.get('closedAt'),
        'mergedAt': raw.get('mergedAt'),
        'state': raw.get('state'),
        'author': _login(raw.get('author')) or _login(raw.get('user')),
        'assignees': normalize_assignees(raw.get('assignees')),
        'labels': normalize_labels(raw.get('labels')),
        'reviewers': [r for r in (_login(_as_dict(rv).get('author')) for rv in reviews) if r],
        'reviewComments': review_comments,
        'additions': raw.get('additions') or 0,
        'deletions': raw.get('deletions') or 0,
        'changedFiles': raw.get('changedFiles') or 0,
    })
    pr.pop('reviews', None)
    return pr
