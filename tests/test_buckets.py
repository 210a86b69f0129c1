from datetime import datetime

from charts.buckets import (
    NO_SPRINT_LABEL,
    sort_sprints_numerically,
    sorted_sprints,
    normalize_bucket_label,
    order_buckets,
    group_by_bucket,
    get_creation_month,
    category_label,
)


def test_numeric_sort_uses_first_digit_run():
    labels = ['Sprint 10', 'Sprint 2', 'Sprint 1']
    result = sort_sprints_numerically(labels)
    assert result == ['Sprint 1', 'Sprint 2', 'Sprint 10']
    # sorted in place
    assert labels is result


def test_labels_without_digits_sort_lexicographically():
    assert sorted_sprints(['beta', 'alpha']) == ['alpha', 'beta']


def test_sorted_sprints_does_not_mutate():
    labels = ['S3', 'S1']
    assert sorted_sprints(labels) == ['S1', 'S3']
    assert labels == ['S3', 'S1']


def test_no_sprint_bucket_always_last():
    assert order_buckets([NO_SPRINT_LABEL, 'Sprint 2', 'Sprint 1']) == ['Sprint 1', 'Sprint 2', NO_SPRINT_LABEL]
    assert order_buckets(['Sprint 1', 'Sprint 1']) == ['Sprint 1']


def test_normalize_bucket_label():
    assert normalize_bucket_label('  Sprint   4 ') == 'Sprint 4'
    assert normalize_bucket_label(None) == NO_SPRINT_LABEL
    assert normalize_bucket_label('   ') == NO_SPRINT_LABEL


def test_group_by_bucket_only_done_tasks():
    tasks = [
        {'Status': 'Done', 'Sprint': 'Sprint 2'},
        {'Status': 'Done', 'Sprint': 'Sprint 10'},
        {'Status': 'Done'},
        {'Status': 'Todo', 'Sprint': 'Sprint 3'},
    ]
    buckets, bucketed = group_by_bucket(tasks, 'Sprint')
    assert buckets == ['Sprint 2', 'Sprint 10', NO_SPRINT_LABEL]
    assert 'Sprint 3' not in bucketed
    assert len(bucketed[NO_SPRINT_LABEL]) == 1


def test_group_by_bucket_callable_selector():
    tasks = [{'Status': 'Done', 'createdAt': '2024-05-01T00:00:00Z'}]
    buckets, _ = group_by_bucket(tasks, get_creation_month)
    assert buckets == ['2024-05']


def test_get_creation_month_variants():
    assert get_creation_month({'createdAt': '2024-01-31T23:30:00Z'}) == '2024-01'
    assert get_creation_month({'created_at': '2023-12-01'}) == '2023-12'
    assert get_creation_month({'createdAt': datetime(2022, 7, 4)}) == '2022-07'
    assert get_creation_month({'createdAt': '2024-03'}) == '2024-03'
    assert get_creation_month({'createdAt': 'not a date'}) is None
    assert get_creation_month({}) is None


def test_hyphenated_sprint_names():
    assert sort_sprints_numerically(['Sprint-10', 'Sprint-2', 'Sprint-1']) == ['Sprint-1', 'Sprint-2', 'Sprint-10']


def test_category_label_formats_like_display_values():
    assert category_label(3.0) == '3'
    assert category_label(2.5) == '2.5'
    assert category_label(7) == '7'
    assert category_label(True) == 'true'
    assert category_label('M') == 'M'
    assert normalize_bucket_label(4.0) == '4'
