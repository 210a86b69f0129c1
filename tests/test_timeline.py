import math

from charts.timeline import (
    DAY_MS,
    HOUR_MS,
    parse_numeric,
    get_numeric_fields,
    extract_issues_with_values,
    unit_from_field_name,
    convert_to_ms,
    calculate_end_time,
    schedule_tasks,
    calculate_outliers,
    calculate_developer_workload,
    find_critical_path_tasks,
    calculate_total_duration,
    calculate_estimate,
    calculate_estimation_outliers,
    create_timeline_planning_data,
)


def _items(*values):
    return [{'issue': {'title': f't{v}', 'number': v}, 'value': v} for v in values]


def test_parse_numeric():
    assert parse_numeric(2) == 2.0
    assert parse_numeric('3 days') == 3.0
    assert parse_numeric(' 1.5') == 1.5
    assert parse_numeric('abc') is None
    assert parse_numeric(True) is None
    assert parse_numeric(None) is None
    assert parse_numeric(float('nan')) is None
    assert parse_numeric(math.inf) is None


def test_numeric_fields_from_sampled_issues():
    issues = [
        {'Estimate (days)': 2, 'Title': 'x'},
        {'customFields': {'Points': '5'}, 'Title': 'y'},
    ]
    assert get_numeric_fields(issues, ['Title', 'Points', 'Estimate (days)']) == ['Estimate (days)', 'Points']
    assert get_numeric_fields([], ['Points']) == []


def test_extract_issues_with_values_skips_non_numeric():
    issues = [{'Points': 3}, {'Points': 'n/a'}, {'Points': 0}, 'not-an-issue', {}]
    assert [i['value'] for i in extract_issues_with_values('Points', issues)] == [3.0, 0.0]
    assert [i['value'] for i in extract_issues_with_values('Points', issues, require_positive=True)] == [3.0]
    assert extract_issues_with_values('', issues) == []


def test_units():
    assert unit_from_field_name('Estimate (days)') == 'days'
    assert unit_from_field_name('Hours spent') == 'hours'
    assert unit_from_field_name('Points') == 'units'
    assert convert_to_ms(2, 'weeks') == 14 * DAY_MS
    # anything unrecognized is scheduled as hours
    assert convert_to_ms(2, 'units') == 2 * HOUR_MS


def test_end_time_skips_holiday_weekdays():
    # the epoch day is a Thursday (4)
    assert calculate_end_time(0, DAY_MS, set()) == DAY_MS
    assert calculate_end_time(0, DAY_MS, {4}) == 2 * DAY_MS
    # Friday start with a weekend off finishes at the end of Sunday
    assert calculate_end_time(DAY_MS, DAY_MS, {5, 6}) == 4 * DAY_MS
    assert calculate_end_time(0, DAY_MS, set(range(7))) == DAY_MS


def test_largest_first_schedule():
    scheduled = schedule_tasks(_items(1, 3, 2), 2, 'days')
    assert [t['duration'] for t in scheduled] == [3, 2, 1]
    assert [t['developer_index'] for t in scheduled] == [0, 1, 1]
    assert scheduled[2]['start_time'] == 2 * DAY_MS
    assert scheduled[2]['end_time'] == 3 * DAY_MS
    assert scheduled[0]['issue_title'] == 't3'
    assert find_critical_path_tasks(scheduled) == {0, 2}
    assert calculate_developer_workload(scheduled) == {
        0: {'total': 3, 'tasks': 1, 'max_end_time': 3 * DAY_MS},
        1: {'total': 3, 'tasks': 2, 'max_end_time': 3 * DAY_MS},
    }
    assert calculate_total_duration(scheduled, 'days') == 3.0


def test_sort_strategies_and_defaults():
    assert [t['duration'] for t in schedule_tasks(_items(2, 1, 3), 1, 'days', 'smallest-first')] == [1, 2, 3]
    assert [t['duration'] for t in schedule_tasks(_items(2, 1, 3), 1, 'days', 'round-robin')] == [2, 1, 3]
    scheduled = schedule_tasks([{'issue': {}, 'value': 1}, {'issue': {'id': 'I_1'}, 'value': 1}], 1, 'hours')
    assert scheduled[0]['issue_title'] == 'Untitled'
    assert scheduled[0]['issue_number'] == 'N/A'
    assert scheduled[1]['issue_number'] == 'I_1'
    assert schedule_tasks(_items(1), 0, 'days') == []


def test_outliers_need_a_positive_threshold():
    scheduled = schedule_tasks(_items(1, 3, 2), 1, 'days')
    assert [t['duration'] for t in calculate_outliers(scheduled, '2')] == [3]
    assert calculate_outliers(scheduled, 0) == []
    assert calculate_outliers(scheduled, 'abc') == []
    assert [i['value'] for i in calculate_estimation_outliers(_items(3, 5, 1), 2)] == [5, 3]


def test_estimate():
    assert calculate_estimate([], 0, 2) is None
    assert calculate_estimate(_items(4), 1, 0) is None
    assert calculate_estimate(_items(4), 1, 3) == 4
    assert calculate_estimate(_items(4, 2), 2, 3) == 2.0


def test_planning_data():
    issues = [
        {'title': 'big', 'number': 1, 'Estimate (days)': 3},
        {'title': 'none', 'number': 2, 'Estimate (days)': '0'},
        {'title': 'small', 'number': 3, 'Estimate (days)': '1 day'},
        {'title': 'skip', 'number': 4, 'Estimate (days)': 'abc'},
    ]
    plan = create_timeline_planning_data(issues, 'Estimate (days)', num_developers=1)
    assert plan['unit'] == 'days'
    assert [t['issue_number'] for t in plan['tasks']] == [1, 3]
    assert all('issue' not in t for t in plan['tasks'])
    assert plan['total_duration'] == 4.0
    assert plan['critical_path'] == [1]
    assert plan['estimate'] == 4.0
    assert plan['outliers'] == 0

    outliers = create_timeline_planning_data(issues, 'Estimate (days)', outlier_threshold=2, view_mode='outliers-only')
    assert [t['issue_title'] for t in outliers['tasks']] == ['big']
    assert outliers['outliers'] == 1

    critical = create_timeline_planning_data(issues, 'Estimate (days)', view_mode='critical-path')
    assert [t['issue_title'] for t in critical['tasks']] == ['small']


def test_planning_data_without_values():
    plan = create_timeline_planning_data([{'title': 'x'}], 'Estimate (days)')
    assert plan['tasks'] == []
    assert plan['workload'] == {}
    assert plan['estimate'] is None
    assert plan['total_duration'] == 0
