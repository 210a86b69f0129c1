from charts.activity import (
    create_author_line_chart_data,
    create_reviewer_line_chart_data,
    create_reviewer_pie_chart_data,
    create_author_pie_chart_data,
)


def _pr(author, created, commenters):
    return {
        'author': author,
        'createdAt': created,
        'reviewComments': [{'author': c, 'body': 'x'} for c in commenters],
    }


PRS = [
    _pr('alice', '2024-02-03T00:00:00Z', ['bob', 'bob', 'alice']),
    _pr('alice', '2024-01-10T00:00:00Z', ['carol']),
    _pr('bob', '2024-02-20T00:00:00Z', ['alice']),
    _pr('dave', '2024-03-01T00:00:00Z', []),
]


def test_author_line_excludes_self_comments():
    chart = create_author_line_chart_data(PRS)
    assert chart['months'] == ['2024-01', '2024-02']
    series = {s['name']: s['data'] for s in chart['author_series']}
    assert series['alice'] == [1, 2]
    assert series['bob'] == [0, 1]
    # PRs with no comments contribute no bucket or series
    assert 'dave' not in series


def test_reviewer_line():
    chart = create_reviewer_line_chart_data(PRS)
    assert chart['months'] == ['2024-01', '2024-02']
    series = {s['name']: s['data'] for s in chart['reviewer_series']}
    assert series == {'bob': [0, 2], 'carol': [1, 0], 'alice': [0, 1]}


def test_pies():
    assert create_reviewer_pie_chart_data(PRS) == [
        {'name': 'bob', 'value': 2},
        {'name': 'carol', 'value': 1},
        {'name': 'alice', 'value': 1},
    ]
    totals = {d['name']: d['value'] for d in create_author_pie_chart_data(PRS)}
    assert totals == {'alice': 3, 'bob': 1}


def test_empty_inputs():
    assert create_author_line_chart_data([]) == {'months': [], 'author_series': []}
    assert create_reviewer_pie_chart_data(None) == []
