import unittest

from charts.pull_requests import (
    create_code_churn_chart_data,
    create_pr_lifecycle_data,
    create_author_pr_frequency_data,
    create_pr_review_time_data,
)


class TestCodeChurn(unittest.TestCase):
    def test_totals_per_creation_month(self):
        prs = [
            {'createdAt': '2024-01-03T00:00:00Z', 'additions': 10, 'deletions': 2, 'changedFiles': 1},
            {'createdAt': '2024-01-20T00:00:00Z', 'additions': 5, 'deletions': '3', 'changedFiles': None},
            {'createdAt': '2024-02-01T00:00:00Z', 'additions': 1},
            {'additions': 100},
        ]
        chart = create_code_churn_chart_data(prs)
        self.assertEqual(chart['months'], ['2024-01', '2024-02'])
        series = {s['name']: s for s in chart['series']}
        self.assertEqual(series['Additions']['data'], [15, 1])
        self.assertEqual(series['Deletions']['data'], [5, 0])
        self.assertEqual(series['Files Changed']['data'], [1, 0])
        self.assertEqual(series['Files Changed']['yAxisIndex'], 1)

    def test_empty(self):
        self.assertEqual(create_code_churn_chart_data([]), {'months': [], 'series': []})


class TestLifecycle(unittest.TestCase):
    def test_counts_by_state(self):
        prs = [
            {'state': 'MERGED', 'reviewComments': [{'body': 'a'}, {'body': 'b'}]},
            {'state': 'closed', 'reviewComments': []},
            {'state': 'OPEN'},
            {'state': 'open'},
        ]
        chart = create_pr_lifecycle_data(prs)
        self.assertEqual(chart['categories'][0], 'Total PRs')
        self.assertEqual(chart['series'][0]['data'], [4, 1, 1, 2, 1, 0.5])
        self.assertEqual(chart['metrics']['withComments'], 1)
        self.assertEqual(chart['metrics']['totalComments'], 2)

    def test_empty(self):
        self.assertEqual(create_pr_lifecycle_data([]), {'categories': [], 'series': [], 'metrics': {}})


class TestAuthorFrequency(unittest.TestCase):
    PRS = [
        {'author': 'alice', 'createdAt': '2024-01-02T00:00:00Z'},
        {'author': 'alice', 'createdAt': '2024-01-09T00:00:00Z'},
        {'author': 'bob', 'createdAt': '2024-02-01T00:00:00Z'},
        {'author': None, 'createdAt': '2024-02-11T00:00:00Z'},
        {'author': 'carol'},
    ]

    def test_prs_per_author_per_month(self):
        chart = create_author_pr_frequency_data(self.PRS)
        self.assertEqual(chart['months'], ['2024-01', '2024-02'])
        self.assertEqual(chart['authors'], ['alice', 'bob', 'Unknown'])
        series = {s['name']: s['data'] for s in chart['author_series']}
        self.assertEqual(series, {'alice': [2, 0], 'bob': [0, 1], 'Unknown': [0, 1]})

    def test_selected_authors(self):
        chart = create_author_pr_frequency_data(self.PRS, ['bob', 'zed'])
        self.assertEqual([s['name'] for s in chart['author_series']], ['bob', 'zed'])
        self.assertEqual(chart['author_series'][1]['data'], [0, 0])
        self.assertEqual(chart['months'], ['2024-01', '2024-02'])


class TestReviewTime(unittest.TestCase):
    def test_turnaround_against_size(self):
        prs = [
            {'number': 1, 'title': 'merged', 'createdAt': '2024-01-01T00:00:00Z',
             'mergedAt': '2024-01-01T10:00:00Z', 'additions': 10, 'deletions': 5},
            {'number': 2, 'title': 'closed', 'createdAt': '2023-12-31T00:00:00Z',
             'closedAt': '2024-01-01T02:00:00Z', 'additions': 1},
            {'number': 3, 'title': 'open', 'createdAt': '2024-01-05T00:00:00Z'},
            {'number': 4, 'createdAt': '2024-01-05T00:00:00Z', 'mergedAt': '2024-01-04T00:00:00Z'},
        ]
        data = create_pr_review_time_data(prs)
        self.assertEqual([p['number'] for p in data['points']], [1, 2])
        self.assertEqual(data['points'][0]['size'], 15)
        self.assertEqual(data['points'][0]['review_hours'], 10.0)
        self.assertNotIn('_created', data['points'][0])
        self.assertEqual(data['timeline'], [
            ['2023-12-31T00:00:00+00:00', 26.0],
            ['2024-01-01T00:00:00+00:00', 10.0],
        ])
        self.assertEqual(data['average_hours'], 18.0)

    def test_no_completed_prs(self):
        self.assertEqual(create_pr_review_time_data([{'state': 'OPEN'}]), {'points': [], 'timeline': [], 'average_hours': None})


if __name__ == '__main__':
    unittest.main()
