import json
import unittest
from unittest.mock import patch, MagicMock

import requests

from textmine import completion
from textmine.completion import (
    process_sentences_with_ai,
    parse_groups,
    expand_groups,
    configure_completion,
    create_rca_word_cloud_data,
)

SENTENCES = ['missing null check', 'missing null check', 'null pointer in parser', 'null pointer in parser', 'one off']


def _response(status=200, content=None, payload=None):
    resp = MagicMock()
    resp.status_code = status
    resp.reason = 'OK' if status == 200 else 'Error'
    if payload is None:
        payload = {'choices': [{'message': {'content': content}}]}
    resp.json.return_value = payload
    return resp


class TestProcessSentences(unittest.TestCase):
    def setUp(self):
        self._saved = (completion._runtime_url, completion._runtime_model, completion._runtime_timeout)

    def tearDown(self):
        completion._runtime_url, completion._runtime_model, completion._runtime_timeout = self._saved

    @patch('textmine.completion.requests.post')
    def test_no_key_passes_through_without_request(self, mock_post):
        result = process_sentences_with_ai(SENTENCES, None)
        self.assertEqual(result, {'normalizedSentences': SENTENCES, 'filteredSentences': []})
        mock_post.assert_not_called()

    @patch('textmine.completion.requests.post')
    def test_no_repeats_passes_through_without_request(self, mock_post):
        result = process_sentences_with_ai(['only once here'], 'sk-test')
        self.assertEqual(result['normalizedSentences'], ['only once here'])
        mock_post.assert_not_called()

    @patch('textmine.completion.requests.post')
    def test_groups_are_expanded(self, mock_post):
        groups = [{'normalized': 'null handling bug in parser', 'count': 4}]
        mock_post.return_value = _response(content=json.dumps(groups))
        configure_completion(url='http://llm.local/v1/chat', model='test-model', timeout=5)

        result = process_sentences_with_ai(SENTENCES, 'sk-test')
        self.assertEqual(result['normalizedSentences'], ['null handling bug in parser'] * 4)
        self.assertEqual(result['filteredSentences'], [])

        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'http://llm.local/v1/chat')
        self.assertEqual(kwargs['timeout'], 5.0)
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer sk-test')
        payload = kwargs['json']
        self.assertEqual(payload['model'], 'test-model')
        sent = json.loads(payload['messages'][1]['content'])
        self.assertEqual(sent, [
            {'sentence': 'missing null check', 'count': 2},
            {'sentence': 'null pointer in parser', 'count': 2},
        ])

    @patch('textmine.completion.requests.post')
    def test_only_thirty_most_frequent_repeats_are_sent(self, mock_post):
        sentences = []
        for i in range(35):
            sentences.extend([f'root cause {i}'] * (40 - i))
        sentences.extend(['seen once a', 'seen once b'])
        mock_post.return_value = _response(content='[]')

        process_sentences_with_ai(sentences, 'sk-test')

        sent = json.loads(mock_post.call_args[1]['json']['messages'][1]['content'])
        self.assertEqual(len(sent), 30)
        self.assertEqual(sent, [{'sentence': f'root cause {i}', 'count': 40 - i} for i in range(30)])
        names = {item['sentence'] for item in sent}
        self.assertNotIn('seen once a', names)
        self.assertNotIn('root cause 30', names)

    @patch('textmine.completion.requests.post')
    def test_http_error_passes_through(self, mock_post):
        mock_post.return_value = _response(status=500, content='[]')
        result = process_sentences_with_ai(SENTENCES, 'sk-test')
        self.assertEqual(result['normalizedSentences'], SENTENCES)

    @patch('textmine.completion.requests.post')
    def test_network_error_passes_through(self, mock_post):
        mock_post.side_effect = requests.ConnectionError('down')
        with self.assertLogs('textmine.completion', level='WARNING'):
            result = process_sentences_with_ai(SENTENCES, 'sk-test')
        self.assertEqual(result['normalizedSentences'], SENTENCES)

    @patch('textmine.completion.requests.post')
    def test_malformed_response_passes_through(self, mock_post):
        mock_post.return_value = _response(payload={'unexpected': True})
        self.assertEqual(process_sentences_with_ai(SENTENCES, 'sk-test')['normalizedSentences'], SENTENCES)
        mock_post.return_value = _response(content='no json here')
        self.assertEqual(process_sentences_with_ai(SENTENCES, 'sk-test')['normalizedSentences'], SENTENCES)


class TestRcaWordCloud(unittest.TestCase):
    @patch('textmine.completion.requests.post')
    def test_offline_word_cloud(self, mock_post):
        issues = [{'body': '## RCA\nStale cache after deploy.'}] * 2 + [{'body': '## RCA\nSomething else entirely.'}]
        data = create_rca_word_cloud_data(issues, api_key='')
        self.assertEqual(data, [{'name': 'stale cache after deploy.', 'value': 2, 'fullText': 'stale cache after deploy.'}])
        mock_post.assert_not_called()


class TestParseGroups(unittest.TestCase):
    def test_json_wrapped_in_prose(self):
        content = 'Here you go:\n```json\n[{"normalized": "a", "count": 2}]\n```'
        self.assertEqual(parse_groups(content), [{'normalized': 'a', 'count': 2}])

    def test_rejects_bad_counts(self):
        with self.assertRaises(ValueError):
            parse_groups('[{"normalized": "a", "count": -1}]')
        with self.assertRaises(ValueError):
            parse_groups('[{"normalized": "a", "count": "2"}]')
        with self.assertRaises(ValueError):
            parse_groups('{"normalized": "a", "count": 2}')

    def test_expand_groups(self):
        self.assertEqual(expand_groups([{'normalized': 'a', 'count': 2}, {'normalized': 'b', 'count': 0}]), ['a', 'a'])


if __name__ == '__main__':
    unittest.main()
