"""
AI-assisted merging of near-duplicate RCA sentences.
One POST to a chat-completions endpoint groups repeating sentences under a single
normalized wording. Without an API key, or on any failure, the input sentences are
returned untouched; errors are logged and never raised to the caller.
"""
from typing import Any, Dict, List, Optional
import json
import logging
import os

import requests

from textmine.rca import sentence_frequencies, rca_sentences, create_word_cloud_data

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_URL = os.getenv("ISSUE_INSIGHTS_COMPLETION_URL", "https://api.openai.com/v1/chat/completions")
DEFAULT_COMPLETION_MODEL = os.getenv("ISSUE_INSIGHTS_COMPLETION_MODEL", "gpt-3.5-turbo")
DEFAULT_COMPLETION_TIMEOUT = float(os.getenv("ISSUE_INSIGHTS_COMPLETION_TIMEOUT", "30"))

# at most this many repeating sentences are sent for grouping
MAX_SENTENCES = 30
MIN_REPEATS = 2

SYSTEM_PROMPT = (
    "You are analyzing Root Cause Analysis (RCA) statements from bug reports. "
    "Group similar RCA statements together and provide a normalized representative sentence for each group. "
    "Your task: 1. Identify sentences describing the same root cause 2. Group them together "
    "3. Create a single normalized sentence for each group "
    '4. Return the result as JSON array: [{"normalized": "...", "count": N}]'
)

# runtime-overrides
_runtime_url: Optional[str] = None
_runtime_model: Optional[str] = None
_runtime_timeout: Optional[float] = None


def configure_completion(url: Optional[str] = None, model: Optional[str] = None, timeout: Optional[float] = None):
    """Override the completion endpoint settings at runtime (e.g. from CLI)."""
    global _runtime_url, _runtime_model, _runtime_timeout
    if url is not None:
        _runtime_url = url
    if model is not None:
        _runtime_model = model
    if timeout is not None:
        _runtime_timeout = float(timeout)


def _resolve_settings():
    return (
        _runtime_url or DEFAULT_COMPLETION_URL,
        _runtime_model or DEFAULT_COMPLETION_MODEL,
        _runtime_timeout if _runtime_timeout is not None else DEFAULT_COMPLETION_TIMEOUT,
    )


def _passthrough(sentences: List[str]) -> Dict[str, List[str]]:
    return {'normalizedSentences': sentences, 'filteredSentences': []}


def build_payload(sentence_data: List[Dict[str, Any]], model: str) -> Dict[str, Any]:
    return {
        'model': model,
        'messages': [
            {'role': 'system', 'content': SYSTEM_PROMPT},
            {'role': 'user', 'content': json.dumps(sentence_data)},
        ],
        'temperature': 0.3,
        'max_tokens': 2000,
    }


def _message_content(data: Any) -> str:
    try:
        content = data['choices'][0]['message']['content']
    except (KeyError, IndexError, TypeError):
        raise ValueError('Invalid response format from completion API')
    if not content or not isinstance(content, str):
        raise ValueError('Invalid response format from completion API')
    return content


def parse_groups(content: str) -> List[Dict[str, Any]]:
    """Parse the model answer into [{normalized, count}] groups.
    The JSON array may be wrapped in prose or a code fence; anything else is a ValueError.
    """
    try:
        groups = json.loads(content)
    except ValueError:
        start = content.find('[')
        end = content.rfind(']')
        if start == -1 or end <= start:
            raise ValueError('No JSON list found in response.')
        groups = json.loads(content[start:end + 1])
    if not isinstance(groups, list):
        raise ValueError('Expected a JSON list in response.')
    for group in groups:
        if not isinstance(group, dict) or not isinstance(group.get('normalized'), str):
            raise ValueError(f"Malformed group in response: {group!r}")
        count = group.get('count')
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError(f"Malformed count in response: {group!r}")
    return groups


def expand_groups(groups: List[Dict[str, Any]]) -> List[str]:
    """Repeat each normalized sentence `count` times so frequencies can be recounted."""
    sentences: List[str] = []
    for group in groups:
        sentences.extend([group['normalized']] * group['count'])
    return sentences


def process_sentences_with_ai(sentences: List[str], api_key: Optional[str]) -> Dict[str, List[str]]:
    """
    Merge near-duplicate sentences through the completion endpoint.

    Returns {'normalizedSentences': [...], 'filteredSentences': []}. With no api_key,
    no repeating sentences, or any request/response failure, normalizedSentences is
    the input list unchanged.
    """
    if not api_key:
        return _passthrough(sentences)

    sentence_data = sentence_frequencies(sentences, min_count=MIN_REPEATS, limit=MAX_SENTENCES)
    if not sentence_data:
        return _passthrough(sentences)

    url, model, timeout = _resolve_settings()
    headers = {'Content-Type': 'application/json', 'Authorization': f"Bearer {api_key}"}
    try:
        resp = requests.post(url, json=build_payload(sentence_data, model), headers=headers, timeout=timeout)
        if not 200 <= resp.status_code < 300:
            raise ValueError(f"Completion API error: {resp.status_code} {getattr(resp, 'reason', '')}".strip())
        groups = parse_groups(_message_content(resp.json()))
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Error processing sentences with AI, using unmerged sentences: %s", exc)
        return _passthrough(sentences)

    logger.debug("Merged %d repeating sentences into %d groups", len(sentence_data), len(groups))
    return {'normalizedSentences': expand_groups(groups), 'filteredSentences': []}


def create_rca_word_cloud_data(issues: List[Dict[str, Any]], api_key: Optional[str] = None) -> List[Dict[str, Any]]:
    """Word-cloud entries for the repeating RCA sentences across `issues`."""
    processed = process_sentences_with_ai(rca_sentences(issues), api_key)
    frequencies = sentence_frequencies(processed['normalizedSentences'])
    return create_word_cloud_data(frequencies, processed['filteredSentences'])
