"""
Root Cause Analysis (RCA) text mining.
Pull the RCA section out of an issue body, split it into normalized sentences and
count how often each sentence repeats across issues.
"""
from typing import Any, Dict, Iterable, List, Optional
import re

# tried in order; each captures up to the next heading of the same weight or end of text
RCA_PATTERNS = [
    re.compile(r'##\s*RCA\s*\n([\s\S]*?)(?=\n##|\Z)', re.IGNORECASE),
    re.compile(r'###\s*RCA\s*\n([\s\S]*?)(?=\n###|\Z)', re.IGNORECASE),
    re.compile(r'#\s*RCA\s*\n([\s\S]*?)(?=\n#|\Z)', re.IGNORECASE),
    re.compile(r'\*\*RCA\*\*\s*\n([\s\S]*?)(?=\n\*\*|\Z)', re.IGNORECASE),
    re.compile(r'RCA:\s*\n([\s\S]*?)(?=\n[A-Z][a-z]+:|\Z)', re.IGNORECASE),
]

MIN_SENTENCE_LENGTH = 10
WORD_CLOUD_MAX_LABEL = 50

_SPLIT_RE = re.compile(r'[.!?]\s+|\n+')
_MARKERS_WITH_DASH_RE = re.compile(r'[*_`#\-]')
_MARKERS_RE = re.compile(r'[*_`#]')
_BULLET_RE = re.compile(r'^\s*[-•]\s*')
_WHITESPACE_RE = re.compile(r'\s+')


def extract_rca(body: Optional[str]) -> Optional[str]:
    """Return the trimmed RCA section of an issue body, or None when there is none."""
    if not body or not isinstance(body, str):
        return None
    for pattern in RCA_PATTERNS:
        match = pattern.search(body)
        if match and match.group(1):
            return match.group(1).strip()
    return None


def _clean_sentence(fragment: str) -> str:
    cleaned = _MARKERS_RE.sub('', fragment)
    cleaned = _BULLET_RE.sub('', cleaned)
    return _WHITESPACE_RE.sub(' ', cleaned).strip().lower()


def extract_sentences(text: Optional[str]) -> List[str]:
    """Split text on sentence endings and newlines into lowercase, marker-free sentences.
    Fragments shorter than 10 characters once markdown markers are removed are dropped.
    """
    if not text:
        return []
    sentences = []
    for fragment in _SPLIT_RE.split(text):
        fragment = fragment.strip()
        if len(_MARKERS_WITH_DASH_RE.sub('', fragment).strip()) < MIN_SENTENCE_LENGTH:
            continue
        sentences.append(_clean_sentence(fragment))
    return sentences


def count_sentences(sentences: Iterable[str]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for sentence in sentences:
        counts[sentence] = counts.get(sentence, 0) + 1
    return counts


def sentence_frequencies(sentences: Iterable[str], min_count: int = 2, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Repeating sentences with their counts, most frequent first (ties keep first-seen order)."""
    items = [
        {'sentence': sentence, 'count': count}
        for sentence, count in count_sentences(sentences).items()
        if count >= min_count
    ]
    items.sort(key=lambda item: item['count'], reverse=True)
    return items[:limit] if limit is not None else items


def rca_sentences(issues: Iterable[Dict[str, Any]]) -> List[str]:
    """All RCA sentences across the issues' bodies."""
    sentences: List[str] = []
    for issue in issues:
        rca = extract_rca(issue.get('body') if isinstance(issue, dict) else None)
        if rca:
            sentences.extend(extract_sentences(rca))
    return sentences


def truncate_label(text: str, max_length: int = WORD_CLOUD_MAX_LABEL) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + '...'


def create_word_cloud_data(frequencies: List[Dict[str, Any]], filtered: Iterable[str] = ()) -> List[Dict[str, Any]]:
    """Word-cloud entries for repeating sentences, skipping any in `filtered`."""
    filtered = set(filtered)
    return [
        {'name': truncate_label(item['sentence']), 'value': item['count'], 'fullText': item['sentence']}
        for item in frequencies
        if item['sentence'] not in filtered
    ]
