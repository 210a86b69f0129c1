"""
Text mining of issue bodies: RCA extraction, sentence normalization and AI-assisted merging.
"""

from .rca import extract_rca, extract_sentences, sentence_frequencies, rca_sentences, create_word_cloud_data
from .completion import process_sentences_with_ai, configure_completion, create_rca_word_cloud_data

__all__ = [
    "extract_rca",
    "extract_sentences",
    "sentence_frequencies",
    "rca_sentences",
    "create_word_cloud_data",
    "process_sentences_with_ai",
    "configure_completion",
    "create_rca_word_cloud_data",
]
