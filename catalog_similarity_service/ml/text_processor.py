"""Text processing utilities for catalog descriptions."""
import re
import pandas as pd
from typing import AbstractSet

# Tokens this short ("a", "an", "of") carry no similarity signal
MIN_TOKEN_LENGTH = 3

HTML_TAG_PATTERN = re.compile(r'</?[A-Za-z][^>]*>')


def clean_html(text: str | None) -> str:
    """
    Remove HTML tags from text.

    Args:
        text: Raw text possibly containing HTML (can be None)

    Returns:
        Cleaned text without HTML tags
    """
    if text is None or (not isinstance(text, str) and pd.isna(text)):
        return ""

    # Remove HTML tags; a lone < or > is not a tag
    text = HTML_TAG_PATTERN.sub('', str(text))

    # Remove extra whitespace
    text = re.sub(r'\s+', ' ', text)

    return text.strip()


def tokenize(text: str | None) -> frozenset:
    """
    Normalize free text into a set of word tokens.

    Lowercases, strips HTML and punctuation, and drops tokens shorter than
    MIN_TOKEN_LENGTH.

    Args:
        text: Raw text (can be None)

    Returns:
        Set of unique tokens
    """
    cleaned = clean_html(text).lower()
    if not cleaned:
        return frozenset()

    # Punctuation becomes a separator so "sci-fi" yields "sci" and "fi"
    normalized = re.sub(r'[^\w\s]', ' ', cleaned)

    return frozenset(word for word in normalized.split() if len(word) >= MIN_TOKEN_LENGTH)


def jaccard_similarity(a: AbstractSet, b: AbstractSet) -> float:
    """
    Jaccard similarity |A ∩ B| / |A ∪ B|.

    Returns:
        Similarity in [0, 1]; 0 when both sets are empty
    """
    if not a and not b:
        return 0.0

    intersection = len(a & b)
    union = len(a) + len(b) - intersection
    return intersection / union if union else 0.0
