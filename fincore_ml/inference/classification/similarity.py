"""Similarity metrics between normalized descriptions.

All metrics return a score in [0, 1] and are symmetric. ``token_overlap``
counts shared words relative to the longer description; the rapidfuzz
metrics are better at tolerating typos and abbreviations.
"""

from collections.abc import Callable

from rapidfuzz import fuzz

SimilarityFn = Callable[[str, str], float]


def token_overlap(a: str, b: str) -> float:
    words_a = set(a.split())
    words_b = set(b.split())
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / max(len(words_a), len(words_b))


def token_set_ratio(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    return fuzz.token_set_ratio(a, b) / 100.0


def ratio(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    return fuzz.ratio(a, b) / 100.0


def containment_score(text: str, keyword: str) -> float:
    """1.0 when ``keyword`` occurs as whole words inside ``text``, else 0.0."""
    if not text or not keyword:
        return 0.0
    return 1.0 if f" {keyword} " in f" {text} " else 0.0


SIMILARITY_METRICS: dict[str, SimilarityFn] = {
    "token_overlap": token_overlap,
    "token_set_ratio": token_set_ratio,
    "ratio": ratio,
}


def get_similarity(name: str) -> SimilarityFn:
    try:
        return SIMILARITY_METRICS[name]
    except KeyError:
        msg = f"Unknown similarity metric: {name}"
        raise ValueError(msg) from None
