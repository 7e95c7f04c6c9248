"""Tests for description similarity metrics."""

import pytest
from fincore_ml.inference.classification.similarity import (
    SIMILARITY_METRICS,
    containment_score,
    get_similarity,
    ratio,
    token_overlap,
    token_set_ratio,
)


class TestTokenOverlap:
    def test_identical(self) -> None:
        assert token_overlap("uber trip", "uber trip") == 1.0

    def test_relative_to_longer_description(self) -> None:
        assert token_overlap("uber trip", "uber") == 0.5
        assert token_overlap("uber", "uber trip") == 0.5

    def test_word_order_does_not_matter(self) -> None:
        assert token_overlap("trip uber", "uber trip") == 1.0

    def test_empty(self) -> None:
        assert token_overlap("", "uber") == 0.0


class TestFuzzyMetrics:
    def test_token_set_ratio_tolerates_extra_words(self) -> None:
        assert token_set_ratio("uber trip", "uber trip help") == 1.0

    def test_ratio_tolerates_typos(self) -> None:
        assert ratio("netflix", "netflx") > 0.9

    @pytest.mark.parametrize("metric", list(SIMILARITY_METRICS))
    def test_scores_are_bounded_and_symmetric(self, metric: str) -> None:
        fn = get_similarity(metric)
        a, b = "aluguel escritorio centro", "aluguel sala centro"

        assert 0.0 <= fn(a, b) <= 1.0
        assert fn(a, b) == pytest.approx(fn(b, a))
        assert fn("", b) == 0.0


class TestContainmentScore:
    def test_keyword_is_whole_text(self) -> None:
        assert containment_score("uber", "uber") == 1.0

    def test_keyword_inside_long_description(self) -> None:
        assert containment_score("uber trip", "uber") == 1.0
        assert containment_score("uber trip sao paulo centro", "uber") == 1.0

    def test_requires_whole_words(self) -> None:
        assert containment_score("uberlandia shopping", "uber") == 0.0

    def test_multi_word_keyword(self) -> None:
        text = "aluguel escritorio centro"

        assert containment_score(text, "aluguel escritorio") == 1.0
        assert containment_score(text, "escritorio aluguel") == 0.0


def test_unknown_metric() -> None:
    with pytest.raises(ValueError, match="Unknown similarity metric"):
        get_similarity("cosine")
