"""Unit tests for personalization boosts."""

import pytest

from termrank.config import PersonalizationConfig, RankingConfig
from termrank.ranker.models import ScoredCandidate, UserAffinity
from termrank.ranker.ranker import apply_personalization


def _pool(*scores: float) -> list[ScoredCandidate]:
    return [
        ScoredCandidate(term_id=i + 1, score=s, base_score=s)
        for i, s in enumerate(scores)
    ]


class TestCategoryBoost:
    """Tests for liked-category multipliers."""

    def test_liked_category_gets_exactly_one_and_a_half(self) -> None:
        """Identical candidates differ exactly by the 1.5 multiplier."""
        scored, _, _ = apply_personalization(
            _pool(12.0, 12.0),
            [5, 9],
            UserAffinity(user_id=1, liked_category_ids=(5,)),
            RankingConfig(),
        )
        assert scored[0].score == scored[1].score * 1.5
        assert scored[0].category_boost == 1.5
        assert scored[1].category_boost == 1.0

    def test_no_liked_categories_means_no_boost(self) -> None:
        """An empty liked set leaves base scores untouched."""
        scored, boosted, injected = apply_personalization(
            _pool(3.0, 4.0), [5, None], UserAffinity(user_id=1), RankingConfig()
        )
        assert [s.score for s in scored] == [3.0, 4.0]
        assert (boosted, injected) == (0, 0)

    def test_uncategorized_candidate_never_boosted(self) -> None:
        """Candidates without a category are never in the liked set."""
        scored, _, _ = apply_personalization(
            _pool(3.0),
            [None],
            UserAffinity(user_id=1, liked_category_ids=(5,)),
            RankingConfig(),
        )
        assert scored[0].score == 3.0


class TestFollowedAuthors:
    """Tests for followed-author boosts and injection."""

    def test_pooled_followed_term_stacks_with_category(self) -> None:
        """A followed term in a liked category gets 1.5 * 1.3."""
        scored, boosted, injected = apply_personalization(
            _pool(10.0),
            [5],
            UserAffinity(user_id=1, liked_category_ids=(5,), followed_term_ids=(1,)),
            RankingConfig(),
        )
        assert scored[0].score == pytest.approx(10.0 * 1.5 * 1.3)
        assert scored[0].followed
        assert not scored[0].injected
        assert (boosted, injected) == (1, 0)

    def test_missing_followed_term_injected_with_flat_score(self) -> None:
        """A followed term outside the pool enters with score 50."""
        scored, boosted, injected = apply_personalization(
            _pool(10.0),
            [None],
            UserAffinity(user_id=1, followed_term_ids=(99,)),
            RankingConfig(),
        )
        extra = scored[-1]
        assert extra.term_id == 99
        assert extra.score == 50.0
        assert extra.injected
        assert (boosted, injected) == (0, 1)

    def test_injected_score_from_config(self) -> None:
        """The flat score is configurable."""
        config = RankingConfig(
            personalization=PersonalizationConfig(injected_score=7.5)
        )
        scored, _, _ = apply_personalization(
            [], [], UserAffinity(user_id=1, followed_term_ids=(3, 4)), config
        )
        assert [(s.term_id, s.score) for s in scored] == [(3, 7.5), (4, 7.5)]
