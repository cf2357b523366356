"""Scoring engine for term recommendations.

Scoring formula:
    score = compressed(likes) * 0.4
          + compressed(views) * 0.3
          + compressed(comments) * 0.2
          + time_factor * 10 * 0.1

Where compressed(x) = log10(x + 1) * 10 and time_factor is 1.0 for the
first week, then decays linearly over 30 days to a floor of 0.3.
"""

import math
from datetime import datetime

import structlog

from termrank.config.constants import COMPONENT_RANKER
from termrank.config.schemas import DecayConfig, RankingConfig, ScoringConfig
from termrank.ranker.models import ContentSignals, ScoredCandidate
from termrank.store.timestamps import ensure_utc


logger = structlog.get_logger()

SECONDS_PER_DAY = 24 * 60 * 60

_DEFAULT_SCORING = ScoringConfig()
_DEFAULT_DECAY = DecayConfig()


def compressed_count(
    count: int, factor: float = _DEFAULT_SCORING.compression_factor
) -> float:
    """Dampen a raw count so viral outliers do not dominate.

    Negative counts are clamped to zero.

    Args:
        count: Raw non-negative count.
        factor: Multiplier applied after log10(count + 1).

    Returns:
        Compressed value, 0.0 for a zero count.
    """
    return math.log10(max(count, 0) + 1) * factor


def age_in_days(created_at: datetime, now: datetime) -> float:
    """Fractional age in days; negative for timestamps in the future."""
    delta = ensure_utc(now) - ensure_utc(created_at)
    return delta.total_seconds() / SECONDS_PER_DAY


def time_factor(
    created_at: datetime,
    now: datetime,
    decay: DecayConfig = _DEFAULT_DECAY,
) -> float:
    """Freshness factor in [floor, 1.0].

    Args:
        created_at: Creation timestamp of the term.
        now: Evaluation time.
        decay: Decay shape.

    Returns:
        1.0 within the plateau, then linear decay to the floor.
    """
    age = age_in_days(created_at, now)
    if age <= decay.plateau_days:
        return 1.0
    return max(decay.floor, 1 - (age - decay.plateau_days) / decay.window_days)


def recommendation_score(
    likes_count: int,
    views: int,
    comments_count: int,
    created_at: datetime,
    now: datetime,
    scoring: ScoringConfig = _DEFAULT_SCORING,
    decay: DecayConfig = _DEFAULT_DECAY,
) -> float:
    """Blend engagement and freshness into one comparable score.

    Args:
        likes_count: Lifetime likes.
        views: Lifetime views.
        comments_count: Lifetime comments.
        created_at: Creation timestamp.
        now: Evaluation time.
        scoring: Weights.
        decay: Freshness decay shape.

    Returns:
        Finite non-negative score.
    """
    factor = scoring.compression_factor
    return (
        compressed_count(likes_count, factor) * scoring.likes_weight
        + compressed_count(views, factor) * scoring.views_weight
        + compressed_count(comments_count, factor) * scoring.comments_weight
        + time_factor(created_at, now, decay)
        * scoring.recency_scale
        * scoring.recency_weight
    )


class TermScorer:
    """Scores candidate signals against a fixed evaluation time."""

    def __init__(self, config: RankingConfig, now: datetime) -> None:
        """Initialize the scorer.

        Args:
            config: Ranking configuration supplying weights and decay.
            now: Evaluation time shared by every candidate of one call.
        """
        self._scoring = config.scoring
        self._decay = config.decay
        self._now = ensure_utc(now)
        self._log = logger.bind(component=COMPONENT_RANKER, subcomponent="scorer")

    def score(self, signals: ContentSignals) -> float:
        """Score a single candidate."""
        return recommendation_score(
            signals.likes_count,
            signals.views,
            signals.comments_count,
            signals.created_at,
            self._now,
            self._scoring,
            self._decay,
        )

    def score_all(self, candidates: list[ContentSignals]) -> list[ScoredCandidate]:
        """Score candidates, preserving input order.

        Args:
            candidates: Candidates in fetch order.

        Returns:
            One ScoredCandidate per input, in the same order.
        """
        scored = []
        for signals in candidates:
            value = self.score(signals)
            scored.append(
                ScoredCandidate(term_id=signals.term_id, score=value, base_score=value)
            )

        self._log.debug(
            "scoring_complete",
            candidates_scored=len(scored),
            min_score=min((s.score for s in scored), default=0.0),
            max_score=max((s.score for s in scored), default=0.0),
        )
        return scored


def sort_by_score(scored: list[ScoredCandidate]) -> list[ScoredCandidate]:
    """Sort descending by score; equal scores keep their input order."""
    return sorted(scored, key=lambda s: s.score, reverse=True)
