"""Main term ranker orchestrator."""

import time
from datetime import UTC, datetime

import structlog

from termrank.config.constants import COMPONENT_RANKER, DEFAULT_LIMIT
from termrank.config.schemas import RankingConfig, TrendingConfig
from termrank.ranker.fetcher import SignalFetcher
from termrank.ranker.metrics import RankerMetrics
from termrank.ranker.models import (
    RankingMode,
    RankingResult,
    ScoredCandidate,
    TermOrdering,
    TrendingSignals,
    UserAffinity,
)
from termrank.ranker.scorer import TermScorer, sort_by_score
from termrank.store.protocols import QueryExecutor
from termrank.store.timestamps import ensure_utc


logger = structlog.get_logger()


def trending_composite(item: TrendingSignals, config: TrendingConfig) -> float:
    """Weighted recent-activity composite used to order trending terms."""
    return (
        item.likes_7d * config.likes_weight
        + item.views_7d * config.views_weight
        + item.comments_7d * config.comments_weight
    )


def apply_personalization(
    scored: list[ScoredCandidate],
    category_ids: list[int | None],
    affinity: UserAffinity,
    config: RankingConfig,
) -> tuple[list[ScoredCandidate], int, int]:
    """Apply category and followed-author boosts to a scored pool.

    Args:
        scored: Scored candidates in fetch order.
        category_ids: Category of each candidate, aligned with scored.
        affinity: The caller's personalization inputs.
        config: Ranking configuration supplying the boosts.

    Returns:
        Tuple of (candidates incl. injected terms, boosted count, injected count).
    """
    p = config.personalization
    liked = set(affinity.liked_category_ids)

    for candidate, category_id in zip(scored, category_ids, strict=True):
        if category_id is not None and category_id in liked:
            candidate.category_boost = p.category_boost
            candidate.score = candidate.base_score * p.category_boost

    by_id = {c.term_id: c for c in scored}
    boosted = 0
    injected = 0

    for term_id in affinity.followed_term_ids:
        existing = by_id.get(term_id)
        if existing is not None:
            existing.score *= p.followed_boost
            existing.followed = True
            boosted += 1
            continue

        extra = ScoredCandidate(
            term_id=term_id,
            score=p.injected_score,
            base_score=p.injected_score,
            followed=True,
            injected=True,
        )
        scored.append(extra)
        by_id[term_id] = extra
        injected += 1

    return scored, boosted, injected


class Recommender:
    """Ranks published terms for the general, personalized and trending feeds.

    Each call fetches a fresh candidate pool, scores it in memory and
    returns term IDs; nothing is cached between calls. Store errors are
    not caught.
    """

    def __init__(
        self,
        store: QueryExecutor,
        config: RankingConfig | None = None,
        metrics: RankerMetrics | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the recommender.

        Args:
            store: Parameterized query interface of the content store.
            config: Ranking configuration (defaults reproduce production).
            metrics: Optional metrics instance.
            now: Fixed evaluation time; wall-clock UTC per call when None.
        """
        self._config = config or RankingConfig()
        self._fetcher = SignalFetcher(store)
        self._metrics = metrics or RankerMetrics.get_instance()
        self._now = ensure_utc(now) if now is not None else None
        self._log = logger.bind(component=COMPONENT_RANKER)

    @property
    def config(self) -> RankingConfig:
        """Get the ranking configuration."""
        return self._config

    def _current_time(self) -> datetime:
        return self._now or datetime.now(UTC)

    # ===== Public entry points =====

    def general(
        self, limit: int = DEFAULT_LIMIT, category_id: int | None = None
    ) -> list[int]:
        """Rank by engagement and freshness for anonymous callers.

        Args:
            limit: Maximum number of IDs to return.
            category_id: Optional category filter.

        Returns:
            Term IDs, best first.
        """
        return self.recommend_general(limit, category_id).term_ids

    def personalized(
        self,
        user_id: int | None,
        limit: int = DEFAULT_LIMIT,
        category_id: int | None = None,
    ) -> list[int]:
        """Rank with the caller's category and followed-author boosts.

        Falls back to general() when user_id is None.

        Args:
            user_id: The caller, or None for anonymous.
            limit: Maximum number of IDs to return.
            category_id: Optional category filter.

        Returns:
            Term IDs, best first.
        """
        return self.recommend_personalized(user_id, limit, category_id).term_ids

    def trending(
        self, limit: int = DEFAULT_LIMIT, category_id: int | None = None
    ) -> list[int]:
        """Rank by activity inside the trending window.

        Args:
            limit: Maximum number of IDs to return.
            category_id: Optional category filter.

        Returns:
            Term IDs, highest momentum first.
        """
        return self.recommend_trending(limit, category_id).term_ids

    def rank(
        self,
        order_by: TermOrdering | str,
        limit: int = DEFAULT_LIMIT,
        category_id: int | None = None,
        user_id: int | None = None,
    ) -> list[int]:
        """Order published terms the way the terms listing requests.

        Args:
            order_by: A TermOrdering or its string value.
            limit: Maximum number of IDs to return.
            category_id: Optional category filter.
            user_id: The caller, used by the recommended ordering.

        Returns:
            Term IDs in the requested order.

        Raises:
            ValueError: If order_by is not a known ordering.
        """
        ordering = TermOrdering(order_by)

        if not ordering.is_column:
            if ordering is TermOrdering.TRENDING:
                return self.trending(limit, category_id)
            return self.personalized(user_id, limit, category_id)

        if limit <= 0:
            return []

        start = time.perf_counter()
        self._log_started(RankingMode.ORDERED, limit, category_id, limit)
        term_ids = self._fetcher.fetch_ordered_ids(ordering, limit, category_id)
        self._finish(RankingMode.ORDERED, start, len(term_ids), len(term_ids))
        return term_ids

    # ===== Detailed results =====

    def recommend_general(
        self, limit: int = DEFAULT_LIMIT, category_id: int | None = None
    ) -> RankingResult:
        """General ranking with per-term scores."""
        if limit <= 0:
            return RankingResult(mode=RankingMode.GENERAL)

        start = time.perf_counter()
        pool_size = limit * self._config.candidates.general_pool_multiplier
        self._log_started(RankingMode.GENERAL, limit, category_id, pool_size)

        candidates = self._fetcher.fetch_candidates(pool_size, category_id)
        scorer = TermScorer(self._config, self._current_time())
        ranked = sort_by_score(scorer.score_all(candidates))[:limit]

        result = RankingResult(
            mode=RankingMode.GENERAL,
            term_ids=[c.term_id for c in ranked],
            scored=ranked,
        )
        self._finish(RankingMode.GENERAL, start, len(candidates), len(ranked))
        return result

    def recommend_personalized(
        self,
        user_id: int | None,
        limit: int = DEFAULT_LIMIT,
        category_id: int | None = None,
    ) -> RankingResult:
        """Personalized ranking with per-term scores and boost details."""
        if user_id is None:
            return self.recommend_general(limit, category_id)
        if limit <= 0:
            return RankingResult(mode=RankingMode.PERSONALIZED)

        start = time.perf_counter()
        p = self._config.personalization
        self._log_started(RankingMode.PERSONALIZED, limit, category_id, p.pool_size)

        affinity = self._fetcher.fetch_affinity(user_id, p)
        candidates = self._fetcher.fetch_candidates(p.pool_size, category_id)

        scorer = TermScorer(self._config, self._current_time())
        scored, boosted, injected = apply_personalization(
            scorer.score_all(candidates),
            [c.category_id for c in candidates],
            affinity,
            self._config,
        )
        ranked = sort_by_score(scored)[:limit]

        if affinity.is_empty:
            self._log.info("personalization_signals_absent", user_id=user_id)

        self._metrics.record_followed(boosted, injected)
        result = RankingResult(
            mode=RankingMode.PERSONALIZED,
            term_ids=[c.term_id for c in ranked],
            scored=ranked,
        )
        self._finish(
            RankingMode.PERSONALIZED,
            start,
            len(candidates),
            len(ranked),
            user_id=user_id,
            followed_boosted=boosted,
            followed_injected=injected,
        )
        return result

    def recommend_trending(
        self, limit: int = DEFAULT_LIMIT, category_id: int | None = None
    ) -> RankingResult:
        """Trending ranking with composite scores."""
        if limit <= 0:
            return RankingResult(mode=RankingMode.TRENDING)

        start = time.perf_counter()
        self._log_started(RankingMode.TRENDING, limit, category_id, limit)

        trending_config = self._config.trending
        items = self._fetcher.fetch_trending(
            limit, self._current_time(), trending_config, category_id
        )
        scored = []
        for item in items:
            composite = trending_composite(item, trending_config)
            scored.append(
                ScoredCandidate(
                    term_id=item.term_id, score=composite, base_score=composite
                )
            )

        result = RankingResult(
            mode=RankingMode.TRENDING,
            term_ids=[c.term_id for c in scored],
            scored=scored,
        )
        self._finish(RankingMode.TRENDING, start, len(items), len(scored))
        return result

    # ===== Logging and metrics =====

    def _log_started(
        self,
        mode: RankingMode,
        limit: int,
        category_id: int | None,
        pool_size: int,
    ) -> None:
        self._log.info(
            "ranking_started",
            mode=mode.value,
            limit=limit,
            category_id=category_id,
            pool_size=pool_size,
        )

    def _finish(
        self,
        mode: RankingMode,
        start: float,
        candidates: int,
        returned: int,
        **extra: object,
    ) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_candidates(candidates)
        self._metrics.record_results(returned)
        self._metrics.record_request(mode.value, duration_ms)

        self._log.info(
            "ranking_complete",
            mode=mode.value,
            candidates=candidates,
            returned=returned,
            duration_ms=round(duration_ms, 2),
            **extra,
        )
