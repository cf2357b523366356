"""Term ranking: engagement scoring, personalization and trending.

This module turns raw engagement signals of published terms into ordered
lists of term IDs. Scores blend log-compressed likes, views and comments
with a freshness factor; personalized rankings add category and
followed-author boosts; trending ranks by recent activity only.
"""

from termrank.ranker.fetcher import SignalFetcher
from termrank.ranker.metrics import RankerMetrics
from termrank.ranker.models import (
    ContentSignals,
    RankingMode,
    RankingResult,
    ScoredCandidate,
    TermOrdering,
    TrendingSignals,
    UserAffinity,
)
from termrank.ranker.ranker import (
    Recommender,
    apply_personalization,
    trending_composite,
)
from termrank.ranker.scorer import (
    TermScorer,
    compressed_count,
    recommendation_score,
    sort_by_score,
    time_factor,
)


__all__ = [
    "ContentSignals",
    "RankerMetrics",
    "RankingMode",
    "RankingResult",
    "Recommender",
    "ScoredCandidate",
    "SignalFetcher",
    "TermOrdering",
    "TermScorer",
    "TrendingSignals",
    "UserAffinity",
    "apply_personalization",
    "compressed_count",
    "recommendation_score",
    "sort_by_score",
    "time_factor",
    "trending_composite",
]
