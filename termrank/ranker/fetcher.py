"""Signal fetcher: reads candidate pools and affinity from the store.

Every method issues parameterized statements from termrank.ranker.queries
and maps rows into ranker models. Store errors propagate unchanged.
"""

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

import structlog

from termrank.config.constants import COMPONENT_RANKER
from termrank.config.schemas import PersonalizationConfig, TrendingConfig
from termrank.ranker import queries
from termrank.ranker.models import (
    ContentSignals,
    TermOrdering,
    TrendingSignals,
    UserAffinity,
)
from termrank.store.protocols import QueryExecutor
from termrank.store.timestamps import parse_timestamp


logger = structlog.get_logger()


def _row_to_signals(row: Mapping[str, Any]) -> ContentSignals:
    """Convert a terms row to ContentSignals.

    Args:
        row: Row with id, counters, created_at and category_id.

    Returns:
        ContentSignals instance.
    """
    return ContentSignals(
        term_id=int(row["id"]),
        likes_count=int(row["likes_count"] or 0),
        views=int(row["views"] or 0),
        comments_count=int(row["comments_count"] or 0),
        created_at=parse_timestamp(row["created_at"]),
        category_id=(
            int(row["category_id"]) if row["category_id"] is not None else None
        ),
    )


class SignalFetcher:
    """Pulls raw ranking signals from a QueryExecutor."""

    def __init__(self, store: QueryExecutor) -> None:
        """Initialize the fetcher.

        Args:
            store: Parameterized query interface of the content store.
        """
        self._store = store
        self._log = logger.bind(component=COMPONENT_RANKER, subcomponent="fetcher")

    def fetch_candidates(
        self, pool_size: int, category_id: int | None = None
    ) -> list[ContentSignals]:
        """Fetch the newest published terms as a candidate pool.

        Args:
            pool_size: Maximum number of candidates.
            category_id: Optional category filter.

        Returns:
            Candidates ordered by created_at descending.
        """
        stmt = queries.candidate_pool(pool_size, category_id)
        rows = self._store.query(stmt.sql, stmt.params)
        candidates = [_row_to_signals(row) for row in rows]

        self._log.debug(
            "candidates_fetched",
            pool_size=pool_size,
            category_id=category_id,
            fetched=len(candidates),
        )
        return candidates

    def fetch_affinity(
        self, user_id: int, config: PersonalizationConfig
    ) -> UserAffinity:
        """Derive personalization inputs for one caller.

        The three lookups are independent reads; they run in sequence on the
        store's single connection.

        Args:
            user_id: The caller.
            config: Bounds for liked categories and followed terms.

        Returns:
            UserAffinity, empty when the caller has no history.
        """
        stmt = queries.liked_categories(user_id, config.liked_category_limit)
        liked = tuple(
            int(row["category_id"]) for row in self._store.query(stmt.sql, stmt.params)
        )

        stmt = queries.followed_author_terms(user_id, config.followed_term_limit)
        followed = tuple(
            int(row["id"]) for row in self._store.query(stmt.sql, stmt.params)
        )

        stmt = queries.user_specialties(user_id)
        specialties = tuple(
            str(row["specialty"]) for row in self._store.query(stmt.sql, stmt.params)
        )

        affinity = UserAffinity(
            user_id=user_id,
            liked_category_ids=liked,
            followed_term_ids=followed,
            specialties=specialties,
        )

        self._log.debug(
            "affinity_fetched",
            user_id=user_id,
            liked_categories=len(liked),
            followed_terms=len(followed),
            specialties=len(specialties),
        )
        return affinity

    def fetch_trending(
        self,
        limit: int,
        now: datetime,
        config: TrendingConfig,
        category_id: int | None = None,
    ) -> list[TrendingSignals]:
        """Fetch terms ordered by recent-activity composite.

        Args:
            limit: Maximum number of terms.
            now: End of the activity window.
            config: Window length and composite weights.
            category_id: Optional category filter.

        Returns:
            Trending signals in composite order.
        """
        window_start = now - timedelta(days=config.window_days)
        stmt = queries.trending_terms(limit, window_start, config, category_id)

        trending = [
            TrendingSignals(
                signals=_row_to_signals(row),
                likes_7d=int(row["likes_7d"] or 0),
                views_7d=int(row["views_7d"] or 0),
                comments_7d=int(row["comments_7d"] or 0),
            )
            for row in self._store.query(stmt.sql, stmt.params)
        ]

        self._log.debug(
            "trending_fetched",
            limit=limit,
            category_id=category_id,
            window_start=window_start.isoformat(),
            fetched=len(trending),
        )
        return trending

    def fetch_ordered_ids(
        self, ordering: TermOrdering, limit: int, category_id: int | None = None
    ) -> list[int]:
        """Fetch published term IDs sorted by a plain column.

        Args:
            ordering: One of the column orderings.
            limit: Maximum number of IDs.
            category_id: Optional category filter.

        Returns:
            Term IDs in descending column order.
        """
        stmt = queries.ordered_terms(ordering, limit, category_id)
        return [int(row["id"]) for row in self._store.query(stmt.sql, stmt.params)]
