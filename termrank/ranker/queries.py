"""Parameterized statements for the signal fetcher.

Optional filters are added through WhereClause, which records each SQL
fragment together with its parameters. Values are always bound; the only
identifiers placed in statement text come from fixed mappings in this module.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from termrank.config.constants import PUBLISHED_STATUS
from termrank.config.schemas import TrendingConfig
from termrank.ranker.models import TermOrdering
from termrank.store.timestamps import format_timestamp


TERM_TARGET_TYPE = "term"

# Column sorts accepted by the terms listing
ORDER_COLUMNS: dict[TermOrdering, str] = {
    TermOrdering.CREATED_AT: "created_at",
    TermOrdering.VIEWS: "views",
    TermOrdering.LIKES_COUNT: "likes_count",
}


@dataclass(frozen=True)
class Statement:
    """SQL text and its positional parameters."""

    sql: str
    params: tuple[Any, ...] = ()


class WhereClause:
    """Accumulates AND-ed conditions with their parameters in lockstep."""

    def __init__(self) -> None:
        self._fragments: list[str] = []
        self._params: list[Any] = []

    def add(self, fragment: str, *params: Any) -> "WhereClause":
        """Add a condition; the fragment's placeholders match params."""
        if fragment.count("?") != len(params):
            msg = f"Placeholder count mismatch in {fragment!r}"
            raise ValueError(msg)
        self._fragments.append(fragment)
        self._params.extend(params)
        return self

    def add_if(self, condition: bool, fragment: str, *params: Any) -> "WhereClause":
        """Add a condition only when condition is true."""
        if condition:
            self.add(fragment, *params)
        return self

    @property
    def params(self) -> tuple[Any, ...]:
        """Parameters in fragment order."""
        return tuple(self._params)

    def render(self) -> str:
        """Render as a WHERE clause, or an empty string with no conditions."""
        if not self._fragments:
            return ""
        return "WHERE " + " AND ".join(self._fragments)


def _published_terms(category_id: int | None, alias: str = "") -> WhereClause:
    prefix = f"{alias}." if alias else ""
    return (
        WhereClause()
        .add(f"{prefix}status = ?", PUBLISHED_STATUS)
        .add_if(category_id is not None, f"{prefix}category_id = ?", category_id)
    )


def candidate_pool(pool_size: int, category_id: int | None = None) -> Statement:
    """Newest published terms with their lifetime counters.

    Args:
        pool_size: Maximum number of candidates.
        category_id: Optional category filter.

    Returns:
        Statement ordered by created_at descending.
    """
    where = _published_terms(category_id)
    sql = f"""
        SELECT id, likes_count, views, comments_count, created_at, category_id
        FROM terms
        {where.render()}
        ORDER BY created_at DESC, id DESC
        LIMIT ?
    """
    return Statement(sql, (*where.params, pool_size))


def liked_categories(user_id: int, limit: int) -> Statement:
    """Distinct categories of terms the user liked, most recent like first."""
    where = (
        WhereClause()
        .add("l.user_id = ?", user_id)
        .add("l.target_type = ?", TERM_TARGET_TYPE)
        .add("t.category_id IS NOT NULL")
    )
    sql = f"""
        SELECT t.category_id AS category_id, MAX(l.created_at) AS last_liked_at
        FROM likes l
        INNER JOIN terms t ON l.target_id = t.id
        {where.render()}
        GROUP BY t.category_id
        ORDER BY last_liked_at DESC, t.category_id ASC
        LIMIT ?
    """
    return Statement(sql, (*where.params, limit))


def followed_author_terms(user_id: int, limit: int) -> Statement:
    """Newest published terms written by authors the user follows."""
    where = (
        WhereClause()
        .add("f.follower_id = ?", user_id)
        .add("t.status = ?", PUBLISHED_STATUS)
    )
    sql = f"""
        SELECT DISTINCT t.id AS id, t.created_at AS created_at
        FROM terms t
        INNER JOIN follows f ON t.author_id = f.following_id
        {where.render()}
        ORDER BY t.created_at DESC, t.id DESC
        LIMIT ?
    """
    return Statement(sql, (*where.params, limit))


def user_specialties(user_id: int) -> Statement:
    """Declared specialty tags of the user."""
    return Statement(
        """
        SELECT specialty
        FROM user_specialties
        WHERE user_id = ?
        ORDER BY specialty
        """,
        (user_id,),
    )


def trending_terms(
    limit: int,
    window_start: datetime,
    weights: TrendingConfig,
    category_id: int | None = None,
) -> Statement:
    """Published terms ordered by recent-activity composite.

    views_7d reuses the lifetime view count when the term was updated inside
    the window, since individual views are not timestamped. Window bounds
    are compared as julianday() values, so any SQLite date format or UTC
    offset in stored timestamps is placed correctly.

    Args:
        limit: Maximum number of terms.
        window_start: Start of the activity window (inclusive).
        weights: Composite weights.
        category_id: Optional category filter.

    Returns:
        Statement ordered by composite, then lifetime views, then recency.
    """
    since = format_timestamp(window_start)
    where = _published_terms(category_id, alias="t")
    sql = f"""
        SELECT * FROM (
            SELECT
                t.id, t.likes_count, t.views, t.comments_count,
                t.created_at, t.category_id,
                COALESCE(recent_likes.likes_7d, 0) AS likes_7d,
                CASE WHEN julianday(t.updated_at) >= julianday(?)
                    THEN t.views ELSE 0 END AS views_7d,
                COALESCE(recent_comments.comments_7d, 0) AS comments_7d
            FROM terms t
            LEFT JOIN (
                SELECT target_id, COUNT(*) AS likes_7d
                FROM likes
                WHERE target_type = ? AND julianday(created_at) >= julianday(?)
                GROUP BY target_id
            ) recent_likes ON t.id = recent_likes.target_id
            LEFT JOIN (
                SELECT term_id, COUNT(*) AS comments_7d
                FROM comments
                WHERE julianday(created_at) >= julianday(?)
                GROUP BY term_id
            ) recent_comments ON t.id = recent_comments.term_id
            {where.render()}
        )
        ORDER BY
            (likes_7d * ? + views_7d * ? + comments_7d * ?) DESC,
            views DESC,
            created_at DESC
        LIMIT ?
    """
    params = (
        since,
        TERM_TARGET_TYPE,
        since,
        since,
        *where.params,
        weights.likes_weight,
        weights.views_weight,
        weights.comments_weight,
        limit,
    )
    return Statement(sql, params)


def ordered_terms(
    ordering: TermOrdering, limit: int, category_id: int | None = None
) -> Statement:
    """Published term IDs sorted by a plain column, descending.

    Raises:
        ValueError: If ordering is not a column sort.
    """
    if not ordering.is_column:
        msg = f"Ordering {ordering.value!r} is not a column sort"
        raise ValueError(msg)

    column = ORDER_COLUMNS[ordering]

    where = _published_terms(category_id)
    sql = f"""
        SELECT id
        FROM terms
        {where.render()}
        ORDER BY {column} DESC, id DESC
        LIMIT ?
    """
    return Statement(sql, (*where.params, limit))
