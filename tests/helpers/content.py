"""Row builders for seeding a ContentStore in tests."""

from datetime import datetime, timedelta

from termrank.store import ContentStore, format_timestamp

from tests.helpers.time import FIXED_NOW


def days_ago(days: float, now: datetime = FIXED_NOW) -> str:
    """Encoded timestamp `days` before now."""
    return format_timestamp(now - timedelta(days=days))


def insert_term(
    store: ContentStore,
    term_id: int,
    *,
    likes: int = 0,
    views: int = 0,
    comments: int = 0,
    age_days: float = 0.0,
    updated_days_ago: float | None = None,
    category_id: int | None = None,
    author_id: int | None = None,
    status: str = "published",
) -> None:
    """Insert a term with denormalized counters."""
    updated = age_days if updated_days_ago is None else updated_days_ago
    store.execute(
        """
        INSERT INTO terms (
            id, title, category_id, author_id, status,
            likes_count, views, comments_count, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            term_id,
            f"Term {term_id}",
            category_id,
            author_id,
            status,
            likes,
            views,
            comments,
            days_ago(age_days),
            days_ago(updated),
        ),
    )


def like_term(
    store: ContentStore, user_id: int, term_id: int, age_days: float = 0.0
) -> None:
    """Record a like event on a term."""
    store.execute(
        "INSERT INTO likes (user_id, target_type, target_id, created_at) "
        "VALUES (?, ?, ?, ?)",
        (user_id, "term", term_id, days_ago(age_days)),
    )


def add_comment(
    store: ContentStore, term_id: int, user_id: int = 1, age_days: float = 0.0
) -> None:
    """Record a comment on a term."""
    store.execute(
        "INSERT INTO comments (term_id, user_id, content, created_at) "
        "VALUES (?, ?, ?, ?)",
        (term_id, user_id, "comment", days_ago(age_days)),
    )


def follow(store: ContentStore, follower_id: int, following_id: int) -> None:
    """Make follower_id follow following_id."""
    store.execute(
        "INSERT INTO follows (follower_id, following_id, created_at) VALUES (?, ?, ?)",
        (follower_id, following_id, days_ago(0)),
    )


def add_specialty(store: ContentStore, user_id: int, specialty: str) -> None:
    """Declare a specialty tag for a user."""
    store.execute(
        "INSERT INTO user_specialties (user_id, specialty) VALUES (?, ?)",
        (user_id, specialty),
    )
