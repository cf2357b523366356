"""Data models for the term ranker."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RankingMode(str, Enum):
    """Entry point that produced a ranking."""

    GENERAL = "general"
    PERSONALIZED = "personalized"
    TRENDING = "trending"
    ORDERED = "ordered"


class TermOrdering(str, Enum):
    """Orderings accepted by the terms listing.

    - recommended: personalized ranking (general for anonymous callers)
    - trending: 7-day momentum composite
    - created_at, views, likes_count: plain descending column order
    """

    CREATED_AT = "created_at"
    VIEWS = "views"
    LIKES_COUNT = "likes_count"
    RECOMMENDED = "recommended"
    TRENDING = "trending"

    @property
    def is_column(self) -> bool:
        """Whether this ordering is a plain column sort."""
        return self in (
            TermOrdering.CREATED_AT,
            TermOrdering.VIEWS,
            TermOrdering.LIKES_COUNT,
        )


@dataclass(frozen=True)
class ContentSignals:
    """Raw engagement signals of one published term.

    Attributes:
        term_id: Term identifier.
        likes_count: Lifetime likes.
        views: Lifetime views.
        comments_count: Lifetime comments.
        created_at: Creation timestamp (UTC).
        category_id: Category of the term, if any.
    """

    term_id: int
    likes_count: int
    views: int
    comments_count: int
    created_at: datetime
    category_id: int | None = None


@dataclass(frozen=True)
class TrendingSignals:
    """Lifetime signals plus activity inside the trending window.

    views_7d is the lifetime view count when the term was updated inside the
    window and zero otherwise; view events carry no timestamps.
    """

    signals: ContentSignals
    likes_7d: int = 0
    views_7d: int = 0
    comments_7d: int = 0

    @property
    def term_id(self) -> int:
        """Identifier of the underlying term."""
        return self.signals.term_id


@dataclass(frozen=True)
class UserAffinity:
    """Personalization inputs derived for one caller.

    Attributes:
        user_id: The caller.
        liked_category_ids: Categories of liked terms, most recent first.
        followed_term_ids: Terms by followed authors, newest first.
        specialties: Declared specialty tags (not weighted).
    """

    user_id: int
    liked_category_ids: tuple[int, ...] = ()
    followed_term_ids: tuple[int, ...] = ()
    specialties: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when the caller has no personalization signal at all."""
        return not (
            self.liked_category_ids or self.followed_term_ids or self.specialties
        )


@dataclass
class ScoredCandidate:
    """A candidate term with its score for a single ranking call.

    Attributes:
        term_id: Term identifier.
        score: Final score used for ordering.
        base_score: Score before personalization multipliers.
        category_boost: Multiplier from liked categories (1.0 when none).
        followed: Whether the term was written by a followed author.
        injected: Whether the term was added outside the candidate pool.
    """

    term_id: int
    score: float
    base_score: float = 0.0
    category_boost: float = 1.0
    followed: bool = False
    injected: bool = False

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "term_id": self.term_id,
            "score": self.score,
            "base_score": self.base_score,
            "category_boost": self.category_boost,
            "followed": self.followed,
            "injected": self.injected,
        }


@dataclass
class RankingResult:
    """Ordered term IDs plus the scores that produced them."""

    mode: RankingMode
    term_ids: list[int] = field(default_factory=list)
    scored: list[ScoredCandidate] = field(default_factory=list)
