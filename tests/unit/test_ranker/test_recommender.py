"""Unit tests for Recommender orchestration against a recording store."""

import sqlite3
from collections.abc import Sequence
from typing import Any

import pytest

from termrank.config import CandidatesConfig, RankingConfig
from termrank.ranker import RankerMetrics, Recommender
from termrank.ranker.metrics import DURATION_SAMPLE_SIZE
from termrank.store import ConnectionError as StoreConnectionError
from termrank.store import ContentStore, format_timestamp

from tests.helpers.time import FIXED_NOW


class RecordingStore:
    """QueryExecutor double returning canned rows and recording statements."""

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.rows = rows or []
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        self.calls.append((sql, tuple(params)))
        if self.error is not None:
            raise self.error
        if "likes_7d" not in sql and "SELECT id, likes_count" in sql:
            return self.rows
        return []

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        msg = "ranking must not write"
        raise AssertionError(msg)


def _row(
    term_id: int, likes: int = 0, category_id: int | None = None
) -> dict[str, Any]:
    return {
        "id": term_id,
        "likes_count": likes,
        "views": 0,
        "comments_count": 0,
        "created_at": format_timestamp(FIXED_NOW),
        "category_id": category_id,
    }


def _recommender(
    store: RecordingStore, config: RankingConfig | None = None
) -> Recommender:
    return Recommender(store, config=config, metrics=RankerMetrics(), now=FIXED_NOW)


class TestCandidatePoolSize:
    """Tests for over-fetching before truncation."""

    def test_general_fetches_three_times_limit(self) -> None:
        """General pulls limit * 3 candidates."""
        store = RecordingStore()
        _recommender(store).general(limit=5)
        assert len(store.calls) == 1
        assert store.calls[0][1][-1] == 15

    def test_general_multiplier_configurable(self) -> None:
        """The pool multiplier comes from configuration."""
        store = RecordingStore()
        config = RankingConfig(candidates=CandidatesConfig(general_pool_multiplier=5))
        _recommender(store, config).general(limit=4)
        assert store.calls[0][1][-1] == 20

    def test_personalized_uses_fixed_pool(self) -> None:
        """Personalized pulls a fixed pool of 100 after three affinity reads."""
        store = RecordingStore()
        _recommender(store).personalized(user_id=8, limit=5, category_id=2)
        assert len(store.calls) == 4
        assert store.calls[-1][1] == ("published", 2, 100)

    def test_trending_limits_in_store(self) -> None:
        """Trending truncates in the statement itself."""
        store = RecordingStore()
        _recommender(store).trending(limit=7)
        assert store.calls[0][1][-1] == 7


class TestDegradation:
    """Tests for anonymous callers and trivial limits."""

    def test_anonymous_personalized_is_general(self) -> None:
        """No user means exactly the general query path."""
        store = RecordingStore(rows=[_row(1, likes=1), _row(2, likes=9)])
        recommender = _recommender(store)

        assert recommender.personalized(None, limit=2) == recommender.general(limit=2)
        assert all("follows" not in sql for sql, _ in store.calls)

    @pytest.mark.parametrize("limit", [0, -3])
    def test_non_positive_limit_skips_store(self, limit: int) -> None:
        """A non-positive limit returns nothing without I/O."""
        store = RecordingStore()
        recommender = _recommender(store)

        assert recommender.general(limit) == []
        assert recommender.personalized(1, limit) == []
        assert recommender.trending(limit) == []
        assert recommender.rank("views", limit) == []
        assert store.calls == []

    def test_truncates_to_limit(self) -> None:
        """Returned IDs never exceed the limit."""
        store = RecordingStore(rows=[_row(i, likes=i) for i in range(1, 11)])
        assert _recommender(store).general(limit=3) == [10, 9, 8]


class TestErrorPropagation:
    """Store failures are not swallowed."""

    def test_query_error_propagates(self) -> None:
        """A sqlite error surfaces unchanged."""
        error = sqlite3.OperationalError("database is locked")
        store = RecordingStore(error=error)

        with pytest.raises(sqlite3.OperationalError, match="locked"):
            _recommender(store).general(limit=3)
        with pytest.raises(sqlite3.OperationalError):
            _recommender(store).personalized(1, limit=3)
        with pytest.raises(sqlite3.OperationalError):
            _recommender(store).trending(limit=3)

    def test_unconnected_store_propagates(self) -> None:
        """Using a store before connect() raises the store's error."""
        recommender = Recommender(ContentStore(":memory:"), metrics=RankerMetrics())
        with pytest.raises(StoreConnectionError):
            recommender.general(limit=3)

    def test_unknown_ordering_rejected(self) -> None:
        """Unknown listing orders raise ValueError."""
        with pytest.raises(ValueError):
            _recommender(RecordingStore()).rank("alphabetical")


class TestMetricsRecording:
    """Tests for metrics recorded by ranking calls."""

    def test_counts_recorded(self) -> None:
        """Modes, candidates and results are counted."""
        metrics = RankerMetrics()
        store = RecordingStore(rows=[_row(1), _row(2), _row(3)])
        recommender = Recommender(store, metrics=metrics, now=FIXED_NOW)

        recommender.general(limit=2)
        recommender.trending(limit=2)

        assert metrics.requests_by_mode == {"general": 1, "trending": 1}
        assert metrics.candidates_fetched == 3
        assert metrics.results_returned == 2
        assert len(metrics.duration_ms) == 2

    def test_shared_metrics_stay_bounded(self) -> None:
        """The default process-wide metrics keep a bounded duration window."""
        RankerMetrics.reset()
        try:
            recommender = Recommender(RecordingStore(rows=[_row(1)]), now=FIXED_NOW)
            for _ in range(DURATION_SAMPLE_SIZE + 500):
                recommender.general(limit=1)

            shared = RankerMetrics.get_instance()
            assert len(shared.duration_ms) == DURATION_SAMPLE_SIZE
            assert shared.requests_by_mode["general"] == DURATION_SAMPLE_SIZE + 500
        finally:
            RankerMetrics.reset()


class TestRankDispatch:
    """Tests for rank() routing by ordering kind."""

    def test_column_ordering_uses_plain_sort(self) -> None:
        """Column orderings issue one ORDER BY statement."""
        store = RecordingStore()
        _recommender(store).rank("views", limit=4)

        [(sql, params)] = store.calls
        assert "ORDER BY views DESC" in sql
        assert params == ("published", 4)

    def test_trending_ordering_uses_trending(self) -> None:
        """The trending ordering runs the recent-activity statement."""
        store = RecordingStore()
        _recommender(store).rank("trending", limit=4)

        [(sql, _)] = store.calls
        assert "likes_7d" in sql

    def test_recommended_ordering_for_anonymous(self) -> None:
        """recommended without a caller runs the general pool."""
        store = RecordingStore()
        _recommender(store).rank("recommended", limit=4)

        [(sql, params)] = store.calls
        assert "SELECT id, likes_count" in sql
        assert params[-1] == 12
