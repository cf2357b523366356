"""Metrics collection for the ranker module."""

from collections import Counter, deque
from dataclasses import dataclass, field
from threading import Lock


# Most recent call durations kept for percentiles
DURATION_SAMPLE_SIZE = 1000

# Module-level singleton state
_metrics_instance: "RankerMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class RankerMetrics:
    """Thread-safe in-process counters for ranking calls.

    Counters only grow; durations are a sliding window of the last
    DURATION_SAMPLE_SIZE calls. Use get_instance() for singleton access.

    Attributes:
        requests_by_mode: Ranking calls per mode.
        candidates_fetched: Total candidates pulled from the store.
        results_returned: Total IDs returned to callers.
        followed_injected: Followed-author terms added outside the pool.
        followed_boosted: Followed-author terms boosted inside the pool.
        duration_ms: Durations of the most recent calls.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    requests_by_mode: Counter[str] = field(default_factory=Counter)
    candidates_fetched: int = 0
    results_returned: int = 0
    followed_injected: int = 0
    followed_boosted: int = 0
    duration_ms: deque[float] = field(
        default_factory=lambda: deque(maxlen=DURATION_SAMPLE_SIZE)
    )

    @classmethod
    def get_instance(cls) -> "RankerMetrics":
        """Get the singleton instance (thread-safe)."""
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_request(self, mode: str, duration_ms: float) -> None:
        """Record one completed ranking call.

        Args:
            mode: Ranking mode name.
            duration_ms: Wall time of the call.
        """
        with self._lock:
            self.requests_by_mode[mode] += 1
            self.duration_ms.append(duration_ms)

    def record_candidates(self, count: int) -> None:
        """Record candidates fetched for one call."""
        with self._lock:
            self.candidates_fetched += count

    def record_results(self, count: int) -> None:
        """Record IDs returned by one call."""
        with self._lock:
            self.results_returned += count

    def record_followed(self, boosted: int, injected: int) -> None:
        """Record followed-author handling for one personalized call."""
        with self._lock:
            self.followed_boosted += boosted
            self.followed_injected += injected

    def get_duration_percentiles(self) -> dict[str, float]:
        """Calculate p50/p90/p99 over the retained durations.

        Returns:
            Dictionary with p50, p90, p99 values.
        """
        with self._lock:
            sorted_values = sorted(self.duration_ms)

        if not sorted_values:
            return {"p50": 0.0, "p90": 0.0, "p99": 0.0}

        n = len(sorted_values)

        def percentile(p: float) -> float:
            idx = int(p * n / 100)
            return sorted_values[min(idx, n - 1)]

        return {
            "p50": percentile(50),
            "p90": percentile(90),
            "p99": percentile(99),
        }

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary."""
        percentiles = self.get_duration_percentiles()
        with self._lock:
            return {
                "requests_by_mode": dict(self.requests_by_mode),
                "candidates_fetched": self.candidates_fetched,
                "results_returned": self.results_returned,
                "followed_injected": self.followed_injected,
                "followed_boosted": self.followed_boosted,
                "duration_percentiles": percentiles,
            }
