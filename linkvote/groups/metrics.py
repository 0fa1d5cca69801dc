"""Metrics collection for the group view cache."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class GroupCacheMetrics:
    """Metrics for cached group views.

    Attributes:
        cache_hits_total: Reads served from an existing cached view.
        cache_misses_total: Reads that recomputed the intersection.
        empty_intersections_total: Recomputations that produced no entries.
    """

    cache_hits_total: int = 0
    cache_misses_total: int = 0
    empty_intersections_total: int = 0

    _instance: ClassVar["GroupCacheMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "GroupCacheMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_hit(self) -> None:
        """Record a cache hit."""
        self.cache_hits_total += 1

    def record_miss(self, entries: int) -> None:
        """Record a recomputation.

        Args:
            entries: Number of entries the intersection produced.
        """
        self.cache_misses_total += 1
        if entries == 0:
            self.empty_intersections_total += 1

    @property
    def hit_rate(self) -> float:
        """Fraction of reads served from cache."""
        total = self.cache_hits_total + self.cache_misses_total
        if total == 0:
            return 0.0
        return self.cache_hits_total / total

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "cache_hits_total": self.cache_hits_total,
            "cache_misses_total": self.cache_misses_total,
            "empty_intersections_total": self.empty_intersections_total,
            "hit_rate": self.hit_rate,
        }
