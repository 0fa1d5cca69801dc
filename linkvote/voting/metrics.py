"""Metrics collection for the voting engine."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class VotingMetrics:
    """Metrics for vote operations.

    Attributes:
        accepted_by_action: Applied votes per action name.
        ignored_by_outcome: Rejected votes per outcome name.
        watch_conflicts_total: Transactions restarted after a WATCH conflict.
    """

    accepted_by_action: dict[str, int] = field(default_factory=dict)
    ignored_by_outcome: dict[str, int] = field(default_factory=dict)
    watch_conflicts_total: int = 0

    _instance: ClassVar["VotingMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "VotingMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_accepted(self, action: str) -> None:
        """Record an applied vote.

        Args:
            action: Action name.
        """
        self.accepted_by_action[action] = self.accepted_by_action.get(action, 0) + 1

    def record_ignored(self, outcome: str) -> None:
        """Record a rejected vote.

        Args:
            outcome: Outcome name.
        """
        self.ignored_by_outcome[outcome] = self.ignored_by_outcome.get(outcome, 0) + 1

    def record_conflict(self) -> None:
        """Record a WATCH conflict."""
        self.watch_conflicts_total += 1

    @property
    def accepted_total(self) -> int:
        return sum(self.accepted_by_action.values())

    def to_dict(self) -> dict[str, int | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "accepted_by_action": dict(self.accepted_by_action),
            "ignored_by_outcome": dict(self.ignored_by_outcome),
            "watch_conflicts_total": self.watch_conflicts_total,
        }
