"""Models for the ranking views."""

from enum import Enum

from linkvote.errors import UnknownViewError


class RankingView(str, Enum):
    """Global score-ordered views.

    The value is the un-prefixed Redis key of the view.
    """

    SCORE = "score:"
    TIME = "time:"

    @classmethod
    def parse(cls, name: "RankingView | str | None") -> "RankingView":
        """Resolve a view from a name such as ``"score"`` or ``"time:"``.

        An empty or missing name selects the score view.

        Raises:
            UnknownViewError: If the name matches no view.
        """
        if isinstance(name, RankingView):
            return name
        if not name:
            return cls.SCORE
        normalized = name.lower()
        if not normalized.endswith(":"):
            normalized += ":"
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownViewError(name) from None
