"""Score and time views backing article listings."""

import redis
from redis.client import Pipeline

from linkvote.ranking.models import RankingView
from linkvote.settings import AppSettings
from linkvote.store.keys import KeySpace


class RankingIndex:
    """Maintains the score view and the time view.

    Write methods accept an optional pipeline so callers can fold them into
    a larger MULTI/EXEC block; without one they run immediately.
    """

    def __init__(
        self,
        conn: redis.Redis,
        settings: AppSettings | None = None,
        keys: KeySpace | None = None,
    ) -> None:
        """Initialize the index.

        Args:
            conn: Redis client.
            settings: Scoring and paging settings.
            keys: Key space; defaults to one built from ``settings.key_prefix``.
        """
        self._conn = conn
        self._settings = settings or AppSettings()
        self._keys = keys or KeySpace(self._settings.key_prefix)

    @property
    def keys(self) -> KeySpace:
        return self._keys

    def view_key(self, view: RankingView | str | None) -> str:
        """Redis key of a global view."""
        return self._keys.view(RankingView.parse(view).value)

    def record_creation(
        self,
        article: str,
        created_at: float,
        pipe: Pipeline | None = None,
    ) -> None:
        """Insert a new article into both views.

        The score view entry starts at ``created_at + vote_score``, counting
        the poster's own vote.

        Args:
            article: Article key.
            created_at: Creation time in epoch seconds.
            pipe: Optional pipeline to queue the writes on.
        """
        target = pipe if pipe is not None else self._conn
        target.zadd(
            self._keys.score_view,
            {article: created_at + self._settings.vote_score},
        )
        target.zadd(self._keys.time_view, {article: created_at})

    def adjust_score(
        self,
        article: str,
        delta: float,
        pipe: Pipeline | None = None,
    ) -> None:
        """Atomically add ``delta`` to an article's score view entry."""
        target = pipe if pipe is not None else self._conn
        target.zincrby(self._keys.score_view, delta, article)

    def time_of(self, article: str, pipe: Pipeline | None = None) -> float | None:
        """Creation time of an article, or None if it is not indexed."""
        source = pipe if pipe is not None else self._conn
        return source.zscore(self._keys.time_view, article)

    def score_of(self, article: str) -> float | None:
        """Current score of an article, or None if it is not indexed."""
        return self._conn.zscore(self._keys.score_view, article)

    def page(self, view: RankingView | str | None, page_number: int) -> list[str]:
        """Article keys on a page of a global view, highest score first.

        Args:
            view: View to read; empty selects the score view.
            page_number: 1-indexed page.

        Returns:
            Article keys; empty when the page is past the end of the view.
        """
        return self.page_key(self.view_key(view), page_number)

    def page_key(self, key: str, page_number: int) -> list[str]:
        """Article keys on a page of any score-ordered key.

        Shared by the global views and the cached group views. Pages are
        1-indexed; a page below 1 is out of range and yields nothing.
        """
        if page_number < 1:
            return []

        size = self._settings.articles_per_page
        start = (page_number - 1) * size
        end = start + size - 1
        return self._conn.zrevrange(key, start, end)
