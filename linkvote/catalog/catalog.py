"""Article catalog: posting, lookup and group filing."""

import time
from collections.abc import Callable, Iterable

import redis
import structlog

from linkvote.catalog.models import Article
from linkvote.errors import InvalidArticleKeyError
from linkvote.ranking import RankingIndex, RankingView
from linkvote.settings import AppSettings
from linkvote.store.keys import KeySpace


logger = structlog.get_logger()


class ArticleCatalog:
    """Creates articles and resolves their stored attributes."""

    def __init__(
        self,
        conn: redis.Redis,
        settings: AppSettings | None = None,
        keys: KeySpace | None = None,
        index: RankingIndex | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the catalog.

        Args:
            conn: Redis client.
            settings: Engine settings.
            keys: Key space; defaults to one built from ``settings.key_prefix``.
            index: Ranking index to seed on creation and read listings from.
            clock: Source of the current time in epoch seconds.
        """
        self._conn = conn
        self._settings = settings or AppSettings()
        self._keys = keys or KeySpace(self._settings.key_prefix)
        self._index = index or RankingIndex(conn, self._settings, self._keys)
        self._clock = clock
        self._log = logger.bind(component="catalog")

    def post_article(self, user: str, title: str, link: str) -> str:
        """Create an article and seed its voters and ranking entries.

        The poster counts as the first voter. Everything after the id
        allocation is written in one MULTI/EXEC block, so an article never
        exists without both ranking entries.

        Args:
            user: Poster's user id.
            title: Article title.
            link: Article URL.

        Returns:
            The new article id, e.g. ``"1"``.
        """
        article_id = str(self._conn.incr(self._keys.article_counter))
        article = self._keys.article(article_id)
        voted = self._keys.voted(article_id)
        now = self._clock()

        with self._conn.pipeline(transaction=True) as pipe:
            pipe.sadd(voted, user)
            pipe.expire(voted, self._settings.voting_window_seconds)
            pipe.hset(
                article,
                mapping={
                    "title": title,
                    "link": link,
                    "poster": user,
                    "time": now,
                    "votes": 1,
                    "disvotes": 0,
                },
            )
            self._index.record_creation(article, now, pipe=pipe)
            pipe.execute()

        self._log.info(
            "article_posted",
            article=article,
            poster=user,
            created_at=now,
        )
        return article_id

    def get_article(self, article: str) -> Article | None:
        """Fetch one article by key, or None if it does not exist."""
        article_id = self._keys.article_id(article)
        record = self._conn.hgetall(article)
        if not record:
            return None
        return Article.from_record(article, article_id, record)

    def get_articles(
        self, page: int, order: RankingView | str | None = None
    ) -> list[Article]:
        """List a page of articles from a global view.

        Args:
            page: 1-indexed page number.
            order: View to rank by; empty selects the score view.

        Returns:
            Articles in descending view order; empty past the last page.
        """
        return self.fetch(self._index.page(order, page))

    def fetch(self, articles: Iterable[str]) -> list[Article]:
        """Resolve article keys to articles, keeping their order.

        Keys whose hash is gone are skipped.
        """
        articles = list(articles)
        if not articles:
            return []

        with self._conn.pipeline(transaction=False) as pipe:
            for article in articles:
                pipe.hgetall(article)
            records = pipe.execute()

        result: list[Article] = []
        for article, record in zip(articles, records, strict=True):
            if not record:
                self._log.warning("article_record_missing", article=article)
                continue
            result.append(
                Article.from_record(article, self._keys.article_id(article), record)
            )
        return result

    def add_remove_groups(
        self,
        article_id: str,
        to_add: Iterable[str] = (),
        to_remove: Iterable[str] = (),
    ) -> None:
        """File an article into groups and take it out of others.

        Both lists are applied as independent, idempotent set operations.
        Cached group views are not invalidated; they catch up when they
        expire.

        Args:
            article_id: Numeric article id.
            to_add: Groups to add the article to.
            to_remove: Groups to remove the article from.

        Raises:
            InvalidArticleKeyError: If ``article_id`` is not numeric.
            InvalidGroupError: If any group name is empty. Nothing is
                written in that case.
        """
        if not article_id.isdigit():
            raise InvalidArticleKeyError(article_id)
        article = self._keys.article(article_id)
        to_add = list(to_add)
        to_remove = list(to_remove)
        adds = [self._keys.group(group) for group in to_add]
        removes = [self._keys.group(group) for group in to_remove]

        with self._conn.pipeline(transaction=False) as pipe:
            for key in adds:
                pipe.sadd(key, article)
            for key in removes:
                pipe.srem(key, article)
            pipe.execute()

        self._log.info(
            "article_groups_changed",
            article=article,
            added=to_add,
            removed=to_remove,
        )
