"""Facade wiring the catalog, index, voting engine and group cache."""

import time
from collections.abc import Callable, Iterable

import redis

from linkvote.catalog import Article, ArticleCatalog
from linkvote.groups import GroupRankingCache
from linkvote.ranking import RankingIndex, RankingView
from linkvote.settings import AppSettings, get_settings
from linkvote.store import KeySpace, connect, reset_namespace
from linkvote.voting import VoteResult, VotingEngine


class ArticleBoard:
    """All article operations over one Redis handle.

    The handle is passed in rather than held globally, so tests and
    independent namespaces can each use their own.
    """

    def __init__(
        self,
        conn: redis.Redis,
        settings: AppSettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.conn = conn
        self.settings = settings or AppSettings()
        self.keys = KeySpace(self.settings.key_prefix)
        self.index = RankingIndex(conn, self.settings, self.keys)
        self.catalog = ArticleCatalog(
            conn, self.settings, self.keys, self.index, clock=clock
        )
        self.voting = VotingEngine(
            conn, self.settings, self.keys, self.index, clock=clock
        )
        self.groups = GroupRankingCache(
            conn, self.settings, self.keys, self.index, self.catalog
        )

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "ArticleBoard":
        """Connect to the configured Redis and build a board."""
        settings = settings or get_settings()
        return cls(connect(settings.redis_url), settings)

    def post_article(self, user: str, title: str, link: str) -> str:
        return self.catalog.post_article(user, title, link)

    def get_articles(
        self, page: int = 1, order: RankingView | str | None = None
    ) -> list[Article]:
        return self.catalog.get_articles(page, order)

    def article_vote(self, article: str, user: str) -> VoteResult:
        return self.voting.article_vote(article, user)

    def article_disvote(self, article: str, user: str) -> VoteResult:
        return self.voting.article_disvote(article, user)

    def exchange_vote(self, article: str, user: str) -> VoteResult:
        return self.voting.exchange_vote(article, user)

    def add_remove_groups(
        self,
        article_id: str,
        to_add: Iterable[str] = (),
        to_remove: Iterable[str] = (),
    ) -> None:
        self.catalog.add_remove_groups(article_id, to_add, to_remove)

    def get_group_articles(
        self,
        group: str,
        order: RankingView | str | None = None,
        page: int = 1,
    ) -> list[Article]:
        return self.groups.ranked_view(group, order, page)

    def reset(self) -> int:
        """Delete all keys in this board's namespace. Returns the count."""
        return reset_namespace(self.conn, self.keys)
