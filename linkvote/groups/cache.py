"""Group membership sets and their cached ranked views."""

from collections.abc import Iterable

import redis
import structlog

from linkvote.catalog import Article, ArticleCatalog
from linkvote.errors import InvalidArticleKeyError
from linkvote.groups.metrics import GroupCacheMetrics
from linkvote.ranking import RankingIndex, RankingView
from linkvote.settings import AppSettings
from linkvote.store.keys import KeySpace


logger = structlog.get_logger()


class GroupRankingCache:
    """Ranks a group's articles by intersecting it with a global view.

    The intersection is stored under ``<view><group>`` (``score:python``)
    with a short TTL and reused until Redis expires it. Membership changes
    do not invalidate a cached view, so a view can lag its group by up to
    ``group_cache_ttl_seconds``.
    """

    def __init__(
        self,
        conn: redis.Redis,
        settings: AppSettings | None = None,
        keys: KeySpace | None = None,
        index: RankingIndex | None = None,
        catalog: ArticleCatalog | None = None,
        metrics: GroupCacheMetrics | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            conn: Redis client.
            settings: Engine settings.
            keys: Key space; defaults to one built from ``settings.key_prefix``.
            index: Ranking index providing the global views and paging.
            catalog: Catalog used to resolve article attributes.
            metrics: Optional metrics instance.
        """
        self._conn = conn
        self._settings = settings or AppSettings()
        self._keys = keys or KeySpace(self._settings.key_prefix)
        self._index = index or RankingIndex(conn, self._settings, self._keys)
        self._catalog = catalog or ArticleCatalog(
            conn, self._settings, self._keys, self._index
        )
        self._metrics = metrics or GroupCacheMetrics.get_instance()
        self._log = logger.bind(component="groups")

    def membership_add(self, group: str, article_id: str) -> bool:
        """Add an article to a group. Returns True if it was not there.

        Raises:
            InvalidGroupError: If ``group`` is empty.
            InvalidArticleKeyError: If ``article_id`` is not numeric.
        """
        key = self._keys.group(group)
        return bool(self._conn.sadd(key, self._article(article_id)))

    def membership_remove(self, group: str, article_id: str) -> bool:
        """Remove an article from a group. Returns True if it was there."""
        key = self._keys.group(group)
        return bool(self._conn.srem(key, self._article(article_id)))

    def members(self, group: str) -> set[str]:
        """Article keys currently filed under ``group``."""
        return set(self._conn.smembers(self._keys.group(group)))

    def cache_key(self, group: str, order: RankingView | str | None = None) -> str:
        """Key of the cached view for ``(order, group)``."""
        return self._keys.group_view(self._index.view_key(order), group)

    def ranked_keys(
        self, group: str, order: RankingView | str | None, page: int
    ) -> list[str]:
        """Article keys on a page of a group's ranked view.

        The page is read from the cached view first. Only an empty read
        from a missing view computes and caches the intersection, so a view
        expiring mid-call cannot turn a non-empty group into an empty page.
        Redis cannot store an empty sorted set, so a group with no ranked
        members is recomputed on every read.

        Raises:
            InvalidGroupError: If ``group`` is empty.
        """
        key = self.cache_key(group, order)
        if page < 1:
            return []

        cached = self._index.page_key(key, page)
        if cached or self._conn.exists(key):
            self._metrics.record_hit()
            self._log.debug("group_cache_hit", group=group, key=key)
            return cached

        self._populate(group, key, self._index.view_key(order))
        return self._index.page_key(key, page)

    def ranked_view(
        self, group: str, order: RankingView | str | None = None, page: int = 1
    ) -> list[Article]:
        """A page of a group's articles ordered by the chosen view.

        Args:
            group: Group name.
            order: View to rank by; empty selects the score view.
            page: 1-indexed page number.

        Returns:
            Articles in descending order; empty outside the group's pages.

        Raises:
            InvalidGroupError: If ``group`` is empty.
        """
        return self._catalog.fetch(self.ranked_keys(group, order, page))

    def _populate(self, group: str, key: str, view_key: str) -> int:
        # Group sets carry an implicit score of 1, so MAX keeps the view score.
        with self._conn.pipeline(transaction=True) as pipe:
            pipe.zinterstore(
                key, [self._keys.group(group), view_key], aggregate="MAX"
            )
            pipe.expire(key, self._settings.group_cache_ttl_seconds)
            entries, _ = pipe.execute()

        self._metrics.record_miss(entries)
        if entries == 0:
            self._log.warning("group_intersection_empty", group=group, key=key)
        else:
            self._log.info(
                "group_cache_miss",
                group=group,
                key=key,
                entries=entries,
                ttl_seconds=self._settings.group_cache_ttl_seconds,
            )
        return entries

    def _article(self, article_id: str) -> str:
        if not article_id.isdigit():
            raise InvalidArticleKeyError(article_id)
        return self._keys.article(article_id)
