"""Key naming for everything the engine stores.

Key names are an external contract: other tooling reads them directly.
With an empty prefix the layout is::

    article:              counter for article ids
    article:<id>          hash with title, link, poster, time, votes, disvotes
    voted:<id>            set of users who voted the article up
    disvoted:<id>         set of users who voted the article down
    score:                sorted set, article key -> score
    time:                 sorted set, article key -> creation time
    group:<name>          set of article keys in a group
    <view><name>          cached intersection, e.g. ``score:programming``
"""

import re
from dataclasses import dataclass

from linkvote.errors import InvalidArticleKeyError, InvalidGroupError


ARTICLE = "article:"
VOTED = "voted:"
DISVOTED = "disvoted:"
SCORE_VIEW = "score:"
TIME_VIEW = "time:"
GROUP = "group:"

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _group_name(name: str) -> str:
    if not name:
        raise InvalidGroupError(name)
    return name


@dataclass(frozen=True)
class KeySpace:
    """Derives Redis key names under an optional namespace prefix."""

    prefix: str = ""

    @property
    def article_counter(self) -> str:
        return self.prefix + ARTICLE

    @property
    def score_view(self) -> str:
        return self.prefix + SCORE_VIEW

    @property
    def time_view(self) -> str:
        return self.prefix + TIME_VIEW

    def article(self, article_id: str) -> str:
        return f"{self.prefix}{ARTICLE}{article_id}"

    def voted(self, article_id: str) -> str:
        return f"{self.prefix}{VOTED}{article_id}"

    def disvoted(self, article_id: str) -> str:
        return f"{self.prefix}{DISVOTED}{article_id}"

    def group(self, name: str) -> str:
        return f"{self.prefix}{GROUP}{_group_name(name)}"

    def view(self, view_name: str) -> str:
        """Key of a global ranking view such as ``score:``."""
        return self.prefix + view_name

    def group_view(self, view_key: str, group: str) -> str:
        """Key of the cached intersection of ``group`` with ``view_key``.

        Raises:
            InvalidGroupError: If ``group`` is empty, which would name the
                global view itself.
        """
        return view_key + _group_name(group)

    def article_id(self, article: str) -> str:
        """Extract the numeric id from an article key.

        Args:
            article: Article key, e.g. ``article:42``.

        Returns:
            The id part, e.g. ``"42"``.

        Raises:
            InvalidArticleKeyError: If the key is not an article key.
        """
        head = self.prefix + ARTICLE
        article_id = article[len(head) :] if article.startswith(head) else ""
        if not article_id.isdigit():
            raise InvalidArticleKeyError(article)
        return article_id

    def owned_patterns(self) -> list[str]:
        """SCAN patterns covering every key this namespace can create."""
        escaped = _GLOB_SPECIAL.sub(r"\\\1", self.prefix)
        return [
            f"{escaped}{name}*"
            for name in (ARTICLE, VOTED, DISVOTED, SCORE_VIEW, TIME_VIEW, GROUP)
        ]
