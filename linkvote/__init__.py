"""Vote-weighted link ranking on Redis.

Users post links, other users vote them up or down, and articles are ranked
by a time-decaying score. Articles can be filed into named groups, each with
its own short-lived cached ranked view.
"""

from linkvote.board import ArticleBoard
from linkvote.catalog import Article, ArticleCatalog
from linkvote.groups import GroupRankingCache
from linkvote.ranking import RankingIndex, RankingView
from linkvote.voting import VoteOutcome, VoteResult, VotingEngine


__all__ = [
    "Article",
    "ArticleBoard",
    "ArticleCatalog",
    "GroupRankingCache",
    "RankingIndex",
    "RankingView",
    "VoteOutcome",
    "VoteResult",
    "VotingEngine",
]
