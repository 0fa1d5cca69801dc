"""Global ranking views over articles.

Two sorted sets back every default listing: the score view (creation time
plus vote adjustments) and the time view (creation time only).
"""

from linkvote.ranking.index import RankingIndex
from linkvote.ranking.models import RankingView


__all__ = [
    "RankingIndex",
    "RankingView",
]
