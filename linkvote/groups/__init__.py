"""Group membership and cached per-group ranked views."""

from linkvote.groups.cache import GroupRankingCache
from linkvote.groups.metrics import GroupCacheMetrics


__all__ = [
    "GroupCacheMetrics",
    "GroupRankingCache",
]
