"""Namespace-scoped wipe of engine state."""

import redis
import structlog

from linkvote.store.keys import KeySpace


logger = structlog.get_logger()

_DELETE_BATCH = 500


def reset_namespace(conn: redis.Redis, keys: KeySpace) -> int:
    """Delete every key owned by ``keys``, leaving other data in place.

    Uses SCAN so the server is never blocked by a single large KEYS call.
    The database is never flushed.

    Args:
        conn: Redis client.
        keys: Key space whose keys are removed.

    Returns:
        Number of keys deleted.
    """
    deleted = 0
    for pattern in keys.owned_patterns():
        batch: list[str] = []
        for key in conn.scan_iter(match=pattern, count=_DELETE_BATCH):
            batch.append(key)
            if len(batch) >= _DELETE_BATCH:
                deleted += conn.delete(*batch)
                batch = []
        if batch:
            deleted += conn.delete(*batch)

    logger.info(
        "namespace_reset",
        component="store",
        prefix=keys.prefix,
        keys_deleted=deleted,
    )
    return deleted
