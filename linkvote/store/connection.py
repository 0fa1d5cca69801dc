"""Redis connection setup."""

import redis
import structlog


logger = structlog.get_logger()


def connect(redis_url: str) -> redis.Redis:
    """Open a Redis client and verify the server answers.

    Responses are decoded to ``str`` so hashes and members come back as
    text.

    Args:
        redis_url: Connection URL such as ``redis://localhost:6379/0``.

    Returns:
        Connected Redis client.

    Raises:
        redis.ConnectionError: If the server cannot be reached.
    """
    log = logger.bind(component="store")
    client = redis.Redis.from_url(redis_url, decode_responses=True)
    kwargs = client.connection_pool.connection_kwargs

    try:
        client.ping()
    except redis.RedisError as e:
        log.error(
            "redis_connection_failed",
            host=kwargs.get("host"),
            port=kwargs.get("port"),
            error=str(e),
        )
        raise

    log.info(
        "redis_connected",
        host=kwargs.get("host"),
        port=kwargs.get("port"),
        db=kwargs.get("db"),
    )
    return client
