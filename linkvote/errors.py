"""Domain exceptions for the ranking and voting engine.

Store failures (``redis.RedisError``) are not wrapped: they propagate to the
caller unmodified. The exceptions here cover malformed caller input and
broken invariants in stored data. Rejected votes are never exceptions; they
are reported through ``VoteResult``.
"""


class LinkVoteError(Exception):
    """Base exception for all linkvote errors."""


class InvalidArticleKeyError(LinkVoteError, ValueError):
    """Raised when an article key is not of the form ``article:<id>``."""

    def __init__(self, article: str) -> None:
        """Initialize the error with the malformed key.

        Args:
            article: The article key that could not be parsed.
        """
        self.article = article
        super().__init__(f"Invalid article key: {article!r}")


class InvalidGroupError(LinkVoteError, ValueError):
    """Raised when a group name is empty.

    An empty name would make the cached group view key collide with the
    global view it is computed from.
    """

    def __init__(self, group: str) -> None:
        """Initialize the error with the rejected group name.

        Args:
            group: The group name that was given.
        """
        self.group = group
        super().__init__(f"Invalid group name: {group!r}")


class UnknownViewError(LinkVoteError, ValueError):
    """Raised when an order view name does not match a ranking view."""

    def __init__(self, name: str) -> None:
        """Initialize the error with the unknown view name.

        Args:
            name: The view name that was requested.
        """
        self.name = name
        super().__init__(f"Unknown ranking view: {name!r}")


class VoterMembershipError(LinkVoteError):
    """Raised when a user is recorded as both voter and dis-voter.

    This indicates corrupted membership data for an article; the engine
    refuses to pick a transition from it.
    """

    def __init__(self, article: str, user: str) -> None:
        """Initialize the error.

        Args:
            article: Article key whose membership sets disagree.
            user: User found in both sets.
        """
        self.article = article
        self.user = user
        super().__init__(
            f"User {user!r} is in both voted and disvoted sets of {article}"
        )
