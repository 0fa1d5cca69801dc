"""Voting engine: admits votes and applies their score effects."""

import math
import time
from collections.abc import Callable

import redis
import structlog
from redis.client import Pipeline

from linkvote.errors import VoterMembershipError
from linkvote.ranking import RankingIndex
from linkvote.settings import AppSettings
from linkvote.store.keys import KeySpace
from linkvote.voting.metrics import VotingMetrics
from linkvote.voting.models import VoteOutcome, VoteResult
from linkvote.voting.state_machine import (
    VoteAction,
    VoterState,
    VoteStateMachine,
    VoteTransition,
)


logger = structlog.get_logger()


class VotingEngine:
    """Validates and applies votes, dis-votes and vote exchanges.

    Each operation is one optimistic transaction: the article's voter sets
    are WATCHed, the time view and both memberships are read, and the
    resulting transition is written with MULTI/EXEC. A concurrent change to
    either set aborts the EXEC and the attempt is repeated, up to
    ``max_vote_attempts`` times.

    Rejected votes (closed window, repeat vote, exchange without a vote)
    raise nothing. The returned ``VoteResult`` says what happened.
    """

    def __init__(
        self,
        conn: redis.Redis,
        settings: AppSettings | None = None,
        keys: KeySpace | None = None,
        index: RankingIndex | None = None,
        metrics: VotingMetrics | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the engine.

        Args:
            conn: Redis client.
            settings: Engine settings.
            keys: Key space; defaults to one built from ``settings.key_prefix``.
            index: Ranking index holding the time and score views.
            metrics: Optional metrics instance.
            clock: Source of the current time in epoch seconds.
        """
        self._conn = conn
        self._settings = settings or AppSettings()
        self._keys = keys or KeySpace(self._settings.key_prefix)
        self._index = index or RankingIndex(conn, self._settings, self._keys)
        self._metrics = metrics or VotingMetrics.get_instance()
        self._clock = clock
        self._machine = VoteStateMachine(
            self._settings.vote_score, self._settings.disvote_score
        )
        self._log = logger.bind(component="voting")

    def article_vote(self, article: str, user: str) -> VoteResult:
        """Up-vote an article on behalf of a user who has not voted yet."""
        return self.apply(VoteAction.VOTE, article, user)

    def article_disvote(self, article: str, user: str) -> VoteResult:
        """Down-vote an article on behalf of a user who has not voted yet."""
        return self.apply(VoteAction.DISVOTE, article, user)

    def exchange_vote(self, article: str, user: str) -> VoteResult:
        """Flip a user's existing vote to the opposite side."""
        return self.apply(VoteAction.EXCHANGE, article, user)

    def state_of(self, article: str, user: str) -> VoterState:
        """Current vote state of ``user`` on ``article``."""
        return self._read_state(self._conn, article, user)

    def apply(self, action: VoteAction, article: str, user: str) -> VoteResult:
        """Run one vote action as an optimistic transaction.

        Args:
            action: Action to apply.
            article: Article key, e.g. ``article:1``.
            user: Voting user's id.

        Returns:
            Result carrying the outcome and the user's resulting state.

        Raises:
            InvalidArticleKeyError: If ``article`` is not an article key.
            VoterMembershipError: If the user is in both voter sets.
        """
        article_id = self._keys.article_id(article)
        watched = (self._keys.voted(article_id), self._keys.disvoted(article_id))
        log = self._log.bind(article=article, user=user, action=action.value)

        for attempt in range(1, self._settings.max_vote_attempts + 1):
            with self._conn.pipeline(transaction=True) as pipe:
                try:
                    pipe.watch(*watched)
                    return self._attempt(pipe, action, article, article_id, user)
                except redis.WatchError:
                    self._metrics.record_conflict()
                    log.debug("vote_watch_conflict", attempt=attempt)

        log.warning("vote_conflict", attempts=self._settings.max_vote_attempts)
        return self._ignored(action, article, user, VoteOutcome.CONFLICT)

    def _attempt(
        self,
        pipe: Pipeline,
        action: VoteAction,
        article: str,
        article_id: str,
        user: str,
    ) -> VoteResult:
        now = self._clock()
        created_at = self._index.time_of(article, pipe=pipe)
        if created_at is None:
            return self._ignored(action, article, user, VoteOutcome.NOT_FOUND)
        if created_at < now - self._settings.voting_window_seconds:
            return self._ignored(action, article, user, VoteOutcome.WINDOW_CLOSED)

        state = self._read_state(pipe, article, user)
        transition = self._machine.resolve(action, state)
        if transition is None:
            outcome = (
                VoteOutcome.NOT_VOTED
                if action == VoteAction.EXCHANGE
                else VoteOutcome.ALREADY_VOTED
            )
            return self._ignored(action, article, user, outcome, state)

        remaining = math.ceil(created_at + self._settings.voting_window_seconds - now)
        pipe.multi()
        self._queue_transition(pipe, transition, article, article_id, user)
        for key in (self._keys.voted(article_id), self._keys.disvoted(article_id)):
            pipe.expire(key, max(remaining, 1))
        pipe.execute()

        self._metrics.record_accepted(action.value)
        self._log.info(
            "vote_applied",
            article=article,
            user=user,
            action=action.value,
            from_state=transition.from_state.value,
            to_state=transition.to_state.value,
            score_delta=transition.score_delta,
        )
        return VoteResult(
            article=article,
            user=user,
            action=action,
            outcome=VoteOutcome.ACCEPTED,
            state=transition.to_state,
        )

    def _queue_transition(
        self,
        pipe: Pipeline,
        transition: VoteTransition,
        article: str,
        article_id: str,
        user: str,
    ) -> None:
        sets = {
            VoterState.UPVOTED: self._keys.voted(article_id),
            VoterState.DOWNVOTED: self._keys.disvoted(article_id),
        }
        target = sets[transition.to_state]
        if transition.from_state == VoterState.UNVOTED:
            pipe.sadd(target, user)
        else:
            pipe.smove(sets[transition.from_state], target, user)

        self._index.adjust_score(article, transition.score_delta, pipe=pipe)
        if transition.votes_delta:
            pipe.hincrby(article, "votes", transition.votes_delta)
        if transition.disvotes_delta:
            pipe.hincrby(article, "disvotes", transition.disvotes_delta)

    def _read_state(
        self, source: redis.Redis | Pipeline, article: str, user: str
    ) -> VoterState:
        article_id = self._keys.article_id(article)
        upvoted = source.sismember(self._keys.voted(article_id), user)
        downvoted = source.sismember(self._keys.disvoted(article_id), user)

        if upvoted and downvoted:
            self._log.error(
                "invariant_violation",
                error_type="voter_in_both_sets",
                article=article,
                user=user,
            )
            raise VoterMembershipError(article, user)
        if upvoted:
            return VoterState.UPVOTED
        if downvoted:
            return VoterState.DOWNVOTED
        return VoterState.UNVOTED

    def _ignored(
        self,
        action: VoteAction,
        article: str,
        user: str,
        outcome: VoteOutcome,
        state: VoterState | None = None,
    ) -> VoteResult:
        self._metrics.record_ignored(outcome.value)
        self._log.debug(
            "vote_ignored",
            article=article,
            user=user,
            action=action.value,
            outcome=outcome.value,
        )
        return VoteResult(
            article=article,
            user=user,
            action=action,
            outcome=outcome,
            state=state,
        )
