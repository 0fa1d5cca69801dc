"""Integration tests for the voting engine."""

from unittest.mock import patch

import fakeredis
import pytest
import redis

from linkvote.catalog import ArticleCatalog
from linkvote.errors import InvalidArticleKeyError, VoterMembershipError
from linkvote.ranking import RankingIndex
from linkvote.settings import AppSettings
from linkvote.store import KeySpace
from linkvote.voting import (
    VoteAction,
    VoteOutcome,
    VoterState,
    VotingEngine,
    VotingMetrics,
)
from tests.helpers.store import make_redis
from tests.helpers.time import FIXED_NOW, ONE_WEEK, FakeClock


ARTICLE = "article:1"
INITIAL_SCORE = FIXED_NOW + 432


@pytest.fixture
def conn() -> fakeredis.FakeRedis:
    """Create an isolated Redis."""
    return make_redis()


@pytest.fixture
def clock() -> FakeClock:
    """Create a clock pinned to FIXED_NOW."""
    return FakeClock()


@pytest.fixture
def metrics() -> VotingMetrics:
    """Create fresh voting metrics."""
    return VotingMetrics()


@pytest.fixture
def engine(
    conn: fakeredis.FakeRedis, clock: FakeClock, metrics: VotingMetrics
) -> VotingEngine:
    """Create an engine with one article posted by alice."""
    settings = AppSettings()
    keys = KeySpace()
    index = RankingIndex(conn, settings, keys)
    ArticleCatalog(conn, settings, keys, index, clock=clock).post_article(
        "alice", "T", "http://x"
    )
    return VotingEngine(conn, settings, keys, index, metrics=metrics, clock=clock)


def _counters(conn: fakeredis.FakeRedis) -> tuple[int, int, float]:
    record = conn.hgetall(ARTICLE)
    return (
        int(record["votes"]),
        int(record.get("disvotes", 0)),
        conn.zscore("score:", ARTICLE),
    )


class TestArticleVote:
    """Tests for up-votes."""

    def test_first_vote_counts(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test a new voter adds one vote and the vote bonus."""
        result = engine.article_vote(ARTICLE, "bob")

        assert result.accepted
        assert result.state == VoterState.UPVOTED
        assert _counters(conn) == (2, 0, INITIAL_SCORE + 432)
        assert conn.sismember("voted:1", "bob")

    def test_repeat_vote_is_no_op(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test voting twice counts once."""
        engine.article_vote(ARTICLE, "bob")
        result = engine.article_vote(ARTICLE, "bob")

        assert not result.accepted
        assert result.outcome == VoteOutcome.ALREADY_VOTED
        assert _counters(conn) == (2, 0, INITIAL_SCORE + 432)

    def test_poster_cannot_vote_again(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test the poster's implicit vote blocks a second one."""
        result = engine.article_vote(ARTICLE, "alice")

        assert result.outcome == VoteOutcome.ALREADY_VOTED
        assert _counters(conn) == (1, 0, INITIAL_SCORE)

    def test_vote_after_disvote_is_no_op(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test a dis-voter cannot also vote up."""
        engine.article_disvote(ARTICLE, "carol")
        result = engine.article_vote(ARTICLE, "carol")

        assert result.outcome == VoteOutcome.ALREADY_VOTED
        assert result.state == VoterState.DOWNVOTED
        assert not conn.sismember("voted:1", "carol")


class TestArticleDisVote:
    """Tests for dis-votes."""

    def test_first_disvote_counts(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test a new dis-voter adds one dis-vote and subtracts the bonus."""
        result = engine.article_disvote(ARTICLE, "carol")

        assert result.accepted
        assert _counters(conn) == (1, 1, INITIAL_SCORE - 432)
        assert conn.sismember("disvoted:1", "carol")

    def test_disvoted_set_expires_with_window(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis, clock: FakeClock
    ) -> None:
        """Test the dis-voter set expires at the end of the voting window."""
        clock.advance(86400)
        engine.article_disvote(ARTICLE, "carol")

        assert 0 < conn.ttl("disvoted:1") <= ONE_WEEK - 86400

    def test_repeat_disvote_is_no_op(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test dis-voting twice counts once."""
        engine.article_disvote(ARTICLE, "carol")
        engine.article_disvote(ARTICLE, "carol")

        assert _counters(conn) == (1, 1, INITIAL_SCORE - 432)

    def test_disvote_after_vote_is_no_op(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test an up-voter cannot also dis-vote."""
        engine.article_vote(ARTICLE, "bob")
        result = engine.article_disvote(ARTICLE, "bob")

        assert result.outcome == VoteOutcome.ALREADY_VOTED
        assert _counters(conn) == (2, 0, INITIAL_SCORE + 432)


class TestExchangeVote:
    """Tests for vote exchanges."""

    def test_exchange_never_voted_is_no_op(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test exchanging without a vote changes nothing."""
        result = engine.exchange_vote(ARTICLE, "dave")

        assert result.outcome == VoteOutcome.NOT_VOTED
        assert result.state == VoterState.UNVOTED
        assert _counters(conn) == (1, 0, INITIAL_SCORE)

    def test_exchange_upvote(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test an up-vote becomes a dis-vote."""
        engine.article_vote(ARTICLE, "bob")
        result = engine.exchange_vote(ARTICLE, "bob")

        assert result.accepted
        assert result.state == VoterState.DOWNVOTED
        assert _counters(conn) == (1, 1, INITIAL_SCORE - 432)
        assert not conn.sismember("voted:1", "bob")
        assert conn.sismember("disvoted:1", "bob")

    def test_exchange_downvote(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test a dis-vote becomes an up-vote."""
        engine.article_disvote(ARTICLE, "carol")
        engine.exchange_vote(ARTICLE, "carol")

        assert _counters(conn) == (2, 0, INITIAL_SCORE + 432)
        assert engine.state_of(ARTICLE, "carol") == VoterState.UPVOTED

    def test_double_exchange_restores_state(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test vote, exchange, exchange returns to the voted counters."""
        engine.article_vote(ARTICLE, "bob")
        before = _counters(conn)

        engine.exchange_vote(ARTICLE, "bob")
        engine.exchange_vote(ARTICLE, "bob")

        assert _counters(conn) == before
        assert engine.state_of(ARTICLE, "bob") == VoterState.UPVOTED

    def test_poster_can_exchange(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test the poster's implicit vote can be flipped."""
        engine.exchange_vote(ARTICLE, "alice")

        assert _counters(conn) == (0, 1, INITIAL_SCORE - 864)
        assert conn.ttl("disvoted:1") > 0


class TestVotingWindow:
    """Tests for the voting window cutoff."""

    @pytest.mark.parametrize("action", list(VoteAction))
    def test_closed_window_is_no_op(
        self,
        engine: VotingEngine,
        conn: fakeredis.FakeRedis,
        clock: FakeClock,
        action: VoteAction,
    ) -> None:
        """Test nothing changes once the article is older than a week."""
        engine.article_disvote(ARTICLE, "carol")
        before = _counters(conn)
        clock.advance(ONE_WEEK + 1)

        result = engine.apply(action, ARTICLE, "carol")
        other = engine.apply(action, ARTICLE, "erin")

        assert result.outcome == VoteOutcome.WINDOW_CLOSED
        assert other.outcome == VoteOutcome.WINDOW_CLOSED
        assert _counters(conn) == before

    def test_window_edge_still_open(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis, clock: FakeClock
    ) -> None:
        """Test a vote exactly one week after posting is admitted."""
        clock.advance(ONE_WEEK)

        assert engine.article_vote(ARTICLE, "bob").accepted
        assert _counters(conn)[0] == 2

    def test_unknown_article_is_no_op(self, engine: VotingEngine) -> None:
        """Test votes on articles missing from the time view are ignored."""
        result = engine.article_vote("article:404", "bob")

        assert result.outcome == VoteOutcome.NOT_FOUND
        assert not result.accepted

    def test_malformed_article_key(self, engine: VotingEngine) -> None:
        """Test malformed keys are caller errors, not silent no-ops."""
        with pytest.raises(InvalidArticleKeyError):
            engine.article_vote("1", "bob")


class TestTransactions:
    """Tests for optimistic transaction handling."""

    def test_retries_after_watch_conflict(
        self,
        engine: VotingEngine,
        conn: fakeredis.FakeRedis,
        metrics: VotingMetrics,
    ) -> None:
        """Test a WATCH conflict restarts the attempt."""
        original = engine._attempt
        calls: list[object] = []

        def flaky(*args: object) -> object:
            calls.append(args)
            if len(calls) == 1:
                raise redis.WatchError
            return original(*args)

        with patch.object(engine, "_attempt", side_effect=flaky):
            result = engine.article_vote(ARTICLE, "bob")

        assert result.accepted
        assert len(calls) == 2
        assert metrics.watch_conflicts_total == 1
        assert _counters(conn)[0] == 2

    def test_gives_up_after_max_attempts(
        self,
        engine: VotingEngine,
        conn: fakeredis.FakeRedis,
        metrics: VotingMetrics,
    ) -> None:
        """Test persistent conflicts end in a CONFLICT result."""
        with patch.object(
            engine, "_attempt", side_effect=redis.WatchError
        ) as attempt:
            result = engine.article_vote(ARTICLE, "bob")

        assert result.outcome == VoteOutcome.CONFLICT
        assert attempt.call_count == 5
        assert metrics.watch_conflicts_total == 5
        assert _counters(conn) == (1, 0, INITIAL_SCORE)

    def test_store_errors_propagate(self, engine: VotingEngine) -> None:
        """Test store failures are raised unmodified and not retried."""
        with patch.object(
            engine, "_attempt", side_effect=redis.ConnectionError("down")
        ) as attempt:
            with pytest.raises(redis.ConnectionError):
                engine.article_vote(ARTICLE, "bob")

        assert attempt.call_count == 1

    def test_voter_in_both_sets(
        self, engine: VotingEngine, conn: fakeredis.FakeRedis
    ) -> None:
        """Test corrupted membership raises instead of picking a side."""
        conn.sadd("voted:1", "mallory")
        conn.sadd("disvoted:1", "mallory")

        with pytest.raises(VoterMembershipError):
            engine.exchange_vote(ARTICLE, "mallory")


class TestVotingMetricsRecorded:
    """Tests for metrics emitted by the engine."""

    def test_outcomes_counted(
        self, engine: VotingEngine, metrics: VotingMetrics
    ) -> None:
        """Test accepted and ignored votes are tallied."""
        engine.article_vote(ARTICLE, "bob")
        engine.article_vote(ARTICLE, "bob")
        engine.exchange_vote(ARTICLE, "dave")

        assert metrics.accepted_by_action == {"vote": 1}
        assert metrics.ignored_by_outcome == {"ALREADY_VOTED": 1, "NOT_VOTED": 1}
