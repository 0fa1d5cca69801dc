"""End-to-end tests through the ArticleBoard facade."""

import fakeredis
import pytest

from linkvote.board import ArticleBoard
from linkvote.errors import InvalidGroupError
from linkvote.settings import AppSettings
from linkvote.voting import VoteOutcome
from tests.helpers.store import make_redis
from tests.helpers.time import FIXED_NOW, FakeClock


@pytest.fixture
def conn() -> fakeredis.FakeRedis:
    """Create an isolated Redis."""
    return make_redis()


@pytest.fixture
def board(conn: fakeredis.FakeRedis) -> ArticleBoard:
    """Create a board without a key prefix."""
    return ArticleBoard(conn, AppSettings(), clock=FakeClock())


class TestScenario:
    """Walk-through of posting, voting and exchanging."""

    def test_post_vote_disvote_exchange(self, board: ArticleBoard) -> None:
        """Test counters after each step of the reference scenario."""
        article_id = board.post_article("alice", "T", "http://x")
        assert article_id == "1"
        article = board.catalog.get_article("article:1")
        assert article is not None
        assert article.votes == 1

        board.article_vote("article:1", "bob")
        article = board.catalog.get_article("article:1")
        assert article is not None
        assert article.votes == 2

        board.article_disvote("article:1", "carol")
        article = board.catalog.get_article("article:1")
        assert article is not None
        assert article.disvotes == 1

        board.exchange_vote("article:1", "carol")
        article = board.catalog.get_article("article:1")
        assert article is not None
        assert article.disvotes == 0
        assert article.votes == 3
        assert board.index.score_of("article:1") == FIXED_NOW + 3 * 432

    def test_groups_round_trip(self, board: ArticleBoard) -> None:
        """Test an article filed into a group shows up in its view."""
        board.post_article("alice", "T", "http://x")
        board.post_article("alice", "U", "http://y")
        board.article_vote("article:2", "bob")

        board.add_remove_groups("1", ["new-group"])
        board.add_remove_groups("2", ["new-group"])

        articles = board.get_group_articles("new-group", "score:", 1)
        assert [a.id for a in articles] == ["2", "1"]

    def test_rejections_are_silent(self, board: ArticleBoard) -> None:
        """Test rejected votes return results instead of raising."""
        board.post_article("alice", "T", "http://x")

        result = board.article_vote("article:1", "alice")

        assert result.outcome == VoteOutcome.ALREADY_VOTED

    def test_page_zero_lists_nothing(self, board: ArticleBoard) -> None:
        """Test an out-of-range page is empty rather than an error."""
        board.post_article("alice", "T", "http://x")
        board.add_remove_groups("1", ["g"])

        assert board.get_articles(0) == []
        assert board.get_group_articles("g", "score", 0) == []

    def test_empty_group_name_rejected(self, board: ArticleBoard) -> None:
        """Test an empty group never lists the whole board."""
        board.post_article("alice", "T", "http://x")

        with pytest.raises(InvalidGroupError):
            board.get_group_articles("", "score", 1)
        with pytest.raises(InvalidGroupError):
            board.add_remove_groups("1", [""])


class TestReset:
    """Tests for namespace-scoped reset."""

    def test_reset_clears_engine_keys_only(
        self, board: ArticleBoard, conn: fakeredis.FakeRedis
    ) -> None:
        """Test reset leaves keys outside the layout alone."""
        conn.set("session:abc", "keep")
        board.post_article("alice", "T", "http://x")
        board.article_disvote("article:1", "carol")
        board.add_remove_groups("1", ["g"])
        board.get_group_articles("g")

        deleted = board.reset()

        assert deleted == 8
        assert conn.keys("*") == ["session:abc"]
        assert board.get_articles() == []

    def test_reset_respects_prefix(self, conn: fakeredis.FakeRedis) -> None:
        """Test a prefixed board only clears its own namespace."""
        mine = ArticleBoard(conn, AppSettings(key_prefix="a:"), clock=FakeClock())
        theirs = ArticleBoard(conn, AppSettings(key_prefix="b:"), clock=FakeClock())
        mine.post_article("alice", "T", "http://x")
        theirs.post_article("bob", "U", "http://y")

        mine.reset()

        assert mine.get_articles() == []
        assert [a.title for a in theirs.get_articles()] == ["U"]

    def test_ids_restart_after_reset(self, board: ArticleBoard) -> None:
        """Test the id counter is part of the wiped state."""
        board.post_article("alice", "T", "http://x")
        board.reset()

        assert board.post_article("alice", "T", "http://x") == "1"
