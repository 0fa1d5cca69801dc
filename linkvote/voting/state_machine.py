"""Per-user vote state machine for a single article."""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class VoterState(str, Enum):
    """Where a user stands on one article.

    State transitions:
        UNVOTED -> UPVOTED: vote
        UNVOTED -> DOWNVOTED: disvote
        UPVOTED -> DOWNVOTED: exchange
        DOWNVOTED -> UPVOTED: exchange
    """

    UNVOTED = "UNVOTED"
    UPVOTED = "UPVOTED"
    DOWNVOTED = "DOWNVOTED"


class VoteAction(str, Enum):
    """Operations a user can perform on an article."""

    VOTE = "vote"
    DISVOTE = "disvote"
    EXCHANGE = "exchange"


@dataclass(frozen=True)
class VoteTransition:
    """A resolved state change and its effect on the article.

    Attributes:
        from_state: State before the vote.
        to_state: State after the vote.
        score_delta: Amount added to the score view entry.
        votes_delta: Change to the ``votes`` counter.
        disvotes_delta: Change to the ``disvotes`` counter.
    """

    from_state: VoterState
    to_state: VoterState
    score_delta: float
    votes_delta: int
    disvotes_delta: int


class VoteStateMachine:
    """Resolves (action, state) pairs into transitions.

    Pairs missing from the table are no-ops: repeat votes, voting after
    dis-voting, and exchanging a vote that was never cast.
    """

    TRANSITIONS: ClassVar[dict[tuple[VoteAction, VoterState], VoterState]] = {
        (VoteAction.VOTE, VoterState.UNVOTED): VoterState.UPVOTED,
        (VoteAction.DISVOTE, VoterState.UNVOTED): VoterState.DOWNVOTED,
        (VoteAction.EXCHANGE, VoterState.UPVOTED): VoterState.DOWNVOTED,
        (VoteAction.EXCHANGE, VoterState.DOWNVOTED): VoterState.UPVOTED,
    }

    def __init__(self, vote_score: float, disvote_score: float) -> None:
        """Initialize with the score constants.

        Args:
            vote_score: Positive score added by an up-vote.
            disvote_score: Negative score added by a dis-vote.
        """
        self._weights = {
            VoterState.UNVOTED: 0.0,
            VoterState.UPVOTED: vote_score,
            VoterState.DOWNVOTED: disvote_score,
        }

    def resolve(self, action: VoteAction, state: VoterState) -> VoteTransition | None:
        """Return the transition for ``action`` from ``state``, or None."""
        to_state = self.TRANSITIONS.get((action, state))
        if to_state is None:
            return None

        return VoteTransition(
            from_state=state,
            to_state=to_state,
            score_delta=self._weights[to_state] - self._weights[state],
            votes_delta=_count(to_state, VoterState.UPVOTED)
            - _count(state, VoterState.UPVOTED),
            disvotes_delta=_count(to_state, VoterState.DOWNVOTED)
            - _count(state, VoterState.DOWNVOTED),
        )


def _count(state: VoterState, target: VoterState) -> int:
    return 1 if state == target else 0
