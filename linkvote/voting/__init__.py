"""Vote admission and score updates.

A user holds one of three states per article: unvoted, upvoted or
downvoted. Votes are only admitted inside the voting window, and every
admitted change is written atomically with its score and counter effects.
"""

from linkvote.voting.engine import VotingEngine
from linkvote.voting.metrics import VotingMetrics
from linkvote.voting.models import VoteOutcome, VoteResult
from linkvote.voting.state_machine import (
    VoteAction,
    VoterState,
    VoteStateMachine,
    VoteTransition,
)


__all__ = [
    "VoteAction",
    "VoteOutcome",
    "VoteResult",
    "VoteStateMachine",
    "VoteTransition",
    "VoterState",
    "VotingEngine",
    "VotingMetrics",
]
