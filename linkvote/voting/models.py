"""Result models for vote operations."""

from dataclasses import dataclass
from enum import Enum

from linkvote.voting.state_machine import VoteAction, VoterState


class VoteOutcome(str, Enum):
    """Why a vote was or was not applied.

    - ACCEPTED: state changed, score and counters updated
    - WINDOW_CLOSED: article is older than the voting window
    - NOT_FOUND: article is not in the time view
    - ALREADY_VOTED: vote or dis-vote from a user who already took a side
    - NOT_VOTED: exchange requested by a user who never voted
    - CONFLICT: concurrent writers kept invalidating the transaction
    """

    ACCEPTED = "ACCEPTED"
    WINDOW_CLOSED = "WINDOW_CLOSED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_VOTED = "ALREADY_VOTED"
    NOT_VOTED = "NOT_VOTED"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class VoteResult:
    """Outcome of a vote, dis-vote or exchange.

    Rejections are not errors. Callers that do not care can ignore the
    result; callers that do can check ``accepted``.
    """

    article: str
    user: str
    action: VoteAction
    outcome: VoteOutcome
    state: VoterState | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome == VoteOutcome.ACCEPTED
