"""
Voting Engine — phase-gated voting on bills.

Each bill moves through an explicit phase machine and never revisits a
phase:

    HOUSE → SENATE → (TIE_BREAK) → PRESIDENTIAL → CLOSED

1. HOUSE         — every House member votes once; when the number of votes
                   equals the live House size, the House passes the bill on a
                   strict yea > nay majority. Otherwise the bill stays here.
2. SENATE        — same mechanics for the Senate. A yea == nay result
                   requires a tie-break.
3. TIE_BREAK     — the current Vice President casts one deciding vote.
4. PRESIDENTIAL  — the current President approves or vetoes.
5. CLOSED        — no further votes are accepted.

A vote is handled in two steps. ``plan_vote`` validates the caller against
the bill's phase and computes the resulting transition without touching
state; ``apply`` executes a plan. Keeping the steps apart lets the Congress
facade journal a transition before committing it.

The dispatch order in ``plan_vote`` lets the Vice President and President
act outside the chamber-phase gate, and must not be reordered.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from congress_dao.constitution.schema import (
    Bill,
    BillPhase,
    MemberType,
    VotePosition,
    VoteTally,
)
from congress_dao.governance.bills import BillLedger
from congress_dao.governance.errors import (
    AlreadyVotedError,
    NoTieBreakRequiredError,
    NotActiveMemberError,
    NotCurrentVPError,
    OnlyHouseError,
    OnlyPresidentError,
    OnlySenateError,
    VotingClosedError,
    VotingNotAllowedError,
)
from congress_dao.governance.roster import Roster

logger = logging.getLogger(__name__)


class VoteAction(str, enum.Enum):
    """Which kind of vote a plan records."""

    HOUSE_VOTE = "house_vote"
    SENATE_VOTE = "senate_vote"
    TIE_BREAK = "tie_break"
    PRESIDENTIAL = "presidential"


@dataclass
class VotePlan:
    """A validated, not yet applied, vote and the transition it causes."""

    bill_index: int
    voter: str
    position: VotePosition
    action: VoteAction
    phase_before: BillPhase
    phase_after: BillPhase
    tally_after: VoteTally | None = None
    chamber_resolved: bool = False
    chamber_passed: bool = False

    def describe(self) -> dict:
        """Plain-data summary, suitable for a journal entry."""
        return {
            "bill_index": self.bill_index,
            "voter": self.voter,
            "position": self.position.value,
            "action": self.action.value,
            "phase_before": self.phase_before.value,
            "phase_after": self.phase_after.value,
            "tally_after": self.tally_after.model_dump() if self.tally_after else None,
            "chamber_resolved": self.chamber_resolved,
            "chamber_passed": self.chamber_passed,
        }


class VotingEngine:
    """Applies the phase protocol to bills held by a BillLedger."""

    def __init__(self, roster: Roster, ledger: BillLedger) -> None:
        self.roster = roster
        self.ledger = ledger

    def plan_vote(
        self,
        bill_index: int,
        caller: str,
        position: VotePosition,
        now: int,
    ) -> VotePlan:
        """
        Work out what a vote by ``caller`` would do, without applying it.

        Raises:
            NotActiveMemberError: Caller is not an active member.
            InvalidBillIndexError: No bill at ``bill_index``.
            NotCurrentVPError, NoTieBreakRequiredError, OnlyPresidentError,
            VotingClosedError, OnlyHouseError, OnlySenateError,
            AlreadyVotedError, VotingNotAllowedError: per phase rules.
        """
        if not self.roster.is_active(caller, now):
            raise NotActiveMemberError(f"{caller} is not an active member")

        bill = self.ledger.get(bill_index)
        voting = bill.voting
        phase = voting.phase
        role = self.roster.role_of(caller)

        # Tie-break: the Vice President acts only on a pending Senate tie
        if role == MemberType.VICE_PRESIDENT or phase == BillPhase.TIE_BREAK:
            if caller != self.roster.vice_president:
                raise NotCurrentVPError()
            if phase != BillPhase.TIE_BREAK:
                raise NoTieBreakRequiredError()
            return VotePlan(
                bill_index=bill_index,
                voter=caller,
                position=position,
                action=VoteAction.TIE_BREAK,
                phase_before=phase,
                phase_after=(
                    BillPhase.PRESIDENTIAL
                    if position == VotePosition.YEA
                    else BillPhase.CLOSED
                ),
                chamber_resolved=True,
                chamber_passed=position == VotePosition.YEA,
            )

        if phase == BillPhase.PRESIDENTIAL:
            if caller != self.roster.president:
                raise OnlyPresidentError()
            return VotePlan(
                bill_index=bill_index,
                voter=caller,
                position=position,
                action=VoteAction.PRESIDENTIAL,
                phase_before=phase,
                phase_after=BillPhase.CLOSED,
            )

        if not voting.voting_allowed:
            raise VotingClosedError()

        if phase == BillPhase.HOUSE:
            if role != MemberType.HOUSE:
                raise OnlyHouseError()
            return self._plan_chamber_vote(bill, caller, position, MemberType.HOUSE)

        if phase == BillPhase.SENATE:
            if role != MemberType.SENATE:
                raise OnlySenateError()
            return self._plan_chamber_vote(bill, caller, position, MemberType.SENATE)

        raise VotingNotAllowedError()

    def _plan_chamber_vote(
        self,
        bill: Bill,
        caller: str,
        position: VotePosition,
        chamber: MemberType,
    ) -> VotePlan:
        voting = bill.voting
        if chamber == MemberType.HOUSE:
            voters, tally, action = voting.house_voters, voting.house_votes, VoteAction.HOUSE_VOTE
        else:
            voters, tally, action = voting.senate_voters, voting.senate_votes, VoteAction.SENATE_VOTE

        if voting.has_voted(chamber, caller):
            raise AlreadyVotedError(f"{caller} has already voted on bill #{bill.index}")

        tally_after = tally.model_copy()
        tally_after.record(position)

        # Full participation is measured against the live chamber size
        resolved = len(voters) + 1 == self.roster.chamber_size(chamber)
        passed = resolved and tally_after.yea > tally_after.nay
        phase_after = voting.phase

        if resolved and chamber == MemberType.HOUSE:
            if passed:
                phase_after = BillPhase.SENATE
        elif resolved:
            if passed:
                phase_after = BillPhase.PRESIDENTIAL
            elif tally_after.yea == tally_after.nay:
                phase_after = BillPhase.TIE_BREAK

        return VotePlan(
            bill_index=bill.index,
            voter=caller,
            position=position,
            action=action,
            phase_before=voting.phase,
            phase_after=phase_after,
            tally_after=tally_after,
            chamber_resolved=resolved,
            chamber_passed=passed,
        )

    def apply(self, plan: VotePlan) -> Bill:
        """Commit a plan produced by ``plan_vote`` against the same state."""
        bill = self.ledger.get(plan.bill_index)
        voting = bill.voting

        if plan.action == VoteAction.HOUSE_VOTE:
            voting.house_votes = plan.tally_after
            voting.add_voter(MemberType.HOUSE, plan.voter)
            if plan.chamber_resolved:
                voting.passed_house = plan.chamber_passed
                logger.info(
                    "House resolved bill #%d: passed=%s (yea=%d nay=%d abstain=%d)",
                    bill.index, plan.chamber_passed, plan.tally_after.yea,
                    plan.tally_after.nay, plan.tally_after.abstain,
                )

        elif plan.action == VoteAction.SENATE_VOTE:
            voting.senate_votes = plan.tally_after
            voting.add_voter(MemberType.SENATE, plan.voter)
            if plan.chamber_resolved:
                voting.passed_senate = plan.chamber_passed
                voting.tie_break_required = plan.phase_after == BillPhase.TIE_BREAK
                logger.info(
                    "Senate resolved bill #%d: passed=%s tie=%s (yea=%d nay=%d abstain=%d)",
                    bill.index, plan.chamber_passed, voting.tie_break_required,
                    plan.tally_after.yea, plan.tally_after.nay, plan.tally_after.abstain,
                )

        elif plan.action == VoteAction.TIE_BREAK:
            voting.tie_break_decision = plan.position
            voting.passed_senate = plan.position == VotePosition.YEA
            voting.tie_break_required = False
            if plan.phase_after == BillPhase.CLOSED:
                voting.voting_allowed = False
            logger.info(
                "Tie broken on bill #%d by %s: %s",
                bill.index, plan.voter, plan.position.value,
            )

        elif plan.action == VoteAction.PRESIDENTIAL:
            voting.presidential_decision = plan.position
            voting.presidential_vote_cast = True
            voting.passed = plan.position == VotePosition.YEA
            voting.voting_allowed = False
            logger.info(
                "Presidential decision on bill #%d: %s",
                bill.index, plan.position.value,
            )

        voting.phase = plan.phase_after
        logger.info(
            "Vote cast: bill=#%d voter=%s position=%s phase=%s",
            bill.index, plan.voter, plan.position.value, voting.phase.value,
        )
        return bill

    def cast_vote(
        self,
        bill_index: int,
        caller: str,
        position: VotePosition,
        now: int,
    ) -> Bill:
        """Validate and apply a vote in one step."""
        return self.apply(self.plan_vote(bill_index, caller, position, now))
