"""
Congressional Schema — Pydantic models for members, bills and nominations.

These models are the canonical data structures of the governance state
machine. They describe who sits in which chamber and for how long, what a
bill carries through its voting phases, and what a pending nomination holds
while peers ratify it.

Time is logical: integer seconds supplied by a Clock, never read from the
wall clock inside this module.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field, PrivateAttr, computed_field, model_validator


# ════════════════════════════════════════════════════════════════
# Constants
# ════════════════════════════════════════════════════════════════

SECONDS_PER_YEAR = 365 * 24 * 60 * 60

HOUSE_CAPACITY = 435
SENATE_CAPACITY = 100

NULL_PRINCIPAL = "0x" + "0" * 40


def is_null_principal(principal: str | None) -> bool:
    """True for a missing identity: None, empty, or the all-zero address."""
    if not principal:
        return True
    return principal.lower() == NULL_PRINCIPAL


# ════════════════════════════════════════════════════════════════
# Enumerations
# ════════════════════════════════════════════════════════════════


class MemberType(str, enum.Enum):
    """Seat a member holds."""

    HOUSE = "house"
    SENATE = "senate"
    VICE_PRESIDENT = "vice_president"
    NON_VOTING = "non_voting"
    PRESIDENT = "president"


class VotePosition(str, enum.Enum):
    """Voting positions on a bill."""

    NAY = "nay"
    YEA = "yea"
    ABSTAIN = "abstain"


class BillPhase(str, enum.Enum):
    """Position of a bill in its voting state machine."""

    HOUSE = "house"
    SENATE = "senate"
    TIE_BREAK = "tie_break"
    PRESIDENTIAL = "presidential"
    CLOSED = "closed"


# Seats that can be filled through peer nomination and ratification
NOMINABLE_TYPES = frozenset({MemberType.HOUSE, MemberType.SENATE})

# Singleton executive seats
SINGLETON_TYPES = frozenset({MemberType.VICE_PRESIDENT, MemberType.PRESIDENT})

TERM_DURATIONS: dict[MemberType, int] = {
    MemberType.HOUSE: 2 * SECONDS_PER_YEAR,
    MemberType.SENATE: 6 * SECONDS_PER_YEAR,
    MemberType.NON_VOTING: 2 * SECONDS_PER_YEAR,
    MemberType.VICE_PRESIDENT: 4 * SECONDS_PER_YEAR,
    MemberType.PRESIDENT: 4 * SECONDS_PER_YEAR,
}


# ════════════════════════════════════════════════════════════════
# Membership
# ════════════════════════════════════════════════════════════════


class Member(BaseModel):
    """
    A registered member and the window during which their seat is valid.

    Activity is derived from the term window rather than stored: a member
    whose term has elapsed simply stops satisfying ``is_active_at``. Records
    are never deleted, so a principal can be registered at most once.
    """

    principal: str
    first_name: str
    last_name: str
    member_type: MemberType
    term_start: int = Field(description="Logical time the term began")
    term_duration: int = Field(description="Length of the term in seconds")
    term_end: int = Field(description="term_start + term_duration")
    state: str = Field(description="State the member represents")
    district: int = Field(default=0, description="Congressional district (House only)")

    @model_validator(mode="after")
    def _check_invariants(self) -> Member:
        if self.term_end != self.term_start + self.term_duration:
            raise ValueError("term_end must equal term_start + term_duration")
        if self.member_type == MemberType.HOUSE and self.district == 0:
            raise ValueError("House members must have a nonzero district")
        if self.member_type != MemberType.HOUSE and self.district != 0:
            raise ValueError("Only House members carry a district")
        return self

    @computed_field
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def is_active_at(self, now: int) -> bool:
        """Whether ``now`` falls inside the term window ``[term_start, term_end)``."""
        return self.term_start <= now < self.term_end


# ════════════════════════════════════════════════════════════════
# Bills
# ════════════════════════════════════════════════════════════════


class VoteTally(BaseModel):
    """Per-chamber vote counts."""

    yea: int = 0
    nay: int = 0
    abstain: int = 0

    @property
    def total(self) -> int:
        return self.yea + self.nay + self.abstain

    def record(self, position: VotePosition) -> None:
        if position == VotePosition.YEA:
            self.yea += 1
        elif position == VotePosition.NAY:
            self.nay += 1
        else:
            self.abstain += 1


class BillMetadata(BaseModel):
    """Descriptive, immutable header of a bill."""

    title: str
    enacting_clause: str
    proposed_at: int = Field(description="Logical time of proposal")
    effective_at: int = Field(description="Logical time the bill takes effect")


class BillSponsorship(BaseModel):
    """Members backing a bill."""

    sponsors: list[str] = Field(min_length=1)
    cosponsors: list[str] = Field(default_factory=list)


class BillVoting(BaseModel):
    """
    Voting sub-state of a bill.

    ``phase`` is authoritative; the boolean flags mirror it for readers that
    expect the flag view (passed_house, tie_break_required, ...).
    """

    phase: BillPhase = BillPhase.HOUSE
    passed_house: bool = False
    passed_senate: bool = False
    passed: bool = False
    tie_break_required: bool = False
    voting_allowed: bool = True

    house_votes: VoteTally = Field(default_factory=VoteTally)
    senate_votes: VoteTally = Field(default_factory=VoteTally)
    house_voters: list[str] = Field(default_factory=list, description="House voters in vote order")
    senate_voters: list[str] = Field(default_factory=list, description="Senate voters in vote order")

    tie_break_decision: VotePosition | None = None
    presidential_decision: VotePosition | None = None
    presidential_vote_cast: bool = False

    _house_index: set[str] = PrivateAttr(default_factory=set)
    _senate_index: set[str] = PrivateAttr(default_factory=set)

    def model_post_init(self, __context) -> None:
        self._house_index = set(self.house_voters)
        self._senate_index = set(self.senate_voters)

    def has_voted(self, chamber: MemberType, principal: str) -> bool:
        if chamber == MemberType.HOUSE:
            return principal in self._house_index
        return principal in self._senate_index

    def add_voter(self, chamber: MemberType, principal: str) -> None:
        if chamber == MemberType.HOUSE:
            self.house_voters.append(principal)
            self._house_index.add(principal)
        else:
            self.senate_voters.append(principal)
            self._senate_index.add(principal)


class Bill(BaseModel):
    """A proposed bill — immutable apart from its voting sub-state."""

    index: int = Field(description="Position in the bill history")
    metadata: BillMetadata
    sponsorship: BillSponsorship
    voting: BillVoting = Field(default_factory=BillVoting)
    sections: list[str] = Field(min_length=1)
    definitions: list[str] = Field(default_factory=list)


# ════════════════════════════════════════════════════════════════
# Nominations
# ════════════════════════════════════════════════════════════════


class Nomination(BaseModel):
    """A pending peer nomination for a House or Senate seat."""

    candidate: str
    first_name: str
    last_name: str
    member_type: MemberType
    state: str
    district: int = 0
    nominated_by: str
    nominated_at: int
    ratification_count: int = 0
    ratifiers: list[str] = Field(default_factory=list)
    ratified: bool = False
