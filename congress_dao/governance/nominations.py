"""
Nomination Registry — admitting new members by peer ratification.

Any active member may nominate a candidate for a House or Senate seat.
Active members then ratify the nomination one at a time. The threshold is
half the target chamber's size, rounded down and read fresh on every
ratification; the candidate is admitted the moment the count strictly
exceeds it. A nomination that stops exactly at the threshold stays pending
forever.

An admitting ratification builds the candidate's Member record from the
stored nomination fields while planning; applying it seats the member and
drops the nomination.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from congress_dao.constitution.schema import (
    NOMINABLE_TYPES,
    Member,
    MemberType,
    Nomination,
    is_null_principal,
)
from congress_dao.governance.errors import (
    AlreadyMemberError,
    AlreadyNominatedError,
    AlreadyRatifiedError,
    HouseDistrictRequiredError,
    InvalidAddressError,
    InvalidNominationRoleError,
    NominationNotFoundError,
    NotActiveMemberError,
    SenateDistrictMustBeZeroError,
)
from congress_dao.governance.roster import Roster

logger = logging.getLogger(__name__)


@dataclass
class RatificationPlan:
    """A validated, not yet applied, ratification."""

    candidate: str
    ratifier: str
    count_after: int
    threshold: int
    member: Member | None = None  # built only when the plan admits

    @property
    def admits(self) -> bool:
        return self.count_after > self.threshold

    def describe(self) -> dict:
        return {
            "candidate": self.candidate,
            "ratifier": self.ratifier,
            "ratification_count": self.count_after,
            "threshold": self.threshold,
            "admitted": self.admits,
        }


@dataclass
class RatificationResult:
    """Outcome of an applied ratification."""

    candidate: str
    ratification_count: int
    threshold: int
    member: Member | None = None

    @property
    def admitted(self) -> bool:
        return self.member is not None


class NominationRegistry:
    """Pending nominations keyed by candidate."""

    def __init__(self, roster: Roster) -> None:
        self.roster = roster
        self.nominations: dict[str, Nomination] = {}

    # ── Nomination ──────────────────────────────────────────────

    def check_nomination(
        self,
        caller: str,
        candidate: str,
        member_type: MemberType,
        district: int,
        now: int,
    ) -> None:
        """Validate a nomination without recording it."""
        if not self.roster.is_active(caller, now):
            raise NotActiveMemberError(f"{caller} is not an active member")
        if member_type not in NOMINABLE_TYPES:
            raise InvalidNominationRoleError(
                f"Cannot nominate for a {member_type.value} seat"
            )
        if is_null_principal(candidate):
            raise InvalidAddressError()
        if self.roster.is_member(candidate):
            raise AlreadyMemberError(f"{candidate} is already registered")
        if candidate in self.nominations:
            raise AlreadyNominatedError(f"{candidate} already has a pending nomination")
        if member_type == MemberType.HOUSE and district == 0:
            raise HouseDistrictRequiredError()
        if member_type == MemberType.SENATE and district != 0:
            raise SenateDistrictMustBeZeroError()

    def build_nomination(
        self,
        caller: str,
        candidate: str,
        first_name: str,
        last_name: str,
        member_type: MemberType,
        state: str,
        district: int,
        now: int,
    ) -> Nomination:
        """Validate a nomination and build it, with no ratifications, without opening it."""
        self.check_nomination(caller, candidate, member_type, district, now)

        return Nomination(
            candidate=candidate,
            first_name=first_name,
            last_name=last_name,
            member_type=member_type,
            state=state,
            district=district,
            nominated_by=caller,
            nominated_at=now,
        )

    def open(self, nomination: Nomination) -> Nomination:
        """Record a nomination produced by ``build_nomination``."""
        self.nominations[nomination.candidate] = nomination
        logger.info(
            "Nomination opened: candidate=%s type=%s by=%s",
            nomination.candidate, nomination.member_type.value, nomination.nominated_by,
        )
        return nomination

    def nominate_member(
        self,
        caller: str,
        candidate: str,
        first_name: str,
        last_name: str,
        member_type: MemberType,
        state: str,
        district: int,
        now: int,
    ) -> Nomination:
        """Open a nomination with no ratifications."""
        return self.open(
            self.build_nomination(
                caller, candidate, first_name, last_name, member_type, state, district, now
            )
        )

    # ── Ratification ────────────────────────────────────────────

    def plan_ratification(self, caller: str, candidate: str, now: int) -> RatificationPlan:
        """
        Validate a ratification and work out whether it admits the candidate.

        When it does, the candidate's Member record is built here as well, so
        a full chamber or a malformed record rejects the ratification before
        anything changes.
        """
        if not self.roster.is_active(caller, now):
            raise NotActiveMemberError(f"{caller} is not an active member")

        nomination = self.nominations.get(candidate)
        if nomination is None:
            raise NominationNotFoundError()
        if caller in nomination.ratifiers:
            raise AlreadyRatifiedError()

        plan = RatificationPlan(
            candidate=candidate,
            ratifier=caller,
            count_after=nomination.ratification_count + 1,
            threshold=self.roster.chamber_size(nomination.member_type) // 2,
        )
        if plan.admits:
            plan.member = self.roster.build_member(
                principal=nomination.candidate,
                first_name=nomination.first_name,
                last_name=nomination.last_name,
                member_type=nomination.member_type,
                state=nomination.state,
                district=nomination.district,
                now=now,
            )
        return plan

    def apply(self, plan: RatificationPlan) -> RatificationResult:
        """Commit a plan produced by ``plan_ratification``."""
        nomination = self.nominations[plan.candidate]

        if plan.admits:
            self.roster.seat(plan.member)

        nomination.ratifiers.append(plan.ratifier)
        nomination.ratification_count = plan.count_after
        result = RatificationResult(
            candidate=plan.candidate,
            ratification_count=plan.count_after,
            threshold=plan.threshold,
            member=plan.member,
        )

        if plan.admits:
            nomination.ratified = True
            del self.nominations[plan.candidate]
            logger.info(
                "Nomination ratified: candidate=%s count=%d threshold=%d",
                plan.candidate, plan.count_after, plan.threshold,
            )
        else:
            logger.info(
                "Ratification recorded: candidate=%s count=%d threshold=%d",
                plan.candidate, plan.count_after, plan.threshold,
            )
        return result

    def ratify_member(self, caller: str, candidate: str, now: int) -> RatificationResult:
        return self.apply(self.plan_ratification(caller, candidate, now))

    # ── Queries ─────────────────────────────────────────────────

    def get(self, candidate: str) -> Nomination | None:
        return self.nominations.get(candidate)

    def is_nominated(self, candidate: str) -> bool:
        return candidate in self.nominations

    def pending(self) -> list[Nomination]:
        return list(self.nominations.values())
