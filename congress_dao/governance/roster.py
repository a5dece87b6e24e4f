"""
Roster — who holds which seat, and until when.

The roster owns the two chamber sequences, the Vice President and President
slots, and the index of every principal ever registered. Registration is
one-time per identity: a member whose term has lapsed stays on record,
stays counted in their chamber, and can never be registered again.

Registration is reachable only through the administrator's direct admission
or a ratified nomination; the Congress facade enforces that boundary.
"""

from __future__ import annotations

import logging

from congress_dao.constitution.schema import (
    HOUSE_CAPACITY,
    SENATE_CAPACITY,
    TERM_DURATIONS,
    Member,
    MemberType,
)
from congress_dao.governance.errors import (
    AlreadyMemberError,
    DistrictMustBeZeroError,
    HouseDistrictRequiredError,
    HouseFullError,
    PresidentActiveError,
    SenateDistrictMustBeZeroError,
    SenateFullError,
    VPActiveError,
)

logger = logging.getLogger(__name__)


class Roster:
    """
    Membership registry with term-bounded validity.

    Activity is a derived predicate (``term_end > now``); nothing is ever
    removed when a term lapses.
    """

    def __init__(
        self,
        house_capacity: int = HOUSE_CAPACITY,
        senate_capacity: int = SENATE_CAPACITY,
    ) -> None:
        self.house_capacity = house_capacity
        self.senate_capacity = senate_capacity
        self.members: dict[str, Member] = {}
        self.house: list[str] = []
        self.senate: list[str] = []
        self.vice_president: str | None = None
        self.president: str | None = None

    # ── Registration ────────────────────────────────────────────

    def check_registration(
        self,
        principal: str,
        member_type: MemberType,
        district: int,
        now: int,
    ) -> None:
        """
        Validate a registration without applying it.

        Raises:
            AlreadyMemberError: The principal was registered before, expired or not.
            HouseFullError / SenateFullError: The target chamber is at capacity.
            HouseDistrictRequiredError: House seat with district 0.
            SenateDistrictMustBeZeroError: Senate seat with a district.
            VPActiveError / PresidentActiveError: The incumbent is still serving.
            DistrictMustBeZeroError: Any other non-House seat with a district.
        """
        if principal in self.members:
            raise AlreadyMemberError(f"{principal} is already registered")

        if member_type == MemberType.HOUSE:
            if len(self.house) >= self.house_capacity:
                raise HouseFullError()
            if district == 0:
                raise HouseDistrictRequiredError()
        elif member_type == MemberType.SENATE:
            if len(self.senate) >= self.senate_capacity:
                raise SenateFullError()
            if district != 0:
                raise SenateDistrictMustBeZeroError()
        else:
            if member_type == MemberType.VICE_PRESIDENT:
                if self._incumbent_active(self.vice_president, now):
                    raise VPActiveError()
            elif member_type == MemberType.PRESIDENT:
                if self._incumbent_active(self.president, now):
                    raise PresidentActiveError()
            if district != 0:
                raise DistrictMustBeZeroError(
                    f"{member_type.value} seats must have district 0"
                )

    def build_member(
        self,
        principal: str,
        first_name: str,
        last_name: str,
        member_type: MemberType,
        state: str,
        district: int,
        now: int,
    ) -> Member:
        """
        Validate a registration and build its Member record without seating it.

        The term length comes from the role table; the term ends at
        ``now + duration``.

        Raises:
            pydantic.ValidationError: The record itself is malformed.
            CongressError: See ``check_registration``.
        """
        self.check_registration(principal, member_type, district, now)

        duration = TERM_DURATIONS[member_type]
        return Member(
            principal=principal,
            first_name=first_name,
            last_name=last_name,
            member_type=member_type,
            term_start=now,
            term_duration=duration,
            term_end=now + duration,
            state=state,
            district=district,
        )

    def seat(self, member: Member) -> Member:
        """Place a record produced by ``build_member`` into its seat."""
        principal = member.principal
        self.members[principal] = member
        if member.member_type == MemberType.HOUSE:
            self.house.append(principal)
        elif member.member_type == MemberType.SENATE:
            self.senate.append(principal)
        elif member.member_type == MemberType.VICE_PRESIDENT:
            self.vice_president = principal
        elif member.member_type == MemberType.PRESIDENT:
            self.president = principal

        logger.info(
            "Member registered: %s type=%s state=%s district=%d term_end=%d",
            principal, member.member_type.value, member.state, member.district,
            member.term_end,
        )
        return member

    def register_member(
        self,
        principal: str,
        first_name: str,
        last_name: str,
        member_type: MemberType,
        state: str,
        district: int,
        now: int,
    ) -> Member:
        """Register a principal into a seat starting at ``now``."""
        return self.seat(
            self.build_member(
                principal, first_name, last_name, member_type, state, district, now
            )
        )

    # ── Queries ─────────────────────────────────────────────────

    def get_member(self, principal: str) -> Member | None:
        return self.members.get(principal)

    def is_member(self, principal: str) -> bool:
        """Whether the principal was ever registered."""
        return principal in self.members

    def is_active(self, principal: str, now: int) -> bool:
        """Registered and still within term at ``now``."""
        member = self.members.get(principal)
        return member is not None and member.is_active_at(now)

    def role_of(self, principal: str) -> MemberType | None:
        member = self.members.get(principal)
        return member.member_type if member else None

    def chamber(self, member_type: MemberType) -> list[str]:
        """Ordered chamber roster, expired members included."""
        if member_type == MemberType.HOUSE:
            return list(self.house)
        if member_type == MemberType.SENATE:
            return list(self.senate)
        raise ValueError(f"{member_type.value} is not a chamber")

    def chamber_size(self, member_type: MemberType) -> int:
        """Number of seats ever filled in a chamber, expired members included."""
        if member_type == MemberType.HOUSE:
            return len(self.house)
        if member_type == MemberType.SENATE:
            return len(self.senate)
        raise ValueError(f"{member_type.value} is not a chamber")

    def active_members(self, now: int) -> list[Member]:
        return [m for m in self.members.values() if m.is_active_at(now)]

    def _incumbent_active(self, principal: str | None, now: int) -> bool:
        return principal is not None and self.is_active(principal, now)
