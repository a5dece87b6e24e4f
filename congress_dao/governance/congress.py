"""
Congress — the serialized entry point to the governance state machine.

The facade owns the single lock, the clock, the administrator identity and
the optional National Record journal. Every public operation:

1. reads the clock once,
2. validates the whole transition and builds every record it creates
   (nothing is mutated yet),
3. appends the transition to the journal, if one is configured,
4. applies the prebuilt records to the Roster, Bill Ledger or Nomination
   Registry.

A failure at any step before 4 leaves state exactly as it was. Reads run
under the same lock and return copies, so callers never hold references to
live state.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from congress_dao.constitution.schema import (
    Bill,
    BillMetadata,
    HOUSE_CAPACITY,
    Member,
    MemberType,
    Nomination,
    SENATE_CAPACITY,
    VotePosition,
)
from congress_dao.governance.bills import BillLedger
from congress_dao.governance.clock import Clock, SystemClock
from congress_dao.governance.errors import NotOwnerError
from congress_dao.governance.nominations import NominationRegistry, RatificationResult
from congress_dao.governance.roster import Roster
from congress_dao.governance.voting import VotingEngine
from congress_dao.ledger.models import LedgerEntryType

logger = logging.getLogger(__name__)


class Congress:
    """
    A legislature of two chambers and two executive seats.

    The administrator (``owner``) is fixed at construction and may admit
    members directly; everyone else enters through nomination.
    """

    def __init__(
        self,
        owner: str,
        clock: Clock | None = None,
        ledger_service: Any = None,
        house_capacity: int = HOUSE_CAPACITY,
        senate_capacity: int = SENATE_CAPACITY,
    ) -> None:
        """
        Args:
            owner: Principal allowed to call ``add_member``.
            clock: Source of logical time. Defaults to the wall clock.
            ledger_service: LedgerService journaling each transition, or None.
            house_capacity: Maximum House seats.
            senate_capacity: Maximum Senate seats.
        """
        self.owner = owner
        self.clock = clock or SystemClock()
        self.ledger_service = ledger_service
        self.roster = Roster(house_capacity=house_capacity, senate_capacity=senate_capacity)
        self.bills = BillLedger(self.roster)
        self.voting = VotingEngine(self.roster, self.bills)
        self.nominations = NominationRegistry(self.roster)
        self._lock = threading.RLock()

    # ── State-changing operations ───────────────────────────────

    def add_member(
        self,
        caller: str,
        principal: str,
        first_name: str,
        last_name: str,
        member_type: MemberType | str,
        state: str,
        district: int = 0,
    ) -> Member:
        """
        Admit a member directly. Administrator only.

        Raises:
            NotOwnerError: Caller is not the administrator.
            AlreadyMemberError, HouseFullError, SenateFullError,
            HouseDistrictRequiredError, DistrictMustBeZeroError,
            VPActiveError, PresidentActiveError: see Roster.check_registration.
        """
        member_type = MemberType(member_type)
        with self._lock:
            now = self.clock.now()
            if caller != self.owner:
                raise NotOwnerError()
            member = self.roster.build_member(
                principal, first_name, last_name, member_type, state, district, now
            )

            self._record(LedgerEntryType.MEMBER_ADMISSION, caller, now, {
                **member.model_dump(mode="json"),
                "via": "administrator",
            })
            self.roster.seat(member)
            return member.model_copy(deep=True)

    def propose_bill(
        self,
        caller: str,
        title: str,
        enacting_clause: str,
        sections: list[str],
        definitions: list[str],
        effective_at: int,
        sponsors: list[str],
        cosponsors: list[str] | None = None,
    ) -> int:
        """
        Propose a bill. Any active member.

        Returns:
            The index of the new bill in the bill history.

        Raises:
            NotActiveMemberError, SponsorRequiredError, SectionRequiredError,
            EffectiveDatePastError, InvalidSponsorError, InvalidCosponsorError.
        """
        cosponsors = list(cosponsors or [])
        with self._lock:
            now = self.clock.now()
            bill = self.bills.build_bill(
                caller, title, enacting_clause, sections, definitions,
                effective_at, sponsors, cosponsors, now,
            )

            self._record(LedgerEntryType.BILL_PROPOSAL, caller, now, {
                "index": bill.index,
                "metadata": bill.metadata.model_dump(mode="json"),
                "sponsorship": bill.sponsorship.model_dump(mode="json"),
                "sections": bill.sections,
                "definitions": bill.definitions,
            })
            self.bills.append(bill, caller)
            return bill.index

    def cast_vote(
        self,
        caller: str,
        bill_index: int,
        position: VotePosition | str,
    ) -> Bill:
        """
        Vote on a bill in whatever capacity its current phase allows.

        Returns:
            A copy of the bill after the vote.
        """
        position = VotePosition(position)
        with self._lock:
            now = self.clock.now()
            plan = self.voting.plan_vote(bill_index, caller, position, now)
            self._record(LedgerEntryType.VOTE_RECORD, caller, now, plan.describe())
            bill = self.voting.apply(plan)
            return bill.model_copy(deep=True)

    def nominate_member(
        self,
        caller: str,
        candidate: str,
        first_name: str,
        last_name: str,
        member_type: MemberType | str,
        state: str,
        district: int = 0,
    ) -> Nomination:
        """
        Nominate a candidate for a House or Senate seat. Any active member.

        Raises:
            NotActiveMemberError, InvalidNominationRoleError,
            InvalidAddressError, AlreadyMemberError, AlreadyNominatedError,
            HouseDistrictRequiredError, SenateDistrictMustBeZeroError.
        """
        member_type = MemberType(member_type)
        with self._lock:
            now = self.clock.now()
            nomination = self.nominations.build_nomination(
                caller, candidate, first_name, last_name, member_type, state, district, now
            )

            self._record(
                LedgerEntryType.NOMINATION, caller, now, nomination.model_dump(mode="json")
            )
            self.nominations.open(nomination)
            return nomination.model_copy(deep=True)

    def ratify_member(self, caller: str, candidate: str) -> RatificationResult:
        """
        Ratify a pending nomination. Any active member, once per nomination.

        Raises:
            NotActiveMemberError, NominationNotFoundError, AlreadyRatifiedError,
            and the Roster capacity failures on an admitting ratification.
        """
        with self._lock:
            now = self.clock.now()
            plan = self.nominations.plan_ratification(caller, candidate, now)
            self._record(LedgerEntryType.RATIFICATION, caller, now, plan.describe())
            result = self.nominations.apply(plan)
            if result.member is not None:
                result.member = result.member.model_copy(deep=True)
            return result

    # ── Read accessors ──────────────────────────────────────────

    def get_bill_history_length(self) -> int:
        with self._lock:
            return len(self.bills)

    def get_bill_metadata(self, bill_index: int) -> BillMetadata:
        with self._lock:
            return self.bills.metadata(bill_index).model_copy(deep=True)

    def get_bill(self, bill_index: int) -> Bill:
        with self._lock:
            return self.bills.get(bill_index).model_copy(deep=True)

    def get_member(self, principal: str) -> Member | None:
        with self._lock:
            member = self.roster.get_member(principal)
            return member.model_copy(deep=True) if member else None

    def is_member(self, principal: str) -> bool:
        with self._lock:
            return self.roster.is_member(principal)

    def is_active(self, principal: str, at: int | None = None) -> bool:
        """Whether ``principal`` is active now, or at logical time ``at``."""
        with self._lock:
            now = self.clock.now() if at is None else at
            return self.roster.is_active(principal, now)

    def role_of(self, principal: str) -> MemberType | None:
        with self._lock:
            return self.roster.role_of(principal)

    def chamber(self, member_type: MemberType | str) -> list[str]:
        with self._lock:
            return self.roster.chamber(MemberType(member_type))

    def chamber_size(self, member_type: MemberType | str) -> int:
        with self._lock:
            return self.roster.chamber_size(MemberType(member_type))

    @property
    def vice_president(self) -> str | None:
        with self._lock:
            return self.roster.vice_president

    @property
    def president(self) -> str | None:
        with self._lock:
            return self.roster.president

    def get_nomination(self, candidate: str) -> Nomination | None:
        with self._lock:
            nomination = self.nominations.get(candidate)
            return nomination.model_copy(deep=True) if nomination else None

    # ── Internal ────────────────────────────────────────────────

    def _record(
        self,
        entry_type: LedgerEntryType,
        author: str,
        now: int,
        content: dict[str, Any],
    ) -> None:
        if self.ledger_service is None:
            return
        self.ledger_service.append(
            entry_type=entry_type,
            author_principal=author,
            logical_time=now,
            content=content,
        )
