"""
Bill Ledger — append-only history of proposed bills.

Bills are indexed by their position in the history and are never removed.
Everything but the voting sub-state is fixed at proposal; the Voting Engine
is the only writer of ``Bill.voting``.
"""

from __future__ import annotations

import logging

from congress_dao.constitution.schema import (
    Bill,
    BillMetadata,
    BillPhase,
    BillSponsorship,
    BillVoting,
)
from congress_dao.governance.errors import (
    EffectiveDatePastError,
    InvalidBillIndexError,
    InvalidCosponsorError,
    InvalidSponsorError,
    NotActiveMemberError,
    SectionRequiredError,
    SponsorRequiredError,
)
from congress_dao.governance.roster import Roster

logger = logging.getLogger(__name__)


class BillLedger:
    """Ordered, append-only store of bills."""

    def __init__(self, roster: Roster) -> None:
        self.roster = roster
        self.bills: list[Bill] = []

    def __len__(self) -> int:
        return len(self.bills)

    def check_proposal(
        self,
        caller: str,
        sections: list[str],
        effective_at: int,
        sponsors: list[str],
        cosponsors: list[str],
        now: int,
    ) -> None:
        """
        Validate a proposal without recording it.

        Checks run in a fixed order so the first failing precondition is
        the one reported.
        """
        if not self.roster.is_active(caller, now):
            raise NotActiveMemberError(f"{caller} is not an active member")
        if not sponsors:
            raise SponsorRequiredError()
        if not sections:
            raise SectionRequiredError()
        if effective_at < now:
            raise EffectiveDatePastError(
                f"Effective date {effective_at} precedes current time {now}"
            )
        for sponsor in sponsors:
            if not self.roster.is_active(sponsor, now):
                raise InvalidSponsorError(f"Sponsor {sponsor} is not an active member")
        for cosponsor in cosponsors:
            if not self.roster.is_active(cosponsor, now):
                raise InvalidCosponsorError(
                    f"Cosponsor {cosponsor} is not an active member"
                )

    def build_bill(
        self,
        caller: str,
        title: str,
        enacting_clause: str,
        sections: list[str],
        definitions: list[str],
        effective_at: int,
        sponsors: list[str],
        cosponsors: list[str],
        now: int,
    ) -> Bill:
        """
        Validate a proposal and build the next bill without appending it.

        The bill starts in the House phase with all tallies at zero; its
        ``index`` is the position it will take in the history.
        """
        self.check_proposal(caller, sections, effective_at, sponsors, cosponsors, now)

        return Bill(
            index=len(self.bills),
            metadata=BillMetadata(
                title=title,
                enacting_clause=enacting_clause,
                proposed_at=now,
                effective_at=effective_at,
            ),
            sponsorship=BillSponsorship(
                sponsors=list(sponsors),
                cosponsors=list(cosponsors),
            ),
            voting=BillVoting(),
            sections=list(sections),
            definitions=list(definitions),
        )

    def append(self, bill: Bill, proposer: str) -> Bill:
        """Append a bill produced by ``build_bill``."""
        if bill.index != len(self.bills):
            raise ValueError(f"Bill #{bill.index} is stale; next index is {len(self.bills)}")
        self.bills.append(bill)

        logger.info(
            "Bill proposed: #%d '%s' by %s (sponsors=%d cosponsors=%d)",
            bill.index, bill.metadata.title[:80], proposer,
            len(bill.sponsorship.sponsors), len(bill.sponsorship.cosponsors),
        )
        return bill

    def propose_bill(
        self,
        caller: str,
        title: str,
        enacting_clause: str,
        sections: list[str],
        definitions: list[str],
        effective_at: int,
        sponsors: list[str],
        cosponsors: list[str],
        now: int,
    ) -> Bill:
        """Validate, build and append a bill in one step."""
        bill = self.build_bill(
            caller, title, enacting_clause, sections, definitions,
            effective_at, sponsors, cosponsors, now,
        )
        return self.append(bill, caller)

    def get(self, index: int) -> Bill:
        """Retrieve a bill by position."""
        if index < 0 or index >= len(self.bills):
            raise InvalidBillIndexError(f"No bill at index {index}")
        return self.bills[index]

    def metadata(self, index: int) -> BillMetadata:
        return self.get(index).metadata

    def bills_in_phase(self, phase: BillPhase) -> list[Bill]:
        return [b for b in self.bills if b.voting.phase == phase]
