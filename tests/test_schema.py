"""
Tests for the Congressional Schema — verifies the Pydantic models.

Validates:
- Enum completeness
- Member term and district invariants
- Initial bill voting state
- Null principal detection
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from congress_dao.constitution.schema import (
    NOMINABLE_TYPES,
    NULL_PRINCIPAL,
    SECONDS_PER_YEAR,
    TERM_DURATIONS,
    Bill,
    BillMetadata,
    BillPhase,
    BillSponsorship,
    BillVoting,
    Member,
    MemberType,
    VotePosition,
    VoteTally,
    is_null_principal,
)


class TestEnums:
    """Verify the governance enums are properly defined."""

    def test_member_types(self):
        assert {m.value for m in MemberType} == {
            "house", "senate", "vice_president", "non_voting", "president",
        }

    def test_vote_positions(self):
        assert VotePosition.YEA is not None
        assert VotePosition.NAY is not None
        assert VotePosition.ABSTAIN is not None

    def test_bill_phases(self):
        phases = [p.value for p in BillPhase]
        assert phases == ["house", "senate", "tie_break", "presidential", "closed"]

    def test_only_chambers_are_nominable(self):
        assert NOMINABLE_TYPES == {MemberType.HOUSE, MemberType.SENATE}


class TestTermDurations:
    """Term lengths by seat."""

    def test_term_table(self):
        assert TERM_DURATIONS[MemberType.HOUSE] == 2 * SECONDS_PER_YEAR
        assert TERM_DURATIONS[MemberType.SENATE] == 6 * SECONDS_PER_YEAR
        assert TERM_DURATIONS[MemberType.NON_VOTING] == 2 * SECONDS_PER_YEAR
        assert TERM_DURATIONS[MemberType.VICE_PRESIDENT] == 4 * SECONDS_PER_YEAR
        assert TERM_DURATIONS[MemberType.PRESIDENT] == 4 * SECONDS_PER_YEAR

    def test_every_member_type_has_a_term(self):
        assert set(TERM_DURATIONS) == set(MemberType)


class TestMember:
    """Member invariants and the activity predicate."""

    def _make(self, **overrides) -> Member:
        fields = {
            "principal": "0xA11CE",
            "first_name": "Alice",
            "last_name": "Smith",
            "member_type": MemberType.HOUSE,
            "term_start": 100,
            "term_duration": 50,
            "term_end": 150,
            "state": "CA",
            "district": 12,
        }
        fields.update(overrides)
        return Member(**fields)

    def test_valid_member(self):
        member = self._make()
        assert member.full_name == "Alice Smith"

    def test_term_end_must_match_duration(self):
        with pytest.raises(ValidationError):
            self._make(term_end=151)

    def test_house_requires_district(self):
        with pytest.raises(ValidationError):
            self._make(district=0)

    def test_non_house_rejects_district(self):
        with pytest.raises(ValidationError):
            self._make(member_type=MemberType.SENATE, district=3)

    def test_active_until_term_end(self):
        member = self._make()
        assert member.is_active_at(100)
        assert member.is_active_at(149)
        assert not member.is_active_at(150)
        assert not member.is_active_at(10_000)

    def test_inactive_before_term_start(self):
        member = self._make()
        assert not member.is_active_at(99)
        assert not member.is_active_at(0)


class TestBill:
    """A new bill starts in the House phase with nothing counted."""

    def test_initial_voting_state(self):
        bill = Bill(
            index=0,
            metadata=BillMetadata(
                title="Test", enacting_clause="Enact...", proposed_at=1, effective_at=2,
            ),
            sponsorship=BillSponsorship(sponsors=["0xA11CE"]),
            sections=["Section 1"],
        )
        voting = bill.voting
        assert voting.phase == BillPhase.HOUSE
        assert voting.voting_allowed is True
        assert not voting.passed_house
        assert not voting.passed_senate
        assert not voting.passed
        assert not voting.tie_break_required
        assert voting.house_votes.total == 0
        assert voting.senate_votes.total == 0
        assert voting.presidential_decision is None

    def test_sections_required(self):
        with pytest.raises(ValidationError):
            Bill(
                index=0,
                metadata=BillMetadata(
                    title="Test", enacting_clause="Enact...", proposed_at=1, effective_at=2,
                ),
                sponsorship=BillSponsorship(sponsors=["0xA11CE"]),
                sections=[],
            )

    def test_tally_record(self):
        tally = VoteTally()
        tally.record(VotePosition.YEA)
        tally.record(VotePosition.YEA)
        tally.record(VotePosition.NAY)
        tally.record(VotePosition.ABSTAIN)
        assert (tally.yea, tally.nay, tally.abstain, tally.total) == (2, 1, 1, 4)


class TestNullPrincipal:

    def test_null_forms(self):
        assert is_null_principal(None)
        assert is_null_principal("")
        assert is_null_principal(NULL_PRINCIPAL)
        assert is_null_principal("0X" + "0" * 40)

    def test_real_address(self):
        assert not is_null_principal("0x70997970C51812dc3A010C7d01b50e0d17dc79C8")


class TestBillVoting:

    def test_voters_keep_vote_order(self):
        voting = BillVoting()
        voting.add_voter(MemberType.HOUSE, "0xB")
        voting.add_voter(MemberType.HOUSE, "0xA")
        voting.add_voter(MemberType.SENATE, "0xS")
        assert voting.house_voters == ["0xB", "0xA"]
        assert voting.senate_voters == ["0xS"]

    def test_has_voted_is_per_chamber(self):
        voting = BillVoting()
        voting.add_voter(MemberType.HOUSE, "0xA")
        assert voting.has_voted(MemberType.HOUSE, "0xA")
        assert not voting.has_voted(MemberType.SENATE, "0xA")

    def test_index_survives_copy_and_reload(self):
        voting = BillVoting()
        voting.add_voter(MemberType.SENATE, "0xS")

        assert voting.model_copy(deep=True).has_voted(MemberType.SENATE, "0xS")
        reloaded = BillVoting.model_validate(voting.model_dump(mode="json"))
        assert reloaded.has_voted(MemberType.SENATE, "0xS")
