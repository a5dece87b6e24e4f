"""
Tests for the National Record hash chain.

Validates:
- Genesis block and append-only chaining
- Chain verification
- Tamper detection
- Journaling from the Congress facade
- The audit tool
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError
from sqlalchemy import text

from congress_dao.config import CongressSettings
from congress_dao.governance.clock import ManualClock
from congress_dao.governance.congress import Congress
from congress_dao.governance.errors import HouseFullError
from congress_dao.ledger.audit import main, run_audit
from congress_dao.ledger.models import Base, LedgerEntryType
from congress_dao.ledger.service import GENESIS_HASH, LedgerIntegrityError, LedgerService
from congress_dao.orchestrator import build_congress

OWNER = "0xOWNER"


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'national_record.db'}"


@pytest.fixture
def ledger(database_url) -> LedgerService:
    service = LedgerService(database_url)
    service.initialize(logical_time=1_000)
    return service


class TestLedgerService:

    def test_genesis_block(self, ledger):
        assert ledger.get_entry_count() == 1
        genesis = ledger.get_by_sequence(0)
        assert genesis.previous_hash == GENESIS_HASH
        assert genesis.entry_type == LedgerEntryType.GENESIS.value
        assert len(genesis.entry_hash) == 64

    def test_initialize_is_idempotent(self, ledger):
        ledger.initialize()
        assert ledger.get_entry_count() == 1

    def test_append_links_to_previous(self, ledger):
        genesis = ledger.get_by_sequence(0)
        first = ledger.append(LedgerEntryType.BILL_PROPOSAL, "0xM1", 1_001, {"index": 0})
        second = ledger.append("vote_record", "0xM1", 1_002, {"bill_index": 0})

        assert first.sequence_number == 1
        assert first.previous_hash == genesis.entry_hash
        assert second.previous_hash == first.entry_hash
        assert second.entry_type == "vote_record"

    def test_verify_chain(self, ledger):
        for i in range(3):
            ledger.append(LedgerEntryType.VOTE_RECORD, "0xM1", 1_000 + i, {"n": i})
        is_valid, count, message = ledger.verify_chain()
        assert is_valid, message
        assert count == 4

    def test_tamper_detection(self, ledger):
        ledger.append(LedgerEntryType.VOTE_RECORD, "0xM1", 1_001, {"position": "nay"})
        with ledger.engine.begin() as conn:
            conn.execute(
                text("UPDATE ledger_entries SET content = :c WHERE sequence_number = 1"),
                {"c": json.dumps({"position": "yea"})},
            )
        is_valid, failed_at, message = ledger.verify_chain()
        assert not is_valid
        assert failed_at == 1
        assert "Hash mismatch" in message

    def test_append_without_genesis(self, database_url):
        service = LedgerService(database_url)
        Base.metadata.create_all(service.engine)
        with pytest.raises(LedgerIntegrityError):
            service.append(LedgerEntryType.NOMINATION, "0xM1", 1, {})

    def test_unknown_entry_type_rejected(self, ledger):
        with pytest.raises(ValueError):
            ledger.append("not_a_type", "0xM1", 1_001, {})

    def test_queries(self, ledger):
        ledger.append(LedgerEntryType.NOMINATION, "0xM1", 1_001, {"candidate": "0xC"})
        ledger.append(LedgerEntryType.RATIFICATION, "0xM2", 1_002, {"candidate": "0xC"})
        ledger.append(LedgerEntryType.RATIFICATION, "0xM1", 1_003, {"candidate": "0xC"})

        assert len(ledger.get_entries_by_type(LedgerEntryType.RATIFICATION)) == 2
        assert [e.sequence_number for e in ledger.get_entries_by_author("0xM1")] == [3, 1]
        assert [e.sequence_number for e in ledger.get_latest_entries(limit=2)] == [3, 2]

        entry = ledger.get_by_sequence(2)
        assert ledger.get_entry(entry.id).author_principal == "0xM2"

        assert ledger.count_by_type() == {"genesis": 1, "nomination": 1, "ratification": 2}

    def test_report_fields(self, ledger):
        report = ledger.verify_chain()
        assert report.valid
        assert report.entries_verified == 1


class TestCongressJournal:

    def test_transitions_are_recorded(self, ledger):
        clock = ManualClock(start=5_000)
        congress = Congress(owner=OWNER, clock=clock, ledger_service=ledger)
        congress.add_member(OWNER, "0xM1", "John", "Doe", "house", "CA", 12)
        congress.propose_bill("0xM1", "Bill", "Enact...", ["s1"], [], 5_000, ["0xM1"])
        clock.advance(10)
        congress.cast_vote("0xM1", 0, "yea")

        assert ledger.get_entry_count() == 4
        vote = ledger.get_by_sequence(3)
        assert vote.entry_type == LedgerEntryType.VOTE_RECORD.value
        assert vote.logical_time == 5_010
        assert vote.content["phase_after"] == "senate"

        is_valid, _, message = ledger.verify_chain()
        assert is_valid, message

    def test_malformed_records_leave_no_entry(self, ledger):
        congress = Congress(owner=OWNER, clock=ManualClock(start=5_000), ledger_service=ledger)
        congress.add_member(OWNER, "0xM1", "John", "Doe", "house", "CA", 12)
        assert ledger.get_entry_count() == 2

        with pytest.raises(ValidationError):
            congress.add_member(OWNER, "0xS1", None, "Doe", "senate", "CA", 0)
        with pytest.raises(ValidationError):
            congress.propose_bill("0xM1", None, "Enact...", ["s1"], [], 5_000, ["0xM1"])
        with pytest.raises(ValidationError):
            congress.nominate_member("0xM1", "0xNEW", None, "Member", "house", "TX", 5)

        assert ledger.get_entry_count() == 2
        assert not congress.is_member("0xS1")
        assert congress.get_bill_history_length() == 0
        assert congress.get_nomination("0xNEW") is None

    def test_rejected_admission_leaves_no_entry(self, ledger):
        congress = Congress(
            owner=OWNER, clock=ManualClock(start=5_000), ledger_service=ledger, house_capacity=3
        )
        congress.add_member(OWNER, "0xM1", "John", "Doe", "house", "CA", 1)
        congress.add_member(OWNER, "0xM2", "Jane", "Doe", "house", "NV", 2)
        congress.nominate_member("0xM1", "0xNEW", "New", "Member", "house", "TX", 5)
        congress.ratify_member("0xM1", "0xNEW")
        congress.add_member(OWNER, "0xM3", "Jim", "Doe", "house", "FL", 3)
        entries_before = ledger.get_entry_count()

        with pytest.raises(HouseFullError):
            congress.ratify_member("0xM2", "0xNEW")

        assert ledger.get_entry_count() == entries_before
        assert congress.get_nomination("0xNEW").ratifiers == ["0xM1"]


class TestBuildCongress:

    def test_from_settings(self, database_url):
        config = CongressSettings(
            administrator_principal=OWNER,
            ledger_database_url=database_url,
            house_capacity=1,
        )
        congress = build_congress(config, clock=ManualClock(start=7_000))
        congress.add_member(OWNER, "0xM1", "John", "Doe", "house", "CA", 1)

        assert congress.owner == OWNER
        assert congress.roster.house_capacity == 1
        assert congress.ledger_service.get_entry_count() == 2
        assert congress.ledger_service.get_by_sequence(0).logical_time == 7_000

    def test_journal_disabled(self):
        config = CongressSettings(administrator_principal=OWNER, journal_enabled=False)
        congress = build_congress(config, clock=ManualClock())
        assert congress.ledger_service is None


class TestAudit:

    def test_valid_chain(self, ledger, database_url):
        ledger.append(LedgerEntryType.MEMBER_ADMISSION, "0xOWNER", 1_001, {"principal": "0xM1"})
        assert run_audit(database_url, verbose=True)

    def test_broken_chain(self, ledger, database_url):
        ledger.append(LedgerEntryType.MEMBER_ADMISSION, "0xOWNER", 1_001, {"principal": "0xM1"})
        with ledger.engine.begin() as conn:
            conn.execute(text("UPDATE ledger_entries SET logical_time = 9 WHERE sequence_number = 1"))
        assert not run_audit(database_url)

    def test_empty_journal_fails(self, database_url):
        service = LedgerService(database_url)
        Base.metadata.create_all(service.engine)
        assert not service.verify_chain().valid
        assert not run_audit(database_url)

    def test_database_without_journal_table(self, database_url):
        assert not LedgerService(database_url).has_schema()
        assert not run_audit(database_url)

    def test_main_exit_code(self, ledger, database_url):
        with pytest.raises(SystemExit) as exc_info:
            main(["--database-url", database_url, "--verbose", "--limit", "5"])
        assert exc_info.value.code == 0
