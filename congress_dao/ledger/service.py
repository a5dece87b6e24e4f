"""
National Record Service — append-only, hash-chained governance journal.

Each committed transition of the Congress becomes one row whose hash covers
its own fields and the hash of the row before it. Rewriting any row breaks
every hash after it, which ``verify_chain`` detects.

The Congress facade appends before it applies a transition in memory, so
the journal is never behind the live state.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any, NamedTuple
from uuid import UUID, uuid4

from sqlalchemy import create_engine, func, inspect, select
from sqlalchemy.orm import sessionmaker

from congress_dao.ledger.models import Base, LedgerEntryDB, LedgerEntryType

logger = logging.getLogger(__name__)


GENESIS_HASH = "0" * 64  # previous_hash of sequence 0
GENESIS_AUTHOR = "system"


class LedgerIntegrityError(Exception):
    """Raised when the hash chain cannot be extended or verified."""
    pass


class ChainReport(NamedTuple):
    """Outcome of a chain walk. On failure ``entries_verified`` is the failing position."""

    valid: bool
    entries_verified: int
    message: str


class LedgerService:
    """
    Journal of every committed governance transition.

    Usage:
        service = LedgerService("sqlite:///national_record.db")
        service.initialize()  # Create tables, seed genesis block

        entry = service.append(
            entry_type=LedgerEntryType.BILL_PROPOSAL,
            author_principal="0x7099...",
            logical_time=1_700_000_000,
            content={"index": 0, "title": "..."},
        )
    """

    def __init__(self, database_url: str) -> None:
        """
        Args:
            database_url: SQLAlchemy connection string (sync driver).
        """
        self.engine = create_engine(database_url, echo=False)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

    def has_schema(self) -> bool:
        """Whether the journal table exists in the target database."""
        return inspect(self.engine).has_table(LedgerEntryDB.__tablename__)

    def initialize(self, logical_time: int = 0) -> None:
        """Create the schema and seed the genesis block if it is missing."""
        Base.metadata.create_all(self.engine)

        with self.SessionLocal() as session:
            if self._tail(session) is not None:
                return

            genesis = self._build_entry(
                sequence_number=0,
                previous_hash=GENESIS_HASH,
                logical_time=logical_time,
                entry_type=LedgerEntryType.GENESIS.value,
                author_principal=GENESIS_AUTHOR,
                content={
                    "message": "Genesis of the National Record",
                    "append_only": True,
                    "hash_algorithm": "sha256",
                },
            )
            session.add(genesis)
            session.commit()
            logger.info("Genesis block created: hash=%s", genesis.entry_hash[:16])

    def append(
        self,
        entry_type: LedgerEntryType | str,
        author_principal: str,
        logical_time: int,
        content: dict[str, Any],
    ) -> LedgerEntryDB:
        """
        Append a new entry after the current tail of the chain.

        There is no update and no delete.

        Raises:
            ValueError: ``entry_type`` is not a LedgerEntryType.
            LedgerIntegrityError: The genesis block is missing.
        """
        entry_type = LedgerEntryType(entry_type).value

        with self.SessionLocal() as session:
            tail = self._tail(session)
            if tail is None:
                raise LedgerIntegrityError(
                    "Cannot append: no genesis block found. Call initialize() first."
                )

            entry = self._build_entry(
                sequence_number=tail.sequence_number + 1,
                previous_hash=tail.entry_hash,
                logical_time=logical_time,
                entry_type=entry_type,
                author_principal=author_principal,
                content=content,
            )
            session.add(entry)
            session.commit()
            session.refresh(entry)

        logger.info(
            "Ledger entry appended: seq=%d type=%s author=%s hash=%s",
            entry.sequence_number, entry_type, author_principal, entry.entry_hash[:16],
        )
        return entry

    def verify_chain(self) -> ChainReport:
        """
        Recompute every hash from genesis forward and check each link.

        Returns:
            ChainReport; it unpacks as ``(valid, entries_verified, message)``.
        """
        with self.SessionLocal() as session:
            entries = session.execute(
                select(LedgerEntryDB).order_by(LedgerEntryDB.sequence_number.asc())
            ).scalars().all()

        if not entries:
            return ChainReport(False, 0, "No entries found in ledger")
        if entries[0].sequence_number != 0:
            return ChainReport(
                False, 0, f"First entry has sequence {entries[0].sequence_number}, expected 0"
            )

        expected_previous = GENESIS_HASH
        for position, entry in enumerate(entries):
            if entry.previous_hash != expected_previous:
                return ChainReport(
                    False, position,
                    f"Chain break at sequence {entry.sequence_number}: "
                    f"previous_hash does not match prior entry's hash",
                )
            recomputed = self._hash_of(entry)
            if entry.entry_hash != recomputed:
                return ChainReport(
                    False, position,
                    f"Hash mismatch at sequence {entry.sequence_number}: "
                    f"stored={entry.entry_hash[:16]}... computed={recomputed[:16]}...",
                )
            expected_previous = entry.entry_hash

        return ChainReport(
            True, len(entries), f"Chain verified: {len(entries)} entries, integrity intact"
        )

    # ── Queries ─────────────────────────────────────────────────

    def get_entry(self, entry_id: UUID) -> LedgerEntryDB | None:
        with self.SessionLocal() as session:
            return session.get(LedgerEntryDB, entry_id)

    def get_by_sequence(self, sequence_number: int) -> LedgerEntryDB | None:
        with self.SessionLocal() as session:
            return session.execute(
                select(LedgerEntryDB).where(LedgerEntryDB.sequence_number == sequence_number)
            ).scalar_one_or_none()

    def get_entries_by_type(
        self,
        entry_type: LedgerEntryType | str,
        limit: int = 100,
        offset: int = 0,
    ) -> list[LedgerEntryDB]:
        """Entries of one type, newest first."""
        return self._newest(
            LedgerEntryDB.entry_type == LedgerEntryType(entry_type).value,
            limit=limit,
            offset=offset,
        )

    def get_entries_by_author(self, author_principal: str, limit: int = 100) -> list[LedgerEntryDB]:
        """Entries written on behalf of one principal, newest first."""
        return self._newest(LedgerEntryDB.author_principal == author_principal, limit=limit)

    def get_latest_entries(self, limit: int = 50) -> list[LedgerEntryDB]:
        return self._newest(limit=limit)

    def get_entry_count(self) -> int:
        """Total number of entries, genesis included."""
        with self.SessionLocal() as session:
            return session.execute(
                select(func.count()).select_from(LedgerEntryDB)
            ).scalar() or 0

    def count_by_type(self) -> dict[str, int]:
        with self.SessionLocal() as session:
            rows = session.execute(
                select(LedgerEntryDB.entry_type, func.count()).group_by(LedgerEntryDB.entry_type)
            ).all()
        return {entry_type: count for entry_type, count in rows}

    # ── Internal ────────────────────────────────────────────────

    def _newest(self, *criteria, limit: int, offset: int = 0) -> list[LedgerEntryDB]:
        query = (
            select(LedgerEntryDB)
            .where(*criteria)
            .order_by(LedgerEntryDB.sequence_number.desc())
            .limit(limit)
            .offset(offset)
        )
        with self.SessionLocal() as session:
            return list(session.execute(query).scalars().all())

    @staticmethod
    def _tail(session) -> LedgerEntryDB | None:
        return session.execute(
            select(LedgerEntryDB).order_by(LedgerEntryDB.sequence_number.desc()).limit(1)
        ).scalar_one_or_none()

    @classmethod
    def _build_entry(
        cls,
        sequence_number: int,
        previous_hash: str,
        logical_time: int,
        entry_type: str,
        author_principal: str,
        content: dict[str, Any],
    ) -> LedgerEntryDB:
        entry_id = uuid4()
        return LedgerEntryDB(
            id=entry_id,
            sequence_number=sequence_number,
            previous_hash=previous_hash,
            entry_hash=cls._compute_hash(
                entry_id=entry_id,
                sequence_number=sequence_number,
                previous_hash=previous_hash,
                logical_time=logical_time,
                entry_type=entry_type,
                author_principal=author_principal,
                content=content,
            ),
            logical_time=logical_time,
            entry_type=entry_type,
            author_principal=author_principal,
            content=content,
        )

    @classmethod
    def _hash_of(cls, entry: LedgerEntryDB) -> str:
        return cls._compute_hash(
            entry_id=entry.id,
            sequence_number=entry.sequence_number,
            previous_hash=entry.previous_hash,
            logical_time=entry.logical_time,
            entry_type=entry.entry_type,
            author_principal=entry.author_principal,
            content=entry.content,
        )

    @staticmethod
    def _compute_hash(
        entry_id: UUID,
        sequence_number: int,
        previous_hash: str,
        logical_time: int,
        entry_type: str,
        author_principal: str,
        content: dict[str, Any],
    ) -> str:
        """
        SHA-256 over ``previous_hash`` followed by the canonical JSON of the fields.

        ``recorded_at`` is left out: it is a database-side wall-clock stamp
        and does not round-trip identically through every backend.
        """
        canonical = json.dumps(
            {
                "id": str(entry_id),
                "sequence_number": sequence_number,
                "previous_hash": previous_hash,
                "logical_time": logical_time,
                "entry_type": entry_type,
                "author_principal": author_principal,
                "content": content,
            },
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256((previous_hash + canonical).encode("utf-8")).hexdigest()
