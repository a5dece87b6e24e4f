"""
National Record — SQLAlchemy model for the governance journal.

Every committed transition of the governance state machine (admission,
proposal, vote, nomination, ratification) is appended here as one entry.
The table is append-only and hash-chained:

1. Cryptographically Verifiable — each entry stores SHA-256 over its own
   fields and the previous entry's hash
2. Append-Only — no UPDATE or DELETE is ever issued
3. Independently Auditable — the chain can be recomputed by anyone

Column types are portable: JSON becomes JSONB on PostgreSQL, and the UUID
type falls back to CHAR(32) on SQLite.
"""

from __future__ import annotations

import enum
from uuid import uuid4

from sqlalchemy import JSON, BigInteger, Column, DateTime, Index, Integer, String, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for the journal."""
    pass


class LedgerEntryType(str, enum.Enum):
    """Kinds of journal entry."""

    GENESIS = "genesis"
    MEMBER_ADMISSION = "member_admission"
    BILL_PROPOSAL = "bill_proposal"
    VOTE_RECORD = "vote_record"
    NOMINATION = "nomination"
    RATIFICATION = "ratification"


class LedgerEntryDB(Base):
    """
    A single journal entry.

    ``logical_time`` is the governance clock reading of the transition and
    is part of the hash; ``recorded_at`` is informational wall-clock time
    and is not.
    """

    __tablename__ = "ledger_entries"

    id = Column(Uuid, primary_key=True, default=uuid4)

    sequence_number = Column(
        Integer, nullable=False, unique=True, index=True,
        comment="Monotonically increasing sequence number",
    )

    previous_hash = Column(
        String(64), nullable=False,
        comment="SHA-256 hash of the previous entry",
    )
    entry_hash = Column(
        String(64), nullable=False, unique=True,
        comment="SHA-256 hash of this entry",
    )

    logical_time = Column(
        BigInteger, nullable=False,
        comment="Governance clock reading of the transition",
    )
    recorded_at = Column(
        DateTime(timezone=True), nullable=False, default=func.now(),
        comment="Wall-clock time the row was written",
    )

    entry_type = Column(
        String(50), nullable=False, index=True,
        comment="Type of journal entry",
    )
    author_principal = Column(
        String(100), nullable=False,
        comment="Principal whose call produced the transition",
    )

    content = Column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False,
        comment="Entry content, structure varies by entry_type",
    )

    __table_args__ = (
        Index("ix_ledger_entry_type_time", "entry_type", "logical_time"),
        Index("ix_ledger_author_principal", "author_principal"),
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry seq={self.sequence_number} "
            f"type={self.entry_type} hash={self.entry_hash[:12]}...>"
        )
