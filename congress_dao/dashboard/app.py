"""
Congress DAO — HTTP API.

FastAPI application exposing the governance operations:
- Membership (administrator admission, member lookup, chamber rosters)
- Bills (proposal, history, metadata, voting)
- Nominations (nomination, ratification)
- National Record (latest journal entries, chain verification)

The caller's identity travels in the ``X-Principal`` header. Governance
failures are returned as ``{"error": <kind>, "detail": <message>}``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from congress_dao.config import settings
from congress_dao.constitution.schema import MemberType, VotePosition
from congress_dao.governance.errors import (
    AuthorizationError,
    CongressError,
    EligibilityError,
    InvalidBillIndexError,
    NominationNotFoundError,
    StructuralError,
)

logger = logging.getLogger(__name__)


# ── Pydantic request models ───────────────────────────────────


class MemberRequest(BaseModel):
    principal: str
    first_name: str
    last_name: str
    member_type: MemberType
    state: str
    district: int = 0


class BillRequest(BaseModel):
    title: str
    enacting_clause: str
    sections: list[str]
    definitions: list[str] = Field(default_factory=list)
    effective_at: int
    sponsors: list[str]
    cosponsors: list[str] = Field(default_factory=list)


class VoteRequest(BaseModel):
    position: VotePosition


class NominationRequest(BaseModel):
    candidate: str
    first_name: str
    last_name: str
    member_type: MemberType
    state: str
    district: int = 0


class DashboardState:
    """Mutable application state injected at startup."""

    def __init__(self) -> None:
        self.congress: Any = None
        self.ledger_service: Any = None
        self.startup_time: datetime = datetime.now(timezone.utc)


state = DashboardState()


# ── Application lifecycle ──────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the Congress from settings unless one was injected already."""
    if state.congress is None:
        from congress_dao.orchestrator import build_congress

        state.congress = build_congress(settings)
        state.ledger_service = state.congress.ledger_service
        logger.info("API built Congress from settings (owner=%s)", state.congress.owner)

    yield

    logger.info("Congress DAO API shut down")


app = FastAPI(
    title="Congress DAO",
    description="Legislative governance: membership, bills and nominations",
    version="0.1.0",
    lifespan=lifespan,
)


def _status_for(exc: CongressError) -> int:
    if isinstance(exc, (InvalidBillIndexError, NominationNotFoundError)):
        return 404
    if isinstance(exc, (AuthorizationError, EligibilityError)):
        return 403
    if isinstance(exc, StructuralError):
        return 422
    return 409


@app.exception_handler(CongressError)
async def congress_error_handler(request: Request, exc: CongressError) -> JSONResponse:
    return JSONResponse(
        status_code=_status_for(exc),
        content={"error": exc.kind, "detail": exc.message},
    )


def _congress():
    if state.congress is None:
        raise HTTPException(status_code=503, detail="Congress not initialized")
    return state.congress


def _caller(x_principal: str | None) -> str:
    if not x_principal:
        raise HTTPException(status_code=401, detail="X-Principal header required")
    return x_principal


# ── Routes: Membership ────────────────────────────────────────


@app.post("/api/members", status_code=201)
async def api_add_member(req: MemberRequest, x_principal: str | None = Header(default=None)):
    """Administrator admission of a member."""
    member = _congress().add_member(
        caller=_caller(x_principal),
        principal=req.principal,
        first_name=req.first_name,
        last_name=req.last_name,
        member_type=req.member_type,
        state=req.state,
        district=req.district,
    )
    return member.model_dump(mode="json")


@app.get("/api/members/{principal}")
async def api_get_member(principal: str):
    congress = _congress()
    member = congress.get_member(principal)
    if member is None:
        raise HTTPException(status_code=404, detail=f"{principal} is not a member")
    return {**member.model_dump(mode="json"), "active": congress.is_active(principal)}


@app.get("/api/chambers/{member_type}")
async def api_chamber(member_type: MemberType):
    congress = _congress()
    if member_type not in (MemberType.HOUSE, MemberType.SENATE):
        raise HTTPException(status_code=404, detail=f"{member_type.value} is not a chamber")
    return {
        "chamber": member_type.value,
        "members": congress.chamber(member_type),
        "size": congress.chamber_size(member_type),
    }


# ── Routes: Bills ─────────────────────────────────────────────


@app.post("/api/bills", status_code=201)
async def api_propose_bill(req: BillRequest, x_principal: str | None = Header(default=None)):
    index = _congress().propose_bill(
        caller=_caller(x_principal),
        title=req.title,
        enacting_clause=req.enacting_clause,
        sections=req.sections,
        definitions=req.definitions,
        effective_at=req.effective_at,
        sponsors=req.sponsors,
        cosponsors=req.cosponsors,
    )
    return {"index": index}


@app.get("/api/bills")
async def api_bill_history_length():
    return {"length": _congress().get_bill_history_length()}


@app.get("/api/bills/{index}")
async def api_get_bill(index: int):
    return _congress().get_bill(index).model_dump(mode="json")


@app.get("/api/bills/{index}/metadata")
async def api_get_bill_metadata(index: int):
    return _congress().get_bill_metadata(index).model_dump(mode="json")


@app.post("/api/bills/{index}/votes")
async def api_cast_vote(index: int, req: VoteRequest, x_principal: str | None = Header(default=None)):
    bill = _congress().cast_vote(
        caller=_caller(x_principal),
        bill_index=index,
        position=req.position,
    )
    return bill.voting.model_dump(mode="json")


# ── Routes: Nominations ───────────────────────────────────────


@app.post("/api/nominations", status_code=201)
async def api_nominate(req: NominationRequest, x_principal: str | None = Header(default=None)):
    nomination = _congress().nominate_member(
        caller=_caller(x_principal),
        candidate=req.candidate,
        first_name=req.first_name,
        last_name=req.last_name,
        member_type=req.member_type,
        state=req.state,
        district=req.district,
    )
    return nomination.model_dump(mode="json")


@app.get("/api/nominations/{candidate}")
async def api_get_nomination(candidate: str):
    nomination = _congress().get_nomination(candidate)
    if nomination is None:
        raise HTTPException(status_code=404, detail="Nomination does not exist")
    return nomination.model_dump(mode="json")


@app.post("/api/nominations/{candidate}/ratifications")
async def api_ratify(candidate: str, x_principal: str | None = Header(default=None)):
    result = _congress().ratify_member(caller=_caller(x_principal), candidate=candidate)
    return {
        "candidate": result.candidate,
        "ratification_count": result.ratification_count,
        "threshold": result.threshold,
        "admitted": result.admitted,
    }


# ── Routes: National Record ───────────────────────────────────


@app.get("/api/ledger")
async def api_ledger(limit: int = 50):
    """Latest journal entries."""
    if state.ledger_service is None:
        return JSONResponse({"entries": [], "message": "Journal not configured"})

    entries = state.ledger_service.get_latest_entries(limit=limit)
    return JSONResponse({
        "entries": [
            {
                "id": str(e.id),
                "sequence_number": e.sequence_number,
                "entry_type": e.entry_type,
                "author_principal": e.author_principal,
                "logical_time": e.logical_time,
                "entry_hash": e.entry_hash[:16] + "...",
            }
            for e in entries
        ],
        "total": state.ledger_service.get_entry_count(),
    })


@app.get("/api/ledger/verify")
async def api_ledger_verify():
    if state.ledger_service is None:
        raise HTTPException(status_code=503, detail="Journal not configured")

    is_valid, entries_verified, message = state.ledger_service.verify_chain()
    return {"valid": is_valid, "entries_verified": entries_verified, "message": message}
