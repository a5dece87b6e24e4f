"""
Governance failures.

Every rejected operation raises a ``CongressError`` subclass before any state
is touched. Each concrete class carries a stable ``kind`` string that the
HTTP layer and the tests use to identify the failure independently of the
message text.

Taxonomy:
    AuthorizationError   — wrong principal for the required role
    EligibilityError     — caller or named member is not an active member
    StructuralError      — capacity, district and malformed-input failures
    StateConflictError   — the target already exists or was already acted on
    ProtocolClosedError  — the target is missing or no longer accepts actions
"""

from __future__ import annotations


class CongressError(Exception):
    """Base class for all governance failures."""

    kind = "CongressError"
    default_message = "Operation rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


# ── Categories ────────────────────────────────────────────────


class AuthorizationError(CongressError):
    kind = "Authorization"


class EligibilityError(CongressError):
    kind = "Eligibility"


class StructuralError(CongressError):
    kind = "Structural"


class StateConflictError(CongressError):
    kind = "StateConflict"


class ProtocolClosedError(CongressError):
    kind = "ProtocolClosed"


# ── Authorization ─────────────────────────────────────────────


class NotOwnerError(AuthorizationError):
    kind = "NotOwner"
    default_message = "Only the administrator may add members directly"


class NotCurrentVPError(AuthorizationError):
    kind = "NotCurrentVP"
    default_message = "Only the current Vice President may break a tie"


class OnlyPresidentError(AuthorizationError):
    kind = "OnlyPresident"
    default_message = "Only the President may act on a bill awaiting approval"


class OnlyHouseError(AuthorizationError):
    kind = "OnlyHouse"
    default_message = "Only House members may vote in the House phase"


class OnlySenateError(AuthorizationError):
    kind = "OnlySenate"
    default_message = "Only Senate members may vote in the Senate phase"


# ── Eligibility ───────────────────────────────────────────────


class NotActiveMemberError(EligibilityError):
    kind = "NotActiveMember"
    default_message = "Caller is not an active member"


class InvalidSponsorError(EligibilityError):
    kind = "InvalidSponsor"
    default_message = "Every sponsor must be an active member"


class InvalidCosponsorError(EligibilityError):
    kind = "InvalidCosponsor"
    default_message = "Every cosponsor must be an active member"


# ── Structural ────────────────────────────────────────────────


class HouseFullError(StructuralError):
    kind = "HouseFull"
    default_message = "The House is at capacity"


class SenateFullError(StructuralError):
    kind = "SenateFull"
    default_message = "The Senate is at capacity"


class HouseDistrictRequiredError(StructuralError):
    kind = "HouseDistrictRequired"
    default_message = "House members require a nonzero district"


class DistrictMustBeZeroError(StructuralError):
    kind = "DistrictMustBeZero"
    default_message = "Only House members carry a district"


class SenateDistrictMustBeZeroError(DistrictMustBeZeroError):
    kind = "SenateDistrictMustBeZero"
    default_message = "Senate members must have district 0"


class InvalidAddressError(StructuralError):
    kind = "InvalidAddress"
    default_message = "Candidate identity must not be null"


class InvalidNominationRoleError(StructuralError):
    kind = "InvalidNominationRole"
    default_message = "Only House or Senate seats may be nominated"


class SponsorRequiredError(StructuralError):
    kind = "SponsorRequired"
    default_message = "A bill requires at least one sponsor"


class SectionRequiredError(StructuralError):
    kind = "SectionRequired"
    default_message = "A bill requires at least one section"


class EffectiveDatePastError(StructuralError):
    kind = "EffectiveDatePast"
    default_message = "Effective date must not be in the past"


# ── State conflict ────────────────────────────────────────────


class AlreadyMemberError(StateConflictError):
    kind = "AlreadyMember"
    default_message = "Principal is already registered"


class AlreadyNominatedError(StateConflictError):
    kind = "AlreadyNominated"
    default_message = "Candidate already has a pending nomination"


class AlreadyVotedError(StateConflictError):
    kind = "AlreadyVoted"
    default_message = "Caller has already voted on this bill"


class AlreadyRatifiedError(StateConflictError):
    kind = "AlreadyRatified"
    default_message = "Already ratified"


class VPActiveError(StateConflictError):
    kind = "VPActive"
    default_message = "A Vice President is currently serving"


class PresidentActiveError(StateConflictError):
    kind = "PresidentActive"
    default_message = "A President is currently serving"


class NoTieBreakRequiredError(StateConflictError):
    kind = "NoTieBreakRequired"
    default_message = "No Senate tie is pending on this bill"


# ── Protocol closed ───────────────────────────────────────────


class VotingClosedError(ProtocolClosedError):
    kind = "VotingClosed"
    default_message = "Voting on this bill is closed"


class InvalidBillIndexError(ProtocolClosedError):
    kind = "InvalidBillIndex"
    default_message = "No bill exists at this index"


class NominationNotFoundError(ProtocolClosedError):
    kind = "NominationNotFound"
    default_message = "Nomination does not exist"


class VotingNotAllowedError(ProtocolClosedError):
    kind = "VotingNotAllowed"
    default_message = "Voting not allowed"
