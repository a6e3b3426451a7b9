"""
Error family for PSP34 ledger operations.

Every failure a ledger operation can report is a direct subclass of
PSP34Error, so callers can either catch the whole family or match one kind
precisely. The family is flat on purpose: each class maps to exactly one
ErrorKind and nothing inherits from anything but the base.

Errors are always raised before any state is mutated, so catching one means
the ledger is exactly as it was before the call.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Kinds of ledger errors surfaced to the dispatch layer."""

    CUSTOM = "Custom"
    SELF_APPROVE = "SelfApprove"
    NOT_APPROVED = "NotApproved"
    TOKEN_EXISTS = "TokenExists"
    TOKEN_NOT_EXISTS = "TokenNotExists"
    REACHED_MAX_SUPPLY = "ReachedMaxSupply"
    SAFE_TRANSFER_CHECK_FAILED = "SafeTransferCheckFailed"
    OUT_OF_BOUNDS_INDEX = "OutOfBoundsIndex"
    NOT_ALLOWED_TO_APPROVE = "NotAllowedToApprove"


class PSP34Error(Exception):
    """Base exception for all ledger errors.

    Attributes:
        kind: Which error this is
        message: Human-readable error description
        details: Additional context about the error
    """

    kind: ErrorKind = ErrorKind.CUSTOM
    default_message = "PSP34 error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class CustomError(PSP34Error):
    """Raised for restrictions added on top of the standard rules."""

    kind = ErrorKind.CUSTOM
    default_message = "custom error"


class SelfApproveError(PSP34Error):
    """Raised when an owner tries to approve itself."""

    kind = ErrorKind.SELF_APPROVE
    default_message = "owner cannot approve itself"


class NotApprovedError(PSP34Error):
    """Raised when the caller has no allowance for the requested action."""

    kind = ErrorKind.NOT_APPROVED
    default_message = "caller is not owner nor approved"


class TokenExistsError(PSP34Error):
    """Raised when minting an id that is already owned."""

    kind = ErrorKind.TOKEN_EXISTS
    default_message = "token already exists"


class TokenNotExistsError(PSP34Error):
    """Raised when the token does not exist (or is not held by the account)."""

    kind = ErrorKind.TOKEN_NOT_EXISTS
    default_message = "token does not exist"


class ReachedMaxSupplyError(PSP34Error):
    """Raised when minting would exceed the collection's max supply."""

    kind = ErrorKind.REACHED_MAX_SUPPLY
    default_message = "max supply reached"


class SafeTransferCheckFailedError(PSP34Error):
    """Raised when the receiving side of a transfer cannot accept the token."""

    kind = ErrorKind.SAFE_TRANSFER_CHECK_FAILED
    default_message = "safe transfer check failed"

    def __init__(
        self,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(reason, details)
        self.reason = reason


class OutOfBoundsIndexError(PSP34Error):
    """Raised when an enumeration index is past the end of its array."""

    kind = ErrorKind.OUT_OF_BOUNDS_INDEX
    default_message = "index out of bounds"


class NotAllowedToApproveError(PSP34Error):
    """Raised in strict mode when a blanket approval already covers the token."""

    kind = ErrorKind.NOT_ALLOWED_TO_APPROVE
    default_message = "operator already approved for all tokens"


class StateInconsistencyError(Exception):
    """Raised by integrity checks when internal indices disagree.

    This is not a PSP34Error: it signals a bug in the ledger, never a
    rejected request.
    """
    pass


ERRORS_BY_KIND = {
    cls.kind: cls
    for cls in (
        CustomError,
        SelfApproveError,
        NotApprovedError,
        TokenExistsError,
        TokenNotExistsError,
        ReachedMaxSupplyError,
        SafeTransferCheckFailedError,
        OutOfBoundsIndexError,
        NotAllowedToApproveError,
    )
}
