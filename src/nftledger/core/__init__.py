"""
nftledger Core Module

Value types, errors, events and the ledger components that make up a PSP34
collection, plus configuration, logging and metrics support.
"""

from .allowances import AllowanceRegistry
from .attributes import AttributeStore
from .capabilities import (
    PSP34,
    PSP34Burnable,
    PSP34Enumerable,
    PSP34Metadata,
    PSP34Mintable,
    supported_capabilities,
)
from .config import ConfigManager, ConfigurationError, LedgerConfig
from .enumeration import EnumerationIndex, OwnerEnumeration
from .events import ApprovalEvent, AttributeSetEvent, Event, TransferEvent
from .exceptions import (
    CustomError,
    ErrorKind,
    NotAllowedToApproveError,
    NotApprovedError,
    OutOfBoundsIndexError,
    PSP34Error,
    ReachedMaxSupplyError,
    SafeTransferCheckFailedError,
    SelfApproveError,
    StateInconsistencyError,
    TokenExistsError,
    TokenNotExistsError,
)
from .ledger import OwnershipLedger
from .types import ZERO_ACCOUNT, AccountId, Id, IdKind

__all__ = [
    # Types
    "Id",
    "IdKind",
    "AccountId",
    "ZERO_ACCOUNT",
    # Components
    "OwnershipLedger",
    "EnumerationIndex",
    "OwnerEnumeration",
    "AllowanceRegistry",
    "AttributeStore",
    # Capabilities
    "PSP34",
    "PSP34Mintable",
    "PSP34Burnable",
    "PSP34Enumerable",
    "PSP34Metadata",
    "supported_capabilities",
    # Events
    "Event",
    "TransferEvent",
    "ApprovalEvent",
    "AttributeSetEvent",
    # Errors
    "ErrorKind",
    "PSP34Error",
    "CustomError",
    "SelfApproveError",
    "NotApprovedError",
    "TokenExistsError",
    "TokenNotExistsError",
    "ReachedMaxSupplyError",
    "SafeTransferCheckFailedError",
    "OutOfBoundsIndexError",
    "NotAllowedToApproveError",
    "StateInconsistencyError",
    # Configuration
    "LedgerConfig",
    "ConfigManager",
    "ConfigurationError",
]
