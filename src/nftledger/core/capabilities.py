"""
PSP34 capability sets.

Each extension is an independent protocol; a concrete ledger may implement
any subset. OwnershipLedger implements all of them, which lets hosts check
support structurally:

    if isinstance(ledger, PSP34Burnable):
        ledger.burn(account, id)
"""

from __future__ import annotations

from typing import Iterable, List, Protocol, Tuple, runtime_checkable

from .events import Event
from .types import AccountId, Id


@runtime_checkable
class PSP34(Protocol):
    """Base NFT surface: ownership, approvals and transfers."""

    def collection_id(self) -> Id: ...

    def total_supply(self) -> int: ...

    def balance_of(self, account: AccountId) -> int: ...

    def owner_of(self, id: Id) -> AccountId | None: ...

    def allowance(
        self, owner: AccountId, operator: AccountId, id: Id | None = None
    ) -> bool: ...

    def approve(
        self,
        caller: AccountId,
        operator: AccountId,
        id: Id | None = None,
        approved: bool = True,
    ) -> List[Event]: ...

    def transfer(
        self, from_account: AccountId, to: AccountId, id: Id, data: bytes = b""
    ) -> List[Event]: ...


@runtime_checkable
class PSP34Mintable(Protocol):
    def mint(self, account: AccountId) -> List[Event]: ...

    def mint_with_attributes(
        self, account: AccountId, attributes: Iterable[Tuple[bytes, bytes]]
    ) -> List[Event]: ...


@runtime_checkable
class PSP34Burnable(Protocol):
    def burn(self, account: AccountId, id: Id) -> List[Event]: ...


@runtime_checkable
class PSP34Enumerable(Protocol):
    """Index-based listing of all tokens and of one owner's tokens."""

    def token_by_index(self, index: int) -> Id | None: ...

    def owners_token_by_index(self, owner: AccountId, index: int) -> Id | None: ...


@runtime_checkable
class PSP34Metadata(Protocol):
    def get_attribute(self, id: Id, key: bytes) -> bytes | None: ...


ALL_CAPABILITIES = (PSP34, PSP34Mintable, PSP34Burnable, PSP34Enumerable, PSP34Metadata)


def supported_capabilities(ledger: object) -> List[str]:
    """Names of the capability sets the given object implements."""
    return [cap.__name__ for cap in ALL_CAPABILITIES if isinstance(ledger, cap)]
