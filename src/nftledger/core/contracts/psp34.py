"""
PSP34 Non-Fungible Token collection contract.

PSP34Collection is the host-facing contract object around one
OwnershipLedger. It adds what a deployed collection needs on top of the
ledger core:
- Caller-aware entry points (the caller is resolved by the host and passed in)
- Admin gating for minting, attributes and pausing
- Event buffering for the host's event emitter
- Structured logging and Prometheus metrics

Ledger errors propagate unchanged; a failed call leaves the collection
untouched.
"""

from __future__ import annotations

import hashlib
import itertools
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Tuple

from ..config import LedgerConfig
from ..events import Event, TransferEvent
from ..exceptions import CustomError, NotApprovedError, PSP34Error
from ..ledger import OwnershipLedger
from ..metrics import record_operation, update_supply_gauge
from ..types import AccountId, Id

logger = logging.getLogger(__name__)

AccountLike = AccountId | str

_address_nonce = itertools.count()


def _normalize(account: AccountLike) -> AccountId:
    """Accept an AccountId or its hex form."""
    if isinstance(account, AccountId):
        return account
    if isinstance(account, str):
        return AccountId.from_hex(account)
    raise TypeError(f"expected AccountId or hex string, got {type(account).__name__}")


@dataclass
class PSP34Collection:
    """
    Deployed PSP34 collection.

    Implements the PSP34 standard with extensions:
    - Mintable (admin only when the collection has an owner)
    - Burnable (by the holder or an approved operator)
    - Enumerable
    - Metadata (per-token attributes)
    """

    # Collection metadata
    name: str
    symbol: str

    # Admin account; None leaves minting open to any caller
    owner: AccountId | None = None

    # Contract address, derived when not given
    address: AccountId | None = None

    config: LedgerConfig = field(default_factory=LedgerConfig)

    paused: bool = False

    # Events awaiting emission by the host
    events: List[Event] = field(default_factory=list)

    ledger: OwnershipLedger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize collection contract."""
        if self.owner is not None:
            self.owner = _normalize(self.owner)
        if self.address is None:
            nonce = next(_address_nonce)
            addr_input = f"{self.name}{self.symbol}{time.time()}{nonce}".encode()
            self.address = AccountId(hashlib.sha3_256(addr_input).digest())
        else:
            self.address = _normalize(self.address)

        self.ledger = OwnershipLedger(
            config=self.config, collection_id=Id.bytes_(self.address.raw)
        )

    # ==================== View Functions ====================

    def collection_id(self) -> Id:
        return self.ledger.collection_id()

    def total_supply(self) -> int:
        return self.ledger.total_supply()

    def max_supply(self) -> int | None:
        return self.ledger.max_supply()

    def balance_of(self, account: AccountLike) -> int:
        return self.ledger.balance_of(_normalize(account))

    def owner_of(self, id: Id) -> AccountId | None:
        return self.ledger.owner_of(id)

    def allowance(
        self, owner: AccountLike, operator: AccountLike, id: Id | None = None
    ) -> bool:
        return self.ledger.allowance(_normalize(owner), _normalize(operator), id)

    def get_attribute(self, id: Id, key: bytes) -> bytes | None:
        return self.ledger.get_attribute(id, key)

    def token_by_index(self, index: int) -> Id | None:
        """
        Get token id by global index.

        Returns None past the end, or raises OutOfBoundsIndexError when the
        collection is configured with raise_on_out_of_bounds.
        """
        if self.config.raise_on_out_of_bounds:
            return self.ledger.require_token_by_index(index)
        return self.ledger.token_by_index(index)

    def owners_token_by_index(self, owner: AccountLike, index: int) -> Id | None:
        owner_id = _normalize(owner)
        if self.config.raise_on_out_of_bounds:
            return self.ledger.require_owners_token_by_index(owner_id, index)
        return self.ledger.owners_token_by_index(owner_id, index)

    # ==================== State-Changing Functions ====================

    def approve(
        self,
        caller: AccountLike,
        operator: AccountLike,
        id: Id | None = None,
        approved: bool = True,
    ) -> bool:
        """
        Grant or revoke an approval.

        Args:
            caller: Message sender
            operator: Account to approve or revoke
            id: Token id, or None for all of the caller's tokens
            approved: Approval status

        Returns:
            True if successful
        """
        caller_id = _normalize(caller)
        operator_id = _normalize(operator)

        self._execute(
            "approve",
            lambda: self.ledger.approve(caller_id, operator_id, id, approved),
        )

        logger.debug(
            "PSP34 approval",
            extra={
                "event": "psp34.approve",
                "collection": self.symbol,
                "token_id": repr(id),
                "operator": operator_id.short(),
                "approved": approved,
            },
        )
        return True

    def transfer(
        self, caller: AccountLike, to: AccountLike, id: Id, data: bytes = b""
    ) -> bool:
        """
        Transfer a token the caller owns or is approved for.

        Args:
            caller: Message sender
            to: New owner
            id: Token id
            data: Opaque payload passed along with the transfer

        Returns:
            True if successful
        """
        caller_id = _normalize(caller)
        to_id = _normalize(to)

        events = self._execute(
            "transfer", lambda: self.ledger.transfer(caller_id, to_id, id, data)
        )
        self._log_transfer(events[0])
        return True

    def transfer_from(
        self,
        caller: AccountLike,
        from_addr: AccountLike,
        to: AccountLike,
        id: Id,
        data: bytes = b"",
    ) -> bool:
        """Transfer a token out of from_addr, which must be its owner."""
        caller_id = _normalize(caller)
        from_id = _normalize(from_addr)
        to_id = _normalize(to)

        events = self._execute(
            "transfer_from",
            lambda: self.ledger.transfer_from(caller_id, from_id, to_id, id, data),
        )
        self._log_transfer(events[0])
        return True

    def _log_transfer(self, event: TransferEvent) -> None:
        logger.debug(
            "PSP34 transfer",
            extra={
                "event": "psp34.transfer",
                "collection": self.symbol,
                "token_id": repr(event.id),
                "from": event.from_account.short(),
                "to": event.to_account.short(),
            },
        )

    # ==================== Minting & Burning ====================

    def mint(self, caller: AccountLike, to: AccountLike) -> Id:
        """
        Mint a new token with the next generated id.

        Args:
            caller: Address calling mint (must be owner when one is set)
            to: Recipient address

        Returns:
            Minted token id
        """
        to_id = _normalize(to)

        events = self._execute("mint", lambda: self.ledger.mint(to_id), admin=caller)
        token_id = events[0].id

        logger.info(
            "PSP34 mint",
            extra={
                "event": "psp34.mint",
                "collection": self.symbol,
                "token_id": repr(token_id),
                "to": to_id.short(),
            },
        )
        return token_id

    def mint_with_attributes(
        self,
        caller: AccountLike,
        to: AccountLike,
        attributes: Iterable[Tuple[bytes, bytes]],
    ) -> Id:
        """Mint a new token and set its attributes."""
        to_id = _normalize(to)
        pairs = list(attributes)

        events = self._execute(
            "mint_with_attributes",
            lambda: self.ledger.mint_with_attributes(to_id, pairs),
            admin=caller,
        )
        token_id = events[0].id

        logger.info(
            "PSP34 mint",
            extra={
                "event": "psp34.mint",
                "collection": self.symbol,
                "token_id": repr(token_id),
                "to": to_id.short(),
                "attributes": len(pairs),
            },
        )
        return token_id

    def burn(self, caller: AccountLike, account: AccountLike, id: Id) -> bool:
        """
        Burn a token.

        Args:
            caller: Message sender (must be the holder or approved)
            account: Current holder of the token
            id: Token id to burn

        Returns:
            True if successful
        """
        caller_id = _normalize(caller)
        account_id = _normalize(account)

        def _burn() -> List[Event]:
            if (
                caller_id != account_id
                and self.ledger.owner_of(id) == account_id
                and not self.ledger.is_approved_or_owner(caller_id, id)
            ):
                raise NotApprovedError(
                    f"caller is not holder nor approved for token {id!r}",
                    details={"caller": caller_id.hex()},
                )
            return self.ledger.burn(account_id, id)

        self._execute("burn", _burn)

        logger.info(
            "PSP34 burn",
            extra={
                "event": "psp34.burn",
                "collection": self.symbol,
                "token_id": repr(id),
            },
        )
        return True

    # ==================== Admin Functions ====================

    def set_attribute(self, caller: AccountLike, id: Id, key: bytes, value: bytes) -> bool:
        """Set a token (or collection) attribute."""
        self._execute(
            "set_attribute",
            lambda: self.ledger.set_attribute(id, key, value),
            admin=caller,
        )
        return True

    def pause(self, caller: AccountLike) -> bool:
        """Pause state-changing operations."""
        self._execute(
            "pause", lambda: self._set_paused(True), admin=caller, check_paused=False
        )
        return True

    def unpause(self, caller: AccountLike) -> bool:
        """Resume state-changing operations."""
        self._execute(
            "unpause", lambda: self._set_paused(False), admin=caller, check_paused=False
        )
        return True

    def _set_paused(self, paused: bool) -> List[Event]:
        self.paused = paused
        return []

    def drain_events(self) -> List[Event]:
        """Hand buffered events to the emitter and clear the buffer."""
        drained, self.events = self.events, []
        return drained

    # ==================== Helpers ====================

    def _execute(
        self,
        operation: str,
        action: Callable[[], List[Event]],
        admin: AccountLike | None = None,
        check_paused: bool = True,
    ) -> List[Event]:
        """
        Run one guarded ledger operation, buffering its events and recording metrics.

        Args:
            operation: Metric label for the operation
            action: Ledger call producing the operation's events
            admin: Caller to check against the collection owner, for admin-only calls
            check_paused: Reject the call while the collection is paused
        """
        try:
            if check_paused:
                self._require_not_paused()
            if admin is not None:
                self._require_owner(admin)
            events = action()
        except PSP34Error as exc:
            record_operation(operation, exc.kind.value)
            raise

        self.events.extend(events)
        record_operation(operation, "ok")
        update_supply_gauge(self.address.hex(), self.ledger.total_supply())
        return events

    def _require_owner(self, caller: AccountLike) -> None:
        """Require caller is the collection owner, when one is set."""
        if self.owner is None:
            return
        if _normalize(caller) != self.owner:
            raise CustomError("caller is not the collection owner")

    def _require_not_paused(self) -> None:
        if self.paused:
            raise CustomError("collection is paused")

    def summary(self) -> Dict[str, Any]:
        return {
            "address": self.address.hex(),
            "name": self.name,
            "symbol": self.symbol,
            "total_supply": self.total_supply(),
            "max_supply": self.max_supply(),
            "owner": self.owner.hex() if self.owner else None,
            "paused": self.paused,
        }


class PSP34Factory:
    """Factory for deploying PSP34 collections."""

    def __init__(self) -> None:
        self.deployed_collections: dict[str, PSP34Collection] = {}

    def create_collection(
        self,
        creator: AccountLike,
        name: str,
        symbol: str,
        max_supply: int | None = None,
        config: LedgerConfig | None = None,
    ) -> PSP34Collection:
        """
        Deploy a new collection.

        Args:
            creator: Collection owner
            name: Collection name
            symbol: Collection symbol
            max_supply: Maximum live tokens (None = unbounded); overrides config
            config: Ledger settings for the collection

        Returns:
            Deployed PSP34Collection instance
        """
        if not name:
            raise CustomError("PSP34Factory: name cannot be empty")
        if not symbol:
            raise CustomError("PSP34Factory: symbol cannot be empty")

        config = config or LedgerConfig()
        if max_supply is not None:
            config = replace(config, max_supply=max_supply)

        creator_id = _normalize(creator)
        collection = PSP34Collection(
            name=name,
            symbol=symbol,
            owner=creator_id,
            config=config,
        )
        self.deployed_collections[collection.address.hex()] = collection

        logger.info(
            "PSP34 collection created",
            extra={
                "event": "psp34.created",
                "address": collection.address.hex(),
                "collection_name": name,
                "symbol": symbol,
                "creator": creator_id.short(),
            },
        )
        return collection

    def get_collection(self, address: AccountLike) -> PSP34Collection | None:
        """Get a deployed collection by address."""
        return self.deployed_collections.get(_normalize(address).hex())

    def list_collections(self) -> list[dict[str, Any]]:
        """List all deployed collections."""
        return [coll.summary() for coll in self.deployed_collections.values()]
