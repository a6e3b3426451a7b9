"""
PSP34 ownership ledger.

OwnershipLedger is the single state aggregate of an NFT collection:
- owner map (token -> account) and balances (account -> count)
- global and per-owner enumeration indices
- two-tier allowance registry
- per-token attribute store

Every state-changing operation validates all of its preconditions before the
first write. A raised PSP34Error therefore always leaves the ledger exactly as
it was. Successful operations return the event records describing what
happened; publishing them is the caller's concern.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .allowances import AllowanceRegistry
from .attributes import AttributeStore, as_bytes
from .config import LedgerConfig
from .enumeration import EnumerationIndex, OwnerEnumeration
from .events import ApprovalEvent, AttributeSetEvent, Event, TransferEvent
from .exceptions import (
    CustomError,
    NotAllowedToApproveError,
    NotApprovedError,
    ReachedMaxSupplyError,
    SafeTransferCheckFailedError,
    SelfApproveError,
    StateInconsistencyError,
    TokenExistsError,
    TokenNotExistsError,
)
from .types import AccountId, Id

DEFAULT_COLLECTION_ID = Id.u8(0)


class OwnershipLedger:
    """
    Complete PSP34 ledger: base, mintable, burnable, enumerable and metadata.

    Args:
        config: Behavioural settings (max supply, id kind, approval mode...)
        collection_id: Id reported by collection_id()
    """

    def __init__(
        self,
        config: LedgerConfig | None = None,
        collection_id: Id | None = None,
    ) -> None:
        self.config = config or LedgerConfig()
        self.config.validate()
        self._collection_id = collection_id or DEFAULT_COLLECTION_ID

        self._owner_of: Dict[Id, AccountId] = {}
        self._balances: Dict[AccountId, int] = {}
        self._total_supply = 0
        self._next_token_id = self.config.first_token_id

        self._all_tokens: EnumerationIndex[Id] = EnumerationIndex()
        self._owner_tokens: OwnerEnumeration[AccountId, Id] = OwnerEnumeration()
        self.allowances = AllowanceRegistry()
        self.attributes = AttributeStore()

    # ==================== View Functions ====================

    def collection_id(self) -> Id:
        return self._collection_id

    def total_supply(self) -> int:
        return self._total_supply

    def max_supply(self) -> int | None:
        """Maximum number of live tokens, None when unbounded."""
        return self.config.max_supply

    def balance_of(self, account: AccountId) -> int:
        return self._balances.get(account, 0)

    def owner_of(self, id: Id) -> AccountId | None:
        return self._owner_of.get(id)

    def exists(self, id: Id) -> bool:
        return id in self._owner_of

    def allowance(
        self, owner: AccountId, operator: AccountId, id: Id | None = None
    ) -> bool:
        """
        Check a recorded approval.

        With an id, reports the single-token approval on that id; with None,
        the blanket approval over all of the owner's tokens. Use
        is_approved_or_owner() for the combined permission check.
        """
        return self.allowances.is_allowed(owner, operator, id)

    def is_approved_or_owner(self, account: AccountId, id: Id) -> bool:
        """True when account may move id: it owns it or holds either approval."""
        owner = self._owner_of.get(id)
        if owner is None or account.is_zero:
            return False
        return owner == account or self.allowances.is_effectively_allowed(
            owner, account, id
        )

    def next_token_id(self) -> int:
        """Counter value the next generated id will start from."""
        return self._next_token_id

    # ==================== Enumerable ====================

    def token_by_index(self, index: int) -> Id | None:
        return self._all_tokens.at(index)

    def owners_token_by_index(self, owner: AccountId, index: int) -> Id | None:
        return self._owner_tokens.at(owner, index)

    def require_token_by_index(self, index: int) -> Id:
        """Raises OutOfBoundsIndexError instead of returning None."""
        return self._all_tokens.require_at(index)

    def require_owners_token_by_index(self, owner: AccountId, index: int) -> Id:
        return self._owner_tokens.require_at(owner, index)

    def all_tokens(self) -> List[Id]:
        return self._all_tokens.to_list()

    def tokens_of(self, owner: AccountId) -> List[Id]:
        return self._owner_tokens.items_of(owner)

    # ==================== Metadata ====================

    def get_attribute(self, id: Id, key: bytes) -> bytes | None:
        return self.attributes.get(id, key)

    def set_attribute(self, id: Id, key: bytes, value: bytes) -> List[Event]:
        """Write one attribute; the token need not exist."""
        self._check_id(id)
        key = as_bytes(key, "key")
        value = as_bytes(value, "value")
        self.attributes.set(id, key, value)
        return [AttributeSetEvent(id=id, key=key, data=value)]

    # ==================== Approvals ====================

    def approve(
        self,
        caller: AccountId,
        operator: AccountId,
        id: Id | None = None,
        approved: bool = True,
    ) -> List[Event]:
        """
        Grant or revoke an approval.

        With an id, the caller must own the token or already be allowed on it,
        and the approval is recorded against the token's owner. Without an id,
        the caller grants or revokes a blanket approval over its own tokens.

        Args:
            caller: Account making the request
            operator: Account being approved or revoked
            id: Token id, or None for a blanket approval
            approved: True to grant, False to revoke

        Returns:
            A single ApprovalEvent

        Raises:
            TokenNotExistsError: If id does not exist
            SelfApproveError: If the owner approves itself
            NotApprovedError: If caller may not manage approvals for id
            NotAllowedToApproveError: In strict mode, if operator already has
                a blanket approval from the owner
        """
        self._check_account(caller)
        self._check_account(operator)

        if id is None:
            owner = caller
            if approved and operator == owner:
                raise SelfApproveError(
                    "owner cannot approve itself for all tokens",
                    details={"owner": owner.hex()},
                )
        else:
            self._check_id(id)
            owner = self._owner_of.get(id)
            if owner is None:
                raise TokenNotExistsError(f"token {id!r} does not exist")
            if approved and owner == operator:
                raise SelfApproveError(
                    f"owner cannot approve itself for token {id!r}",
                    details={"owner": owner.hex()},
                )
            if caller != owner and not self.allowances.is_effectively_allowed(
                owner, caller, id
            ):
                raise NotApprovedError(
                    f"caller may not manage approvals for token {id!r}",
                    details={"caller": caller.hex()},
                )
            if (
                approved
                and self.config.strict_approvals
                and self.allowances.is_allowed(owner, operator)
            ):
                raise NotAllowedToApproveError(
                    "operator already approved for all tokens of the owner",
                    details={"operator": operator.hex()},
                )

        if approved:
            self.allowances.add_allowance_operator(owner, operator, id)
        else:
            self.allowances.remove_allowance_operator(owner, operator, id)

        return [ApprovalEvent(owner=owner, operator=operator, id=id, approved=approved)]

    # ==================== Transfers ====================

    def transfer(
        self,
        from_account: AccountId,
        to: AccountId,
        id: Id,
        data: bytes = b"",
    ) -> List[Event]:
        """
        Move a token on behalf of from_account.

        from_account must own the token or hold an approval on it. The token
        leaves its current owner, and every single-token approval the owner
        granted on it is dropped.

        Raises:
            TokenNotExistsError: If id does not exist
            SafeTransferCheckFailedError: If to is the zero account
            NotApprovedError: If from_account may not move the token
        """
        return self._transfer(from_account, None, to, id, data)

    def transfer_from(
        self,
        caller: AccountId,
        from_account: AccountId,
        to: AccountId,
        id: Id,
        data: bytes = b"",
    ) -> List[Event]:
        """Like transfer(), with an explicit owner that must match the token's."""
        return self._transfer(caller, from_account, to, id, data)

    def _transfer(
        self,
        actor: AccountId,
        expected_owner: AccountId | None,
        to: AccountId,
        id: Id,
        data: bytes,
    ) -> List[Event]:
        self._check_account(actor)
        self._check_account(to)
        self._check_id(id)
        as_bytes(data, "payload")

        owner = self._owner_of.get(id)
        if owner is None:
            raise TokenNotExistsError(f"token {id!r} does not exist")

        if to.is_zero:
            raise SafeTransferCheckFailedError("'to' account is zeroed")

        if expected_owner is not None and expected_owner != owner:
            raise NotApprovedError(
                f"'from' account does not own token {id!r}",
                details={"from": expected_owner.hex()},
            )

        if not self.is_approved_or_owner(actor, id):
            raise NotApprovedError(
                f"caller is not owner nor approved for token {id!r}",
                details={"caller": actor.hex()},
            )

        self.allowances.remove_token_allowances(owner, id)
        self._owner_of[id] = to
        self._decrement_balance(owner)
        self._balances[to] = self._balances.get(to, 0) + 1
        self._owner_tokens.remove(owner, id)
        self._owner_tokens.add(to, id)

        return [TransferEvent(from_account=owner, to_account=to, id=id)]

    # ==================== Minting & Burning ====================

    def mint(self, account: AccountId) -> List[Event]:
        """
        Mint a token with the next generated id.

        Ids come from a monotonic counter of the configured kind and are
        never handed out twice, even after the token is burned.

        Raises:
            SafeTransferCheckFailedError: If account is the zero account
            ReachedMaxSupplyError: If the collection is at max supply
            CustomError: If the id kind has no ids left
        """
        self._check_mint_target(account)
        id, next_counter = self._generate_token_id()

        self._add_token(account, id)
        self._next_token_id = next_counter
        return [TransferEvent(from_account=None, to_account=account, id=id)]

    def mint_with_id(self, account: AccountId, id: Id) -> List[Event]:
        """
        Mint a token with a caller-chosen id.

        A burned id may be minted again. Single-token approvals left over
        from its earlier life are dropped, so they never carry over to the
        new token.

        Raises:
            TokenExistsError: If id is already owned
            SafeTransferCheckFailedError: If account is the zero account
            ReachedMaxSupplyError: If the collection is at max supply
        """
        self._check_id(id)
        if id in self._owner_of:
            raise TokenExistsError(f"token {id!r} already exists")
        self._check_mint_target(account)

        self._add_token(account, id)
        return [TransferEvent(from_account=None, to_account=account, id=id)]

    def mint_with_attributes(
        self,
        account: AccountId,
        attributes: Iterable[Tuple[bytes, bytes]],
    ) -> List[Event]:
        """Mint a generated id and write its attributes in one step."""
        pairs = self._normalize_attributes(attributes)
        events = self.mint(account)
        id = events[0].id
        for key, value in pairs:
            self.attributes.set(id, key, value)
            events.append(AttributeSetEvent(id=id, key=key, data=value))
        return events

    def burn(self, account: AccountId, id: Id) -> List[Event]:
        """
        Destroy a token held by account.

        With purge_on_burn enabled (the default) the token's single-token
        approvals and attributes are cleared as well. With it disabled the
        approvals stay recorded until the id is minted again.

        Raises:
            TokenNotExistsError: If id does not exist or is not held by account
        """
        self._check_account(account)
        self._check_id(id)

        owner = self._owner_of.get(id)
        if owner is None:
            raise TokenNotExistsError(f"token {id!r} does not exist")
        if owner != account:
            raise TokenNotExistsError(
                f"token {id!r} is not held by account",
                details={"account": account.hex()},
            )

        if self.config.purge_on_burn:
            self.allowances.remove_token_allowances(owner, id)
            self.attributes.clear(id)

        del self._owner_of[id]
        self._decrement_balance(owner)
        self._all_tokens.remove(id)
        self._owner_tokens.remove(owner, id)
        self._total_supply -= 1

        return [TransferEvent(from_account=owner, to_account=None, id=id)]

    # ==================== Integrity ====================

    def check_invariants(self) -> None:
        """
        Verify supply, balance and enumeration consistency.

        Raises:
            StateInconsistencyError: On the first violated invariant
        """
        if self._total_supply != len(self._owner_of):
            raise StateInconsistencyError(
                f"total supply {self._total_supply} != {len(self._owner_of)} owned tokens"
            )
        if len(self._all_tokens) != self._total_supply:
            raise StateInconsistencyError(
                f"global index holds {len(self._all_tokens)} ids, "
                f"supply is {self._total_supply}"
            )
        max_supply = self.config.max_supply
        if max_supply is not None and self._total_supply > max_supply:
            raise StateInconsistencyError(
                f"total supply {self._total_supply} exceeds max {max_supply}"
            )

        counted: Dict[AccountId, int] = {}
        for id, owner in self._owner_of.items():
            counted[owner] = counted.get(owner, 0) + 1
            if id not in self._all_tokens:
                raise StateInconsistencyError(f"{id!r} missing from global index")
            if not self._owner_tokens.contains(owner, id):
                raise StateInconsistencyError(f"{id!r} missing from owner index")

        if counted != self._balances:
            raise StateInconsistencyError("balances disagree with owner map")
        for owner in self._owner_tokens.owners():
            if self._owner_tokens.count(owner) != counted.get(owner, 0):
                raise StateInconsistencyError(
                    f"owner index size disagrees with balance for {owner!r}"
                )

        self._all_tokens.check_integrity()
        self._owner_tokens.check_integrity()

    # ==================== Helpers ====================

    def _add_token(self, account: AccountId, id: Id) -> None:
        # a re-minted id starts with no single-token approvals, whoever filed them
        self.allowances.remove_all_for_token(id)
        self._owner_of[id] = account
        self._balances[account] = self._balances.get(account, 0) + 1
        self._all_tokens.add(id)
        self._owner_tokens.add(account, id)
        self._total_supply += 1

    def _decrement_balance(self, account: AccountId) -> None:
        count = self._balances[account] - 1
        if count:
            self._balances[account] = count
        else:
            del self._balances[account]

    def _check_mint_target(self, account: AccountId) -> None:
        self._check_account(account)
        if account.is_zero:
            raise SafeTransferCheckFailedError("'to' account is zeroed")
        max_supply = self.config.max_supply
        if max_supply is not None and self._total_supply >= max_supply:
            raise ReachedMaxSupplyError(
                f"max supply {max_supply} reached",
                details={"max_supply": max_supply},
            )

    def _generate_token_id(self) -> Tuple[Id, int]:
        """Find the next free id without committing the counter."""
        kind = self.config.id_kind
        candidate = self._next_token_id
        while candidate <= kind.max_value:
            id = Id(kind, candidate)
            if id not in self._owner_of:
                return id, candidate + 1
            candidate += 1
        raise CustomError(
            f"no {kind.name} token ids left to generate",
            details={"id_kind": kind.name},
        )

    @staticmethod
    def _normalize_attributes(
        attributes: Iterable[Tuple[bytes, bytes]],
    ) -> List[Tuple[bytes, bytes]]:
        pairs = []
        for position, pair in enumerate(attributes):
            try:
                key, value = pair
                pairs.append((as_bytes(key, "key"), as_bytes(value, "value")))
            except (TypeError, ValueError) as exc:
                raise CustomError(
                    f"malformed attribute at position {position}: {exc}"
                ) from exc
        return pairs

    @staticmethod
    def _check_account(account: object) -> None:
        if not isinstance(account, AccountId):
            raise TypeError(f"expected AccountId, got {type(account).__name__}")

    @staticmethod
    def _check_id(id: object) -> None:
        if not isinstance(id, Id):
            raise TypeError(f"expected Id, got {type(id).__name__}")
