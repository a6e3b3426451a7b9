"""
Two-tier approval registry.

Single-token approvals are keyed by (owner, operator, id); blanket approvals
by (owner, operator). An operator is effectively allowed on a token when
either tier grants it.
"""

from __future__ import annotations

from typing import Dict, List, Set, Tuple

from .types import AccountId, Id


class AllowanceRegistry:
    """Lookup/mutation table for single-token and blanket approvals."""

    def __init__(self) -> None:
        # (owner, id) -> operators
        self._single: Dict[Tuple[AccountId, Id], Set[AccountId]] = {}
        # id -> owners with a single-token entry on it
        self._single_owners: Dict[Id, Set[AccountId]] = {}
        # owner -> operators
        self._blanket: Dict[AccountId, Set[AccountId]] = {}

    def is_allowed(
        self, owner: AccountId, operator: AccountId, id: Id | None = None
    ) -> bool:
        """Check one tier only: the token tier for an id, the blanket tier for None."""
        if id is None:
            return operator in self._blanket.get(owner, ())
        return operator in self._single.get((owner, id), ())

    def is_effectively_allowed(
        self, owner: AccountId, operator: AccountId, id: Id
    ) -> bool:
        return self.is_allowed(owner, operator, id) or self.is_allowed(owner, operator)

    def add_allowance_operator(
        self, owner: AccountId, operator: AccountId, id: Id | None = None
    ) -> None:
        """Grant an approval. Granting an existing approval is a no-op."""
        if id is None:
            self._blanket.setdefault(owner, set()).add(operator)
        else:
            self._single.setdefault((owner, id), set()).add(operator)
            self._single_owners.setdefault(id, set()).add(owner)

    def remove_allowance_operator(
        self, owner: AccountId, operator: AccountId, id: Id | None = None
    ) -> None:
        """Revoke an approval. Revoking an absent approval is a no-op."""
        if id is None:
            operators = self._blanket.get(owner)
            if operators is None:
                return
            operators.discard(operator)
            if not operators:
                del self._blanket[owner]
            return

        operators = self._single.get((owner, id))
        if operators is None:
            return
        operators.discard(operator)
        if not operators:
            self._drop_single_entry(owner, id)

    def remove_token_allowances(self, owner: AccountId, id: Id) -> List[AccountId]:
        """Drop every single-token approval the owner granted on id.

        Returns:
            Operators whose approval was cleared
        """
        operators = self._drop_single_entry(owner, id)
        return sorted(operators, key=lambda account: account.raw)

    def remove_all_for_token(self, id: Id) -> int:
        """Drop every single-token approval on id, whoever granted it.

        Returns:
            Number of approvals cleared
        """
        cleared = 0
        for owner in list(self._single_owners.get(id, ())):
            cleared += len(self._drop_single_entry(owner, id))
        return cleared

    def operators_for(self, owner: AccountId, id: Id | None = None) -> List[AccountId]:
        if id is None:
            operators = self._blanket.get(owner, set())
        else:
            operators = self._single.get((owner, id), set())
        return sorted(operators, key=lambda account: account.raw)

    def single_count(self) -> int:
        return sum(len(operators) for operators in self._single.values())

    def blanket_count(self) -> int:
        return sum(len(operators) for operators in self._blanket.values())

    def _drop_single_entry(self, owner: AccountId, id: Id) -> Set[AccountId]:
        operators = self._single.pop((owner, id), set())
        owners = self._single_owners.get(id)
        if owners is not None:
            owners.discard(owner)
            if not owners:
                del self._single_owners[id]
        return operators
