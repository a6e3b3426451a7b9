"""
Event records produced by ledger operations.

The ledger never emits anything itself; it returns these records and the
hosting layer decides how to publish them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from .types import AccountId, Id


@dataclass(frozen=True)
class TransferEvent:
    """Token moved between accounts. from=None is a mint, to=None a burn."""

    from_account: AccountId | None
    to_account: AccountId | None
    id: Id

    @property
    def is_mint(self) -> bool:
        return self.from_account is None

    @property
    def is_burn(self) -> bool:
        return self.to_account is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "Transfer",
            "from": self.from_account.hex() if self.from_account else None,
            "to": self.to_account.hex() if self.to_account else None,
            "id": repr(self.id),
        }


@dataclass(frozen=True)
class ApprovalEvent:
    """Operator approval granted or revoked. id=None is a blanket approval."""

    owner: AccountId
    operator: AccountId
    id: Id | None
    approved: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "Approval",
            "owner": self.owner.hex(),
            "operator": self.operator.hex(),
            "id": repr(self.id) if self.id is not None else None,
            "approved": self.approved,
        }


@dataclass(frozen=True)
class AttributeSetEvent:
    id: Id
    key: bytes
    data: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": "AttributeSet",
            "id": repr(self.id),
            "key": self.key.hex(),
            "data": self.data.hex(),
        }


Event = Union[TransferEvent, ApprovalEvent, AttributeSetEvent]
