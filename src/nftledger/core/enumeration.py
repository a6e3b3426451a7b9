"""
Dense enumeration arrays with O(1) membership and removal.

EnumerationIndex pairs a growable array with an inverse map from element to
its current position. Removal uses swap-and-pop: the last element is moved
into the vacated slot and the array shrinks by one. Relative order of the
survivors is not preserved, but the array/position bijection always is.

OwnerEnumeration keys one EnumerationIndex per owner, creating it on first
insert and dropping it once empty.
"""

from __future__ import annotations

from typing import Dict, Generic, Hashable, Iterator, List, TypeVar

from .exceptions import (
    OutOfBoundsIndexError,
    StateInconsistencyError,
    TokenExistsError,
    TokenNotExistsError,
)

T = TypeVar("T", bound=Hashable)
K = TypeVar("K", bound=Hashable)


class EnumerationIndex(Generic[T]):
    """Order-indexed set of elements with swap-and-pop removal."""

    def __init__(self) -> None:
        self._sequence: List[T] = []
        self._position_of: Dict[T, int] = {}

    def add(self, item: T) -> int:
        """
        Append an element.

        Args:
            item: Element to append

        Returns:
            Position the element now occupies

        Raises:
            TokenExistsError: If the element is already indexed
        """
        if item in self._position_of:
            raise TokenExistsError(f"{item!r} is already indexed")
        self._sequence.append(item)
        position = len(self._sequence) - 1
        self._position_of[item] = position
        return position

    def remove(self, item: T) -> None:
        """
        Remove an element by swapping the last element into its slot.

        Raises:
            TokenNotExistsError: If the element is not indexed
        """
        position = self._position_of.get(item)
        if position is None:
            raise TokenNotExistsError(f"{item!r} is not indexed")

        last = len(self._sequence) - 1
        if position != last:
            moved = self._sequence[last]
            self._sequence[position] = moved
            self._position_of[moved] = position

        self._sequence.pop()
        del self._position_of[item]

    def at(self, index: int) -> T | None:
        """Bounds-checked read; None when index is outside [0, len)."""
        if index < 0 or index >= len(self._sequence):
            return None
        return self._sequence[index]

    def require_at(self, index: int) -> T:
        """Like at() but raises OutOfBoundsIndexError instead of returning None."""
        item = self.at(index)
        if item is None:
            raise OutOfBoundsIndexError(
                f"index {index} out of bounds for length {len(self._sequence)}"
            )
        return item

    def position(self, item: T) -> int | None:
        return self._position_of.get(item)

    def contains(self, item: T) -> bool:
        return item in self._position_of

    def to_list(self) -> List[T]:
        return list(self._sequence)

    def check_integrity(self) -> None:
        """
        Verify the array/position bijection.

        Raises:
            StateInconsistencyError: If any position disagrees with the array
        """
        if len(self._sequence) != len(self._position_of):
            raise StateInconsistencyError(
                f"sequence length {len(self._sequence)} != "
                f"position map size {len(self._position_of)}"
            )
        for index, item in enumerate(self._sequence):
            if self._position_of.get(item) != index:
                raise StateInconsistencyError(
                    f"{item!r} at index {index} mapped to "
                    f"{self._position_of.get(item)}"
                )

    def __contains__(self, item: object) -> bool:
        return item in self._position_of

    def __len__(self) -> int:
        return len(self._sequence)

    def __iter__(self) -> Iterator[T]:
        return iter(self._sequence)

    def __repr__(self) -> str:
        return f"EnumerationIndex({self._sequence!r})"


class OwnerEnumeration(Generic[K, T]):
    """One EnumerationIndex per owning key."""

    def __init__(self) -> None:
        self._indices: Dict[K, EnumerationIndex[T]] = {}

    def add(self, owner: K, item: T) -> int:
        index = self._indices.get(owner)
        if index is None:
            index = EnumerationIndex()
            index.add(item)
            self._indices[owner] = index
            return 0
        return index.add(item)

    def remove(self, owner: K, item: T) -> None:
        index = self._indices.get(owner)
        if index is None:
            raise TokenNotExistsError(f"{item!r} is not indexed for {owner!r}")
        index.remove(item)
        if not index:
            del self._indices[owner]

    def at(self, owner: K, position: int) -> T | None:
        index = self._indices.get(owner)
        if index is None:
            return None
        return index.at(position)

    def require_at(self, owner: K, position: int) -> T:
        item = self.at(owner, position)
        if item is None:
            raise OutOfBoundsIndexError(
                f"owner index {position} out of bounds for length {self.count(owner)}"
            )
        return item

    def contains(self, owner: K, item: T) -> bool:
        index = self._indices.get(owner)
        return index is not None and item in index

    def count(self, owner: K) -> int:
        index = self._indices.get(owner)
        return len(index) if index is not None else 0

    def items_of(self, owner: K) -> List[T]:
        index = self._indices.get(owner)
        return index.to_list() if index is not None else []

    def owners(self) -> List[K]:
        return list(self._indices)

    def check_integrity(self) -> None:
        for owner, index in self._indices.items():
            if not index:
                raise StateInconsistencyError(f"empty index retained for {owner!r}")
            index.check_integrity()
