"""Multi-item selection tracking keyed by item identity."""

from __future__ import annotations

from typing import Generic, Hashable, Iterable, Mapping, TypeVar

ID = TypeVar("ID", bound=Hashable)


class SelectionSet(Generic[ID]):
    """Maps a selected identity to its position in the current list."""

    def __init__(self) -> None:
        self._positions: dict[ID, int] = {}

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, identity: object) -> bool:
        return identity in self._positions

    def toggle(self, identity: ID, index: int) -> None:
        if identity in self._positions:
            del self._positions[identity]
        else:
            self._positions[identity] = index

    def select(self, identity: ID, index: int) -> None:
        self._positions[identity] = index

    def clear(self) -> None:
        self._positions.clear()

    def is_selected(self, identity: ID) -> bool:
        return identity in self._positions

    def index_of(self, identity: ID) -> int | None:
        return self._positions.get(identity)

    def ids(self) -> list[ID]:
        return sorted(self._positions, key=self._positions.__getitem__)

    def ids_in(self, order: Iterable[ID]) -> list[ID]:
        return [identity for identity in order if identity in self._positions]

    def reconcile(self, positions: Mapping[ID, int]) -> None:
        """Drop identities no longer listed and refresh the rest's positions."""
        self._positions = {
            identity: positions[identity]
            for identity in self._positions
            if identity in positions
        }
