"""Bidirectional mapping between external identifiers and dense indices.

The factorization backend works on contiguous 0-based rows and columns, while
callers hand us arbitrary hashable ids (ints, strings, ...). IdentifierIndex
keeps both directions: a dict for id -> index lookups and a list for
index -> id, so that iteration follows first-seen order.
"""

from typing import Dict, Hashable, Iterable, Iterator, List, Optional


class IdentifierIndex:
    """Ordered id <-> index map, one instance per entity kind and per fit."""

    def __init__(self, ids: Optional[Iterable[Hashable]] = None):
        self._index_of: Dict[Hashable, int] = {}
        self._ids: List[Hashable] = []
        if ids is not None:
            for external_id in ids:
                self.add(external_id)

    def add(self, external_id: Hashable) -> int:
        """Return the index of an id, assigning the next free one if unseen."""
        index = self._index_of.get(external_id)
        if index is None:
            index = len(self._ids)
            self._index_of[external_id] = index
            self._ids.append(external_id)
        return index

    def index_of(self, external_id: Hashable) -> Optional[int]:
        """Return the dense index of an id, or None when it is unknown."""
        try:
            return self._index_of.get(external_id)
        except TypeError:
            # unhashable ids can never have been indexed
            return None

    def id_of(self, index: int) -> Hashable:
        return self._ids[index]

    def ids(self) -> List[Hashable]:
        """Return the ids in first-seen order."""
        return list(self._ids)

    def __contains__(self, external_id: object) -> bool:
        return self.index_of(external_id) is not None

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._ids)

    def __repr__(self) -> str:
        return f"IdentifierIndex(size={len(self._ids)})"
