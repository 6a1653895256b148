"""
A set of value-store indices, as returned by node queries.
"""

from typing import Iterable, Iterator, List, Optional


class ValueIndices:
    """
    Unordered, deduplicating collection of value indices.

    An interval that spans several buckets is stored in each of them, so the
    same index can be reported by more than one child during a query. Merging
    through this set reports it once.
    """
    __slots__ = ("_indices",)

    def __init__(self, indices: Optional[Iterable[int]] = None):
        self._indices = set(indices) if indices is not None else set()

    def add(self, index: int) -> None:
        self._indices.add(index)

    def merge(self, other: "ValueIndices") -> None:
        """Merge the other value indices into this set."""
        self._indices.update(other._indices)

    def is_empty(self) -> bool:
        return not self._indices

    def all(self) -> Iterator[int]:
        """Iterate over the value indices in no particular order."""
        return iter(self._indices)

    def sorted(self) -> List[int]:
        """Return the value indices in ascending order."""
        return sorted(self._indices)

    def __iter__(self) -> Iterator[int]:
        return self.all()

    def __len__(self) -> int:
        return len(self._indices)

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __contains__(self, index: int) -> bool:
        return index in self._indices

    def __eq__(self, other) -> bool:
        if not isinstance(other, ValueIndices):
            return NotImplemented
        return self._indices == other._indices

    def __repr__(self) -> str:
        return f"ValueIndices({self.sorted()})"
