"""
Nodes of the multi-binned interval tree.

A hierarchical node buckets intervals by the most significant radix digit of
their endpoints:

    MSB bits:  0123     4567 ...
               bucket   offset...

Before an interval is handed to a child, the consumed digit is shifted out
(left shift, truncated to 64 bits), so the same interval has a different bit
pattern at every depth. An interval spanning several buckets is stored in
each of them, clipped to the part of the bucket it covers:

    | bucket 0 | bucket 1 | bucket 2 | ...
        ^--------------------^
      start                 end

The first bucket gets [start << P, MAX], the middle buckets get [0, MAX] and
the last bucket gets [0, end << P].

Leaf nodes hold the intervals in parallel lists and answer queries with a
linear scan. A leaf that has grown large enough, and whose intervals would
actually be separated by routing, is promoted into a hierarchical node.

Every mutating call returns the node the caller must store in its slot.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .config import DEFAULT_CONFIG, TreeConfig
from .interval import MAX_UINT64, Interval
from .logging_config import get_logger
from .value_indices import ValueIndices

logger = get_logger(__name__)


# Power of two giving the branching factor, i.e. 4 -> 2**4 = 16 children.
BRANCHING_FACTOR_POWER = DEFAULT_CONFIG.branching_factor_power

HIERARCHICAL_FANOUT = DEFAULT_CONFIG.hierarchical_fanout

# Leaf size step at which promotion is evaluated.
MAX_LEAF_FANOUT = DEFAULT_CONFIG.max_leaf_fanout


class Node(ABC):
    """Interface shared by leaf and hierarchical nodes."""
    __slots__ = ()

    @abstractmethod
    def add(self, interval: Interval, values_index: int) -> "Node":
        """
        Insert an interval referring to the given value index.

        Returns:
            The node that replaces this one in its parent slot. This is the
            receiver itself unless a leaf was promoted.
        """
        ...

    @abstractmethod
    def all_intersections(self, start: int, end: int) -> ValueIndices:
        """Return the indices of all intervals intersecting [start, end]."""
        ...

    @abstractmethod
    def walk(self, depth: int = 0) -> Iterator[Tuple[int, "Node"]]:
        """Yield (depth, node) for this subtree, depth first."""
        ...


class HierarchicalNode(Node):
    """A node with one child slot per radix digit value."""
    __slots__ = ("children", "config")

    def __init__(self, config: Optional[TreeConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.children: List[Optional[Node]] = [None] * self.config.hierarchical_fanout

    def _route(self, start: int, end: int) -> Iterator[Tuple[int, int, int]]:
        """Yield (bucket, child_start, child_end) for each bucket [start, end] covers."""
        power = self.config.branching_factor_power
        start_bucket = start >> (64 - power)
        end_bucket = end >> (64 - power)

        for i in range(start_bucket, end_bucket + 1):
            child_start = (start << power) & MAX_UINT64 if i == start_bucket else 0
            child_end = (end << power) & MAX_UINT64 if i == end_bucket else MAX_UINT64
            yield i, child_start, child_end

    def add(self, interval: Interval, values_index: int) -> "HierarchicalNode":
        for i, child_start, child_end in self._route(interval.start, interval.end):
            child = self.children[i]
            if child is None:
                child = LeafNode(config=self.config)
            self.children[i] = child.add(Interval(child_start, child_end), values_index)
        return self

    def all_intersections(self, start: int, end: int) -> ValueIndices:
        matching_indices = ValueIndices()

        for i, child_start, child_end in self._route(start, end):
            child = self.children[i]
            if child is None:
                continue
            matching_indices.merge(child.all_intersections(child_start, child_end))

        return matching_indices

    def walk(self, depth: int = 0) -> Iterator[Tuple[int, Node]]:
        yield depth, self
        for child in self.children:
            if child is not None:
                yield from child.walk(depth + 1)

    def __eq__(self, other) -> bool:
        if not isinstance(other, HierarchicalNode):
            return NotImplemented
        return self.children == other.children

    def __repr__(self) -> str:
        occupied = {i: child for i, child in enumerate(self.children) if child is not None}
        return f"HierarchicalNode({occupied})"


class LeafNode(Node):
    """
    A node storing (interval, value index) pairs directly.

    `intervals[i]` belongs to `indices[i]`.
    """
    __slots__ = ("intervals", "indices", "config")

    def __init__(
        self,
        intervals: Optional[Iterable[Interval]] = None,
        indices: Optional[Iterable[int]] = None,
        config: Optional[TreeConfig] = None,
    ):
        self.intervals: List[Interval] = [Interval(*iv) for iv in intervals] if intervals else []
        self.indices: List[int] = list(indices) if indices else []
        if len(self.intervals) != len(self.indices):
            raise ValueError(
                f"intervals and indices must have the same length, "
                f"got {len(self.intervals)} and {len(self.indices)}"
            )
        self.config = config or DEFAULT_CONFIG

    def add(self, interval: Interval, values_index: int) -> Node:
        stored = len(self.intervals)

        # Only evaluate promotion every max_leaf_fanout entries.
        if stored > 0 and stored % self.config.max_leaf_fanout == 0:
            if self.should_split() and not self._is_routing_fixed_point():
                return self._promote(interval, values_index)
            logger.debug(f"Leaf with {stored} intervals cannot be split, keeping it as a leaf")

        self.intervals.append(interval)
        self.indices.append(values_index)
        return self

    def _promote(self, interval: Interval, values_index: int) -> Node:
        logger.debug(f"Promoting leaf with {len(self.intervals)} intervals to a hierarchical node")

        node: Node = HierarchicalNode(config=self.config)
        for stored_interval, stored_index in zip(self.intervals, self.indices):
            node = node.add(stored_interval, stored_index)
        return node.add(interval, values_index)

    def should_split(self) -> bool:
        """
        Whether promoting this leaf would separate its intervals.

        The low radix digit of every start and every end is masked off and
        the intervals are tallied per masked value. If some masked value holds
        some but not all of the intervals, the digits discriminate between at
        least two groups and splitting is worthwhile.
        """
        if not self.intervals:
            return False

        low_digit = (1 << self.config.branching_factor_power) - 1
        mask = np.uint64(MAX_UINT64 ^ low_digit)
        bounds = np.array(self.intervals, dtype=np.uint64).reshape(-1, 2)

        for column in (bounds[:, 0], bounds[:, 1]):
            _, counts = np.unique(column & mask, return_counts=True)
            if (counts < len(self.intervals)).any():
                return True

        return False

    def _is_routing_fixed_point(self) -> bool:
        """
        Whether every stored interval is [0, 0] or [0, MAX].

        Routing passes both through to child 0 unchanged, so promoting such a
        leaf would rebuild it in child 0 and promote again without end.
        """
        return all(
            interval.start == 0 and interval.end in (0, MAX_UINT64)
            for interval in self.intervals
        )

    def all_intersections(self, start: int, end: int) -> ValueIndices:
        # Interior buckets are queried as a whole.
        if start == 0 and end == MAX_UINT64:
            return ValueIndices(self.indices)

        matching_indices = ValueIndices()

        for interval, index in zip(self.intervals, self.indices):
            if end < interval.start or start > interval.end:
                continue
            matching_indices.add(index)

        return matching_indices

    def walk(self, depth: int = 0) -> Iterator[Tuple[int, Node]]:
        yield depth, self

    def __len__(self) -> int:
        return len(self.intervals)

    def __eq__(self, other) -> bool:
        if not isinstance(other, LeafNode):
            return NotImplemented
        return self.intervals == other.intervals and self.indices == other.indices

    def __repr__(self) -> str:
        return f"LeafNode(intervals={self.intervals}, indices={self.indices})"
