"""
Multi-binned interval tree: maps closed intervals over the unsigned 64-bit
range to arbitrary values.

Typical usage:
    tree = new()
    tree.add(Interval(1, 5), "first")
    tree.add(Interval(7, 10), "second")
    values, found = tree.all_intersections(5, 8)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from .config import DEFAULT_CONFIG, TreeConfig, load_tree_config
from .interval import Interval, check_endpoint
from .logging_config import get_logger
from .nodes import HierarchicalNode, LeafNode

logger = get_logger(__name__)


class Tree(ABC):
    """Public interface of an interval-to-value container."""

    @abstractmethod
    def add(self, interval: Interval, value: Any) -> None:
        """Insert a value for the closed interval."""
        ...

    @abstractmethod
    def all_intersections(self, start: int, end: int) -> Tuple[List[Any], bool]:
        """
        Find all values whose interval intersects [start, end].

        Returns:
            (values, found). found is False exactly when values is empty.
        """
        ...


class IntervalTree(Tree):
    """
    Hierarchical interval tree.

    The intervals live in the node structure below a single root, which
    refers to values only by their position in a separate value list. An
    interval stored in several buckets therefore costs one index per bucket
    and the value is kept once.
    """

    def __init__(self, config: Optional[TreeConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._root = HierarchicalNode(config=self.config)
        self._values: List[Any] = []

    def add(self, interval: Interval, value: Any) -> None:
        """
        Insert a new interval into the tree.

        Intervals with start > end are not rejected; they are routed as given
        and the caller is responsible for passing well-formed ranges.

        Raises:
            ValueError: If an endpoint is outside [0, 2**64 - 1]
        """
        interval = Interval(*interval)
        check_endpoint("start", interval.start)
        check_endpoint("end", interval.end)

        values_index = len(self._values)
        self._values.append(value)

        # The root is hierarchical and returns itself.
        self._root.add(interval, values_index)

    def all_intersections(self, start: int, end: int) -> Tuple[List[Any], bool]:
        """
        Return all values whose interval intersects [start, end].

        Values are returned in insertion order, each at most once even if its
        interval was stored in several buckets.

        Raises:
            ValueError: If an endpoint is outside [0, 2**64 - 1]
        """
        check_endpoint("start", start)
        check_endpoint("end", end)

        indices = self._root.all_intersections(start, end)

        if indices.is_empty():
            return [], False

        return [self._values[index] for index in indices.sorted()], True

    def stats(self) -> Dict[str, int]:
        """Summarize the shape of the node structure."""
        leaf_nodes = 0
        hierarchical_nodes = 0
        max_depth = 0
        largest_leaf = 0

        for depth, node in self._root.walk():
            max_depth = max(max_depth, depth)
            if isinstance(node, LeafNode):
                leaf_nodes += 1
                largest_leaf = max(largest_leaf, len(node))
            else:
                hierarchical_nodes += 1

        return {
            "values": len(self._values),
            "leaf_nodes": leaf_nodes,
            "hierarchical_nodes": hierarchical_nodes,
            "max_depth": max_depth,
            "largest_leaf": largest_leaf,
        }

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"IntervalTree(values={len(self._values)}, config={self.config!r})"


def new(config: Optional[TreeConfig] = None) -> Tree:
    """
    Create a new, empty interval tree.

    Args:
        config: Tree parameters. Defaults to load_tree_config(), which honours
            the MULTIBINNED_INTERVALS_CONFIG environment variable.
    """
    if config is None:
        config = load_tree_config()
    logger.debug(f"Creating interval tree with {config!r}")
    return IntervalTree(config=config)
