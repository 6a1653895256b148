"""
multibinned-intervals: an interval-to-value container over the unsigned
64-bit range, built as a radix trie of interval buckets.
"""

from .config import TreeConfig, load_tree_config
from .interval import MAX_UINT64, Interval, overlaps_closed
from .tree import IntervalTree, Tree, new
from .value_indices import ValueIndices

__all__ = [
    "Interval",
    "IntervalTree",
    "MAX_UINT64",
    "Tree",
    "TreeConfig",
    "ValueIndices",
    "load_tree_config",
    "new",
    "overlaps_closed",
]
