"""
Shared pytest fixtures for multibinned-intervals tests.
"""

import pytest

from multibinned_intervals import MAX_UINT64, Interval, IntervalTree, TreeConfig, overlaps_closed


def brute_force_intersections(intervals, start, end):
    """Indices of all intervals overlapping [start, end], in insertion order."""
    query = Interval(start, end)
    return [i for i, interval in enumerate(intervals) if overlaps_closed(interval, query)]


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    """Keep a developer's config file from leaking into the tests."""
    monkeypatch.delenv("MULTIBINNED_INTERVALS_CONFIG", raising=False)


@pytest.fixture
def sample_tree():
    """Tree with one small, one bucket-straddling and one top-of-range interval."""
    tree = IntervalTree()
    tree.add(Interval(0, 10), "a")
    tree.add(Interval(3000, (MAX_UINT64 // 16) * 2), "b")
    tree.add(Interval(MAX_UINT64 - 16, MAX_UINT64), "c")
    return tree


@pytest.fixture
def small_config():
    """Narrow tree (4 children, promotion every 4 entries) that reaches depth quickly."""
    return TreeConfig(branching_factor_power=2, max_leaf_fanout=4)


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML tree config and return its path."""
    def _write(content: str):
        path = tmp_path / "tree.yaml"
        path.write_text(content)
        return path
    return _write


@pytest.fixture
def brute_force():
    """Reference overlap scan to compare tree queries against."""
    return brute_force_intersections
