"""
Tuning parameters for the multi-binned interval tree.

The defaults (4 radix bits per level, promotion evaluated every 16 leaf
entries) are what every tree uses unless a YAML file overrides them:

    # tree.yaml
    tree:
      branching_factor_power: 4
      max_leaf_fanout: 16

The file is picked up from the MULTIBINNED_INTERVALS_CONFIG environment
variable, or passed explicitly to load_tree_config().
"""

import os
from typing import Any, Dict, Optional

import yaml

from .logging_config import get_logger

logger = get_logger(__name__)


CONFIG_ENV_VAR = "MULTIBINNED_INTERVALS_CONFIG"

DEFAULT_BRANCHING_FACTOR_POWER = 4
DEFAULT_MAX_LEAF_FANOUT = 16

# Children per hierarchical node are 2**power, so keep the fanout sane.
MAX_BRANCHING_FACTOR_POWER = 16


class TreeConfig:
    """
    Shape parameters shared by every node of one tree.

    Attributes:
        branching_factor_power: Radix bits consumed per hierarchical level
        max_leaf_fanout: Leaf size interval at which promotion is evaluated
        hierarchical_fanout: Number of children of a hierarchical node
    """
    __slots__ = ("branching_factor_power", "max_leaf_fanout", "hierarchical_fanout")

    def __init__(
        self,
        branching_factor_power: int = DEFAULT_BRANCHING_FACTOR_POWER,
        max_leaf_fanout: int = DEFAULT_MAX_LEAF_FANOUT,
    ):
        if (
            isinstance(branching_factor_power, bool)
            or not isinstance(branching_factor_power, int)
            or not 1 <= branching_factor_power <= MAX_BRANCHING_FACTOR_POWER
        ):
            raise ValueError(
                f"branching_factor_power must be an int in [1, {MAX_BRANCHING_FACTOR_POWER}], "
                f"got {branching_factor_power!r}"
            )
        if (
            isinstance(max_leaf_fanout, bool)
            or not isinstance(max_leaf_fanout, int)
            or max_leaf_fanout < 1
        ):
            raise ValueError(f"max_leaf_fanout must be a positive int, got {max_leaf_fanout!r}")

        self.branching_factor_power = branching_factor_power
        self.max_leaf_fanout = max_leaf_fanout
        self.hierarchical_fanout = 1 << branching_factor_power

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TreeConfig":
        """
        Build a config from a mapping, rejecting keys it does not know.

        Raises:
            ValueError: On unknown keys or invalid values
        """
        known = {"branching_factor_power", "max_leaf_fanout"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(
                f"Unknown tree config keys: {sorted(unknown)}. Valid keys: {sorted(known)}"
            )
        return cls(**data)

    def to_dict(self) -> Dict[str, int]:
        return {
            "branching_factor_power": self.branching_factor_power,
            "max_leaf_fanout": self.max_leaf_fanout,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, TreeConfig):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"TreeConfig(branching_factor_power={self.branching_factor_power}, "
            f"max_leaf_fanout={self.max_leaf_fanout})"
        )


DEFAULT_CONFIG = TreeConfig()


def load_tree_config(path: Optional[str] = None) -> TreeConfig:
    """
    Load tree parameters from a YAML file.

    Reads from `path` if given, otherwise from the file named by the
    MULTIBINNED_INTERVALS_CONFIG environment variable. The keys may sit at the
    top level of the document or under a `tree:` section.

    Args:
        path: Optional explicit path to a YAML file

    Returns:
        The loaded TreeConfig, or the defaults if no file is configured or the
        environment variable points to a missing file.

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValueError: If the file contents are not a valid tree config
    """
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR)

        if not path:
            logger.debug(f"{CONFIG_ENV_VAR} not set, using default tree config")
            return DEFAULT_CONFIG

        if not os.path.exists(path):
            logger.warning(f"{CONFIG_ENV_VAR} set to {path} but file does not exist")
            return DEFAULT_CONFIG
    elif not os.path.exists(path):
        raise FileNotFoundError(f"Tree config file not found: {path}")

    logger.debug(f"Loading tree config from: {path}")
    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None:
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        raise ValueError(f"Tree config in {path} must be a mapping, got {type(data).__name__}")

    if "tree" in data:
        data = data["tree"] or {}
        if not isinstance(data, dict):
            raise ValueError(f"'tree' section in {path} must be a mapping")

    config = TreeConfig.from_dict(data)
    logger.debug(f"Loaded tree config: {config.to_dict()}")
    return config
