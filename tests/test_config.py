"""
Tests for tree configuration loading and the logging setup.
"""

import logging
import sys

import pytest

from multibinned_intervals import IntervalTree, TreeConfig, load_tree_config, new
from multibinned_intervals.config import CONFIG_ENV_VAR, DEFAULT_CONFIG
from multibinned_intervals.logging_config import PACKAGE_LOGGER_NAME, get_logger, setup_logging


class TestTreeConfig:
    """Test TreeConfig validation."""

    def test_defaults(self):
        """Defaults should give 16 children and promotion every 16 entries."""
        config = TreeConfig()

        assert config.branching_factor_power == 4
        assert config.hierarchical_fanout == 16
        assert config.max_leaf_fanout == 16
        assert config == DEFAULT_CONFIG

    @pytest.mark.parametrize("power", [0, 17, -1, 2.0, "4", True])
    def test_invalid_branching_factor_power(self, power):
        """Out-of-range or non-int powers should raise ValueError."""
        with pytest.raises(ValueError, match="branching_factor_power"):
            TreeConfig(branching_factor_power=power)

    @pytest.mark.parametrize("fanout", [0, -5, 1.5, None])
    def test_invalid_max_leaf_fanout(self, fanout):
        """Non-positive or non-int fanouts should raise ValueError."""
        with pytest.raises(ValueError, match="max_leaf_fanout"):
            TreeConfig(max_leaf_fanout=fanout)

    def test_from_dict(self):
        """from_dict should accept a subset of the known keys."""
        config = TreeConfig.from_dict({"max_leaf_fanout": 8})

        assert config.max_leaf_fanout == 8
        assert config.branching_factor_power == 4

    def test_from_dict_unknown_key(self):
        """Unknown keys should raise ValueError listing them."""
        with pytest.raises(ValueError, match="leaf_size"):
            TreeConfig.from_dict({"leaf_size": 8})

    def test_to_dict_round_trip(self):
        """to_dict should produce keys that from_dict accepts."""
        config = TreeConfig(branching_factor_power=3, max_leaf_fanout=5)

        assert TreeConfig.from_dict(config.to_dict()) == config


class TestLoadTreeConfig:
    """Test loading configs from YAML."""

    def test_no_env_var_returns_defaults(self):
        """Without a path or env var the defaults should be used."""
        assert load_tree_config() == DEFAULT_CONFIG

    def test_explicit_path(self, config_file):
        """Keys at the top level of the document should be loaded."""
        path = config_file("branching_factor_power: 2\nmax_leaf_fanout: 4\n")

        assert load_tree_config(str(path)) == TreeConfig(branching_factor_power=2, max_leaf_fanout=4)

    def test_tree_section(self, config_file):
        """Keys under a tree: section should be loaded."""
        path = config_file("tree:\n  max_leaf_fanout: 32\n")

        assert load_tree_config(str(path)) == TreeConfig(max_leaf_fanout=32)

    def test_empty_file(self, config_file):
        """An empty file should give the defaults."""
        path = config_file("")

        assert load_tree_config(str(path)) == DEFAULT_CONFIG

    def test_env_var(self, monkeypatch, config_file):
        """The env var should name the file to load."""
        path = config_file("branching_factor_power: 3\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert load_tree_config().branching_factor_power == 3

    def test_env_var_missing_file(self, monkeypatch, tmp_path):
        """An env var pointing nowhere should fall back to the defaults."""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.yaml"))

        assert load_tree_config() == DEFAULT_CONFIG

    def test_explicit_missing_file(self, tmp_path):
        """An explicit path that does not exist should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_tree_config(str(tmp_path / "missing.yaml"))

    def test_invalid_values(self, config_file):
        """Invalid values in the file should raise ValueError."""
        path = config_file("branching_factor_power: 0\n")

        with pytest.raises(ValueError):
            load_tree_config(str(path))

    def test_not_a_mapping(self, config_file):
        """A document that is not a mapping should raise ValueError."""
        path = config_file("- 1\n- 2\n")

        with pytest.raises(ValueError, match="mapping"):
            load_tree_config(str(path))


@pytest.fixture
def package_logger():
    """The package logger, restored to its import-time state afterwards."""
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate

    yield package_logger

    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


def _console_handlers(package_logger):
    return [
        h for h in package_logger.handlers
        if isinstance(h, logging.StreamHandler)
        and h.stream is sys.stdout
    ]


class TestLogging:
    """Test the package logger setup."""

    def test_get_logger_namespaces_under_package(self):
        """Loggers should be children of the package logger."""
        assert get_logger("other.module").name == f"{PACKAGE_LOGGER_NAME}.other.module"
        assert get_logger(f"{PACKAGE_LOGGER_NAME}.nodes").name == f"{PACKAGE_LOGGER_NAME}.nodes"

    def test_import_installs_no_console_handler(self, package_logger):
        """Without setup_logging() records should only propagate to the application."""
        get_logger("other.module")

        assert _console_handlers(package_logger) == []
        assert package_logger.propagate
        assert any(isinstance(h, logging.NullHandler) for h in package_logger.handlers)

    def test_get_logger_adds_one_null_handler(self, package_logger):
        """Repeated get_logger() calls should not stack NullHandlers."""
        before = len(package_logger.handlers)
        get_logger("a")
        get_logger("b")

        assert len(package_logger.handlers) == before

    def test_records_reach_application_handlers(self, package_logger, caplog):
        """Package records should propagate to handlers on the root logger."""
        with caplog.at_level(logging.DEBUG, logger=PACKAGE_LOGGER_NAME):
            get_logger("nodes").debug("promoted")

        assert "promoted" in caplog.messages

    def test_config_loading_prints_nothing(self, monkeypatch, config_file, capsys):
        """Loading a config through new() should not write to stdout."""
        path = config_file("max_leaf_fanout: 8\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        new()

        assert capsys.readouterr().out == ""

    def test_setup_logging_is_idempotent(self, package_logger):
        """Repeated setup should install a single console handler."""
        before = len(package_logger.handlers)

        setup_logging()
        setup_logging()

        assert len(package_logger.handlers) == before + 1
        assert len(_console_handlers(package_logger)) == 1
        assert not package_logger.propagate

    def test_setup_logging_force(self, package_logger):
        """force=True should replace only its own handler and apply the new level."""
        setup_logging()
        foreign = logging.NullHandler()
        package_logger.addHandler(foreign)
        first = _console_handlers(package_logger)

        setup_logging(level=logging.DEBUG, force=True, propagate=True)

        current = _console_handlers(package_logger)
        assert len(current) == 1
        assert current != first
        assert foreign in package_logger.handlers
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate


class TestDefaultConfigShared:
    """Test that trees without an explicit config share the defaults."""

    def test_interval_tree_uses_default_config(self):
        """IntervalTree() should use the same config object as its nodes."""
        tree = IntervalTree()

        assert tree.config is DEFAULT_CONFIG
        assert tree._root.config is DEFAULT_CONFIG
