"""Tests for the YAML config file layer."""

from argparse import Namespace

import pytest

from npname.cli_config import ConfigFileError, apply_config, load_config
from npname.constants import Constants


def _args(**overrides):
    base = dict(REGISTRY=None, TIMEOUT=None, CONCURRENCY=None, JSON=None, QUIET=None)
    base.update(overrides)
    return Namespace(**base)


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_path(self):
        assert load_config(None) == {}

    def test_reads_known_keys(self, tmp_path, caplog):
        path = tmp_path / "npname.yml"
        path.write_text("registry: https://r.example/\ntimeout: 500\njson: true\nextra: 1\n")
        assert load_config(str(path)) == {"registry": "https://r.example/", "timeout": 500, "json": True}
        assert "Ignoring unknown config key: extra" in caplog.text

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_config(str(path)) == {}

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigFileError, match="must contain a mapping"):
            load_config(str(path))

    def test_bool_is_not_an_integer(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("concurrency: true\n")
        with pytest.raises(ConfigFileError, match="must be an integer"):
            load_config(str(path))

    def test_wrong_type(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("timeout: soon\n")
        with pytest.raises(ConfigFileError, match="must be of type int"):
            load_config(str(path))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text("registry: [unclosed\n")
        with pytest.raises(ConfigFileError, match="Failed to load config"):
            load_config(str(path))


class TestApplyConfig:
    """Flags beat the file, the file beats built-in defaults."""

    def test_precedence(self):
        args = _args(TIMEOUT=900)
        apply_config(args, {"timeout": 100, "concurrency": 8})
        assert args.TIMEOUT == 900
        assert args.CONCURRENCY == 8
        assert args.REGISTRY is None
        assert args.JSON is False
        assert args.QUIET is False

    def test_builtin_defaults(self):
        args = _args()
        apply_config(args, {})
        assert args.TIMEOUT == Constants.DEFAULT_TIMEOUT_MS
        assert args.CONCURRENCY == Constants.DEFAULT_CONCURRENCY
