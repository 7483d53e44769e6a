"""
Unit tests for configuration loader.

Tests multi-layer config merging, environment variable overrides,
.env file loading, caching, and XDG directory handling.
"""

import json
import logging
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from gitpm.core.config import (
    PmConfig,
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    load_config,
    load_layered_env,
)
from gitpm.core.config.env import read_pm_env
from gitpm.core.config.loader import (
    apply_env_overrides,
    get_default_config,
    get_xdg_config_home,
    load_json_file,
)


def _write_json(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


# ==============================================================================
# Helper Functions Tests
# ==============================================================================


class TestLoadJsonFile:
    """Test JSON file loading."""

    def test_load_existing_file(self, tmp_path):
        config_file = _write_json(tmp_path / "config.json", {"id_width": 4})

        assert load_json_file(config_file) == {"id_width": 4}

    def test_missing_file_returns_none(self, tmp_path):
        assert load_json_file(tmp_path / "nope.json") is None

    def test_invalid_json_returns_none_and_warns(self, tmp_path, caplog):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with caplog.at_level(logging.WARNING):
            assert load_json_file(config_file) is None

        assert "Failed to parse config" in caplog.text

    def test_non_object_returns_none(self, tmp_path):
        config_file = _write_json(tmp_path / "config.json", [1, 2, 3])

        assert load_json_file(config_file) is None


class TestPaths:
    """Test config path helpers."""

    def test_xdg_config_home_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

        assert get_xdg_config_home() == tmp_path / "xdg"

    def test_xdg_config_home_default(self, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)

        assert get_xdg_config_home() == Path.home() / ".config"

    def test_user_config_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert get_user_config_path() == tmp_path / "gitpm" / "config.json"

    def test_project_config_path(self, tmp_path):
        assert get_project_config_path(tmp_path) == tmp_path / ".pm.json"


class TestEnvOverrides:
    """Test PM_* environment variable overrides."""

    def test_no_env_vars(self):
        assert apply_env_overrides({"id_width": 3}) == {"id_width": 3}

    def test_integer_overrides(self, monkeypatch):
        monkeypatch.setenv("PM_ID_WIDTH", "5")
        monkeypatch.setenv("PM_SLUG_MAX_LENGTH", "20")

        result = apply_env_overrides(get_default_config())

        assert result["id_width"] == 5
        assert result["slug_max_length"] == 20

    def test_invalid_integer_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("PM_ID_WIDTH", "wide")

        with caplog.at_level(logging.WARNING):
            result = apply_env_overrides({"id_width": 3})

        assert result["id_width"] == 3
        assert "PM_ID_WIDTH" in caplog.text

    def test_editor_override(self, monkeypatch):
        monkeypatch.setenv("PM_EDITOR", "nano -w")

        assert apply_env_overrides({})["editor"] == "nano -w"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1", True),
            ("true", True),
            ("yes", True),
            ("0", False),
            ("false", False),
            ("Off", False),
        ],
    )
    def test_show_archived_override(self, monkeypatch, value, expected):
        monkeypatch.setenv("PM_SHOW_ARCHIVED", value)

        assert apply_env_overrides({})["show_archived"] is expected

    def test_does_not_mutate_input(self, monkeypatch):
        monkeypatch.setenv("PM_ID_WIDTH", "5")
        original = {"id_width": 3}

        apply_env_overrides(original)

        assert original == {"id_width": 3}


# ==============================================================================
# Merging Tests
# ==============================================================================


class TestLoadConfig:
    """Test layered configuration loading."""

    def test_defaults(self, tmp_path):
        config = load_config(tmp_path, use_cache=False)

        assert config == PmConfig()
        assert config.id_width == 3
        assert config.slug_max_length == 50
        assert config.editor is None
        assert config.show_archived is False

    def test_user_config_applied(self, tmp_path):
        _write_json(get_user_config_path(), {"editor": "code --wait"})

        assert load_config(tmp_path, use_cache=False).editor == "code --wait"

    def test_project_overrides_user(self, tmp_path):
        _write_json(get_user_config_path(), {"id_width": 4, "editor": "nano"})
        _write_json(tmp_path / ".pm.json", {"id_width": 6})

        config = load_config(tmp_path, use_cache=False)

        assert config.id_width == 6
        assert config.editor == "nano"

    def test_env_overrides_project(self, tmp_path, monkeypatch):
        _write_json(tmp_path / ".pm.json", {"id_width": 6})
        monkeypatch.setenv("PM_ID_WIDTH", "2")

        assert load_config(tmp_path, use_cache=False).id_width == 2

    def test_unknown_keys_ignored(self, tmp_path):
        _write_json(tmp_path / ".pm.json", {"theme": "dark"})

        assert load_config(tmp_path, use_cache=False) == PmConfig()

    def test_invalid_value_raises(self, tmp_path):
        _write_json(tmp_path / ".pm.json", {"id_width": 0})

        with pytest.raises(ValidationError):
            load_config(tmp_path, use_cache=False)

    def test_invalid_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / ".pm.json").write_text("{broken")

        assert load_config(tmp_path, use_cache=False) == PmConfig()


class TestCaching:
    """Test the per-process config cache."""

    def test_cached_until_cleared(self, tmp_path):
        first = load_config(tmp_path)
        _write_json(tmp_path / ".pm.json", {"id_width": 7})

        assert load_config(tmp_path) is first

        clear_cache()
        assert load_config(tmp_path).id_width == 7

    def test_cached_per_project(self, tmp_path):
        first_root = tmp_path / "first"
        second_root = tmp_path / "second"
        _write_json(first_root / ".pm.json", {"id_width": 4})
        _write_json(second_root / ".pm.json", {"id_width": 6})

        assert load_config(first_root).id_width == 4
        assert load_config(second_root).id_width == 6
        assert load_config(first_root / ".").id_width == 4

    def test_use_cache_false_reloads(self, tmp_path):
        load_config(tmp_path)
        _write_json(tmp_path / ".pm.json", {"id_width": 7})

        assert load_config(tmp_path, use_cache=False).id_width == 7


# ==============================================================================
# .env Loading Tests
# ==============================================================================


class TestDotenv:
    """Test PM_* loading from .env files."""

    def test_read_pm_env_filters_prefix(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("PM_EDITOR=nano\nDATABASE_URL=postgres://x\n")

        assert read_pm_env(env_file) == {"PM_EDITOR": "nano"}

    def test_read_missing_file(self, tmp_path):
        assert read_pm_env(tmp_path / ".env") == {}

    def test_project_env_loaded(self, tmp_path):
        (tmp_path / ".env").write_text("PM_ID_WIDTH=4\nOTHER_TOOL=1\n")

        applied = load_layered_env(project_dir=tmp_path, user_env_paths=[])

        assert applied == ["PM_ID_WIDTH"]
        assert os.environ["PM_ID_WIDTH"] == "4"
        assert "OTHER_TOOL" not in os.environ

    def test_project_layer_wins_over_user(self, tmp_path):
        user_env = tmp_path / "user.env"
        user_env.write_text("PM_EDITOR=vim\nPM_ID_WIDTH=5\n")
        (tmp_path / ".env").write_text("PM_EDITOR=nano\n")
        (tmp_path / ".env.local").write_text("PM_EDITOR=emacs\n")

        load_layered_env(project_dir=tmp_path, user_env_paths=[user_env])

        assert os.environ["PM_EDITOR"] == "emacs"
        assert os.environ["PM_ID_WIDTH"] == "5"

    def test_shell_environment_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PM_EDITOR", "ed")
        (tmp_path / ".env").write_text("PM_EDITOR=nano\n")

        applied = load_layered_env(project_dir=tmp_path, user_env_paths=[])

        assert applied == []
        assert os.environ["PM_EDITOR"] == "ed"

    def test_default_user_env_under_xdg(self, tmp_path):
        user_env = get_xdg_config_home() / "gitpm" / ".env"
        user_env.parent.mkdir(parents=True)
        user_env.write_text("PM_SHOW_ARCHIVED=yes\n")

        load_layered_env(project_dir=tmp_path)

        assert os.environ["PM_SHOW_ARCHIVED"] == "yes"

    def test_env_values_reach_config(self, tmp_path):
        (tmp_path / ".env").write_text("PM_SLUG_MAX_LENGTH=12\n")

        load_layered_env(project_dir=tmp_path, user_env_paths=[])

        assert load_config(tmp_path, use_cache=False).slug_max_length == 12
