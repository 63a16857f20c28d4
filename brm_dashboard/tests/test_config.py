"""Tests for brm_dashboard/config.py."""
from __future__ import annotations

from pathlib import Path

import pytest

from brm_dashboard.config import (
    CONFIG_ENV_VAR,
    ConfigError,
    DashboardConfig,
    load_config,
)


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "config.yaml"
    p.write_text(text, encoding="utf-8")
    return p


class TestLoadConfig:

    def test_defaults_without_file(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        config = load_config()
        assert config == DashboardConfig()
        assert config.routing.pending_approval == "/pending-approval"
        assert config.routing.destinations["client"] == "/client"

    def test_env_var_names_file(self, tmp_path: Path, monkeypatch):
        p = _write(tmp_path, "store:\n  base_dir: /srv/brm\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(p))
        assert load_config().store.base_dir == "/srv/brm"

    def test_partial_destinations_keep_defaults(self, tmp_path: Path):
        p = _write(tmp_path, "routing:\n  pending_approval: /wait\n  destinations:\n    client: /home\n")
        config = load_config(p)
        assert config.routing.pending_approval == "/wait"
        assert config.routing.destinations == {
            "mentor_admin": "/mentor/home",
            "mentor": "/mentor/home",
            "client": "/home",
        }

    def test_empty_file_is_defaults(self, tmp_path: Path):
        assert load_config(_write(tmp_path, "")) == DashboardConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(_write(tmp_path, "routing: [unclosed\n"))

    def test_non_mapping_root(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="mapping at the root"):
            load_config(_write(tmp_path, "- a\n- b\n"))

    def test_non_mapping_section(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="'store'"):
            load_config(_write(tmp_path, "store: 3\n"))

    def test_unknown_role(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Unknown role"):
            load_config(_write(tmp_path, "routing:\n  destinations:\n    owner: /x\n"))
