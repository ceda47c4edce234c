"""Tests for AppSettings (env prefix and path expansion)."""

from pathlib import Path

from core.config import AppSettings, expand_config_path


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("CDS_EXPLORER_CDSRCS", raising=False)
    settings = AppSettings(_env_file=None)

    assert settings.cdsctl_path == "cdsctl"
    assert settings.command_timeout_seconds is None
    assert settings.config_files() == [Path.home() / ".cdsrc"]


def test_env_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("CDS_EXPLORER_CDSRCS", f'["{tmp_path}/a", "~/b"]')
    monkeypatch.setenv("CDS_EXPLORER_LOG_LEVEL", "debug")
    monkeypatch.setenv("CDS_EXPLORER_TREE_DEPTH", "5")

    settings = AppSettings(_env_file=None)

    assert settings.config_files() == [tmp_path / "a", Path.home() / "b"]
    assert settings.log_level == "DEBUG"
    assert settings.tree_depth == 5


def test_expand_env_vars(monkeypatch) -> None:
    monkeypatch.setenv("CDS_HOME", "/srv/cds")
    assert expand_config_path("$CDS_HOME/cdsrc") == Path("/srv/cds/cdsrc")
