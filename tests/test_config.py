"""Tests for policy configuration loading."""

import os

import pytest

from pinguard.config import load_config, PolicyConfig


# ---------------------------------------------------------------------------
# Defaults: the loader never fails
# ---------------------------------------------------------------------------

class TestConfigDefaults:
    def test_returns_defaults_when_no_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config == PolicyConfig()
        assert config.is_default
        assert config.critical_dependencies == frozenset()
        assert config.trusted_owners == frozenset()

    def test_returns_defaults_for_non_mapping(self, tmp_path):
        cfg = tmp_path / ".pinguard.yml"
        cfg.write_text("just a string")
        assert load_config(config_path=str(cfg)).is_default

    def test_returns_defaults_for_invalid_yaml(self, tmp_path):
        cfg = tmp_path / ".pinguard.yml"
        cfg.write_text("trusted_owners: [unclosed\n")
        assert load_config(config_path=str(cfg)).is_default

    def test_missing_explicit_path_returns_defaults(self, tmp_path):
        config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
        assert config.is_default

    @pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs non-root POSIX permissions")
    def test_unreadable_file_returns_defaults(self, tmp_path):
        cfg = tmp_path / ".pinguard.yml"
        cfg.write_text("trusted_owners: [actions]\n")
        cfg.chmod(0)
        assert load_config(config_path=str(cfg)).is_default

    def test_wrong_type_falls_back_per_key(self, tmp_path):
        cfg = tmp_path / ".pinguard.yml"
        cfg.write_text("critical_dependencies: actions/checkout@v4\ntrusted_owners:\n  - actions\n")
        config = load_config(config_path=str(cfg))
        assert config.critical_dependencies == frozenset()
        assert config.trusted_owners == frozenset({"actions"})
        assert not config.is_default


# ---------------------------------------------------------------------------
# load_config with explicit path
# ---------------------------------------------------------------------------

class TestConfigExplicitPath:
    def test_loads_full_config(self, tmp_path):
        cfg = tmp_path / "policy.yml"
        cfg.write_text(
            "critical_dependencies:\n"
            "  - actions/checkout@v4\n"
            "  - aws-actions/configure-aws-credentials\n"
            "trusted_owners:\n"
            "  - actions\n"
            "  - github\n"
        )
        config = load_config(config_path=str(cfg))
        assert config.critical_dependencies == frozenset({
            "actions/checkout@v4",
            "aws-actions/configure-aws-credentials",
        })
        assert config.trusted_owners == frozenset({"actions", "github"})
        assert config.source == str(cfg)

    def test_empty_keys(self, tmp_path):
        cfg = tmp_path / "policy.yml"
        cfg.write_text("critical_dependencies:\ntrusted_owners:\n")
        config = load_config(config_path=str(cfg))
        assert config.critical_dependencies == frozenset()
        assert not config.is_default

    def test_values_kept_verbatim(self, tmp_path):
        cfg = tmp_path / "policy.yml"
        cfg.write_text("trusted_owners:\n  - Actions\n")
        assert load_config(config_path=str(cfg)).trusted_owners == frozenset({"Actions"})


# ---------------------------------------------------------------------------
# load_config auto-discovery via scan_path
# ---------------------------------------------------------------------------

class TestConfigAutoDiscovery:
    def test_finds_config_next_to_workflow(self, tmp_path):
        (tmp_path / ".pinguard.yml").write_text("trusted_owners: [actions]\n")
        wf_file = tmp_path / "ci.yml"
        wf_file.write_text("name: CI\n")
        config = load_config(scan_path=str(wf_file))
        assert config.trusted_owners == frozenset({"actions"})

    def test_finds_config_in_parent_dir(self, tmp_path):
        (tmp_path / ".pinguard.yml").write_text("trusted_owners: [github]\n")
        workflows_dir = tmp_path / ".github" / "workflows"
        workflows_dir.mkdir(parents=True)
        wf_file = workflows_dir / "ci.yml"
        wf_file.write_text("name: CI\n")
        config = load_config(scan_path=str(wf_file))
        assert config.trusted_owners == frozenset({"github"})

    def test_finds_legacy_filename(self, tmp_path):
        (tmp_path / "critical_dependencies.yaml").write_text(
            "critical_dependencies:\n  - actions/checkout@main\n"
        )
        config = load_config(scan_path=str(tmp_path))
        assert config.critical_dependencies == frozenset({"actions/checkout@main"})

    def test_prefers_new_filename(self, tmp_path):
        (tmp_path / ".pinguard.yml").write_text("trusted_owners: [new]\n")
        (tmp_path / "critical_dependencies.yaml").write_text("trusted_owners: [old]\n")
        config = load_config(scan_path=str(tmp_path))
        assert config.trusted_owners == frozenset({"new"})

    def test_cwd_fallback(self, tmp_path, monkeypatch):
        (tmp_path / ".pinguard.yml").write_text("trusted_owners: [actions]\n")
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config.trusted_owners == frozenset({"actions"})
