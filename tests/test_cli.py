"""Tests for the CLI."""

import json
import os
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from pinguard.advisories import AdvisoryRecord
from pinguard.cli import cli, EXIT_OK, EXIT_FINDINGS, EXIT_ERROR


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures/.github/workflows")
INSECURE_FIXTURE = os.path.join(FIXTURES_DIR, "insecure-example.yml")
SECURE_FIXTURE = os.path.join(FIXTURES_DIR, "secure-example.yml")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def advisory_client():
    """Keep the CLI off the network: every lookup finds nothing."""
    client = MagicMock()
    client.lookup_advisories.return_value = []
    with patch("pinguard.cli.AdvisoryClient", return_value=client):
        yield client


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """No stray policy file from the working directory."""
    monkeypatch.chdir(tmp_path)


def _workflow(tmp_path, *uses):
    steps = "".join(f"      - uses: {u}\n" for u in uses)
    wf = tmp_path / "ci.yml"
    wf.write_text(f"name: CI\non: push\njobs:\n  build:\n    runs-on: ubuntu-latest\n    steps:\n{steps}")
    return str(wf)


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_exit_1_on_findings(self, runner):
        result = runner.invoke(cli, ["scan", INSECURE_FIXTURE])
        assert result.exit_code == EXIT_FINDINGS

    def test_exit_0_on_clean(self, runner):
        result = runner.invoke(cli, ["scan", SECURE_FIXTURE])
        assert result.exit_code == EXIT_OK
        assert "All actions passed security checks" in result.output

    def test_exit_2_on_bad_path(self, runner):
        result = runner.invoke(cli, ["scan", "/nonexistent/path.yml"])
        assert result.exit_code == EXIT_ERROR
        assert "Error" in result.output

    def test_exit_2_on_invalid_workflow(self, runner, tmp_path):
        bad_file = tmp_path / "bad.yml"
        bad_file.write_text("just a string")
        result = runner.invoke(cli, ["scan", str(bad_file)])
        assert result.exit_code == EXIT_ERROR
        assert "Error parsing workflow" in result.output

    def test_exit_1_on_vulnerability(self, runner, tmp_path, advisory_client):
        sha = "b4ffde65f46336ab88eb53be808477a3936bae11"
        advisory_client.lookup_advisories.return_value = [
            AdvisoryRecord(id="9", title="Token leak", state="open"),
        ]
        result = runner.invoke(cli, ["scan", _workflow(tmp_path, f"some-org/x@{sha}")])
        assert result.exit_code == EXIT_FINDINGS
        assert "Vulnerable actions found" in result.output
        assert "Token leak" in result.output


# ---------------------------------------------------------------------------
# Reference scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_untrusted_tag_fails(self, runner, tmp_path):
        result = runner.invoke(cli, ["scan", _workflow(tmp_path, "actions/checkout@v4")])
        assert result.exit_code == EXIT_FINDINGS
        assert "Actions with insecure version pinning" in result.output
        assert "- actions/checkout@v4" in result.output

    def test_strict_lists_action_once(self, runner, tmp_path):
        result = runner.invoke(cli, [
            "scan", _workflow(tmp_path, "actions/checkout@v4"), "--strict", "--format", "json",
        ])
        assert result.exit_code == EXIT_FINDINGS
        parsed = json.loads(result.output)
        assert parsed["insecurely_pinned_actions"] == ["actions/checkout@v4"]

    def test_container_reference_passes(self, runner, tmp_path):
        result = runner.invoke(cli, ["scan", _workflow(tmp_path, "docker://alpine:3.18"), "--strict"])
        assert result.exit_code == EXIT_OK

    def test_trusted_owner_from_config(self, runner, tmp_path):
        cfg = tmp_path / "policy.yml"
        cfg.write_text("trusted_owners:\n  - actions\n")
        result = runner.invoke(cli, [
            "scan", _workflow(tmp_path, "actions/checkout@v4"), "--config", str(cfg),
        ])
        assert result.exit_code == EXIT_OK

    def test_critical_dependency_from_config(self, runner, tmp_path):
        (tmp_path / ".pinguard.yml").write_text(
            "critical_dependencies:\n  - actions/checkout@main\ntrusted_owners:\n  - actions\n"
        )
        result = runner.invoke(cli, ["scan", _workflow(tmp_path, "actions/checkout@main")])
        assert result.exit_code == EXIT_FINDINGS
        assert "unstable reference on critical dependency" in result.output

    def test_broken_config_still_scans(self, runner, tmp_path):
        cfg = tmp_path / "policy.yml"
        cfg.write_text("trusted_owners: [unclosed\n")
        result = runner.invoke(cli, ["scan", SECURE_FIXTURE, "--config", str(cfg)])
        assert result.exit_code == EXIT_OK


# ---------------------------------------------------------------------------
# Output formats
# ---------------------------------------------------------------------------

class TestOutputFormats:
    def test_console_streams_findings(self, runner):
        result = runner.invoke(cli, ["scan", INSECURE_FIXTURE])
        assert "Scanning 5 action(s) from workflow" in result.output
        assert "Untrusted action not pinned to a commit SHA" in result.output
        assert "Skipped" in result.output
        assert "Security scan failed" in result.output

    def test_json_output(self, runner):
        result = runner.invoke(cli, ["scan", INSECURE_FIXTURE, "--format", "json"])
        parsed = json.loads(result.output)
        assert parsed["failed"] is True
        assert parsed["scanned"] == 5
        assert parsed["insecurely_pinned_actions"] == [
            "actions/checkout@v4",
            "actions/setup-node@main",
        ]

    def test_sarif_output(self, runner):
        result = runner.invoke(cli, ["scan", INSECURE_FIXTURE, "--format", "sarif"])
        parsed = json.loads(result.output)
        assert parsed["version"] == "2.1.0"
        assert result.exit_code == EXIT_FINDINGS


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------

class TestEnrich:
    def test_enrich_without_api_key_shows_error(self, runner, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        result = runner.invoke(cli, ["scan", INSECURE_FIXTURE, "--enrich"])
        assert result.exit_code == EXIT_ERROR
        assert "ANTHROPIC_API_KEY" in result.output

    def test_enrich_falls_back_on_api_error(self, runner, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "fake-key")
        with patch("pinguard.llm.enrich_findings", side_effect=RuntimeError("boom")):
            result = runner.invoke(cli, ["scan", INSECURE_FIXTURE, "--enrich"])
        assert result.exit_code == EXIT_FINDINGS
        assert "Falling back to standard report" in result.output
        assert "Security scan failed" in result.output


# ---------------------------------------------------------------------------
# Verbose flag
# ---------------------------------------------------------------------------

class TestVerbose:
    def test_verbose_flag_accepted(self, runner):
        result = runner.invoke(cli, ["-v", "scan", SECURE_FIXTURE])
        assert result.exit_code == EXIT_OK
