"""
CLI entry point: ties together parser → policy → advisory lookup → reporter.

Usage:
  # Scan a workflow:
  pinguard scan .github/workflows/ci.yml

  # Require every dependency to be pinned to a stable ref:
  pinguard scan .github/workflows/ci.yml --strict

  # Output as JSON or SARIF:
  pinguard scan .github/workflows/ci.yml --format sarif > results.sarif

  # Explain failures with Claude:
  pinguard scan .github/workflows/ci.yml --enrich

Exit codes:
  0 — every action passed
  1 — vulnerable or insecurely pinned actions found
  2 — error (unreadable workflow, missing API key, etc.)
"""

import logging
import os
import sys

import click
import yaml

from pinguard.advisories import AdvisoryClient
from pinguard.config import load_config
from pinguard.parser import parse_workflow
from pinguard.reporter import format_finding, report_console, report_json, report_sarif
from pinguard.scanner import scan_actions

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
def cli(verbose: bool):
    """Supply-chain scanner for the actions a GitHub workflow depends on."""
    _setup_logging(verbose)


@cli.command()
@click.argument("path")
@click.option("--strict", is_flag=True, help="Require a stable pin on every dependency, not only critical ones.")
@click.option("--config", "config_path", default=None, help="Path to .pinguard.yml policy file.")
@click.option("--format", "output_format", type=click.Choice(["console", "json", "sarif"]), default="console", help="Output format.")
@click.option("--enrich", is_flag=True, help="Use Claude AI to explain failures and suggest remediation.")
def scan(path: str, strict: bool, config_path: str, output_format: str, enrich: bool):
    """Scan the actions referenced by a workflow file.

    Exits with code 0 if every action passes, 1 if any is vulnerable or
    insecurely pinned, 2 on error.
    """
    path = os.path.abspath(path)

    try:
        workflow = parse_workflow(path)
    except (yaml.YAMLError, ValueError) as e:
        click.echo(f"Error parsing workflow: {e}", err=True)
        sys.exit(EXIT_ERROR)
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if enrich and not os.environ.get("ANTHROPIC_API_KEY"):
        click.echo(
            "Error: --enrich requires ANTHROPIC_API_KEY environment variable.",
            err=True,
        )
        sys.exit(EXIT_ERROR)

    config = load_config(config_path=config_path, scan_path=path)
    if config.is_default:
        logger.info("No policy configured: no critical dependencies, no trusted owners")

    client = AdvisoryClient(token=os.environ.get("GITHUB_TOKEN"))
    actions = workflow.actions

    on_finding = None
    if output_format == "console":
        click.echo(f"Scanning {len(actions)} action(s) from workflow")

        def on_finding(finding):
            click.echo(format_finding(finding))

    report = scan_actions(actions, config, strict, client, on_finding=on_finding)

    if output_format == "json":
        click.echo(report_json(report))
    elif output_format == "sarif":
        click.echo(report_sarif(report, workflow.file_path, workflow.action_lines))
    elif enrich and report.failing_findings:
        _report_enriched(report, workflow.file_path)
    else:
        report_console(report, file_path=workflow.file_path)

    sys.exit(EXIT_FINDINGS if report.failed else EXIT_OK)


def _report_enriched(report, file_path: str) -> None:
    from pinguard.llm import enrich_findings
    from pinguard.reporter.enriched_reporter import report_enriched

    failing = report.failing_findings
    click.echo(f"\nEnriching {len(failing)} finding(s) with Claude AI...")

    try:
        with open(file_path, "r") as f:
            yaml_content = f.read()
        enriched = enrich_findings(failing, yaml_content)
    except Exception as e:
        logger.error("Claude API error: %s", e)
        click.echo(f"Error calling Claude API: {e}", err=True)
        click.echo("Falling back to standard report.\n", err=True)
        report_console(report, file_path=file_path)
        return

    report_enriched(enriched, report, file_path=file_path)


if __name__ == "__main__":
    cli()
