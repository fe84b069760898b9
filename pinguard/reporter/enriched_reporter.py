"""
Enriched console reporter: prints failing findings with LLM-generated
explanations and remediation, followed by the standard summary.
"""

import logging

from pinguard.llm.claude_client import EnrichedFinding
from pinguard.reporter.console_reporter import BOLD, RESET, _severity_badge, report_console
from pinguard.scanner import ScanReport

logger = logging.getLogger(__name__)

GREEN = "\033[32m"


def report_enriched(enriched_findings: list[EnrichedFinding], report: ScanReport, file_path: str = "") -> str:
    """
    Format enriched findings as a colored console report, then append the
    vulnerable / insecurely pinned summary.
    """
    lines = []

    lines.append("")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")
    lines.append(f"{BOLD}  Action Supply-Chain Findings (AI-Enhanced){RESET}")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")

    for i, ef in enumerate(enriched_findings, 1):
        f = ef.finding
        lines.append(f"  {'-' * 56}")
        lines.append("")
        lines.append(f"  {_severity_badge(f.severity)} #{i}: {BOLD}{f.title}{RESET}")
        lines.append(f"    Rule:    {f.rule_id}")
        lines.append(f"    Action:  {f.action}")

        lines.append("")
        lines.append(f"    {BOLD}Why this matters:{RESET}")
        for desc_line in ef.explanation.split("\n"):
            lines.append(f"    {desc_line}")

        lines.append("")
        lines.append(f"    {GREEN}{BOLD}Remediation:{RESET}")
        for fix_line in ef.remediation.split("\n"):
            lines.append(f"    {GREEN}{fix_line}{RESET}")
        lines.append("")

    logger.info("Enriched report: %d finding(s) with AI explanations", len(enriched_findings))
    text = "\n".join(lines)
    print(text)
    return text + report_console(report, file_path=file_path)
