"""
Console reporter: prints one line per finding as the scan runs, then a
summary of every vulnerable and every insecurely pinned action.
"""

from pinguard.rules.findings import Finding, FindingKind, Severity
from pinguard.scanner import ScanReport


# ANSI color codes for terminal output
COLORS = {
    Severity.CRITICAL: "\033[91m",  # bright red
    Severity.HIGH:     "\033[31m",  # red
    Severity.MEDIUM:   "\033[33m",  # yellow
    Severity.LOW:      "\033[36m",  # cyan
    Severity.INFO:     "\033[32m",  # green
}
BOLD = "\033[1m"
RESET = "\033[0m"

ICONS = {
    FindingKind.PINNING_VIOLATION: "❌",
    FindingKind.TRUST_VIOLATION: "❌",
    FindingKind.VULNERABILITY_FOUND: "⛔",
    FindingKind.PINNING_WARNING: "⚠️",
    FindingKind.TRUST_WARNING: "⚠️",
    FindingKind.LOOKUP_INCONCLUSIVE: "❓",
    FindingKind.CLEAN: "✅",
    FindingKind.SKIPPED: "⏭️",
}


def _severity_badge(severity: Severity) -> str:
    color = COLORS.get(severity, "")
    label = severity.value.upper()
    return f"{color}{BOLD}[{label:8s}]{RESET}"


def format_finding(finding: Finding) -> str:
    """Format a single finding for streaming output."""
    icon = ICONS.get(finding.kind, "")
    lines = [f"{icon} {_severity_badge(finding.severity)} {BOLD}{finding.title}{RESET}"]
    for desc_line in finding.description.split("\n"):
        lines.append(f"    {desc_line}")
    return "\n".join(lines)


def report_console(report: ScanReport, file_path: str = "") -> str:
    """
    Format the end-of-scan summary.

    Args:
        report: The finished scan.
        file_path: Optional label for the report header.

    Returns:
        The formatted summary string (also prints it).
    """
    lines = []

    # Header
    lines.append("")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")
    lines.append(f"{BOLD}  Action Supply-Chain Report{RESET}")
    if file_path:
        lines.append(f"  File: {file_path}")
    lines.append(f"  Scanned {report.scanned} action(s)")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")
    lines.append("")

    if not report.failed:
        lines.append("  ✅ All actions passed security checks!")
        lines.append("")
        text = "\n".join(lines)
        print(text)
        return text

    lines.append(f"  ⛔ {BOLD}Security scan failed!{RESET}")

    if report.vulnerable_actions:
        lines.append("")
        lines.append("  Vulnerable actions found:")
        for action in sorted(report.vulnerable_actions):
            lines.append(f"    - {action}")

    if report.insecurely_pinned_actions:
        lines.append("")
        lines.append("  Actions with insecure version pinning:")
        for action in sorted(report.insecurely_pinned_actions):
            lines.append(f"    - {action}")

    lines.append("")
    lines.append(f"{BOLD}{'=' * 60}{RESET}")
    lines.append("")

    text = "\n".join(lines)
    print(text)
    return text
