"""
SARIF reporter: outputs findings in SARIF 2.1.0 format for GitHub Code Scanning.

Only failures and warnings are reported; clean and skipped actions are
left out. Each result points at the first step that uses the action.

Reference: https://docs.github.com/en/code-security/code-scanning/integrating-with-code-scanning/sarif-support-for-code-scanning
"""

import json
import logging
from typing import Any, Optional

from pinguard import __version__
from pinguard.rules.findings import Finding, FindingKind, Severity
from pinguard.scanner import ScanReport

logger = logging.getLogger(__name__)

_SARIF_LEVEL: dict[Severity, str] = {
    Severity.CRITICAL: "error",
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "note",
    Severity.INFO: "none",
}

# CVSS-like 0.0-10.0 scores GitHub uses to rank security alerts
_SECURITY_SEVERITY: dict[Severity, str] = {
    Severity.CRITICAL: "9.0",
    Severity.HIGH: "7.0",
    Severity.MEDIUM: "5.0",
    Severity.LOW: "3.0",
    Severity.INFO: "0.0",
}

_EXCLUDED_KINDS = frozenset({FindingKind.CLEAN, FindingKind.SKIPPED})

TOOL_NAME = "pinguard"
SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"
SARIF_VERSION = "2.1.0"


def _build_rules(findings: list[Finding]) -> list[dict[str, Any]]:
    """One SARIF rule per distinct rule id, described by its first finding."""
    seen: dict[str, Finding] = {}
    for f in findings:
        seen.setdefault(f.rule_id, f)

    return [
        {
            "id": rule_id,
            "name": rule_id.replace("-", " ").title().replace(" ", ""),
            "shortDescription": {"text": f.title},
            "properties": {
                "security-severity": _SECURITY_SEVERITY[f.severity],
                "tags": ["security", "supply-chain", "github-actions"],
            },
        }
        for rule_id, f in seen.items()
    ]


def _build_result(f: Finding, file_path: str, line: Optional[int]) -> dict[str, Any]:
    return {
        "ruleId": f.rule_id,
        "level": _SARIF_LEVEL[f.severity],
        "message": {"text": f.description},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {
                        "uri": file_path,
                        "uriBaseId": "%SRCROOT%",
                    },
                    "region": {"startLine": line or 1},
                },
                "logicalLocations": [{"name": f.action, "kind": "action"}],
            }
        ],
    }


def report_sarif(
    report: ScanReport,
    file_path: str,
    action_lines: Optional[dict[str, Optional[int]]] = None,
) -> str:
    """
    Format a scan report as a SARIF 2.1.0 JSON string.

    Args:
        report: The finished scan.
        file_path: Workflow file the results point at.
        action_lines: Line of the first step using each action.

    Returns:
        A SARIF 2.1.0 JSON string.
    """
    lines = action_lines or {}
    findings = [f for f in report.findings if f.kind not in _EXCLUDED_KINDS]

    sarif: dict[str, Any] = {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": TOOL_NAME,
                        "version": __version__,
                        "rules": _build_rules(findings),
                    }
                },
                "results": [_build_result(f, file_path, lines.get(f.action)) for f in findings],
            }
        ],
    }

    output = json.dumps(sarif, indent=2)
    logger.info("SARIF report: %d result(s), %d bytes", len(findings), len(output))
    return output
