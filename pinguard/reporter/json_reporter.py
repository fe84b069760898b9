"""
JSON reporter: outputs the scan as structured JSON for programmatic use.
"""

import json
import logging
from dataclasses import asdict

from pinguard.scanner import ScanReport

logger = logging.getLogger(__name__)


def report_json(report: ScanReport) -> str:
    """
    Format a scan report as a JSON string.

    Args:
        report: The finished scan.

    Returns:
        A JSON string with the verdict, both result sets and every finding.
    """
    data = {
        "failed": report.failed,
        "scanned": report.scanned,
        "vulnerable_actions": sorted(report.vulnerable_actions),
        "insecurely_pinned_actions": sorted(report.insecurely_pinned_actions),
        "findings": [
            {
                "rule_id": f.rule_id,
                "severity": f.severity.value,
                "action": f.action,
                "title": f.title,
                "description": f.description,
                "advisories": [asdict(a) for a in f.advisories],
            }
            for f in report.findings
        ],
    }
    output = json.dumps(data, indent=2)
    logger.info("JSON report: %d finding(s), %d bytes", len(report.findings), len(output))
    return output
