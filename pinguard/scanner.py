"""
Scan orchestration: runs the pinning, trust and advisory checks over every
action referenced by a workflow, one reference at a time.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from pinguard.advisories import AdvisoryClient, AdvisoryLookupError
from pinguard.config import PolicyConfig
from pinguard.parser.reference_parser import is_container_reference, parse_reference
from pinguard.rules import (
    Finding,
    FindingKind,
    PinningStatus,
    Severity,
    TrustVerdict,
    evaluate_pinning,
    evaluate_trust,
)

logger = logging.getLogger(__name__)

# Pause between references to go easy on the advisory search
INTER_REFERENCE_DELAY = 0.1


@dataclass
class ScanReport:
    """Everything found while scanning one workflow."""
    findings: list[Finding] = field(default_factory=list)
    vulnerable_actions: set[str] = field(default_factory=set)
    insecurely_pinned_actions: set[str] = field(default_factory=set)
    scanned: int = 0

    @property
    def failed(self) -> bool:
        return bool(self.vulnerable_actions or self.insecurely_pinned_actions)

    @property
    def failing_findings(self) -> list[Finding]:
        return [f for f in self.findings if f.is_failure]


def scan_actions(
    actions: Iterable[str],
    config: PolicyConfig,
    strict: bool,
    client: AdvisoryClient,
    on_finding: Optional[Callable[[Finding], None]] = None,
    delay: float = INTER_REFERENCE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> ScanReport:
    """
    Scan a set of raw 'uses:' values.

    Args:
        actions: Raw action references; duplicates are scanned once.
        config: Pinning policy.
        strict: Apply the pinning checks to every dependency, not just
            critical ones.
        client: Advisory lookup used for parsed references.
        on_finding: Called with each finding as soon as it is produced.
        delay: Seconds to pause after each reference.
        sleep: Wait function, replaceable in tests.

    Returns:
        A ScanReport. Its `failed` property is the overall verdict.
    """
    report = ScanReport()
    ordered = sorted(set(actions))
    logger.info(
        "Scanning %d action(s) (strict=%s, policy=%s)",
        len(ordered), strict, config.source or "defaults",
    )

    def emit(finding: Finding) -> None:
        report.findings.append(finding)
        if finding.kind == FindingKind.VULNERABILITY_FOUND:
            report.vulnerable_actions.add(finding.action)
        elif finding.is_failure:
            report.insecurely_pinned_actions.add(finding.action)
        if on_finding is not None:
            on_finding(finding)

    for raw in ordered:
        _scan_one(raw, config, strict, client, emit)
        report.scanned += 1
        sleep(delay)

    logger.info(
        "Scan complete: %d vulnerable, %d insecurely pinned",
        len(report.vulnerable_actions), len(report.insecurely_pinned_actions),
    )
    return report


def _scan_one(
    raw: str,
    config: PolicyConfig,
    strict: bool,
    client: AdvisoryClient,
    emit: Callable[[Finding], None],
) -> None:
    failed = False

    verdict = evaluate_pinning(raw, config, strict)
    if verdict.status == PinningStatus.FAIL:
        failed = True
        emit(Finding(
            kind=FindingKind.PINNING_VIOLATION,
            severity=Severity.HIGH,
            action=raw,
            title="Insecure version pinning",
            description=f"'{raw}': {verdict.reason}.",
        ))
    elif verdict.status == PinningStatus.WARN:
        emit(Finding(
            kind=FindingKind.PINNING_WARNING,
            severity=Severity.LOW,
            action=raw,
            title="Critical dependency pinned to a tag",
            description=f"'{raw}': {verdict.reason}. Prefer a full commit SHA.",
        ))

    ref = parse_reference(raw)
    if ref is None:
        reason = "container image reference" if is_container_reference(raw) else "malformed reference"
        emit(Finding(
            kind=FindingKind.SKIPPED,
            severity=Severity.INFO,
            action=raw,
            title="Skipped",
            description=f"'{raw}' was not checked for trust or advisories ({reason}).",
        ))
        return

    trust = evaluate_trust(ref, config)
    if trust == TrustVerdict.UNTRUSTED_AND_MUTABLE:
        failed = True
        emit(Finding(
            kind=FindingKind.TRUST_VIOLATION,
            severity=Severity.HIGH,
            action=raw,
            title="Untrusted action not pinned to a commit SHA",
            description=(
                f"'{raw}' comes from non-trusted owner '{ref.owner}' and is pinned to "
                f"'{ref.version}'. Actions from untrusted owners must be pinned to a "
                f"full commit SHA."
            ),
        ))
    elif trust == TrustVerdict.UNTRUSTED_BUT_IMMUTABLE:
        emit(Finding(
            kind=FindingKind.TRUST_WARNING,
            severity=Severity.LOW,
            action=raw,
            title="Action from non-trusted owner",
            description=f"'{raw}' comes from non-trusted owner '{ref.owner}' (pinned to a commit SHA).",
        ))

    try:
        advisories = client.lookup_advisories(ref.owner, ref.repo)
    except AdvisoryLookupError as e:
        logger.warning("Advisory lookup failed for %s: %s", raw, e)
        emit(Finding(
            kind=FindingKind.LOOKUP_INCONCLUSIVE,
            severity=Severity.MEDIUM,
            action=raw,
            title="Advisory lookup inconclusive",
            description=f"Failed to check '{raw}' for known vulnerabilities: {e}",
        ))
        return

    if advisories:
        lines = [f"- Advisory ID: {a.id}, Title: {a.title}" for a in advisories]
        emit(Finding(
            kind=FindingKind.VULNERABILITY_FOUND,
            severity=Severity.CRITICAL,
            action=raw,
            title="Known vulnerability",
            description=f"{len(advisories)} open advisory(ies) for {ref.identity}:\n" + "\n".join(lines),
            advisories=advisories,
        ))
    elif not failed:
        emit(Finding(
            kind=FindingKind.CLEAN,
            severity=Severity.INFO,
            action=raw,
            title="Clean",
            description=f"No known vulnerabilities for '{raw}'.",
        ))
