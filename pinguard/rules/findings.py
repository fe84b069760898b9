"""
Finding model and the verdict types produced by the policy rules.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class FindingKind(Enum):
    PINNING_VIOLATION = "pinning-violation"
    PINNING_WARNING = "tag-pinned-critical"
    TRUST_VIOLATION = "untrusted-mutable-ref"
    TRUST_WARNING = "untrusted-owner"
    VULNERABILITY_FOUND = "known-vulnerability"
    LOOKUP_INCONCLUSIVE = "advisory-lookup-failed"
    CLEAN = "clean"
    SKIPPED = "skipped"


# Kinds that put an action into one of the two failing result sets
FAILURE_KINDS = frozenset({
    FindingKind.PINNING_VIOLATION,
    FindingKind.TRUST_VIOLATION,
    FindingKind.VULNERABILITY_FOUND,
})


@dataclass
class Finding:
    """A single outcome for one action reference."""
    kind: FindingKind
    severity: Severity
    action: str           # the raw 'uses:' value
    title: str            # short summary
    description: str      # what was found
    advisories: list[Any] = field(default_factory=list)

    @property
    def rule_id(self) -> str:
        return self.kind.value

    @property
    def is_failure(self) -> bool:
        return self.kind in FAILURE_KINDS


class PinningStatus(Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


@dataclass(frozen=True)
class PinningVerdict:
    status: PinningStatus
    reason: str = ""

    @classmethod
    def passed(cls) -> "PinningVerdict":
        return cls(PinningStatus.PASS)

    @classmethod
    def warn(cls, reason: str) -> "PinningVerdict":
        return cls(PinningStatus.WARN, reason)

    @classmethod
    def fail(cls, reason: str) -> "PinningVerdict":
        return cls(PinningStatus.FAIL, reason)


class TrustVerdict(Enum):
    TRUSTED = "trusted"
    UNTRUSTED_BUT_IMMUTABLE = "untrusted-but-immutable"
    UNTRUSTED_AND_MUTABLE = "untrusted-and-mutable"
