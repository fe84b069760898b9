"""
Rule: Enforce version pinning on critical dependencies (and on everything
in strict mode).

A dependency with no '@' floats with the default branch, and @main,
@master or @latest move whenever the owner pushes. Critical dependencies
must avoid both; so must every dependency when --strict is set. Critical
dependencies pinned to a tag rather than a commit SHA only get a warning.
"""

from typing import Optional

from pinguard.config import PolicyConfig
from pinguard.parser.reference_parser import is_container_reference, parse_reference
from pinguard.rules.findings import PinningVerdict

MUTABLE_ALIASES = frozenset({"main", "master", "latest"})


def _pin_problem(raw: str) -> Optional[str]:
    """Return 'unpinned' / 'unstable' if the reference floats, else None."""
    if "@" not in raw:
        return "unpinned"
    if raw.rsplit("@", 1)[1] in MUTABLE_ALIASES:
        return "unstable"
    return None


def evaluate_pinning(raw: str, config: PolicyConfig, strict: bool) -> PinningVerdict:
    """
    Check a raw 'uses:' value against the pinning policy.

    Critical dependencies are matched by exact string membership in
    config.critical_dependencies, with no normalization.
    """
    if is_container_reference(raw):
        return PinningVerdict.passed()

    if raw in config.critical_dependencies:
        problem = _pin_problem(raw)
        if problem == "unpinned":
            return PinningVerdict.fail("unpinned critical dependency")
        if problem == "unstable":
            return PinningVerdict.fail("unstable reference on critical dependency")

        ref = parse_reference(raw)
        if ref is not None and not ref.is_immutable_pin:
            return PinningVerdict.warn("critical dependency pinned to tag, not immutable commit")
        return PinningVerdict.passed()

    if strict:
        problem = _pin_problem(raw)
        if problem == "unpinned":
            return PinningVerdict.fail("unpinned dependency (strict mode)")
        if problem == "unstable":
            return PinningVerdict.fail("unstable reference (strict mode)")

    return PinningVerdict.passed()
