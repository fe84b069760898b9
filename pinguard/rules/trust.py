"""
Rule: Actions from owners outside the trusted list must be pinned to a
full commit SHA.

A tag or branch of an untrusted owner can be moved to malicious code at
any time. A SHA pin is acceptable but still worth a warning.
"""

from pinguard.config import PolicyConfig
from pinguard.parser.reference_parser import DependencyReference
from pinguard.rules.findings import TrustVerdict


def evaluate_trust(ref: DependencyReference, config: PolicyConfig) -> TrustVerdict:
    # Owner match is exact and case-sensitive
    if ref.owner in config.trusted_owners:
        return TrustVerdict.TRUSTED
    if not ref.is_immutable_pin:
        return TrustVerdict.UNTRUSTED_AND_MUTABLE
    return TrustVerdict.UNTRUSTED_BUT_IMMUTABLE
