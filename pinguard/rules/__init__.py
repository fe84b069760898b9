from .findings import (
    Finding,
    FindingKind,
    PinningStatus,
    PinningVerdict,
    Severity,
    TrustVerdict,
)
from .pinning import evaluate_pinning
from .trust import evaluate_trust

__all__ = [
    "Finding",
    "FindingKind",
    "PinningStatus",
    "PinningVerdict",
    "Severity",
    "TrustVerdict",
    "evaluate_pinning",
    "evaluate_trust",
]
