from .reference_parser import DependencyReference, parse_reference, is_container_reference
from .workflow_parser import Workflow, parse_workflow

__all__ = [
    "DependencyReference",
    "parse_reference",
    "is_container_reference",
    "Workflow",
    "parse_workflow",
]
