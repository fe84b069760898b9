"""
Parser for GitHub Actions workflow files.

Reads a single .yml/.yaml workflow and collects every action referenced by
a step's 'uses:' field, along with the line it first appears on.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

_LINE_KEY = "__line__"


class _LineLoader(yaml.SafeLoader):
    """PyYAML loader that stores the start line number on every mapping node."""


def _construct_mapping(loader: _LineLoader, node: yaml.MappingNode) -> dict[Any, Any]:
    mapping: dict[Any, Any] = loader.construct_mapping(node, deep=True)
    mapping[_LINE_KEY] = node.start_mark.line + 1  # YAML lines are 0-indexed
    return mapping


_LineLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass
class Step:
    """A step that references an action."""
    job_id: str
    name: Optional[str]
    uses: str
    line_number: Optional[int] = None


@dataclass
class Workflow:
    """A parsed GitHub Actions workflow, reduced to its action references."""
    file_path: str
    name: Optional[str]
    steps: list[Step] = field(default_factory=list)

    @property
    def actions(self) -> set[str]:
        """Every distinct 'uses:' value across all jobs."""
        return {step.uses for step in self.steps}

    @property
    def action_lines(self) -> dict[str, Optional[int]]:
        """Map each action to the line of the first step that uses it."""
        lines: dict[str, Optional[int]] = {}
        for step in self.steps:
            lines.setdefault(step.uses, step.line_number)
        return lines


def _collect_steps(job_id: str, job_raw: Any) -> list[Step]:
    if not isinstance(job_raw, dict):
        logger.debug("Ignoring non-mapping job '%s'", job_id)
        return []

    steps_raw = job_raw.get("steps", [])
    if not isinstance(steps_raw, list):
        logger.debug("Ignoring non-list steps in job '%s'", job_id)
        return []

    steps = []
    for step_raw in steps_raw:
        if not isinstance(step_raw, dict):
            continue
        uses = step_raw.get("uses")
        if not isinstance(uses, str):
            continue
        steps.append(Step(
            job_id=job_id,
            name=step_raw.get("name"),
            uses=uses,
            line_number=step_raw.get(_LINE_KEY),
        ))
    logger.debug("Job '%s': %d action step(s)", job_id, len(steps))
    return steps


def parse_workflow(file_path: str) -> Workflow:
    """
    Parse a single GitHub Actions workflow YAML file.

    Args:
        file_path: Path to the .yml/.yaml workflow file.

    Returns:
        A Workflow holding every step that references an action.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        yaml.YAMLError: If the file isn't valid YAML.
        ValueError: If the document or its 'jobs' isn't a mapping.
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"Workflow file not found: {file_path}")

    logger.info("Parsing workflow: %s", file_path)

    with open(path, "r") as f:
        raw = yaml.load(f, Loader=_LineLoader)  # noqa: S506  # _LineLoader is safe

    if not isinstance(raw, dict):
        raise ValueError(f"Workflow file is not a valid YAML mapping: {file_path}")

    jobs_raw = raw.get("jobs", {})
    if not isinstance(jobs_raw, dict):
        raise ValueError(f"'jobs' is not a mapping in {file_path}")

    steps = []
    for job_id, job_raw in jobs_raw.items():
        if job_id == _LINE_KEY:
            continue
        steps.extend(_collect_steps(str(job_id), job_raw))

    workflow = Workflow(file_path=str(path), name=raw.get("name"), steps=steps)
    logger.debug(
        "Parsed '%s': %d step(s) referencing %d distinct action(s)",
        raw.get("name", "(unnamed)"), len(steps), len(workflow.actions),
    )
    return workflow
