"""
Claude LLM client: explains failing findings and how to remediate them.

Takes the deterministic findings from the scan and sends them to Claude
along with the workflow YAML, asking for:
  1. A beginner-friendly explanation of the supply-chain risk
  2. Remediation guidance (which pin to use, what to check before trusting)

The output is advice only; the workflow is never modified.
"""

import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from anthropic import Anthropic
from anthropic.types import TextBlock

from pinguard.rules.findings import Finding

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


@dataclass
class EnrichedFinding:
    """A finding enriched with an LLM-generated explanation and remediation."""
    finding: Finding
    explanation: str    # beginner-friendly risk explanation
    remediation: str    # how to pin or replace the action


SYSTEM_PROMPT = """You are a software supply-chain security expert specialising in GitHub Actions. You will receive:
1. A list of findings about third-party actions referenced by a workflow (each with an index, rule ID, severity, action reference and description)
2. The original workflow YAML file

Respond with EXACTLY a JSON array — one object per finding, in the same order, no markdown, no extra text:
[
  {
    "explanation": "Why this action reference is a supply-chain risk, in 2-3 beginner-friendly sentences.",
    "remediation": "What the maintainer should do: e.g. pin to a full commit SHA, upgrade past the advisory, or vet the owner. Show the corrected 'uses:' line when relevant."
  }
]

The array must have exactly as many objects as there are findings, in the same order."""


def _build_user_prompt(findings: list[Finding], workflow_yaml: str) -> str:
    """Build a batched prompt for all findings in one request."""
    findings_text = ""
    for i, f in enumerate(findings, 1):
        findings_text += f"""Finding {i}:
  Rule ID: {f.rule_id}
  Severity: {f.severity.value}
  Action: {f.action}
  Title: {f.title}
  Description: {f.description}

"""
    return f"""Here are {len(findings)} finding(s):

{findings_text}Here is the full workflow YAML:

```yaml
{workflow_yaml}
```

Respond with the JSON array only."""


def enrich_findings(
    findings: list[Finding],
    workflow_yaml: str,
    api_key: Optional[str] = None,
    model: str = DEFAULT_MODEL,
) -> list[EnrichedFinding]:
    """
    Enrich findings using Claude in a single batched API call.

    Args:
        findings: Findings from the scan (normally only the failing ones).
        workflow_yaml: The original workflow YAML content.
        api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY env var.
        model: Claude model to use.

    Returns:
        One EnrichedFinding per input finding, in order.

    Raises:
        ValueError: If no API key is available.
    """
    key = api_key or os.environ.get("ANTHROPIC_API_KEY")
    if not key:
        raise ValueError(
            "No Anthropic API key provided. Set ANTHROPIC_API_KEY environment "
            "variable or pass api_key parameter."
        )

    if not findings:
        return []

    logger.info("Enriching %d finding(s) in one call (model=%s)", len(findings), model)
    client = Anthropic(api_key=key)
    user_prompt = _build_user_prompt(findings, workflow_yaml)

    t0 = time.monotonic()
    response = client.messages.create(
        model=model,
        max_tokens=4096,
        system=SYSTEM_PROMPT,
        messages=[
            {"role": "user", "content": user_prompt},
        ],
    )
    elapsed_ms = (time.monotonic() - t0) * 1000
    logger.info(
        "Claude response: %.0fms, tokens in=%s out=%s",
        elapsed_ms,
        getattr(response.usage, "input_tokens", None),
        getattr(response.usage, "output_tokens", None),
    )

    # Other block types lack .text
    text_blocks = [b for b in response.content if isinstance(b, TextBlock)]
    response_text = text_blocks[0].text.strip() if text_blocks else ""

    try:
        items = json.loads(response_text)
        if (
            not isinstance(items, list)
            or len(items) != len(findings)
            or not all(isinstance(item, dict) for item in items)
        ):
            raise ValueError(
                f"Expected a JSON array of {len(findings)} object(s), got {type(items).__name__}"
            )
    except ValueError as e:
        logger.warning("Failed to parse Claude response: %s. Starts with: %.200s", e, response_text)
        return [
            EnrichedFinding(
                finding=f,
                explanation=response_text,
                remediation="Could not parse remediation.",
            )
            for f in findings
        ]

    return [
        EnrichedFinding(
            finding=finding,
            explanation=item.get("explanation", "No explanation provided."),
            remediation=item.get("remediation", "No remediation suggested."),
        )
        for finding, item in zip(findings, items)
    ]
