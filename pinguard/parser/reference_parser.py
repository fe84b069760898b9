"""
Parser for action references of the form 'owner/repo@version'.

Container images ('docker://...') are not owner/repo addressable, so they
never produce a DependencyReference. Neither does anything that isn't
exactly one '@' with exactly one '/' before it (local actions, subpath
actions, unpinned references).
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

CONTAINER_SCHEME = "docker://"

# Lowercase only: an uppercase SHA is not treated as an immutable pin.
_COMMIT_SHA_RE = re.compile(r"[0-9a-f]{40}")


@dataclass(frozen=True)
class DependencyReference:
    """A parsed 'owner/repo@version' action reference."""
    raw: str                # e.g. "actions/checkout@v4"
    owner: str              # e.g. "actions"
    repo: str               # e.g. "checkout"
    version: str            # e.g. "v4" or a commit SHA
    is_immutable_pin: bool  # True if version is a full 40-char lowercase SHA

    @property
    def identity(self) -> str:
        return f"{self.owner}/{self.repo}"


def is_container_reference(raw: str) -> bool:
    return raw.startswith(CONTAINER_SCHEME)


def parse_reference(raw: str) -> Optional[DependencyReference]:
    """
    Parse a raw 'uses:' value into a DependencyReference.

    Returns None when the reference is not applicable: a container image,
    or a string that doesn't split into exactly owner, repo and version.
    Owner, repo and version are kept verbatim.
    """
    if is_container_reference(raw):
        logger.debug("Skipping container reference: %s", raw)
        return None

    parts = raw.split("@")
    if len(parts) != 2:
        logger.debug("Expected exactly one '@' in %r", raw)
        return None

    path, version = parts
    path_parts = path.split("/")
    if len(path_parts) != 2:
        logger.debug("Expected exactly one '/' before '@' in %r", raw)
        return None

    owner, repo = path_parts
    if not owner or not repo:
        logger.debug("Empty owner or repo in %r", raw)
        return None

    return DependencyReference(
        raw=raw,
        owner=owner,
        repo=repo,
        version=version,
        is_immutable_pin=bool(_COMMIT_SHA_RE.fullmatch(version)),
    )
