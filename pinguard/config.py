"""
Policy configuration for pinguard.

Looks for a .pinguard.yml file (or the legacy critical_dependencies.yaml)
near the scanned workflow and loads the pinning policy from it.

Example .pinguard.yml:

    # Dependencies that must never float (exact 'uses:' strings)
    critical_dependencies:
      - actions/checkout@v4
      - aws-actions/configure-aws-credentials@main

    # Owners whose actions may be pinned to tags instead of commit SHAs
    trusted_owners:
      - actions
      - github

A missing or broken config never stops a scan: every problem is logged and
the affected setting falls back to an empty set.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".pinguard.yml"
LEGACY_CONFIG_FILENAME = "critical_dependencies.yaml"
CONFIG_FILENAMES = (DEFAULT_CONFIG_FILENAME, LEGACY_CONFIG_FILENAME)


@dataclass(frozen=True)
class PolicyConfig:
    """Pinning policy. `source` is the file it came from, None for defaults."""
    critical_dependencies: frozenset[str] = field(default_factory=frozenset)
    trusted_owners: frozenset[str] = field(default_factory=frozenset)
    source: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.source is None


def load_config(config_path: Optional[str] = None, scan_path: Optional[str] = None) -> PolicyConfig:
    """
    Load the pinning policy from a YAML config file.

    Search order:
      1. Explicit config_path if provided
      2. .pinguard.yml / critical_dependencies.yaml next to scan_path,
         then in each of its parent directories
      3. The same names in the current working directory

    Returns a default (empty) PolicyConfig if no usable file is found.
    """
    path = _find_config_file(config_path, scan_path)

    if path is None:
        logger.debug("No config file found, using defaults")
        return PolicyConfig()

    logger.info("Loading config from %s", path)

    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not load config file %s: %s. Using defaults", path, e)
        return PolicyConfig()

    if not isinstance(raw, dict):
        logger.warning("Config file is not a YAML mapping, using defaults")
        return PolicyConfig()

    return PolicyConfig(
        critical_dependencies=_string_set(raw, "critical_dependencies"),
        trusted_owners=_string_set(raw, "trusted_owners"),
        source=path,
    )


def _string_set(raw: dict[str, Any], key: str) -> frozenset[str]:
    value = raw.get(key)
    if value is None:
        return frozenset()
    if not isinstance(value, list):
        logger.warning("Config key '%s' should be a list, ignoring it", key)
        return frozenset()
    return frozenset(str(item) for item in value if item is not None)


def _find_in(directory: Path) -> Optional[str]:
    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if candidate.is_file():
            return str(candidate)
    return None


def _find_config_file(
    config_path: Optional[str] = None,
    scan_path: Optional[str] = None,
) -> Optional[str]:
    """Find the config file, returning its path or None."""
    # 1. Explicit path
    if config_path:
        p = Path(config_path)
        if p.is_file():
            return str(p)
        logger.warning("Config file not found: %s", config_path)
        return None

    # 2. Relative to scan path, walking up (e.g. from .github/workflows/ci.yml)
    if scan_path:
        scan_p = Path(scan_path)
        if scan_p.is_file():
            scan_p = scan_p.parent
        for directory in (scan_p, *scan_p.parents):
            found = _find_in(directory)
            if found:
                return found

    # 3. Current working directory
    return _find_in(Path.cwd())
