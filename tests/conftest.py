"""Shared fixtures for all tests."""

import os
from unittest.mock import MagicMock

import pytest

from pinguard.parser import parse_workflow


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures/.github/workflows")


@pytest.fixture
def insecure_workflow_path():
    """Path to the insecure example workflow fixture."""
    return os.path.join(FIXTURES_DIR, "insecure-example.yml")


@pytest.fixture
def insecure_workflow(insecure_workflow_path):
    """Parsed insecure example workflow."""
    return parse_workflow(insecure_workflow_path)


@pytest.fixture
def advisory_client():
    """Advisory client stub that finds nothing."""
    client = MagicMock()
    client.lookup_advisories.return_value = []
    return client


class RecordingSleep:
    """Stands in for time.sleep, recording each requested wait."""

    def __init__(self):
        self.waits = []

    def __call__(self, seconds):
        self.waits.append(seconds)


@pytest.fixture
def no_sleep():
    return RecordingSleep()
