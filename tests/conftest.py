"""
Pytest configuration and fixtures for grantmatrix tests.

This module provides shared fixtures used across unit and integration tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from grantmatrix.directory import DirectorySnapshot
from grantmatrix.schema import DirectoryGroup


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def snapshot() -> DirectorySnapshot:
    """Two realms with a few groups each."""
    return DirectorySnapshot.from_mapping({
        "R1": [
            DirectoryGroup(id="G1", name="operators"),
            DirectoryGroup(id="G2", name="auditors"),
        ],
        "R2": [
            DirectoryGroup(id="G3", name="support"),
        ],
    })


@pytest.fixture
def sample_rules_yaml() -> str:
    """Return a small, valid rule set in ID-space."""
    return """
authorizations:
  - realm_id: master
    group_id: g1
    action: read
    target_realm_id: R1
    target_group_id: G1
  - realm_id: master
    group_id: g1
    action: write
    target_realm_id: R2
  - realm_id: master
    group_id: g2
    action: list
"""


@pytest.fixture
def sample_allow_yaml() -> str:
    """Return an allow-list covering the sample rules."""
    return """
targets:
  R1: [G1, G2]
  R2: [G3]
"""


@pytest.fixture
def sample_directory_yaml() -> str:
    """Return a static directory config matching the snapshot fixture."""
    return """
backend: static
realms:
  R1:
    - id: G1
      name: operators
    - id: G2
      name: auditors
  R2:
    - id: G3
      name: support
"""
