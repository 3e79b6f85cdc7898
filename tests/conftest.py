"""Pytest configuration for the cargo metadata MCP test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from cargo_metadata_mcp.metadata.models import CargoMetadata
from tests._helpers.builders import load_fixture, write_manifest


@pytest.fixture
def workspace_metadata() -> CargoMetadata:
    """Two-member workspace with one registry dependency and a resolve graph.

    Returns
    -------
    CargoMetadata
        Parsed ``workspace_metadata.json`` fixture.
    """
    return load_fixture("workspace_metadata")


@pytest.fixture
def single_package_metadata() -> CargoMetadata:
    """Single binary package with no dependencies.

    Returns
    -------
    CargoMetadata
        Parsed ``single_package_metadata.json`` fixture.
    """
    return load_fixture("single_package_metadata")


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    """Write a minimal ``Cargo.toml`` into a temporary project directory.

    Returns
    -------
    Path
        Path to the manifest on disk.
    """
    return write_manifest(tmp_path / "hello")
