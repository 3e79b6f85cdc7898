"""Tests for the typed cargo metadata document."""

from __future__ import annotations

import pytest

from cargo_metadata_mcp.metadata.models import CargoMetadata
from tests._helpers.builders import load_fixture_payload


def test_document_round_trips_unchanged() -> None:
    """Dumping a parsed document reproduces cargo's payload, unknown keys included."""
    payload = load_fixture_payload("workspace_metadata")
    document = CargoMetadata.from_payload(payload)
    dumped = document.as_document()
    if dumped != payload:
        pytest.fail("Parsed document did not reproduce the cargo payload")
    if list(dumped) != list(payload):
        pytest.fail(f"Top-level key order changed: {list(dumped)}")
    package_keys = list(dumped["packages"][0])
    if package_keys != list(payload["packages"][0]):
        pytest.fail(f"Package key order changed: {package_keys}")


def test_updated_copy_stops_mirroring_payload() -> None:
    """A copy with updated fields dumps its own values, not the original payload."""
    payload = load_fixture_payload("workspace_metadata")
    document = CargoMetadata.from_payload(payload).model_copy(update={"resolve": None})
    dumped = document.as_document()
    if dumped.get("resolve", "missing") is not None:
        pytest.fail(f"Expected the updated resolve value, got {dumped.get('resolve')!r}")
    if CargoMetadata.from_payload(payload).model_copy(deep=True).as_document() != payload:
        pytest.fail("A plain copy should still mirror the payload")


def test_partial_payload_does_not_gain_defaults() -> None:
    """Fields cargo omitted stay omitted in the dumped document."""
    payload = {"packages": [], "workspace_members": [], "workspace_root": "/w"}
    dumped = CargoMetadata.model_validate(payload).as_document()
    if dumped != payload:
        pytest.fail(f"Unexpected keys added to document: {sorted(dumped)}")


def test_target_required_features_alias(workspace_metadata: CargoMetadata) -> None:
    """The hyphenated required-features key maps onto required_features."""
    core = next(p for p in workspace_metadata.packages if p.name == "demo-core")
    bench = next(t for t in core.targets if t.name == "parse")
    if bench.required_features != ["json"]:
        pytest.fail(f"Unexpected required features: {bench.required_features}")


def test_lookup_helpers(workspace_metadata: CargoMetadata) -> None:
    """Packages and resolve nodes are found by id."""
    app_id = workspace_metadata.workspace_members[0]
    package = workspace_metadata.package_by_id(app_id)
    if package is None or package.name != "demo-app":
        pytest.fail("Expected demo-app for first workspace member")
    node = workspace_metadata.node_by_id(app_id)
    if node is None or len(node.deps) != 2:
        pytest.fail("Expected resolve node with two deps for demo-app")
    if workspace_metadata.package_by_id("missing") is not None:
        pytest.fail("Unknown ids should not resolve")


def test_dependency_kind_label(workspace_metadata: CargoMetadata) -> None:
    """Cargo's null dependency kind reads as normal."""
    app = workspace_metadata.packages[0]
    labels = [dep.kind_label for dep in app.dependencies]
    if labels != ["normal", "normal", "build"]:
        pytest.fail(f"Unexpected kind labels: {labels}")
