"""Projection behavior for each metadata operation."""

from __future__ import annotations

import json

import pytest

from cargo_metadata_mcp.metadata.models import CargoMetadata
from cargo_metadata_mcp.mcp.projections import (
    Operation,
    project_dependencies,
    project_features,
    project_metadata,
    project_package_info,
    project_targets,
    project_workspace_info,
)
from cargo_metadata_mcp.mcp.service import serialize
from tests._helpers.builders import empty_workspace, load_fixture, load_fixture_payload


def test_operation_table_is_closed() -> None:
    """Exactly six operations exist and each maps to its projection."""
    expected = {
        "get_metadata": project_metadata,
        "get_package_info": project_package_info,
        "get_dependencies": project_dependencies,
        "get_targets": project_targets,
        "get_workspace_info": project_workspace_info,
        "get_features": project_features,
    }
    actual = {op.value: op.projection for op in Operation}
    if actual != expected:
        pytest.fail(f"Unexpected operation table: {sorted(actual)}")


def test_metadata_projection_is_whole_document(workspace_metadata: CargoMetadata) -> None:
    """get_metadata enumerates every package exactly as cargo reported it."""
    payload = load_fixture_payload("workspace_metadata")
    result = Operation.GET_METADATA.project(workspace_metadata)
    if result != payload:
        pytest.fail("get_metadata should return the document unchanged")


def test_package_info_has_one_record_per_package(workspace_metadata: CargoMetadata) -> None:
    """get_package_info summarizes every package with counts."""
    records = project_package_info(workspace_metadata)
    if len(records) != len(workspace_metadata.packages):
        pytest.fail("Record count must match package count")
    by_name = {r["name"]: r for r in records}
    app = by_name["demo-app"]
    if (app["version"], app["dependency_count"], app["target_count"]) != ("0.2.0", 3, 2):
        pytest.fail(f"Unexpected demo-app summary: {app}")
    if app["manifest_path"] != "/work/demo/app/Cargo.toml" or not app["is_workspace_member"]:
        pytest.fail(f"Unexpected demo-app location/membership: {app}")
    if by_name["serde"]["is_workspace_member"]:
        pytest.fail("serde is not a workspace member")
    if by_name["serde"]["authors"] != [
        "Erick Tryzelaar <erick.tryzelaar@gmail.com>",
        "David Tolnay <dtolnay@gmail.com>",
    ]:
        pytest.fail("Authors should be carried through")


def test_dependencies_are_union_of_declared_lists(workspace_metadata: CargoMetadata) -> None:
    """Every declared dependency appears once, tagged with its owner."""
    records = project_dependencies(workspace_metadata)
    pairs = [(r["package"], r["name"]) for r in records]
    expected = [
        (package.name, dep.name)
        for package in workspace_metadata.packages
        for dep in package.dependencies
    ]
    if pairs != expected:
        pytest.fail(f"Unexpected dependency edges: {pairs}")


def test_dependency_fields(workspace_metadata: CargoMetadata) -> None:
    """Kinds are spelled out and resolved versions come from the resolve graph."""
    records = {(r["package"], r["name"]): r for r in project_dependencies(workspace_metadata)}
    core = records[("demo-app", "demo-core")]
    if core["kind"] != "normal" or core["resolved_version"] != "0.1.3":
        pytest.fail(f"Unexpected demo-core edge: {core}")
    if core["features"] != ["json"] or core["req"] != "^0.1.0":
        pytest.fail(f"Unexpected demo-core requirement: {core}")
    if records[("demo-app", "serde")]["resolved_version"] != "1.0.210":
        pytest.fail("serde should resolve to 1.0.210")
    build = records[("demo-app", "cc")]
    if build["kind"] != "build" or build["resolved_version"] is not None:
        pytest.fail(f"Unexpected build dependency: {build}")
    dev = records[("demo-core", "proptest")]
    if dev["kind"] != "dev" or dev["target"] != "cfg(unix)" or dev["uses_default_features"]:
        pytest.fail(f"Unexpected dev dependency: {dev}")
    renamed = records[("demo-core", "serde_json")]
    if renamed["rename"] != "json_crate" or not renamed["optional"]:
        pytest.fail(f"Unexpected optional dependency: {renamed}")


def test_dependencies_without_resolve_graph(workspace_metadata: CargoMetadata) -> None:
    """Documents produced with --no-deps leave resolved_version empty."""
    document = workspace_metadata.model_copy(update={"resolve": None})
    versions = {r["resolved_version"] for r in project_dependencies(document)}
    if versions != {None}:
        pytest.fail(f"Expected no resolved versions, got {versions}")


def test_targets_tagged_with_owner(workspace_metadata: CargoMetadata) -> None:
    """Targets of every package are listed with their owning package."""
    records = project_targets(workspace_metadata)
    summary = [(r["package"], r["name"], tuple(r["kind"])) for r in records]
    expected = [
        ("demo-app", "demo-app", ("bin",)),
        ("demo-app", "build-script-build", ("custom-build",)),
        ("demo-core", "demo_core", ("lib",)),
        ("demo-core", "parse", ("bench",)),
        ("serde", "serde", ("lib",)),
    ]
    if summary != expected:
        pytest.fail(f"Unexpected targets: {summary}")
    bench = records[3]
    if bench["required_features"] != ["json"] or bench["src_path"] != "/work/demo/core/benches/parse.rs":
        pytest.fail(f"Unexpected bench target: {bench}")


def test_workspace_info(workspace_metadata: CargoMetadata) -> None:
    """Workspace info lists members and default members by package."""
    info = project_workspace_info(workspace_metadata)
    if info["workspace_root"] != "/work/demo" or info["target_directory"] != "/work/demo/target":
        pytest.fail(f"Unexpected workspace paths: {info}")
    if [m["name"] for m in info["members"]] != ["demo-app", "demo-core"]:
        pytest.fail(f"Unexpected members: {info['members']}")
    if [m["name"] for m in info["default_members"]] != ["demo-app"]:
        pytest.fail(f"Unexpected default members: {info['default_members']}")


def test_workspace_info_single_package(single_package_metadata: CargoMetadata) -> None:
    """A non-workspace project reports exactly itself as the only member."""
    info = project_workspace_info(single_package_metadata)
    members = [(m["name"], m["version"]) for m in info["members"]]
    if members != [("hello", "0.1.0")]:
        pytest.fail(f"Unexpected members: {members}")


def test_workspace_default_members_fallback(workspace_metadata: CargoMetadata) -> None:
    """Older cargo output without default members falls back to all members."""
    document = workspace_metadata.model_copy(update={"workspace_default_members": None})
    info = project_workspace_info(document)
    if [m["name"] for m in info["default_members"]] != ["demo-app", "demo-core"]:
        pytest.fail(f"Unexpected default members: {info['default_members']}")


def test_features_keyed_by_package(workspace_metadata: CargoMetadata) -> None:
    """Feature keys are the package names and values the declared tables."""
    features = project_features(workspace_metadata)
    if set(features) != {p.name for p in workspace_metadata.packages}:
        pytest.fail(f"Unexpected feature keys: {sorted(features)}")
    if features["demo-core"] != {"default": ["json"], "json": ["dep:serde_json"]}:
        pytest.fail(f"Unexpected demo-core features: {features['demo-core']}")
    if features["demo-app"] != {}:
        pytest.fail("demo-app declares no features")


def test_empty_workspace_projects_cleanly() -> None:
    """A workspace with zero packages yields empty but valid results."""
    document = empty_workspace()
    for op in (Operation.GET_PACKAGE_INFO, Operation.GET_DEPENDENCIES, Operation.GET_TARGETS):
        if op.project(document) != []:
            pytest.fail(f"{op.value} should be empty")
    if project_features(document) != {}:
        pytest.fail("get_features should be empty")
    info = project_workspace_info(document)
    if info["members"] or info["default_members"]:
        pytest.fail(f"Expected no members: {info}")


def test_two_versions_of_one_crate_resolve_separately() -> None:
    """A renamed second version of a crate reports its own resolved version."""
    document = load_fixture("duplicate_crate_metadata")
    records = project_dependencies(document)
    versions = [(r["name"], r["rename"], r["req"], r["resolved_version"]) for r in records]
    expected = [
        ("rand", None, "^0.7", "0.7.3"),
        ("rand", "rand08", "^0.8", "0.8.5"),
    ]
    if versions != expected:
        pytest.fail(f"Unexpected resolved versions: {versions}")


def test_metadata_projection_keeps_cargo_key_order(workspace_metadata: CargoMetadata) -> None:
    """get_metadata serializes to the same text as cargo's payload, key order included."""
    payload = load_fixture_payload("workspace_metadata")
    expected = json.dumps(payload, indent=2, ensure_ascii=False)
    if serialize(project_metadata(workspace_metadata)) != expected:
        pytest.fail("get_metadata reordered the cargo document")
