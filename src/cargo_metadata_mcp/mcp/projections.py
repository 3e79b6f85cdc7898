"""Field projections from a cargo metadata document to tool results."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum

from cargo_metadata_mcp.metadata.models import CargoMetadata, Dependency, Package
from cargo_metadata_mcp.mcp.models import (
    DependencyRecord,
    MemberRef,
    PackageRecord,
    TargetRecord,
    WorkspaceInfo,
)

JsonValue = dict[str, object] | list[dict[str, object]]
Projection = Callable[[CargoMetadata], JsonValue]


def project_metadata(metadata: CargoMetadata) -> dict[str, object]:
    """Return the whole document unchanged."""
    return metadata.as_document()


def project_package_info(metadata: CargoMetadata) -> list[dict[str, object]]:
    """
    Summarize every package in the document.

    Returns
    -------
    list[dict[str, object]]
        One ``PackageRecord`` per package, in document order.
    """
    members = set(metadata.workspace_members)
    return [
        PackageRecord(
            name=package.name,
            version=package.version,
            id=package.id,
            manifest_path=package.manifest_path,
            dependency_count=len(package.dependencies),
            target_count=len(package.targets),
            authors=list(package.authors),
            description=package.description,
            repository=package.repository,
            license=package.license,
            edition=package.edition,
            is_workspace_member=package.id in members,
        ).model_dump()
        for package in metadata.packages
    ]


class _ResolvedDeps:
    """Packages cargo resolved for one package, indexed by extern crate name."""

    def __init__(self, metadata: CargoMetadata, package: Package) -> None:
        self.by_extern: dict[str, Package] = {}
        self.by_name: dict[str, str] = {}
        node = metadata.node_by_id(package.id)
        if node is None:
            return
        for dep in node.deps:
            target = metadata.package_by_id(dep.pkg)
            if target is None:
                continue
            self.by_extern[dep.name] = target
            self.by_name.setdefault(target.name, target.version)

    def version_for(self, dep: Dependency) -> str | None:
        """
        Return the version resolved for ``dep``, or None when it was not activated.

        The extern name (rename or package name, with dashes as underscores)
        tells apart two versions of the same crate. The package name is the
        fallback for libraries whose crate name differs from the package.
        """
        extern = (dep.rename or dep.name).replace("-", "_")
        target = self.by_extern.get(extern)
        if target is not None and target.name == dep.name:
            return target.version
        return self.by_name.get(dep.name)


def project_dependencies(metadata: CargoMetadata) -> list[dict[str, object]]:
    """
    Flatten the declared dependencies of every package.

    Each record names its owning package. ``resolved_version`` is filled from the
    resolve graph when cargo produced one.

    Returns
    -------
    list[dict[str, object]]
        One ``DependencyRecord`` per declared dependency.
    """
    records: list[dict[str, object]] = []
    for package in metadata.packages:
        resolved = _ResolvedDeps(metadata, package)
        records.extend(
            DependencyRecord(
                package=package.name,
                package_id=package.id,
                name=dep.name,
                req=dep.req,
                kind=dep.kind_label,
                optional=dep.optional,
                uses_default_features=dep.uses_default_features,
                features=list(dep.features),
                target=dep.target,
                rename=dep.rename,
                source=dep.source,
                resolved_version=resolved.version_for(dep),
            ).model_dump()
            for dep in package.dependencies
        )
    return records


def project_targets(metadata: CargoMetadata) -> list[dict[str, object]]:
    """Flatten the build targets of every package."""
    return [
        TargetRecord(
            package=package.name,
            name=target.name,
            kind=list(target.kind),
            crate_types=list(target.crate_types),
            src_path=target.src_path,
            edition=target.edition,
            required_features=list(target.required_features),
            doc=target.doc,
            doctest=target.doctest,
            test=target.test,
        ).model_dump()
        for package in metadata.packages
        for target in package.targets
    ]


def _member_refs(metadata: CargoMetadata, ids: list[str]) -> list[MemberRef]:
    refs: list[MemberRef] = []
    for package_id in ids:
        package = metadata.package_by_id(package_id)
        if package is None:
            continue
        refs.append(
            MemberRef(
                name=package.name,
                version=package.version,
                id=package.id,
                manifest_path=package.manifest_path,
            )
        )
    return refs


def project_workspace_info(metadata: CargoMetadata) -> dict[str, object]:
    """
    Describe the workspace grouping.

    Older cargo releases omit ``workspace_default_members``; the members list is
    used in that case, matching what cargo builds by default.

    Returns
    -------
    dict[str, object]
        A single ``WorkspaceInfo`` record.
    """
    default_ids = metadata.workspace_default_members
    if default_ids is None:
        default_ids = metadata.workspace_members
    return WorkspaceInfo(
        workspace_root=metadata.workspace_root,
        target_directory=metadata.target_directory,
        members=_member_refs(metadata, metadata.workspace_members),
        default_members=_member_refs(metadata, default_ids),
    ).model_dump()


def project_features(metadata: CargoMetadata) -> dict[str, object]:
    """Map each package name to its feature table; the first package of a name wins."""
    features: dict[str, object] = {}
    for package in metadata.packages:
        features.setdefault(package.name, {k: list(v) for k, v in package.features.items()})
    return features


class Operation(StrEnum):
    """Query operations exposed as MCP tools."""

    GET_METADATA = "get_metadata"
    GET_PACKAGE_INFO = "get_package_info"
    GET_DEPENDENCIES = "get_dependencies"
    GET_TARGETS = "get_targets"
    GET_WORKSPACE_INFO = "get_workspace_info"
    GET_FEATURES = "get_features"

    @property
    def projection(self) -> Projection:
        """Projection function backing this operation."""
        return _PROJECTIONS[self]

    def project(self, metadata: CargoMetadata) -> JsonValue:
        """
        Apply this operation's projection to ``metadata``.

        Returns
        -------
        JsonValue
            JSON-compatible result for the tool call.
        """
        return self.projection(metadata)


_PROJECTIONS: dict[Operation, Projection] = {
    Operation.GET_METADATA: project_metadata,
    Operation.GET_PACKAGE_INFO: project_package_info,
    Operation.GET_DEPENDENCIES: project_dependencies,
    Operation.GET_TARGETS: project_targets,
    Operation.GET_WORKSPACE_INFO: project_workspace_info,
    Operation.GET_FEATURES: project_features,
}


__all__ = [
    "JsonValue",
    "Operation",
    "Projection",
    "project_dependencies",
    "project_features",
    "project_metadata",
    "project_package_info",
    "project_targets",
    "project_workspace_info",
]
