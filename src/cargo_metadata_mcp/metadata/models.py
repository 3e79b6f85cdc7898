"""Typed view of the ``cargo metadata --format-version 1`` document."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class _CargoModel(BaseModel):
    """Base for cargo payloads; unknown keys are kept so dumps stay faithful."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Dependency(_CargoModel):
    """A dependency as declared in a package manifest."""

    name: str
    req: str = "*"
    kind: str | None = None
    optional: bool = False
    uses_default_features: bool = True
    features: list[str] = Field(default_factory=list)
    target: str | None = None
    rename: str | None = None
    source: str | None = None

    @property
    def kind_label(self) -> str:
        """Dependency kind with cargo's ``null`` spelled out as ``normal``."""
        return self.kind or "normal"


class Target(_CargoModel):
    """A buildable artifact declared by a package."""

    name: str
    kind: list[str] = Field(default_factory=list)
    crate_types: list[str] = Field(default_factory=list)
    src_path: str
    edition: str | None = None
    required_features: list[str] = Field(default_factory=list, alias="required-features")
    doc: bool = True
    doctest: bool = True
    test: bool = True


class Package(_CargoModel):
    """One package in the metadata graph."""

    name: str
    version: str
    id: str
    manifest_path: str
    dependencies: list[Dependency] = Field(default_factory=list)
    targets: list[Target] = Field(default_factory=list)
    features: dict[str, list[str]] = Field(default_factory=dict)
    authors: list[str] = Field(default_factory=list)
    description: str | None = None
    repository: str | None = None
    license: str | None = None
    edition: str | None = None
    source: str | None = None


class NodeDep(_CargoModel):
    """Resolved edge from a resolve node to another package id."""

    name: str
    pkg: str


class Node(_CargoModel):
    """Resolve-graph node for a single package id."""

    id: str
    deps: list[NodeDep] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)


class Resolve(_CargoModel):
    """Dependency resolution graph; absent when cargo ran with ``--no-deps``."""

    nodes: list[Node] = Field(default_factory=list)
    root: str | None = None


class CargoMetadata(_CargoModel):
    """Full metadata document for a project."""

    packages: list[Package] = Field(default_factory=list)
    workspace_members: list[str] = Field(default_factory=list)
    workspace_default_members: list[str] | None = None
    resolve: Resolve | None = None
    workspace_root: str
    target_directory: str | None = None
    version: int = 1

    _payload: dict[str, object] | None = PrivateAttr(default=None)

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> CargoMetadata:
        """
        Validate a parsed cargo payload and keep it for verbatim re-serialization.

        Returns
        -------
        CargoMetadata
            Typed document remembering the original payload.
        """
        document = cls.model_validate(payload)
        document._payload = payload
        return document

    def model_copy(
        self, *, update: Mapping[str, object] | None = None, deep: bool = False
    ) -> CargoMetadata:
        """Copy the document; an updated copy no longer mirrors the original payload."""
        copied = super().model_copy(update=update, deep=deep)
        if update:
            copied._payload = None
        return copied

    def package_by_id(self, package_id: str) -> Package | None:
        """Return the package with ``package_id``, or None."""
        for package in self.packages:
            if package.id == package_id:
                return package
        return None

    def node_by_id(self, package_id: str) -> Node | None:
        """Return the resolve node for ``package_id``, or None."""
        if self.resolve is None:
            return None
        for node in self.resolve.nodes:
            if node.id == package_id:
                return node
        return None

    def as_document(self) -> dict[str, object]:
        """
        Return the document exactly as cargo produced it.

        Documents built with :meth:`from_payload` return the original payload, key
        order included. Others fall back to a dump of the keys that were set.

        Returns
        -------
        dict[str, object]
            JSON-compatible mapping.
        """
        if self._payload is not None:
            return self._payload
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


__all__ = ["CargoMetadata", "Dependency", "Node", "NodeDep", "Package", "Resolve", "Target"]
