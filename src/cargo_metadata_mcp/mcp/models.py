"""Typed MCP response records and error payloads."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProblemDetail(BaseModel):
    """Problem Details payload for MCP error responses."""

    type: str = Field(default="about:blank")
    title: str
    detail: str | None = None
    status: int | None = None
    instance: str | None = None
    data: dict[str, object] | None = None


class PackageRecord(BaseModel):
    """Summary of one package in the metadata graph."""

    name: str
    version: str
    id: str
    manifest_path: str
    dependency_count: int
    target_count: int
    authors: list[str] = Field(default_factory=list)
    description: str | None = None
    repository: str | None = None
    license: str | None = None
    edition: str | None = None
    is_workspace_member: bool = False


class DependencyRecord(BaseModel):
    """Declared dependency annotated with the package that declares it."""

    package: str
    package_id: str
    name: str
    req: str
    kind: str
    optional: bool
    uses_default_features: bool
    features: list[str] = Field(default_factory=list)
    target: str | None = None
    rename: str | None = None
    source: str | None = None
    resolved_version: str | None = None


class TargetRecord(BaseModel):
    """Build target annotated with the package that declares it."""

    package: str
    name: str
    kind: list[str]
    crate_types: list[str] = Field(default_factory=list)
    src_path: str
    edition: str | None = None
    required_features: list[str] = Field(default_factory=list)
    doc: bool = True
    doctest: bool = True
    test: bool = True


class MemberRef(BaseModel):
    """Reference to a workspace member package."""

    name: str
    version: str
    id: str
    manifest_path: str


class WorkspaceInfo(BaseModel):
    """Workspace grouping of the project."""

    workspace_root: str
    target_directory: str | None = None
    members: list[MemberRef] = Field(default_factory=list)
    default_members: list[MemberRef] = Field(default_factory=list)
