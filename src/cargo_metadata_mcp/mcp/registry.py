"""MCP tool registration and error-to-result mapping."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from cargo_metadata_mcp.mcp import errors
from cargo_metadata_mcp.mcp.projections import Operation
from cargo_metadata_mcp.mcp.service import MetadataQueryService

WELCOME_PROMPT = (
    "Welcome to the Cargo Metadata server. Use it to inspect a Cargo project: "
    "get_metadata returns the full `cargo metadata` document, get_package_info "
    "summarizes every package, get_dependencies lists declared dependencies, "
    "get_targets lists build targets, get_workspace_info describes workspace "
    "members and get_features lists feature tables. Each tool takes an optional "
    "manifest_path pointing at a Cargo.toml; without it the server's project "
    "root is used."
)


def _wrap(tool: Callable[..., Awaitable[str]]) -> Callable[..., Awaitable[str]]:
    """
    Wrap a service-facing tool so McpError surfaces as an MCP error result.

    Returns
    -------
    Callable[..., Awaitable[str]]
        Wrapped coroutine function with the original signature.
    """

    @functools.wraps(tool)
    async def _inner(*args: object, **kwargs: object) -> str:
        try:
            return await tool(*args, **kwargs)
        except errors.McpError as exc:
            raise ToolError(str(exc)) from exc

    return _inner


def register_tools(mcp: FastMCP, service: MetadataQueryService) -> None:
    """Register the metadata tools and welcome prompt on the given FastMCP instance."""

    @mcp.prompt()
    def cargo_metadata_prompt() -> str:
        """Introduce the Cargo Metadata server and its tools."""
        return WELCOME_PROMPT

    @mcp.tool()
    @_wrap
    async def get_metadata(manifest_path: str | None = None) -> str:
        """
        Return the full `cargo metadata` document for the project.

        manifest_path is an absolute path to a Cargo.toml file.
        """
        return await service.run(Operation.GET_METADATA, manifest_path)

    @mcp.tool()
    @_wrap
    async def get_package_info(manifest_path: str | None = None) -> str:
        """
        List every package with its version, manifest path and dependency/target counts.

        manifest_path is an absolute path to a Cargo.toml file.
        """
        return await service.run(Operation.GET_PACKAGE_INFO, manifest_path)

    @mcp.tool()
    @_wrap
    async def get_dependencies(manifest_path: str | None = None) -> str:
        """
        List the declared dependencies of every package, tagged with the owning package.

        manifest_path is an absolute path to a Cargo.toml file.
        """
        return await service.run(Operation.GET_DEPENDENCIES, manifest_path)

    @mcp.tool()
    @_wrap
    async def get_targets(manifest_path: str | None = None) -> str:
        """
        List the build targets of every package, tagged with the owning package.

        manifest_path is an absolute path to a Cargo.toml file.
        """
        return await service.run(Operation.GET_TARGETS, manifest_path)

    @mcp.tool()
    @_wrap
    async def get_workspace_info(manifest_path: str | None = None) -> str:
        """
        Describe the workspace root and its member packages.

        manifest_path is an absolute path to a Cargo.toml file.
        """
        return await service.run(Operation.GET_WORKSPACE_INFO, manifest_path)

    @mcp.tool()
    @_wrap
    async def get_features(manifest_path: str | None = None) -> str:
        """
        Map each package name to its feature table.

        manifest_path is an absolute path to a Cargo.toml file.
        """
        return await service.run(Operation.GET_FEATURES, manifest_path)
