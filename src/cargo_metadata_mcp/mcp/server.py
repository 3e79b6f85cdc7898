"""MCP server exposing cargo metadata tools."""

from __future__ import annotations

from collections.abc import Callable

from mcp.server.fastmcp import FastMCP

from cargo_metadata_mcp.config import ServerConfig
from cargo_metadata_mcp.metadata.fetcher import MetadataFetcher
from cargo_metadata_mcp.mcp.registry import register_tools
from cargo_metadata_mcp.mcp.service import MetadataQueryService

RegisterToolsFn = Callable[[FastMCP, MetadataQueryService], None]

INSTRUCTIONS = (
    "Read-only access to Cargo project metadata. Every tool accepts an optional "
    "manifest_path to a Cargo.toml and returns JSON text."
)


def create_mcp_server(
    cfg: ServerConfig | None = None,
    *,
    fetcher: MetadataFetcher | None = None,
    register_tools_fn: RegisterToolsFn = register_tools,
) -> FastMCP:
    """
    Create the MCP server instance.

    Parameters
    ----------
    cfg:
        Optional pre-loaded ServerConfig. When omitted, environment variables are used.
    fetcher:
        Metadata fetcher to use instead of running cargo.
    register_tools_fn:
        Hook that registers tools on the server.

    Returns
    -------
    FastMCP
        Configured MCP server.
    """
    config = cfg or ServerConfig.from_env()
    if fetcher is None:
        service = MetadataQueryService.from_config(config)
    else:
        service = MetadataQueryService(fetcher, default_manifest=config.default_manifest_path)
    server = FastMCP(config.name, instructions=INSTRUCTIONS)
    register_tools_fn(server, service)
    return server


def main() -> None:
    """
    Run the cargo metadata MCP server.

    By default this uses stdio transport, which is what local MCP clients expect.
    """
    config = ServerConfig.from_env()
    server = create_mcp_server(config)
    server.run(transport=config.transport)


if __name__ == "__main__":
    main()
