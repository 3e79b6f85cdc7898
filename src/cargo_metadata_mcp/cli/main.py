"""CLI entrypoint for the cargo metadata MCP server."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

import anyio

from cargo_metadata_mcp.config import TRANSPORTS, ServerConfig
from cargo_metadata_mcp.mcp.errors import McpError, log_problem
from cargo_metadata_mcp.mcp.projections import Operation
from cargo_metadata_mcp.mcp.server import create_mcp_server
from cargo_metadata_mcp.mcp.service import MetadataQueryService

LOG = logging.getLogger("cargo_metadata_mcp.cli")

CommandHandler = Callable[[argparse.Namespace], int]


# ---------------------------------------------------------------------------
# Argument parsing / logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure logging based on -v/--verbose count.

    0 -> WARNING, 1 -> INFO, 2+ -> DEBUG. Logs go to stderr so stdout stays free
    for the stdio transport.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _add_cargo_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--cargo-bin",
        default=None,
        help="Path to the cargo executable (default: cargo on PATH)",
    )
    p.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout in seconds for cargo metadata (default: 120)",
    )
    p.add_argument("--offline", action="store_true", help="Run cargo with --offline")
    p.add_argument("--locked", action="store_true", help="Run cargo with --locked")
    p.add_argument("--frozen", action="store_true", help="Run cargo with --frozen")
    p.add_argument(
        "--all-features",
        action="store_true",
        help="Resolve the graph with every feature enabled",
    )


def _config_from_args(args: argparse.Namespace) -> ServerConfig:
    """
    Overlay CLI flags on the environment-derived configuration.

    Returns
    -------
    ServerConfig
        Validated configuration for this invocation.
    """
    base = ServerConfig.from_env()
    tool_updates: dict[str, object] = {}
    if args.cargo_bin is not None:
        tool_updates["cargo_bin"] = args.cargo_bin
    if args.timeout is not None:
        tool_updates["default_timeout_s"] = args.timeout
    for flag in ("offline", "locked", "frozen", "all_features"):
        if getattr(args, flag):
            tool_updates[flag] = True

    payload = base.model_dump()
    payload["tools"].update(tool_updates)
    project_root = getattr(args, "project_root", None)
    if project_root is not None:
        payload["project_root"] = project_root
    transport = getattr(args, "transport", None)
    if transport is not None:
        payload["transport"] = transport
    return ServerConfig.model_validate(payload)


def _cmd_serve(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    LOG.info("Serving %s over %s (project root %s)", cfg.name, cfg.transport, cfg.project_root)
    server = create_mcp_server(cfg)
    server.run(transport=cfg.transport)
    return 0


def _cmd_query(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    service = MetadataQueryService.from_config(cfg)
    operation = Operation(args.operation)
    try:
        text = anyio.run(service.run, operation, args.manifest_path)
    except McpError as exc:
        log_problem(LOG, exc, operation=operation.value)
        return 1
    sys.stdout.write(text + "\n")
    return 0


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo-metadata-mcp",
        description="Expose cargo metadata for a Rust project over MCP.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v, -vv)",
    )
    subparsers = parser.add_subparsers(dest="command")

    p_serve = subparsers.add_parser("serve", help="Run the MCP server")
    p_serve.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default=None,
        help="MCP transport (default: stdio)",
    )
    p_serve.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Directory holding the default Cargo.toml (default: current directory)",
    )
    _add_cargo_args(p_serve)
    p_serve.set_defaults(func=_cmd_serve)

    p_query = subparsers.add_parser("query", help="Run one metadata query and print its JSON")
    p_query.add_argument(
        "operation",
        choices=[op.value for op in Operation],
        help="Query to run",
    )
    p_query.add_argument(
        "--manifest-path",
        default=None,
        help="Path to Cargo.toml (default: ./Cargo.toml)",
    )
    _add_cargo_args(p_query)
    p_query.set_defaults(func=_cmd_query)
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    """
    CLI entrypoint for the cargo metadata server.

    Parameters
    ----------
    argv:
        Optional argument list (defaults to sys.argv).

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _make_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    func: CommandHandler = args.func
    return int(func(args))


if __name__ == "__main__":
    sys.exit(main())
