"""Metadata query service shared by the MCP tools and the CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from cargo_metadata_mcp.config import ServerConfig
from cargo_metadata_mcp.metadata.fetcher import (
    CargoMetadataFetcher,
    ManifestNotFoundError,
    MetadataExtractionError,
    MetadataFetcher,
    ensure_manifest,
    resolve_manifest_path,
)
from cargo_metadata_mcp.mcp import errors
from cargo_metadata_mcp.mcp.projections import JsonValue, Operation

LOG = logging.getLogger("cargo_metadata_mcp.mcp.service")


def serialize(payload: JsonValue) -> str:
    """
    Render a projection as the textual tool result.

    Returns
    -------
    str
        Pretty-printed JSON text.

    Raises
    ------
    McpError
        When the payload is not JSON-serializable.
    """
    try:
        return json.dumps(payload, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        message = f"Failed to serialize result: {exc}"
        raise errors.serialization_failure(message) from exc


class MetadataQueryService:
    """
    Answer metadata queries by fetching a fresh document for every call.

    Nothing is cached between calls; two calls against an unchanged manifest
    produce identical text.
    """

    def __init__(self, fetcher: MetadataFetcher, *, default_manifest: Path) -> None:
        self.fetcher = fetcher
        self.default_manifest = default_manifest

    @classmethod
    def from_config(cls, cfg: ServerConfig) -> MetadataQueryService:
        """
        Build a service backed by the real ``cargo metadata`` fetcher.

        Returns
        -------
        MetadataQueryService
            Service wired to cargo using ``cfg.tools``.
        """
        return cls(
            CargoMetadataFetcher(tools_config=cfg.tools),
            default_manifest=cfg.default_manifest_path,
        )

    @staticmethod
    def _coerce_operation(operation: Operation | str) -> Operation:
        if isinstance(operation, Operation):
            return operation
        try:
            return Operation(operation)
        except ValueError as exc:
            choices = ", ".join(op.value for op in Operation)
            message = f"Unknown operation {operation!r}; expected one of: {choices}"
            raise errors.invalid_argument(message) from exc

    async def query(self, operation: Operation | str, manifest_path: str | None = None) -> JsonValue:
        """
        Fetch metadata for the manifest and apply the operation's projection.

        Parameters
        ----------
        operation:
            Operation to run.
        manifest_path:
            Optional path to ``Cargo.toml``; the configured default is used when omitted.

        Returns
        -------
        JsonValue
            JSON-compatible projection.

        Raises
        ------
        McpError
            On an unknown operation, a missing manifest, or a metadata failure.
        """
        op = self._coerce_operation(operation)
        path = resolve_manifest_path(manifest_path, default=self.default_manifest)
        try:
            ensure_manifest(path)
            metadata = await self.fetcher.fetch(path)
        except ManifestNotFoundError as exc:
            raise errors.manifest_not_found(str(exc), manifest_path=str(path)) from exc
        except MetadataExtractionError as exc:
            data: dict[str, object] | None = None
            if exc.returncode is not None:
                data = {"returncode": exc.returncode}
            raise errors.metadata_failure(str(exc), manifest_path=str(path), data=data) from exc
        LOG.debug("%s: projecting %d packages from %s", op.value, len(metadata.packages), path)
        return op.project(metadata)

    async def run(self, operation: Operation | str, manifest_path: str | None = None) -> str:
        """
        Run one operation and return its serialized result.

        Returns
        -------
        str
            JSON text for the tool result.

        Raises
        ------
        McpError
            For every failure; no partial result is returned.
        """
        try:
            return serialize(await self.query(operation, manifest_path))
        except errors.McpError as exc:
            errors.log_problem(LOG, exc, operation=str(operation))
            raise


__all__ = ["MetadataQueryService", "serialize"]
