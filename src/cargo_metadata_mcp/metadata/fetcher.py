"""Obtain cargo metadata documents for a manifest."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from cargo_metadata_mcp.config import ToolsConfig
from cargo_metadata_mcp.metadata.models import CargoMetadata
from cargo_metadata_mcp.tool_runner import ToolExecutionError, ToolNotFoundError, ToolRunner

LOG = logging.getLogger("cargo_metadata_mcp.metadata.fetcher")
FORMAT_VERSION = "1"


class ManifestNotFoundError(FileNotFoundError):
    """Raised when the manifest path does not reference a readable file."""

    def __init__(self, manifest_path: Path) -> None:
        super().__init__(f"No such manifest file: {manifest_path}")
        self.manifest_path = manifest_path


class MetadataExtractionError(RuntimeError):
    """Raised when cargo cannot produce a metadata document for the manifest."""

    def __init__(
        self,
        manifest_path: Path,
        reason: str,
        *,
        returncode: int | None = None,
    ) -> None:
        super().__init__(f"Failed to get cargo metadata: {reason}")
        self.manifest_path = manifest_path
        self.reason = reason
        self.returncode = returncode


class MetadataFetcher(Protocol):
    """Capability that turns a manifest path into a metadata document."""

    async def fetch(self, manifest_path: Path) -> CargoMetadata:
        """Return the full metadata document for ``manifest_path``."""
        ...


def resolve_manifest_path(manifest_path: str | None, *, default: Path) -> Path:
    """
    Resolve the manifest path for a call.

    Parameters
    ----------
    manifest_path:
        Caller-supplied path, used verbatim when present.
    default:
        Manifest used when the caller omitted one.

    Returns
    -------
    Path
        Path handed to the metadata fetcher.
    """
    if manifest_path is None or not manifest_path.strip():
        return default
    return Path(manifest_path)


def ensure_manifest(manifest_path: Path) -> Path:
    """
    Check that ``manifest_path`` names an existing file.

    Returns
    -------
    Path
        The same path, for chaining.

    Raises
    ------
    ManifestNotFoundError
        When the path is missing or is not a regular file.
    """
    if not manifest_path.is_file():
        raise ManifestNotFoundError(manifest_path)
    return manifest_path


class CargoMetadataFetcher:
    """Run ``cargo metadata`` and parse its JSON output."""

    def __init__(
        self,
        *,
        tools_config: ToolsConfig | None = None,
        runner: ToolRunner | None = None,
    ) -> None:
        self.tools_config = tools_config or ToolsConfig.default()
        self.runner = runner or ToolRunner(tools_config=self.tools_config)

    def build_args(self, manifest_path: Path) -> list[str]:
        """
        Build the cargo argument vector for ``manifest_path``.

        Returns
        -------
        list[str]
            Arguments following the cargo executable.
        """
        return [
            "metadata",
            "--format-version",
            FORMAT_VERSION,
            "--manifest-path",
            str(manifest_path),
            *self.tools_config.cargo_flags(),
        ]

    async def fetch(self, manifest_path: Path) -> CargoMetadata:
        """
        Return the full metadata document for ``manifest_path``.

        Raises
        ------
        MetadataExtractionError
            When cargo is missing, cannot be launched, fails, times out, or prints an
            invalid document.
        """
        absolute = manifest_path.resolve()
        args = self.build_args(absolute)
        try:
            result = await self.runner.run_async(args, cwd=absolute.parent)
        except ToolNotFoundError as exc:
            raise MetadataExtractionError(manifest_path, str(exc)) from exc
        except ToolExecutionError as exc:
            raise MetadataExtractionError(
                manifest_path, exc.result.stderr.strip(), returncode=exc.result.returncode
            ) from exc
        except OSError as exc:
            message = f"could not launch cargo: {exc}"
            raise MetadataExtractionError(manifest_path, message) from exc

        if not result.ok:
            reason = result.stderr.strip() or f"cargo exited with code {result.returncode}"
            raise MetadataExtractionError(manifest_path, reason, returncode=result.returncode)

        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            message = f"invalid JSON from cargo: {exc}"
            raise MetadataExtractionError(manifest_path, message) from exc
        try:
            document = CargoMetadata.from_payload(payload)
        except ValidationError as exc:
            message = f"unexpected metadata layout: {exc}"
            raise MetadataExtractionError(manifest_path, message) from exc

        LOG.info(
            "Loaded metadata for %s (%d packages, %.3fs)",
            manifest_path,
            len(document.packages),
            result.duration_s,
        )
        return document


__all__ = [
    "CargoMetadataFetcher",
    "ManifestNotFoundError",
    "MetadataExtractionError",
    "MetadataFetcher",
    "ensure_manifest",
    "resolve_manifest_path",
]
