"""MCP error taxonomy and helpers for Problem Details responses."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from cargo_metadata_mcp.mcp.models import ProblemDetail


@dataclass
class McpError(Exception):
    """Base MCP error carrying a ProblemDetail payload."""

    detail: ProblemDetail

    def __str__(self) -> str:
        """
        Return a concise string for logging/diagnostics.

        Returns
        -------
        str
            Concise representation of the problem.
        """
        return f"{self.detail.title}: {self.detail.detail or ''}".strip()


def invalid_argument(message: str) -> McpError:
    """
    Construct an invalid-argument problem.

    Returns
    -------
    McpError
        Error wrapping a ProblemDetail payload.
    """
    return McpError(
        detail=ProblemDetail(
            type="https://example.com/problems/invalid-argument",
            title="Invalid argument",
            detail=message,
            status=400,
        )
    )


def manifest_not_found(message: str, *, manifest_path: str | None = None) -> McpError:
    """
    Construct a manifest-not-found problem.

    Returns
    -------
    McpError
        Error wrapping a ProblemDetail payload.
    """
    return McpError(
        detail=ProblemDetail(
            type="https://example.com/problems/manifest-not-found",
            title="Manifest not found",
            detail=message,
            status=404,
            instance=manifest_path,
        )
    )


def metadata_failure(
    message: str,
    *,
    manifest_path: str | None = None,
    data: dict[str, object] | None = None,
) -> McpError:
    """
    Construct a metadata-extraction problem.

    ``data`` carries machine-readable context such as cargo's exit code.

    Returns
    -------
    McpError
        Error wrapping a ProblemDetail payload.
    """
    return McpError(
        detail=ProblemDetail(
            type="https://example.com/problems/metadata-failure",
            title="Metadata extraction failed",
            detail=message,
            status=500,
            instance=manifest_path,
            data=data,
        )
    )


def serialization_failure(message: str) -> McpError:
    """
    Construct an internal serialization problem.

    Returns
    -------
    McpError
        Error wrapping a ProblemDetail payload.
    """
    return McpError(
        detail=ProblemDetail(
            type="https://example.com/problems/serialization-failure",
            title="Serialization failed",
            detail=message,
            status=500,
        )
    )


def log_problem(logger: logging.Logger, error: McpError, *, operation: str) -> None:
    """Emit a Problem Detail raised while serving ``operation`` as a structured log."""
    payload = {"operation": operation, **error.detail.model_dump(exclude_none=True)}
    logger.warning(json.dumps(payload))


__all__ = [
    "McpError",
    "invalid_argument",
    "log_problem",
    "manifest_not_found",
    "metadata_failure",
    "serialization_failure",
]
