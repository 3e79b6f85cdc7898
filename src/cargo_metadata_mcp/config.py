"""Runtime configuration for the cargo metadata MCP server."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

Transport = Literal["stdio", "sse", "streamable-http"]
TRANSPORTS: tuple[str, ...] = ("stdio", "sse", "streamable-http")

DEFAULT_TOOL_TIMEOUT_S = 120.0
MANIFEST_FILENAME = "Cargo.toml"


def _parse_env_flag(value: str | None, *, default: bool) -> bool:
    """
    Interpret a string environment value as a boolean.

    Parameters
    ----------
    value:
        Raw environment variable value or None.
    default:
        Value to return when the environment variable is unset.

    Returns
    -------
    bool
        Parsed boolean flag.
    """
    if value is None:
        return default
    return value.lower() not in {"0", "false", "no", "off", ""}


class ToolsConfig(BaseModel):
    """
    Settings for invoking the ``cargo`` executable.

    The flags map one-to-one onto ``cargo metadata`` options and only affect how
    cargo resolves the graph; the server never builds or installs anything.
    """

    cargo_bin: str = Field("cargo", description="Path to the cargo binary")
    default_timeout_s: float = Field(
        DEFAULT_TOOL_TIMEOUT_S,
        description="Timeout (seconds) for a single cargo metadata invocation",
    )
    offline: bool = Field(default=False, description="Pass --offline to cargo")
    locked: bool = Field(default=False, description="Pass --locked to cargo")
    frozen: bool = Field(default=False, description="Pass --frozen to cargo")
    all_features: bool = Field(default=False, description="Pass --all-features to cargo")

    @field_validator("default_timeout_s")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            message = "default_timeout_s must be positive"
            raise ValueError(message)
        return v

    @classmethod
    def default(cls) -> ToolsConfig:
        """
        Return a tool configuration with baked-in defaults.

        Returns
        -------
        ToolsConfig
            Configuration populated with built-in values.
        """
        return cls.model_validate({})

    def cargo_flags(self) -> list[str]:
        """
        Return the extra cargo command-line flags implied by this configuration.

        Returns
        -------
        list[str]
            Flags appended after the manifest path argument.
        """
        flags: list[str] = []
        if self.offline:
            flags.append("--offline")
        if self.locked:
            flags.append("--locked")
        if self.frozen:
            flags.append("--frozen")
        if self.all_features:
            flags.append("--all-features")
        return flags

    def build_env(self, *, base_env: Mapping[str, str] | None = None) -> dict[str, str]:
        """
        Construct the environment mapping for a cargo invocation.

        An empty mapping means the subprocess inherits the parent environment.

        Returns
        -------
        dict[str, str]
            Environment variables to supply to the subprocess call.
        """
        return dict(base_env or {})


class ServerConfig(BaseModel):
    """
    Settings for the MCP server process.

    ``project_root`` is where the implicit ``Cargo.toml`` is looked up when a tool
    call omits ``manifest_path``.
    """

    project_root: Path = Field(
        default_factory=lambda: Path().resolve(),
        description="Directory holding the default Cargo.toml.",
    )
    name: str = Field(default="cargo-metadata", description="Server name advertised to clients.")
    transport: Transport = Field(default="stdio", description="MCP transport to serve on.")
    tools: ToolsConfig = Field(default_factory=ToolsConfig.default)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        """
        Construct a ServerConfig from environment variables.

        Parameters
        ----------
        environ:
            Mapping to read instead of ``os.environ``.

        Returns
        -------
        ServerConfig
            Validated configuration populated from environment values.
        """
        env = os.environ if environ is None else environ
        project_root = Path(env.get("CARGO_METADATA_MCP_PROJECT_ROOT", ".")).expanduser().resolve()
        # Raw strings go to pydantic so malformed values surface as ValidationError.
        tools = ToolsConfig.model_validate(
            {
                "cargo_bin": env.get("CARGO_METADATA_MCP_CARGO_BIN", "cargo"),
                "default_timeout_s": env.get(
                    "CARGO_METADATA_MCP_TIMEOUT_SEC", str(DEFAULT_TOOL_TIMEOUT_S)
                ),
                "offline": _parse_env_flag(env.get("CARGO_METADATA_MCP_OFFLINE"), default=False),
                "locked": _parse_env_flag(env.get("CARGO_METADATA_MCP_LOCKED"), default=False),
                "frozen": _parse_env_flag(env.get("CARGO_METADATA_MCP_FROZEN"), default=False),
                "all_features": _parse_env_flag(
                    env.get("CARGO_METADATA_MCP_ALL_FEATURES"), default=False
                ),
            }
        )
        return cls.model_validate(
            {
                "project_root": project_root,
                "transport": env.get("CARGO_METADATA_MCP_TRANSPORT", "stdio").lower(),
                "tools": tools,
            }
        )

    @model_validator(mode="after")
    def _normalize_root(self) -> ServerConfig:
        self.project_root = self.project_root.expanduser().resolve()
        return self

    @property
    def default_manifest_path(self) -> Path:
        """Manifest used when a call does not name one."""
        return self.project_root / MANIFEST_FILENAME


__all__ = [
    "DEFAULT_TOOL_TIMEOUT_S",
    "MANIFEST_FILENAME",
    "TRANSPORTS",
    "ServerConfig",
    "ToolsConfig",
    "Transport",
]
