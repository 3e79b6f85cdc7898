"""Structured runner for the external cargo executable."""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from asyncio.subprocess import PIPE
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from cargo_metadata_mcp.config import ToolsConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolRunResult:
    """Structured output from a tool invocation."""

    executable: str
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    duration_s: float

    @property
    def ok(self) -> bool:
        """Return True when the tool completed successfully."""
        return self.returncode == 0


class ToolNotFoundError(RuntimeError):
    """Raised when the configured executable cannot be resolved on the host."""

    def __init__(self, configured_path: str) -> None:
        message = f"Executable not found (configured as {configured_path!r})"
        super().__init__(message)
        self.configured_path = configured_path


class ToolExecutionError(RuntimeError):
    """Raised when a tool invocation fails irrecoverably (e.g., timeout)."""

    def __init__(self, result: ToolRunResult) -> None:
        message = (
            f"{Path(result.executable).name} failed (code={result.returncode})\n"
            f"Args: {result.args}\n"
            f"stderr: {result.stderr.strip()}"
        )
        super().__init__(message)
        self.result = result


class ToolRunner:
    """Run the cargo executable with environment overrides and a timeout."""

    def __init__(
        self,
        *,
        tools_config: ToolsConfig | None = None,
        base_env: Mapping[str, str] | None = None,
    ) -> None:
        self.tools_config = tools_config or ToolsConfig.default()
        self.base_env = dict(base_env or {})

    def _resolve_executable(self) -> str:
        configured = self.tools_config.cargo_bin
        candidate_path = Path(configured)
        if candidate_path.is_file():
            return str(candidate_path)
        discovered = shutil.which(configured)
        if discovered is None:
            raise ToolNotFoundError(configured)
        return discovered

    async def run_async(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout_s: float | None = None,
    ) -> ToolRunResult:
        """
        Execute cargo asynchronously and capture stdout/stderr.

        Parameters
        ----------
        args
            Argument vector, without the executable name.
        cwd
            Optional working directory.
        timeout_s
            Optional timeout in seconds; defaults to the configured timeout.

        Returns
        -------
        ToolRunResult
            Structured process result including stdout, stderr, and exit code.

        Raises
        ------
        ToolNotFoundError
            When the configured executable cannot be located.
        ToolExecutionError
            When the subprocess times out.
        """
        executable = self._resolve_executable()
        cmd = [executable, *args]
        env = self.tools_config.build_env(base_env=self.base_env)
        timeout = timeout_s if timeout_s is not None else self.tools_config.default_timeout_s
        log.debug("Running %s (cwd=%s)", cmd, cwd)
        start_ts = time.perf_counter()

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd is not None else None,
            stdout=PIPE,
            stderr=PIPE,
            env=env if env else None,
        )
        try:
            stdout_b, stderr_b = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except TimeoutError as exc:
            proc.kill()
            await proc.communicate()
            duration = time.perf_counter() - start_ts
            result = ToolRunResult(
                executable=executable,
                args=tuple(args),
                returncode=proc.returncode or 1,
                stdout="",
                stderr=f"timed out after {timeout:g}s",
                duration_s=duration,
            )
            raise ToolExecutionError(result) from exc
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
            await asyncio.shield(proc.wait())
            raise

        duration = time.perf_counter() - start_ts
        log.debug("%s exited with %s in %.3fs", executable, proc.returncode, duration)
        return ToolRunResult(
            executable=executable,
            args=tuple(args),
            returncode=proc.returncode if proc.returncode is not None else 1,
            stdout=stdout_b.decode(errors="replace"),
            stderr=stderr_b.decode(errors="replace"),
            duration_s=duration,
        )

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout_s: float | None = None,
    ) -> ToolRunResult:
        """
        Execute cargo synchronously.

        Returns
        -------
        ToolRunResult
            Structured result from :meth:`run_async`.
        """
        return asyncio.run(self.run_async(args, cwd=cwd, timeout_s=timeout_s))


__all__ = ["ToolExecutionError", "ToolNotFoundError", "ToolRunResult", "ToolRunner"]
