"""``BuildTool`` backed by the dotnet CLI.

Every command streams its output to the terminal. Failures carry the
command's exit status so the CLI can exit with it.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.platform.process import ProcessError, run_streaming

__all__ = ["BuildToolError", "DotnetBuildTool", "find_package"]


@dataclass(frozen=True, slots=True)
class BuildToolError:
    step: str
    message: str
    returncode: int


class DotnetBuildTool:
    """Runs ``dotnet`` in the repository root.

    Args:
        root: Working directory for every command.
        api_key_env: Environment variable holding the registry API key.
        env: Environment to read the API key from (defaults to os.environ).
        executable: dotnet executable name or path.
    """

    def __init__(
        self,
        root: Path,
        *,
        api_key_env: str | None = None,
        env: Mapping[str, str] | None = None,
        executable: str = "dotnet",
    ) -> None:
        self._root = root
        self._api_key_env = api_key_env
        self._env = env if env is not None else os.environ
        self._exe = executable

    def restore(self, project: Path) -> Result[None, BuildToolError]:
        return self._run("restore", ["restore", str(project)])

    def test(self, test_project: Path) -> Result[None, BuildToolError]:
        return self._run("test", ["test", str(test_project)])

    def build(self, project: Path, configuration: str) -> Result[None, BuildToolError]:
        return self._run(
            "build",
            ["build", str(project), "--configuration", configuration, "--no-restore"],
        )

    def pack(
        self,
        project: Path,
        configuration: str,
        output_dir: Path,
        version: str,
    ) -> Result[Path | None, BuildToolError]:
        """Pack and locate ``*.{version}.nupkg`` in ``output_dir``."""
        result = self._run(
            "pack",
            [
                "pack",
                str(project),
                "--configuration",
                configuration,
                "--output",
                str(output_dir),
            ],
        )
        if isinstance(result, Err):
            return result
        return Ok(find_package(output_dir, version))

    def publish(self, artifact: Path, registry_url: str) -> Result[None, BuildToolError]:
        args = ["nuget", "push", str(artifact), "--source", registry_url]
        api_key = self._env.get(self._api_key_env) if self._api_key_env else None
        if api_key:
            args += ["--api-key", api_key]
        return self._run("publish", args)

    def _run(self, step: str, args: list[str]) -> Result[None, BuildToolError]:
        result = run_streaming([self._exe, *args], cwd=self._root)
        if isinstance(result, Err):
            return Err(_tool_error(step, result.error))
        return Ok(None)


def find_package(output_dir: Path, version: str) -> Path | None:
    """Newest ``*.{version}.nupkg`` in ``output_dir`` (symbol packages excluded)."""
    if not output_dir.is_dir():
        return None
    matches = [p for p in output_dir.glob(f"*.{version}.nupkg") if p.is_file()]
    if not matches:
        return None
    return max(matches, key=lambda p: p.stat().st_mtime)


def _tool_error(step: str, error: ProcessError) -> BuildToolError:
    if not error.launched:
        return BuildToolError(
            step=step,
            message=f"dotnet could not be started: {error.stderr}",
            returncode=-1,
        )
    # The command line may contain the API key; keep it out of the message.
    if error.signal is not None:
        message = f"dotnet {step} was killed by signal {error.signal}"
    else:
        message = f"dotnet {step} failed (exit {error.returncode})"
    return BuildToolError(step=step, message=message, returncode=error.exit_status)
