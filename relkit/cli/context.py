from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relkit.build.dotnet import DotnetBuildTool
from relkit.core.config import DEFAULT_CONFIG_NAME, ReleaseConfig, load_optional_config
from relkit.core.errors import ErrorCode
from relkit.core.project import ProjectLayout, resolve_layout
from relkit.core.result import Err
from relkit.git.repository import Repository
from relkit.output.console import ConsoleProtocol, RichConsole, Style
from relkit.release.contracts import ReleaseSettings
from relkit.release.pipeline import ReleasePipeline


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: ReleaseConfig
    layout: ProjectLayout
    console: ConsoleProtocol


def build_context(
    *,
    root: Path | None = None,
    config_path: Path | None = None,
    console: ConsoleProtocol | None = None,
) -> CLIContext:
    out = console if console is not None else RichConsole()
    repo_root = (root or Path.cwd()).expanduser().resolve()

    config_result = load_optional_config(config_path or repo_root / DEFAULT_CONFIG_NAME)
    if isinstance(config_result, Err):
        out.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    config = config_result.value

    layout_result = resolve_layout(repo_root, config)
    if isinstance(layout_result, Err):
        out.error(layout_result.error.message)
        out.print(f"hint: {layout_result.error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(config=config, layout=layout_result.value, console=out)


def build_pipeline(ctx: CLIContext) -> ReleasePipeline:
    config = ctx.config
    root = ctx.layout.root
    return ReleasePipeline(
        vcs=Repository(root, remote=config.git.remote),
        build=DotnetBuildTool(root, api_key_env=config.publish.api_key_env),
        console=ctx.console,
        settings=ReleaseSettings(
            layout=ctx.layout,
            configuration=config.build.configuration,
            registry_url=config.publish.registry_url,
            branch=config.git.branch,
        ),
    )
