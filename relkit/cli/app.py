from __future__ import annotations

from pathlib import Path

import typer

from relkit import __version__
from relkit.cli.context import build_context, build_pipeline
from relkit.core.result import Err, Ok
from relkit.output.console import RichConsole, Style
from relkit.output.errors import print_release_error, release_error_exit_code
from relkit.version.transition import parse_channel


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.command()
def release(
    build_type: str = typer.Argument(
        "development",
        help="Release channel: development (bumps dev.N) or production (stable + tag)",
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Repository root (defaults to the current directory)",
        show_default=False,
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to release.toml (defaults to <root>/release.toml)",
        show_default=False,
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show the next version without building or changing anything"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Bump, commit, push, pack and publish the project."""
    channel_result = parse_channel(build_type)
    if isinstance(channel_result, Err):
        print_release_error(channel_result.error, RichConsole())
        raise typer.Exit(code=release_error_exit_code(channel_result.error))
    channel = channel_result.value

    ctx = build_context(root=root, config_path=config)
    pipeline = build_pipeline(ctx)

    if dry_run:
        match pipeline.plan(channel):
            case Ok(plan):
                ctx.console.header("Release plan")
                ctx.console.print(f"project: {plan.descriptor}")
                ctx.console.print(f"channel: {plan.channel}")
                ctx.console.print(f"version: {plan.current} -> {plan.next}")
                ctx.console.print(f"commit:  {plan.commit_message}")
                if plan.tag is not None:
                    ctx.console.print(f"tag:     {plan.tag}")
                ctx.console.print("dry run: nothing was built, written or pushed", Style.DIM)
                return
            case Err(error):
                print_release_error(error, ctx.console)
                raise typer.Exit(code=release_error_exit_code(error))

    match pipeline.run(channel):
        case Ok(_):
            return
        case Err(error):
            print_release_error(error, ctx.console)
            raise typer.Exit(code=release_error_exit_code(error))


def main() -> None:
    app()
