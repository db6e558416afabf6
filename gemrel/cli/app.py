from __future__ import annotations

from pathlib import Path

import typer

from gemrel.cli.context import build_context
from gemrel.core.errors import ErrorCode
from gemrel.core.result import Err
from gemrel.output.errors import print_release_error, release_error_exit_code
from gemrel.release.pipeline import ReleasePipeline, StepContext


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _report_missing(missing: list[str]) -> None:
    typer.echo("\nThe following required arguments are missing:")
    for name in missing:
        typer.echo(f"  * {name}")
    typer.echo("\nUse --help for more details")
    typer.echo("")


@app.command()
def release(
    branch: str | None = typer.Option(
        None, "--branch", "-b", help="The branch to build the release from"
    ),
    version: str | None = typer.Option(
        None, "--version", "-v", help="The new version number, or major|minor|patch"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Release config (default: ./.gemrel.toml)"
    ),
) -> None:
    """Cut, build and publish a gem release.

    Example: gemrel -b develop -v 10.6.2
    """
    missing = [name for name, value in (("branch", branch), ("version", version)) if not value]
    if missing or branch is None or version is None:
        _report_missing(missing)
        raise typer.Exit(code=int(ErrorCode.OK))

    cli = build_context(config)
    ctx = StepContext.create(console=cli.console, config=cli.config, root=cli.root)

    pipeline = ReleasePipeline.create(ctx=ctx, branch=branch, version=version)
    if isinstance(pipeline, Err):
        print_release_error(pipeline.error, cli.console)
        raise typer.Exit(code=release_error_exit_code(pipeline.error))

    outcome = pipeline.value.run()
    if isinstance(outcome, Err):
        print_release_error(outcome.error, cli.console)
        raise typer.Exit(code=release_error_exit_code(outcome.error))


def main() -> None:
    app()
