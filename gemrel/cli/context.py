from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from gemrel.core.config import (
    CONFIG_FILENAME,
    ConfigError,
    ReleaseConfig,
    infer_gem_name,
    load_config,
    load_config_or_default,
)
from gemrel.core.errors import ErrorCode
from gemrel.core.result import Err, Ok, Result
from gemrel.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def _load(config_path: Path | None, repo_root: Path) -> Result[ReleaseConfig, ConfigError]:
    if config_path is None:
        return load_config_or_default(repo_root / CONFIG_FILENAME, repo_root=repo_root)

    # An explicit --config must exist; only the default file is optional.
    inferred = infer_gem_name(repo_root)
    return load_config(config_path, gem_name=inferred.value if isinstance(inferred, Ok) else None)


def build_context(config_path: Path | None = None, *, root: Path | None = None) -> CLIContext:
    repo_root = (root or Path.cwd()).resolve()
    config_result = _load(config_path, repo_root)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        root=repo_root,
        config=config_result.value,
        console=RichConsole(),
    )
