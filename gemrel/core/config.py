"""Typed release configuration.

The optional `.gemrel.toml` at the repository root describes the gem being
released. Every key has a default matching a conventional gem checkout, so
most repositories only need `[gem] name` (or not even that when a single
`*.gemspec` sits at the root).

Example:
    [gem]
    name = "eway_rapid"
    repo = "GetStoreConnect/eway-rapid-ruby"

    [branches]
    develop = "develop"
    main = "master"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ReleaseConfig",
    "infer_gem_name",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = ".gemrel.toml"

DEFAULT_DEVELOP_BRANCH = "develop"
DEFAULT_MAIN_BRANCH = "master"
DEFAULT_REPO = "{owner}/{repo}"
DEFAULT_TOKEN_FILE = "~/.fury/api-token"
DEFAULT_NOTES_FILE = ".release_notes"
DEFAULT_DEPENDENCY_BOT = "dependabot"
DEFAULT_COMMIT_FILES = ("README_RELEASE.md", "Gemfile.lock", ".gitignore")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Everything the pipeline needs to know about the gem and its repository."""

    gem_name: str
    version_file: str
    repo: str = DEFAULT_REPO
    gem_folder: str = ""
    develop_branch: str = DEFAULT_DEVELOP_BRANCH
    main_branch: str = DEFAULT_MAIN_BRANCH
    token_file: str = DEFAULT_TOKEN_FILE
    notes_file: str = DEFAULT_NOTES_FILE
    dependency_bot: str = DEFAULT_DEPENDENCY_BOT
    commit_files: tuple[str, ...] = DEFAULT_COMMIT_FILES

    @classmethod
    def for_gem(cls, gem_name: str) -> ReleaseConfig:
        """Default configuration for a gem laid out the conventional way."""
        return cls(
            gem_name=gem_name,
            version_file=f"lib/{gem_name}/version.rb",
            gem_folder=f"~/{gem_name}-gems/",
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, gem_name: str | None = None) -> ReleaseConfig:
        """Create a config from parsed TOML.

        Raises:
            ValueError: If no gem name is configured or given.
        """
        gem: StrDict = get_table(data, "gem") or {}
        branches: StrDict = get_table(data, "branches") or {}
        publish: StrDict = get_table(data, "publish") or {}
        notes: StrDict = get_table(data, "notes") or {}
        commit: StrDict = get_table(data, "commit") or {}

        name = get_str(gem, "name") or gem_name
        if name is None:
            raise ValueError("[gem] name is required")

        defaults = cls.for_gem(name)
        files = get_str_list(commit, "files")

        return cls(
            gem_name=name,
            version_file=get_str(gem, "version_file") or defaults.version_file,
            repo=get_str(gem, "repo") or DEFAULT_REPO,
            gem_folder=get_str(gem, "folder") or defaults.gem_folder,
            develop_branch=get_str(branches, "develop") or DEFAULT_DEVELOP_BRANCH,
            main_branch=get_str(branches, "main") or DEFAULT_MAIN_BRANCH,
            token_file=get_str(publish, "token_file") or DEFAULT_TOKEN_FILE,
            notes_file=get_str(notes, "file") or DEFAULT_NOTES_FILE,
            dependency_bot=get_str(notes, "dependency_bot") or DEFAULT_DEPENDENCY_BOT,
            commit_files=tuple(files) if files is not None else DEFAULT_COMMIT_FILES,
        )

    @property
    def gemspec(self) -> str:
        return f"{self.gem_name}.gemspec"

    def gem_filename(self, version: str) -> str:
        return f"{self.gem_name}-{version}.gem"

    @property
    def gem_folder_path(self) -> Path:
        return Path(self.gem_folder).expanduser()

    @property
    def token_path(self) -> Path:
        return Path(self.token_file).expanduser()

    @property
    def files_to_commit(self) -> tuple[str, ...]:
        """Files committed with the release, always including the version file."""
        if self.version_file in self.commit_files:
            return self.commit_files
        return (*self.commit_files, self.version_file)


def infer_gem_name(repo_root: Path) -> Result[str, ConfigError]:
    """Find the gem name from the single `*.gemspec` in the repository root."""
    specs = sorted(repo_root.glob("*.gemspec"))
    if not specs:
        return Err(ConfigError(f"no *.gemspec found in {repo_root}", path=repo_root))
    if len(specs) > 1:
        names = ", ".join(p.name for p in specs)
        return Err(
            ConfigError(f"several gemspecs found ({names}); set [gem] name", path=repo_root)
        )
    return Ok(specs[0].stem)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path, *, gem_name: str | None = None) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the config file
        gem_name: Fallback gem name when the file does not set one

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value, gem_name=gem_name))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path, *, repo_root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load config from file, or fall back to defaults inferred from the gemspec.

    The config file is optional; a missing file is not an error as long as
    the gem name can be inferred.
    """
    inferred = infer_gem_name(repo_root)
    fallback = inferred.value if isinstance(inferred, Ok) else None

    if path.exists():
        return load_config(path, gem_name=fallback)

    if isinstance(inferred, Err):
        return inferred
    return Ok(ReleaseConfig.for_gem(inferred.value))
