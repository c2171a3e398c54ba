"""Typed configuration loading for ``release.toml``.

The file is optional. Every key has a default, so a repository with a
single project file at its root can be released without any configuration.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "BuildConfig",
    "ConfigError",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_REGISTRY_URL",
    "GitConfig",
    "ProjectConfig",
    "PublishConfig",
    "ReleaseConfig",
    "load_config",
    "load_optional_config",
]

DEFAULT_CONFIG_NAME = "release.toml"
DEFAULT_REGISTRY_URL = "https://api.nuget.org/v3/index.json"
DEFAULT_API_KEY_ENV = "NUGET_API_KEY"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Project file locations, relative to the repository root.

    None means "discover it".
    """

    path: str | None = None
    test_path: str | None = None


@dataclass(frozen=True, slots=True)
class BuildConfig:
    configuration: str = "Release"
    output_dir: str = "artifacts"


@dataclass(frozen=True, slots=True)
class PublishConfig:
    registry_url: str = DEFAULT_REGISTRY_URL
    # Name of the environment variable holding the API key, never the key itself.
    api_key_env: str = DEFAULT_API_KEY_ENV


@dataclass(frozen=True, slots=True)
class GitConfig:
    remote: str = "origin"
    branch: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    git: GitConfig = field(default_factory=GitConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML)."""
        project: StrDict = get_table(data, "project") or {}
        build: StrDict = get_table(data, "build") or {}
        publish: StrDict = get_table(data, "publish") or {}
        git: StrDict = get_table(data, "git") or {}

        return cls(
            project=ProjectConfig(
                path=get_str(project, "path"),
                test_path=get_str(project, "test_path"),
            ),
            build=BuildConfig(
                configuration=get_str(build, "configuration") or "Release",
                output_dir=get_str(build, "output_dir") or "artifacts",
            ),
            publish=PublishConfig(
                registry_url=get_str(publish, "registry_url") or DEFAULT_REGISTRY_URL,
                api_key_env=get_str(publish, "api_key_env") or DEFAULT_API_KEY_ENV,
            ),
            git=GitConfig(
                remote=get_str(git, "remote") or "origin",
                branch=get_str(git, "branch"),
            ),
        )


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


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to release.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_optional_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load config from file, or the defaults if the file doesn't exist.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
