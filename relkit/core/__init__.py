"""Core domain types and logic."""

from .config import ConfigError, ReleaseConfig, load_config, load_optional_config
from .errors import ErrorCode
from .project import ProjectLayout, ProjectNotFound, resolve_layout
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "load_optional_config",
    # errors
    "ErrorCode",
    # project
    "ProjectLayout",
    "ProjectNotFound",
    "resolve_layout",
    # result
    "Err",
    "Ok",
    "Result",
]
