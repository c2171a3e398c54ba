"""Build tool adapters."""

from .dotnet import BuildToolError, DotnetBuildTool, find_package

__all__ = ["BuildToolError", "DotnetBuildTool", "find_package"]
