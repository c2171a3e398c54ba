"""relkit - release automation for a single packaged .NET library."""

__version__ = "0.3.0"
