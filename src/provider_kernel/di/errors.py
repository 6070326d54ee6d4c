"""
DI and discovery error types.
"""

from typing import Any, Optional, Sequence


class DIError(Exception):
    """Base exception for DI errors."""
    pass


class ProviderNotFoundError(DIError):
    """No registration exists for the requested token."""

    def __init__(self, token: Any, label: Optional[str] = None):
        self.token = token
        super().__init__(f"No provider registered for {label or token!r}")


class ResolutionError(DIError):
    """A registration exists but could not be turned into a value."""
    pass


class DiscoveryError(DIError):
    """Base exception for provider auto-discovery failures."""
    pass


class NoFilesFoundError(DiscoveryError):
    """Strict discovery matched zero files."""

    def __init__(self, roots: Sequence[str], patterns: Sequence[str]):
        self.roots = list(roots)
        self.patterns = list(patterns)

        msg = "No provider files found (strict mode)."
        msg += f"\n  roots:    {self.roots}"
        msg += f"\n  patterns: {self.patterns}"
        msg += "\n\nSuggested fixes:"
        msg += "\n  - Check the discovery roots exist relative to the working directory"
        msg += "\n  - Check file names match one of the patterns"
        msg += "\n  - Disable strict mode if the directory is optional"

        super().__init__(msg)


class ActivationError(DiscoveryError):
    """Loading a discovered file failed."""

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(
            f"Failed to activate {path}: {type(cause).__name__}: {cause}"
        )
