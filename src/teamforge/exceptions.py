"""
exceptions:
    Custom exception hierarchy for teamforge.

This module defines a consistent exception hierarchy for error handling.
All teamforge-specific exceptions inherit from TeamForgeError, making it easy
to catch all teamforge errors at the CLI layer.

Usage:
    - Raise specific exceptions in library code
    - Convert provider failures to DeploymentResult entries at the service boundary
    - Catch TeamForgeError at CLI boundaries and exit with a message
"""

from pathlib import Path
from typing import Optional


class TeamForgeError(Exception):
    """Base exception for all teamforge-specific errors."""

    pass


# =============================================================================
# Configuration exceptions
# =============================================================================


class ConfigurationError(TeamForgeError):
    """Raised when there's a configuration problem."""

    pass


class UnknownSystemError(ConfigurationError):
    """Raised when an unknown target system is specified."""

    def __init__(self, system: str, supported: list[str]):
        self.system = system
        self.supported = supported
        message = f"Unknown system: {system}. Supported: {supported}"
        super().__init__(message)


# =============================================================================
# Validation exceptions
# =============================================================================


class ValidationError(TeamForgeError):
    """Raised when a deployment cannot proceed because validation failed.

    Contains the list of specific validation errors.
    """

    def __init__(self, errors: list[str]):
        self.errors = errors
        message = "Deployment validation failed:\n" + "\n".join(
            f"  - {err}" for err in errors
        )
        super().__init__(message)


# =============================================================================
# Library exceptions
# =============================================================================


class TemplateNotFoundError(TeamForgeError):
    """Raised when a team references a template missing from the library."""

    def __init__(self, kind: str, template_id: str):
        self.kind = kind
        self.template_id = template_id
        super().__init__(f"{kind} '{template_id}' not found in library")


class TemplateInvalidError(TeamForgeError):
    """Raised when a template file exists but cannot be parsed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid template {path}: {reason}")


# =============================================================================
# Deployment exceptions
# =============================================================================


class ProviderWriteError(TeamForgeError):
    """Raised when a provider fails to write part of a target's configuration.

    Carries the files that were written before the failure so callers can
    report written versus attempted paths.
    """

    def __init__(
        self,
        system: str,
        path: Path | str,
        reason: Optional[str] = None,
        written: Optional[list[str]] = None,
    ):
        self.system = system
        self.path = Path(path)
        self.reason = reason
        self.written = written or []

        parts = [f"Failed to write {path} for {system}"]
        if reason:
            parts.append(f"reason: {reason}")
        super().__init__(" - ".join(parts))


# =============================================================================
# Team exceptions
# =============================================================================


class TeamNotFoundError(TeamForgeError):
    """Raised when a team cannot be found in the team store."""

    def __init__(self, team_id: str, message: Optional[str] = None):
        self.team_id = team_id
        if message is None:
            message = f"Team '{team_id}' not found"
        super().__init__(message)


class TeamInvalidError(TeamForgeError):
    """Raised when a team file cannot be read as a team."""

    def __init__(self, source: Path | str, reason: str):
        self.source = str(source)
        self.reason = reason
        super().__init__(f"Invalid team definition {source}: {reason}")


# =============================================================================
# Path-related exceptions
# =============================================================================


class PathError(TeamForgeError):
    """Raised when there's an error with a file or directory path."""

    def __init__(self, path: Path | str, message: Optional[str] = None):
        self.path = Path(path) if isinstance(path, str) else path
        if message is None:
            message = f"Path error: {path}"
        super().__init__(message)


class PathNotFoundError(PathError):
    """Raised when a required path doesn't exist."""

    def __init__(self, path: Path | str, description: str = "Path"):
        super().__init__(path, f"{description} does not exist: {path}")
