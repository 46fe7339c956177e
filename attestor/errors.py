"""
Workload Attestor Exceptions

Every failure of an attestation or configuration attempt is raised as one of
these types. A process that is simply not in a container is not an error;
``attest`` returns an empty selector set for it.
"""

from typing import Optional

from .constants import Tokens
from .utils.error_handling import ErrorCategory


class AttestorError(Exception):
    """Base exception for all attestor errors."""

    category = ErrorCategory.UNKNOWN
    transient = False

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason or message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(AttestorError):
    """Raised when attestor settings cannot be turned into a configuration."""
    category = ErrorCategory.CONFIG


class InvalidPatternError(ConfigurationError):
    """Raised when a cgroup pattern does not hold the id token exactly once."""

    def __init__(self, pattern: str):
        super().__init__(
            f'pattern "{pattern}" must contain the container id token '
            f'"{Tokens.CONTAINER_ID}" exactly once'
        )
        self.pattern = pattern


class PatternCompilationError(ConfigurationError):
    """Raised when the regular expression built from a pattern is rejected."""

    def __init__(self, pattern: str, diagnostic: str):
        super().__init__(
            f"failed to create container id fetcher: "
            f"error parsing regexp: {diagnostic}",
            reason=diagnostic,
        )
        self.pattern = pattern
        self.diagnostic = diagnostic


class NotConfiguredError(ConfigurationError):
    """Raised when attestation is requested before any configuration."""

    def __init__(self):
        super().__init__("workloadattestor/docker: plugin not configured")


# ---------------------------------------------------------------------------
# Attestation
# ---------------------------------------------------------------------------

class EmptyContainerIDError(AttestorError):
    """Raised when a pattern matched a cgroup path but captured no id."""
    category = ErrorCategory.SECURITY

    def __init__(self, cgroup_path: Optional[str] = None):
        super().__init__(
            "workloadattestor/docker: a pattern matched, "
            "but no container id was found"
        )
        self.cgroup_path = cgroup_path


class InspectionError(AttestorError):
    """Raised when the container runtime cannot describe a container."""
    category = ErrorCategory.EXTERNAL

    def __init__(self, message: str, container_id: str = "", reason: Optional[str] = None):
        super().__init__(message, reason=reason)
        self.container_id = container_id


class ContainerNotFoundError(InspectionError):
    """
    Raised when the daemon does not (yet) know the container.

    Retried: a container's cgroup can appear before the daemon answers for
    it. Once retries run out the error is final and reaches the caller as a
    permanent inspection failure.
    """
    transient = True


class DaemonUnavailableError(InspectionError):
    """Raised when the daemon cannot be reached or fails server-side."""
    category = ErrorCategory.NETWORK
    transient = True


class CancellationError(AttestorError):
    """Raised when the caller cancels, or its deadline passes, mid-attestation."""
    category = ErrorCategory.CANCELLED


__all__ = [
    'AttestorError',
    'ConfigurationError',
    'InvalidPatternError',
    'PatternCompilationError',
    'NotConfiguredError',
    'EmptyContainerIDError',
    'InspectionError',
    'ContainerNotFoundError',
    'DaemonUnavailableError',
    'CancellationError',
]
