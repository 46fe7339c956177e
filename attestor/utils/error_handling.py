"""
Error Handling Utilities for the Workload Attestor

Provides consistent error classification across the attestor:
1. Error categorization and severity levels
2. Recovery suggestions (retry vs. abort) used by the inspection retry loop
3. Structured error context for log lines

The attestor never swallows errors on behalf of its caller. These helpers
classify and describe errors; they do not handle them.

USAGE:
    from attestor.utils.error_handling import (
        ErrorRecoveryAction,
        suggest_recovery_action,
    )

    if suggest_recovery_action(err) is ErrorRecoveryAction.RETRY:
        ...
"""

import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for proper handling and reporting."""
    # Security-relevant verdicts (e.g. a pattern matched but yielded no id)
    SECURITY = "security"

    # Operator configuration errors
    CONFIG = "configuration"

    # Transport errors talking to the container runtime
    NETWORK = "network"

    # Errors reported by the container runtime itself
    EXTERNAL = "external"

    # Caller-initiated cancellation or deadline expiry
    CANCELLED = "cancelled"

    # Unknown/uncategorized
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorRecoveryAction(Enum):
    """Actions to take for error recovery."""
    RETRY = "retry"             # Retry the operation
    ABORT = "abort"             # Abort the operation


def get_category(error: BaseException) -> ErrorCategory:
    """Return the category an error declares, or UNKNOWN."""
    category = getattr(error, 'category', None)
    if isinstance(category, ErrorCategory):
        return category
    return ErrorCategory.UNKNOWN


def determine_severity(error: BaseException) -> ErrorSeverity:
    """
    Determine the severity level for an error based on its category.
    """
    category = get_category(error)

    if category == ErrorCategory.SECURITY:
        return ErrorSeverity.CRITICAL
    if category == ErrorCategory.CANCELLED:
        return ErrorSeverity.INFO
    if category == ErrorCategory.NETWORK or getattr(error, 'transient', False):
        return ErrorSeverity.WARNING
    return ErrorSeverity.ERROR


def suggest_recovery_action(error: BaseException) -> ErrorRecoveryAction:
    """
    Suggest a recovery action based on the error type and category.

    Errors flagged ``transient`` (daemon unavailable, container not yet
    known to the daemon) are retried. Everything else aborts, including
    cancellation and configuration errors.
    """
    if get_category(error) == ErrorCategory.CANCELLED:
        return ErrorRecoveryAction.ABORT

    if getattr(error, 'transient', False):
        return ErrorRecoveryAction.RETRY

    error_type = type(error).__name__
    transient_types = {'TimeoutError', 'ConnectionError', 'BrokenPipeError'}
    if error_type in transient_types:
        return ErrorRecoveryAction.RETRY

    return ErrorRecoveryAction.ABORT


def describe_error(
    error: BaseException,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build a structured description of an error for log records."""
    return {
        'error_type': type(error).__name__,
        'error_message': str(error),
        'category': get_category(error).value,
        'severity': determine_severity(error).value,
        'operation': operation,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'thread_name': threading.current_thread().name,
        'additional_context': dict(additional_context or {}),
    }


__all__ = [
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorRecoveryAction',
    'get_category',
    'determine_severity',
    'suggest_recovery_action',
    'describe_error',
]
