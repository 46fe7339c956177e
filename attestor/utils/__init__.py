"""
Utility modules for the Workload Attestor.

Provides common utilities including:
- Error classification and recovery suggestions
"""

from .error_handling import (
    ErrorCategory,
    ErrorSeverity,
    ErrorRecoveryAction,
    get_category,
    determine_severity,
    suggest_recovery_action,
    describe_error,
)

__all__ = [
    # Error handling
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorRecoveryAction',
    'get_category',
    'determine_severity',
    'suggest_recovery_action',
    'describe_error',
]
