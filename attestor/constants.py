"""
Centralized Constants Module for the Workload Attestor.

This module consolidates the magic values, defaults and retry parameters
used by the attestor so they can be audited in one place.

SECURITY: The cgroup defaults decide which processes are treated as
container workloads. Keep them visible and reviewable.

Usage:
    from attestor.constants import Defaults, Retries, Timeouts

    finder = new_container_id_finder([Defaults.CGROUP_PATTERN])
    policy = RetryPolicy(max_attempts=Retries.MAX_ATTEMPTS)
"""

import logging
import os
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

ENV_PREFIX = "WORKLOAD_ATTESTOR_"


# =============================================================================
# ENVIRONMENT VARIABLE OVERRIDE UTILITIES
# =============================================================================

T = TypeVar('T')


def _env_override(
    env_var: str,
    default: T,
    converter: Callable[[str], T] = str,
    validator: Optional[Callable[[T], bool]] = None,
    min_value: Optional[T] = None,
    max_value: Optional[T] = None,
) -> T:
    """Get a configuration value with environment variable override.

    Args:
        env_var: Environment variable name (will be prefixed with WORKLOAD_ATTESTOR_)
        default: Default value if env var not set
        converter: Function to convert string to target type
        validator: Optional validation function
        min_value: Optional minimum allowed value
        max_value: Optional maximum allowed value

    Returns:
        Configured value (from env var if valid, otherwise default)
    """
    full_env_var = f"{ENV_PREFIX}{env_var}"
    env_value = os.environ.get(full_env_var)

    if env_value is None:
        return default

    try:
        converted = converter(env_value)

        if min_value is not None and converted < min_value:
            logger.warning(
                f"{full_env_var}={env_value} below minimum {min_value}, using default"
            )
            return default
        if max_value is not None and converted > max_value:
            logger.warning(
                f"{full_env_var}={env_value} above maximum {max_value}, using default"
            )
            return default

        if validator is not None and not validator(converted):
            logger.warning(
                f"{full_env_var}={env_value} failed validation, using default"
            )
            return default

        logger.info(f"Using {full_env_var}={converted} (override)")
        return converted

    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid value for {full_env_var}: {e}, using default")
        return default


# =============================================================================
# PATTERN TOKENS AND SELECTOR NAMES
# =============================================================================

class Tokens:
    """Tokens recognized in cgroup path patterns."""
    CONTAINER_ID: str = "<id>"      # Capture, exactly once per pattern
    WILDCARD: str = "*"             # Any single path segment
    SEPARATOR: str = "/"


class Selectors:
    """Selector namespace and sub-selector prefixes."""
    TYPE: str = "docker"
    LABEL: str = "label"
    IMAGE_ID: str = "image_id"


# =============================================================================
# DEFAULTS
# =============================================================================

class Defaults:
    """
    Default settings used when the operator supplies none.

    The default matcher follows the plain Docker cgroupfs layout, e.g.
    "10:perf_event:/docker/2235ebefd9babe0dde4df4e7c49708e24fb31fb851edea55c0ee29a18273cdf4"
    """
    CGROUP_PREFIX: str = "/docker"
    CGROUP_CONTAINER_INDEX: int = 1
    CGROUP_PATTERN: str = "/docker/<id>"

    DOCKER_SOCKET_PATH: str = "unix:///var/run/docker.sock"
    DOCKER_VERSION: str = "1.40"


# =============================================================================
# RETRIES AND TIMEOUTS
# =============================================================================

class Retries:
    """
    Retry parameters for container inspection.

    The daemon can lag behind the kernel when a container starts, so the
    first inspection of a fresh container may report it as unknown.
    """
    MAX_ATTEMPTS: int = _env_override(
        'RETRY_MAX_ATTEMPTS', 5, int, min_value=1, max_value=50
    )
    INITIAL_DELAY: float = _env_override(
        'RETRY_INITIAL_DELAY', 0.1, float, min_value=0.0, max_value=10.0
    )
    BACKOFF_MULTIPLIER: float = _env_override(
        'RETRY_BACKOFF_MULTIPLIER', 2.0, float, min_value=1.0, max_value=10.0
    )
    MAX_DELAY: float = _env_override(
        'RETRY_MAX_DELAY', 2.0, float, min_value=0.0, max_value=60.0
    )


class Timeouts:
    """Timeout values in seconds."""
    INSPECT_REQUEST: float = _env_override(
        'INSPECT_TIMEOUT', 10.0, float, min_value=0.1, max_value=300.0
    )


__all__ = [
    'ENV_PREFIX',
    'Tokens',
    'Selectors',
    'Defaults',
    'Retries',
    'Timeouts',
]
