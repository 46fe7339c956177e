"""
Resilient Container Inspection

The kernel shows a container's cgroup before the Docker daemon is always
ready to answer for it, so an inspection right after container start can
fail. ResilientInspector retries such failures with bounded exponential
backoff and stops as soon as the caller's context is cancelled or expires.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from ..constants import Retries
from ..context import AttestContext
from ..errors import ConfigurationError
from ..utils.error_handling import (
    ErrorRecoveryAction,
    describe_error,
    suggest_recovery_action,
)
from .client import ContainerInspector, ContainerMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for inspection attempts."""
    max_attempts: int = Retries.MAX_ATTEMPTS
    initial_delay: float = Retries.INITIAL_DELAY
    backoff_multiplier: float = Retries.BACKOFF_MULTIPLIER
    max_delay: float = Retries.MAX_DELAY

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"retry max_attempts must be at least 1, got {self.max_attempts}"
            )
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ConfigurationError("retry delays must not be negative")
        if self.backoff_multiplier < 1:
            raise ConfigurationError(
                f"retry backoff_multiplier must be at least 1, got {self.backoff_multiplier}"
            )

    @classmethod
    def no_delay(cls, max_attempts: int = Retries.MAX_ATTEMPTS) -> 'RetryPolicy':
        return cls(max_attempts=max_attempts, initial_delay=0.0, max_delay=0.0)

    def delays(self) -> Iterator[float]:
        """Yield the wait before each retry (max_attempts - 1 values)."""
        delay = self.initial_delay
        for _ in range(self.max_attempts - 1):
            yield min(delay, self.max_delay)
            delay *= self.backoff_multiplier

    def to_dict(self) -> Dict[str, Any]:
        return {
            'max_attempts': self.max_attempts,
            'initial_delay': self.initial_delay,
            'backoff_multiplier': self.backoff_multiplier,
            'max_delay': self.max_delay,
        }


class ResilientInspector:
    """
    Wraps a ContainerInspector with retry and cancellation.

    Usage:
        inspector = ResilientInspector(DockerDaemonClient(), RetryPolicy())
        metadata = inspector.inspect(container_id, AttestContext.with_timeout(5))
    """

    def __init__(self, client: ContainerInspector, policy: Optional[RetryPolicy] = None):
        self.client = client
        self.policy = policy or RetryPolicy()

    def inspect(
        self,
        container_id: str,
        ctx: Optional[AttestContext] = None,
    ) -> ContainerMetadata:
        """
        Inspect a container, retrying transient failures.

        Raises:
            CancellationError: the context was cancelled or its deadline
                passed before or between attempts
            InspectionError: a permanent failure, or the last transient
                failure once attempts are exhausted (raised unmodified)
        """
        ctx = ctx or AttestContext.background()
        delays = self.policy.delays()
        attempt = 0

        while True:
            attempt += 1
            ctx.check()
            try:
                return self.client.inspect_container(container_id, ctx)
            except Exception as e:
                if suggest_recovery_action(e) is not ErrorRecoveryAction.RETRY:
                    raise
                delay = next(delays, None)
                if delay is None:
                    logger.debug(
                        f"Inspect of {container_id} failed after {attempt} attempt(s)",
                        extra={'extra_data': describe_error(e, 'inspect_container')},
                    )
                    raise
                logger.debug(
                    f"Retrying inspect of {container_id} in {delay:.2f}s "
                    f"(attempt {attempt}/{self.policy.max_attempts}): {e}"
                )

            ctx.wait(delay)


__all__ = [
    'RetryPolicy',
    'ResilientInspector',
]
