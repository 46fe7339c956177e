"""
Workload Attestor - Docker container identity selectors from cgroup membership
"""

from .constants import (
    Tokens,
    Selectors,
    Defaults,
    Retries,
    Timeouts,
)

from .errors import (
    AttestorError,
    ConfigurationError,
    InvalidPatternError,
    PatternCompilationError,
    NotConfiguredError,
    EmptyContainerIDError,
    InspectionError,
    ContainerNotFoundError,
    DaemonUnavailableError,
    CancellationError,
)

from .context import AttestContext

from .cgroups import (
    ContainerIDMatcher,
    ContainerIDFinder,
    CgroupEntry,
    CgroupEnumerator,
    Resolution,
    compile_pattern,
    new_container_id_finder,
    resolve,
)

from .docker import (
    ContainerMetadata,
    ContainerInspector,
    DockerDaemonClient,
    RetryPolicy,
    ResilientInspector,
    Selector,
    derive_selectors,
)

from .config import AttestorSettings, AttestorConfig, build_config
from .workload_attestor import DockerWorkloadAttestor, PLUGIN_NAME
from .logging_config import setup_logging, configure_from_environment

__version__ = "1.0.0"

__all__ = [
    # Constants
    'Tokens',
    'Selectors',
    'Defaults',
    'Retries',
    'Timeouts',
    # Errors
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
    # Context
    'AttestContext',
    # Cgroups
    'ContainerIDMatcher',
    'ContainerIDFinder',
    'CgroupEntry',
    'CgroupEnumerator',
    'Resolution',
    'compile_pattern',
    'new_container_id_finder',
    'resolve',
    # Docker
    'ContainerMetadata',
    'ContainerInspector',
    'DockerDaemonClient',
    'RetryPolicy',
    'ResilientInspector',
    'Selector',
    'derive_selectors',
    # Attestor
    'AttestorSettings',
    'AttestorConfig',
    'build_config',
    'DockerWorkloadAttestor',
    'PLUGIN_NAME',
    # Logging
    'setup_logging',
    'configure_from_environment',
]
