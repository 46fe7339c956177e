"""
Docker Runtime Integration for the Workload Attestor

Components:
- client: Docker Engine API client and error translation
- inspector: retrying, cancellable container inspection
- selectors: container metadata to workload selectors
"""

from .client import (
    ContainerMetadata,
    ContainerInspector,
    DockerDaemonClient,
)

from .inspector import (
    RetryPolicy,
    ResilientInspector,
)

from .selectors import (
    Selector,
    label_selector,
    image_selector,
    derive_selectors,
)

__all__ = [
    # Client
    'ContainerMetadata',
    'ContainerInspector',
    'DockerDaemonClient',
    # Inspector
    'RetryPolicy',
    'ResilientInspector',
    # Selectors
    'Selector',
    'label_selector',
    'image_selector',
    'derive_selectors',
]
