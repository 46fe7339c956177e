"""
Selector Derivation

Turns container metadata into workload selectors:
    docker:label:<key>:<value>   one per container label
    docker:image_id:<image>      when the container has an image reference
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from ..constants import Selectors
from .client import ContainerMetadata


@dataclass(frozen=True, order=True)
class Selector:
    """A typed workload attribute."""
    type: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.type, 'value': self.value}

    def __str__(self) -> str:
        return f"{self.type}:{self.value}"


def label_selector(key: str, value: str) -> Selector:
    return Selector(type=Selectors.TYPE, value=f"{Selectors.LABEL}:{key}:{value}")


def image_selector(image: str) -> Selector:
    return Selector(type=Selectors.TYPE, value=f"{Selectors.IMAGE_ID}:{image}")


def derive_selectors(metadata: Optional[ContainerMetadata]) -> FrozenSet[Selector]:
    """Derive the selector set for a container. Never fails."""
    if metadata is None:
        return frozenset()

    selectors = {label_selector(key, value) for key, value in metadata.labels.items()}
    if metadata.image:
        selectors.add(image_selector(metadata.image))
    return frozenset(selectors)


__all__ = [
    'Selector',
    'label_selector',
    'image_selector',
    'derive_selectors',
]
