"""
Tests for attestor/docker/selectors.py - Selector Derivation
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from attestor.docker.client import ContainerMetadata
from attestor.docker.selectors import (
    Selector,
    derive_selectors,
    image_selector,
    label_selector,
)


class TestDeriveSelectors:
    """Tests for derive_selectors."""

    def test_labels_and_image(self, sample_metadata):
        selectors = derive_selectors(sample_metadata)
        assert selectors == {
            Selector('docker', 'label:com.example.app:web'),
            Selector('docker', 'label:com.example.tier:frontend'),
            Selector('docker', 'image_id:registry.example.com/web:1.2.3'),
        }

    def test_empty_metadata(self):
        assert derive_selectors(ContainerMetadata()) == frozenset()

    def test_none_metadata(self):
        assert derive_selectors(None) == frozenset()

    def test_image_only(self):
        assert derive_selectors(ContainerMetadata(image='alpine')) == {image_selector('alpine')}

    def test_labels_only(self):
        selectors = derive_selectors(ContainerMetadata(labels={'a': '1'}))
        assert selectors == {label_selector('a', '1')}

    def test_empty_label_value_is_kept(self):
        selectors = derive_selectors(ContainerMetadata(labels={'flag': ''}))
        assert selectors == {Selector('docker', 'label:flag:')}

    def test_result_is_immutable(self, sample_metadata):
        assert isinstance(derive_selectors(sample_metadata), frozenset)


class TestSelector:
    """Tests for the Selector value type."""

    def test_to_dict(self):
        assert label_selector('k', 'v').to_dict() == {'type': 'docker', 'value': 'label:k:v'}

    def test_str(self):
        assert str(image_selector('nginx')) == 'docker:image_id:nginx'

    def test_sortable(self):
        selectors = sorted([image_selector('x'), label_selector('a', 'b')])
        assert selectors[0].value == 'image_id:x'
