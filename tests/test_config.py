"""
Tests for attestor/config.py - Settings and Runtime Snapshots
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from attestor.config import AttestorSettings, build_config
from attestor.constants import Retries, Timeouts
from attestor.errors import ConfigurationError, InvalidPatternError


# ===========================================================================
# Settings
# ===========================================================================

class TestAttestorSettings:
    """Tests for parsing operator settings."""

    def test_defaults(self):
        settings = AttestorSettings.from_dict({})
        assert settings.container_id_cgroup_matchers == []
        assert settings.cgroup_container_index is None
        assert settings.retry_max_attempts == Retries.MAX_ATTEMPTS
        assert settings.inspect_timeout == Timeouts.INSPECT_REQUEST

    def test_from_dict(self):
        settings = AttestorSettings.from_dict({
            'docker_socket_path': 'unix:///run/docker.sock',
            'docker_version': '1.41',
            'container_id_cgroup_matchers': ['/docker/<id>', '/system.slice/docker-<id>.scope'],
            'retry_max_attempts': '3',
            'retry_initial_delay': 0,
        })
        assert settings.docker_socket_path == 'unix:///run/docker.sock'
        assert settings.docker_version == '1.41'
        assert settings.retry_max_attempts == 3
        assert settings.retry_initial_delay == 0.0
        assert settings.cgroup_patterns() == ['/docker/<id>', '/system.slice/docker-<id>.scope']

    def test_from_yaml(self):
        settings = AttestorSettings.from_yaml(
            "container_id_cgroup_matchers:\n"
            "  - /kubepods/*/*/<id>\n"
            "retry_max_delay: 0.5\n"
        )
        assert settings.container_id_cgroup_matchers == ['/kubepods/*/*/<id>']
        assert settings.retry_max_delay == 0.5

    def test_empty_yaml(self):
        assert AttestorSettings.from_yaml("").cgroup_patterns() == []

    def test_bad_yaml(self):
        with pytest.raises(ConfigurationError):
            AttestorSettings.from_yaml("container_id_cgroup_matchers: [unclosed")

    def test_non_mapping(self):
        with pytest.raises(ConfigurationError):
            AttestorSettings.from_yaml("- just\n- a list\n")

    def test_matchers_must_be_list(self):
        with pytest.raises(ConfigurationError):
            AttestorSettings.from_dict({'container_id_cgroup_matchers': '/docker/<id>'})

    def test_bad_number(self):
        with pytest.raises(ConfigurationError):
            AttestorSettings.from_dict({'retry_max_attempts': 'many'})

    def test_unknown_keys_are_ignored(self, caplog):
        settings = AttestorSettings.from_dict({'docker_host': 'x'})
        assert settings.docker_socket_path is None
        assert 'docker_host' in caplog.text

    def test_round_trip_dict(self):
        settings = AttestorSettings.from_dict({'cgroup_prefix': '/my.slice'})
        assert AttestorSettings.from_dict(settings.to_dict()) == settings


class TestCgroupPatterns:
    """Tests for choosing which patterns to compile."""

    def test_nothing_set_uses_builtin_default(self):
        assert AttestorSettings().cgroup_patterns() == []

    def test_legacy_prefix_and_index(self):
        settings = AttestorSettings(cgroup_prefix='/my.slice', cgroup_container_index=2)
        assert settings.cgroup_patterns() == ['/my.slice/*/<id>']

    def test_legacy_index_only(self):
        settings = AttestorSettings(cgroup_container_index=2)
        assert settings.cgroup_patterns() == ['/docker/*/<id>']

    def test_zero_index_is_rejected(self):
        with pytest.raises(ConfigurationError):
            AttestorSettings(cgroup_container_index=0).cgroup_patterns()

    def test_matchers_take_precedence(self):
        settings = AttestorSettings(
            cgroup_prefix='/my.slice',
            container_id_cgroup_matchers=['/custom/<id>'],
        )
        assert settings.cgroup_patterns() == ['/custom/<id>']


# ===========================================================================
# Snapshots
# ===========================================================================

class TestBuildConfig:
    """Tests for build_config."""

    def test_builds_complete_snapshot(self):
        client = MagicMock()
        factory = MagicMock(return_value=client)
        settings = AttestorSettings(
            container_id_cgroup_matchers=['/a/<id>'],
            retry_max_attempts=2,
        )

        config = build_config(settings, factory)

        factory.assert_called_once_with(settings)
        assert config.client is client
        assert config.finder.patterns == ('/a/<id>',)
        assert config.retry_policy.max_attempts == 2
        assert config.settings is settings

    def test_bad_pattern_builds_nothing(self):
        factory = MagicMock()
        with pytest.raises(InvalidPatternError):
            build_config(AttestorSettings(container_id_cgroup_matchers=['/bad']), factory)
        factory.assert_not_called()

    def test_bad_retry_policy(self):
        factory = MagicMock()
        with pytest.raises(ConfigurationError):
            build_config(AttestorSettings(retry_max_attempts=0), factory)
        factory.assert_not_called()

    def test_snapshot_is_frozen(self):
        config = build_config(AttestorSettings(), MagicMock(return_value=MagicMock()))
        with pytest.raises(AttributeError):
            config.finder = None
