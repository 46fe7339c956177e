"""
Logging Configuration for the Workload Attestor.

Library modules only create loggers with logging.getLogger(__name__), so
everything the attestor logs lands under the "attestor" logger. The
embedding process decides whether to call setup_logging(), which attaches
text or JSON handlers to that logger and leaves the root logger alone.

Structured context travels in the ``extra_data`` record attribute, as the
inspector does for its final failed attempt:

    logger.debug("Inspect failed", extra={'extra_data': describe_error(e, op)})

Usage:
    from attestor import setup_logging
    setup_logging(level=logging.DEBUG, json_format=True)

    # or from WORKLOAD_ATTESTOR_LOG_* environment variables
    from attestor import configure_from_environment
    configure_from_environment()
"""

import json
import logging
import os
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

ROOT_LOGGER = 'attestor'
ENV_PREFIX = "WORKLOAD_ATTESTOR_"


class FeatureArea(Enum):
    """Feature areas, derived from the logger name."""
    CORE = "core"           # Orchestration
    CGROUPS = "cgroups"     # Pattern compilation and cgroup matching
    DOCKER = "docker"       # Daemon client, retries, selectors
    CONFIG = "config"       # Settings and constants


_FEATURES = {
    'cgroups': FeatureArea.CGROUPS,
    'docker': FeatureArea.DOCKER,
    'config': FeatureArea.CONFIG,
    'constants': FeatureArea.CONFIG,
}


def feature_for(logger_name: str) -> FeatureArea:
    """Map a logger name such as 'attestor.docker.inspector' to its area."""
    for part in logger_name.split('.')[1:]:
        if part in _FEATURES:
            return _FEATURES[part]
    return FeatureArea.CORE


class AttestorFormatter(logging.Formatter):
    """One-line text or JSON records carrying the feature area and extra_data."""

    def __init__(self, json_format: bool = False):
        super().__init__()
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        fields = self._fields(record)
        if self.json_format:
            return json.dumps(fields, default=str)

        line = f"{fields['timestamp']} {fields['level']:8} [{fields['feature']}] {fields['message']}"
        extra = fields.get('extra')
        if extra:
            line += " | " + ", ".join(f"{k}={v}" for k, v in extra.items())
        if 'exception' in fields:
            line += "\n" + fields['exception']
        return line

    def _fields(self, record: logging.LogRecord) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(timespec='milliseconds'),
            'level': record.levelname,
            'logger': record.name,
            'feature': feature_for(record.name).value,
            'message': record.getMessage(),
        }
        extra_data = getattr(record, 'extra_data', None)
        if extra_data:
            fields['extra'] = extra_data
        if record.exc_info:
            fields['exception'] = self.formatException(record.exc_info)
        return fields


def _attestor_handlers(logger: logging.Logger):
    return [h for h in logger.handlers if isinstance(h.formatter, AttestorFormatter)]


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    json_format: bool = False,
) -> logging.Logger:
    """
    Attach attestor handlers to the "attestor" logger.

    Calling again replaces the handlers installed by an earlier call. While
    handlers are installed the logger stops propagating, so records are not
    printed twice by a root handler.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in _attestor_handlers(logger):
        logger.removeHandler(handler)
        handler.close()

    formatter = AttestorFormatter(json_format=json_format)
    handlers = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = not handlers
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the attestor namespace."""
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def _env(name: str, default: str = '') -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str) -> bool:
    return _env(name).lower() in ('1', 'true', 'yes')


def configure_from_environment() -> logging.Logger:
    """
    Configure attestor logging from environment variables:

        WORKLOAD_ATTESTOR_LOG_LEVEL       level name (default INFO)
        WORKLOAD_ATTESTOR_LOG_FILE        also write to this file
        WORKLOAD_ATTESTOR_LOG_NO_CONSOLE  disable the stderr handler
        WORKLOAD_ATTESTOR_LOG_JSON        JSON records instead of text
    """
    level_name = _env('LOG_LEVEL', 'INFO').upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        logging.getLogger(__name__).warning(
            f"Unknown {ENV_PREFIX}LOG_LEVEL {level_name!r}, using INFO"
        )
        level = logging.INFO

    return setup_logging(
        level=level,
        log_file=_env('LOG_FILE') or None,
        console=not _env_flag('LOG_NO_CONSOLE'),
        json_format=_env_flag('LOG_JSON'),
    )


__all__ = [
    'FeatureArea',
    'feature_for',
    'AttestorFormatter',
    'setup_logging',
    'configure_from_environment',
    'get_logger',
]
