"""Shared fixtures."""

import logging

import pytest

from snow_change.logger import ROOT_LOGGER


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep CI runner variables from leaking into tests."""
    for name in ('GITHUB_OUTPUT', 'DEBUG', 'SNOW_CHANGE_CONFIG',
                 'SNOW_CHANGE_LOG_LEVEL', 'SNOW_CHANGE_LOG_FORMAT'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to streams captured by earlier tests."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
