"""Pytest fixtures for rpcengine tests."""

import logging
from typing import Generator

import pytest
import structlog
from helpers import make_test_server

from rpcengine import Server


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset logging state before and after each test.

    This ensures test isolation for logging configuration.
    """
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_level = root_logger.level
    original_handlers = root_logger.handlers[:]
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    structlog.reset_defaults()
    root_logger.setLevel(original_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)


@pytest.fixture
def server() -> Server:
    """A Server with the example handlers registered."""
    return make_test_server()
