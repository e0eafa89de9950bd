import logging

import pytest

from paramo.logger import paramo_logger


def pytest_configure(config):
    """Set up test environment before tests run."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    paramo_logger.disabled = True


@pytest.fixture
def enabled_paramo_logger():
    """Switch the shared trace on for one test."""
    with paramo_logger.capture() as trace:
        yield trace
    paramo_logger.clear()
