"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Drop handlers the CLI attaches to the 'src' logger during a test."""
    app_logger = logging.getLogger("src")
    handlers = list(app_logger.handlers)
    level = app_logger.level
    yield
    for handler in app_logger.handlers[:]:
        if handler not in handlers:
            app_logger.removeHandler(handler)
            handler.close()
    app_logger.setLevel(level)
