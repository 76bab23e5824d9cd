"""Root conftest.py for focus-tower tests.

This file MUST be at the repository root for fixtures to be discovered
when running tests from any subdirectory.

Provides shared fixtures used across all test modules:
- focus_tower/tests
- shared/tests
"""

import pytest
from unittest.mock import MagicMock


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing.

    Components bind their own context on the injected logger, so bind()
    returns the same mock and every call stays inspectable.
    """
    logger = MagicMock()
    logger.info = MagicMock()
    logger.debug = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    logger.bind = MagicMock(return_value=logger)
    return logger
