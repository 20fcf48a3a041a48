"""Root conftest: route structlog through stdlib logging so caplog sees events."""

import pytest
import structlog

from tabletop.logging import setup_logging

setup_logging(level="DEBUG", stdout=False)


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Keep contextvars bound in one test (connection_id, user_name) out of the next."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
