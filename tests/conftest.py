import pytest
import structlog

from shared.logging import configure_ip_hashing


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo create_app()/setup_logging() config so it does not leak between tests."""
    yield
    structlog.reset_defaults()
    configure_ip_hashing(False)
