"""
Test configuration for the cosign-trust test suite.
"""

import logging
from datetime import datetime, timezone

import pytest

from cosign_trust.logging_config import ServiceNameFilter
from tests.fixtures.certificates import CertData, generate_ca, generate_certificate


# Test markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "cli: mark test as exercising the command line interface")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "cli" in item.name.lower():
            item.add_marker(pytest.mark.cli)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep settings tests independent of the developer's environment."""
    for name in ("SERVICE_NAME", "ENVIRONMENT", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"COSIGN_TRUST_{name}", raising=False)


@pytest.fixture(scope="session")
def ca_data() -> CertData:
    return generate_ca()


@pytest.fixture(scope="session")
def other_ca_data() -> CertData:
    return generate_ca()


@pytest.fixture
def issued_cert(ca_data) -> CertData:
    return generate_certificate(ca_data)


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging's changes to the root logger."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield root_logger
    for handler in list(root_logger.handlers):
        if any(isinstance(f, ServiceNameFilter) for f in handler.filters):
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)
    logging.disable(logging.NOTSET)
