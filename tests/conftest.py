import pytest

from app import config


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Reset config cache before each test."""
    config._config_instance = None
    yield
    config._config_instance = None
