"""Test configuration and fixtures for countql."""

import pytest

from countql.config import ExecutorSettings, get_executor_settings
from countql.transform import CountTransformer

_ENV_VARS = (
    'COUNTQL_MAX_PAGES',
    'COUNTQL_MAX_SECONDS',
    'COUNTQL_MAX_RETRIES',
    'COUNTQL_RETRY_BASE_DELAY',
    'COUNTQL_LOG_LEVEL',
    'COUNTQL_DYNAMODB_ENDPOINT_URL',
    'AWS_REGION',
    'AWS_DEFAULT_REGION',
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove countql/AWS env vars and clear the settings cache around each test."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    get_executor_settings.cache_clear()
    yield
    get_executor_settings.cache_clear()


@pytest.fixture
def transformer():
    return CountTransformer()


@pytest.fixture
def fast_settings():
    return ExecutorSettings(max_pages=100, max_seconds=0, max_retries=2, retry_base_delay=0.1)
