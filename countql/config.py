"""Configuration for the transform and the Count Executor.

Transform options are passed explicitly through :class:`TransformConfig`.
Executor settings come from the environment (optionally a ``.env`` file),
since the executor runs as an independently deployed function.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Optional

from dotenv import load_dotenv

__all__ = [
    'BindingStrategy',
    'TransformConfig',
    'ExecutorSettings',
    'get_executor_settings',
    'configure_logging',
]


class BindingStrategy(Enum):
    """Binding strategy for field-level counts, selected once per deployment."""

    RELATIONSHIP = 'relationship'
    INDEX = 'index'


@dataclass
class TransformConfig:
    binding_strategy: BindingStrategy = BindingStrategy.RELATIONSHIP
    stack_name: str = 'countResolverStack'
    function_name: str = 'countResolver'
    data_source_name: str = 'countResolverDataSource'
    runtime: str = 'python3.12'
    handler: str = 'countql.executor.handler.handler'
    # Relative to the deployment root key of the S3 deployment bucket.
    code_s3_key: str = 'functions/countResolver.zip'
    memory_size: int = 256
    timeout: int = 30
    # Forwarded to the executor function as environment variables.
    environment: Optional[Dict[str, str]] = None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class ExecutorSettings:
    """Operational bounds and client options of the Count Executor.

    Attributes:
        max_pages: Page ceiling per count invocation (0 disables it).
        max_seconds: Wall-clock ceiling per invocation (0 disables it).
        max_retries: Retries of a throttled page before giving up.
        retry_base_delay: First backoff delay in seconds, doubled per retry.
        log_level: Level applied by :func:`configure_logging`.
        region: AWS region for the DynamoDB client.
        endpoint_url: Custom endpoint, e.g. DynamoDB Local.
    """

    max_pages: int = 1000
    max_seconds: float = 25.0
    max_retries: int = 3
    retry_base_delay: float = 0.1
    log_level: str = 'INFO'
    region: Optional[str] = None
    endpoint_url: Optional[str] = None

    def to_boto3_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        if self.region:
            kwargs['region_name'] = self.region
        if self.endpoint_url:
            kwargs['endpoint_url'] = self.endpoint_url
        return kwargs

    @classmethod
    def from_env(cls) -> 'ExecutorSettings':
        return cls(
            max_pages=_env_int('COUNTQL_MAX_PAGES', cls.max_pages),
            max_seconds=_env_float('COUNTQL_MAX_SECONDS', cls.max_seconds),
            max_retries=_env_int('COUNTQL_MAX_RETRIES', cls.max_retries),
            retry_base_delay=_env_float('COUNTQL_RETRY_BASE_DELAY', cls.retry_base_delay),
            log_level=os.environ.get('COUNTQL_LOG_LEVEL') or cls.log_level,
            region=os.environ.get('AWS_REGION') or os.environ.get('AWS_DEFAULT_REGION'),
            endpoint_url=os.environ.get('COUNTQL_DYNAMODB_ENDPOINT_URL'),
        )


@lru_cache(maxsize=1)
def get_executor_settings() -> ExecutorSettings:
    """Load executor settings once per process (``.env`` values never override the environment)."""
    load_dotenv()
    return ExecutorSettings.from_env()


def configure_logging(level: str) -> None:
    resolved = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved)
    logging.getLogger('countql').setLevel(resolved)
