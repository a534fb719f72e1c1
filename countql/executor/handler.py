"""Lambda entry point of the shared count executor.

The API gateway invokes ``handler`` with ``{context, dynamo, tableName}``; the
integer returned becomes the field value. Exceptions propagate so the gateway
reports them to the caller as ``{message, type}``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from botocore.exceptions import ClientError

from ..config import configure_logging, get_executor_settings
from .scan import CountExecutor

__all__ = ['handler', 'error_payload', 'get_executor']

logger = logging.getLogger(__name__)

_executor: Optional[CountExecutor] = None


def get_executor() -> CountExecutor:
    """Executor reused across warm invocations (one DynamoDB client per process)."""
    global _executor
    if _executor is None:
        settings = get_executor_settings()
        configure_logging(settings.log_level)
        _executor = CountExecutor(settings=settings)
    return _executor


def handler(event: Dict[str, Any], context: Any = None) -> int:
    executor = get_executor()
    logger.debug("Incoming event data: %s", event)
    return executor.count_event(event)


def error_payload(exc: BaseException) -> Dict[str, str]:
    """Error object surfaced to the caller for a failed invocation."""
    if isinstance(exc, ClientError):
        error = exc.response.get('Error', {})
        return {'message': error.get('Message') or str(exc), 'type': error.get('Code') or 'ClientError'}
    return {'message': str(exc), 'type': type(exc).__name__}
