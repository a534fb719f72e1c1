"""Count Executor: answer a count query with a paginated COUNT scan.

Pages are fetched strictly in sequence, since each page's continuation token
is the start key of the next one. An invocation owns its :class:`ScanState`;
executors share no mutable state between invocations.
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional

import boto3
from botocore.exceptions import ClientError

from ..config import ExecutorSettings
from ..errors import FilterEncodingError, InvalidInvocation, ScanLimitExceeded
from ..filters import DynamoFilter

__all__ = [
    'THROTTLING_ERROR_CODES',
    'ScanState',
    'CountExecutor',
    'primitives_to_string',
    'not_empty_object',
    'make_scan_input',
]

logger = logging.getLogger(__name__)

THROTTLING_ERROR_CODES = frozenset({
    'ProvisionedThroughputExceededException',
    'ThrottlingException',
    'RequestLimitExceeded',
})


def _number_to_string(value: Any, path: str) -> str:
    if isinstance(value, float):
        if not math.isfinite(value):
            raise FilterEncodingError(path, value)
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def primitives_to_string(value: Any, path: str = '$') -> Any:
    """Stringify every leaf of ``value``, keeping mappings and sequences in place.

    >>> primitives_to_string({'a': {'b': {'c': 3}}})
    {'a': {'b': {'c': '3'}}}
    >>> primitives_to_string([1, 2, 3])
    ['1', '2', '3']
    >>> primitives_to_string(True)
    'true'

    Booleans are stringified too, so a typed value such as ``{"BOOL": True}``
    becomes ``{"BOOL": "true"}``, which the low-level DynamoDB client rejects.
    Filter compilers should express boolean comparisons with string or
    number attribute values.

    Raises:
        FilterEncodingError: for leaves that have no primitive string form
            (``None``, bytes, sets, arbitrary objects).
    """
    if isinstance(value, Mapping):
        return {k: primitives_to_string(v, f"{path}.{k}") for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [primitives_to_string(v, f"{path}[{i}]") for i, v in enumerate(value)]
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)):
        return _number_to_string(value, path)
    raise FilterEncodingError(path, value)


def not_empty_object(value: Any) -> bool:
    """True for a mapping with at least one key."""
    return isinstance(value, Mapping) and len(value) > 0


def make_scan_input(
    table_name: str,
    dynamo: Optional[Mapping[str, Any]] = None,
    start_key: Optional[Mapping[str, Any]] = None,
    index_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the keyword arguments of one COUNT scan request.

    Empty parts of the filter are omitted rather than sent: the store rejects
    empty attribute maps, and attribute names or values without an expression.
    A blank expression means "no filter".
    """
    scan: Dict[str, Any] = {'Select': 'COUNT', 'TableName': table_name}
    if index_name:
        scan['IndexName'] = index_name
    if start_key:
        scan['ExclusiveStartKey'] = start_key
    expression = (dynamo or {}).get('expression') or ''
    if expression.strip():
        scan['FilterExpression'] = expression
        names = dynamo.get('expressionNames')
        if not_empty_object(names):
            scan['ExpressionAttributeNames'] = dict(names)
        values = dynamo.get('expressionValues')
        if not_empty_object(values):
            scan['ExpressionAttributeValues'] = primitives_to_string(values)
    return scan


@dataclass
class ScanState:
    count: int = 0
    start_key: Optional[Dict[str, Any]] = None
    pages: int = 0


class CountExecutor:
    """Count the items of a table matching an optional filter.

    Args:
        client: DynamoDB client; created from ``settings`` on first use when omitted.
        settings: Page/time ceilings and retry policy.
        sleep: Backoff sleep function (injectable for tests).
        clock: Monotonic clock used for the wall-clock ceiling.
    """

    def __init__(
        self,
        client: Any = None,
        settings: Optional[ExecutorSettings] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or ExecutorSettings()
        self._client = client
        self._sleep = sleep
        self._clock = clock

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client('dynamodb', **self.settings.to_boto3_kwargs())
        return self._client

    def count(
        self,
        table_name: str,
        dynamo: Optional[DynamoFilter] = None,
        index_name: Optional[str] = None,
    ) -> int:
        state = ScanState()
        started = self._clock()
        while True:
            self._check_limits(table_name, state, started)
            scan_input = make_scan_input(table_name, dynamo, state.start_key, index_name)
            logger.debug("Executing the following Dynamo scan: %s", scan_input)
            page = self._scan_page(scan_input)
            state.pages += 1
            state.count += page.get('Count') or 0
            state.start_key = page.get('LastEvaluatedKey')
            if not state.start_key:
                break
        logger.info("Counted %d item(s) in %s over %d page(s)", state.count, table_name, state.pages)
        return state.count

    def count_event(self, event: Mapping[str, Any]) -> int:
        """Answer an invocation payload ``{context, dynamo, tableName, indexName?}``."""
        if not isinstance(event, Mapping):
            raise InvalidInvocation(f"Invocation payload must be an object, got {type(event).__name__}")
        table_name = event.get('tableName')
        if not isinstance(table_name, str) or not table_name:
            raise InvalidInvocation("Invocation payload is missing 'tableName'")
        dynamo = event.get('dynamo')
        if dynamo is not None and not isinstance(dynamo, Mapping):
            raise InvalidInvocation("'dynamo' must be an object or null")
        return self.count(table_name, dynamo, event.get('indexName'))  # type: ignore[arg-type]

    def _check_limits(self, table_name: str, state: ScanState, started: float) -> None:
        s = self.settings
        if s.max_pages and state.pages >= s.max_pages:
            raise ScanLimitExceeded(table_name, state.pages, state.count, f"page limit of {s.max_pages} reached")
        if s.max_seconds and state.pages and self._clock() - started >= s.max_seconds:
            raise ScanLimitExceeded(table_name, state.pages, state.count, f"time limit of {s.max_seconds}s reached")

    def _scan_page(self, scan_input: Dict[str, Any]) -> Dict[str, Any]:
        attempt = 0
        while True:
            try:
                return self.client.scan(**scan_input)
            except ClientError as e:
                code = e.response.get('Error', {}).get('Code')
                if code not in THROTTLING_ERROR_CODES or attempt >= self.settings.max_retries:
                    raise
                delay = self.settings.retry_base_delay * (2 ** attempt)
                attempt += 1
                logger.warning(
                    "Scan of %s throttled (%s); retry %d/%d in %.2fs",
                    scan_input.get('TableName'), code, attempt, self.settings.max_retries, delay,
                )
                self._sleep(delay)
