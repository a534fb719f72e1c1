"""Paginated COUNT scans against a fake DynamoDB client."""

import pytest
from botocore.exceptions import ClientError

from countql.config import ExecutorSettings
from countql.errors import InvalidInvocation, ScanLimitExceeded
from countql.executor.scan import CountExecutor
from tests.fakes import FakeClock, FakeDynamoClient


def client_error(code, message='boom'):
    return ClientError({'Error': {'Code': code, 'Message': message}}, 'Scan')


def make_executor(pages, settings, clock=None):
    client = FakeDynamoClient(pages)
    sleeps = []
    kwargs = {'client': client, 'settings': settings, 'sleep': sleeps.append}
    if clock is not None:
        kwargs['clock'] = clock
    return CountExecutor(**kwargs), client, sleeps


def test_single_page(fast_settings):
    executor, client, _ = make_executor([{'Count': 7}], fast_settings)
    assert executor.count('Foo') == 7
    assert client.calls == [{'Select': 'COUNT', 'TableName': 'Foo'}]


def test_sums_pages_and_forwards_continuation_token(fast_settings):
    token = {'id': {'S': 'x'}}
    executor, client, _ = make_executor(
        [{'Count': 50, 'LastEvaluatedKey': token}, {'Count': 17}], fast_settings,
    )
    assert executor.count('Foo') == 67
    assert len(client.calls) == 2
    assert 'ExclusiveStartKey' not in client.calls[0]
    assert client.calls[1]['ExclusiveStartKey'] == token


def test_empty_table(fast_settings):
    executor, _, _ = make_executor([{'Count': 0}], fast_settings)
    assert executor.count('Foo') == 0


def test_filter_and_index_forwarded_on_every_page(fast_settings):
    dynamo = {'expression': '#a = :a', 'expressionNames': {'#a': 'a'}, 'expressionValues': {':a': 1}}
    executor, client, _ = make_executor(
        [{'Count': 1, 'LastEvaluatedKey': {'k': 1}}, {'Count': 2}], fast_settings,
    )
    assert executor.count('Foo', dynamo, index_name='byA') == 3
    for call in client.calls:
        assert call['FilterExpression'] == '#a = :a'
        assert call['ExpressionAttributeValues'] == {':a': '1'}
        assert call['IndexName'] == 'byA'


def test_throttling_is_retried_with_backoff(fast_settings):
    executor, client, sleeps = make_executor(
        [client_error('ProvisionedThroughputExceededException'), client_error('ThrottlingException'), {'Count': 4}],
        fast_settings,
    )
    assert executor.count('Foo') == 4
    assert len(client.calls) == 3
    assert sleeps == [pytest.approx(0.1), pytest.approx(0.2)]


def test_retries_exhausted(fast_settings):
    executor, client, sleeps = make_executor(
        [client_error('ThrottlingException')] * 3, fast_settings,
    )
    with pytest.raises(ClientError):
        executor.count('Foo')
    assert len(client.calls) == 3
    assert len(sleeps) == 2


def test_other_errors_propagate_without_retry(fast_settings):
    executor, client, sleeps = make_executor(
        [client_error('ResourceNotFoundException', 'Requested resource not found')], fast_settings,
    )
    with pytest.raises(ClientError) as exc:
        executor.count('Foo')
    assert exc.value.response['Error']['Code'] == 'ResourceNotFoundException'
    assert len(client.calls) == 1
    assert sleeps == []


def test_page_limit():
    settings = ExecutorSettings(max_pages=2, max_seconds=0)
    executor, client, _ = make_executor(
        [{'Count': 1, 'LastEvaluatedKey': {'k': 1}}, {'Count': 1, 'LastEvaluatedKey': {'k': 2}}], settings,
    )
    with pytest.raises(ScanLimitExceeded) as exc:
        executor.count('Foo')
    assert exc.value.pages == 2
    assert exc.value.count == 2
    assert len(client.calls) == 2


def test_time_limit():
    settings = ExecutorSettings(max_pages=0, max_seconds=5)
    clock = FakeClock(0.0, 1.0, 6.0)
    executor, client, _ = make_executor(
        [{'Count': 3, 'LastEvaluatedKey': {'k': 1}}, {'Count': 3, 'LastEvaluatedKey': {'k': 2}}], settings, clock,
    )
    with pytest.raises(ScanLimitExceeded, match='time limit'):
        executor.count('Foo')
    assert len(client.calls) == 2


def test_first_page_is_always_fetched():
    settings = ExecutorSettings(max_pages=0, max_seconds=1)
    executor, client, _ = make_executor([{'Count': 9}], settings, FakeClock(0.0, 100.0))
    assert executor.count('Foo') == 9


class TestCountEvent:
    def test_payload(self, fast_settings):
        executor, client, _ = make_executor([{'Count': 2}], fast_settings)
        event = {'context': {}, 'dynamo': None, 'tableName': 'Foo-api-dev', 'indexName': 'byBlog'}
        assert executor.count_event(event) == 2
        assert client.calls[0]['IndexName'] == 'byBlog'

    @pytest.mark.parametrize('event', [
        None,
        [],
        {},
        {'tableName': ''},
        {'tableName': 'Foo', 'dynamo': 'expression'},
    ])
    def test_invalid_payloads(self, fast_settings, event):
        executor, client, _ = make_executor([], fast_settings)
        with pytest.raises(InvalidInvocation):
            executor.count_event(event)
        assert client.calls == []
