"""Request and response transforms attached to every count resolver.

Each transform renders to a VTL mapping template for the managed API gateway
and can also be evaluated in Python, which is what local runs and tests use.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ResolverError
from .filters import FilterCompiler, prune_filter

__all__ = ['RequestTransform', 'ResponseTransform', 'TABLE_NAME_PLACEHOLDER']

TABLE_NAME_PLACEHOLDER = '__COUNTQL_TABLE_NAME__'

_REQUEST_TEMPLATE = """\
## [Start] Invoke AWS Lambda data source: {data_source}. **
#set( $tableName = "{table_name}" )
#set( $dynamo = $null )
#if( !$util.isNullOrEmpty($ctx.args.filter) )
  #set( $filterExpression = $util.parseJson($util.transform.toDynamoDBFilterExpression($ctx.args.filter)) )
  #if( !$util.isNullOrBlank($filterExpression.expression) )
    #if( $filterExpression.expressionValues.size() == 0 )
      $util.qr($filterExpression.remove("expressionValues"))
    #end
    #set( $dynamo = $filterExpression )
  #end
#end
#set( $payload = {{
  "context": {{
    "arguments": $ctx.args,
    "identity": $ctx.identity,
    "source": $ctx.source,
    "request": $ctx.request,
    "info": $ctx.info,
    "prev": $ctx.prev,
    "stash": $ctx.stash
  }},
  "dynamo": $dynamo,
  "tableName": $tableName
}} )
{index_line}{{
  "version": "2018-05-29",
  "operation": "Invoke",
  "payload": $util.toJson($payload)
}}
## [End] Invoke AWS Lambda data source: {data_source}. **"""

_RESPONSE_TEMPLATE = """\
## [Start] Handle error or return result. **
#if( $ctx.error )
  $util.error($ctx.error.message, $ctx.error.type)
#end
$util.toJson($ctx.result)
## [End] Handle error or return result. **"""


@dataclass(frozen=True)
class RequestTransform:
    """Build the executor invocation payload ``{context, dynamo, tableName}``."""

    data_source: str
    index_name: Optional[str] = None

    def render(self, table_name: str = TABLE_NAME_PLACEHOLDER) -> str:
        index_line = ''
        if self.index_name:
            index_line = f'$util.qr($payload.put("indexName", {json.dumps(self.index_name)}))\n'
        return _REQUEST_TEMPLATE.format(
            data_source=self.data_source,
            table_name=table_name,
            index_line=index_line,
        )

    def render_cfn(self, table_name: Any) -> Union[str, Dict[str, Any]]:
        """Render with a CloudFormation intrinsic standing in for the table name."""
        if isinstance(table_name, str):
            return self.render(table_name)
        head, tail = self.render().split(TABLE_NAME_PLACEHOLDER, 1)
        return {'Fn::Join': ['', [head, table_name, tail]]}

    def build_payload(
        self,
        context: Mapping[str, Any],
        table_name: str,
        compiler: Optional[FilterCompiler] = None,
    ) -> Dict[str, Any]:
        arguments = context.get('arguments') or {}
        raw_filter = arguments.get('filter')
        dynamo = None
        if raw_filter:
            if compiler is None:
                raise ValueError("A filter compiler is required to translate the 'filter' argument")
            dynamo = prune_filter(compiler.compile(raw_filter))
        payload: Dict[str, Any] = {
            'context': dict(context),
            'dynamo': dynamo,
            'tableName': table_name,
        }
        if self.index_name:
            payload['indexName'] = self.index_name
        return payload


@dataclass(frozen=True)
class ResponseTransform:
    """Propagate an upstream error verbatim, otherwise pass the count through."""

    def render(self) -> str:
        return _RESPONSE_TEMPLATE

    def resolve(self, context: Mapping[str, Any]) -> Any:
        error = context.get('error')
        if error:
            if isinstance(error, Mapping):
                raise ResolverError(str(error.get('message')), error.get('type'))
            raise ResolverError(str(error))
        return context.get('result')