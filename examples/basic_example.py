"""
Basic example of using CountQL.

This example demonstrates:
- Annotating model types and relationship fields with @count
- Printing the augmented schema and the resolver stack
- Answering a generated count field in-process against a DynamoDB table
  (point COUNTQL_DYNAMODB_ENDPOINT_URL at DynamoDB Local to try it offline)
"""

import json
import logging

from countql import CountTransformer, TransformConfig
from countql.config import get_executor_settings
from countql.executor import CountExecutor
from countql.local import resolve_count

SCHEMA = """
type Blog @model @count {
    id: ID!
    name: String!
    posts: [Post] @hasMany @count
}

type Post @model @count {
    id: ID!
    title: String!
    rating: Int
}
"""


class RatingFilterCompiler:
    """Tiny compiler that only understands ``{"rating": {"gt": n}}``."""

    def compile(self, filter_argument):
        threshold = filter_argument['rating']['gt']
        return {
            'expression': '#rating > :rating',
            'expressionNames': {'#rating': 'rating'},
            'expressionValues': {':rating': {'N': threshold}},
        }


def main():
    logging.basicConfig(level=logging.INFO)
    result = CountTransformer(TransformConfig()).transform(SCHEMA)

    print("Schema:")
    print(result.schema)
    print("Resources:", json.dumps(sorted(result.stack.resources), indent=2))

    executor = CountExecutor(settings=get_executor_settings())
    binding = result.bindings.get('Post', 'blogPostsId')
    context = {'arguments': {'filter': {'rating': {'gt': 3}}}, 'source': None, 'stash': {}}
    table_name = binding.table.resolve('localapi', 'dev')
    print("Posts rated above 3:", resolve_count(binding, context, executor, table_name, RatingFilterCompiler()))


if __name__ == "__main__":
    main()
