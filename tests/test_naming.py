import pytest

from countql.core.naming import (
    count_query_name,
    filter_input_name,
    logical_id,
    shadow_field_name,
    to_camel_case,
    to_pascal_case,
)


@pytest.mark.parametrize('words, expected', [
    (['count', 'Foo'], 'countFoo'),
    (['count', 'BlogPost'], 'countBlogPost'),
    (['Blog', 'posts', 'Id'], 'blogPostsId'),
    (['', 'a', 'b'], 'aB'),
    ([], ''),
])
def test_to_camel_case(words, expected):
    assert to_camel_case(words) == expected


def test_to_pascal_case():
    assert to_pascal_case(['Model', 'blogPostsId', 'FilterInput']) == 'ModelBlogPostsIdFilterInput'


def test_generated_names():
    assert count_query_name('Foo') == 'countFoo'
    assert filter_input_name('Foo') == 'ModelFooFilterInput'
    assert shadow_field_name('Blog', 'posts') == 'blogPostsId'


def test_logical_id_strips_non_alphanumerics():
    assert logical_id('count-resolver', 'Scan', 'Foo_Bar', 'Policy') == 'CountresolverScanFooBarPolicy'
