import pytest
from graphql import parse

from countql.config import BindingStrategy, TransformConfig
from countql.core.annotations import ObjectAnnotation
from countql.errors import (
    CountTransformError,
    MissingModelAnnotation,
    MissingRelationshipAnnotation,
    UnresolvableRelatedType,
)
from countql.processor import DirectiveProcessor
from countql.schema import OutputSchema
from countql.synthesizer import SchemaSynthesizer
from countql.transform import CountTransformer
from tests.schemas import (
    BLOG_EXPLICIT_SCHEMA,
    BLOG_INDEX_SCHEMA,
    BLOG_SCHEMA,
    ENUM_SCHEMA,
    NO_MODEL_SCHEMA,
    VALID_SCHEMA,
)


def _synthesizer(sdl, config=None):
    doc = parse(sdl)
    annotations = DirectiveProcessor().visit(doc)
    output = OutputSchema(doc)
    return SchemaSynthesizer(output, config), annotations


class TestObjectLevel:
    def test_fails_without_model(self, transformer):
        with pytest.raises(CountTransformError, match='model'):
            transformer.transform(NO_MODEL_SCHEMA)

    def test_output_schema_is_valid(self, transformer):
        result = transformer.transform(VALID_SCHEMA)
        schema = result.build_schema()
        assert schema.get_type('Foo') is not None

    def test_single_count_query(self, transformer):
        schema = transformer.transform(VALID_SCHEMA).build_schema()
        count_fields = [name for name in schema.query_type.fields if name.startswith('count')]
        assert count_fields == ['countFoo']
        field = schema.query_type.fields['countFoo']
        assert str(field.type) == 'Int'
        assert str(field.args['filter'].type) == 'ModelFooFilterInput'

    def test_filter_input_shape(self, transformer):
        schema = transformer.transform(VALID_SCHEMA).build_schema()
        fields = schema.get_type('ModelFooFilterInput').fields
        assert {name: str(f.type) for name, f in fields.items()} == {
            'id': 'ModelIDInput',
            'string_field': 'ModelStringInput',
            'int_field': 'ModelIntInput',
            'float_field': 'ModelFloatInput',
            'bool_field': 'ModelBooleanInput',
            'and': '[ModelFooFilterInput]',
            'or': '[ModelFooFilterInput]',
            'not': 'ModelFooFilterInput',
        }
        string_ops = set(schema.get_type('ModelStringInput').fields)
        assert {'eq', 'ne', 'beginsWith', 'contains', 'between', 'attributeExists', 'size'} <= string_ops
        assert 'beginsWith' not in schema.get_type('ModelIntInput').fields
        assert set(schema.get_type('ModelBooleanInput').fields) == {'eq', 'ne', 'attributeExists', 'attributeType'}

    def test_enum_and_aws_scalar_fields(self, transformer):
        schema = transformer.transform(ENUM_SCHEMA).build_schema()
        fields = schema.get_type('ModelPostFilterInput').fields
        assert str(fields['status'].type) == 'ModelPostStatusInput'
        assert str(fields['publishedAt'].type) == 'ModelStringInput'
        assert str(fields['tags'].type) == 'ModelStringInput'
        assert 'author' not in fields
        assert set(schema.get_type('ModelPostStatusInput').fields) == {'eq', 'ne'}
        assert 'countAuthor' not in schema.query_type.fields

    def test_transformer_directives_stripped(self, transformer):
        result = transformer.transform(VALID_SCHEMA)
        assert '@count' not in result.schema
        assert '@model' not in result.schema

    def test_existing_filter_input_is_kept(self, transformer):
        sdl = VALID_SCHEMA + "\ninput ModelFooFilterInput { string_field: String }\n"
        schema = transformer.transform(sdl).build_schema()
        assert set(schema.get_type('ModelFooFilterInput').fields) == {'string_field'}

    def test_custom_query_root(self, transformer):
        sdl = """
        schema { query: RootQuery }
        type RootQuery { ping: String }
        type Foo @model @count { id: ID! }
        """
        result = transformer.transform(sdl)
        schema = result.build_schema()
        assert set(schema.query_type.fields) == {'ping', 'countFoo'}
        assert result.bindings.get('RootQuery', 'countFoo') is not None

    def test_existing_query_fields_preserved(self, transformer):
        sdl = VALID_SCHEMA + "\ntype Query { hello: String }\n"
        schema = transformer.transform(sdl).build_schema()
        assert set(schema.query_type.fields) == {'hello', 'countFoo'}

    def test_validation_failure_leaves_no_partial_output(self):
        doc = parse(VALID_SCHEMA + NO_MODEL_SCHEMA.replace('Foo', 'Baz'))
        output = OutputSchema(doc)
        synthesizer = SchemaSynthesizer(output)
        annotations = DirectiveProcessor().visit(doc)
        assert [a.type_name for a in annotations] == ['Foo', 'Baz']
        with pytest.raises(MissingModelAnnotation, match='Baz'):
            synthesizer.synthesize(annotations)
        assert not output.has_type('Query')
        assert not output.has_type('ModelFooFilterInput')
        assert len(synthesizer.registry) == 0

    def test_unknown_annotation_rejected(self):
        synthesizer, _ = _synthesizer(VALID_SCHEMA)
        with pytest.raises(TypeError):
            synthesizer.validate([object()])


class TestFieldLevel:
    def test_shadow_counter_on_related_type(self, transformer):
        result = transformer.transform(BLOG_SCHEMA)
        schema = result.build_schema()
        post = schema.get_type('Post')
        counter = post.fields['blogPostsId']
        assert str(counter.type) == 'Int!'
        assert str(counter.args['filter'].type) == 'ModelBlogPostsIdFilterInput'
        assert set(schema.get_type('ModelBlogPostsIdFilterInput').fields) == {
            'id', 'title', 'rating', 'and', 'or', 'not'
        }
        assert 'blogPostsId' not in schema.get_type('Blog').fields
        binding = result.bindings.get('Post', 'blogPostsId')
        assert binding is not None
        assert binding.table.type_name == 'Post'
        assert len(result.bindings) == 1

    def test_field_synthesis_is_idempotent(self):
        synthesizer, annotations = _synthesizer(BLOG_SCHEMA)
        synthesizer.synthesize(annotations)
        synthesizer.synthesize(annotations)
        post = synthesizer.output.get_type('Post')
        names = [f.name.value for f in post.fields]
        assert names.count('blogPostsId') == 1
        assert len(synthesizer.registry) == 1
        assert synthesizer.output.print().count('blogPostsId(') == 1

    def test_synthesize_field_twice_with_same_config(self):
        synthesizer, [annotation] = _synthesizer(BLOG_SCHEMA)
        cfg = synthesizer.resolve_field_config(annotation)
        first = synthesizer.synthesize_field(cfg)
        second = synthesizer.synthesize_field(cfg)
        assert first[0] is second[0]
        post = synthesizer.output.get_type('Post')
        assert [f.name.value for f in post.fields].count('blogPostsId') == 1

    def test_existing_shadow_field_is_authoritative(self, transformer):
        sdl = BLOG_SCHEMA.replace('rating: Int', 'rating: Int\n    blogPostsId: ID')
        schema = transformer.transform(sdl).build_schema()
        assert str(schema.get_type('Post').fields['blogPostsId'].type) == 'ID'
        assert schema.get_type('ModelBlogPostsIdFilterInput') is None

    def test_explicit_fields_bind_owner_fields(self, transformer):
        result = transformer.transform(BLOG_EXPLICIT_SCHEMA)
        schema = result.build_schema()
        assert 'blogPostsId' not in schema.get_type('Post').fields
        binding = result.bindings.get('Blog', 'postCount')
        assert binding is not None
        assert binding.table.type_name == 'Post'

    def test_config_resolution(self):
        synthesizer, [annotation] = _synthesizer(BLOG_SCHEMA)
        cfg = synthesizer.resolve_field_config(annotation)
        assert cfg.owner_type == 'Blog'
        assert cfg.related_type == 'Post'
        assert cfg.counter_fields == ('blogPostsId',)
        assert cfg.synthesized is True
        assert cfg.binding_type == 'Post'
        assert cfg.filter_input_name == 'ModelBlogPostsIdFilterInput'
        assert cfg.index_name is None

    def test_relationship_index_name(self):
        sdl = BLOG_SCHEMA.replace('@hasMany', '@hasMany(indexName: "byBlog", fields: ["id"])')
        synthesizer, [annotation] = _synthesizer(sdl)
        assert synthesizer.resolve_field_config(annotation).index_name == 'byBlog'

    def test_index_strategy(self):
        config = TransformConfig(binding_strategy=BindingStrategy.INDEX)
        result = CountTransformer(config).transform(BLOG_INDEX_SCHEMA)
        binding = result.bindings.get('Post', 'blogPostsId')
        assert binding.index_name == 'byBlog'
        assert 'indexName' in binding.request.render()

    def test_index_field_rejected_by_relationship_strategy(self, transformer):
        with pytest.raises(MissingRelationshipAnnotation, match='@hasMany or @connection'):
            transformer.transform(BLOG_INDEX_SCHEMA)

    def test_relationship_field_rejected_by_index_strategy(self):
        config = TransformConfig(binding_strategy=BindingStrategy.INDEX)
        with pytest.raises(MissingRelationshipAnnotation, match='@index'):
            CountTransformer(config).transform(BLOG_SCHEMA)

    def test_scalar_list_is_unresolvable(self, transformer):
        sdl = "type Blog @model { id: ID! tags: [String] @hasMany @count }"
        with pytest.raises(UnresolvableRelatedType, match="Blog.tags"):
            transformer.transform(sdl)

    def test_related_type_needs_model(self, transformer):
        sdl = BLOG_SCHEMA.replace('type Post @model', 'type Post')
        with pytest.raises(MissingModelAnnotation, match="'Post'"):
            transformer.transform(sdl)


def test_object_and_field_annotations_together(transformer):
    sdl = BLOG_SCHEMA.replace('type Blog @model', 'type Blog @model @count')
    result = transformer.transform(sdl)
    assert [b.identity for b in result.bindings] == [('Query', 'countBlog'), ('Post', 'blogPostsId')]


def test_direct_object_annotation_synthesis():
    synthesizer, [annotation] = _synthesizer(VALID_SCHEMA)
    assert isinstance(annotation, ObjectAnnotation)
    binding = synthesizer.synthesize_model(annotation)
    again = synthesizer.synthesize_model(annotation)
    assert binding is again
    query = synthesizer.output.get_type('Query')
    assert [f.name.value for f in query.fields] == ['countFoo']


class TestTypeExtensions:
    def test_object_count_on_extension(self, transformer):
        result = transformer.transform("type Foo @model { id: ID! name: String }\nextend type Foo @count\n")
        schema = result.build_schema()
        assert str(schema.query_type.fields['countFoo'].type) == 'Int'
        assert set(schema.get_type('ModelFooFilterInput').fields) == {'id', 'name', 'and', 'or', 'not'}
        assert 'extend type' not in result.schema
        assert result.bindings.get('Query', 'countFoo') is not None

    def test_extension_fields_reach_filter_input(self, transformer):
        result = transformer.transform("type Foo @model @count { id: ID! }\nextend type Foo { name: String }\n")
        schema = result.build_schema()
        assert set(schema.get_type('Foo').fields) == {'id', 'name'}
        assert 'name' in schema.get_type('ModelFooFilterInput').fields

    def test_field_count_on_extension(self, transformer):
        result = transformer.transform("""
        type Blog @model { id: ID! }
        extend type Blog { posts: [Post] @hasMany @count }
        type Post @model { id: ID! title: String }
        """)
        schema = result.build_schema()
        assert 'posts' in schema.get_type('Blog').fields
        assert str(schema.get_type('Post').fields['blogPostsId'].type) == 'Int!'
        assert result.bindings.get('Post', 'blogPostsId').table.type_name == 'Post'

    def test_extension_of_undefined_type(self, transformer):
        with pytest.raises(MissingModelAnnotation, match="'Foo'"):
            transformer.transform("extend type Foo @count")
