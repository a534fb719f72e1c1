# Core subpackage for countql: annotation types, directive helpers and naming rules.
from .annotations import TableReference, ObjectAnnotation, FieldAnnotation, Annotation, CountFieldConfig
from .directives import CountType, find_directive, has_directive, directive_arguments, unwrap_type, is_list_type
from .naming import count_query_name, filter_input_name, shadow_field_name, to_camel_case, to_pascal_case

__all__ = [
    'TableReference','ObjectAnnotation','FieldAnnotation','Annotation','CountFieldConfig',
    'CountType','find_directive','has_directive','directive_arguments','unwrap_type','is_list_type',
    'count_query_name','filter_input_name','shadow_field_name','to_camel_case','to_pascal_case',
]
