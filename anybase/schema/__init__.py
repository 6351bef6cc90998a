"""
Schema

Table templates and table descriptors.
"""

from anybase.schema.templates import (
    TableTemplate,
    TemplateCatalog,
    load_template_catalog,
    BUNDLED_TEMPLATES_PATH,
)
from anybase.schema.blueprint import (
    FieldKind,
    FieldDescriptor,
    TableDescriptor,
    DescriptorCache,
    extract_value,
    is_auto_increment,
    make_field,
    method_field,
    constant_field,
    build_table_descriptor,
    describe_record_type,
    record_members,
)

__all__ = [
    "TableTemplate",
    "TemplateCatalog",
    "load_template_catalog",
    "BUNDLED_TEMPLATES_PATH",
    "FieldKind",
    "FieldDescriptor",
    "TableDescriptor",
    "DescriptorCache",
    "extract_value",
    "is_auto_increment",
    "make_field",
    "method_field",
    "constant_field",
    "build_table_descriptor",
    "describe_record_type",
    "record_members",
]
