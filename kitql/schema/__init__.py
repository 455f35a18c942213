"""KitQL entity reflection."""
from kitql.schema.entity import (
    Composite,
    Entity,
    Field,
    FieldAccess,
    PrimaryKey,
    Single,
    build_entity,
    field_names_of,
    fields_of,
    primary_key_values,
    table_name_of,
)

__all__ = [
    "Composite",
    "Entity",
    "Field",
    "FieldAccess",
    "PrimaryKey",
    "Single",
    "build_entity",
    "field_names_of",
    "fields_of",
    "primary_key_values",
    "table_name_of",
]
