"""
Core discovery modules.
"""

from model_schema.core.logger import SchemaLogger, LogLevel, GenerationSummary
from model_schema.core.schema import (
    EntitySchema,
    Field,
    FieldType,
    Pivot,
    Reference,
    HasRelations,
    ModelScanner,
    SchemaCache,
    SchemaInspector,
    get_collections,
)


__all__ = [
    "SchemaLogger",
    "LogLevel",
    "GenerationSummary",
    # Schema discovery
    "EntitySchema",
    "Field",
    "FieldType",
    "Pivot",
    "Reference",
    "HasRelations",
    "ModelScanner",
    "SchemaCache",
    "SchemaInspector",
    "get_collections",
]
