"""
Schema Discovery Module

Derives entity schemas from SQLAlchemy models by merging database column
metadata with what the model code declares.
"""

from model_schema.core.schema.models import (
    EntitySchema,
    Field,
    FieldType,
    MethodDescriptor,
    ModelProfile,
    Pivot,
    Reference,
)
from model_schema.core.schema.relations import HasRelations, Relation, RelationKind
from model_schema.core.schema.scanner import (
    ModelScanner,
    SchemaError,
    ScanError,
    ModelLoadError,
)
from model_schema.core.schema.structural import StructuralExtractor
from model_schema.core.schema.behavioral import BehavioralExtractor
from model_schema.core.schema.merger import SchemaMerger
from model_schema.core.schema.cache import SchemaCache
from model_schema.core.schema.inspector import (
    SchemaInspector,
    ModelTimeoutError,
    get_collections,
    dump_collections,
    load_collections,
)

__all__ = [
    "EntitySchema",
    "Field",
    "FieldType",
    "MethodDescriptor",
    "ModelProfile",
    "Pivot",
    "Reference",
    "HasRelations",
    "Relation",
    "RelationKind",
    "ModelScanner",
    "SchemaError",
    "ScanError",
    "ModelLoadError",
    "StructuralExtractor",
    "BehavioralExtractor",
    "SchemaMerger",
    "SchemaCache",
    "SchemaInspector",
    "ModelTimeoutError",
    "get_collections",
    "dump_collections",
    "load_collections",
]
