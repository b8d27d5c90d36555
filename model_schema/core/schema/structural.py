"""
Structural Extractor

Reads column metadata for a model's table from the live database via
SQLAlchemy's runtime inspector and normalizes vendor types into the
canonical field types.
"""

from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import types as sqltypes
from sqlalchemy.engine import Engine

from model_schema.core.schema.models import FieldType, ModelProfile
from model_schema.core.schema.naming import camel
from model_schema.core.schema.orm import get_dates, get_table, qualified_name


# Checked in order, first match wins
TYPE_MAPPING: tuple[tuple[tuple[type, ...], FieldType], ...] = (
    ((sqltypes.Boolean,), FieldType.BOOLEAN),
    ((sqltypes.Integer,), FieldType.INTEGER),
    ((sqltypes.Numeric, sqltypes.Float), FieldType.FLOAT),
    (
        (
            sqltypes.String,
            sqltypes.Date,
            sqltypes.Time,
            sqltypes.DateTime,
            sqltypes.Uuid,
        ),
        FieldType.STRING,
    ),
)


def canonical_type(column_type: Any) -> FieldType:
    """
    Map a SQLAlchemy column type to a canonical field type.

    Text, enums, dates, times, timestamps and GUIDs are strings; integers of
    every width are integers; decimals and floats are floats. Anything else
    (JSON, binary, intervals, arrays, ...) is mixed.
    """
    if isinstance(column_type, type):
        column_type = column_type()
    for classes, field_type in TYPE_MAPPING:
        if isinstance(column_type, classes):
            return field_type
    return FieldType.MIXED


def split_table_name(table: str, schema: str | None = None) -> tuple[str | None, str]:
    """Split ``"schema.table"`` into its parts; an explicit schema wins."""
    if "." in table:
        database, table = table.split(".", 1)
        return schema or database, table
    return schema, table


class StructuralExtractor:
    """
    Adds one property per physical column of a model's table.

    Without an engine the extractor is unavailable and does nothing, so
    models only get the fields inferred from their code.

    Example:
        >>> extractor = StructuralExtractor(create_engine("sqlite:///app.db"))
        >>> profile = ModelProfile()
        >>> extractor.extract(Post(), profile)
        >>> list(profile.properties)
        ['id', 'title', 'owner_id']
    """

    def __init__(self, engine: Engine | None = None, table_prefix: str = ""):
        """
        Initialize extractor.

        Args:
            engine: SQLAlchemy engine used for catalog queries
            table_prefix: Prefix prepended to every table name
        """
        self.engine = engine
        self.table_prefix = table_prefix or ""

    @property
    def available(self) -> bool:
        """Whether schema introspection can run."""
        return self.engine is not None

    def resolve_table(self, model: Any) -> tuple[str | None, str]:
        """Return ``(schema, table)`` with the prefix applied."""
        schema, table = get_table(model)
        return split_table_name(self.table_prefix + table, schema)

    def get_columns(self, model: Any) -> list[dict[str, Any]]:
        """
        Query column metadata for the model's table.

        Returns:
            Column dicts as returned by ``Inspector.get_columns``
        """
        schema, table = self.resolve_table(model)
        inspector = sa_inspect(self.engine)
        return inspector.get_columns(table, schema=schema)

    def extract(self, model: Any, profile: ModelProfile) -> None:
        """
        Register a property and a ``where<Column>`` finder per column.

        Args:
            model: Model instance
            profile: Profile receiving properties and methods
        """
        if not self.available:
            return

        dates = get_dates(model)
        finder_type = f"Query|{qualified_name(type(model))}"

        for column in self.get_columns(model):
            name = column["name"]

            if name in dates:
                field_type = FieldType.DATE
            else:
                field_type = canonical_type(column["type"])

            profile.set_property(name, field_type)
            profile.set_method(camel(f"where_{name}"), finder_type, ["value"])
